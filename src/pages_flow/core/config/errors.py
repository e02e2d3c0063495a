# src/pages_flow/core/config/errors.py
"""
Exceções canônicas da camada de configuração do pages_flow.

Este módulo define a hierarquia oficial de exceções utilizadas durante
o carregamento, validação estrutural e resolução de configuração.

As exceções aqui definidas representam **violações estruturais
explícitas** da configuração, e não erros de execução de Steps.

Invariantes:
    - Todas as exceções de configuração herdam de `ConfigError`
    - Nenhuma exceção representa falha de colaborador externo

Limites explícitos:
    - Não executa pipeline
    - Não realiza fallback ou recovery
"""


class ConfigError(Exception):
    """
    Exceção base para erros relacionados à configuração do pages_flow.

    Permite captura genérica de erros de configuração e distinção clara
    entre falhas estruturais e falhas de publicação.
    """


class DefaultsNotFoundError(ConfigError):
    """
    Exceção levantada quando o arquivo de configuração base (defaults)
    não é encontrado no caminho especificado.

    Decisões arquiteturais:
        - O arquivo de defaults é obrigatório
        - Sem defaults não existe layout de publicação válido
    """


class UnsupportedConfigFormatError(ConfigError):
    """
    Exceção levantada quando o formato do arquivo de configuração
    não é suportado pelo loader.

    Formatos suportados:
        - YAML (.yaml, .yml)
        - JSON (.json)
    """


class InvalidConfigRootTypeError(ConfigError):
    """
    Exceção levantada quando o conteúdo raiz da configuração
    não é um dicionário (`dict`).
    """


class ConfigTypeConflictError(ConfigError):
    """
    Exceção levantada quando ocorre conflito de tipos durante o deep-merge.

    Exemplo de conflito:
        - base:     {"site": {"root": "_site"}}
        - override: {"site": "_site"}

    Limites explícitos:
        - Não realiza coerção ou conversão de tipos
        - Não tenta resolver conflitos automaticamente
    """


class InvalidLayoutError(ConfigError):
    """
    Exceção levantada quando o layout de publicação declarado é inválido.

    Casos cobertos:
        - destino ausente, absoluto ou fora da raiz do site
        - dois produtores declarando o mesmo subdiretório de destino
        - seções `books`, `artifacts` ou `sites` com tipo inválido

    Invariantes:
        - Cada subdiretório da raiz possui exatamente um produtor
    """
