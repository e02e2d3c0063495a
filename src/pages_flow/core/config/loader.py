# src/pages_flow/core/config/loader.py
"""
Loader canônico de configuração do pages_flow.

A configuração efetiva é resolvida a partir de:
    - um arquivo de defaults (obrigatório; por padrão o `config.defaults.yaml`
      distribuído com o pacote)
    - um arquivo local de overrides (opcional)
    - um dicionário de overrides em memória (opcional, aplicado por último)

Princípios fundamentais:
    - Configuração é declarativa e explícita
    - Nenhuma heurística implícita é aplicada
    - Erros estruturais são tratados como falhas fatais
    - A mesma entrada sempre produz a mesma configuração final

Limites explícitos:
    - Não lê variáveis de ambiente
    - Não valida o layout de publicação (ver `pages_flow.layout`)
    - Não interage com Engine ou Steps
"""

from pathlib import Path
from typing import Any, Dict, Optional
import json

import yaml  # PyYAML

from .merge import deep_merge
from .errors import (
    DefaultsNotFoundError,
    InvalidConfigRootTypeError,
    UnsupportedConfigFormatError,
)

DEFAULTS_PATH = Path(__file__).resolve().parents[2] / "config.defaults.yaml"


def _load_file(path: Path) -> Dict[str, Any]:
    """
    Carrega um arquivo de configuração e valida sua estrutura básica.

    Decisões arquiteturais:
        - O arquivo deve existir no momento do carregamento
        - O conteúdo raiz deve ser um dicionário (`dict`)
        - Arquivos vazios são interpretados como dicionários vazios

    Args:
        path (Path): Caminho para o arquivo de configuração.

    Returns:
        Dict[str, Any]: Conteúdo do arquivo carregado como dicionário.

    Raises:
        DefaultsNotFoundError: Se o arquivo não existir.
        UnsupportedConfigFormatError: Se o formato do arquivo não for suportado.
        InvalidConfigRootTypeError: Se o conteúdo raiz não for um dicionário.
    """
    if not path.exists():
        raise DefaultsNotFoundError(f"Arquivo de defaults não encontrado: {path}")

    suffix = path.suffix.lower()

    if suffix in {".yaml", ".yml"}:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)

    elif suffix == ".json":
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)

    else:
        raise UnsupportedConfigFormatError(f"Formato não suportado: {path.suffix}")

    if data is None:
        data = {}

    if not isinstance(data, dict):
        raise InvalidConfigRootTypeError(
            f"Config root deve ser dict, recebido: {type(data).__name__}"
        )

    return data


def load_config(
    *,
    defaults_path: Optional[str] = None,
    local_path: Optional[str] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Carrega e resolve a configuração efetiva da publicação.

    Política de resolução:
        - defaults → local (se o arquivo existir) → overrides em memória
        - Cada camada é aplicada com `deep_merge`

    Args:
        defaults_path (Optional[str]): Caminho do arquivo base. Quando omitido,
            usa o `config.defaults.yaml` do pacote.
        local_path (Optional[str]): Caminho opcional para overrides locais.
        overrides (Optional[Dict[str, Any]]): Overrides explícitos em memória.

    Returns:
        Dict[str, Any]: Configuração final resolvida.

    Raises:
        DefaultsNotFoundError: Se o arquivo de defaults não existir.
        UnsupportedConfigFormatError: Se o formato do arquivo não for suportado.
        InvalidConfigRootTypeError: Se o conteúdo não for um dicionário.
        ConfigTypeConflictError: Se ocorrer conflito estrutural durante o merge.
    """
    defaults_file = Path(defaults_path) if defaults_path is not None else DEFAULTS_PATH
    effective = _load_file(defaults_file)

    if local_path is not None:
        local_file = Path(local_path)
        if local_file.exists():
            effective = deep_merge(effective, _load_file(local_file))

    if overrides:
        effective = deep_merge(effective, overrides)

    return effective
