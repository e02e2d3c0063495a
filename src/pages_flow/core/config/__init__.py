# src/pages_flow/core/config/__init__.py
"""
Camada de configuração do pages_flow.

Responsabilidades do pacote:
    - Carregamento de arquivos de configuração (defaults + overrides locais)
    - Resolução de configuração final via deep-merge determinístico
    - Geração de hash canônico para rastreabilidade (sem segredos)

Invariantes:
    - A configuração final é um dicionário puro (dict)
    - Conflitos estruturais são tratados como erro
"""

from .errors import (
    ConfigError,
    ConfigTypeConflictError,
    DefaultsNotFoundError,
    InvalidConfigRootTypeError,
    InvalidLayoutError,
    UnsupportedConfigFormatError,
)
from .hashing import compute_config_hash, redact_config
from .loader import DEFAULTS_PATH, load_config
from .merge import deep_merge

__all__ = [
    "ConfigError",
    "ConfigTypeConflictError",
    "DefaultsNotFoundError",
    "InvalidConfigRootTypeError",
    "InvalidLayoutError",
    "UnsupportedConfigFormatError",
    "DEFAULTS_PATH",
    "compute_config_hash",
    "deep_merge",
    "load_config",
    "redact_config",
]
