# src/pages_flow/core/config/hashing.py
import hashlib
import json
from typing import Any, Dict

# Chaves cujo valor nunca entra no hash nem no Manifest.
SECRET_KEYS = frozenset({"token"})


def redact_config(config: Dict[str, Any]) -> Dict[str, Any]:
    """Retorna uma cópia da configuração sem valores sensíveis (ex.: `github.token`)."""
    out: Dict[str, Any] = {}
    for key, value in config.items():
        if key in SECRET_KEYS:
            out[key] = "***" if value else value
        elif isinstance(value, dict):
            out[key] = redact_config(value)
        else:
            out[key] = value
    return out


def compute_config_hash(config: Dict[str, Any]) -> str:
    """
    Gera um hash determinístico da configuração efetiva da publicação.

    Política de hashing (v1):
        - Valores sensíveis são mascarados antes da serialização
        - Serialização JSON canônica (chaves ordenadas, separadores compactos)
        - Codificação UTF-8
        - Algoritmo SHA-256

    Invariantes:
        - O valor retornado é uma string hexadecimal de 64 caracteres
        - Configurações estruturalmente equivalentes produzem o mesmo hash
        - Nenhuma mutação ocorre sobre o input

    Args:
        config (Dict[str, Any]): Configuração efetiva.

    Returns:
        str: Hash SHA-256 hexadecimal da configuração.

    Raises:
        TypeError: Se o objeto fornecido não for um dicionário.
    """
    if not isinstance(config, dict):
        raise TypeError(
            f"Config para hashing deve ser dict, recebido: {type(config).__name__}"
        )

    canonical_json = json.dumps(
        redact_config(config),
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    )

    return hashlib.sha256(canonical_json.encode("utf-8")).hexdigest()
