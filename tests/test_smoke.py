# tests/test_smoke.py
"""
Testes de sanidade estrutural (smoke tests) do pages_flow.

Garantem apenas que o pacote é importável e que os defaults embarcados
são carregáveis. Não validam comportamento de publicação.
"""

import pages_flow
from pages_flow.core.config import load_config


def test_smoke():
    assert pages_flow.__version__
    assert callable(pages_flow.publish)


def test_packaged_defaults_load():
    cfg = load_config()
    assert cfg["trigger"]["workflows"]
    assert cfg["site"]["root"]
