# tests/core/config/test_merge.py
"""
Testes do deep-merge determinístico de configuração.

Política validada:
    - dict + dict → merge recursivo
    - list → sobrescrita total
    - conflito de tipos → ConfigTypeConflictError
    - inputs nunca são mutados
"""

import pytest

from pages_flow.core.config.errors import ConfigTypeConflictError
from pages_flow.core.config.merge import deep_merge


def test_merge_simple_override():
    base = {"a": 1, "b": 2}
    override = {"b": 99}

    out = deep_merge(base, override)
    assert out == {"a": 1, "b": 99}
    assert base == {"a": 1, "b": 2}
    assert override == {"b": 99}


def test_merge_nested_dict():
    base = {"github": {"retry": {"attempts": 3, "max_wait_s": 10.0}}}
    override = {"github": {"retry": {"attempts": 5}}}

    out = deep_merge(base, override)
    assert out == {"github": {"retry": {"attempts": 5, "max_wait_s": 10.0}}}


def test_merge_list_override_total():
    base = {"trigger": {"branches": ["main", "release"]}}
    override = {"trigger": {"branches": ["docs"]}}

    assert deep_merge(base, override) == {"trigger": {"branches": ["docs"]}}


def test_merge_int_over_float_is_accepted():
    out = deep_merge({"retry": {"max_wait_s": 10.0}}, {"retry": {"max_wait_s": 3}})
    assert out["retry"]["max_wait_s"] == 3


def test_merge_bool_over_int_raises():
    with pytest.raises(ConfigTypeConflictError):
        deep_merge({"engine": {"max_workers": 1}}, {"engine": {"max_workers": True}})


def test_merge_type_conflict_raises():
    with pytest.raises(ConfigTypeConflictError):
        deep_merge({"books": {"guide": {"source": "a"}}}, {"books": ["guide"]})
