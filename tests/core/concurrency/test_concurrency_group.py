# tests/core/concurrency/test_concurrency_group.py
"""
Testes do ConcurrencyGroup (cancelamento cooperativo e execução exclusiva por grupo).
"""

import threading

from pages_flow.core.concurrency import ConcurrencyGroup


def test_newer_run_supersedes_older():
    groups = ConcurrencyGroup()
    groups.enter("pages", "run-1")
    groups.enter("pages", "run-2")

    assert groups.is_cancelled("pages", "run-1") is True
    assert groups.is_cancelled("pages", "run-2") is False
    assert groups.active("pages") == ["run-1", "run-2"]


def test_without_cancel_in_progress_nothing_is_cancelled():
    groups = ConcurrencyGroup()
    groups.enter("pages", "run-1", cancel_in_progress=False)
    groups.enter("pages", "run-2", cancel_in_progress=False)

    assert groups.is_cancelled("pages", "run-1") is False


def test_groups_are_independent_by_key():
    groups = ConcurrencyGroup()
    groups.enter("pages", "run-1")
    groups.enter("other", "run-2")

    assert groups.is_cancelled("pages", "run-1") is False


def test_leave_clears_group():
    groups = ConcurrencyGroup()
    groups.enter("pages", "run-1")
    groups.leave("pages", "run-1")

    assert groups.active("pages") == []
    assert groups.is_cancelled("pages", "run-1") is False


def test_second_run_waits_for_holder_to_leave():
    groups = ConcurrencyGroup()
    groups.enter("pages", "run-1", cancel_in_progress=False)
    assert groups.acquire("pages", "run-1") is True

    groups.enter("pages", "run-2", cancel_in_progress=False)
    assert groups.acquire("pages", "run-2", timeout_s=0.05) is False

    acquired = []
    waiter = threading.Thread(target=lambda: acquired.append(groups.acquire("pages", "run-2", timeout_s=5)))
    waiter.start()
    groups.leave("pages", "run-1")
    waiter.join(timeout=5)

    assert acquired == [True]
    assert groups.holder("pages") == "run-2"


def test_acquire_is_reentrant_for_holder():
    groups = ConcurrencyGroup()
    groups.enter("pages", "run-1")

    assert groups.acquire("pages", "run-1") is True
    assert groups.acquire("pages", "run-1", timeout_s=0.05) is True


def test_other_keys_are_not_blocked():
    groups = ConcurrencyGroup()
    groups.enter("pages", "run-1")
    groups.acquire("pages", "run-1")
    groups.enter("other", "run-2")

    assert groups.acquire("other", "run-2", timeout_s=0.05) is True
