# tests/deployment/test_deployment_gate.py
"""
Testes da máquina de estados do DeploymentGate.

Transições válidas:
    pending → in_progress → succeeded | failed
Estados terminais não aceitam novas transições.
"""

import pytest

from pages_flow.core.exceptions import GateTransitionError
from pages_flow.deployment.gate import DeploymentGate, GateState


def test_happy_path_records_url_and_history():
    gate = DeploymentGate()
    gate.start(build_succeeded=True)
    gate.succeed("https://verus-lang.github.io/verus/")

    assert gate.state == GateState.SUCCEEDED
    assert gate.state.terminal
    assert gate.url == "https://verus-lang.github.io/verus/"
    assert [(h["from"], h["to"]) for h in gate.history] == [
        ("pending", "in_progress"),
        ("in_progress", "succeeded"),
    ]


def test_cannot_start_without_build_success():
    gate = DeploymentGate()
    with pytest.raises(GateTransitionError):
        gate.start(build_succeeded=False)
    assert gate.state == GateState.PENDING
    assert gate.history == []


def test_failure_is_terminal():
    gate = DeploymentGate()
    gate.start(build_succeeded=True)
    gate.fail({"type": "DEPLOY_FAILED", "message": "hosting unavailable"})

    assert gate.state == GateState.FAILED
    assert gate.error["type"] == "DEPLOY_FAILED"
    with pytest.raises(GateTransitionError):
        gate.start(build_succeeded=True)
    with pytest.raises(GateTransitionError):
        gate.succeed("https://x")


def test_cannot_succeed_from_pending():
    with pytest.raises(GateTransitionError):
        DeploymentGate().succeed("https://x")


def test_success_requires_url():
    gate = DeploymentGate()
    gate.start(build_succeeded=True)
    with pytest.raises(GateTransitionError):
        gate.succeed("")
    assert gate.state == GateState.IN_PROGRESS
