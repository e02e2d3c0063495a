"""Gate de deploy do pages_flow."""

from .gate import DeploymentGate, GateState

__all__ = ["DeploymentGate", "GateState"]
