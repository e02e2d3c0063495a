# src/pages_flow/deployment/gate.py
"""
Gate de deploy: máquina de estados da publicação de uma run.

Transições válidas:
    pending     → in_progress   (somente após o job `build` reportar sucesso)
    in_progress → succeeded     (publicação confirmada, com URL pública)
    in_progress → failed        (qualquer erro de publicação)

Invariantes:
    - `succeeded` e `failed` são terminais
    - Não há retry automático nem rollback
    - Cada transição é registrada em `history` (consumida pelo Manifest)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pages_flow.core.exceptions import GateTransitionError


class GateState(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @property
    def terminal(self) -> bool:
        return self in (GateState.SUCCEEDED, GateState.FAILED)


_ALLOWED = {
    GateState.PENDING: {GateState.IN_PROGRESS},
    GateState.IN_PROGRESS: {GateState.SUCCEEDED, GateState.FAILED},
    GateState.SUCCEEDED: set(),
    GateState.FAILED: set(),
}


@dataclass
class DeploymentGate:
    environment: str = "github-pages"
    state: GateState = GateState.PENDING
    url: Optional[str] = None
    error: Optional[Dict[str, Any]] = None
    history: List[Dict[str, Any]] = field(default_factory=list)

    def _transition(self, target: GateState, **extra: Any) -> None:
        if target not in _ALLOWED[self.state]:
            raise GateTransitionError(
                message=f"Transição inválida do gate: {self.state.value} → {target.value}",
                details={"environment": self.environment, "from": self.state.value, "to": target.value},
            )
        self.history.append(
            {
                "from": self.state.value,
                "to": target.value,
                "ts": datetime.now(timezone.utc).isoformat(),
                **extra,
            }
        )
        self.state = target

    def start(self, *, build_succeeded: bool) -> None:
        if not build_succeeded:
            raise GateTransitionError(
                message="Deploy não pode iniciar sem sucesso do job build",
                details={"environment": self.environment, "from": self.state.value},
                hint="Corrija a falha do job build e dispare uma nova run.",
            )
        self._transition(GateState.IN_PROGRESS)

    def succeed(self, url: str) -> None:
        if not url:
            raise GateTransitionError(
                message="Publicação bem-sucedida exige URL pública",
                details={"environment": self.environment},
            )
        self._transition(GateState.SUCCEEDED, url=url)
        self.url = url

    def fail(self, error: Dict[str, Any]) -> None:
        self._transition(GateState.FAILED, error=error.get("type"))
        self.error = dict(error)
