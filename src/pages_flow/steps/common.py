# src/pages_flow/steps/common.py
"""Utilitários compartilhados pelos Steps de publicação."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List

from pages_flow.core.exceptions import CollaboratorExitError
from pages_flow.core.pipeline.context import RunContext
from pages_flow.core.pipeline.types import StepKind, StepResult, StepStatus


def step_config(ctx: RunContext, step_id: str) -> Dict[str, Any]:
    steps_cfg = (ctx.config or {}).get("steps", {}) or {}
    cfg = steps_cfg.get(step_id, {}) if isinstance(steps_cfg, dict) else {}
    return cfg if isinstance(cfg, dict) else {}


def require_exit_zero(step_id: str, collaborator: str, exit_code: int, **details: Any) -> None:
    if exit_code != 0:
        raise CollaboratorExitError(
            message=f"{collaborator} terminou com exit code {exit_code}",
            details={"collaborator": collaborator, "exit_code": exit_code, **details},
            hint=f"Consulte o output de {collaborator} acima; o Step {step_id} não produziu saída válida.",
        )


def tree_stats(path: Path) -> Dict[str, int]:
    files = [p for p in path.rglob("*") if p.is_file()]
    return {
        "files": len(files),
        "bytes": sum(p.stat().st_size for p in files),
    }


def success(
    *,
    step_id: str,
    kind: StepKind,
    summary: str,
    metrics: Dict[str, Any] | None = None,
    warnings: List[str] | None = None,
    artifacts: Dict[str, Any] | None = None,
    payload: Dict[str, Any] | None = None,
) -> StepResult:
    return StepResult(
        step_id=step_id,
        kind=kind,
        status=StepStatus.SUCCESS,
        summary=summary,
        metrics=dict(metrics or {}),
        warnings=list(warnings or []),
        artifacts=dict(artifacts or {}),
        payload=dict(payload or {}),
    )
