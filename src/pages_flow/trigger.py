# src/pages_flow/trigger.py
"""
Avaliação do gatilho de publicação.

A publicação é disparada pela conclusão de uma run upstream (`workflow_run`).
Dois filtros independentes são aplicados, nesta ordem:

    1. Subscription: a run pertence a um workflow e branch assinados
       (`trigger.workflows`, `trigger.branches`)
    2. Avaliador: a run terminou com conclusão `success`

Uma run que não passa em qualquer um dos filtros é um no-op, nunca um erro.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Mapping, Optional

SUCCESS = "success"


@dataclass(frozen=True)
class PipelineRunEvent:
    """Evento de conclusão de uma run upstream. Consumido uma vez, nunca mutado."""

    workflow: str
    branch: str
    conclusion: Optional[str]
    run_id: int
    repository: Optional[str] = None
    head_sha: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "PipelineRunEvent":
        """Constrói o evento a partir de um payload de webhook `workflow_run`.

        Aceita tanto o payload completo (com a chave `workflow_run`) quanto
        o objeto `workflow_run` isolado.
        """
        run = payload.get("workflow_run", payload)
        if not isinstance(run, Mapping):
            raise ValueError("workflow_run payload must be a mapping")

        run_id = run.get("id")
        if run_id is None:
            raise ValueError("workflow_run payload is missing 'id'")

        repository = None
        repo = payload.get("repository") or run.get("repository")
        if isinstance(repo, Mapping):
            repository = repo.get("full_name")

        return cls(
            workflow=str(run.get("name") or ""),
            branch=str(run.get("head_branch") or ""),
            conclusion=run.get("conclusion"),
            run_id=int(run_id),
            repository=repository,
            head_sha=run.get("head_sha"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Subscription:
    """Workflows e branches cuja conclusão é observada."""

    workflows: List[str] = field(default_factory=lambda: ["ci"])
    branches: List[str] = field(default_factory=lambda: ["main"])

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "Subscription":
        trigger_cfg = config.get("trigger", {}) or {}
        return cls(
            workflows=list(trigger_cfg.get("workflows", ["ci"]) or []),
            branches=list(trigger_cfg.get("branches", ["main"]) or []),
        )

    def matches(self, event: PipelineRunEvent) -> bool:
        # lista vazia significa "qualquer"
        if self.workflows and event.workflow not in self.workflows:
            return False
        if self.branches and event.branch not in self.branches:
            return False
        return True


def should_proceed(event: PipelineRunEvent) -> bool:
    """Decisão do avaliador: prossegue sse a conclusão da run upstream é `success`."""
    return event.conclusion == SUCCESS
