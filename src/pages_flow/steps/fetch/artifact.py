"""Step canônico: fetch.artifact.<nome>.

Recupera um artefato produzido pela run upstream que disparou a
publicação e o extrai no seu subdiretório da raiz do site.

Regras:
- o `run_id` vem do evento de disparo (RunContext.event)
- a conclusão exigida da run de origem é declarada em config
  (`artifacts.<nome>.required_conclusion`)
- artefato ausente é falha fatal; não há fallback para outra run
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from pages_flow.collaborators.types import ArtifactDownloader
from pages_flow.core.exceptions import ArtifactNotFoundError
from pages_flow.core.pipeline.context import RunContext
from pages_flow.core.pipeline.step import Step
from pages_flow.core.pipeline.types import StepKind, StepResult
from pages_flow.layout import ArtifactSpec, Layout
from pages_flow.steps.common import require_exit_zero, success, tree_stats


@dataclass
class ArtifactFetchStep(Step):
    spec: ArtifactSpec
    layout: Layout
    downloader: ArtifactDownloader
    depends_on: List[str] = field(default_factory=lambda: ["site.init_root"])
    id: str = field(init=False)
    kind: StepKind = field(default=StepKind.FETCH, init=False)

    def __post_init__(self) -> None:
        self.id = f"fetch.artifact.{self.spec.name}"

    def run(self, ctx: RunContext) -> StepResult:
        run_id = getattr(ctx.event, "run_id", None)
        if run_id is None:
            raise ArtifactNotFoundError(
                message="Evento de disparo sem run_id; artefato não pode ser localizado",
                details={"artifact": self.spec.artifact},
            )

        dest = self.layout.destination(self.spec.destination)
        dest.mkdir(parents=True, exist_ok=True)

        ctx.log(
            step_id=self.id,
            level="info",
            message="downloading artifact",
            artifact=self.spec.artifact,
            workflow=self.spec.workflow,
            source_run_id=run_id,
        )
        exit_code = self.downloader.download(
            self.spec.artifact,
            self.spec.workflow,
            run_id,
            self.spec.required_conclusion,
            dest,
        )
        require_exit_zero(self.id, "artifact downloader", exit_code, artifact=self.spec.artifact)

        stats = tree_stats(dest)
        if stats["files"] == 0:
            ctx.add_warning(step_id=self.id, message=f"artifact '{self.spec.artifact}' is empty")

        return success(
            step_id=self.id,
            kind=self.kind,
            summary="artifact downloaded",
            metrics=stats,
            payload={
                "artifact": self.spec.artifact,
                "workflow": self.spec.workflow,
                "source_run_id": run_id,
                "destination": self.spec.destination,
            },
        )
