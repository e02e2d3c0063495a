"""Step canônico: build.site.<nome>.

Gera um site estático (jekyll) no seu subdiretório da raiz do site.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from pages_flow.collaborators.types import SiteGenerator
from pages_flow.core.pipeline.context import RunContext
from pages_flow.core.pipeline.step import Step
from pages_flow.core.pipeline.types import StepKind, StepResult
from pages_flow.layout import Layout, SourceSpec
from pages_flow.steps.common import require_exit_zero, success, tree_stats


@dataclass
class StaticSiteBuildStep(Step):
    spec: SourceSpec
    layout: Layout
    generator: SiteGenerator
    depends_on: List[str] = field(default_factory=lambda: ["site.init_root"])
    id: str = field(init=False)
    kind: StepKind = field(default=StepKind.BUILD, init=False)

    def __post_init__(self) -> None:
        self.id = f"build.site.{self.spec.name}"

    def run(self, ctx: RunContext) -> StepResult:
        dest = self.layout.destination(self.spec.destination)
        dest.mkdir(parents=True, exist_ok=True)

        ctx.log(
            step_id=self.id,
            level="info",
            message="generating static site",
            source=str(self.spec.source),
            destination=str(dest),
        )
        exit_code = self.generator.generate(self.spec.source, dest)
        require_exit_zero(self.id, "site generator", exit_code, source=str(self.spec.source))

        stats = tree_stats(dest)
        if stats["files"] == 0:
            ctx.add_warning(step_id=self.id, message=f"site generator produced no files in '{self.spec.destination}'")

        return success(
            step_id=self.id,
            kind=self.kind,
            summary="static site generated",
            metrics=stats,
            payload={"source": str(self.spec.source), "destination": self.spec.destination, "exit_code": exit_code},
        )
