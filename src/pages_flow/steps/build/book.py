"""Step canônico: build.book.<nome>.

Compila um livro (mdbook) para o seu subdiretório da raiz do site.

Invariantes:
- escreve apenas em `<site.root>/<destination>`
- exit code diferente de zero é falha fatal (CollaboratorExitError)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from pages_flow.collaborators.types import BookCompiler
from pages_flow.core.pipeline.context import RunContext
from pages_flow.core.pipeline.step import Step
from pages_flow.core.pipeline.types import StepKind, StepResult
from pages_flow.layout import Layout, SourceSpec
from pages_flow.steps.common import require_exit_zero, success, tree_stats


@dataclass
class BookBuildStep(Step):
    spec: SourceSpec
    layout: Layout
    compiler: BookCompiler
    depends_on: List[str] = field(default_factory=lambda: ["site.init_root"])
    id: str = field(init=False)
    kind: StepKind = field(default=StepKind.BUILD, init=False)

    def __post_init__(self) -> None:
        self.id = f"build.book.{self.spec.name}"

    def run(self, ctx: RunContext) -> StepResult:
        dest = self.layout.destination(self.spec.destination)
        dest.mkdir(parents=True, exist_ok=True)

        ctx.log(
            step_id=self.id,
            level="info",
            message="compiling book",
            source=str(self.spec.source),
            destination=str(dest),
        )
        exit_code = self.compiler.build(dest, self.spec.source)
        require_exit_zero(self.id, "book compiler", exit_code, source=str(self.spec.source))

        stats = tree_stats(dest)
        if stats["files"] == 0:
            ctx.add_warning(step_id=self.id, message=f"book compiler produced no files in '{self.spec.destination}'")

        return success(
            step_id=self.id,
            kind=self.kind,
            summary="book compiled",
            metrics=stats,
            payload={"source": str(self.spec.source), "destination": self.spec.destination, "exit_code": exit_code},
        )
