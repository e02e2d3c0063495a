"""Step canônico: site.init_root.

Responsabilidades:
- criar a raiz do site (`site.root`) vazia antes de qualquer builder
- limpar uma raiz pré-existente quando `site.clean_existing` é verdadeiro

Limites explícitos:
- NÃO cria os subdiretórios dos builders (cada builder cria o seu)
- NÃO reaproveita conteúdo de runs anteriores
"""

from __future__ import annotations

import shutil
from dataclasses import dataclass
from typing import List

from pages_flow.core.exceptions import SiteRootError
from pages_flow.core.pipeline.context import RunContext
from pages_flow.core.pipeline.step import Step
from pages_flow.core.pipeline.types import StepKind, StepResult
from pages_flow.layout import Layout
from pages_flow.steps.common import success


@dataclass
class SiteInitRootStep(Step):
    """Cria a raiz do site vazia."""

    layout: Layout
    clean_existing: bool = True
    id: str = "site.init_root"
    kind: StepKind = StepKind.SETUP
    depends_on: List[str] = None  # type: ignore[assignment]

    def __post_init__(self) -> None:
        if self.depends_on is None:
            self.depends_on = []

    def run(self, ctx: RunContext) -> StepResult:
        root = self.layout.site_root
        removed = False

        if root.exists():
            if not self.clean_existing:
                raise SiteRootError(
                    message="Raiz do site já existe",
                    details={"root": str(root)},
                    hint="Remova o diretório ou habilite `site.clean_existing`.",
                )
            try:
                if root.is_dir() and not root.is_symlink():
                    shutil.rmtree(root)
                else:
                    root.unlink()
            except OSError as e:
                raise SiteRootError(
                    message="Falha ao limpar raiz do site existente",
                    details={"root": str(root), "error": str(e)},
                ) from e
            removed = True

        try:
            root.mkdir(parents=True)
        except OSError as e:
            raise SiteRootError(
                message="Falha ao criar raiz do site",
                details={"root": str(root), "error": str(e)},
            ) from e

        ctx.log(step_id=self.id, level="info", message="site root created", root=str(root), cleaned=removed)

        return success(
            step_id=self.id,
            kind=self.kind,
            summary="site root created",
            payload={"root": str(root), "cleaned_existing": removed},
        )
