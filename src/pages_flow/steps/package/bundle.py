"""Step canônico: package.bundle.

Empacota a raiz do site completa em um bundle pronto para deploy e o
publica no RunContext como artifact `package.bundle`.

Pré-condições verificadas:
- todos os subdiretórios declarados existem (PackagePathMissingError)

Subdiretório vazio não é fatal: vira warning do Step.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from pages_flow.collaborators.types import Packager
from pages_flow.core.exceptions import PackagePathMissingError
from pages_flow.core.pipeline.context import RunContext
from pages_flow.core.pipeline.step import Step
from pages_flow.core.pipeline.types import StepKind, StepResult
from pages_flow.layout import Layout
from pages_flow.steps.common import success

BUNDLE_ARTIFACT = "package.bundle"


@dataclass
class PackageBundleStep(Step):
    layout: Layout
    packager: Packager
    depends_on: List[str] = field(default_factory=list)
    id: str = "package.bundle"
    kind: StepKind = StepKind.PACKAGE

    def run(self, ctx: RunContext) -> StepResult:
        root = self.layout.site_root
        subdirs = self.layout.subdirectories()

        missing = [d for d in subdirs if not self.layout.destination(d).is_dir()]
        if missing:
            raise PackagePathMissingError(
                message="Subdiretórios declarados ausentes na raiz do site",
                details={"root": str(root), "missing": missing},
            )

        for d in subdirs:
            if not any(self.layout.destination(d).iterdir()):
                ctx.add_warning(step_id=self.id, message=f"subdirectory '{d}' is empty")

        bundle = self.packager.package(root)
        ctx.set_artifact(BUNDLE_ARTIFACT, bundle)
        ctx.log(
            step_id=self.id,
            level="info",
            message="site root packaged",
            bundle=str(bundle.path),
            sha256=bundle.sha256,
        )

        return success(
            step_id=self.id,
            kind=self.kind,
            summary="site root packaged",
            metrics={"bytes": bundle.bytes, "files": bundle.file_count},
            artifacts={"bundle": bundle.to_dict()},
            payload={"subdirectories": subdirs, "entries": list(bundle.entries)},
        )
