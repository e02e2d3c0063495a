"""Step canônico: deploy.pages.

Único Step do job de deploy: entrega o bundle empacotado ao Deployer e
registra a URL pública resultante.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from pages_flow.collaborators.types import BundleHandle, Deployer
from pages_flow.core.exceptions import DeployFailedError
from pages_flow.core.pipeline.context import RunContext
from pages_flow.core.pipeline.step import Step
from pages_flow.core.pipeline.types import StepKind, StepResult
from pages_flow.steps.common import success
from pages_flow.steps.package.bundle import BUNDLE_ARTIFACT


@dataclass
class DeployPagesStep(Step):
    deployer: Deployer
    environment: str = "github-pages"
    depends_on: List[str] = field(default_factory=list)
    id: str = "deploy.pages"
    kind: StepKind = StepKind.DEPLOY

    def run(self, ctx: RunContext) -> StepResult:
        if not ctx.has_artifact(BUNDLE_ARTIFACT):
            raise DeployFailedError(
                message="Nenhum bundle disponível para deploy",
                details={"environment": self.environment},
            )
        bundle: BundleHandle = ctx.get_artifact(BUNDLE_ARTIFACT)

        ctx.log(
            step_id=self.id,
            level="info",
            message="deploying bundle",
            environment=self.environment,
            sha256=bundle.sha256,
        )
        result = self.deployer.deploy(bundle)
        if not result.succeeded or not result.url:
            raise DeployFailedError(
                message="Deployer não confirmou a publicação",
                details={"environment": self.environment, "status": result.status, "url": result.url},
            )

        return success(
            step_id=self.id,
            kind=self.kind,
            summary="bundle deployed",
            payload={"environment": self.environment, "url": result.url, "sha256": bundle.sha256},
        )
