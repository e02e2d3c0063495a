# tests/steps/test_deploy_pages.py
"""
Testes do Step deploy.pages.
"""

from pathlib import Path

import pytest

from pages_flow.collaborators.types import BundleHandle
from pages_flow.core.exceptions import DeployFailedError
from pages_flow.core.pipeline.types import StepKind, StepStatus
from pages_flow.steps.deploy.pages import DeployPagesStep
from pages_flow.steps.package.bundle import BUNDLE_ARTIFACT


def _bundle(tmp_path: Path) -> BundleHandle:
    return BundleHandle(path=tmp_path / "artifact.tar.gz", root=tmp_path, sha256="f" * 64, bytes=10, file_count=1)


def test_deploy_records_url(dummy_ctx, tmp_path, make_collaborators, calls):
    dummy_ctx.set_artifact(BUNDLE_ARTIFACT, _bundle(tmp_path))
    step = DeployPagesStep(deployer=make_collaborators().deployer)

    result = step.run(dummy_ctx)

    assert step.kind == StepKind.DEPLOY
    assert result.status == StepStatus.SUCCESS
    assert result.payload["url"] == "https://example.test/docs/"
    assert result.payload["environment"] == "github-pages"
    assert calls == [("deploy", "f" * 64)]


def test_deploy_without_bundle_is_fatal(dummy_ctx, make_collaborators, calls):
    with pytest.raises(DeployFailedError):
        DeployPagesStep(deployer=make_collaborators().deployer).run(dummy_ctx)
    assert calls == []


def test_deployer_failure_status_is_fatal(dummy_ctx, tmp_path, make_collaborators):
    dummy_ctx.set_artifact(BUNDLE_ARTIFACT, _bundle(tmp_path))

    with pytest.raises(DeployFailedError) as ei:
        DeployPagesStep(deployer=make_collaborators(deploy_status="failed").deployer).run(dummy_ctx)
    assert ei.value.details["status"] == "failed"
