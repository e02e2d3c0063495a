# tests/steps/test_package_bundle.py
"""
Testes do Step package.bundle.
"""

from pathlib import Path

import pytest

from pages_flow.core.exceptions import PackagePathMissingError
from pages_flow.core.pipeline.types import StepStatus
from pages_flow.layout import Layout
from pages_flow.steps.package.bundle import BUNDLE_ARTIFACT, PackageBundleStep


def _layout(publication_config) -> Layout:
    return Layout.from_config(publication_config)


def _populate(layout: Layout, empty=()):
    for sub in layout.subdirectories():
        d = layout.destination(sub)
        d.mkdir(parents=True, exist_ok=True)
        if sub not in empty:
            (d / "index.html").write_text(sub, encoding="utf-8")


def test_packages_complete_tree(dummy_ctx, publication_config, make_collaborators, calls):
    layout = _layout(publication_config)
    _populate(layout)
    collaborators = make_collaborators()

    result = PackageBundleStep(layout=layout, packager=collaborators.packager).run(dummy_ctx)

    assert result.status == StepStatus.SUCCESS
    assert calls == [("package", layout.site_root)]
    assert collaborators.packager.seen_entries == layout.subdirectories()
    bundle = dummy_ctx.get_artifact(BUNDLE_ARTIFACT)
    assert result.artifacts["bundle"]["sha256"] == bundle.sha256
    assert result.metrics["files"] == 5


def test_missing_subdirectory_is_fatal(dummy_ctx, publication_config, make_collaborators, calls):
    layout = _layout(publication_config)
    _populate(layout)
    (layout.destination("verusdoc") / "index.html").unlink()
    layout.destination("verusdoc").rmdir()

    with pytest.raises(PackagePathMissingError) as ei:
        PackageBundleStep(layout=layout, packager=make_collaborators().packager).run(dummy_ctx)

    assert ei.value.details["missing"] == ["verusdoc"]
    assert calls == []
    assert not dummy_ctx.has_artifact(BUNDLE_ARTIFACT)


def test_empty_subdirectory_is_a_warning(dummy_ctx, publication_config, make_collaborators):
    layout = _layout(publication_config)
    _populate(layout, empty=("verus",))

    result = PackageBundleStep(layout=layout, packager=make_collaborators().packager).run(dummy_ctx)

    assert result.status == StepStatus.SUCCESS
    assert dummy_ctx.warnings["package.bundle"] == ["subdirectory 'verus' is empty"]
