# tests/core/engine/test_planner_toposort.py
"""
Testes do planner: ordenação topológica determinística e ondas.
"""

from pages_flow.core.engine.planner import plan_execution, plan_waves


def test_toposort_respects_dependencies_and_ties(DummyStep):
    steps = [
        DummyStep("package.bundle", depends_on=["fetch.artifact.verusdoc", "build.book.guide"]),
        DummyStep("fetch.artifact.verusdoc", depends_on=["site.init_root"]),
        DummyStep("build.book.guide", depends_on=["site.init_root"]),
        DummyStep("site.init_root"),
    ]
    order = [s.id for s in plan_execution(steps)]
    assert order == ["site.init_root", "build.book.guide", "fetch.artifact.verusdoc", "package.bundle"]


def test_toposort_is_deterministic(DummyStep):
    def build():
        return [DummyStep("c"), DummyStep("a"), DummyStep("b", depends_on=["a"])]

    assert [s.id for s in plan_execution(build())] == [s.id for s in plan_execution(list(reversed(build())))]


def test_waves_group_independent_steps(DummyStep):
    steps = [
        DummyStep("site.init_root"),
        DummyStep("setup.mdbook"),
        DummyStep("build.book.guide", depends_on=["site.init_root", "setup.mdbook"]),
        DummyStep("build.site.verus", depends_on=["site.init_root"]),
        DummyStep("package.bundle", depends_on=["build.book.guide", "build.site.verus"]),
    ]
    waves = [[s.id for s in w] for w in plan_waves(steps)]
    assert waves == [
        ["setup.mdbook", "site.init_root"],
        ["build.book.guide", "build.site.verus"],
        ["package.bundle"],
    ]
