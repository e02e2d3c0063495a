# src/pages_flow/orchestrator.py
"""
Orquestrador da publicação de documentação.

Uma publicação é disparada pela conclusão de uma run upstream e executa
dois jobs em sequência, cada um como um DAG de Steps executado pelo Engine:

    build:  site.init_root → builders (livros, artefatos, sites) → package.bundle
    deploy: deploy.pages (somente após sucesso do build, via DeploymentGate)

Fluxo de `publish`:
    1. Subscription e avaliador do gatilho; falha em qualquer um → SKIPPED,
       sem escrita em disco e sem chamada a colaboradores
    2. Manifest + entrada no grupo de concorrência (posse exclusiva do grupo;
       runs sobrepostas aguardam a anterior terminar)
    3. Job build (cancelamento verificado antes do início)
    4. Gate pending → in_progress (exige build bem-sucedido)
    5. Job deploy (cancelamento verificado antes do início)
    6. Gate → succeeded (com URL) ou failed
    7. Persistência de manifest.json e report.md em `run.run_dir/<run_id>`

Decisões arquiteturais:
    - Cada job possui seu próprio RunContext; o único dado que atravessa
      a fronteira entre jobs é o bundle produzido por `package.bundle`
    - Falhas de Step nunca escapam como exceção: viram `outcome = failed`
      com o payload de erro disponível no RunResult e no Manifest

Limites explícitos:
    - Não implementa CLI
    - Não interrompe Steps em andamento ao ser cancelado
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from pages_flow.collaborators import Collaborators
from pages_flow.collaborators.book import MdBookCompiler
from pages_flow.core.concurrency import ConcurrencyGroup
from pages_flow.core.config import compute_config_hash, load_config
from pages_flow.core.engine import Engine, RunResult
from pages_flow.core.errors import deploy_failed
from pages_flow.core.pipeline.context import RunContext
from pages_flow.core.pipeline.registry import StepRegistry
from pages_flow.core.pipeline.step import Step
from pages_flow.core.traceability.manifest import PagesManifest, add_event, create_manifest, save_manifest
from pages_flow.deployment.gate import DeploymentGate, GateState
from pages_flow.layout import Layout, resolve_path
from pages_flow.report.report_md import generate_report_md
from pages_flow.steps.build.book import BookBuildStep
from pages_flow.steps.build.site import StaticSiteBuildStep
from pages_flow.steps.deploy.pages import DeployPagesStep
from pages_flow.steps.fetch.artifact import ArtifactFetchStep
from pages_flow.steps.package.bundle import BUNDLE_ARTIFACT, PackageBundleStep
from pages_flow.steps.setup.mdbook import DEFAULT_URL_TEMPLATE, MdBookSetupStep
from pages_flow.steps.site.init_root import SiteInitRootStep
from pages_flow.trigger import PipelineRunEvent, Subscription, should_proceed

PAGES_FLOW_VERSION = "0.1.0"

_DEFAULT_GROUPS = ConcurrencyGroup()


class RunOutcome(str, Enum):
    SKIPPED = "skipped"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class PublicationResult:
    """Resultado de uma chamada a `publish`."""

    outcome: RunOutcome
    reason: str
    run_id: Optional[str] = None
    build: Optional[RunResult] = None
    deploy: Optional[RunResult] = None
    gate: GateState = GateState.PENDING
    url: Optional[str] = None
    manifest: Optional[PagesManifest] = None
    run_dir: Optional[Path] = None
    logs: List[Dict[str, Any]] = field(default_factory=list)


def _section(config: Mapping[str, Any], name: str) -> Dict[str, Any]:
    value = config.get(name, {}) or {}
    return value if isinstance(value, dict) else {}


# ---------------------------------------------------------------------------
# Declaração dos jobs
# ---------------------------------------------------------------------------

def build_steps(config: Mapping[str, Any], collaborators: Collaborators) -> List[Step]:
    """Steps do job `build`, na forma declarada pela configuração."""
    layout = Layout.from_config(config)
    site_cfg = _section(config, "site")
    tools_cfg = _section(config, "tools")
    mdbook_cfg = tools_cfg.get("mdbook", {}) or {}

    init = SiteInitRootStep(layout=layout, clean_existing=bool(site_cfg.get("clean_existing", True)))
    steps: List[Step] = [init]

    book_deps = [init.id]
    compiler = collaborators.book_compiler
    if layout.books and isinstance(compiler, MdBookCompiler) and mdbook_cfg.get("download", True):
        setup = MdBookSetupStep(
            compiler=compiler,
            tools_dir=resolve_path(layout.workspace, tools_cfg.get("dir", ".pages_flow/tools")),
            version=str(mdbook_cfg.get("version") or "0.4.21"),
            target=str(mdbook_cfg.get("target") or "x86_64-unknown-linux-gnu"),
            url_template=str(mdbook_cfg.get("url_template") or DEFAULT_URL_TEMPLATE),
            timeout_s=float(tools_cfg.get("timeout_s", 60)),
        )
        steps.append(setup)
        book_deps.append(setup.id)

    builders: List[Step] = []
    for spec in layout.books:
        builders.append(BookBuildStep(spec=spec, layout=layout, compiler=compiler, depends_on=list(book_deps)))
    for spec in layout.artifacts:
        builders.append(
            ArtifactFetchStep(spec=spec, layout=layout, downloader=collaborators.artifact_downloader)
        )
    for spec in layout.sites:
        builders.append(
            StaticSiteBuildStep(spec=spec, layout=layout, generator=collaborators.site_generator)
        )

    steps.extend(builders)
    steps.append(
        PackageBundleStep(
            layout=layout,
            packager=collaborators.packager,
            depends_on=[b.id for b in builders] or [init.id],
        )
    )
    return StepRegistry.of(steps).list()


def deploy_steps(config: Mapping[str, Any], collaborators: Collaborators) -> List[Step]:
    """Steps do job `deploy`."""
    deploy_cfg = _section(config, "deploy")
    steps: List[Step] = [
        DeployPagesStep(
            deployer=collaborators.deployer,
            environment=str(deploy_cfg.get("environment") or "github-pages"),
        )
    ]
    return StepRegistry.of(steps).list()


# ---------------------------------------------------------------------------
# Execução
# ---------------------------------------------------------------------------

def _now() -> datetime:
    return datetime.now(timezone.utc)


def _make_run_id(event: PipelineRunEvent, started_at: datetime) -> str:
    return f"{started_at.strftime('%Y%m%dT%H%M%S%fZ')}-{event.run_id}"


def _run_job(
    name: str,
    steps: List[Step],
    ctx: RunContext,
    manifest: PagesManifest,
) -> RunResult:
    add_event(manifest, event_type="job_started", ts=_now(), payload={"job": name})
    result = Engine(steps=steps, ctx=ctx, manifest=manifest).run()
    add_event(
        manifest,
        event_type="job_finished",
        ts=_now(),
        payload={
            "job": name,
            "succeeded": result.succeeded,
            "failed": result.failed,
        },
    )
    return result


def _record_gate(manifest: PagesManifest, gate: DeploymentGate) -> None:
    last = gate.history[-1]
    add_event(manifest, event_type="gate_transition", ts=_now(), payload=dict(last))


def _persist(manifest: PagesManifest, run_dir: Path) -> None:
    save_manifest(manifest, run_dir / "manifest.json")
    (run_dir / "report.md").write_text(generate_report_md(manifest.to_dict()), encoding="utf-8")


def publish(
    event: PipelineRunEvent,
    *,
    config: Optional[Dict[str, Any]] = None,
    collaborators: Optional[Collaborators] = None,
    groups: Optional[ConcurrencyGroup] = None,
    now: Optional[datetime] = None,
) -> PublicationResult:
    """
    Executa a publicação disparada por `event`.

    Args:
        event: Evento de conclusão da run upstream.
        config: Configuração resolvida. Quando omitida, usa os defaults do pacote.
        collaborators: Implementações dos colaboradores. Quando omitido,
            `Collaborators.default(config)`.
        groups: Registro de grupos de concorrência (default: registro do processo).
        now: Timestamp de início (injetável para testes).

    Returns:
        PublicationResult com o desfecho, os RunResults de cada job, o estado
        do gate, a URL publicada e o Manifest.
    """
    config = config if config is not None else load_config()

    if not Subscription.from_config(config).matches(event):
        return PublicationResult(outcome=RunOutcome.SKIPPED, reason="event does not match subscription")
    if not should_proceed(event):
        return PublicationResult(
            outcome=RunOutcome.SKIPPED,
            reason=f"upstream conclusion is {event.conclusion!r}",
        )

    collaborators = collaborators if collaborators is not None else Collaborators.default(config)
    groups = groups if groups is not None else _DEFAULT_GROUPS

    started_at = now or _now()
    run_id = _make_run_id(event, started_at)
    layout = Layout.from_config(config)
    run_cfg = _section(config, "run")
    concurrency_cfg = _section(config, "concurrency")
    group_key = str(concurrency_cfg.get("group") or "pages")

    manifest = create_manifest(
        run_id=run_id,
        started_at=started_at,
        pages_flow_version=PAGES_FLOW_VERSION,
        config_hash=compute_config_hash(config),
        trigger=event.to_dict(),
    )
    add_event(manifest, event_type="run_started", ts=started_at, payload={"group": group_key})

    gate = DeploymentGate(environment=str(_section(config, "deploy").get("environment") or "github-pages"))
    build_ctx = RunContext(run_id=run_id, created_at=started_at, config=config, event=event, job="build")
    deploy_ctx = RunContext(run_id=run_id, created_at=started_at, config=config, event=event, job="deploy")
    build_result: Optional[RunResult] = None
    deploy_result: Optional[RunResult] = None

    groups.enter(group_key, run_id, cancel_in_progress=bool(concurrency_cfg.get("cancel_in_progress", True)))
    try:
        # runs do mesmo grupo compartilham site root, bundle e alvo de deploy
        groups.acquire(group_key, run_id)
        if groups.is_cancelled(group_key, run_id):
            outcome, reason = RunOutcome.CANCELLED, "superseded before build"
        else:
            build_result = _run_job("build", build_steps(config, collaborators), build_ctx, manifest)

            if not build_result.succeeded:
                outcome, reason = RunOutcome.FAILED, "build job failed"
            elif groups.is_cancelled(group_key, run_id):
                outcome, reason = RunOutcome.CANCELLED, "superseded before deploy"
            else:
                gate.start(build_succeeded=True)
                _record_gate(manifest, gate)

                if build_ctx.has_artifact(BUNDLE_ARTIFACT):
                    deploy_ctx.set_artifact(BUNDLE_ARTIFACT, build_ctx.get_artifact(BUNDLE_ARTIFACT))
                deploy_result = _run_job("deploy", deploy_steps(config, collaborators), deploy_ctx, manifest)

                published = deploy_result.steps.get("deploy.pages")
                url = (published.payload.get("url") if published is not None else None) or None
                if deploy_result.succeeded and url:
                    gate.succeed(url)
                    outcome, reason = RunOutcome.SUCCEEDED, "published"
                else:
                    error = deploy_result.first_error() or deploy_failed(
                        environment=gate.environment,
                        reason="deploy job finished without publishing",
                        details={"failed": deploy_result.failed},
                    ).to_dict()
                    gate.fail(error)
                    outcome, reason = RunOutcome.FAILED, "deploy job failed"
                _record_gate(manifest, gate)
    finally:
        groups.leave(group_key, run_id)

    finished_at = _now()
    manifest.run["finished_at"] = finished_at.isoformat()
    manifest.run["outcome"] = outcome.value
    if gate.url:
        manifest.run["url"] = gate.url
    add_event(
        manifest,
        event_type="run_finished",
        ts=finished_at,
        payload={"outcome": outcome.value, "reason": reason, "gate": gate.state.value},
    )

    run_dir: Optional[Path] = None
    if run_cfg.get("persist", True):
        run_dir = resolve_path(layout.workspace, run_cfg.get("run_dir", ".pages_flow/runs")) / run_id
        _persist(manifest, run_dir)

    return PublicationResult(
        outcome=outcome,
        reason=reason,
        run_id=run_id,
        build=build_result,
        deploy=deploy_result,
        gate=gate.state,
        url=gate.url,
        manifest=manifest,
        run_dir=run_dir,
        logs=list(build_ctx.events) + list(deploy_ctx.events),
    )
