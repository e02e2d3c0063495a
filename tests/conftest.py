"""
Fixtures compartilhados para testes do pages_flow.

Este módulo define fixtures reutilizáveis que fornecem:
- configurações mínimas e determinísticas
- contexto de execução controlado (RunContext)
- Steps dummy para testes estruturais do engine
- colaboradores fake (compilador, downloader, gerador, deployer) que
  registram chamadas em um log compartilhado

Decisões arquiteturais:
    - Fixtures são mantidas simples e explícitas
    - Steps dummy utilizam duck typing em vez de herança
    - Colaboradores fake escrevem apenas dentro do diretório recebido
    - Toda escrita em disco acontece sob `tmp_path`

Limites explícitos:
    - Não executam ferramentas reais (mdbook, jekyll)
    - Não acessam rede
"""

from datetime import datetime, timezone
from pathlib import Path

import pytest


# =====================================================
# Config
# =====================================================

@pytest.fixture
def project_like_config_defaults_yaml() -> str:
    """YAML de defaults semelhante ao `config.defaults.yaml` do pacote (subconjunto)."""
    return """\
engine:
  fail_fast: true
  max_workers: 1
site:
  root: _site
steps:
  site.init_root:
    enabled: true
trigger:
  workflows: [ci]
  branches: [main]
"""


@pytest.fixture
def project_like_config_local_yaml() -> str:
    """YAML de override local: altera branch assinada e desabilita um Step."""
    return """\
engine:
  max_workers: 4
steps:
  build.site.verus:
    enabled: false
trigger:
  branches: [release]
"""


@pytest.fixture
def dummy_config() -> dict:
    return {
        "engine": {"fail_fast": True, "max_workers": 1},
        "steps": {"site.init_root": {"enabled": True}},
    }


@pytest.fixture
def dummy_ctx(dummy_config):
    """RunContext determinístico (run_id e created_at fixos)."""
    from pages_flow.core.pipeline.context import RunContext

    return RunContext(
        run_id="run-test-001",
        created_at=datetime(2026, 1, 16, 0, 0, 0, tzinfo=timezone.utc),
        config=dummy_config,
        meta={"source": "pytest"},
    )


@pytest.fixture
def DummyStep():
    """
    Classe de Step mínima e duck-typed.

    Sempre retorna SUCCESS, registra um artefato `<id>.ok` no RunContext e
    anota sua execução em `ctx.meta["order"]` quando presente.
    """
    from pages_flow.core.pipeline.types import StepKind, StepResult, StepStatus

    class _DummyStep:
        def __init__(self, step_id: str = "site.init_root", kind: StepKind = StepKind.BUILD, depends_on=None):
            self.id = step_id
            self.kind = kind
            self.depends_on = depends_on or []

        def run(self, ctx):
            ctx.set_artifact(f"{self.id}.ok", True)
            ctx.meta.setdefault("order", []).append(self.id)
            return StepResult(
                step_id=self.id,
                kind=self.kind,
                status=StepStatus.SUCCESS,
                summary="dummy ok",
                artifacts={"ok": f"{self.id}.ok"},
                payload={"note": "dummy"},
            )

    return _DummyStep


# =====================================================
# Colaboradores fake
# =====================================================

class FakeBookCompiler:
    def __init__(self, calls, exit_code: int = 0):
        self.calls = calls
        self.exit_code = exit_code

    def build(self, destination_dir, source_dir):
        self.calls.append(("book", Path(source_dir).name, Path(destination_dir)))
        if self.exit_code == 0:
            (Path(destination_dir) / "index.html").write_text(f"book {Path(source_dir).name}", encoding="utf-8")
        return self.exit_code


class FakeArtifactDownloader:
    def __init__(self, calls, missing: bool = False):
        self.calls = calls
        self.missing = missing

    def download(self, artifact_name, source_workflow, run_id, required_conclusion, dest_dir):
        from pages_flow.core.exceptions import ArtifactNotFoundError

        self.calls.append(("artifact", artifact_name, Path(dest_dir)))
        if self.missing:
            raise ArtifactNotFoundError(
                message="Artefato não encontrado",
                details={"artifact": artifact_name, "run_id": run_id},
            )
        (Path(dest_dir) / "index.html").write_text(f"{artifact_name} from {run_id}", encoding="utf-8")
        return 0


class FakeSiteGenerator:
    def __init__(self, calls, exit_code: int = 0):
        self.calls = calls
        self.exit_code = exit_code

    def generate(self, source_dir, destination_dir):
        self.calls.append(("site", Path(source_dir).name, Path(destination_dir)))
        if self.exit_code == 0:
            (Path(destination_dir) / "index.html").write_text(f"site {Path(source_dir).name}", encoding="utf-8")
        return self.exit_code


class RecordingPackager:
    """Empacota com o TarPackager real e registra a árvore recebida."""

    def __init__(self, calls, output_dir: Path):
        from pages_flow.collaborators.packaging import TarPackager

        self.calls = calls
        self.inner = TarPackager(output_dir=output_dir)
        self.seen_entries = None

    def package(self, root_dir):
        self.seen_entries = sorted(p.name for p in Path(root_dir).iterdir())
        self.calls.append(("package", Path(root_dir)))
        return self.inner.package(root_dir)


class FakeDeployer:
    def __init__(self, calls, url: str = "https://example.test/docs/", status: str = "succeeded"):
        self.calls = calls
        self.url = url
        self.status = status

    def deploy(self, bundle):
        from pages_flow.collaborators.types import DeploymentResult

        self.calls.append(("deploy", bundle.sha256))
        return DeploymentResult(url=self.url, status=self.status)


@pytest.fixture
def calls() -> list:
    return []


@pytest.fixture
def publication_config(tmp_path):
    """Configuração efetiva (defaults do pacote) com workspace isolado em `tmp_path`."""
    from pages_flow.core.config import load_config

    return load_config(
        overrides={
            "run": {"workspace": str(tmp_path)},
            "tools": {"mdbook": {"download": False}},
        }
    )


@pytest.fixture
def make_collaborators(calls, tmp_path):
    """Factory de `Collaborators` fake, parametrizável por cenário."""
    from pages_flow.collaborators import Collaborators

    def _make(*, book_exit: int = 0, site_exit: int = 0, artifact_missing: bool = False, deploy_status: str = "succeeded"):
        return Collaborators(
            book_compiler=FakeBookCompiler(calls, exit_code=book_exit),
            artifact_downloader=FakeArtifactDownloader(calls, missing=artifact_missing),
            site_generator=FakeSiteGenerator(calls, exit_code=site_exit),
            packager=RecordingPackager(calls, output_dir=tmp_path / "bundle"),
            deployer=FakeDeployer(calls, status=deploy_status),
        )

    return _make


@pytest.fixture
def ci_success_event():
    from pages_flow.trigger import PipelineRunEvent

    return PipelineRunEvent(workflow="ci", branch="main", conclusion="success", run_id=4242, repository="org/docs")
