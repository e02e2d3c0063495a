"""Step canônico: setup.mdbook.

Provisiona o executável do compilador de livros antes dos builders de livro.

Fluxo:
    1. Se `tools.mdbook.path` já resolve para um executável, usa-o
    2. Caso contrário, baixa o release fixado
       (`tools.mdbook.url_template` + `version` + `target`), extrai o
       binário `mdbook` em `tools.dir` e o marca como executável
    3. Reaponta o compilador injetado para o executável resolvido

Limites explícitos:
- NÃO verifica assinatura do release
- NÃO compila livros
"""

from __future__ import annotations

import io
import shutil
import stat
import tarfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import requests

from pages_flow.collaborators.book import MdBookCompiler
from pages_flow.core.exceptions import ToolSetupError
from pages_flow.core.pipeline.context import RunContext
from pages_flow.core.pipeline.step import Step
from pages_flow.core.pipeline.types import StepKind, StepResult
from pages_flow.steps.common import success

DEFAULT_URL_TEMPLATE = (
    "https://github.com/rust-lang/mdBook/releases/download/"
    "v{version}/mdbook-v{version}-{target}.tar.gz"
)
BINARY_NAME = "mdbook"


def _extract_binary(content: bytes, tools_dir: Path) -> Path:
    with tarfile.open(fileobj=io.BytesIO(content), mode="r:gz") as tar:
        member = next(
            (m for m in tar.getmembers() if m.isfile() and Path(m.name).name == BINARY_NAME),
            None,
        )
        if member is None:
            raise ToolSetupError(
                message="Release do mdbook não contém o binário esperado",
                details={"members": tar.getnames()},
            )
        f = tar.extractfile(member)
        if f is None:
            raise ToolSetupError(message="Binário do mdbook ilegível no release", details={"member": member.name})
        data = f.read()

    tools_dir.mkdir(parents=True, exist_ok=True)
    target = tools_dir / BINARY_NAME
    target.write_bytes(data)
    target.chmod(target.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return target


@dataclass
class MdBookSetupStep(Step):
    compiler: MdBookCompiler
    tools_dir: Path
    version: str = "0.4.21"
    target: str = "x86_64-unknown-linux-gnu"
    url_template: str = DEFAULT_URL_TEMPLATE
    timeout_s: float = 60.0
    session: Optional[Any] = None
    id: str = "setup.mdbook"
    kind: StepKind = StepKind.SETUP
    depends_on: List[str] = field(default_factory=list)

    def _download(self, url: str) -> bytes:
        session = self.session if self.session is not None else requests.Session()
        try:
            resp = session.get(url, timeout=self.timeout_s)
        except requests.RequestException as e:
            raise ToolSetupError(
                message="Falha de rede ao baixar o mdbook",
                details={"url": url, "error": str(e)},
            ) from e
        if resp.status_code >= 400:
            raise ToolSetupError(
                message="Falha HTTP ao baixar o mdbook",
                details={"url": url, "status_code": resp.status_code},
                hint="Confira `tools.mdbook.version` e `tools.mdbook.target`.",
            )
        return resp.content

    def run(self, ctx: RunContext) -> StepResult:
        found = shutil.which(self.compiler.executable)
        if found:
            self.compiler.executable = found
            ctx.log(step_id=self.id, level="info", message="mdbook already available", executable=found)
            return success(
                step_id=self.id,
                kind=self.kind,
                summary="mdbook already available",
                payload={"executable": found, "downloaded": False},
            )

        url = self.url_template.format(version=self.version, target=self.target)
        ctx.log(step_id=self.id, level="info", message="downloading mdbook", url=url, version=self.version)

        content = self._download(url)
        try:
            binary = _extract_binary(content, Path(self.tools_dir))
        except (tarfile.TarError, OSError) as e:
            raise ToolSetupError(
                message="Falha ao extrair o release do mdbook",
                details={"url": url, "error": str(e)},
            ) from e

        self.compiler.executable = str(binary)
        payload: Dict[str, Any] = {
            "executable": str(binary),
            "downloaded": True,
            "version": self.version,
            "url": url,
        }
        return success(
            step_id=self.id,
            kind=self.kind,
            summary="mdbook installed",
            metrics={"bytes": len(content)},
            payload=payload,
        )
