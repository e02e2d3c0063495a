# src/pages_flow/collaborators/types.py
"""
Contratos dos colaboradores externos consumidos pela publicação.

Os colaboradores são caixas-pretas: o pages_flow conhece apenas as
entradas (diretório de origem, diretório de destino, identificadores) e
as saídas (exit code, bundle, URL). Qualquer implementação que satisfaça
estes protocolos pode ser injetada (ferramenta real, fake de teste).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Protocol, Tuple, runtime_checkable


@dataclass(frozen=True)
class BundleHandle:
    """Forma empacotada e opaca da árvore de saída, pronta para deploy."""

    path: Path
    root: Path
    sha256: str
    bytes: int
    file_count: int
    entries: Tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": str(self.path),
            "root": str(self.root),
            "sha256": self.sha256,
            "bytes": self.bytes,
            "file_count": self.file_count,
            "entries": list(self.entries),
        }


@dataclass(frozen=True)
class DeploymentResult:
    url: str
    status: str

    @property
    def succeeded(self) -> bool:
        return self.status == "succeeded"


@runtime_checkable
class BookCompiler(Protocol):
    def build(self, destination_dir: Path, source_dir: Path) -> int:
        """Compila o livro em `source_dir` para `destination_dir`; retorna o exit code."""
        ...


@runtime_checkable
class ArtifactDownloader(Protocol):
    def download(
        self,
        artifact_name: str,
        source_workflow: str,
        run_id: int,
        required_conclusion: str,
        dest_dir: Path,
    ) -> int:
        """Baixa o artefato da run `run_id` para `dest_dir`; retorna o exit code."""
        ...


@runtime_checkable
class SiteGenerator(Protocol):
    def generate(self, source_dir: Path, destination_dir: Path) -> int:
        """Gera o site estático de `source_dir` em `destination_dir`; retorna o exit code."""
        ...


@runtime_checkable
class Packager(Protocol):
    def package(self, root_dir: Path) -> BundleHandle:
        ...


@runtime_checkable
class Deployer(Protocol):
    def deploy(self, bundle: BundleHandle) -> DeploymentResult:
        ...
