# src/pages_flow/collaborators/__init__.py
"""
Colaboradores externos da publicação e sua montagem a partir da config.

`Collaborators` agrupa uma implementação de cada contrato. `default`
monta as implementações reais (mdbook, jekyll, API do GitHub, tar.gz,
diretório publicado); testes injetam fakes diretamente.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from pages_flow.layout import resolve_path, Layout

from .artifacts import GitHubArtifactDownloader, RetryPolicy
from .book import MdBookCompiler
from .deploy import DirectoryDeployer
from .packaging import TarPackager
from .site import JekyllGenerator
from .types import (
    ArtifactDownloader,
    BookCompiler,
    BundleHandle,
    Deployer,
    DeploymentResult,
    Packager,
    SiteGenerator,
)


def _timeout(section: Mapping[str, Any]) -> Optional[float]:
    value = section.get("timeout_s")
    return float(value) if value is not None else None


def _cfg(config: Mapping[str, Any], *keys: str) -> Dict[str, Any]:
    node: Any = config
    for key in keys:
        node = (node or {}).get(key, {}) if isinstance(node, Mapping) else {}
    return node if isinstance(node, dict) else {}


@dataclass
class Collaborators:
    book_compiler: BookCompiler
    artifact_downloader: ArtifactDownloader
    site_generator: SiteGenerator
    packager: Packager
    deployer: Deployer

    @classmethod
    def default(cls, config: Mapping[str, Any]) -> "Collaborators":
        workspace = Layout.from_config(config).workspace
        github = _cfg(config, "github")
        mdbook = _cfg(config, "tools", "mdbook")
        jekyll = _cfg(config, "tools", "jekyll")
        package = _cfg(config, "package")
        deploy = _cfg(config, "deploy")

        return cls(
            book_compiler=MdBookCompiler(
                executable=str(mdbook.get("path") or "mdbook"),
                timeout_s=_timeout(mdbook),
            ),
            artifact_downloader=GitHubArtifactDownloader(
                repository=str(github.get("repository") or ""),
                token=str(github.get("token") or ""),
                api_url=str(github.get("api_url") or "https://api.github.com"),
                timeout_s=float(github.get("timeout_s", 30)),
                retry=RetryPolicy.from_config(_cfg(config, "github", "retry")),
            ),
            site_generator=JekyllGenerator(
                command=list(jekyll.get("command") or ["jekyll"]),
                timeout_s=_timeout(jekyll),
            ),
            packager=TarPackager(
                output_dir=resolve_path(workspace, package.get("output_dir", ".pages_flow/bundle")),
                filename=str(package.get("filename") or "artifact.tar.gz"),
            ),
            deployer=DirectoryDeployer(
                target_dir=resolve_path(workspace, deploy.get("target_dir", ".pages_flow/published")),
                base_url=str(deploy.get("base_url") or ""),
            ),
        )


__all__ = [
    "ArtifactDownloader",
    "BookCompiler",
    "BundleHandle",
    "Collaborators",
    "Deployer",
    "DeploymentResult",
    "DirectoryDeployer",
    "GitHubArtifactDownloader",
    "JekyllGenerator",
    "MdBookCompiler",
    "Packager",
    "RetryPolicy",
    "SiteGenerator",
    "TarPackager",
]
