# src/pages_flow/collaborators/deploy.py
from __future__ import annotations

import shutil
import tarfile
from dataclasses import dataclass
from pathlib import Path

from pages_flow.core.exceptions import DeployFailedError

from .types import BundleHandle, DeploymentResult


def _safe_extract(bundle_path: Path, target: Path) -> None:
    root = target.resolve()
    with tarfile.open(bundle_path, mode="r:gz") as tar:
        for member in tar.getmembers():
            dest = (root / member.name).resolve()
            if not dest.is_relative_to(root) or member.issym() or member.islnk():
                raise DeployFailedError(
                    message="Bundle contém membro inseguro",
                    details={"member": member.name},
                )
        tar.extractall(root, filter="data")


@dataclass
class DirectoryDeployer:
    """Publica o bundle substituindo o conteúdo de um diretório servido estaticamente.

    A URL pública é `base_url` quando configurada; caso contrário, a URI
    `file://` do diretório publicado.
    """

    target_dir: Path
    base_url: str = ""

    def deploy(self, bundle: BundleHandle) -> DeploymentResult:
        bundle_path = Path(bundle.path)
        if not bundle_path.is_file():
            raise DeployFailedError(
                message="Bundle não encontrado para deploy",
                details={"bundle": str(bundle_path)},
            )

        target = Path(self.target_dir)
        staging = target.with_name(target.name + ".staging")
        if staging.exists():
            shutil.rmtree(staging)
        staging.mkdir(parents=True)

        try:
            _safe_extract(bundle_path, staging)
        except DeployFailedError:
            shutil.rmtree(staging, ignore_errors=True)
            raise
        except (tarfile.TarError, OSError) as e:
            shutil.rmtree(staging, ignore_errors=True)
            raise DeployFailedError(
                message="Falha ao extrair bundle",
                details={"bundle": str(bundle_path), "error": str(e)},
            ) from e

        if target.exists():
            shutil.rmtree(target)
        staging.rename(target)

        url = self.base_url or target.resolve().as_uri()
        return DeploymentResult(url=url, status="succeeded")
