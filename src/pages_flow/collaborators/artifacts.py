# src/pages_flow/collaborators/artifacts.py
"""
Recuperação de artefatos de runs upstream via API REST do GitHub.

Fluxo de `GitHubArtifactDownloader.download`:
    1. Busca a run (`/actions/runs/{run_id}`) e confere workflow de origem
       e conclusão exigida
    2. Lista os artefatos da run filtrando por nome (não expirados)
    3. Baixa o arquivo zip do artefato e extrai em `dest_dir`

Falhas fatais (sem fallback):
    - run ou artefato inexistente → ArtifactNotFoundError
    - conclusão divergente → ArtifactConclusionMismatchError
    - erro de rede ou HTTP após as tentativas → ArtifactDownloadError

Erros transitórios (conexão, timeout, HTTP 429/5xx) são repetidos com
backoff exponencial limitado (`github.retry.*`), via tenacity.
"""

from __future__ import annotations

import io
import time
import zipfile
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Any, Callable, Dict, List, Mapping, Optional

import requests
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from pages_flow.core.exceptions import (
    ArtifactConclusionMismatchError,
    ArtifactDownloadError,
    ArtifactNotFoundError,
    CollaboratorUnavailableError,
)

RETRYABLE_STATUS = frozenset({429, 500, 502, 503, 504})
HTTP_NOT_FOUND = 404


class TransientHTTPError(Exception):
    """Resposta HTTP que merece nova tentativa (429 / 5xx)."""

    def __init__(self, status_code: int, url: str):
        super().__init__(f"HTTP {status_code} for {url}")
        self.status_code = status_code
        self.url = url


@dataclass(frozen=True)
class RetryPolicy:
    attempts: int = 3
    initial_wait_s: float = 1.0
    max_wait_s: float = 10.0

    @classmethod
    def from_config(cls, cfg: Mapping[str, Any]) -> "RetryPolicy":
        return cls(
            attempts=max(1, int(cfg.get("attempts", 3))),
            initial_wait_s=float(cfg.get("initial_wait_s", 1.0)),
            max_wait_s=float(cfg.get("max_wait_s", 10.0)),
        )


def _matches_workflow(run: Mapping[str, Any], source_workflow: str) -> bool:
    if not source_workflow:
        return True
    path = str(run.get("path") or "")
    candidates = {
        path,
        PurePosixPath(path).name if path else "",
        str(run.get("name") or ""),
        str(run.get("workflow_id") or ""),
    }
    wanted = source_workflow.strip()
    return wanted in candidates or (bool(path) and path.endswith(wanted))


def _extract_zip(content: bytes, dest_dir: Path) -> List[str]:
    dest_dir.mkdir(parents=True, exist_ok=True)
    root = dest_dir.resolve()
    with zipfile.ZipFile(io.BytesIO(content)) as zf:
        names = zf.namelist()
        for name in names:
            target = (root / name).resolve()
            if not target.is_relative_to(root):
                raise ArtifactDownloadError(
                    message="Artefato contém caminho fora do destino",
                    details={"member": name},
                )
        zf.extractall(root)
    return sorted(n for n in names if not n.endswith("/"))


@dataclass
class GitHubArtifactDownloader:
    repository: str
    token: str = ""
    api_url: str = "https://api.github.com"
    timeout_s: float = 30.0
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    session: Optional[Any] = None
    sleep: Callable[[float], None] = time.sleep

    def _session(self) -> Any:
        if self.session is None:
            self.session = requests.Session()
        return self.session

    def _headers(self) -> Dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _get_once(self, url: str, params: Optional[Dict[str, Any]], stream: bool) -> Any:
        resp = self._session().get(
            url,
            headers=self._headers(),
            params=params,
            timeout=self.timeout_s,
            stream=stream,
        )
        if resp.status_code in RETRYABLE_STATUS:
            raise TransientHTTPError(resp.status_code, url)
        return resp

    def _get(self, url: str, *, params: Optional[Dict[str, Any]] = None, stream: bool = False) -> Any:
        retrying = Retrying(
            stop=stop_after_attempt(self.retry.attempts),
            wait=wait_exponential(multiplier=self.retry.initial_wait_s, max=self.retry.max_wait_s),
            retry=retry_if_exception_type((requests.ConnectionError, requests.Timeout, TransientHTTPError)),
            sleep=self.sleep,
            reraise=True,
        )
        return retrying(self._get_once, url, params, stream)

    def _json(self, resp: Any, *, what: str, not_found: ArtifactNotFoundError) -> Dict[str, Any]:
        if resp.status_code == HTTP_NOT_FOUND:
            raise not_found
        if resp.status_code >= 400:
            raise ArtifactDownloadError(
                message=f"Falha HTTP ao consultar {what}",
                details={"status_code": resp.status_code, "url": getattr(resp, "url", None)},
            )
        data = resp.json()
        if not isinstance(data, dict):
            raise ArtifactDownloadError(message=f"Resposta inválida ao consultar {what}", details={})
        return data

    def download(
        self,
        artifact_name: str,
        source_workflow: str,
        run_id: int,
        required_conclusion: str,
        dest_dir: Path,
    ) -> int:
        if not self.repository:
            raise CollaboratorUnavailableError(
                message="Repositório GitHub não configurado",
                details={"artifact": artifact_name},
                hint="Defina `github.repository` (owner/name) na configuração local.",
            )

        base = f"{self.api_url.rstrip('/')}/repos/{self.repository}/actions/runs/{run_id}"
        details = {"artifact": artifact_name, "run_id": run_id, "workflow": source_workflow}

        try:
            run = self._json(
                self._get(base),
                what="run",
                not_found=ArtifactNotFoundError(message="Run de origem não encontrada", details=details),
            )

            if not _matches_workflow(run, source_workflow):
                raise ArtifactNotFoundError(
                    message="Run de origem não pertence ao workflow esperado",
                    details={**details, "run_path": run.get("path"), "run_name": run.get("name")},
                )

            conclusion = run.get("conclusion")
            if conclusion != required_conclusion:
                raise ArtifactConclusionMismatchError(
                    message="Conclusão da run de origem diverge da exigida",
                    details={**details, "required": required_conclusion, "actual": conclusion},
                )

            listing = self._json(
                self._get(f"{base}/artifacts", params={"name": artifact_name, "per_page": 100}),
                what="artifacts",
                not_found=ArtifactNotFoundError(message="Artefato não encontrado", details=details),
            )
            candidates = [
                a for a in (listing.get("artifacts") or [])
                if isinstance(a, dict) and a.get("name") == artifact_name and not a.get("expired", False)
            ]
            if not candidates:
                raise ArtifactNotFoundError(message="Artefato não encontrado", details=details)

            chosen = max(candidates, key=lambda a: int(a.get("id") or 0))
            resp = self._get(str(chosen.get("archive_download_url")), stream=True)
            if resp.status_code >= 400:
                raise ArtifactDownloadError(
                    message="Falha HTTP ao baixar artefato",
                    details={**details, "status_code": resp.status_code},
                )
            content = b"".join(resp.iter_content(chunk_size=1 << 16))

        except (requests.RequestException, TransientHTTPError) as e:
            raise ArtifactDownloadError(
                message="Falha de rede ao baixar artefato",
                details={**details, "error": str(e)},
                hint="Falha transitória persistente após as tentativas configuradas em `github.retry`.",
            ) from e

        try:
            _extract_zip(content, Path(dest_dir))
        except zipfile.BadZipFile as e:
            raise ArtifactDownloadError(
                message="Arquivo do artefato não é um zip válido",
                details=details,
            ) from e

        return 0
