# src/pages_flow/core/traceability/manifest.py
"""
Manifest v1 — rastreabilidade de runs de publicação do pages_flow.

O Manifest consolida, de forma determinística e auditável:
    - metadados da run (run_id, started_at, versão, evento upstream)
    - hash da configuração efetiva
    - estado incremental dos Steps de todos os jobs
    - Event Log ordenado de eventos explícitos (run, jobs, gate, steps)

Princípios fundamentais:
    - Nenhum evento é emitido implicitamente
    - Toda mutação ocorre por chamadas explícitas da API
    - A ordem do Event Log reflete a ordem real de execução
    - O Manifest é serializável e reconstruível (round-trip)

Decisões arquiteturais:
    - UTC é o timezone canônico para todos os timestamps
    - O formato de persistência é JSON determinístico
    - As funções aceitam o Manifest como objeto ou como dict

Limites explícitos:
    - Não executa pipeline
    - Não decide políticas de execução (fail-fast, skip)
    - Não realiza migração de versões de schema
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Union, Tuple


def _ensure_tzaware_utc(dt: datetime) -> datetime:
    """Normaliza um timestamp para timezone-aware em UTC (naive é assumido UTC)."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _iso(dt: datetime) -> str:
    return _ensure_tzaware_utc(dt).isoformat()


def _ms_between(start: datetime, end: datetime) -> int:
    """Duração em milissegundos entre dois timestamps, nunca negativa."""
    s = _ensure_tzaware_utc(start)
    e = _ensure_tzaware_utc(end)
    return max(0, int((e - s).total_seconds() * 1000))


@dataclass
class PagesManifest:
    """
    Manifest v1 — registro forense de uma run de publicação.

    Campos principais:
        - run: metadados da execução (run_id, started_at, pages_flow_version, trigger)
        - inputs: hash da configuração resolvida
        - steps: estado incremental de cada Step, indexado por step_id
        - events: Event Log ordenado de eventos explícitos

    Invariantes:
        - `steps` é sempre um dicionário indexado por step_id
        - `events` é sempre uma lista ordenada
        - A estrutura completa é serializável
    """

    run: Dict[str, Any]
    inputs: Dict[str, Any]
    steps: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    events: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Cópia serializável e independente do estado interno."""
        return {
            "run": dict(self.run),
            "inputs": dict(self.inputs),
            "steps": {k: dict(v) for k, v in self.steps.items()},
            "events": [dict(e) for e in self.events],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PagesManifest":
        """Reconstrução permissiva a partir de `to_dict` (campos ausentes viram vazios)."""
        return cls(
            run=dict(data.get("run", {})),
            inputs=dict(data.get("inputs", {})),
            steps={k: dict(v) for k, v in (data.get("steps", {}) or {}).items()},
            events=[dict(e) for e in (data.get("events", []) or [])],
        )


def create_manifest(
    *,
    run_id: str,
    started_at: datetime,
    pages_flow_version: str,
    config_hash: str,
    trigger: Optional[Dict[str, Any]] = None,
) -> PagesManifest:
    """
    Cria o Manifest inicial de uma run de publicação.

    Esta função **não emite eventos implicitamente**: o Event Log inicia
    vazio e só é preenchido por `add_event`, `step_started`,
    `step_finished` ou `step_failed`.

    Args:
        run_id (str): Identificador único da run.
        started_at (datetime): Timestamp de início.
        pages_flow_version (str): Versão do pages_flow utilizada.
        config_hash (str): Hash da configuração resolvida.
        trigger (Optional[Dict[str, Any]]): Evento upstream serializado.

    Returns:
        PagesManifest: Instância inicializada do Manifest v1.
    """
    started_at = _ensure_tzaware_utc(started_at)

    return PagesManifest(
        run={
            "run_id": run_id,
            "started_at": _iso(started_at),
            "pages_flow_version": pages_flow_version,
            "trigger": dict(trigger or {}),
        },
        inputs={
            "config_hash": config_hash,
        },
        steps={},
        events=[],
    )


def _get_manifest(manifest: Union[PagesManifest, Dict[str, Any]]) -> Tuple[PagesManifest, bool]:
    if isinstance(manifest, PagesManifest):
        return manifest, False
    return PagesManifest.from_dict(manifest), True


def _sync_back(original: Union[PagesManifest, Dict[str, Any]], m: PagesManifest, is_dict: bool) -> None:
    if is_dict:
        original.clear()  # type: ignore[union-attr]
        original.update(m.to_dict())  # type: ignore[union-attr]


def add_event(
    manifest: Union[PagesManifest, Dict[str, Any]],
    *,
    event_type: str,
    ts: datetime,
    step_id: Optional[str] = None,
    payload: Optional[Dict[str, Any]] = None,
) -> None:
    """
    Adiciona um evento explícito ao Event Log do Manifest.

    A ordem de chamada é a ordem canônica do Event Log. Eventos de escopo
    global (ex.: `run_started`, `job_started`, `gate_transition`) não
    possuem `step_id`.
    """
    ts = _ensure_tzaware_utc(ts)
    m, is_dict = _get_manifest(manifest)

    ev: Dict[str, Any] = {"event_type": event_type, "timestamp": _iso(ts)}
    if step_id is not None:
        ev["step_id"] = step_id
    if payload is not None:
        ev["payload"] = payload

    m.events.append(ev)
    _sync_back(manifest, m, is_dict)


def step_started(
    manifest: Union[PagesManifest, Dict[str, Any]],
    *,
    step_id: str,
    kind: str,
    ts: datetime,
    job: Optional[str] = None,
) -> None:
    """Marca um Step como `running` e registra `step_started` no Event Log."""
    ts = _ensure_tzaware_utc(ts)
    m, is_dict = _get_manifest(manifest)

    entry = m.steps.setdefault(step_id, {})
    entry.update(
        {
            "step_id": step_id,
            "kind": kind,
            "status": "running",
            "started_at": _iso(ts),
        }
    )
    if job is not None:
        entry["job"] = job

    add_event(m, event_type="step_started", ts=ts, step_id=step_id, payload={"kind": kind})
    _sync_back(manifest, m, is_dict)


def step_finished(
    manifest: Union[PagesManifest, Dict[str, Any]],
    *,
    step_id: str,
    ts: datetime,
    result: Dict[str, Any],
) -> None:
    """
    Registra a conclusão de um Step (status final, duração e metadados).

    A duração é calculada a partir de `started_at` quando disponível;
    Steps pulados (nunca iniciados) recebem duração zero.
    """
    ts = _ensure_tzaware_utc(ts)
    m, is_dict = _get_manifest(manifest)

    s = m.steps.setdefault(step_id, {"step_id": step_id})
    started_iso = s.get("started_at")
    started_dt = ts
    if started_iso:
        try:
            started_dt = datetime.fromisoformat(started_iso)
        except ValueError:
            started_dt = ts

    status = result.get("status", "success")
    s.update(
        {
            "status": status,
            "finished_at": _iso(ts),
            "duration_ms": _ms_between(started_dt, ts),
            "summary": result.get("summary"),
            "metrics": result.get("metrics", {}) or {},
            "warnings": result.get("warnings", []) or [],
            "artifacts": result.get("artifacts", {}) or {},
        }
    )
    if result.get("kind") and "kind" not in s:
        s["kind"] = result["kind"]

    add_event(
        m,
        event_type="step_finished",
        ts=ts,
        step_id=step_id,
        payload={"status": status, "duration_ms": s.get("duration_ms", 0)},
    )
    _sync_back(manifest, m, is_dict)


def step_failed(
    manifest: Union[PagesManifest, Dict[str, Any]],
    *,
    step_id: str,
    ts: datetime,
    error: Dict[str, Any],
) -> None:
    """Marca um Step como `failed`, associa o payload de erro e registra `step_failed`."""
    ts = _ensure_tzaware_utc(ts)
    m, is_dict = _get_manifest(manifest)

    s = m.steps.setdefault(step_id, {"step_id": step_id})
    started_iso = s.get("started_at")
    duration = 0
    if started_iso:
        try:
            duration = _ms_between(datetime.fromisoformat(started_iso), ts)
        except ValueError:
            duration = 0

    s.update(
        {
            "status": "failed",
            "finished_at": _iso(ts),
            "duration_ms": duration,
            "summary": error.get("message"),
            "error": dict(error),
        }
    )

    add_event(m, event_type="step_failed", ts=ts, step_id=step_id, payload={"error": error.get("type")})
    _sync_back(manifest, m, is_dict)


def save_manifest(manifest: Union[PagesManifest, Dict[str, Any]], path: Path) -> None:
    """
    Persiste um Manifest em disco no formato JSON determinístico.

    Diretórios intermediários são criados automaticamente.

    Raises:
        OSError: Em caso de falha ao criar diretórios ou escrever o arquivo.
        TypeError: Se o conteúdo do Manifest não for serializável em JSON.
    """
    data = manifest.to_dict() if isinstance(manifest, PagesManifest) else manifest
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, ensure_ascii=False, indent=2, sort_keys=True), encoding="utf-8")


def load_manifest(path: Path) -> PagesManifest:
    """Carrega um Manifest persistido (propaga OSError / JSONDecodeError)."""
    data = json.loads(path.read_text(encoding="utf-8"))
    return PagesManifest.from_dict(data)
