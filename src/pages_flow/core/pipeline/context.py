# src/pages_flow/core/pipeline/context.py
"""
Contexto de execução compartilhado de um job de publicação.

O `RunContext` é o único meio permitido de:
    - troca indireta de informações entre Steps (ex.: o bundle produzido)
    - registro de logs estruturados de execução
    - coleta de warnings não fatais associados a Steps

Princípios fundamentais:
    - Isolamento por job (cada job possui seu próprio contexto)
    - Comunicação explícita e rastreável
    - Ausência de estado global compartilhado

Invariantes:
    - Artefatos são indexados por chave explícita
    - Logs sempre incluem `run_id`, `job` e `step_id`
    - Warnings são agrupados por `step_id`
    - Logs e warnings podem ser registrados por Steps executando em paralelo

Limites explícitos:
    - Não executa Steps
    - Não persiste dados automaticamente
    - Não registra eventos no Manifest
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


@dataclass
class RunContext:
    """
    Contexto de execução de um job (`build` ou `deploy`) de uma run.

    Campos:
        - run_id: identificador da run de publicação
        - created_at: timestamp UTC de criação do contexto
        - config: configuração efetiva resolvida
        - event: evento da run upstream que disparou a publicação
        - job: nome do job ao qual o contexto pertence
        - meta: metadados livres (ex.: run_dir)
    """
    run_id: str
    created_at: datetime
    config: Dict[str, Any]
    event: Optional[Any] = None
    job: str = "build"
    meta: Dict[str, Any] = field(default_factory=dict)

    _artifacts: Dict[str, Any] = field(default_factory=dict, init=False, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False, compare=False)
    events: List[Dict[str, Any]] = field(default_factory=list, init=False)
    warnings: Dict[str, List[str]] = field(default_factory=dict, init=False)

    # -----------------------------
    # Artifact store
    # -----------------------------
    def set_artifact(self, key: str, value: Any) -> None:
        with self._lock:
            self._artifacts[key] = value

    def has_artifact(self, key: str) -> bool:
        return key in self._artifacts

    def get_artifact(self, key: str) -> Any:
        if key not in self._artifacts:
            raise KeyError(key)
        return self._artifacts[key]

    # -----------------------------
    # Logging & warnings
    # -----------------------------
    def log(self, *, step_id: str, level: str, message: str, **extra: Any) -> None:
        event = {
            "run_id": self.run_id,
            "job": self.job,
            "step_id": step_id,
            "level": level,
            "message": message,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        event.update(extra)
        with self._lock:
            self.events.append(event)

    def add_warning(self, *, step_id: str, message: str) -> None:
        with self._lock:
            self.warnings.setdefault(step_id, []).append(message)
