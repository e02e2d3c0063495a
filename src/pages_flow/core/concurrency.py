# src/pages_flow/core/concurrency.py
"""
Grupos de concorrência entre runs de publicação.

Cada run entra em um grupo identificado por uma chave (`concurrency.group`).
Com `cancel_in_progress` habilitado, uma run mais nova substitui a anterior:
a run antiga passa a ser considerada cancelada.

Runs do mesmo grupo compartilham a raiz do site, o diretório do bundle e o
alvo de deploy. Por isso a execução é exclusiva por grupo: `acquire` bloqueia
até que a run que ocupa o grupo chame `leave`. Runs em espera são atendidas
uma de cada vez; uma run substituída enquanto esperava encontra
`is_cancelled` verdadeiro ao entrar e termina sem construir nada.

O cancelamento é cooperativo e verificado apenas nas fronteiras de início
de job (antes de `build` e antes de `deploy`), nunca no meio de um Step.

Limites explícitos:
    - Não interrompe threads nem processos
    - Não persiste estado entre processos
"""

from __future__ import annotations

import threading
from typing import Dict, List, Optional


class ConcurrencyGroup:
    """Registro em memória, thread-safe, da run mais recente e da run em execução por chave."""

    def __init__(self) -> None:
        self._cond = threading.Condition()
        self._latest: Dict[str, str] = {}
        self._cancel_in_progress: Dict[str, bool] = {}
        self._active: Dict[str, List[str]] = {}
        self._holder: Dict[str, str] = {}

    def enter(self, key: str, run_id: str, *, cancel_in_progress: bool = True) -> None:
        """Registra a run no grupo (não bloqueia) e a torna a mais recente."""
        with self._cond:
            self._cancel_in_progress[key] = bool(cancel_in_progress)
            self._latest[key] = run_id
            self._active.setdefault(key, [])
            if run_id not in self._active[key]:
                self._active[key].append(run_id)

    def acquire(self, key: str, run_id: str, *, timeout_s: Optional[float] = None) -> bool:
        """Aguarda a posse exclusiva do grupo. Retorna False se `timeout_s` expirar."""
        with self._cond:
            free = self._cond.wait_for(
                lambda: self._holder.get(key) in (None, run_id),
                timeout=timeout_s,
            )
            if free:
                self._holder[key] = run_id
            return bool(free)

    def holder(self, key: str) -> Optional[str]:
        with self._cond:
            return self._holder.get(key)

    def is_cancelled(self, key: str, run_id: str) -> bool:
        with self._cond:
            if not self._cancel_in_progress.get(key, True):
                return False
            latest = self._latest.get(key)
            return latest is not None and latest != run_id

    def leave(self, key: str, run_id: str) -> None:
        with self._cond:
            if self._holder.get(key) == run_id:
                self._holder.pop(key)
            active = self._active.get(key, [])
            if run_id in active:
                active.remove(run_id)
            if not active:
                self._active.pop(key, None)
                if self._latest.get(key) == run_id:
                    self._latest.pop(key, None)
            self._cond.notify_all()

    def active(self, key: str) -> List[str]:
        with self._cond:
            return list(self._active.get(key, []))
