# src/pages_flow/core/engine/engine.py
"""
Engine de execução de um job de publicação do pages_flow.

Responsabilidades:
- Planejar o DAG do job (`plan_waves`) e executar os Steps na ordem planejada.
- Aplicar as políticas declaradas em config:
    - `steps.<id>.enabled: false` → SKIPPED
    - dependência FAILED (ou pulada por falha, transitivamente) → SKIPPED
      ("skipped due to failed dependency")
    - `engine.fail_fast` → nenhum Step novo inicia após a primeira falha
    - `engine.max_workers > 1` → Steps da mesma onda executam em paralelo
- Converter exceções em PagesErrorPayload (serializável e acionável),
  gravado em `StepResult.payload["error"]`, sem stack trace para o operador.
- Enriquecer cada StepResult (warnings do RunContext, metadados do payload)
  criando **novas** instâncias (StepResult é frozen).
- Registrar início e fim de cada Step no Manifest, quando fornecido.
  O Manifest só é mutado pela thread do Engine.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

import hashlib
import json

from pages_flow.core.pipeline.context import RunContext
from pages_flow.core.pipeline.step import Step
from pages_flow.core.pipeline.types import StepKind, StepResult, StepStatus
from pages_flow.core.traceability.manifest import (
    PagesManifest,
    step_failed,
    step_finished,
    step_started,
)

from pages_flow.core.errors import (
    PagesErrorPayload,
    engine_configuration_error,
    engine_execution_error,
)
from pages_flow.core.exceptions import PagesException

from .planner import plan_waves


@dataclass(frozen=True)
class RunResult:
    """Resultado agregado da execução de um job (RunResult v1)."""

    steps: Dict[str, StepResult] = field(default_factory=dict)

    @property
    def failed(self) -> List[str]:
        return [sid for sid, r in self.steps.items() if r.status == StepStatus.FAILED]

    @property
    def succeeded(self) -> bool:
        return bool(self.steps) and not self.failed

    def first_error(self) -> Optional[Dict[str, Any]]:
        for sid in self.failed:
            error = self.steps[sid].payload.get("error")
            if isinstance(error, dict):
                return error
        return None


def _now() -> datetime:
    return datetime.now(timezone.utc)


class Engine:
    """Engine canônico do pages_flow (planner + executor)."""

    def __init__(
        self,
        *,
        steps: Sequence[Step],
        ctx: RunContext,
        manifest: Optional[PagesManifest] = None,
    ):
        self.steps: List[Step] = list(steps)
        self.ctx: RunContext = ctx
        self.manifest = manifest

    def _is_enabled(self, step_id: str) -> bool:
        steps_cfg = (self.ctx.config or {}).get("steps", {}) or {}
        step_cfg = steps_cfg.get(step_id, {}) or {}
        enabled = step_cfg.get("enabled", True)
        return bool(enabled)

    def _fail_fast(self) -> bool:
        engine_cfg = (self.ctx.config or {}).get("engine", {}) or {}
        return bool(engine_cfg.get("fail_fast", True))

    def _max_workers(self) -> int:
        engine_cfg = (self.ctx.config or {}).get("engine", {}) or {}
        try:
            return max(1, int(engine_cfg.get("max_workers", 1) or 1))
        except (TypeError, ValueError):
            return 1

    # ------------------------------------------------------------------
    # Guardrails: exceção -> PagesErrorPayload
    # ------------------------------------------------------------------

    def _exception_to_error(self, step_id: str, exc: Exception) -> PagesErrorPayload:
        """Converte exceções em PagesErrorPayload.

        Regras:
        - PagesException: já vem com code/message/details/hint.
        - Outras exceções: encapsular como ENGINE_EXECUTION_ERROR sem expor stack trace.
        """
        if isinstance(exc, PagesException):
            return PagesErrorPayload(
                type=exc.code,
                message=str(exc) or "Erro de execução",
                details={"step": step_id, **dict(exc.details or {})},
                hint=exc.hint,
            )

        return engine_execution_error(
            step=step_id,
            exc_type=exc.__class__.__name__,
            exc_message=str(exc) or None,
        )

    # ------------------------------------------------------------------
    # Rastreamento: helpers para enriquecer StepResult
    # ------------------------------------------------------------------

    def _ctx_warnings_for(self, step_id: str) -> List[str]:
        warnings_map = getattr(self.ctx, "warnings", {}) or {}
        return list(warnings_map.get(step_id, []) or [])

    def _payload_meta(self, payload: Any) -> Dict[str, Any]:
        raw = json.dumps(payload, ensure_ascii=False, sort_keys=True, default=str).encode("utf-8")
        return {
            "payload_bytes": int(len(raw)),
            "payload_sha256": hashlib.sha256(raw).hexdigest(),
        }

    def _enrich_step_result(self, *, step: Step, result: StepResult) -> StepResult:
        """Retorna uma NOVA instância StepResult enriquecida (sem duplicar warnings)."""
        kind = getattr(result, "kind", None) or getattr(step, "kind", None) or StepKind.BUILD

        merged_w: List[str] = []
        for msg in list(result.warnings or []) + self._ctx_warnings_for(step.id):
            if msg not in merged_w:
                merged_w.append(msg)

        artifacts = dict(result.artifacts or {})
        artifacts.setdefault("payload_meta", self._payload_meta(result.payload or {}))

        return replace(
            result,
            step_id=step.id,
            kind=kind,
            warnings=merged_w,
            payload=dict(result.payload or {}),
            artifacts=artifacts,
        )

    def _mk_result(
        self,
        *,
        step: Step,
        status: StepStatus,
        summary: str,
        payload: Dict[str, Any] | None = None,
    ) -> StepResult:
        kind = getattr(step, "kind", None) or StepKind.BUILD
        r = StepResult(
            step_id=step.id,
            kind=kind,
            status=status,
            summary=summary,
            payload=dict(payload or {}),
        )
        return self._enrich_step_result(step=step, result=r)

    # ------------------------------------------------------------------
    # Manifest
    # ------------------------------------------------------------------

    def _kind_value(self, step: Step) -> str:
        kind = getattr(step, "kind", None) or StepKind.BUILD
        return kind.value if isinstance(kind, StepKind) else str(kind)

    def _record_started(self, step: Step) -> None:
        if self.manifest is not None:
            step_started(self.manifest, step_id=step.id, kind=self._kind_value(step), ts=_now(), job=self.ctx.job)

    def _record_result(self, result: StepResult) -> None:
        if self.manifest is None:
            return
        error = result.payload.get("error")
        if result.status == StepStatus.FAILED and isinstance(error, dict):
            step_failed(self.manifest, step_id=result.step_id, ts=_now(), error=error)
        else:
            step_finished(self.manifest, step_id=result.step_id, ts=_now(), result=result.to_dict())

    # ------------------------------------------------------------------
    # Execução
    # ------------------------------------------------------------------

    @staticmethod
    def _blocks(result: StepResult) -> bool:
        # falha se propaga por toda a cadeia; desabilitado por config não bloqueia
        if result.status == StepStatus.FAILED:
            return True
        return result.status == StepStatus.SKIPPED and "failed_dependencies" in (result.payload or {})

    def _precheck(self, step: Step, results: Dict[str, StepResult]) -> Optional[StepResult]:
        if not self._is_enabled(step.id):
            self.ctx.log(step_id=step.id, level="info", message="skipped by config")
            return self._mk_result(step=step, status=StepStatus.SKIPPED, summary="skipped by config")

        deps = list(getattr(step, "depends_on", []) or [])
        failed = [d for d in deps if d in results and self._blocks(results[d])]
        if failed:
            self.ctx.log(step_id=step.id, level="warning", message="skipped due to failed dependency", failed_dependencies=failed)
            return self._mk_result(
                step=step,
                status=StepStatus.SKIPPED,
                summary="skipped due to failed dependency",
                payload={"failed_dependencies": failed},
            )
        return None

    def _run_step(self, step: Step) -> StepResult:
        sid = step.id
        try:
            step_result = step.run(self.ctx)
            if not isinstance(step_result, StepResult):
                raise TypeError("Step.run(ctx) must return StepResult")
            return self._enrich_step_result(step=step, result=step_result)

        except Exception as e:
            if isinstance(e, TypeError) and "must return StepResult" in (str(e) or ""):
                error = engine_configuration_error(
                    message="Step retornou tipo inválido",
                    details={"step": sid, "expected": "StepResult"},
                    hint="Ajuste o Step para retornar StepResult",
                )
            else:
                error = self._exception_to_error(sid, e)

            self.ctx.log(
                step_id=sid,
                level="error",
                message=error.message,
                error_type=error.type,
            )
            return self._mk_result(
                step=step,
                status=StepStatus.FAILED,
                summary=error.message,
                payload={"error": error.to_dict()},
            )

    def _execute_sequential(self, wave: List[Step]) -> Iterator[Tuple[Step, StepResult]]:
        for step in wave:
            self._record_started(step)
            yield step, self._run_step(step)

    def _execute_parallel(self, wave: List[Step], workers: int) -> Iterator[Tuple[Step, StepResult]]:
        for step in wave:
            self._record_started(step)
        with ThreadPoolExecutor(max_workers=min(workers, len(wave))) as pool:
            futures = [(step, pool.submit(self._run_step, step)) for step in wave]
            collected = [(step, fut.result()) for step, fut in futures]
        yield from collected

    def run(self) -> RunResult:
        waves = plan_waves(self.steps)
        workers = self._max_workers()

        results: Dict[str, StepResult] = {}
        stop = False
        for wave in waves:
            runnable: List[Step] = []
            for step in wave:
                skipped = self._precheck(step, results)
                if skipped is not None:
                    results[step.id] = skipped
                    self._record_result(skipped)
                else:
                    runnable.append(step)

            if not runnable:
                continue

            if workers > 1 and len(runnable) > 1:
                executed = self._execute_parallel(runnable, workers)
            else:
                executed = self._execute_sequential(runnable)

            for step, result in executed:
                results[step.id] = result
                self._record_result(result)
                if result.status == StepStatus.FAILED and self._fail_fast():
                    stop = True
                    if workers <= 1:
                        break

            if stop:
                break

        return RunResult(steps=results)
