# src/pages_flow/core/pipeline/registry.py
"""
Registro estrutural de Steps de um job.

O registry garante, antes de qualquer planejamento:
    - cada Step possui um identificador válido
    - não existem identificadores duplicados
    - a ordem de declaração dos Steps é preservada

Limites explícitos:
    - Não planeja execução (não é DAG planner)
    - Não executa Steps
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List

from .step import Step


class DuplicateStepIdError(ValueError):
    """
    Exceção levantada quando dois Steps do mesmo job compartilham o `step.id`.

    A duplicidade é tratada como erro fatal de configuração, detectado no
    momento do registro e antes de qualquer execução.
    """


@dataclass
class StepRegistry:
    """Registro canônico de Steps para validação estrutural pré-execução."""

    _steps: Dict[str, Step] = field(default_factory=dict, init=False, repr=False)
    _order: List[str] = field(default_factory=list, init=False, repr=False)

    @classmethod
    def of(cls, steps: Iterable[Step]) -> "StepRegistry":
        registry = cls()
        for step in steps:
            registry.add(step)
        return registry

    def add(self, step: Step) -> None:
        step_id = getattr(step, "id", None)
        if not isinstance(step_id, str) or not step_id.strip():
            raise ValueError("step.id must be a non-empty string")

        if step_id in self._steps:
            raise DuplicateStepIdError(f"Duplicate step id: {step_id}")

        self._steps[step_id] = step
        self._order.append(step_id)

    def get(self, step_id: str) -> Step:
        return self._steps[step_id]

    def ids(self) -> List[str]:
        return list(self._order)

    def list(self) -> List[Step]:
        return [self._steps[sid] for sid in self._order]
