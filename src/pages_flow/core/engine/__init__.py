# src/pages_flow/core/engine/__init__.py
"""
Engine do pages_flow.

Este pacote contém a implementação responsável por **planejar** e
**executar** os jobs de uma run de publicação.

Componentes principais:
    - planner → ordenação topológica determinística, ondas e validações estruturais
    - engine  → execução coordenada de Steps com políticas explícitas

Invariantes:
    - Steps só são executados após suas dependências
    - Cada Step é executado no máximo uma vez por job
    - O resultado da execução reflete explicitamente o estado de cada Step
"""

from .engine import Engine, RunResult
from .planner import CycleDetectedError, UnknownDependencyError, plan_execution, plan_waves

__all__ = [
    "CycleDetectedError",
    "Engine",
    "RunResult",
    "UnknownDependencyError",
    "plan_execution",
    "plan_waves",
]
