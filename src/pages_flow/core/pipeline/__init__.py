# src/pages_flow/core/pipeline/__init__.py
"""
# Pipeline Core — pages_flow

Contratos canônicos e estruturas fundamentais de um job de publicação.

Um job é modelado como um **DAG explícito de Steps**, onde:
- cada Step declara identidade, tipo semântico e dependências
- a execução é coordenada exclusivamente pelo Engine
- o estado compartilhado é mediado pelo `RunContext`

## Componentes

- **types**: `StepStatus`, `StepKind`, `StepResult`
- **step**: `Step` (Protocol)
- **context**: `RunContext`
- **registry**: `StepRegistry`
"""

from .context import RunContext
from .registry import DuplicateStepIdError, StepRegistry
from .step import Step
from .types import StepKind, StepResult, StepStatus

__all__ = [
    "DuplicateStepIdError",
    "RunContext",
    "Step",
    "StepKind",
    "StepRegistry",
    "StepResult",
    "StepStatus",
]
