# src/pages_flow/core/pipeline/step.py
"""
Contrato canônico de Step do pages_flow.

Um Step é a menor unidade executável de um job de publicação: criar a
raiz do site, compilar um livro, baixar um artefato, empacotar, publicar.

Princípios fundamentais:
    - Steps não conhecem o Engine nem o planner
    - Steps não controlam ordem de execução
    - Comunicação entre Steps é mediada pelo RunContext
    - Conformidade é garantida por duck typing (@runtime_checkable)

Invariantes:
    - Cada Step possui um `id` único dentro do job
    - Cada Step declara explicitamente suas dependências
    - O método `run` é chamado no máximo uma vez por execução
    - Cada Step escreve apenas dentro do seu próprio subdiretório
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable, List

from .context import RunContext
from .types import StepKind, StepResult


@runtime_checkable
class Step(Protocol):
    """
    Contrato canônico de um Step do pages_flow.

    Atributos obrigatórios:
        - id: identificador único e estável do Step
        - kind: classificação semântica do Step (`StepKind`)
        - depends_on: lista de `step_id` dos Steps dos quais depende

    Falhas são sinalizadas levantando exceções (preferencialmente
    `PagesException`); o Engine as converte em `StepResult` FAILED.

    Limites explícitos:
        - Não define lógica de retry
        - Não registra eventos no Manifest diretamente
        - Não decide políticas de execução (fail-fast, skip)
    """
    id: str
    kind: StepKind
    depends_on: List[str]

    def run(self, ctx: RunContext) -> StepResult:
        """Executa a etapa uma única vez usando exclusivamente o RunContext."""
        ...
