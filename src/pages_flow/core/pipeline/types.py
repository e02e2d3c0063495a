# src/pages_flow/core/pipeline/types.py
"""
Tipos canônicos do pipeline do pages_flow.

Este módulo define as estruturas e enums fundamentais que padronizam
a comunicação entre Steps, Engine e camadas de rastreabilidade.

Componentes principais:
    - StepStatus → enum de estados finais (SUCCESS, SKIPPED, FAILED)
    - StepKind   → enum de classificação semântica de Steps
    - StepResult → estrutura imutável de resultado de execução

Invariantes:
    - Enums possuem valores textuais canônicos
    - StepResult é imutável e seguro contra mutação acidental
    - Tipos não dependem de engine, colaboradores ou deploy

Limites explícitos:
    - Não executa Steps
    - Não decide políticas de execução
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List


class StepKind(str, Enum):
    """
    Tipos semânticos de Steps no pipeline de publicação.

    Tipos definidos:
        - SETUP: preparação do ambiente (ferramentas, raiz do site)
        - BUILD: compilação de fontes em páginas estáticas
        - FETCH: recuperação de artefatos produzidos por outra run
        - PACKAGE: empacotamento da árvore montada
        - DEPLOY: publicação do bundle no ambiente de hospedagem

    Decisões arquiteturais:
        - O tipo é puramente informativo e semântico
        - O Engine não utiliza `StepKind` para decidir execução
    """
    SETUP = "setup"
    BUILD = "build"
    FETCH = "fetch"
    PACKAGE = "package"
    DEPLOY = "deploy"


class StepStatus(str, Enum):
    """
    Estados finais possíveis da execução de um Step.

    Estados definidos:
        - SUCCESS: execução concluída com sucesso
        - SKIPPED: execução pulada por decisão explícita (config ou dependência falha)
        - FAILED: execução interrompida por erro

    Estados intermediários (ex.: running) não pertencem a este enum;
    eles existem apenas no Manifest.
    """
    SUCCESS = "success"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class StepResult:
    """
    Resultado imutável da execução de um Step.

    Campos:
        - step_id: identificador único do Step
        - kind: tipo semântico do Step
        - status: estado final da execução do Step
        - summary: resumo textual da execução
        - metrics: métricas numéricas produzidas pelo Step (ex.: arquivos gerados)
        - warnings: avisos não fatais gerados durante a execução
        - artifacts: referências a artefatos produzidos (ex.: caminhos)
        - payload: dados adicionais livres associados ao resultado

    Invariantes:
        - Uma instância de StepResult nunca é alterada após criada
        - `step_id`, `kind` e `status` estão sempre presentes
    """
    step_id: str
    kind: StepKind
    status: StepStatus
    summary: str
    metrics: Dict[str, Any] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)
    artifacts: Dict[str, Any] = field(default_factory=dict)
    payload: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "step_id": self.step_id,
            "kind": self.kind.value if isinstance(self.kind, StepKind) else self.kind,
            "status": self.status.value,
            "summary": self.summary,
            "metrics": dict(self.metrics),
            "warnings": list(self.warnings),
            "artifacts": dict(self.artifacts),
            "payload": dict(self.payload),
        }
