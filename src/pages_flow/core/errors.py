"""
pages_flow — Canonical Error Structures (v1)

Este módulo define o padrão canônico de erros do pages_flow.
Erros são artefatos da run e fazem parte do contrato operacional,
devendo ser:

- explícitos
- serializáveis
- rastreáveis
- acionáveis

Nenhum erro é recuperado internamente: toda falha aparece como falha da run.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional


# ---------------------------------------------------------------------------
# Payload canônico
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PagesErrorPayload:
    """
    Payload canônico de erro do pages_flow.

    Campos:
    - type: código estável do erro (não é texto livre)
    - message: mensagem curta, humana e objetiva
    - details: dados estruturados relevantes para diagnóstico
    - hint: ação sugerida ao operador (onde corrigir)
    """

    type: str
    message: str
    details: Dict[str, Any]
    hint: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Retorna representação serializável do erro."""
        return asdict(self)


# ---------------------------------------------------------------------------
# Catálogo canônico de tipos de erro (v1)
# ---------------------------------------------------------------------------

# Raiz do site / layout
SITE_ROOT_ERROR = "SITE_ROOT_ERROR"
PACKAGE_PATH_MISSING = "PACKAGE_PATH_MISSING"

# Colaboradores
COLLABORATOR_EXIT_ERROR = "COLLABORATOR_EXIT_ERROR"
COLLABORATOR_UNAVAILABLE = "COLLABORATOR_UNAVAILABLE"
TOOL_SETUP_ERROR = "TOOL_SETUP_ERROR"
ARTIFACT_NOT_FOUND = "ARTIFACT_NOT_FOUND"
ARTIFACT_CONCLUSION_MISMATCH = "ARTIFACT_CONCLUSION_MISMATCH"
ARTIFACT_DOWNLOAD_ERROR = "ARTIFACT_DOWNLOAD_ERROR"

# Deploy
DEPLOY_FAILED = "DEPLOY_FAILED"
GATE_TRANSITION_ERROR = "GATE_TRANSITION_ERROR"

# Engine / Execução
ENGINE_EXECUTION_ERROR = "ENGINE_EXECUTION_ERROR"
ENGINE_CONFIGURATION_ERROR = "ENGINE_CONFIGURATION_ERROR"


# ---------------------------------------------------------------------------
# Helpers de fábrica
# ---------------------------------------------------------------------------

def engine_execution_error(
    *,
    step: Optional[str] = None,
    exc_type: Optional[str] = None,
    exc_message: Optional[str] = None,
    hint: str = "Verifique o log estruturado da run para diagnosticar a falha. Nenhum retry é aplicado automaticamente.",
) -> PagesErrorPayload:
    return PagesErrorPayload(
        type=ENGINE_EXECUTION_ERROR,
        message=exc_message or "Falha inesperada durante a execução do pipeline",
        details={
            "step": step,
            "exception_class": exc_type,
        },
        hint=hint,
    )


def engine_configuration_error(
    *,
    message: str = "Configuração inválida para execução do pipeline",
    details: Optional[Dict[str, Any]] = None,
    hint: str = "Revise a configuração dos steps e declare explicitamente as opções necessárias antes de reexecutar.",
) -> PagesErrorPayload:
    return PagesErrorPayload(
        type=ENGINE_CONFIGURATION_ERROR,
        message=message,
        details=details or {},
        hint=hint,
    )


def deploy_failed(
    *,
    environment: str,
    reason: str,
    details: Optional[Dict[str, Any]] = None,
    hint: str = "Verifique o serviço de hospedagem. O gate termina em `failed` sem retry automático.",
) -> PagesErrorPayload:
    return PagesErrorPayload(
        type=DEPLOY_FAILED,
        message=reason or "Falha ao publicar o bundle",
        details={"environment": environment, **(details or {})},
        hint=hint,
    )
