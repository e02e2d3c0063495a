"""
pages_flow — Canonical Exceptions (v1)

Este módulo define exceções tipadas internas do pages_flow.

Objetivo:
- Permitir que Steps, colaboradores e o gate levantem exceções semânticas tipadas
- Facilitar o mapeamento determinístico para PagesErrorPayload
- Evitar ValueError/RuntimeError genéricos nos pontos de falha fatal

Regras:
- Exceções carregam apenas dados estruturados (serializáveis) em `details`.
- O código estável do erro é o atributo de classe `code` (catálogo em `core.errors`).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, Optional

from . import errors as codes


@dataclass(frozen=True)
class PagesException(Exception):
    """Base class para exceções internas do pages_flow.

    Importante:
    - Sempre carregar dados estruturados em `details`
    - Não embedar stack trace em payloads de erro
    - Mensagem deve ser curta e humana
    """

    code: ClassVar[str] = codes.ENGINE_EXECUTION_ERROR

    message: str
    details: Dict[str, Any] = field(default_factory=dict)
    hint: Optional[str] = None

    def __str__(self) -> str:  # pragma: no cover
        return self.message


# ---------------------------------------------------------------------------
# Raiz do site / layout
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SiteRootError(PagesException):
    """A raiz do site não pôde ser criada ou limpa."""

    code: ClassVar[str] = codes.SITE_ROOT_ERROR


@dataclass(frozen=True)
class PackagePathMissingError(PagesException):
    """Um subdiretório declarado não existe no momento do empacotamento."""

    code: ClassVar[str] = codes.PACKAGE_PATH_MISSING


# ---------------------------------------------------------------------------
# Colaboradores externos
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CollaboratorExitError(PagesException):
    """Colaborador externo terminou com exit code diferente de zero."""

    code: ClassVar[str] = codes.COLLABORATOR_EXIT_ERROR


@dataclass(frozen=True)
class CollaboratorUnavailableError(PagesException):
    """Executável ou serviço do colaborador não está disponível."""

    code: ClassVar[str] = codes.COLLABORATOR_UNAVAILABLE


@dataclass(frozen=True)
class ToolSetupError(PagesException):
    """Falha ao provisionar uma ferramenta (ex.: binário do mdbook)."""

    code: ClassVar[str] = codes.TOOL_SETUP_ERROR


@dataclass(frozen=True)
class ArtifactNotFoundError(PagesException):
    """Nenhum artefato correspondente foi encontrado na run de origem."""

    code: ClassVar[str] = codes.ARTIFACT_NOT_FOUND


@dataclass(frozen=True)
class ArtifactConclusionMismatchError(PagesException):
    """A run de origem não terminou com a conclusão exigida."""

    code: ClassVar[str] = codes.ARTIFACT_CONCLUSION_MISMATCH


@dataclass(frozen=True)
class ArtifactDownloadError(PagesException):
    """Falha de download do artefato (após esgotar as tentativas)."""

    code: ClassVar[str] = codes.ARTIFACT_DOWNLOAD_ERROR


# ---------------------------------------------------------------------------
# Deploy / gate
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DeployFailedError(PagesException):
    """O serviço de deploy reportou falha na publicação."""

    code: ClassVar[str] = codes.DEPLOY_FAILED


@dataclass(frozen=True)
class GateTransitionError(PagesException):
    """Transição inválida na máquina de estados do gate de deploy."""

    code: ClassVar[str] = codes.GATE_TRANSITION_ERROR


# ---------------------------------------------------------------------------
# Engine / Configuração
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class EngineConfigurationError(PagesException):
    """Configuração inválida ou inconsistente para execução."""

    code: ClassVar[str] = codes.ENGINE_CONFIGURATION_ERROR
