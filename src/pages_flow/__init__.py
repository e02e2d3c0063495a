# src/pages_flow/__init__.py
"""
pages_flow — orquestrador de publicação de documentação.

Na conclusão bem-sucedida de uma run upstream (workflow `ci`, branch
`main`), monta em uma única árvore de saída (a raiz do site) várias
fontes de documentação construídas de forma independente, empacota a
árvore e a entrega a um colaborador de deploy.

Princípios centrais:
    - Cada job (`build`, `deploy`) é um DAG explícito de Steps
    - Cada subdiretório da raiz do site possui exatamente um produtor
    - Ferramentas de build, armazenamento de artefatos e hospedagem são
      colaboradores opacos, acessados apenas por contratos
    - Rastreabilidade forense (Manifest + report.md) por run

Arquitetura em alto nível:
    - trigger           → evento upstream, subscription e avaliador
    - layout            → layout declarado da raiz do site
    - collaborators     → contratos e implementações padrão dos colaboradores
    - steps             → Steps canônicos dos jobs
    - deployment        → gate de deploy (máquina de estados)
    - orchestrator      → `publish`, composição dos jobs
    - core.*            → config, pipeline, engine, traceability, concorrência

Limites explícitos:
    - Não implementa CLI
    - Não implementa ferramentas de build nem serviço de hospedagem
"""

from .collaborators import Collaborators
from .orchestrator import (
    PAGES_FLOW_VERSION,
    PublicationResult,
    RunOutcome,
    build_steps,
    deploy_steps,
    publish,
)
from .trigger import PipelineRunEvent, Subscription, should_proceed

__version__ = PAGES_FLOW_VERSION

__all__ = [
    "Collaborators",
    "PipelineRunEvent",
    "PublicationResult",
    "RunOutcome",
    "Subscription",
    "__version__",
    "build_steps",
    "deploy_steps",
    "publish",
    "should_proceed",
]
