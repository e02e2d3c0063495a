# src/pages_flow/core/traceability/__init__.py
"""
Rastreabilidade de runs de publicação.

O Manifest registra o evento upstream, o hash da configuração, o estado de
cada Step dos jobs `build` e `deploy` e o Event Log da run (incluindo as
transições do gate de deploy). É persistido como JSON ao lado do report.md.
"""

from .manifest import (
    PagesManifest,
    add_event,
    create_manifest,
    load_manifest,
    save_manifest,
    step_failed,
    step_finished,
    step_started,
)

__all__ = [
    "PagesManifest",
    "add_event",
    "create_manifest",
    "load_manifest",
    "save_manifest",
    "step_failed",
    "step_finished",
    "step_started",
]
