# src/pages_flow/layout.py
"""
Layout declarado da árvore de saída (raiz do site).

A partir da configuração efetiva, este módulo resolve:
    - o workspace (base de todos os caminhos relativos)
    - a raiz do site
    - as fontes de livros, artefatos e sites estáticos, cada uma com o
      subdiretório de destino que lhe pertence

Invariantes:
    - Cada subdiretório da raiz possui exatamente um produtor
    - Nenhum destino é absoluto, vazio ou escapa da raiz
    - Nenhum destino está contido em outro (escrita de um único produtor por caminho)
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Any, Dict, List, Mapping, Tuple

from pages_flow.core.config.errors import InvalidLayoutError


def resolve_path(workspace: Path, value: Any) -> Path:
    if not isinstance(value, str) or not value.strip():
        raise InvalidLayoutError(f"Caminho inválido: {value!r}")
    p = Path(value).expanduser()
    return p if p.is_absolute() else workspace / p


def _check_destination(value: Any, where: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidLayoutError(f"{where}.destination must be a non-empty string")
    rel = PurePosixPath(value.strip().strip("/"))
    if rel.is_absolute() or not rel.parts or ".." in rel.parts or str(rel) == ".":
        raise InvalidLayoutError(f"{where}.destination must stay inside the site root: {value!r}")
    return str(rel)


def _section(config: Mapping[str, Any], name: str) -> Dict[str, Dict[str, Any]]:
    section = config.get(name, {}) or {}
    if not isinstance(section, dict):
        raise InvalidLayoutError(f"Config section '{name}' must be a mapping")
    for key, value in section.items():
        if not isinstance(value, dict):
            raise InvalidLayoutError(f"Config entry '{name}.{key}' must be a mapping")
    return section


@dataclass(frozen=True)
class SourceSpec:
    """Fonte compilada por um colaborador (livro ou site estático)."""

    name: str
    source: Path
    destination: str


@dataclass(frozen=True)
class ArtifactSpec:
    """Artefato produzido por uma run upstream e baixado para a raiz do site."""

    name: str
    artifact: str
    workflow: str
    required_conclusion: str
    destination: str


@dataclass(frozen=True)
class Layout:
    workspace: Path
    site_root: Path
    books: Tuple[SourceSpec, ...] = ()
    artifacts: Tuple[ArtifactSpec, ...] = ()
    sites: Tuple[SourceSpec, ...] = ()

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "Layout":
        run_cfg = config.get("run", {}) or {}
        workspace = Path(str(run_cfg.get("workspace", ".") or ".")).expanduser()
        site_cfg = config.get("site", {}) or {}
        site_root = resolve_path(workspace, site_cfg.get("root", "_site"))

        books = tuple(
            SourceSpec(
                name=key,
                source=resolve_path(workspace, entry.get("source")),
                destination=_check_destination(entry.get("destination", key), f"books.{key}"),
            )
            for key, entry in sorted(_section(config, "books").items())
        )
        sites = tuple(
            SourceSpec(
                name=key,
                source=resolve_path(workspace, entry.get("source")),
                destination=_check_destination(entry.get("destination", key), f"sites.{key}"),
            )
            for key, entry in sorted(_section(config, "sites").items())
        )
        artifacts = tuple(
            ArtifactSpec(
                name=key,
                artifact=str(entry.get("name") or key),
                workflow=str(entry.get("workflow") or ""),
                required_conclusion=str(entry.get("required_conclusion") or "success"),
                destination=_check_destination(entry.get("destination", key), f"artifacts.{key}"),
            )
            for key, entry in sorted(_section(config, "artifacts").items())
        )

        layout = cls(workspace=workspace, site_root=site_root, books=books, artifacts=artifacts, sites=sites)
        layout._check_single_writer()
        return layout

    def _check_single_writer(self) -> None:
        seen: Dict[str, str] = {}
        for producer, dest in self.producers():
            if dest in seen:
                raise InvalidLayoutError(
                    f"Destination '{dest}' declared by both '{seen[dest]}' and '{producer}'"
                )
            seen[dest] = producer

        dests = sorted(seen)
        for i, outer in enumerate(dests):
            for inner in dests[i + 1:]:
                if PurePosixPath(inner).is_relative_to(PurePosixPath(outer)):
                    raise InvalidLayoutError(
                        f"Destination '{inner}' is nested inside '{outer}'"
                    )

    def producers(self) -> List[Tuple[str, str]]:
        out = [(f"books.{b.name}", b.destination) for b in self.books]
        out += [(f"artifacts.{a.name}", a.destination) for a in self.artifacts]
        out += [(f"sites.{s.name}", s.destination) for s in self.sites]
        return out

    def subdirectories(self) -> List[str]:
        return sorted(dest for _, dest in self.producers())

    def destination(self, relative: str) -> Path:
        return self.site_root / relative
