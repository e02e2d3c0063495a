# src/pages_flow/collaborators/packaging.py
"""
Empacotamento determinístico da raiz do site.

O bundle é um `tar.gz` cujo conteúdo depende apenas dos arquivos da árvore:
membros em ordem lexicográfica, mtime/uid/gid zerados e cabeçalho gzip sem
timestamp. A mesma árvore produz sempre o mesmo sha256.
"""

from __future__ import annotations

import gzip
import hashlib
import os
import tarfile
from dataclasses import dataclass
from pathlib import Path
from typing import List, Tuple

from pages_flow.core.exceptions import PackagePathMissingError

from .types import BundleHandle


def _sha256_and_bytes(path: Path) -> Tuple[str, int]:
    h = hashlib.sha256()
    size = 0
    with path.open("rb") as f:
        for chunk in iter(lambda: f.read(8192), b""):
            h.update(chunk)
            size += len(chunk)
    return h.hexdigest(), size


def _walk_sorted(root: Path) -> List[Path]:
    out: List[Path] = []
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames.sort()
        base = Path(dirpath)
        if base != root:
            out.append(base)
        for name in sorted(filenames):
            out.append(base / name)
    return sorted(out, key=lambda p: p.relative_to(root).as_posix())


def _normalize(info: tarfile.TarInfo) -> tarfile.TarInfo:
    info.mtime = 0
    info.uid = info.gid = 0
    info.uname = info.gname = ""
    return info


@dataclass
class TarPackager:
    output_dir: Path
    filename: str = "artifact.tar.gz"

    def package(self, root_dir: Path) -> BundleHandle:
        root = Path(root_dir)
        if not root.is_dir():
            raise PackagePathMissingError(
                message="Raiz do site não existe para empacotamento",
                details={"root": str(root)},
            )

        out_dir = Path(self.output_dir)
        out_dir.mkdir(parents=True, exist_ok=True)
        out_path = out_dir / self.filename

        # o próprio bundle nunca entra no bundle
        members = [m for m in _walk_sorted(root) if m.resolve() != out_path.resolve()]
        file_count = 0
        with out_path.open("wb") as raw:
            with gzip.GzipFile(filename="", mode="wb", fileobj=raw, mtime=0) as gz:
                with tarfile.open(fileobj=gz, mode="w", format=tarfile.PAX_FORMAT) as tar:
                    for member in members:
                        arcname = member.relative_to(root).as_posix()
                        info = _normalize(tar.gettarinfo(str(member), arcname=arcname))
                        if info.isfile():
                            file_count += 1
                            with member.open("rb") as f:
                                tar.addfile(info, f)
                        else:
                            tar.addfile(info)

        sha256, size = _sha256_and_bytes(out_path)
        entries = tuple(sorted(p.name for p in root.iterdir()))
        return BundleHandle(
            path=out_path,
            root=root,
            sha256=sha256,
            bytes=size,
            file_count=file_count,
            entries=entries,
        )
