# src/pages_flow/collaborators/book.py
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .process import run_tool


@dataclass
class MdBookCompiler:
    """Compilador de livros via `mdbook build -d <destino> <fonte>`.

    `executable` pode ser reapontado pelo Step `setup.mdbook` para o binário
    provisionado na run.
    """

    executable: str = "mdbook"
    timeout_s: Optional[float] = None

    def build(self, destination_dir: Path, source_dir: Path) -> int:
        # mdbook resolve `-d` relativo ao livro; caminhos absolutos evitam ambiguidade
        cmd = [
            self.executable,
            "build",
            "-d",
            str(Path(destination_dir).resolve()),
            str(Path(source_dir).resolve()),
        ]
        return run_tool(cmd, timeout_s=self.timeout_s)
