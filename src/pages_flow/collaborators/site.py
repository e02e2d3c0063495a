# src/pages_flow/collaborators/site.py
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from .process import run_tool


@dataclass
class JekyllGenerator:
    """Gerador de site estático via `jekyll build --source <fonte> --destination <destino>`."""

    command: List[str] = field(default_factory=lambda: ["jekyll"])
    timeout_s: Optional[float] = None

    def generate(self, source_dir: Path, destination_dir: Path) -> int:
        cmd = [
            *self.command,
            "build",
            "--source",
            str(Path(source_dir).resolve()),
            "--destination",
            str(Path(destination_dir).resolve()),
        ]
        return run_tool(cmd, timeout_s=self.timeout_s)
