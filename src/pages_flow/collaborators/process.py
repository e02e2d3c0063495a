# src/pages_flow/collaborators/process.py
"""Execução de ferramentas externas via subprocess."""

from __future__ import annotations

import subprocess
from typing import Optional, Sequence

from pages_flow.core.exceptions import CollaboratorUnavailableError


def run_tool(cmd: Sequence[str], *, timeout_s: Optional[float] = None) -> int:
    """Executa `cmd` herdando stdout/stderr e retorna o exit code.

    Os diagnósticos da ferramenta ficam no próprio output dela; o pages_flow
    não reformata mensagens de colaboradores.
    """
    try:
        completed = subprocess.run(list(cmd), check=False, timeout=timeout_s)
    except FileNotFoundError as e:
        raise CollaboratorUnavailableError(
            message=f"Executável não encontrado: {cmd[0]}",
            details={"command": list(cmd)},
            hint="Instale a ferramenta ou ajuste o caminho em `tools.*` na configuração.",
        ) from e
    except subprocess.TimeoutExpired as e:
        raise CollaboratorUnavailableError(
            message=f"Timeout executando {cmd[0]}",
            details={"command": list(cmd), "timeout_s": timeout_s},
        ) from e
    return int(completed.returncode)
