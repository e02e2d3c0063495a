# src/pages_flow/core/engine/planner.py
"""
Planejador de execução de um job (DAG).

Este módulo valida a estrutura do job e produz:
    - uma ordem topológica determinística (`plan_execution`)
    - ondas de Steps mutuamente independentes (`plan_waves`), usadas pelo
      Engine quando a execução concorrente está habilitada

Decisões arquiteturais:
    - Ordenação topológica determinística (Kahn modificado)
    - Empates são resolvidos por ordem lexicográfica de `step.id`
    - Erros estruturais são tratados como falhas fatais

Invariantes:
    - Nenhum Step é executado antes de suas dependências
    - Todos os Steps aparecem exatamente uma vez
    - A mesma definição de job produz sempre a mesma ordem
    - Steps de uma mesma onda não dependem uns dos outros

Limites explícitos:
    - Não executa Steps
    - Não interage com RunContext
    - Não registra eventos de rastreabilidade
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Set

from pages_flow.core.pipeline.step import Step


class UnknownDependencyError(ValueError):
    """
    Exceção levantada quando um Step referencia uma dependência inexistente.

    Dependências inexistentes são tratadas como erro estrutural e a
    validação ocorre antes de qualquer execução.
    """


class CycleDetectedError(ValueError):
    """
    Exceção levantada quando o grafo de dependências contém um ciclo.

    Nenhuma execução parcial é permitida em presença de ciclos.
    """


def plan_execution(steps: Iterable[Step]) -> List[Step]:
    """
    Valida e produz uma ordem de execução topológica determinística de Steps.

    Sempre que múltiplos Steps estiverem prontos, a escolha é feita por
    ordem lexicográfica do `step.id`.

    Args:
        steps (Iterable[Step]): Coleção de Steps declarativos do job.

    Returns:
        List[Step]: Lista de Steps em ordem topológica determinística.

    Raises:
        ValueError: Se algum Step possuir `id` inválido ou duplicado.
        UnknownDependencyError: Se um Step declarar dependência inexistente.
        CycleDetectedError: Se houver ciclo no grafo de dependências.
    """
    step_list = list(steps)
    by_id: Dict[str, Step] = {}
    for s in step_list:
        sid = getattr(s, "id", None)
        if not isinstance(sid, str) or not sid.strip():
            raise ValueError("step.id must be a non-empty string")
        if sid in by_id:
            raise ValueError(f"Duplicate step id: {sid}")
        by_id[sid] = s

    deps: Dict[str, List[str]] = {}
    for sid, s in by_id.items():
        d = list(getattr(s, "depends_on", []) or [])
        for dep in d:
            if dep not in by_id:
                raise UnknownDependencyError(f"Step '{sid}' depends on unknown step '{dep}'")
        deps[sid] = d

    # Kahn (determinístico)
    incoming_count: Dict[str, int] = {sid: 0 for sid in by_id}
    outgoing: Dict[str, Set[str]] = {sid: set() for sid in by_id}

    for sid, dlist in deps.items():
        incoming_count[sid] = len(set(dlist))
        for dep in set(dlist):
            outgoing[dep].add(sid)

    ready: List[str] = sorted([sid for sid, c in incoming_count.items() if c == 0])
    order_ids: List[str] = []

    while ready:
        sid = ready.pop(0)
        order_ids.append(sid)
        for child in sorted(outgoing[sid]):
            incoming_count[child] -= 1
            if incoming_count[child] == 0:
                ready.append(child)
                ready.sort()

    if len(order_ids) != len(by_id):
        raise CycleDetectedError("Cycle detected in step dependency graph")

    return [by_id[sid] for sid in order_ids]


def plan_waves(steps: Iterable[Step]) -> List[List[Step]]:
    """
    Agrupa os Steps em ondas por profundidade no DAG.

    A onda `n` contém os Steps cuja dependência mais profunda está na onda
    `n - 1`. Dentro de cada onda a ordem é lexicográfica por `step.id`.
    Concatenar as ondas produz uma ordem topológica válida.

    Raises:
        As mesmas exceções de `plan_execution`.
    """
    ordered = plan_execution(steps)

    level: Dict[str, int] = {}
    waves: List[List[Step]] = []
    for step in ordered:
        deps = list(getattr(step, "depends_on", []) or [])
        lvl = max((level[d] + 1 for d in deps), default=0)
        level[step.id] = lvl
        while len(waves) <= lvl:
            waves.append([])
        waves[lvl].append(step)

    return [sorted(wave, key=lambda s: s.id) for wave in waves]
