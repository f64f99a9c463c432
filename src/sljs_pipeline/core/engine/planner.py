# src/sljs_pipeline/core/engine/planner.py
"""
Planejador de execução do pipeline (DAG).

Este módulo valida a estrutura do pipeline e produz:
    - uma ordem topológica determinística (`plan_execution`)
    - níveis de dependência (`plan_levels`): Steps do mesmo nível não
      dependem uns dos outros e podem rodar concorrentemente; um nível só
      começa depois que todos os anteriores terminaram

Decisões arquiteturais:
    - Ordenação topológica determinística (Kahn)
    - Empates são resolvidos por ordem lexicográfica de `step.id`
    - Erros estruturais são fatais e detectados antes de qualquer execução

Invariantes:
    - Nenhum Step aparece antes de suas dependências
    - Todos os Steps aparecem exatamente uma vez
    - A mesma definição sempre produz a mesma ordem e os mesmos níveis

Limites explícitos:
    - Não executa Steps
    - Não interage com RunContext nem com o Manifest
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Set

from sljs_pipeline.core.pipeline.registry import StepRegistry
from sljs_pipeline.core.pipeline.step import Step


class UnknownDependencyError(ValueError):
    """
    Levantada quando um Step declara em `depends_on` um id inexistente.

    Exemplo típico: um pipeline que inclui `demo.build` mas não inclui o
    Step de build do alvo browser do qual ele depende.
    """


class CycleDetectedError(ValueError):
    """Levantada quando o grafo de dependências contém um ciclo."""


def _index(steps: Iterable[Step]) -> Dict[str, Step]:
    registry = StepRegistry()
    for s in steps:
        registry.add(s)
    return {s.id: s for s in registry.list()}


def _dependencies(by_id: Dict[str, Step]) -> Dict[str, List[str]]:
    deps: Dict[str, List[str]] = {}
    for sid, s in by_id.items():
        d = list(getattr(s, "depends_on", []) or [])
        for dep in d:
            if dep not in by_id:
                raise UnknownDependencyError(f"Step '{sid}' depends on unknown step '{dep}'")
        # dependência repetida não conta duas vezes no grau de entrada
        deps[sid] = sorted(set(d))
    return deps


def plan_execution(steps: Iterable[Step]) -> List[Step]:
    """
    Valida e produz uma ordem de execução topológica determinística.

    Args:
        steps (Iterable[Step]): Steps declarativos do pipeline.

    Returns:
        List[Step]: Steps em ordem topológica; empates por `step.id`.

    Raises:
        ValueError: Se algum Step possuir `id` inválido.
        DuplicateStepIdError: Se houver ids duplicados.
        UnknownDependencyError: Se um Step declarar dependência inexistente.
        CycleDetectedError: Se houver ciclo no grafo de dependências.
    """
    by_id = _index(steps)
    deps = _dependencies(by_id)

    incoming_count: Dict[str, int] = {sid: len(d) for sid, d in deps.items()}
    outgoing: Dict[str, Set[str]] = {sid: set() for sid in by_id}
    for sid, dlist in deps.items():
        for dep in dlist:
            outgoing[dep].add(sid)

    ready: List[str] = sorted(sid for sid, c in incoming_count.items() if c == 0)
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
        stuck = sorted(set(by_id) - set(order_ids))
        raise CycleDetectedError(f"Cycle detected in step dependency graph: {stuck}")

    return [by_id[sid] for sid in order_ids]


def plan_levels(steps: Iterable[Step]) -> List[List[Step]]:
    """
    Agrupa os Steps em níveis de dependência.

    O nível de um Step é 0 quando não tem dependências, e 1 + o maior
    nível entre suas dependências caso contrário. Dentro de um nível, a
    ordem segue `plan_execution`.

    Raises:
        As mesmas exceções de `plan_execution`.
    """
    ordered = plan_execution(steps)
    level_of: Dict[str, int] = {}
    levels: List[List[Step]] = []

    for step in ordered:
        deps = list(getattr(step, "depends_on", []) or [])
        level = 1 + max((level_of[d] for d in deps), default=-1)
        level_of[step.id] = level
        while len(levels) <= level:
            levels.append([])
        levels[level].append(step)

    return levels
