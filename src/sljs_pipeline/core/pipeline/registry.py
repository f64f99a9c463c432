# src/sljs_pipeline/core/pipeline/registry.py
"""
Registro estrutural de Steps de um pipeline.

O `StepRegistry` valida a unicidade de `step.id` no momento do registro.
O planner registra todos os Steps nele antes de olhar dependências, de
modo que ids vazios ou duplicados falham antes de qualquer outra regra.

Invariantes:
    - Cada Step registrado possui um `step.id` único e não vazio
    - `list()` reflete exatamente a ordem de registro

Limites explícitos:
    - Não resolve dependências (responsabilidade do planner)
    - Não executa Steps
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List

from .step import Step


class DuplicateStepIdError(ValueError):
    """
    Levantada ao registrar dois Steps com o mesmo `step.id`.

    Um Step executa exatamente uma vez por run; dois Steps com o mesmo id
    tornariam essa garantia ambígua, então a duplicidade é erro fatal de
    definição.
    """


@dataclass
class StepRegistry:
    """Registro canônico de Steps para validação estrutural pré-execução."""

    _steps: Dict[str, Step] = field(default_factory=dict, init=False, repr=False)
    _order: List[str] = field(default_factory=list, init=False, repr=False)

    def add(self, step: Step) -> None:
        step_id = getattr(step, "id", None)
        if not isinstance(step_id, str) or not step_id.strip():
            raise ValueError("step.id must be a non-empty string")

        if step_id in self._steps:
            raise DuplicateStepIdError(f"Duplicate step id: {step_id}")

        self._steps[step_id] = step
        self._order.append(step_id)

    def get(self, step_id: str) -> Step:
        return self._steps[step_id]

    def __contains__(self, step_id: object) -> bool:
        return step_id in self._steps

    def __len__(self) -> int:
        return len(self._order)

    def list(self) -> List[Step]:
        return [self._steps[sid] for sid in self._order]
