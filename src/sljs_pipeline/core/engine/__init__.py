# src/sljs_pipeline/core/engine/__init__.py
"""
Engine do pipeline: planejamento (DAG) e execução controlada.

Componentes principais:
    - planner → ordem topológica determinística e níveis de dependência
    - engine  → execução por nível (paralela para Steps independentes),
      verificação de artefatos consumidos e política fail-fast

Invariantes:
    - Steps só são executados após todas as suas dependências terem
      terminado com sucesso
    - Cada Step é executado no máximo uma vez por run
    - O resultado reflete explicitamente o estado de cada Step
"""

from .engine import Engine, RunResult
from .planner import CycleDetectedError, UnknownDependencyError, plan_execution, plan_levels

__all__ = [
    "CycleDetectedError",
    "Engine",
    "RunResult",
    "UnknownDependencyError",
    "plan_execution",
    "plan_levels",
]
