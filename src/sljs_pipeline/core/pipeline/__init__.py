# src/sljs_pipeline/core/pipeline/__init__.py
"""
# Pipeline Core

Contratos canônicos e estruturas fundamentais de um pipeline.

Um pipeline é modelado como um **DAG explícito de Steps**, onde:
- cada Step declara identidade, tipo semântico, dependências e artefatos consumidos
- a execução é coordenada exclusivamente pelo Engine
- o estado compartilhado (workspace, runner, artefatos) é mediado pelo `RunContext`

## Componentes

- **types**: `StepStatus`, `StepKind`, `StepResult`
- **step**: `Step` (Protocol)
- **context**: `RunContext`
- **registry**: `StepRegistry`, `DuplicateStepIdError`
"""

from .context import RunContext
from .registry import DuplicateStepIdError, StepRegistry
from .step import Step
from .types import StepKind, StepResult, StepStatus

__all__ = [
    "DuplicateStepIdError",
    "RunContext",
    "Step",
    "StepKind",
    "StepRegistry",
    "StepResult",
    "StepStatus",
]
