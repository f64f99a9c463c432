"""
sljs-pipeline: estruturas canônicas de erro (v1)

Este módulo define o padrão canônico de erros reportados pelo coordenador.
Toda falha de Step, de montagem ou de publicação chega ao coordenador como
um payload:

- explícito (código estável, não texto livre)
- serializável (vai para o StepResult e para o Manifest)
- acionável (hint aponta onde corrigir)

Nenhuma falha é engolida silenciosamente.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Optional


# ---------------------------------------------------------------------------
# Payload canônico
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PipelineErrorPayload:
    """
    Payload canônico de erro do pipeline.

    Campos:
    - type: código estável do erro (ver catálogo abaixo)
    - message: mensagem curta e objetiva
    - details: dados estruturados (argv, exit code, saída da ferramenta, paths)
    - hint: ação sugerida ao operador
    """

    type: str
    message: str
    details: Dict[str, Any]
    hint: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# ---------------------------------------------------------------------------
# Catálogo canônico de tipos de erro (v1)
# ---------------------------------------------------------------------------

# Ferramentas externas
BUILD_FAILED = "BUILD_FAILED"
TEST_FAILED = "TEST_FAILED"
TOOL_NOT_FOUND = "TOOL_NOT_FOUND"

# Artefatos
ARTIFACT_MISSING = "ARTIFACT_MISSING"
ASSEMBLY_FAILED = "ASSEMBLY_FAILED"

# Publicação / concorrência
PUBLISH_FAILED = "PUBLISH_FAILED"
RUN_SUPERSEDED = "RUN_SUPERSEDED"

# Engine / Execução
ENGINE_EXECUTION_ERROR = "ENGINE_EXECUTION_ERROR"
ENGINE_CONFIGURATION_ERROR = "ENGINE_CONFIGURATION_ERROR"


# ---------------------------------------------------------------------------
# Helpers de fábrica
# ---------------------------------------------------------------------------

def publish_failed(
    *,
    sink: str,
    source_dir: str,
    ref: str,
    exc_type: Optional[str] = None,
    exc_message: Optional[str] = None,
    hint: str = "Verifique o destino de publicação. Os artefatos desta run não são revertidos.",
) -> PipelineErrorPayload:
    return PipelineErrorPayload(
        type=PUBLISH_FAILED,
        message="Publish sink failed",
        details={
            "sink": sink,
            "source_dir": source_dir,
            "ref": ref,
            "exc_type": exc_type,
            "exc_message": exc_message,
        },
        hint=hint,
    )


def run_superseded(
    *,
    run_id: str,
    concurrency_key: str,
    stage: str,
) -> PipelineErrorPayload:
    return PipelineErrorPayload(
        type=RUN_SUPERSEDED,
        message="Run superseded by a newer run for the same concurrency key",
        details={
            "run_id": run_id,
            "concurrency_key": concurrency_key,
            "stage": stage,
        },
        hint=None,
    )


def engine_execution_error(
    *,
    step: Optional[str] = None,
    exc_type: Optional[str] = None,
    exc_message: Optional[str] = None,
) -> PipelineErrorPayload:
    return PipelineErrorPayload(
        type=ENGINE_EXECUTION_ERROR,
        message=exc_message or "Unexpected error during step execution",
        details={
            "step": step,
            "exc_type": exc_type,
            "exc_message": exc_message,
        },
        hint="Verifique o log estruturado da run. Nenhum retry é aplicado.",
    )


def engine_configuration_error(
    *,
    message: str = "Invalid pipeline configuration",
    details: Optional[Dict[str, Any]] = None,
    hint: str = "Revise a definição do pipeline e dos Steps antes de reexecutar.",
) -> PipelineErrorPayload:
    return PipelineErrorPayload(
        type=ENGINE_CONFIGURATION_ERROR,
        message=message,
        details=details or {},
        hint=hint,
    )


def tail_lines(text: Optional[str], limit: int = 20) -> List[str]:
    """Últimas `limit` linhas de uma saída de ferramenta (para resumos)."""
    if not text:
        return []
    return text.rstrip("\n").splitlines()[-limit:]
