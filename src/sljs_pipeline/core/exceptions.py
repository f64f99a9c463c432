"""
sljs-pipeline: exceções canônicas (v1)

Exceções tipadas levantadas por Steps, ferramentas e Engine.

Objetivo:
- Permitir que Steps levantem falhas semânticas (build, teste, artefato)
- Mapear cada exceção de forma determinística para um PipelineErrorPayload
- Evitar RuntimeError genérico nas fronteiras com ferramentas externas

Regras:
- Exceções carregam apenas dados estruturados (serializáveis) em `details`
- Não há retry: uma exceção encerra o Step
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Dict, Optional

from . import errors


@dataclass(eq=False)
class PipelineException(Exception):
    """Base para exceções internas do pipeline.

    Importante:
    - Sempre carregar dados estruturados em `details`
    - Mensagem curta e humana
    - `code` é o tipo estável usado no payload de erro
    """

    message: str
    details: Dict[str, Any]
    hint: Optional[str] = None

    code: ClassVar[str] = errors.ENGINE_EXECUTION_ERROR

    def __str__(self) -> str:
        return self.message

    def to_payload(self) -> errors.PipelineErrorPayload:
        return errors.PipelineErrorPayload(
            type=self.code,
            message=self.message,
            details=dict(self.details or {}),
            hint=self.hint,
        )


# ---------------------------------------------------------------------------
# Ferramentas externas
# ---------------------------------------------------------------------------

@dataclass(eq=False)
class BuildFailed(PipelineException):
    """Compilador/toolchain terminou com exit code não-zero."""

    code: ClassVar[str] = errors.BUILD_FAILED


@dataclass(eq=False)
class TestFailed(PipelineException):
    """Runner de testes terminou com exit code não-zero."""

    __test__ = False  # evita coleta pelo pytest
    code: ClassVar[str] = errors.TEST_FAILED


@dataclass(eq=False)
class ToolNotFound(PipelineException):
    """Executável da ferramenta não foi encontrado no PATH."""

    code: ClassVar[str] = errors.TOOL_NOT_FOUND


# ---------------------------------------------------------------------------
# Artefatos
# ---------------------------------------------------------------------------

@dataclass(eq=False)
class ArtifactMissing(PipelineException):
    """Artefato consumido não existe, está vazio ou não pertence à run."""

    code: ClassVar[str] = errors.ARTIFACT_MISSING


@dataclass(eq=False)
class AssemblyFailed(PipelineException):
    """Cópia para o diretório de publicação falhou."""

    code: ClassVar[str] = errors.ASSEMBLY_FAILED


@dataclass(eq=False)
class PublishFailed(PipelineException):
    """Sink de publicação reportou falha."""

    code: ClassVar[str] = errors.PUBLISH_FAILED


# ---------------------------------------------------------------------------
# Engine / Configuração
# ---------------------------------------------------------------------------

@dataclass(eq=False)
class EngineConfigurationError(PipelineException):
    """Configuração inválida ou inconsistente para execução."""

    code: ClassVar[str] = errors.ENGINE_CONFIGURATION_ERROR
