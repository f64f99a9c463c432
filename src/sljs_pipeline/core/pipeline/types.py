# src/sljs_pipeline/core/pipeline/types.py
"""
Tipos canônicos do pipeline.

Componentes principais:
    - StepStatus → estados finais (SUCCESS, SKIPPED, FAILED)
    - StepKind   → classificação semântica de Steps (build, test, docs...)
    - StepResult → resultado imutável de execução de um Step

Princípios fundamentais:
    - Tipos são estáveis e serializáveis (valores textuais canônicos)
    - Nenhuma lógica de execução vive neste módulo

Limites explícitos:
    - Não executa Steps
    - Não decide políticas de execução
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List


class StepKind(str, Enum):
    """
    Tipos semânticos de Steps.

    Tipos definidos:
        - BUILD: compilação (nativa ou alvo browser)
        - TEST: compilação seguida de suíte de testes
        - DOCS: geração de documentação de referência
        - BUNDLE: instalação de dependências + empacotamento da demo
        - ASSEMBLE: montagem do diretório de publicação

    O `kind` é puramente informativo: o Engine não decide execução com
    base nele. Serve para Manifest e leitura do resultado.
    """
    BUILD = "build"
    TEST = "test"
    DOCS = "docs"
    BUNDLE = "bundle"
    ASSEMBLE = "assemble"


class StepStatus(str, Enum):
    """
    Estados finais possíveis da execução de um Step.

    Estados definidos:
        - SUCCESS: execução concluída com sucesso
        - SKIPPED: não executado (config, dependência falha ou run abortada)
        - FAILED: execução interrompida por erro

    Estados intermediários (running) não pertencem a este enum: o Manifest
    os representa por conta própria.
    """
    SUCCESS = "success"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class StepResult:
    """
    Resultado imutável da execução de um Step.

    Campos:
        - step_id: identificador único do Step
        - kind: tipo semântico do Step
        - status: estado final da execução
        - summary: resumo textual
        - metrics: números produzidos (ex.: duração de comandos, arquivos copiados)
        - warnings: avisos não fatais
        - artifacts: chave de artefato -> path produzido
        - payload: dados adicionais livres (ex.: `error`, `commands`, `collisions`)

    Invariantes:
        - Uma instância nunca é alterada após criada
        - `step_id`, `kind` e `status` estão sempre presentes
    """
    step_id: str
    kind: StepKind
    status: StepStatus
    summary: str
    metrics: Dict[str, Any] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)
    artifacts: Dict[str, str] = field(default_factory=dict)
    payload: Dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status != StepStatus.FAILED

    def to_dict(self) -> Dict[str, Any]:
        """Representação serializável (usada pelo Manifest)."""
        return {
            "step_id": self.step_id,
            "kind": self.kind.value if isinstance(self.kind, StepKind) else self.kind,
            "status": self.status.value,
            "summary": self.summary,
            "metrics": dict(self.metrics),
            "warnings": list(self.warnings),
            "artifacts": dict(self.artifacts),
            "payload": dict(self.payload),
        }
