# src/sljs_pipeline/core/pipeline/step.py
"""
Contrato canônico de Step.

Um Step é a menor unidade executável de um pipeline: uma invocação de
ferramenta externa (ou uma cópia de diretórios) que produz um artefato
ou um veredito de teste.

Responsabilidades de um Step:
    - executar sua lógica uma única vez por run
    - interagir exclusivamente via RunContext (runner, workspace, artefatos)
    - produzir um StepResult imutável, ou levantar PipelineException

Princípios fundamentais:
    - Steps não conhecem o Engine, o planner nem o coordenador
    - Dependências (`depends_on`) e artefatos consumidos (`consumes`)
      são declarativos; o Engine verifica ambos antes de chamar `run`
    - Conformidade por duck typing (@runtime_checkable)
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable, List

from .context import RunContext
from .types import StepKind, StepResult


@runtime_checkable
class Step(Protocol):
    """
    Contrato canônico de um Step.

    Atributos obrigatórios:
        - id: identificador único e estável (ex.: "demo.build")
        - kind: classificação semântica (`StepKind`)
        - depends_on: ids dos Steps que precisam terminar com sucesso antes
        - consumes: chaves de artefato que precisam existir e não estar
          vazias antes de `run` (verificado pelo Engine)

    Invariantes:
        - `run` é executado no máximo uma vez por run
        - O retorno de `run` é sempre um `StepResult`

    Limites explícitos:
        - Não define retry: falhas de build/teste são determinísticas
        - Não decide políticas de execução (fail-fast, paralelismo)
    """
    id: str
    kind: StepKind
    depends_on: List[str]
    consumes: List[str]

    def run(self, ctx: RunContext) -> StepResult:
        """Executa a etapa uma única vez usando exclusivamente o RunContext."""
        ...
