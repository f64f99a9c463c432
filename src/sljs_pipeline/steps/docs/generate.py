"""Step canônico: docs.generate (v1).

Gera a documentação HTML da API do core (`cargo doc --no-deps`).
Dependências de terceiros ficam de fora: se o argv configurado não
trouxer `--no-deps`, a flag é adicionada.

O diretório de saída (`toolchain.native.doc_dir`, padrão `target/doc`) é
limpo antes da geração e precisa estar populado ao final. Ele é
registrado como artefato `docs.html`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from sljs_pipeline.core.exceptions import BuildFailed
from sljs_pipeline.core.pipeline.artifacts import require_populated
from sljs_pipeline.core.pipeline.context import RunContext
from sljs_pipeline.core.pipeline.step import Step
from sljs_pipeline.core.pipeline.types import StepKind, StepResult, StepStatus
from sljs_pipeline.steps._common import (
    argv_from,
    clean_dir,
    command_summary,
    invoke,
    tool_cfg,
    tool_env,
)

DOCS_HTML_ARTIFACT = "docs.html"


@dataclass
class DocsGenerateStep(Step):
    id: str = "docs.generate"
    kind: StepKind = StepKind.DOCS
    depends_on: List[str] = None  # type: ignore[assignment]
    consumes: List[str] = None  # type: ignore[assignment]

    def __post_init__(self) -> None:
        if self.depends_on is None:
            self.depends_on = []
        if self.consumes is None:
            self.consumes = []

    def run(self, ctx: RunContext) -> StepResult:
        cfg = tool_cfg(ctx, "native")
        workdir = ctx.resolve(cfg.get("workdir", "."))
        doc_dir = workdir / str(cfg.get("doc_dir", "target/doc"))

        argv = argv_from(cfg, "doc", tool="native")
        if "--no-deps" not in argv:
            argv.append("--no-deps")

        clean_dir(doc_dir)
        doc = invoke(
            ctx,
            step_id=self.id,
            argv=argv,
            cwd=workdir,
            env=tool_env(cfg),
            failure=BuildFailed,
            hint="Falha ao gerar a documentação da API.",
        )
        require_populated(doc_dir, artifact=DOCS_HTML_ARTIFACT, required_by=self.id)
        ctx.set_artifact(DOCS_HTML_ARTIFACT, doc_dir)

        return StepResult(
            step_id=self.id,
            kind=self.kind,
            status=StepStatus.SUCCESS,
            summary="API documentation generated",
            metrics={"doc_ms": doc.duration_ms},
            warnings=[],
            artifacts={DOCS_HTML_ARTIFACT: str(doc_dir)},
            payload={"commands": [command_summary(doc)]},
        )
