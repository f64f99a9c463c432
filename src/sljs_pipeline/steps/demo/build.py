"""Step canônico: demo.build (v1).

Instala as dependências do demo (`npm install`) e gera o bundle
(`npx webpack`) a partir de `wasm/demo`.

Pré-condições:
- o artefato `browser.pkg` desta run existe e está populado
  (verificado pelo Engine, via `consumes`)
- a dependência local do demo (`toolchain.demo.package_dir`, relativa
  ao workdir do demo) resolve exatamente para esse artefato; um demo
  apontando para outro diretório empacotaria código que não foi
  construído nesta run

O diretório do bundle (`dist`) é limpo antes da instalação e registrado
como artefato `demo.dist` ao final.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import List

from sljs_pipeline.core.exceptions import ArtifactMissing, BuildFailed
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
from sljs_pipeline.steps.browser.build_test import BROWSER_PKG_ARTIFACT

DEMO_DIST_ARTIFACT = "demo.dist"


def _same_path(a: Path, b: Path) -> bool:
    return os.path.normcase(str(Path(a).resolve())) == os.path.normcase(str(Path(b).resolve()))


@dataclass
class DemoBuildStep(Step):
    """Constrói o bundle do demo sobre o pacote WebAssembly da run."""

    id: str = "demo.build"
    kind: StepKind = StepKind.BUNDLE
    depends_on: List[str] = None  # type: ignore[assignment]
    consumes: List[str] = None  # type: ignore[assignment]

    def __post_init__(self) -> None:
        if self.depends_on is None:
            self.depends_on = ["browser.build"]
        if self.consumes is None:
            self.consumes = [BROWSER_PKG_ARTIFACT]

    def _check_local_dependency(self, ctx: RunContext, workdir: Path, package_dir: str) -> Path:
        pkg = ctx.get_artifact(BROWSER_PKG_ARTIFACT)
        linked = workdir / package_dir
        if not _same_path(linked, pkg):
            raise ArtifactMissing(
                message=f"Required artifact '{BROWSER_PKG_ARTIFACT}' is not the demo's local dependency",
                details={
                    "artifact": BROWSER_PKG_ARTIFACT,
                    "required_by": self.id,
                    "path": str(pkg),
                    "linked_path": str(linked),
                    "reason": "demo package_dir does not resolve to the browser package",
                },
                hint="Ajuste toolchain.demo.package_dir para apontar para o pacote gerado (ex.: ../pkg).",
            )
        return require_populated(pkg, artifact=BROWSER_PKG_ARTIFACT, required_by=self.id)

    def run(self, ctx: RunContext) -> StepResult:
        cfg = tool_cfg(ctx, "demo")
        workdir = ctx.resolve(cfg.get("workdir", "wasm/demo"))
        env = tool_env(cfg)
        dist_dir = workdir / str(cfg.get("out_dir", "dist"))

        pkg = self._check_local_dependency(ctx, workdir, str(cfg.get("package_dir", "../pkg")))

        clean_dir(dist_dir)

        install = invoke(
            ctx,
            step_id=self.id,
            argv=argv_from(cfg, "install", tool="demo"),
            cwd=workdir,
            env=env,
            failure=BuildFailed,
            hint="Falha ao resolver as dependências do demo.",
        )
        bundle = invoke(
            ctx,
            step_id=self.id,
            argv=argv_from(cfg, "bundle", tool="demo"),
            cwd=workdir,
            env=env,
            failure=BuildFailed,
            hint="Falha do bundler do demo.",
        )
        require_populated(dist_dir, artifact=DEMO_DIST_ARTIFACT, required_by=self.id)
        ctx.set_artifact(DEMO_DIST_ARTIFACT, dist_dir)

        return StepResult(
            step_id=self.id,
            kind=self.kind,
            status=StepStatus.SUCCESS,
            summary="demo bundle built",
            metrics={"install_ms": install.duration_ms, "bundle_ms": bundle.duration_ms},
            warnings=[],
            artifacts={DEMO_DIST_ARTIFACT: str(dist_dir)},
            payload={
                "commands": [command_summary(install), command_summary(bundle)],
                "package": str(pkg),
            },
        )
