"""Step canônico: site.assemble (v1).

Monta o diretório de publicação (`site/`) a partir dos artefatos desta
run, na ordem:

    1. documentação HTML (`docs.html`)
    2. bundle do demo (`demo.dist`)

A cópia segue a semântica de `cp -r <fonte>/* site/`:
- o conteúdo de cada fonte é mesclado na raiz do site
- entradas ocultas no topo de cada fonte são ignoradas, a menos que
  `site.include_hidden` esteja ativo
- colisões de path são resolvidas pela ordem de cópia (o demo vence)
  e reportadas em `payload["collisions"]`, nunca como erro

A montagem é feita em um diretório de staging irmão de `site/`. O site
anterior é removido no início e o staging só é promovido quando todas
as cópias terminam; em falha o staging é descartado e a falha é
ASSEMBLY_FAILED. Rodar a montagem duas vezes sobre os mesmos artefatos
produz árvores com o mesmo `tree_sha256`.
"""

from __future__ import annotations

import os
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Sequence, Tuple

from sljs_pipeline.core.config.loader import get_section
from sljs_pipeline.core.exceptions import AssemblyFailed
from sljs_pipeline.core.pipeline.context import RunContext
from sljs_pipeline.core.pipeline.step import Step
from sljs_pipeline.core.pipeline.types import StepKind, StepResult, StepStatus
from sljs_pipeline.core.traceability.fingerprint import compute_tree_hash, iter_tree_files
from sljs_pipeline.steps._common import clean_dir
from sljs_pipeline.steps.demo.build import DEMO_DIST_ARTIFACT
from sljs_pipeline.steps.docs.generate import DOCS_HTML_ARTIFACT

SITE_DIR_ARTIFACT = "site.dir"


@dataclass(frozen=True)
class AssemblyReport:
    """Resumo de uma montagem bem-sucedida."""

    dest: Path
    files: int
    collisions: List[Dict[str, str]] = field(default_factory=list)
    tree_sha256: str = ""


def _entry_files(entry: Path) -> List[str]:
    if entry.is_dir():
        return [f"{entry.name}/{rel}" for rel, _ in iter_tree_files(entry)]
    return [entry.name]


def assemble_site(
    *,
    sources: Sequence[Tuple[str, Path]],
    dest: Path,
    include_hidden: bool = False,
) -> AssemblyReport:
    """
    Copia o conteúdo de cada fonte, em ordem, para `dest`.

    Args:
        sources: pares (rótulo, diretório); a última fonte vence colisões
        dest: diretório de publicação (substituído por inteiro)
        include_hidden: copia entradas ocultas do topo de cada fonte

    Raises:
        AssemblyFailed: se qualquer cópia falhar (staging é descartado)
    """
    dest = Path(dest)
    staging = dest.with_name(f".{dest.name}.staging")

    written: Dict[str, str] = {}
    collisions: List[Dict[str, str]] = []

    try:
        clean_dir(dest)
        clean_dir(staging)
        staging.mkdir(parents=True)

        for label, src in sources:
            src = Path(src)
            for entry in sorted(src.iterdir(), key=lambda p: p.name):
                if not include_hidden and entry.name.startswith("."):
                    continue

                for rel in _entry_files(entry):
                    previous = written.get(rel)
                    if previous is not None:
                        collisions.append({"path": rel, "overwritten": previous, "kept": label})
                    written[rel] = label

                target = staging / entry.name
                if entry.is_dir():
                    shutil.copytree(entry, target, dirs_exist_ok=True)
                elif target.is_dir():
                    # cp -r recusa sobrescrever diretório com arquivo
                    raise IsADirectoryError(f"cannot overwrite directory '{target.name}' with a file")
                else:
                    shutil.copy2(entry, target)

        os.replace(staging, dest)
    except OSError as e:
        shutil.rmtree(staging, ignore_errors=True)
        raise AssemblyFailed(
            message=f"Failed to assemble publish directory: {e}",
            details={
                "dest": str(dest),
                "sources": [{"artifact": label, "path": str(src)} for label, src in sources],
                "exception_type": e.__class__.__name__,
                "exception_message": str(e),
            },
            hint="Verifique permissões e espaço em disco no workspace.",
        ) from e

    return AssemblyReport(
        dest=dest,
        files=len(written),
        collisions=collisions,
        tree_sha256=compute_tree_hash(dest),
    )


@dataclass
class SiteAssembleStep(Step):
    id: str = "site.assemble"
    kind: StepKind = StepKind.ASSEMBLE
    depends_on: List[str] = None  # type: ignore[assignment]
    consumes: List[str] = None  # type: ignore[assignment]

    def __post_init__(self) -> None:
        if self.depends_on is None:
            self.depends_on = ["docs.generate", "demo.build"]
        if self.consumes is None:
            self.consumes = [DOCS_HTML_ARTIFACT, DEMO_DIST_ARTIFACT]

    def run(self, ctx: RunContext) -> StepResult:
        cfg = get_section(ctx.config, "site")
        dest = ctx.resolve(str(cfg.get("dir", "site")))

        report = assemble_site(
            sources=[
                (DOCS_HTML_ARTIFACT, ctx.get_artifact(DOCS_HTML_ARTIFACT)),
                (DEMO_DIST_ARTIFACT, ctx.get_artifact(DEMO_DIST_ARTIFACT)),
            ],
            dest=dest,
            include_hidden=bool(cfg.get("include_hidden", False)),
        )
        ctx.set_artifact(SITE_DIR_ARTIFACT, dest)

        if report.collisions:
            ctx.log(
                step_id=self.id,
                level="info",
                message="path collisions resolved by copy order",
                collisions=[c["path"] for c in report.collisions],
            )

        payload: Dict[str, Any] = {
            "collisions": list(report.collisions),
            "tree_sha256": report.tree_sha256,
        }
        return StepResult(
            step_id=self.id,
            kind=self.kind,
            status=StepStatus.SUCCESS,
            summary=f"site assembled ({report.files} files)",
            metrics={"files": report.files, "collisions": len(report.collisions)},
            warnings=[],
            artifacts={SITE_DIR_ARTIFACT: str(dest)},
            payload=payload,
        )
