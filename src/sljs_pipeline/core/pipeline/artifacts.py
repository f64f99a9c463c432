# src/sljs_pipeline/core/pipeline/artifacts.py
"""
Verificações de artefatos de filesystem.

Um artefato é uma subárvore produzida por um Step. Antes de um Step
dependente rodar, o artefato consumido precisa existir **e** não estar
vazio; caso contrário a falha é de pré-condição (`ArtifactMissing`),
detectada antes da ferramenta externa ser invocada.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from sljs_pipeline.core.exceptions import ArtifactMissing


def is_populated(path: Path) -> bool:
    """Diretório existente com ao menos uma entrada, ou arquivo não vazio."""
    path = Path(path)
    if path.is_dir():
        return any(path.iterdir())
    if path.is_file():
        return path.stat().st_size > 0
    return False


def require_populated(
    path: Path,
    *,
    artifact: str,
    required_by: str,
    hint: Optional[str] = None,
) -> Path:
    """
    Garante que `path` está populado e o retorna.

    Raises:
        ArtifactMissing: Se o path não existir ou estiver vazio.
    """
    path = Path(path)
    if not path.exists():
        reason = "path does not exist"
    elif not is_populated(path):
        reason = "path is empty"
    else:
        return path

    raise ArtifactMissing(
        message=f"Required artifact '{artifact}' is missing ({reason})",
        details={
            "artifact": artifact,
            "required_by": required_by,
            "path": str(path),
            "reason": reason,
        },
        hint=hint or "Garanta que o Step produtor rodou com sucesso nesta run.",
    )
