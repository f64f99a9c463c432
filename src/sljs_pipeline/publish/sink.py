# src/sljs_pipeline/publish/sink.py
"""
Sinks de publicação.

O sink recebe o diretório de publicação montado (`site/`) e a ref que o
originou. Ele é externo ao pipeline: o coordenador apenas o invoca
quando a run de publicação terminou com sucesso e não foi superada.

Implementações:
    - DirectoryPublishSink: espelha o site em `<root>/<ref>` (substituição
      integral, nunca mescla com uma publicação anterior)
    - CommandPublishSink: delega para um comando externo configurado
      (`{source}` e `{ref}` são substituídos no argv)

Qualquer falha vira `PublishFailed`; os artefatos da run não são
revertidos.
"""

from __future__ import annotations

import re
import shutil
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

from sljs_pipeline.core.config.loader import get_section
from sljs_pipeline.core.exceptions import EngineConfigurationError, PublishFailed
from sljs_pipeline.core.errors import tail_lines


@runtime_checkable
class PublishSink(Protocol):
    name: str

    def publish(self, source_dir: Path, *, ref: str) -> Dict[str, Any]:
        ...


def ref_slug(ref: str) -> str:
    """`refs/heads/main` → `main`; caracteres fora de [A-Za-z0-9._-] viram `-`."""
    name = ref[len("refs/heads/"):] if ref.startswith("refs/heads/") else ref
    slug = re.sub(r"[^A-Za-z0-9._-]+", "-", name).strip("-.")
    return slug or "default"


class DirectoryPublishSink:
    name = "directory"

    def __init__(self, root: Path):
        self.root = Path(root)

    def publish(self, source_dir: Path, *, ref: str) -> Dict[str, Any]:
        source_dir = Path(source_dir)
        dest = self.root / ref_slug(ref)
        try:
            if dest.exists():
                shutil.rmtree(dest)
            dest.parent.mkdir(parents=True, exist_ok=True)
            shutil.copytree(source_dir, dest)
        except OSError as e:
            raise PublishFailed(
                message=f"Failed to publish to {dest}: {e}",
                details={
                    "sink": self.name,
                    "source_dir": str(source_dir),
                    "destination": str(dest),
                    "ref": ref,
                },
                hint="Verifique permissões do diretório de publicação.",
            ) from e
        return {"sink": self.name, "destination": str(dest), "ref": ref}


class CommandPublishSink:
    name = "command"

    def __init__(self, argv: List[str], *, runner: Any, cwd: Path):
        if not argv:
            raise EngineConfigurationError(
                message="Invalid config: publish.command.argv must not be empty",
                details={"sink": self.name},
                hint="Declare publish.command.argv (ex.: [\"./deploy.sh\", \"{source}\"]).",
            )
        self.argv = list(argv)
        self.runner = runner
        self.cwd = Path(cwd)

    def publish(self, source_dir: Path, *, ref: str) -> Dict[str, Any]:
        argv = [a.replace("{source}", str(source_dir)).replace("{ref}", ref) for a in self.argv]
        result = self.runner.run(argv, cwd=self.cwd)
        if not result.ok:
            raise PublishFailed(
                message=f"Publish command exited with code {result.returncode}",
                details={
                    "sink": self.name,
                    "source_dir": str(source_dir),
                    "ref": ref,
                    "argv": argv,
                    "returncode": result.returncode,
                    "stderr_tail": tail_lines(result.stderr),
                },
            )
        return {"sink": self.name, "argv": argv, "ref": ref}


def build_sink(config: Dict[str, Any], *, workspace: Path, runner: Optional[Any] = None) -> PublishSink:
    """Constrói o sink descrito em `config["publish"]`."""
    cfg = get_section(config, "publish")
    kind = cfg.get("sink", "directory")

    if kind == "directory":
        root = Path(get_section(cfg, "directory").get("root", ".pipeline/published")).expanduser()
        return DirectoryPublishSink(root if root.is_absolute() else Path(workspace) / root)

    if kind == "command":
        if runner is None:
            raise EngineConfigurationError(
                message="Command publish sink requires a command runner",
                details={"sink": kind},
            )
        argv = get_section(cfg, "command").get("argv") or []
        return CommandPublishSink([str(a) for a in argv], runner=runner, cwd=Path(workspace))

    raise EngineConfigurationError(
        message=f"Unknown publish sink: {kind!r}",
        details={"sink": kind, "supported": ["directory", "command"]},
        hint="Use publish.sink: directory | command",
    )
