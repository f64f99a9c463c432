# src/sljs_pipeline/tools/runner.py
"""
Runner de comandos externos.

Cada Step é uma invocação síncrona e bloqueante de uma ferramenta
(cargo, wasm-pack, npm, npx). Este módulo encapsula `subprocess.run`:

- a saída (stdout/stderr) é capturada integralmente e devolvida sem
  truncamento, para que falhas cheguem ao coordenador como foram emitidas
- o ambiente do processo é herdado e complementado pelo `env` do Step
  (ex.: `CARGO_TERM_COLOR`)
- não existe timeout nem retry: limites de wall-clock pertencem ao
  scheduler externo

Executável ausente no PATH vira `ToolNotFound`; exit code não-zero é
apenas reportado em `CommandResult` e o Step decide a exceção
(BuildFailed / TestFailed).
"""

from __future__ import annotations

import os
import subprocess
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Mapping, Optional, Sequence, Tuple

from sljs_pipeline.core.exceptions import ToolNotFound


@dataclass(frozen=True)
class CommandResult:
    """Resultado de uma invocação de ferramenta."""

    argv: Tuple[str, ...]
    cwd: str
    returncode: int
    stdout: str = ""
    stderr: str = ""
    duration_ms: int = 0

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def to_dict(self) -> Dict[str, object]:
        return {
            "argv": list(self.argv),
            "cwd": self.cwd,
            "returncode": self.returncode,
            "stdout": self.stdout,
            "stderr": self.stderr,
            "duration_ms": self.duration_ms,
        }


class CommandRunner:
    """Executa comandos externos de forma síncrona."""

    def __init__(self, *, base_env: Optional[Mapping[str, str]] = None, inherit_env: bool = True):
        self.base_env: Dict[str, str] = dict(base_env or {})
        self.inherit_env = inherit_env

    def _environment(self, env: Optional[Mapping[str, str]]) -> Dict[str, str]:
        merged: Dict[str, str] = dict(os.environ) if self.inherit_env else {}
        merged.update(self.base_env)
        merged.update({k: str(v) for k, v in (env or {}).items()})
        return merged

    def run(
        self,
        argv: Sequence[str],
        *,
        cwd: Path,
        env: Optional[Mapping[str, str]] = None,
    ) -> CommandResult:
        argv = tuple(str(a) for a in argv)
        if not argv:
            raise ValueError("argv must contain at least the executable")

        start = time.monotonic()
        try:
            completed = subprocess.run(
                list(argv),
                cwd=str(cwd),
                env=self._environment(env),
                capture_output=True,
                text=True,
                check=False,
            )
        except FileNotFoundError as e:
            # cwd inexistente também chega aqui; distinguir para a mensagem
            if not Path(cwd).is_dir():
                raise ToolNotFound(
                    message=f"Working directory not found: {cwd}",
                    details={"argv": list(argv), "cwd": str(cwd)},
                    hint="Verifique o `workdir` configurado para a ferramenta.",
                ) from e
            raise ToolNotFound(
                message=f"Executable not found: {argv[0]}",
                details={"argv": list(argv), "cwd": str(cwd)},
                hint=f"Instale `{argv[0]}` no ambiente de execução do pipeline.",
            ) from e

        return CommandResult(
            argv=argv,
            cwd=str(cwd),
            returncode=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
            duration_ms=int((time.monotonic() - start) * 1000),
        )
