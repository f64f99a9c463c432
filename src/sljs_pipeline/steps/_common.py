# src/sljs_pipeline/steps/_common.py
"""
Helpers compartilhados pelos Steps concretos.

- leitura da seção `toolchain.<tool>`
- validação de argv configurado
- invocação de ferramenta com conversão de exit code não-zero na
  exceção tipada do Step (BuildFailed / TestFailed), com a saída
  completa em `details`
- limpeza de diretórios de saída antes de um build
"""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Type

from sljs_pipeline.core.config.loader import get_section
from sljs_pipeline.core.errors import tail_lines
from sljs_pipeline.core.exceptions import EngineConfigurationError, PipelineException
from sljs_pipeline.core.pipeline.context import RunContext
from sljs_pipeline.tools.runner import CommandResult


def tool_cfg(ctx: RunContext, tool: str) -> Dict[str, Any]:
    return get_section(ctx.config, "toolchain", tool)


def argv_from(cfg: Dict[str, Any], key: str, *, tool: str) -> List[str]:
    argv = cfg.get(key)
    if not isinstance(argv, list) or not argv or not all(isinstance(a, str) and a for a in argv):
        raise EngineConfigurationError(
            message=f"Invalid config: toolchain.{tool}.{key} must be a non-empty list of strings",
            details={"tool": tool, "key": key, "received": argv},
            hint=f"Declare toolchain.{tool}.{key} como lista (ex.: [\"cargo\", \"build\"]).",
        )
    return list(argv)


def tool_env(cfg: Dict[str, Any]) -> Dict[str, str]:
    env = cfg.get("env") or {}
    if not isinstance(env, dict):
        raise EngineConfigurationError(
            message="Invalid config: toolchain env must be a mapping",
            details={"received": type(env).__name__},
        )
    return {str(k): str(v) for k, v in env.items()}


def invoke(
    ctx: RunContext,
    *,
    step_id: str,
    argv: List[str],
    cwd: Path,
    env: Optional[Mapping[str, str]] = None,
    failure: Type[PipelineException],
    hint: Optional[str] = None,
) -> CommandResult:
    """
    Invoca uma ferramenta via `ctx.runner` e falha com `failure` se o exit
    code não for zero. A saída é preservada integralmente em `details`.
    """
    if ctx.runner is None:
        raise EngineConfigurationError(
            message="RunContext has no command runner",
            details={"step": step_id},
        )

    ctx.log(step_id=step_id, level="info", message="running command", argv=list(argv), cwd=str(cwd))
    result = ctx.runner.run(argv, cwd=cwd, env=dict(env or {}))

    if not result.ok:
        ctx.log(
            step_id=step_id,
            level="error",
            message="command failed",
            argv=list(argv),
            returncode=result.returncode,
            stderr_tail=tail_lines(result.stderr),
        )
        details = result.to_dict()
        details["step"] = step_id
        raise failure(
            message=f"`{' '.join(argv)}` exited with code {result.returncode}",
            details=details,
            hint=hint,
        )

    ctx.log(
        step_id=step_id,
        level="info",
        message="command finished",
        argv=list(argv),
        duration_ms=result.duration_ms,
    )
    return result


def command_summary(result: CommandResult) -> Dict[str, Any]:
    """Resumo leve de um comando bem-sucedido (sem a saída completa)."""
    return {
        "argv": list(result.argv),
        "cwd": result.cwd,
        "returncode": result.returncode,
        "duration_ms": result.duration_ms,
    }


def clean_dir(path: Path) -> None:
    """Remove `path` se existir (diretório ou arquivo)."""
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    elif path.exists() or path.is_symlink():
        path.unlink()
