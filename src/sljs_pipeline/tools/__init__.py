# src/sljs_pipeline/tools/__init__.py
"""Fronteira com ferramentas externas (processos)."""

from .runner import CommandResult, CommandRunner

__all__ = ["CommandResult", "CommandRunner"]
