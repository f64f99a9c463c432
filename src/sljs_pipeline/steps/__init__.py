# src/sljs_pipeline/steps/__init__.py
"""
Catálogo de Steps concretos.

Cada id usado em `pipelines.<nome>.steps` precisa existir aqui. O
catálogo devolve instâncias novas a cada chamada, porque o coordenador
pode reescrever `depends_on` ao encadear pipelines sequenciais.
"""

from __future__ import annotations

from typing import Callable, Dict, List

from sljs_pipeline.core.pipeline.step import Step

from .browser import BrowserBuildTestStep, browser_build_only
from .demo import DemoBuildStep
from .docs import DocsGenerateStep
from .native import NativeBuildTestStep
from .site import SiteAssembleStep

STEP_CATALOG: Dict[str, Callable[[], Step]] = {
    "native.build_test": NativeBuildTestStep,
    "browser.build_test": BrowserBuildTestStep,
    "browser.build": browser_build_only,
    "docs.generate": DocsGenerateStep,
    "demo.build": DemoBuildStep,
    "site.assemble": SiteAssembleStep,
}


def known_steps() -> List[str]:
    return sorted(STEP_CATALOG)


def build_step(step_id: str) -> Step:
    """
    Instancia o Step registrado sob `step_id`.

    Raises:
        KeyError: se o id não estiver no catálogo.
    """
    try:
        factory = STEP_CATALOG[step_id]
    except KeyError:
        raise KeyError(f"Unknown step id: {step_id!r}") from None
    return factory()


__all__ = [
    "STEP_CATALOG",
    "BrowserBuildTestStep",
    "DemoBuildStep",
    "DocsGenerateStep",
    "NativeBuildTestStep",
    "SiteAssembleStep",
    "build_step",
    "known_steps",
]
