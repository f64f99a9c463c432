# src/sljs_pipeline/coordinator/triggers.py
"""
Eventos de trigger e filtro de branches.

Eventos suportados:
    - push: o filtro se aplica à branch enviada (`ref`)
    - pull_request: o filtro se aplica à branch de destino (`base_ref`)

Filtros por pipeline (`pipelines.<nome>.triggers`):
    - ausência do evento → o pipeline não reage a ele
    - `null` → qualquer branch
    - lista → nomes (ou padrões fnmatch) de branches aceitas

Prefixos `refs/heads/` são removidos antes da comparação.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from fnmatch import fnmatchcase
from typing import Any, Dict, Iterable, Mapping, Optional

HEADS_PREFIX = "refs/heads/"


class EventType(str, Enum):
    PUSH = "push"
    PULL_REQUEST = "pull_request"


def branch_name(ref: str) -> str:
    return ref[len(HEADS_PREFIX):] if ref.startswith(HEADS_PREFIX) else ref


@dataclass(frozen=True)
class TriggerEvent:
    """Evento de controle de versão que pode iniciar pipelines."""

    event: EventType
    ref: str
    base_ref: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "event", EventType(self.event))
        if not self.ref:
            raise ValueError("TriggerEvent.ref must not be empty")
        if self.event == EventType.PULL_REQUEST and not self.base_ref:
            raise ValueError("pull_request TriggerEvent requires base_ref")

    @property
    def branch(self) -> str:
        return branch_name(self.ref)

    @property
    def target_branch(self) -> str:
        """Branch avaliada pelo filtro (destino do PR, ou a própria branch no push)."""
        if self.event == EventType.PULL_REQUEST:
            return branch_name(self.base_ref)
        return self.branch

    def to_dict(self) -> Dict[str, Any]:
        return {"event": self.event.value, "ref": self.ref, "base_ref": self.base_ref}


def _branch_allowed(branch: str, patterns: Iterable[str]) -> bool:
    return any(fnmatchcase(branch, branch_name(p)) for p in patterns)


def matches(triggers: Mapping[str, Optional[Iterable[str]]], event: TriggerEvent) -> bool:
    """True quando `event` satisfaz o filtro de triggers de um pipeline."""
    key = event.event.value
    if key not in triggers:
        return False
    branches = triggers[key]
    if branches is None:
        return True
    return _branch_allowed(event.target_branch, branches)
