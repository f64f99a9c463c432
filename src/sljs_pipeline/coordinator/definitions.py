# src/sljs_pipeline/coordinator/definitions.py
"""
Definições de pipeline declaradas em configuração (`pipelines.<nome>`).

Cada definição descreve:
    - triggers: evento → branches aceitas (`null` = qualquer branch)
    - steps: ids do catálogo, em ordem
    - engine: política de execução sobreposta à seção global `engine`
    - sequential: encadeia cada Step no anterior (`depends_on`)
    - concurrency: `ref` (uma chave por pipeline + branch; `dev` e
      `refs/heads/dev` compartilham a chave) ou `null`
    - publish: se uma run bem-sucedida é entregue ao sink

A validação é estrutural e acontece antes de qualquer run: uma definição
inválida levanta `InvalidPipelineDefinitionError`.
"""

from __future__ import annotations

from copy import deepcopy
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from sljs_pipeline.core.config.errors import InvalidPipelineDefinitionError
from sljs_pipeline.core.config.loader import get_section
from sljs_pipeline.core.config.merge import deep_merge
from sljs_pipeline.core.pipeline.step import Step
from sljs_pipeline.steps import STEP_CATALOG, build_step, known_steps

from .triggers import EventType, TriggerEvent, matches

SUPPORTED_CONCURRENCY = (None, "ref")


@dataclass(frozen=True)
class PipelineDefinition:
    name: str
    triggers: Dict[str, Optional[Tuple[str, ...]]]
    step_ids: Tuple[str, ...]
    engine: Dict[str, Any] = field(default_factory=dict)
    sequential: bool = False
    concurrency: Optional[str] = None
    publish: bool = False

    def matches(self, event: TriggerEvent) -> bool:
        return matches(self.triggers, event)

    def concurrency_key(self, event: TriggerEvent) -> Optional[str]:
        if self.concurrency == "ref":
            return f"{self.name}:{event.branch}"
        return None

    def build_steps(self) -> List[Step]:
        """Instancia os Steps; em pipelines sequenciais cada um depende do anterior."""
        steps = [build_step(sid) for sid in self.step_ids]
        if self.sequential:
            for prev, step in zip(steps, steps[1:]):
                if prev.id not in step.depends_on:
                    step.depends_on = list(step.depends_on) + [prev.id]
        return steps

    def effective_config(self, config: Mapping[str, Any]) -> Dict[str, Any]:
        """Config da run: `engine` global sobreposto pelo `engine` da definição."""
        effective = deepcopy(dict(config))
        effective["engine"] = deep_merge(get_section(effective, "engine"), self.engine)
        return effective


def _invalid(name: str, message: str) -> InvalidPipelineDefinitionError:
    return InvalidPipelineDefinitionError(f"pipelines.{name}: {message}")


def _parse_triggers(name: str, raw: Any) -> Dict[str, Optional[Tuple[str, ...]]]:
    if not isinstance(raw, dict) or not raw:
        raise _invalid(name, "triggers must be a non-empty mapping")

    known = {e.value for e in EventType}
    triggers: Dict[str, Optional[Tuple[str, ...]]] = {}
    for event, branches in raw.items():
        if event not in known:
            raise _invalid(name, f"unknown trigger event {event!r} (expected one of {sorted(known)})")
        if branches is None:
            triggers[event] = None
        elif isinstance(branches, list) and all(isinstance(b, str) and b for b in branches):
            triggers[event] = tuple(branches)
        else:
            raise _invalid(name, f"triggers.{event} must be null or a list of branch names")
    return triggers


def _parse_steps(name: str, raw: Any) -> Tuple[str, ...]:
    if not isinstance(raw, list) or not raw:
        raise _invalid(name, "steps must be a non-empty list")
    for sid in raw:
        if sid not in STEP_CATALOG:
            raise _invalid(name, f"unknown step id {sid!r} (known: {known_steps()})")
    if len(set(raw)) != len(raw):
        raise _invalid(name, "steps must not repeat")
    return tuple(raw)


def parse_definition(name: str, raw: Any) -> PipelineDefinition:
    if not isinstance(raw, dict):
        raise _invalid(name, f"definition must be a mapping, got {type(raw).__name__}")

    engine = raw.get("engine") or {}
    if not isinstance(engine, dict):
        raise _invalid(name, "engine must be a mapping")

    concurrency = raw.get("concurrency")
    if concurrency not in SUPPORTED_CONCURRENCY:
        raise _invalid(name, f"unsupported concurrency {concurrency!r} (expected 'ref' or null)")

    for flag in ("sequential", "publish"):
        if not isinstance(raw.get(flag, False), bool):
            raise _invalid(name, f"{flag} must be a boolean")

    return PipelineDefinition(
        name=name,
        triggers=_parse_triggers(name, raw.get("triggers")),
        step_ids=_parse_steps(name, raw.get("steps")),
        engine=dict(engine),
        sequential=raw.get("sequential", False),
        concurrency=concurrency,
        publish=raw.get("publish", False),
    )


def load_definitions(config: Mapping[str, Any]) -> Dict[str, PipelineDefinition]:
    """Definições na ordem em que aparecem em `pipelines`."""
    raw = get_section(dict(config), "pipelines")
    return {name: parse_definition(name, body) for name, body in raw.items()}
