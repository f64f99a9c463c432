# src/sljs_pipeline/coordinator/__init__.py
"""Seleção de pipelines por evento, concorrência por ref e publicação."""

from .coordinator import Coordinator, CoordinatorResult, PipelineRun
from .definitions import PipelineDefinition, load_definitions, parse_definition
from .run_registry import RunRegistry, RunTicket
from .triggers import EventType, TriggerEvent, branch_name, matches

__all__ = [
    "Coordinator",
    "CoordinatorResult",
    "EventType",
    "PipelineDefinition",
    "PipelineRun",
    "RunRegistry",
    "RunTicket",
    "TriggerEvent",
    "branch_name",
    "load_definitions",
    "matches",
    "parse_definition",
]
