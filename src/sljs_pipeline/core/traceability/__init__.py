# src/sljs_pipeline/core/traceability/__init__.py
"""
Pacote de rastreabilidade: Manifest v1 e fingerprints.

API pública exposta:
    - PipelineManifest   → estrutura canônica do Manifest
    - create_manifest    → criação explícita (sem eventos implícitos)
    - add_event          → registro explícito no Event Log
    - step_started / step_finished / step_failed → estado de Steps
    - run_finished       → status final da run
    - save_manifest / load_manifest → persistência JSON
    - compute_config_hash / compute_tree_hash → identidades SHA-256
"""

from .fingerprint import compute_config_hash, compute_tree_hash
from .manifest import (
    PipelineManifest,
    add_event,
    create_manifest,
    load_manifest,
    run_finished,
    save_manifest,
    step_failed,
    step_finished,
    step_started,
)

__all__ = [
    "PipelineManifest",
    "add_event",
    "compute_config_hash",
    "compute_tree_hash",
    "create_manifest",
    "load_manifest",
    "run_finished",
    "save_manifest",
    "step_failed",
    "step_finished",
    "step_started",
]
