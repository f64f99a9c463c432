# tests/core/traceability/test_manifest_round_trip.py
"""
Testes de persistência e round-trip do Manifest.

O Manifest salvo em JSON (chaves ordenadas) é recarregado sem perda
estrutural.
"""

import json
from datetime import datetime, timezone
from pathlib import Path

import pytest

try:
    from sljs_pipeline.core.traceability.manifest import (
        add_event,
        create_manifest,
        load_manifest,
        save_manifest,
    )
except Exception as e:
    create_manifest = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def test_round_trip_save_load(tmp_path: Path):
    if _IMPORT_ERR is not None:
        pytest.fail(
            "Missing manifest persistence APIs. Implement:\n"
            "- save_manifest(manifest, path: Path) -> None  (JSON)\n"
            "- load_manifest(path: Path) -> manifest\n"
            f"Import error: {_IMPORT_ERR}"
        )
    ts = datetime(2026, 1, 16, 12, 0, 0, tzinfo=timezone.utc)
    m = create_manifest(
        run_id="run-004", pipeline="publish", started_at=ts, tool_version="0.1.0", config_hash="d" * 64
    )
    add_event(m, event_type="publish_finished", ts=ts, payload={"sink": "directory"})

    out = tmp_path / "runs" / "run-004" / "manifest.json"
    save_manifest(m, out)

    assert out.exists()
    assert json.loads(out.read_text(encoding="utf-8"))["run"]["run_id"] == "run-004"
    loaded = load_manifest(out)
    assert loaded.to_dict() == m.to_dict()
