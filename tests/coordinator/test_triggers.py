# tests/coordinator/test_triggers.py
"""
Testes de eventos de trigger e filtro de branches.

- push: filtro sobre a branch enviada
- pull_request: filtro sobre a branch de destino (obrigatória)
- `null` aceita qualquer branch; evento ausente nunca casa
"""

import pytest

try:
    from sljs_pipeline.coordinator.triggers import EventType, TriggerEvent, branch_name, matches
except Exception as e:  # noqa: BLE001
    TriggerEvent = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(f"Missing triggers module. Import error: {_IMPORT_ERR}")


def test_branch_name_strips_heads_prefix():
    _require_imports()
    assert branch_name("refs/heads/main") == "main"
    assert branch_name("main") == "main"
    assert branch_name("refs/tags/v1.0") == "refs/tags/v1.0"


def test_event_is_coerced_to_enum():
    _require_imports()
    ev = TriggerEvent("push", "refs/heads/main")
    assert ev.event is EventType.PUSH
    assert ev.to_dict() == {"event": "push", "ref": "refs/heads/main", "base_ref": None}


def test_unknown_event_or_empty_ref_is_rejected():
    _require_imports()
    with pytest.raises(ValueError):
        TriggerEvent("release", "refs/heads/main")
    with pytest.raises(ValueError):
        TriggerEvent("push", "")


def test_pull_request_requires_base_ref():
    _require_imports()
    with pytest.raises(ValueError, match="base_ref"):
        TriggerEvent("pull_request", "refs/heads/feature")

    ev = TriggerEvent("pull_request", "refs/heads/feature", "refs/heads/main")
    assert ev.target_branch == "main"
    assert ev.branch == "feature"


@pytest.mark.parametrize(
    "event,expected",
    [
        (("push", "refs/heads/main"), True),
        (("push", "refs/heads/feature"), False),
        (("pull_request", "refs/heads/feature", "refs/heads/main"), True),
        (("pull_request", "refs/heads/main", "refs/heads/develop"), False),
    ],
)
def test_verification_filter(event, expected):
    _require_imports()
    triggers = {"push": ["main"], "pull_request": ["main"]}
    assert matches(triggers, TriggerEvent(*event)) is expected


def test_null_branch_list_matches_any_branch():
    _require_imports()
    triggers = {"push": None}
    assert matches(triggers, TriggerEvent("push", "refs/heads/anything"))
    assert not matches(triggers, TriggerEvent("pull_request", "refs/heads/x", "refs/heads/main"))


def test_branch_patterns():
    _require_imports()
    triggers = {"push": ["release/*"]}
    assert matches(triggers, TriggerEvent("push", "refs/heads/release/1.2"))
    assert not matches(triggers, TriggerEvent("push", "refs/heads/main"))
