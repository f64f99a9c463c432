# tests/coordinator/test_run_registry.py
"""
Testes do registro de runs por chave de concorrência ("latest wins").

Os testes asseguram que:
- uma run nova supera as runs anteriores ainda não finalizadas da chave
- uma run superada antes de começar nunca começa
- uma run superada em andamento não publica
- chaves diferentes não interagem
- o registro não guarda estado depois que as runs deixam o slot
- uma run que já reivindicou a publicação não é mais superada
- runs no mesmo workspace são mutuamente exclusivas
"""

import threading

import pytest

try:
    from sljs_pipeline.coordinator.run_registry import RunRegistry
except Exception as e:  # noqa: BLE001
    RunRegistry = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(f"Missing RunRegistry. Import error: {_IMPORT_ERR}")


def test_newer_run_supersedes_queued_run():
    _require_imports()
    reg = RunRegistry()
    older = reg.enqueue("publish:refs/heads/main", "run-1")
    newer = reg.enqueue("publish:refs/heads/main", "run-2")

    assert older.superseded is True
    assert newer.superseded is False
    assert reg.start(older) is False
    assert reg.start(newer) is True
    assert reg.claim_publish(newer) is True


def test_in_flight_run_finishes_but_does_not_publish():
    _require_imports()
    reg = RunRegistry()
    running = reg.enqueue("k", "run-1")

    with reg.slot(running):
        assert reg.start(running)
        reg.enqueue("k", "run-2")
        assert running.superseded is True
        assert reg.claim_publish(running) is False


def test_different_keys_do_not_interact():
    _require_imports()
    reg = RunRegistry()
    main = reg.enqueue("publish:refs/heads/main", "run-1")
    reg.enqueue("publish:refs/heads/dev", "run-2")

    assert main.superseded is False


def test_finished_runs_are_forgotten():
    _require_imports()
    reg = RunRegistry()
    first = reg.enqueue("k", "run-1")
    with reg.slot(first):
        reg.start(first)
    assert reg.pending("k") == []

    second = reg.enqueue("k", "run-2")
    assert first.finished is True
    assert first.superseded is False
    assert second.superseded is False


def test_slot_releases_ticket_on_error():
    _require_imports()
    reg = RunRegistry()
    ticket = reg.enqueue("k", "run-1")

    with pytest.raises(RuntimeError):
        with reg.slot(ticket):
            raise RuntimeError("boom")

    assert reg.pending("k") == []


def test_claim_publish_requires_started_run():
    _require_imports()
    reg = RunRegistry()
    ticket = reg.enqueue("k", "run-1")

    assert reg.claim_publish(ticket) is False


def test_run_that_claimed_publish_is_not_superseded():
    _require_imports()
    reg = RunRegistry()
    running = reg.enqueue("k", "run-1")

    with reg.slot(running):
        assert reg.start(running)
        assert reg.claim_publish(running)
        newer = reg.enqueue("k", "run-2")
        assert running.superseded is False

    assert reg.start(newer) is True


def test_workspace_slot_is_exclusive(tmp_path):
    _require_imports()
    reg = RunRegistry()
    inside = threading.Event()
    release = threading.Event()
    order = []

    def hold():
        with reg.workspace_slot(tmp_path):
            order.append("first-in")
            inside.set()
            assert release.wait(timeout=10)
            order.append("first-out")

    def follow():
        with reg.workspace_slot(tmp_path / "."):
            order.append("second-in")

    first = threading.Thread(target=hold)
    first.start()
    assert inside.wait(timeout=10)
    second = threading.Thread(target=follow)
    second.start()
    second.join(timeout=0.2)
    assert second.is_alive()

    release.set()
    first.join(timeout=10)
    second.join(timeout=10)
    assert order == ["first-in", "first-out", "second-in"]
