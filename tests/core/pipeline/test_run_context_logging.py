# tests/core/pipeline/test_run_context_logging.py
"""
Testes de logging estruturado e warnings do RunContext.

Os testes asseguram que:
- cada evento de log carrega run_id, step_id, level, message e timestamp
- campos extras (ex.: argv) são preservados
- warnings são agrupados por step_id
- o log é seguro para escrita concorrente
"""

import threading

import pytest


def test_structured_log_event(dummy_ctx):
    dummy_ctx.log(step_id="native.build_test", level="info", message="running command", argv=["cargo", "build"])

    assert len(dummy_ctx.events) == 1
    ev = dummy_ctx.events[0]
    assert ev["run_id"] == "run-test-001"
    assert ev["step_id"] == "native.build_test"
    assert ev["level"] == "info"
    assert ev["message"] == "running command"
    assert ev["argv"] == ["cargo", "build"]
    assert "timestamp" in ev


def test_warning_collection(dummy_ctx):
    dummy_ctx.add_warning(step_id="site.assemble", message="collision: index.html")
    dummy_ctx.add_warning(step_id="site.assemble", message="collision: app.js")

    assert dummy_ctx.warnings_for("site.assemble") == ["collision: index.html", "collision: app.js"]
    assert dummy_ctx.warnings_for("docs.generate") == []


@pytest.mark.parametrize("threads", [4])
def test_concurrent_logging_keeps_every_event(dummy_ctx, threads):
    def worker(n):
        for i in range(50):
            dummy_ctx.log(step_id=f"s{n}", level="info", message=str(i))

    pool = [threading.Thread(target=worker, args=(n,)) for n in range(threads)]
    for t in pool:
        t.start()
    for t in pool:
        t.join()

    assert len(dummy_ctx.events) == threads * 50
