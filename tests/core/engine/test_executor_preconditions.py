# tests/core/engine/test_executor_preconditions.py
"""
Testes de pré-condições de artefatos.

Antes de chamar `step.run`, todo artefato em `consumes` precisa estar
registrado nesta run e apontar para um path populado. Caso contrário o
Step falha com ARTIFACT_MISSING e nunca é invocado.
"""

import pytest

try:
    from sljs_pipeline.core.engine.engine import Engine
    from sljs_pipeline.core.pipeline.types import StepStatus
except Exception as e:
    Engine = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if Engine is None:
        pytest.fail(f"""Missing Engine. Import error: {_IMPORT_ERR}""")


def test_unregistered_artifact_fails_before_run(DummyStep, dummy_ctx):
    _require_imports()
    demo = DummyStep(step_id="demo.build", consumes=["browser.pkg"])

    result = Engine(steps=[demo], ctx=dummy_ctx).run()

    assert demo.calls == 0
    assert result.steps["demo.build"].status == StepStatus.FAILED
    error = result.errors()["demo.build"]
    assert error["type"] == "ARTIFACT_MISSING"
    assert error["details"]["artifact"] == "browser.pkg"


def test_stale_directory_on_disk_does_not_satisfy_precondition(DummyStep, dummy_ctx):
    """Um `wasm/pkg` deixado por outra run existe no disco, mas não foi registrado nesta."""
    _require_imports()
    stale = dummy_ctx.workspace / "wasm" / "pkg"
    stale.mkdir(parents=True)
    (stale / "sljs.js").write_text("old", encoding="utf-8")

    demo = DummyStep(step_id="demo.build", consumes=["browser.pkg"])
    result = Engine(steps=[demo], ctx=dummy_ctx).run()

    assert demo.calls == 0
    assert result.errors()["demo.build"]["type"] == "ARTIFACT_MISSING"


def test_empty_artifact_directory_fails(DummyStep, dummy_ctx):
    _require_imports()
    empty = dummy_ctx.workspace / "target" / "doc"
    empty.mkdir(parents=True)
    dummy_ctx.set_artifact("docs.html", empty)

    site = DummyStep(step_id="site.assemble", consumes=["docs.html"])
    result = Engine(steps=[site], ctx=dummy_ctx).run()

    assert site.calls == 0
    assert result.errors()["site.assemble"]["details"]["reason"] == "path is empty"


def test_produced_artifact_satisfies_consumer(DummyStep, dummy_ctx):
    _require_imports()
    steps = [
        DummyStep(step_id="browser.build", produces="browser.pkg"),
        DummyStep(step_id="demo.build", depends_on=["browser.build"], consumes=["browser.pkg"]),
    ]

    result = Engine(steps=steps, ctx=dummy_ctx).run()

    assert result.ok is True
    assert steps[1].calls == 1
