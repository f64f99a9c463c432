# tests/steps/test_native_build_test_step.py
"""
Testes do Step native.build_test.

Os testes asseguram que:
- build e testes rodam no workdir nativo, nesta ordem, com --verbose
- o ambiente do toolchain nativo (CARGO_TERM_COLOR) é repassado
- falha de build vira BUILD_FAILED e os testes não rodam
- falha de testes vira TEST_FAILED com a saída completa
"""

import pytest

try:
    from sljs_pipeline.core.exceptions import BuildFailed, TestFailed
    from sljs_pipeline.core.pipeline.types import StepStatus
    from sljs_pipeline.steps.native import NativeBuildTestStep
except Exception as e:  # noqa: BLE001
    NativeBuildTestStep = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(f"Missing native step. Import error: {_IMPORT_ERR}")


def test_build_then_test_with_verbose(step_ctx, fake_runner, workspace):
    _require_imports()

    result = NativeBuildTestStep().run(step_ctx)

    assert result.status == StepStatus.SUCCESS
    assert fake_runner.argvs() == [
        ("cargo", "build", "--verbose"),
        ("cargo", "test", "--verbose"),
    ]
    assert all(c.cwd == workspace for c in fake_runner.calls)
    assert all(c.env == {"CARGO_TERM_COLOR": "always"} for c in fake_runner.calls)
    assert result.artifacts == {"native.target": str(workspace / "target")}


def test_verbose_can_be_disabled(step_ctx, fake_runner):
    _require_imports()
    step_ctx.config["toolchain"]["native"]["verbose"] = False

    NativeBuildTestStep().run(step_ctx)

    assert fake_runner.argvs() == [("cargo", "build"), ("cargo", "test")]


def test_build_failure_stops_before_tests(step_ctx, fake_runner):
    _require_imports()
    fake_runner.fail("cargo", "build", returncode=101, stderr="error[E0308]: mismatched types")

    with pytest.raises(BuildFailed) as exc:
        NativeBuildTestStep().run(step_ctx)

    assert fake_runner.tools() == ["cargo build"]
    assert exc.value.details["returncode"] == 101
    assert exc.value.details["stderr"] == "error[E0308]: mismatched types"
    assert exc.value.to_payload().type == "BUILD_FAILED"


def test_test_failure_preserves_full_output(step_ctx, fake_runner):
    _require_imports()
    stdout = "\n".join(f"test case_{i} ... ok" for i in range(200)) + "\ntest result: FAILED"
    fake_runner.on("cargo", "test", returncode=101, stdout=stdout)

    with pytest.raises(TestFailed) as exc:
        NativeBuildTestStep().run(step_ctx)

    assert exc.value.details["stdout"] == stdout
    assert exc.value.to_payload().type == "TEST_FAILED"


def test_failure_is_logged_with_stderr_tail(step_ctx, fake_runner):
    _require_imports()
    fake_runner.fail("cargo", "build", stderr="\n".join(f"line {i}" for i in range(30)))

    with pytest.raises(BuildFailed):
        NativeBuildTestStep().run(step_ctx)

    failed = [e for e in step_ctx.events if e["message"] == "command failed"]
    assert len(failed) == 1
    assert failed[0]["stderr_tail"][-1] == "line 29"
    assert len(failed[0]["stderr_tail"]) == 20
