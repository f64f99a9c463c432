# tests/conftest.py
"""
Fixtures compartilhados para testes do sljs-pipeline.

Este módulo define fixtures reutilizáveis que fornecem:
- configurações mínimas e determinísticas
- contexto de execução controlado (RunContext) sobre um workspace temporário
- Steps dummy para testes estruturais do planner e do Engine
- um runner de comandos falso, que registra argv e materializa as saídas
  que as ferramentas reais produziriam (pacote, documentação, bundle)
- um sink de publicação que apenas registra as chamadas

Decisões arquiteturais:
    - Nenhuma ferramenta externa real (cargo, wasm-pack, npm) é invocada
    - Steps dummy utilizam duck typing em vez de herança
    - Imports do pacote são realizados de forma lazy para melhorar a
      clareza de erros durante falhas

Invariantes:
    - Toda escrita em disco acontece sob `tmp_path`
    - `run_id` e `created_at` são fixos
    - O runner falso é seguro para Steps executados em paralelo

Limites explícitos:
    - Não substituir testes de integração com o toolchain real
    - Não conter lógica de domínio além de simular saídas de ferramentas
"""

import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

import pytest


FIXED_TS = datetime(2026, 1, 16, 0, 0, 0, tzinfo=timezone.utc)


# =====================================================
# Config
# =====================================================

@pytest.fixture
def project_like_config_defaults_yaml() -> str:
    """YAML de defaults reduzido, no formato de `config.defaults.yaml`."""
    return """\
engine:
  fail_fast: true
  parallel: false
toolchain:
  native:
    build: ["cargo", "build"]
    verbose: true
pipelines:
  publish:
    triggers:
      push: null
    steps: [docs.generate]
"""


@pytest.fixture
def project_like_config_local_yaml() -> str:
    """YAML de override local: troca argv, desliga verbose e filtra branches."""
    return """\
toolchain:
  native:
    build: ["cargo", "build", "--release"]
    verbose: false
pipelines:
  publish:
    triggers:
      push: [main]
"""


@pytest.fixture
def dummy_config() -> dict:
    """Configuração mínima já resolvida para testes do Engine."""
    return {
        "engine": {"fail_fast": True, "parallel": False},
        "steps": {},
    }


@pytest.fixture
def sljs_config() -> dict:
    """Defaults empacotados, sem persistência de Manifest."""
    from sljs_pipeline.core.config import load_packaged_defaults

    config = load_packaged_defaults()
    config["traceability"]["manifest_dir"] = None
    return config


# =====================================================
# Workspace e RunContext
# =====================================================

@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Checkout mínimo do repositório sljs (layout de diretórios apenas)."""
    root = tmp_path / "sljs"
    (root / "src").mkdir(parents=True)
    (root / "wasm" / "src").mkdir(parents=True)
    (root / "wasm" / "demo").mkdir(parents=True)
    (root / "Cargo.toml").write_text("[package]\nname = \"sljs\"\n", encoding="utf-8")
    (root / "wasm" / "demo" / "package.json").write_text(
        '{"dependencies": {"sljs": "file:../pkg"}}', encoding="utf-8"
    )
    return root


@pytest.fixture
def dummy_ctx(dummy_config, tmp_path):
    """RunContext determinístico sobre `tmp_path`, sem runner."""
    from sljs_pipeline.core.pipeline.context import RunContext

    return RunContext(
        run_id="run-test-001",
        created_at=FIXED_TS,
        config=dummy_config,
        workspace=tmp_path,
        meta={"source": "pytest"},
    )


@pytest.fixture
def step_ctx(sljs_config, workspace, fake_runner, sljs_tools):
    """RunContext com defaults reais, workspace sljs e runner falso."""
    from sljs_pipeline.core.pipeline.context import RunContext

    return RunContext(
        run_id="run-step-001",
        created_at=FIXED_TS,
        config=sljs_config,
        workspace=workspace,
        runner=fake_runner,
    )


# =====================================================
# Steps dummy
# =====================================================

@pytest.fixture
def DummyStep():
    """
    Fixture factory que fornece uma implementação duck-typed de Step.

    A classe retornada:
    - expõe `id`, `kind`, `depends_on` e `consumes`
    - registra a ordem de execução em `ctx.meta["order"]`
    - opcionalmente produz um artefato (diretório populado no workspace)
    - opcionalmente levanta a exceção recebida em `error`

    Returns:
        type: Classe _DummyStep que pode ser instanciada pelos testes.
    """
    from sljs_pipeline.core.pipeline.types import StepKind, StepResult, StepStatus

    class _DummyStep:
        def __init__(
            self,
            step_id: str = "native.build_test",
            kind: StepKind = StepKind.BUILD,
            depends_on=None,
            consumes=None,
            produces: Optional[str] = None,
            error: Optional[Exception] = None,
            on_run: Optional[Callable] = None,
        ):
            self.id = step_id
            self.kind = kind
            self.depends_on = depends_on or []
            self.consumes = consumes or []
            self.produces = produces
            self.error = error
            self.on_run = on_run
            self.calls = 0

        def run(self, ctx):
            self.calls += 1
            ctx.meta.setdefault("order", []).append(self.id)
            if self.on_run is not None:
                self.on_run(ctx)
            if self.error is not None:
                raise self.error

            artifacts = {}
            if self.produces:
                out = ctx.workspace / "out" / self.produces
                out.mkdir(parents=True, exist_ok=True)
                (out / "artifact.txt").write_text(self.id, encoding="utf-8")
                ctx.set_artifact(self.produces, out)
                artifacts[self.produces] = str(out)

            return StepResult(
                step_id=self.id,
                kind=self.kind,
                status=StepStatus.SUCCESS,
                summary="dummy ok",
                metrics={},
                warnings=[],
                artifacts=artifacts,
                payload={"note": "dummy"},
            )

    return _DummyStep


# =====================================================
# Runner de comandos falso
# =====================================================

@dataclass
class FakeCall:
    argv: Tuple[str, ...]
    cwd: Path
    env: Dict[str, str] = field(default_factory=dict)


@dataclass
class _Rule:
    prefix: Tuple[str, ...]
    returncode: int = 0
    stdout: str = ""
    stderr: str = ""
    effect: Optional[Callable[[Path], None]] = None


class FakeRunner:
    """
    Duplo de `CommandRunner`.

    Regras são casadas por prefixo de argv; a regra registrada por último
    vence. Comandos sem regra terminam com exit code 0 e sem saída.
    """

    def __init__(self):
        self.calls: List[FakeCall] = []
        self._rules: List[_Rule] = []
        self._lock = threading.Lock()

    def on(self, *prefix, returncode=0, stdout="", stderr="", effect=None):
        self._rules.append(_Rule(tuple(prefix), returncode, stdout, stderr, effect))
        return self

    def fail(self, *prefix, returncode=1, stderr="error: boom"):
        return self.on(*prefix, returncode=returncode, stderr=stderr)

    def _match(self, argv: Tuple[str, ...]) -> Optional[_Rule]:
        for rule in reversed(self._rules):
            if argv[: len(rule.prefix)] == rule.prefix:
                return rule
        return None

    def run(self, argv, *, cwd, env=None):
        from sljs_pipeline.tools.runner import CommandResult

        argv = tuple(str(a) for a in argv)
        with self._lock:
            self.calls.append(FakeCall(argv=argv, cwd=Path(cwd), env=dict(env or {})))
            rule = self._match(argv)

        if rule is not None and rule.effect is not None and rule.returncode == 0:
            rule.effect(Path(cwd))

        return CommandResult(
            argv=argv,
            cwd=str(cwd),
            returncode=rule.returncode if rule else 0,
            stdout=rule.stdout if rule else "",
            stderr=rule.stderr if rule else "",
            duration_ms=1,
        )

    def argvs(self) -> List[Tuple[str, ...]]:
        with self._lock:
            return [c.argv for c in self.calls]

    def tools(self) -> List[str]:
        """`programa subcomando` de cada chamada, na ordem."""
        return [" ".join(a[:2]) for a in self.argvs()]


def _write(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def materialize_browser_pkg(cwd: Path) -> None:
    _write(cwd / "pkg" / "sljs.js", "export function parse() {}\n")
    _write(cwd / "pkg" / "sljs_bg.wasm", "\0asm")
    _write(cwd / "pkg" / "package.json", '{"name": "sljs"}')


def materialize_docs(cwd: Path) -> None:
    _write(cwd / "target" / "doc" / "index.html", "<html>docs</html>")
    _write(cwd / "target" / "doc" / "sljs" / "index.html", "<html>api</html>")
    _write(cwd / "target" / "doc" / ".lock", "")


def materialize_demo_dist(cwd: Path) -> None:
    _write(cwd / "dist" / "index.html", "<html>demo</html>")
    _write(cwd / "dist" / "bundle.js", "console.log('demo')")


@pytest.fixture
def fake_runner():
    return FakeRunner()


@pytest.fixture
def sljs_tools(fake_runner):
    """Ensina o runner falso a produzir as saídas das ferramentas reais."""
    fake_runner.on("wasm-pack", "build", effect=materialize_browser_pkg)
    fake_runner.on("cargo", "doc", effect=materialize_docs)
    fake_runner.on("npx", "webpack", effect=materialize_demo_dist)
    return fake_runner


# =====================================================
# Sink de publicação
# =====================================================

class RecordingSink:
    name = "recording"

    def __init__(self, error: Optional[Exception] = None):
        self.calls: List[Dict[str, object]] = []
        self.error = error
        self._lock = threading.Lock()

    def publish(self, source_dir, *, ref):
        source_dir = Path(source_dir)
        files = sorted(p.relative_to(source_dir).as_posix() for p in source_dir.rglob("*") if p.is_file())
        with self._lock:
            self.calls.append({"source_dir": source_dir, "ref": ref, "files": files})
        if self.error is not None:
            raise self.error
        return {"sink": self.name, "ref": ref}


@pytest.fixture
def recording_sink():
    return RecordingSink()


@pytest.fixture
def make_coordinator(sljs_config, workspace, sljs_tools, recording_sink):
    """Factory de Coordinator com runner falso, sink de teste e run_ids previsíveis."""
    from sljs_pipeline.coordinator import Coordinator

    def _make(config=None, sink=None, registry=None):
        counter = iter(range(1, 10_000))
        return Coordinator(
            config=config if config is not None else sljs_config,
            workspace=workspace,
            runner=sljs_tools,
            sink=sink if sink is not None else recording_sink,
            registry=registry,
            clock=lambda: FIXED_TS,
            id_factory=lambda: f"run-{next(counter):03d}",
        )

    return _make


@pytest.fixture
def failing_sink():
    """Factory de sink que registra a chamada e levanta `error`."""

    def _make(error: Exception) -> RecordingSink:
        return RecordingSink(error=error)

    return _make


@pytest.fixture
def materialize():
    """Acesso às funções que simulam as saídas das ferramentas."""
    from types import SimpleNamespace

    return SimpleNamespace(
        browser_pkg=materialize_browser_pkg,
        docs=materialize_docs,
        demo_dist=materialize_demo_dist,
    )
