# src/sljs_pipeline/core/engine/engine.py
"""
Engine de execução de um pipeline.

O Engine recebe Steps já instanciados e um RunContext, planeja os níveis
de dependência e executa cada nível:

- Steps independentes de um mesmo nível rodam em paralelo
  (`ThreadPoolExecutor`) quando `engine.parallel` está ativo, e em ordem
  determinística caso contrário.
- Antes de chamar `step.run`, cada artefato em `step.consumes` precisa
  estar registrado no RunContext e populado no filesystem. A falha é de
  pré-condição (ARTIFACT_MISSING) e a ferramenta nunca é invocada.
- Exceções viram StepResult FAILED com `payload["error"]` serializável.
  Não existe retry.
- Com `engine.fail_fast`, a primeira falha aborta a run: os Steps
  restantes são registrados como SKIPPED. Sem fail-fast, apenas os
  dependentes de um Step que não terminou com sucesso são pulados.

Configuração lida de `ctx.config["engine"]`:
    - fail_fast (bool, default True)
    - parallel (bool, default False)
    - max_workers (int, default 2)
"""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Sequence

from sljs_pipeline.core.errors import (
    PipelineErrorPayload,
    engine_configuration_error,
    engine_execution_error,
)
from sljs_pipeline.core.exceptions import ArtifactMissing, PipelineException
from sljs_pipeline.core.pipeline.artifacts import require_populated
from sljs_pipeline.core.pipeline.context import RunContext
from sljs_pipeline.core.pipeline.step import Step
from sljs_pipeline.core.pipeline.types import StepKind, StepResult, StepStatus
from sljs_pipeline.core.traceability.manifest import (
    PipelineManifest,
    step_failed,
    step_finished,
    step_started,
)

from .planner import plan_levels


SKIPPED_BY_CONFIG = "skipped by config"
SKIPPED_ABORTED = "not run: pipeline aborted"


@dataclass(frozen=True)
class RunResult:
    """Resultado agregado de uma execução de pipeline."""

    steps: Dict[str, StepResult] = field(default_factory=dict)
    aborted: bool = False

    @property
    def ok(self) -> bool:
        return not any(r.status == StepStatus.FAILED for r in self.steps.values())

    def failed(self) -> List[str]:
        return [sid for sid, r in self.steps.items() if r.status == StepStatus.FAILED]

    def errors(self) -> Dict[str, Dict[str, Any]]:
        """Payloads de erro por step_id (apenas Steps que falharam)."""
        return {
            sid: dict(r.payload.get("error") or {})
            for sid, r in self.steps.items()
            if r.status == StepStatus.FAILED
        }


class Engine:
    """Engine canônico (planner + executor)."""

    def __init__(
        self,
        *,
        steps: Sequence[Step],
        ctx: RunContext,
        manifest: Optional[PipelineManifest] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.steps: List[Step] = list(steps)
        self.ctx: RunContext = ctx
        self.manifest = manifest
        self._now = clock or (lambda: datetime.now(timezone.utc))
        self._manifest_lock = threading.Lock()

    # ------------------------------------------------------------------
    # Políticas (config)
    # ------------------------------------------------------------------

    def _engine_cfg(self) -> Dict[str, Any]:
        cfg = (self.ctx.config or {}).get("engine", {}) or {}
        return cfg if isinstance(cfg, dict) else {}

    def _fail_fast(self) -> bool:
        return bool(self._engine_cfg().get("fail_fast", True))

    def _parallel(self) -> bool:
        return bool(self._engine_cfg().get("parallel", False))

    def _max_workers(self) -> int:
        return max(1, int(self._engine_cfg().get("max_workers", 2) or 1))

    def _is_enabled(self, step_id: str) -> bool:
        steps_cfg = (self.ctx.config or {}).get("steps", {}) or {}
        step_cfg = steps_cfg.get(step_id, {}) or {}
        return bool(step_cfg.get("enabled", True))

    # ------------------------------------------------------------------
    # Manifest (serializado entre threads)
    # ------------------------------------------------------------------

    def _record_started(self, step: Step) -> None:
        if self.manifest is None:
            return
        with self._manifest_lock:
            step_started(self.manifest, step_id=step.id, kind=_kind_value(step), ts=self._now())

    def _record_result(self, result: StepResult) -> None:
        if self.manifest is None:
            return
        with self._manifest_lock:
            if result.status == StepStatus.FAILED:
                step_failed(
                    self.manifest,
                    step_id=result.step_id,
                    ts=self._now(),
                    error=dict(result.payload.get("error") or {}),
                    summary=result.summary,
                )
            else:
                step_finished(self.manifest, step_id=result.step_id, ts=self._now(), result=result)

    # ------------------------------------------------------------------
    # Construção de resultados
    # ------------------------------------------------------------------

    def _exception_to_error(self, exc: Exception, step_id: str) -> PipelineErrorPayload:
        if isinstance(exc, PipelineException):
            payload = exc.to_payload()
            details = dict(payload.details)
            details.setdefault("step", step_id)
            return replace(payload, details=details)

        return engine_execution_error(
            step=step_id,
            exc_type=exc.__class__.__name__,
            exc_message=str(exc) or None,
        )

    def _failed(self, step: Step, error: PipelineErrorPayload) -> StepResult:
        return StepResult(
            step_id=step.id,
            kind=_kind(step),
            status=StepStatus.FAILED,
            summary=error.message,
            warnings=self.ctx.warnings_for(step.id),
            payload={"error": error.to_dict()},
        )

    def _skipped(self, step: Step, summary: str) -> StepResult:
        result = StepResult(
            step_id=step.id,
            kind=_kind(step),
            status=StepStatus.SKIPPED,
            summary=summary,
        )
        self._record_result(result)
        return result

    def _enrich(self, step: Step, result: StepResult) -> StepResult:
        """Nova instância com id/kind canônicos e warnings do contexto (sem duplicatas)."""
        merged: List[str] = []
        for msg in list(result.warnings or []) + self.ctx.warnings_for(step.id):
            if msg not in merged:
                merged.append(msg)
        return replace(result, step_id=step.id, kind=_kind(step), warnings=merged)

    # ------------------------------------------------------------------
    # Execução
    # ------------------------------------------------------------------

    def _check_preconditions(self, step: Step) -> None:
        for key in list(getattr(step, "consumes", []) or []):
            if not self.ctx.has_artifact(key):
                raise ArtifactMissing(
                    message=f"Required artifact '{key}' is missing (not produced in this run)",
                    details={
                        "artifact": key,
                        "required_by": step.id,
                        "path": None,
                        "reason": "not registered in this run",
                    },
                    hint="Inclua e execute o Step produtor antes deste Step.",
                )
            require_populated(self.ctx.get_artifact(key), artifact=key, required_by=step.id)

    def _execute(self, step: Step) -> StepResult:
        """Executa um Step; nunca levanta exceção."""
        sid = step.id
        try:
            self._check_preconditions(step)
        except ArtifactMissing as e:
            self.ctx.log(step_id=sid, level="error", message="precondition failed", **e.details)
            result = self._failed(step, self._exception_to_error(e, sid))
            self._record_result(result)
            return result

        self._record_started(step)
        self.ctx.log(step_id=sid, level="info", message="step started")

        try:
            raw = step.run(self.ctx)
            if not isinstance(raw, StepResult):
                error = engine_configuration_error(
                    message="Step returned an invalid type",
                    details={
                        "step_id": sid,
                        "expected": "StepResult",
                        "received": type(raw).__name__,
                    },
                    hint="Ajuste o Step para retornar StepResult",
                )
                result = self._failed(step, error)
            else:
                result = self._enrich(step, raw)

        except Exception as e:
            error = self._exception_to_error(e, sid)
            self.ctx.log(
                step_id=sid,
                level="error",
                message="step failed",
                error_type=error.type,
                error_message=error.message,
            )
            result = self._failed(step, error)

        self.ctx.log(step_id=sid, level="info", message="step finished", status=result.status.value)
        self._record_result(result)
        return result

    def _blocking_dependency(self, step: Step, results: Dict[str, StepResult]) -> Optional[StepResult]:
        for dep in list(getattr(step, "depends_on", []) or []):
            r = results.get(dep)
            if r is None or r.status != StepStatus.SUCCESS:
                return r
        return None

    def _run_level(self, runnable: List[Step], results: Dict[str, StepResult]) -> bool:
        """Executa um nível; retorna True se a run deve ser abortada."""
        fail_fast = self._fail_fast()

        if self._parallel() and len(runnable) > 1:
            workers = min(self._max_workers(), len(runnable))
            with ThreadPoolExecutor(max_workers=workers) as pool:
                futures = [(step, pool.submit(self._execute, step)) for step in runnable]
                for step, future in futures:
                    results[step.id] = future.result()
            return fail_fast and any(results[s.id].status == StepStatus.FAILED for s in runnable)

        for i, step in enumerate(runnable):
            results[step.id] = self._execute(step)
            if fail_fast and results[step.id].status == StepStatus.FAILED:
                for rest in runnable[i + 1:]:
                    results[rest.id] = self._skipped(rest, SKIPPED_ABORTED)
                return True
        return False

    def run(self) -> RunResult:
        levels = plan_levels(self.steps)

        results: Dict[str, StepResult] = {}
        aborted = False

        for level in levels:
            runnable: List[Step] = []
            for step in level:
                sid = step.id

                if aborted:
                    results[sid] = self._skipped(step, SKIPPED_ABORTED)
                    continue

                if not self._is_enabled(sid):
                    results[sid] = self._skipped(step, SKIPPED_BY_CONFIG)
                    continue

                blocking = self._blocking_dependency(step, results)
                if blocking is not None:
                    reason = "failed" if blocking.status == StepStatus.FAILED else "skipped"
                    results[sid] = self._skipped(step, f"skipped due to {reason} dependency '{blocking.step_id}'")
                    continue

                runnable.append(step)

            if runnable and self._run_level(runnable, results):
                aborted = True

        return RunResult(steps=results, aborted=aborted)


def _kind(step: Step) -> StepKind:
    return getattr(step, "kind", None) or StepKind.BUILD


def _kind_value(step: Step) -> str:
    kind = _kind(step)
    return kind.value if isinstance(kind, StepKind) else str(kind)
