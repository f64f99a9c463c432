# src/sljs_pipeline/coordinator/coordinator.py
"""
Coordenador de pipelines.

Recebe um evento de trigger, seleciona os pipelines cujo filtro casa com
ele e executa cada um (na ordem de declaração) com um Engine próprio.

Regras de publicação:
    - o sink é chamado no máximo uma vez por run, e apenas quando todos
      os Steps terminaram com sucesso e a run não foi superada
    - qualquer Step com falha impede a publicação (fail closed)
    - falha do sink vira PUBLISH_FAILED e a run falha; os artefatos
      construídos não são revertidos

Concorrência:
    - pipelines com `concurrency: ref` passam pelo RunRegistry: uma run
      nova para a mesma chave supera as anteriores ainda não finalizadas
    - uma run superada é reportada com status `superseded`, que não
      conta como falha
    - `claim_publish` é checado e marcado sob o lock do registro: depois
      dele a run não é mais superada e segue para o sink
    - runs que escrevem no mesmo workspace (`site/`, `target/`,
      `wasm/pkg`) são serializadas, mesmo com refs diferentes

Cada run gera um Manifest (salvo em `traceability.manifest_dir` quando
configurado).
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from sljs_pipeline import __version__
from sljs_pipeline.core.config.loader import get_section
from sljs_pipeline.core.engine import Engine, RunResult
from sljs_pipeline.core.errors import (
    engine_configuration_error,
    publish_failed,
    run_superseded,
)
from sljs_pipeline.core.exceptions import ArtifactMissing, PublishFailed
from sljs_pipeline.core.pipeline.context import RunContext
from sljs_pipeline.core.traceability.fingerprint import compute_config_hash
from sljs_pipeline.core.traceability.manifest import (
    PipelineManifest,
    add_event,
    create_manifest,
    run_finished,
    save_manifest,
)
from sljs_pipeline.publish.sink import PublishSink, build_sink
from sljs_pipeline.steps.site.assemble import SITE_DIR_ARTIFACT
from sljs_pipeline.tools.runner import CommandRunner

from .definitions import PipelineDefinition, load_definitions
from .run_registry import RunRegistry, RunTicket
from .triggers import TriggerEvent

STATUS_SUCCESS = "success"
STATUS_FAILED = "failed"
STATUS_SUPERSEDED = "superseded"


@dataclass
class PipelineRun:
    """Resultado de uma run de pipeline disparada por um evento."""

    pipeline: str
    run_id: str
    status: str
    result: Optional[RunResult] = None
    published: bool = False
    publish_info: Dict[str, Any] = field(default_factory=dict)
    error: Optional[Dict[str, Any]] = None
    manifest: Optional[PipelineManifest] = None
    events: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status in (STATUS_SUCCESS, STATUS_SUPERSEDED)

    def errors(self) -> Dict[str, Dict[str, Any]]:
        """Erros por Step, mais o erro da run (publicação/supersessão) sob `run`."""
        out = self.result.errors() if self.result is not None else {}
        if self.error is not None and self.error not in out.values():
            out["run"] = self.error
        return out


@dataclass
class CoordinatorResult:
    event: TriggerEvent
    runs: List[PipelineRun] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return all(r.ok for r in self.runs)

    @property
    def selected(self) -> List[str]:
        return [r.pipeline for r in self.runs]

    def run(self, pipeline: str) -> Optional[PipelineRun]:
        for r in self.runs:
            if r.pipeline == pipeline:
                return r
        return None


class Coordinator:
    def __init__(
        self,
        *,
        config: Dict[str, Any],
        workspace: Path,
        runner: Any = None,
        sink: Optional[PublishSink] = None,
        registry: Optional[RunRegistry] = None,
        clock: Optional[Callable[[], datetime]] = None,
        id_factory: Optional[Callable[[], str]] = None,
    ):
        self.config = config
        self.workspace = Path(workspace)
        self.definitions: Dict[str, PipelineDefinition] = load_definitions(config)
        self.runner = runner if runner is not None else CommandRunner()
        self.sink = sink if sink is not None else build_sink(config, workspace=self.workspace, runner=self.runner)
        self.registry = registry if registry is not None else RunRegistry()
        self._now = clock or (lambda: datetime.now(timezone.utc))
        self._new_id = id_factory or (lambda: uuid.uuid4().hex)

    # ------------------------------------------------------------------
    # Seleção
    # ------------------------------------------------------------------

    def select(self, event: TriggerEvent) -> List[PipelineDefinition]:
        return [d for d in self.definitions.values() if d.matches(event)]

    def handle(self, event: TriggerEvent) -> CoordinatorResult:
        runs = [self._run_pipeline(d, event) for d in self.select(event)]
        return CoordinatorResult(event=event, runs=runs)

    # ------------------------------------------------------------------
    # Run
    # ------------------------------------------------------------------

    def _run_pipeline(self, definition: PipelineDefinition, event: TriggerEvent) -> PipelineRun:
        run_id = self._new_id()
        config = definition.effective_config(self.config)
        manifest = create_manifest(
            run_id=run_id,
            pipeline=definition.name,
            started_at=self._now(),
            tool_version=__version__,
            config_hash=compute_config_hash(config),
            trigger=event.to_dict(),
        )
        add_event(
            manifest,
            event_type="run_started",
            ts=self._now(),
            payload={"pipeline": definition.name, "steps": list(definition.step_ids)},
        )

        key = definition.concurrency_key(event)
        if key is None:
            with self.registry.workspace_slot(self.workspace):
                run = self._execute(definition, config, event, run_id, manifest, ticket=None)
        else:
            ticket = self.registry.enqueue(key, run_id)
            with self.registry.slot(ticket), self.registry.workspace_slot(self.workspace):
                if self.registry.start(ticket):
                    run = self._execute(definition, config, event, run_id, manifest, ticket=ticket)
                else:
                    run = self._superseded(definition, run_id, manifest, ticket, stage="queued")

        run_finished(
            manifest,
            ts=self._now(),
            status=run.status,
            payload={"published": run.published},
        )
        run.manifest = manifest
        self._save(manifest, config, run_id)
        return run

    def _execute(
        self,
        definition: PipelineDefinition,
        config: Dict[str, Any],
        event: TriggerEvent,
        run_id: str,
        manifest: PipelineManifest,
        *,
        ticket: Optional[RunTicket],
    ) -> PipelineRun:
        ctx = RunContext(
            run_id=run_id,
            created_at=self._now(),
            config=config,
            workspace=self.workspace,
            runner=self.runner,
            trigger=event.to_dict(),
            meta={"pipeline": definition.name, "ref": event.ref},
        )

        try:
            steps = definition.build_steps()
            result = Engine(steps=steps, ctx=ctx, manifest=manifest, clock=self._now).run()
        except ValueError as e:
            # grafo inválido (dependência desconhecida, ciclo, id duplicado)
            error = engine_configuration_error(
                message=str(e),
                details={"pipeline": definition.name, "exc_type": e.__class__.__name__},
            )
            return PipelineRun(
                pipeline=definition.name,
                run_id=run_id,
                status=STATUS_FAILED,
                error=error.to_dict(),
                events=list(ctx.events),
            )

        run = PipelineRun(
            pipeline=definition.name,
            run_id=run_id,
            status=STATUS_SUCCESS,
            result=result,
            events=ctx.events,
        )

        if not result.ok:
            run.status = STATUS_FAILED
            failed = result.failed()
            run.error = result.errors()[failed[0]] if failed else None
            return run

        if not definition.publish:
            return run

        if ticket is not None and not self.registry.claim_publish(ticket):
            return self._superseded(definition, run_id, manifest, ticket, stage="publish", run=run)

        self._publish(ctx, event, manifest, run)
        return run

    def _publish(self, ctx: RunContext, event: TriggerEvent, manifest: PipelineManifest, run: PipelineRun) -> None:
        if not ctx.has_artifact(SITE_DIR_ARTIFACT):
            error = ArtifactMissing(
                message=f"Required artifact '{SITE_DIR_ARTIFACT}' is missing (nothing to publish)",
                details={
                    "artifact": SITE_DIR_ARTIFACT,
                    "required_by": "publish",
                    "path": None,
                    "reason": "not registered in this run",
                },
                hint="O pipeline de publicação precisa incluir e executar `site.assemble`.",
            ).to_payload().to_dict()
            self._publish_error(manifest, run, error)
            return

        source_dir = ctx.get_artifact(SITE_DIR_ARTIFACT)
        sink_name = getattr(self.sink, "name", type(self.sink).__name__)
        ctx.log(step_id="publish", level="info", message="publishing", sink=sink_name, source_dir=str(source_dir))

        try:
            info = self.sink.publish(source_dir, ref=event.ref)
        except PublishFailed as e:
            self._publish_error(manifest, run, e.to_payload().to_dict())
            return
        except Exception as e:
            error = publish_failed(
                sink=sink_name,
                source_dir=str(source_dir),
                ref=event.ref,
                exc_type=e.__class__.__name__,
                exc_message=str(e) or None,
            )
            self._publish_error(manifest, run, error.to_dict())
            return

        run.published = True
        run.publish_info = dict(info or {})
        ctx.log(step_id="publish", level="info", message="published", **run.publish_info)
        add_event(manifest, event_type="publish_finished", ts=self._now(), payload=run.publish_info)

    def _publish_error(self, manifest: PipelineManifest, run: PipelineRun, error: Dict[str, Any]) -> None:
        run.status = STATUS_FAILED
        run.error = error
        add_event(
            manifest,
            event_type="publish_failed",
            ts=self._now(),
            payload={"error_type": error.get("type"), "message": error.get("message")},
        )

    def _superseded(
        self,
        definition: PipelineDefinition,
        run_id: str,
        manifest: PipelineManifest,
        ticket: RunTicket,
        *,
        stage: str,
        run: Optional[PipelineRun] = None,
    ) -> PipelineRun:
        error = run_superseded(run_id=run_id, concurrency_key=ticket.key, stage=stage).to_dict()
        add_event(manifest, event_type="run_superseded", ts=self._now(), payload=error["details"])
        if run is None:
            run = PipelineRun(pipeline=definition.name, run_id=run_id, status=STATUS_SUPERSEDED)
        run.status = STATUS_SUPERSEDED
        run.error = error
        return run

    def _save(self, manifest: PipelineManifest, config: Dict[str, Any], run_id: str) -> None:
        manifest_dir = get_section(config, "traceability").get("manifest_dir")
        if not manifest_dir:
            return
        root = Path(manifest_dir).expanduser()
        if not root.is_absolute():
            root = self.workspace / root
        save_manifest(manifest, root / run_id / "manifest.json")
