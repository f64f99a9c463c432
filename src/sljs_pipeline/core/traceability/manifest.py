# src/sljs_pipeline/core/traceability/manifest.py
"""
Manifest v1: registro forense de uma run de pipeline.

O Manifest consolida, de forma determinística e auditável:
    - metadados da run (run_id, pipeline, trigger, versão da ferramenta)
    - hash da configuração efetiva
    - estado incremental de cada Step
    - Event Log ordenado (run, Steps, supersessão e publicação)

Princípios fundamentais:
    - Nenhum evento é emitido implicitamente
    - Toda mutação ocorre por chamadas explícitas da API
    - A ordem do Event Log reflete a ordem de chamada
    - O Manifest é serializável e reconstruível (round-trip)

Decisões arquiteturais:
    - UTC é o timezone canônico de todos os timestamps
    - A persistência é JSON com chaves ordenadas
    - O Manifest é a única evidência que sobrevive à run além do
      diretório publicado

Limites explícitos:
    - Não executa pipeline
    - Não decide políticas de execução (fail-fast, paralelismo)
    - Não é thread-safe por si só: o Engine serializa as chamadas
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from sljs_pipeline.core.pipeline.types import StepResult


def _ensure_tzaware_utc(dt: datetime) -> datetime:
    """Timestamps naive são assumidos como UTC; os demais são convertidos."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _iso(dt: datetime) -> str:
    return _ensure_tzaware_utc(dt).isoformat()


def _ms_between(start: datetime, end: datetime) -> int:
    """Duração em milissegundos, nunca negativa."""
    s = _ensure_tzaware_utc(start)
    e = _ensure_tzaware_utc(end)
    return max(0, int((e - s).total_seconds() * 1000))


@dataclass
class PipelineManifest:
    """
    Manifest v1 de uma run.

    Campos principais:
        - run: run_id, pipeline, started_at, tool_version, trigger, status final
        - inputs: config_hash
        - steps: estado incremental de cada Step (indexado por step_id)
        - events: Event Log ordenado

    Invariantes:
        - `steps` é sempre um dicionário indexado por step_id
        - `events` é sempre uma lista na ordem de chamada
        - A estrutura completa é serializável em JSON
    """

    run: Dict[str, Any]
    inputs: Dict[str, Any]
    steps: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    events: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "run": dict(self.run),
            "inputs": dict(self.inputs),
            "steps": {k: dict(v) for k, v in self.steps.items()},
            "events": [dict(e) for e in self.events],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PipelineManifest":
        """Reconstrução permissiva: campos ausentes viram estruturas vazias."""
        return cls(
            run=dict(data.get("run", {}) or {}),
            inputs=dict(data.get("inputs", {}) or {}),
            steps={k: dict(v) for k, v in (data.get("steps", {}) or {}).items()},
            events=[dict(e) for e in (data.get("events", []) or [])],
        )


def create_manifest(
    *,
    run_id: str,
    pipeline: str,
    started_at: datetime,
    tool_version: str,
    config_hash: str,
    trigger: Optional[Dict[str, Any]] = None,
) -> PipelineManifest:
    """
    Cria o Manifest inicial de uma run.

    Esta função **não emite eventos**: o Event Log inicia vazio e só é
    preenchido por chamadas explícitas (`add_event`, `step_started`, ...).

    Args:
        run_id: Identificador único da run.
        pipeline: Nome da definição de pipeline executada.
        started_at: Timestamp de início.
        tool_version: Versão do sljs-pipeline.
        config_hash: Hash da configuração efetiva.
        trigger: Evento que originou a run (serializado).

    Returns:
        PipelineManifest: Manifest com `steps` e `events` vazios.
    """
    return PipelineManifest(
        run={
            "run_id": run_id,
            "pipeline": pipeline,
            "started_at": _iso(started_at),
            "tool_version": tool_version,
            "trigger": dict(trigger or {}),
            "status": "running",
        },
        inputs={
            "config_hash": config_hash,
        },
        steps={},
        events=[],
    )


def add_event(
    manifest: PipelineManifest,
    *,
    event_type: str,
    ts: datetime,
    step_id: Optional[str] = None,
    payload: Optional[Dict[str, Any]] = None,
) -> None:
    """
    Adiciona exatamente um evento ao Event Log.

    Eventos nunca são reordenados nem deduplicados; `event_type` não é
    validado semanticamente (ex.: run_started, publish_finished).
    """
    ev: Dict[str, Any] = {"event_type": event_type, "timestamp": _iso(ts)}
    if step_id is not None:
        ev["step_id"] = step_id
    if payload is not None:
        ev["payload"] = payload
    manifest.events.append(ev)


def step_started(
    manifest: PipelineManifest,
    *,
    step_id: str,
    kind: str,
    ts: datetime,
) -> None:
    """Marca o Step como `running` e registra `step_started`."""
    s = manifest.steps.setdefault(step_id, {})
    s.update(
        {
            "step_id": step_id,
            "kind": kind,
            "status": "running",
            "started_at": _iso(ts),
        }
    )
    add_event(manifest, event_type="step_started", ts=ts, step_id=step_id, payload={"kind": kind})


def _result_dict(result: Union[StepResult, Dict[str, Any]]) -> Dict[str, Any]:
    if isinstance(result, StepResult):
        return result.to_dict()
    return dict(result)


def step_finished(
    manifest: PipelineManifest,
    *,
    step_id: str,
    ts: datetime,
    result: Union[StepResult, Dict[str, Any]],
) -> None:
    """
    Registra a conclusão de um Step (sucesso ou skip).

    A duração é calculada a partir de `started_at` quando disponível; Steps
    pulados nunca começaram e ficam com duração zero.
    """
    data = _result_dict(result)
    s = manifest.steps.setdefault(step_id, {"step_id": step_id})
    started_iso = s.get("started_at")
    started_dt = datetime.fromisoformat(started_iso) if started_iso else ts

    status = data.get("status", "success")
    s.update(
        {
            "status": status,
            "finished_at": _iso(ts),
            "duration_ms": _ms_between(started_dt, ts),
            "summary": data.get("summary"),
            "metrics": data.get("metrics", {}) or {},
            "warnings": data.get("warnings", []) or [],
            "artifacts": data.get("artifacts", {}) or {},
        }
    )
    if "kind" in data and "kind" not in s:
        s["kind"] = data["kind"]

    add_event(
        manifest,
        event_type="step_finished",
        ts=ts,
        step_id=step_id,
        payload={"status": status, "duration_ms": s["duration_ms"]},
    )


def step_failed(
    manifest: PipelineManifest,
    *,
    step_id: str,
    ts: datetime,
    error: Dict[str, Any],
    summary: Optional[str] = None,
) -> None:
    """
    Marca o Step como `failed` e registra `step_failed`.

    `error` é o payload serializado (`PipelineErrorPayload.to_dict()`), com
    a saída da ferramenta preservada sem truncamento.
    """
    s = manifest.steps.setdefault(step_id, {"step_id": step_id})
    started_iso = s.get("started_at")
    started_dt = datetime.fromisoformat(started_iso) if started_iso else ts
    s.update(
        {
            "status": "failed",
            "finished_at": _iso(ts),
            "duration_ms": _ms_between(started_dt, ts),
            "summary": summary,
            "error": error,
        }
    )
    add_event(
        manifest,
        event_type="step_failed",
        ts=ts,
        step_id=step_id,
        payload={"error_type": error.get("type"), "message": error.get("message")},
    )


def run_finished(
    manifest: PipelineManifest,
    *,
    ts: datetime,
    status: str,
    payload: Optional[Dict[str, Any]] = None,
) -> None:
    """Fecha a run: status final (success | failed | superseded) e `run_finished`."""
    manifest.run["status"] = status
    manifest.run["finished_at"] = _iso(ts)
    ev_payload = {"status": status}
    ev_payload.update(payload or {})
    add_event(manifest, event_type="run_finished", ts=ts, payload=ev_payload)


def save_manifest(manifest: PipelineManifest, path: Path) -> None:
    """
    Persiste o Manifest em JSON determinístico (chaves ordenadas).

    Raises:
        OSError: Em caso de falha ao criar diretórios ou escrever o arquivo.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(manifest.to_dict(), ensure_ascii=False, indent=2, sort_keys=True),
        encoding="utf-8",
    )


def load_manifest(path: Path) -> PipelineManifest:
    """Restaura um Manifest persistido por `save_manifest`."""
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    return PipelineManifest.from_dict(data)
