# src/sljs_pipeline/core/pipeline/context.py
"""
Contexto de execução compartilhado de uma run.

O RunContext é o único meio permitido de:
    - acessar o workspace (checkout do código-fonte, compartilhado e
      somente-leitura entre Steps independentes)
    - invocar ferramentas externas (via `runner`)
    - registrar e consultar artefatos produzidos nesta run
    - registrar logs estruturados e warnings por Step

Princípios fundamentais:
    - Isolamento por run: artefatos de uma run anterior nunca aparecem
      no store de uma nova run
    - Seguro para Steps executados em paralelo (store, log e warnings
      protegidos por lock)

Invariantes:
    - Artefatos são indexados por chave explícita e apontam para paths
    - Logs sempre incluem `run_id` e `step_id`
    - Warnings são agrupados por `step_id`

Limites explícitos:
    - Não executa Steps
    - Não decide políticas de execução
    - Não persiste nada automaticamente
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional


@dataclass
class RunContext:
    """
    Contexto de execução de uma run de pipeline.

    Campos canônicos:
    - run_id: identificador único da run
    - created_at: timestamp UTC de criação
    - config: configuração efetiva do pipeline (engine já resolvido)
    - workspace: raiz do checkout; paths relativos são resolvidos contra ela
    - runner: executor de comandos externos (`tools.runner.CommandRunner`
      ou um duplo de teste com o mesmo método `run`)
    - trigger: evento que originou a run (serializado)
    - meta: metadados livres (pipeline, ref, paths auxiliares)
    """
    run_id: str
    created_at: datetime
    config: Dict[str, Any]
    workspace: Path
    runner: Any = None
    trigger: Optional[Dict[str, Any]] = None
    meta: Dict[str, Any] = field(default_factory=dict)

    _artifacts: Dict[str, Path] = field(default_factory=dict, init=False, repr=False)
    events: List[Dict[str, Any]] = field(default_factory=list, init=False)
    warnings: Dict[str, List[str]] = field(default_factory=dict, init=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    def __post_init__(self) -> None:
        self.workspace = Path(self.workspace)

    def resolve(self, relative: str) -> Path:
        """Resolve um path relativo ao workspace (paths absolutos passam direto)."""
        p = Path(relative).expanduser()
        return p if p.is_absolute() else self.workspace / p

    # -----------------------------
    # Artifact store
    # -----------------------------
    def set_artifact(self, key: str, path: Path) -> None:
        with self._lock:
            self._artifacts[key] = Path(path)

    def has_artifact(self, key: str) -> bool:
        with self._lock:
            return key in self._artifacts

    def get_artifact(self, key: str) -> Path:
        with self._lock:
            if key not in self._artifacts:
                raise KeyError(key)
            return self._artifacts[key]

    def artifacts(self) -> Dict[str, str]:
        with self._lock:
            return {k: str(v) for k, v in self._artifacts.items()}

    # -----------------------------
    # Logging & warnings
    # -----------------------------
    def log(self, *, step_id: str, level: str, message: str, **extra: Any) -> None:
        event = {
            "run_id": self.run_id,
            "step_id": step_id,
            "level": level,
            "message": message,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        event.update(extra)
        with self._lock:
            self.events.append(event)

    def add_warning(self, *, step_id: str, message: str) -> None:
        with self._lock:
            self.warnings.setdefault(step_id, []).append(message)

    def warnings_for(self, step_id: str) -> List[str]:
        with self._lock:
            return list(self.warnings.get(step_id, []))
