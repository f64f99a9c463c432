# src/sljs_pipeline/coordinator/run_registry.py
"""
Registro de runs por chave de concorrência ("latest wins").

- `enqueue` marca atomicamente como superada toda run ainda não
  finalizada da mesma chave e devolve o ticket da nova run
- `slot` serializa as runs de uma chave; o ticket sai do registro ao
  deixar o slot (não há estado persistido)
- um ticket superado antes de começar nunca começa (`start` → False)
- uma run superada em andamento termina, mas `claim_publish` → False
- `claim_publish` é o ponto de commit da publicação: uma run que já o
  passou não é mais superada, e a run nova espera o slot para publicar
  depois dela
- `workspace_slot` serializa todas as runs que escrevem no mesmo
  workspace, qualquer que seja a chave

Runs de chaves diferentes não superam umas às outras.
"""

from __future__ import annotations

import itertools
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterator, List, Union


@dataclass(eq=False)
class RunTicket:
    key: str
    run_id: str
    seq: int
    superseded: bool = False
    started: bool = False
    publishing: bool = False
    finished: bool = False


class RunRegistry:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._seq = itertools.count(1)
        self._tickets: Dict[str, List[RunTicket]] = {}
        self._slots: Dict[str, threading.Lock] = {}
        self._workspaces: Dict[str, threading.Lock] = {}

    def enqueue(self, key: str, run_id: str) -> RunTicket:
        with self._lock:
            pending = self._tickets.setdefault(key, [])
            for older in pending:
                if not older.finished and not older.publishing:
                    older.superseded = True
            ticket = RunTicket(key=key, run_id=run_id, seq=next(self._seq))
            pending.append(ticket)
            self._slots.setdefault(key, threading.Lock())
            return ticket

    @contextmanager
    def slot(self, ticket: RunTicket) -> Iterator[RunTicket]:
        with self._lock:
            slot_lock = self._slots[ticket.key]
        with slot_lock:
            try:
                yield ticket
            finally:
                self._release(ticket)

    @contextmanager
    def workspace_slot(self, workspace: Union[str, Path]) -> Iterator[None]:
        """Exclusão mútua entre runs que compartilham o mesmo workspace."""
        key = str(Path(workspace).resolve())
        with self._lock:
            lock = self._workspaces.setdefault(key, threading.Lock())
        with lock:
            yield

    def start(self, ticket: RunTicket) -> bool:
        with self._lock:
            if ticket.superseded:
                return False
            ticket.started = True
            return True

    def claim_publish(self, ticket: RunTicket) -> bool:
        with self._lock:
            if not ticket.started or ticket.superseded:
                return False
            ticket.publishing = True
            return True

    def pending(self, key: str) -> List[str]:
        """run_ids ainda registrados para `key`, do mais antigo ao mais novo."""
        with self._lock:
            return [t.run_id for t in self._tickets.get(key, [])]

    def _release(self, ticket: RunTicket) -> None:
        with self._lock:
            ticket.finished = True
            pending = self._tickets.get(ticket.key, [])
            if ticket in pending:
                pending.remove(ticket)
            if not pending:
                self._tickets.pop(ticket.key, None)
                self._slots.pop(ticket.key, None)
