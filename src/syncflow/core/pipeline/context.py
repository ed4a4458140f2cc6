# src/syncflow/core/pipeline/context.py
"""
Contexto de execução de uma run do SyncFlow.

Este módulo define o `RunContext`, a estrutura criada no início de cada
`Scheduler.run(name)` e compartilhada pelo Resolver e pelo Executor
durante aquela run (e somente aquela).

O RunContext é o meio canônico de:
    - registrar eventos de log estruturados da run
    - coletar diagnósticos não fatais (resolução e engine externo)
    - coletar warnings por nó

Cada evento estruturado também é encaminhado ao `logging` da biblioteca
padrão, no logger do módulo que o emitiu; o processo hospedeiro decide
handlers e nível.

Invariantes:
    - Eventos sempre incluem `run_id` e `step_id` (None para eventos da run)
    - Escritas são seguras entre threads (ParallelSequence)
    - Nenhum estado é compartilhado entre runs
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from syncflow.core.errors import SchedulerErrorPayload


@dataclass
class RunContext:
    """
    Contexto isolado de uma run.

    Campos canônicos:
    - run_id: identificador único da execução
    - configuration: nome da RunConfiguration executada
    - created_at: timestamp UTC de criação do contexto
    - events: log estruturado de eventos
    - diagnostics: payloads de erro não fatais, em ordem de ocorrência
    - warnings: warnings por node_id
    """

    run_id: str
    configuration: str
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    events: List[Dict[str, Any]] = field(default_factory=list)
    diagnostics: List[SchedulerErrorPayload] = field(default_factory=list)
    warnings: Dict[str, List[str]] = field(default_factory=dict)

    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    # -----------------------------
    # Logging
    # -----------------------------
    def log(
        self,
        *,
        level: str,
        message: str,
        step_id: Optional[str] = None,
        source: Optional[str] = None,
        **extra: Any,
    ) -> None:
        event = {
            "run_id": self.run_id,
            "step_id": step_id,
            "level": level.upper(),
            "message": message,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        event.update(extra)
        with self._lock:
            self.events.append(event)

        logger = logging.getLogger(source or "syncflow")
        prefix = f"[{self.run_id}] " if step_id is None else f"[{self.run_id}:{step_id}] "
        logger.log(getattr(logging, level.upper(), logging.INFO), prefix + message)

    # -----------------------------
    # Diagnostics & warnings
    # -----------------------------
    def add_diagnostic(
        self,
        payload: SchedulerErrorPayload,
        *,
        step_id: Optional[str] = None,
        source: Optional[str] = None,
    ) -> None:
        with self._lock:
            self.diagnostics.append(payload)
        self.log(
            level="ERROR",
            message=payload.message,
            step_id=step_id,
            source=source,
            error_type=payload.type,
        )

    def add_warning(self, *, step_id: str, message: str) -> None:
        with self._lock:
            self.warnings.setdefault(step_id, []).append(message)

    def diagnostics_of(self, error_type: str) -> List[SchedulerErrorPayload]:
        with self._lock:
            return [d for d in self.diagnostics if d.type == error_type]
