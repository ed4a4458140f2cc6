# src/syncflow/core/traceability/manifest.py
"""
Run Manifest v1 — rastreabilidade de execuções do SyncFlow.

Este módulo define a estrutura e as operações canônicas do Manifest de
uma run, o registro que consolida de forma auditável:
    - metadados da execução (run_id, configuração, início e fim)
    - estado de cada nó resolvido, indexado por `node_id`
    - Event Log ordenado (partidas, conclusões, chamadas ao engine externo)

Princípios fundamentais:
    - Nenhum evento é emitido implicitamente
    - A ordem do Event Log reflete a ordem real das chamadas
    - O Manifest é serializável e reconstruível (round-trip JSON)

Decisões arquiteturais:
    - UTC é o timezone canônico para todos os timestamps
    - Escritas são protegidas por lock: filhos de uma ParallelSequence
      registram eventos a partir de threads distintas

Limites explícitos:
    - Não executa Steps
    - Não decide políticas de execução
"""

from __future__ import annotations

import json
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional


def _ensure_tzaware_utc(dt: datetime) -> datetime:
    """Timestamps sem timezone são assumidos UTC; os demais são convertidos."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _iso(dt: datetime) -> str:
    return _ensure_tzaware_utc(dt).isoformat()


def _ms_between(start: datetime, end: datetime) -> int:
    s = _ensure_tzaware_utc(start)
    e = _ensure_tzaware_utc(end)
    return max(0, int((e - s).total_seconds() * 1000))


@dataclass
class RunManifest:
    """
    Registro de uma run.

    Campos principais:
        - run: metadados (run_id, configuration, started_at, finished_at)
        - steps: estado de cada nó, indexado por node_id
        - events: Event Log ordenado
    """

    run: Dict[str, Any]
    steps: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    events: List[Dict[str, Any]] = field(default_factory=list)

    _lock: threading.RLock = field(default_factory=threading.RLock, init=False, repr=False, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        """Cópia serializável e independente do estado interno."""
        with self._lock:
            return {
                "run": dict(self.run),
                "steps": {k: dict(v) for k, v in self.steps.items()},
                "events": [dict(e) for e in self.events],
            }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RunManifest":
        return cls(
            run=dict(data.get("run", {})),
            steps={k: dict(v) for k, v in (data.get("steps", {}) or {}).items()},
            events=[dict(e) for e in (data.get("events", []) or [])],
        )

    def events_of(self, event_type: str) -> List[Dict[str, Any]]:
        with self._lock:
            return [dict(e) for e in self.events if e["event_type"] == event_type]


def create_manifest(*, run_id: str, configuration: str, started_at: datetime) -> RunManifest:
    """
    Cria o Manifest inicial de uma run.

    O Event Log inicia vazio: `run_started` só é registrado por chamada
    explícita a `add_event`.
    """
    return RunManifest(
        run={
            "run_id": run_id,
            "configuration": configuration,
            "started_at": _iso(started_at),
        },
    )


def add_event(
    manifest: RunManifest,
    *,
    event_type: str,
    ts: datetime,
    step_id: Optional[str] = None,
    payload: Optional[Dict[str, Any]] = None,
) -> None:
    """Adiciona exatamente um evento ao Event Log, na ordem de chamada."""
    ev: Dict[str, Any] = {"event_type": event_type, "timestamp": _iso(ts)}
    if step_id is not None:
        ev["step_id"] = step_id
    if payload is not None:
        ev["payload"] = payload
    with manifest._lock:
        manifest.events.append(ev)


def step_started(
    manifest: RunManifest,
    *,
    step_id: str,
    name: str,
    step_type: str,
    profile: str,
    ts: datetime,
    circular: bool = False,
) -> None:
    """
    Marca o nó como `running` e registra `step_started`.

    Nós podados por referência circular recebem `circular: true`.
    """
    with manifest._lock:
        manifest.steps[step_id] = {
            "step_id": step_id,
            "name": name,
            "type": step_type,
            "profile": profile,
            "status": "running",
            "started_at": _iso(ts),
        }
        if circular:
            manifest.steps[step_id]["circular"] = True
        add_event(manifest, event_type="step_started", ts=ts, step_id=step_id, payload={"type": step_type})


def step_finished(manifest: RunManifest, *, step_id: str, ts: datetime) -> None:
    """Marca o nó como `completed`, calcula a duração e registra `step_finished`."""
    with manifest._lock:
        s = manifest.steps.setdefault(step_id, {"step_id": step_id})
        started_iso = s.get("started_at")
        started_dt = datetime.fromisoformat(started_iso) if started_iso else ts
        s.update(
            {
                "status": "completed",
                "finished_at": _iso(ts),
                "duration_ms": _ms_between(started_dt, ts),
            }
        )
        add_event(
            manifest,
            event_type="step_finished",
            ts=ts,
            step_id=step_id,
            payload={"duration_ms": s["duration_ms"]},
        )


def run_finished(manifest: RunManifest, *, ts: datetime) -> None:
    with manifest._lock:
        manifest.run["finished_at"] = _iso(ts)
        add_event(manifest, event_type="run_finished", ts=ts)


def run_aborted(manifest: RunManifest, *, ts: datetime, error: str) -> None:
    """Encerra o Manifest de uma run interrompida por erro de programação."""
    with manifest._lock:
        manifest.run["finished_at"] = _iso(ts)
        manifest.run["aborted"] = True
        add_event(manifest, event_type="run_aborted", ts=ts, payload={"error": error})


def save_manifest(manifest: RunManifest, path: Path) -> None:
    """Persiste o Manifest em JSON determinístico (UTF-8, chaves ordenadas)."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(manifest.to_dict(), ensure_ascii=False, indent=2, sort_keys=True),
        encoding="utf-8",
    )


def load_manifest(path: Path) -> RunManifest:
    """Reconstrói um Manifest salvo por `save_manifest`."""
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    return RunManifest.from_dict(data)
