# src/syncflow/core/traceability/__init__.py
"""
Pacote de rastreabilidade do SyncFlow — Run Manifest v1.

API pública exposta (em `manifest`):
    - RunManifest     → estrutura canônica do Manifest
    - create_manifest → criação explícita do Manifest
    - add_event       → registro explícito de eventos no Event Log
    - step_started / step_finished → estado de cada nó
    - run_finished / run_aborted → encerramento da run
    - save_manifest / load_manifest → persistência JSON
"""

from .manifest import (
    RunManifest,
    create_manifest,
    add_event,
    step_started,
    step_finished,
    run_aborted,
    run_finished,
    save_manifest,
    load_manifest,
)

__all__ = [
    "RunManifest",
    "create_manifest",
    "add_event",
    "step_started",
    "step_finished",
    "run_aborted",
    "run_finished",
    "save_manifest",
    "load_manifest",
]
