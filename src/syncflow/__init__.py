# src/syncflow/__init__.py
"""
SyncFlow — agendamento declarativo de run profiles de um serviço de sincronização.

Uma RunConfiguration nomeada descreve uma árvore de Steps: folhas invocam
um run profile no serviço externo ou pausam a execução; Steps compostos
(sequências lineares ou paralelas) agrupam e reutilizam Sequences nomeadas.

Arquitetura em alto nível:
    - core.config       → carregamento e validação do documento de configuração
    - core.pipeline     → modelo declarativo, tabelas de lookup e RunContext
    - core.engine       → resolver, executor, scheduler e plan preview
    - core.traceability → Manifest e Event Log de cada run

Gatilhos (timers, serviços) ficam fora deste pacote: eles só precisam de
`Scheduler.run(name)` e `Scheduler.run_on_demand()`.
"""

import logging

from .core.config.loader import load_scheduler_config
from .core.engine.scheduler import RunReport, Scheduler
from .core.engine.sync_engine import ExternalEngineError, SyncEngine

__all__ = [
    "Scheduler",
    "RunReport",
    "SyncEngine",
    "ExternalEngineError",
    "load_scheduler_config",
    "configure_logging",
]


def configure_logging(level: int = logging.INFO) -> None:
    """Configura um handler básico no logger `syncflow` (processos sem logging próprio)."""
    logger = logging.getLogger("syncflow")
    logger.setLevel(level)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        logger.addHandler(handler)
