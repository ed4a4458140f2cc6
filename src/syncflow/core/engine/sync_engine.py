# src/syncflow/core/engine/sync_engine.py
"""
Fronteira com o serviço de sincronização externo.

O SyncFlow não conhece o protocolo do serviço: ele depende apenas de um
objeto que satisfaça o protocolo `SyncEngine`. Adaptadores concretos
(WMI, REST, linha de comando) vivem fora deste pacote.

Contrato:
    - `invoke_run_profile(profile_name, step_name=...)` executa o run profile
      no management agent `step_name` e devolve o status textual reportado
    - `clear_history(cutoff_utc)` remove o histórico de runs anterior ao
      instante informado e devolve o status textual
    - falhas são sinalizadas com `ExternalEngineError`; qualquer outra
      exceção é tratada como erro de programação e aborta a run

Retry, autenticação e serialização de chamadas concorrentes são
responsabilidade do adaptador.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Protocol, runtime_checkable

from syncflow.core.exceptions import ExternalEngineError

__all__ = ["SyncEngine", "ExternalEngineError", "format_history_cutoff"]


@runtime_checkable
class SyncEngine(Protocol):
    """Contrato mínimo do serviço de sincronização."""

    def invoke_run_profile(self, profile_name: str, *, step_name: str) -> str:
        """Executa um run profile e devolve o status reportado."""
        ...

    def clear_history(self, cutoff_utc: datetime) -> str:
        """Remove o histórico de runs anterior a `cutoff_utc`."""
        ...


def format_history_cutoff(cutoff: datetime) -> str:
    """
    Formata o instante de corte no formato aceito pelo serviço
    (`YYYY-MM-DD HH:MM:SS.fff`, UTC). Datas sem timezone são assumidas UTC.
    """
    if cutoff.tzinfo is None:
        cutoff = cutoff.replace(tzinfo=timezone.utc)
    cutoff = cutoff.astimezone(timezone.utc)
    return cutoff.strftime("%Y-%m-%d %H:%M:%S.") + f"{cutoff.microsecond // 1000:03d}"
