# src/syncflow/core/config/settings.py
"""
Parâmetros globais e configuração carregada do SyncFlow.

Os parâmetros globais (limpeza de histórico, atrasos entre Steps,
schedule on-demand) são lidos uma vez no load e passados explicitamente
ao Resolver/Executor. Não existe estado global de módulo: duas runs
concorrentes recebem a mesma instância imutável.

Conversões de valores são estritas: um valor que não pode ser
convertido gera `InvalidSettingValueError` nomeando a chave.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from syncflow.core.pipeline.registry import RunConfigurationTable, SequenceTable

from .errors import InvalidSettingValueError

_TRUE = {"true", "1", "yes", "on"}
_FALSE = {"false", "0", "no", "off"}


def parse_bool(value: Any, *, key: str) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().casefold()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise InvalidSettingValueError(f"{key} is not a valid boolean: {value!r}")


def parse_int(value: Any, *, key: str) -> int:
    if isinstance(value, bool):
        raise InvalidSettingValueError(f"{key} is not a valid number: {value!r}")
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except (TypeError, ValueError) as e:
        raise InvalidSettingValueError(f"{key} is not a valid number: {value!r}") from e


@dataclass(frozen=True)
class SchedulerSettings:
    """
    Parâmetros globais do scheduler.

    Campos:
        - clear_run_history: limpar o histórico do serviço após cada run
        - keep_history_days: dias de histórico mantidos (<= 0 desabilita a limpeza)
        - delay_in_parallel_sequence: escalonamento entre partidas de filhos paralelos (s)
        - delay_in_linear_sequence: pausa entre filhos consecutivos de uma sequência linear (s)
        - on_demand_schedule: RunConfiguration executada por `run_on_demand()`
    """

    clear_run_history: bool = False
    keep_history_days: int = -1
    delay_in_parallel_sequence: int = -1
    delay_in_linear_sequence: int = 0
    on_demand_schedule: Optional[str] = None

    @property
    def history_clearing_enabled(self) -> bool:
        return self.clear_run_history and self.keep_history_days > 0


@dataclass(frozen=True)
class SchedulerConfig:
    """Resultado do carregamento: parâmetros globais + tabelas de lookup."""

    settings: SchedulerSettings = field(default_factory=SchedulerSettings)
    sequences: SequenceTable = field(default_factory=SequenceTable)
    run_configurations: RunConfigurationTable = field(default_factory=RunConfigurationTable)
