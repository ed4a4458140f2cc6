# src/syncflow/core/pipeline/registry.py
"""
Tabelas de lookup do modelo declarativo.

Este módulo define `SequenceTable` e `RunConfigurationTable`, os
registros somente-leitura construídos uma vez no carregamento da
configuração e consultados pelo Resolver e pelo Scheduler.

Decisões arquiteturais:
    - Chaves comparadas sem diferenciar maiúsculas/minúsculas (`casefold`)
    - Em chaves duplicadas, a última declaração carregada prevalece
    - O nome original é preservado no item armazenado (diagnósticos)
    - A ordem de declaração é preservada para listagem

Invariantes:
    - Nenhuma mutação após a construção
    - Leitura concorrente por múltiplas runs sem lock

Limites explícitos:
    - Não resolve referências entre Sequences
    - Não executa Steps
"""

from __future__ import annotations

import logging
from typing import Dict, Generic, Iterable, Iterator, List, Optional, TypeVar

from syncflow.core.exceptions import NotFoundError

from .types import RunConfiguration, Sequence

logger = logging.getLogger(__name__)

T = TypeVar("T", Sequence, RunConfiguration)


def _key(name: str) -> str:
    return name.strip().casefold()


class _LookupTable(Generic[T]):
    """Registro imutável indexado por nome, case-insensitive."""

    kind = "item"

    def __init__(self, items: Iterable[T] = ()):
        entries: Dict[str, T] = {}
        for item in items:
            k = _key(item.name)
            if k in entries:
                logger.warning(
                    "Duplicate %s name '%s': the last declaration wins.", self.kind, item.name
                )
                # reinserção move a chave para a posição da última declaração
                del entries[k]
            entries[k] = item
        self._entries = entries

    def lookup(self, name: Optional[str]) -> Optional[T]:
        if name is None:
            return None
        return self._entries.get(_key(name))

    def get(self, name: Optional[str]) -> T:
        item = self.lookup(name)
        if item is None:
            raise NotFoundError(
                f"{self.kind} '{name}' not found.",
                details={"name": name, "known": self.names()},
            )
        return item

    def names(self) -> List[str]:
        return [item.name for item in self._entries.values()]

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and _key(name) in self._entries

    def __iter__(self) -> Iterator[T]:
        return iter(list(self._entries.values()))

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.names()!r})"


class SequenceTable(_LookupTable[Sequence]):
    """Sequences nomeadas, referenciadas por Steps de mesmo nome."""

    kind = "Sequence"


class RunConfigurationTable(_LookupTable[RunConfiguration]):
    """RunConfigurations nomeadas, pontos de entrada de `Scheduler.run`."""

    kind = "Run configuration"
