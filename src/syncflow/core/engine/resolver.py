# src/syncflow/core/engine/resolver.py
"""
Resolver — expansão da árvore de Steps de uma RunConfiguration.

Este módulo transforma as declarações imutáveis (`StepDefinition`) em uma
árvore concreta de `ResolvedStep`, seguindo referências por nome entre
Steps e Sequences e propagando o run profile efetivo.

Algoritmo (para cada declaração `d` com profile herdado `p`):
    1. profile efetivo = `d.action` quando definido, senão `p`
    2. se `d` já foi visitada nesta resolução → referência circular:
       nó sem filhos, diagnóstico registrado, ramos irmãos continuam
    3. senão, procura `d.name` na SequenceTable:
       - encontrada → filhos = resolução recursiva dos Steps da Sequence
       - não encontrada → sem filhos; diagnóstico apenas para Steps compostos

Decisões arquiteturais:
    - O conjunto de visitados é indexado pela identidade da declaração e é
      local a uma resolução (nunca armazenado na declaração)
    - Qualquer segunda visita é tratada como circular, inclusive a
      reutilização legítima da mesma declaração por dois ramos (diamante):
      a primeira visita sempre prevalece
    - Erros de resolução nunca são levantados ao chamador; a árvore podada
      segue para execução

Limites explícitos:
    - Não executa Steps
    - Não chama o serviço de sincronização
    - Não mantém cache entre runs
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Set

from syncflow.core.errors import (
    CIRCULAR_REFERENCE,
    SEQUENCE_NOT_FOUND,
    SchedulerErrorPayload,
    circular_reference,
    sequence_not_found,
)
from syncflow.core.exceptions import CircularReferenceError, NotFoundError
from syncflow.core.pipeline.context import RunContext
from syncflow.core.pipeline.registry import SequenceTable
from syncflow.core.pipeline.step import ResolvedStep
from syncflow.core.pipeline.types import RunConfiguration, StepDefinition

logger = logging.getLogger(__name__)


@dataclass
class ResolutionState:
    """Estado de uma única resolução: declarações visitadas e diagnósticos."""

    visited: Set[int] = field(default_factory=set)
    diagnostics: List[SchedulerErrorPayload] = field(default_factory=list)
    ctx: Optional[RunContext] = None

    def enter(self, definition: StepDefinition) -> bool:
        """Marca a declaração como visitada; False se já estava."""
        key = id(definition)
        if key in self.visited:
            return False
        self.visited.add(key)
        return True

    def report(self, payload: SchedulerErrorPayload, *, node_id: str) -> None:
        self.diagnostics.append(payload)
        if self.ctx is not None:
            self.ctx.add_diagnostic(payload, step_id=node_id, source=__name__)
        else:
            logger.error("%s (node %s)", payload.message, node_id)


@dataclass(frozen=True)
class ResolutionResult:
    """Árvore resolvida (floresta de root steps) e diagnósticos coletados."""

    steps: List[ResolvedStep]
    diagnostics: List[SchedulerErrorPayload]

    @property
    def ok(self) -> bool:
        return not self.diagnostics

    def nodes(self) -> List[ResolvedStep]:
        return [node for root in self.steps for node in root.walk()]

    def raise_for_diagnostics(self) -> None:
        """
        Levanta o primeiro diagnóstico como exceção tipada.

        Útil para validação estrita de configuração; `Scheduler.run`
        nunca chama este método.
        """
        if not self.diagnostics:
            return
        first = self.diagnostics[0]
        if first.type == CIRCULAR_REFERENCE:
            raise CircularReferenceError(first.message, details=dict(first.details), hint=first.hint)
        if first.type == SEQUENCE_NOT_FOUND:
            raise NotFoundError(first.message, details=dict(first.details), hint=first.hint)


def _child_id(parent_id: str, index: int) -> str:
    return f"{parent_id}.{index}" if parent_id else str(index)


def _resolve(
    definitions: Iterable[StepDefinition],
    inherited_profile: str,
    sequences: SequenceTable,
    state: ResolutionState,
    parent_id: str,
) -> List[ResolvedStep]:
    resolved: List[ResolvedStep] = []
    for index, definition in enumerate(definitions, start=1):
        node_id = _child_id(parent_id, index)
        profile = definition.action or inherited_profile
        node = ResolvedStep(definition=definition, node_id=node_id, effective_profile=profile)

        if not state.enter(definition):
            # referência circular: poda o ramo, mas não interrompe os irmãos
            node.circular = True
            state.report(circular_reference(name=definition.name, node_id=node_id), node_id=node_id)
            resolved.append(node)
            continue

        sequence = sequences.lookup(definition.name)
        if sequence is not None:
            node.children = _resolve(sequence.steps, profile, sequences, state, node_id)
        elif definition.type.is_composite:
            node.not_found = True
            state.report(
                sequence_not_found(
                    name=definition.name, node_id=node_id, step_type=definition.type.value
                ),
                node_id=node_id,
            )

        resolved.append(node)
    return resolved


def resolve_steps(
    definitions: Iterable[StepDefinition],
    default_profile: str,
    sequences: SequenceTable,
    *,
    ctx: Optional[RunContext] = None,
    state: Optional[ResolutionState] = None,
    parent_id: str = "",
) -> ResolutionResult:
    """
    Resolve uma lista de declarações em uma floresta de `ResolvedStep`.

    Args:
        definitions: Declarações a resolver (ex.: root steps).
        default_profile: Profile herdado pelos Steps sem `action`.
        sequences: Tabela de Sequences para lookup por nome.
        ctx: Contexto da run, quando houver, para log estruturado.
        state: Estado de resolução a reutilizar; novo quando omitido.
        parent_id: Prefixo dos identificadores de nó.

    Returns:
        ResolutionResult: árvore resolvida e diagnósticos desta resolução.
    """
    if state is None:
        state = ResolutionState(ctx=ctx)
    steps = _resolve(definitions, default_profile, sequences, state, parent_id)
    return ResolutionResult(steps=steps, diagnostics=list(state.diagnostics))


def resolve_run_configuration(
    run_configuration: RunConfiguration,
    sequences: SequenceTable,
    *,
    ctx: Optional[RunContext] = None,
) -> ResolutionResult:
    """Resolve os root steps de uma RunConfiguration com estado novo."""
    return resolve_steps(
        run_configuration.root_steps,
        run_configuration.default_run_profile,
        sequences,
        ctx=ctx,
    )
