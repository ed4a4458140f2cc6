# src/syncflow/core/pipeline/step.py
"""
Nó resolvido da árvore de execução.

Um `ResolvedStep` é produzido pelo Resolver a partir de uma
`StepDefinition` e consumido por exatamente uma execução do Executor.
A árvore é reconstruída a cada `Scheduler.run(name)`: nenhum nó é
compartilhado entre resoluções.

Ciclo de vida:
    - criado e mutado apenas durante a resolução
    - somente leitura durante a execução (exceto `status`)
    - descartado ao final da run

Invariantes:
    - `effective_profile` nunca é vazio
    - nós marcados como `circular` não possuem filhos; a variante do nó
      ainda é executada (uma folha circular invoca seu run profile)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, List

from .types import StepDefinition, StepStatus, StepType


@dataclass
class ResolvedStep:
    """
    Nó da árvore resolvida.

    Campos:
        - definition: declaração de origem (emprestada, somente leitura)
        - node_id: caminho identificador (ex.: "2.1.3"), único na árvore
        - effective_profile: `action` da declaração ou profile herdado
        - children: filhos resolvidos (vazio para folhas e nós podados)
        - circular: declaração já visitada nesta resolução
        - not_found: Step composto sem Sequence correspondente
        - status: estado de execução (pending → running → completed)
    """

    definition: StepDefinition
    node_id: str
    effective_profile: str
    children: List["ResolvedStep"] = field(default_factory=list)
    circular: bool = False
    not_found: bool = False
    status: StepStatus = StepStatus.PENDING

    @property
    def name(self) -> str:
        return self.definition.name

    @property
    def type(self) -> StepType:
        return self.definition.type

    @property
    def is_leaf(self) -> bool:
        return not self.type.is_composite

    def walk(self) -> Iterator["ResolvedStep"]:
        """Percorre a subárvore em pré-ordem."""
        yield self
        for child in self.children:
            yield from child.walk()
