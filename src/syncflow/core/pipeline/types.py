# src/syncflow/core/pipeline/types.py
"""
Tipos canônicos do modelo declarativo do SyncFlow.

Este módulo define as estruturas imutáveis produzidas pelo carregamento
da configuração e consumidas pelo Resolver:

    - StepType          → conjunto fechado de variantes de Step
    - StepStatus        → estados de um nó durante a execução
    - StepDefinition    → declaração imutável de um Step
    - Sequence          → lista nomeada e reutilizável de Steps
    - RunConfiguration  → ponto de entrada nomeado (root steps + profile padrão)

Princípios fundamentais:
    - Definições são criadas uma única vez no load e nunca mutadas
    - A identidade de uma StepDefinition é a identidade do objeto
      (duas declarações iguais em Sequences diferentes são Steps distintos)
    - Nenhuma lógica de resolução ou execução vive neste módulo

Limites explícitos:
    - Não resolve referências entre Sequences
    - Não executa Steps
    - Não lê arquivos de configuração
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

from syncflow.core.config.errors import InvalidStepTypeError


class StepType(str, Enum):
    """
    Variantes de Step suportadas pelo SyncFlow.

    O valor textual é exatamente a tag usada no documento de configuração
    (atributo `Type` no XML, chave `type` em YAML/JSON).

    Tipos definidos:
        - LINEAR_SEQUENCE: filhos executados em ordem, um após o outro
        - PARALLEL_SEQUENCE: filhos executados em paralelo, com partida escalonada
        - DELAY: pausa a execução por `seconds`
        - RUN_PROFILE: invoca um run profile no serviço de sincronização
    """

    LINEAR_SEQUENCE = "LinearSequence"
    PARALLEL_SEQUENCE = "ParallelSequence"
    DELAY = "Delay"
    RUN_PROFILE = "RunProfile"

    @property
    def is_composite(self) -> bool:
        return self in (StepType.LINEAR_SEQUENCE, StepType.PARALLEL_SEQUENCE)

    @classmethod
    def parse(cls, tag: Optional[str]) -> "StepType":
        """
        Converte a tag do documento de configuração em uma variante.

        A comparação ignora caixa e espaços nas extremidades. Tags ausentes
        ou desconhecidas são erro de configuração (fatal no load).

        Raises:
            InvalidStepTypeError: Se a tag for vazia ou não reconhecida.
        """
        if tag is None or not str(tag).strip():
            raise InvalidStepTypeError("Type attribute of step is missing.")
        key = str(tag).strip().casefold()
        for member in cls:
            if member.value.casefold() == key:
                return member
        raise InvalidStepTypeError(f"Type is not recognized: {tag}")


class StepStatus(str, Enum):
    """
    Estados de um nó resolvido durante a execução.

    Não existe estado FAILED: uma falha do engine externo é registrada
    como diagnóstico e o nó termina como COMPLETED (semântica best-effort).
    """

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"


@dataclass(frozen=True, eq=False)
class StepDefinition:
    """
    Declaração imutável de um Step, exatamente como lida da configuração.

    Campos:
        - name: nome do Step; também é a chave de lookup de Sequence
        - type: variante declarada
        - action: run profile que substitui o herdado (para este Step e descendentes)
        - seconds: duração da pausa; obrigatório apenas para Delay

    `eq=False` mantém igualdade e hash por identidade: a detecção de
    referência circular é indexada pela declaração, não pelo seu conteúdo.
    """

    name: str
    type: StepType
    action: Optional[str] = None
    seconds: Optional[int] = None


@dataclass(frozen=True)
class Sequence:
    """Lista nomeada e ordenada de StepDefinitions, referenciada por nome."""

    name: str
    steps: Tuple[StepDefinition, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class RunConfiguration:
    """
    Ponto de entrada nomeado de uma run.

    `root_steps` é lido diretamente do bloco RunConfiguration (não passa
    por lookup de Sequence) e é sempre executado como uma sequência linear
    implícita. `default_run_profile` é o profile herdado pelos Steps que
    não declaram `action`.
    """

    name: str
    default_run_profile: str
    root_steps: Tuple[StepDefinition, ...] = field(default_factory=tuple)
