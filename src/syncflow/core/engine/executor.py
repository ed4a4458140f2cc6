# src/syncflow/core/engine/executor.py
"""
Executor da árvore resolvida.

Este módulo percorre uma floresta de `ResolvedStep` e executa a
semântica de cada variante contra o serviço de sincronização:

    - RunProfile       → `engine.invoke_run_profile(profile, step_name=...)`
    - Delay            → pausa de `seconds` segundos
    - LinearSequence   → filhos em ordem; cada filho (com toda a subárvore)
                         termina antes do próximo começar; pausa opcional
                         `delay_in_linear_sequence` entre filhos
    - ParallelSequence → filhos em threads; a partida do filho i ocorre
                         após i pausas de `delay_in_parallel_sequence`;
                         a sequência só termina quando todos terminam

Os root steps de uma RunConfiguration são sempre executados como uma
LinearSequence implícita.

Política de erros (best-effort):
    - `ExternalEngineError` é registrada como diagnóstico e a execução
      dos irmãos continua
    - qualquer outra exceção é erro de programação: propaga e aborta a run
      (em uma ParallelSequence, após todos os filhos já iniciados terminarem)
    - nós circulares executam a própria variante normalmente; como a
      resolução já podou seus filhos, um composto circular não faz nada

Limites explícitos:
    - Não resolve referências (recebe a árvore pronta)
    - Não possui cancelamento nem timeout
    - Não serializa chamadas ao serviço (responsabilidade do adaptador)
"""

from __future__ import annotations

import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Sequence

from syncflow.core.config.settings import SchedulerSettings
from syncflow.core.errors import external_engine_error
from syncflow.core.exceptions import ExternalEngineError
from syncflow.core.pipeline.context import RunContext
from syncflow.core.pipeline.step import ResolvedStep
from syncflow.core.pipeline.types import StepStatus, StepType
from syncflow.core.traceability import manifest as mf

from .sync_engine import SyncEngine


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ProfileInvocation:
    """Uma chamada de run profile concluída (com sucesso ou falha reportada)."""

    node_id: str
    step_name: str
    profile: str
    status: Optional[str]
    failed: bool = False


class Executor:
    """Executa uma árvore resolvida contra um `SyncEngine`."""

    def __init__(
        self,
        engine: SyncEngine,
        settings: SchedulerSettings,
        *,
        ctx: RunContext,
        manifest: Optional[mf.RunManifest] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.engine = engine
        self.settings = settings
        self.ctx = ctx
        self.manifest = manifest
        self.sleep = sleep
        self.clock = clock

        self._lock = threading.Lock()
        self.invocations: List[ProfileInvocation] = []

        self._handlers: Dict[StepType, Callable[[ResolvedStep], None]] = {
            StepType.RUN_PROFILE: self._run_profile,
            StepType.DELAY: self._delay,
            StepType.LINEAR_SEQUENCE: self._linear_sequence,
            StepType.PARALLEL_SEQUENCE: self._parallel_sequence,
        }

    # ------------------------------------------------------------------
    # API
    # ------------------------------------------------------------------
    def execute(self, steps: Sequence[ResolvedStep]) -> None:
        """Executa os root steps como uma sequência linear implícita."""
        self._run_in_order(steps)

    def execute_step(self, node: ResolvedStep) -> None:
        node.status = StepStatus.RUNNING
        if self.manifest is not None:
            mf.step_started(
                self.manifest,
                step_id=node.node_id,
                name=node.name,
                step_type=node.type.value,
                profile=node.effective_profile,
                ts=self.clock(),
                circular=node.circular,
            )
        self.ctx.log(
            level="DEBUG",
            message=f"Running step '{node.name}' ({node.type.value}).",
            step_id=node.node_id,
            source=__name__,
        )

        self._handlers[node.type](node)

        node.status = StepStatus.COMPLETED
        if self.manifest is not None:
            mf.step_finished(self.manifest, step_id=node.node_id, ts=self.clock())

    @property
    def failures(self) -> List[ProfileInvocation]:
        with self._lock:
            return [i for i in self.invocations if i.failed]

    # ------------------------------------------------------------------
    # Variantes
    # ------------------------------------------------------------------
    def _run_profile(self, node: ResolvedStep) -> None:
        if node.children:
            self.ctx.add_warning(
                step_id=node.node_id,
                message=f"RunProfile step '{node.name}' matches a sequence; its steps are ignored.",
            )

        profile = node.effective_profile
        try:
            status = self.engine.invoke_run_profile(profile, step_name=node.name)
        except ExternalEngineError as e:
            self._record(ProfileInvocation(node.node_id, node.name, profile, None, failed=True))
            self.ctx.add_diagnostic(
                external_engine_error(profile=profile, node_id=node.node_id, exc_message=str(e)),
                step_id=node.node_id,
                source=__name__,
            )
            if self.manifest is not None:
                mf.add_event(
                    self.manifest,
                    event_type="profile_failed",
                    ts=self.clock(),
                    step_id=node.node_id,
                    payload={"profile": profile, "error": str(e)},
                )
            return

        self._record(ProfileInvocation(node.node_id, node.name, profile, status))
        self.ctx.log(
            level="INFO",
            message=f"Run profile '{profile}' on '{node.name}' finished. Status: {status}",
            step_id=node.node_id,
            source=__name__,
        )
        if self.manifest is not None:
            mf.add_event(
                self.manifest,
                event_type="profile_invoked",
                ts=self.clock(),
                step_id=node.node_id,
                payload={"profile": profile, "status": status},
            )

    def _delay(self, node: ResolvedStep) -> None:
        seconds = node.definition.seconds or 0
        self.ctx.log(
            level="INFO",
            message=f"Delay '{node.name}': sleeping {seconds} second(s).",
            step_id=node.node_id,
            source=__name__,
        )
        if seconds > 0:
            self.sleep(seconds)

    def _linear_sequence(self, node: ResolvedStep) -> None:
        self._run_in_order(node.children)

    def _parallel_sequence(self, node: ResolvedStep) -> None:
        children = list(node.children)
        if not children:
            return

        stagger = self.settings.delay_in_parallel_sequence
        futures: List[Future] = []

        # um worker por filho: apenas o escalonamento controla as partidas
        with ThreadPoolExecutor(max_workers=len(children), thread_name_prefix=f"syncflow-{node.node_id}") as pool:
            for index, child in enumerate(children):
                if index > 0 and stagger > 0:
                    self.sleep(stagger)
                futures.append(pool.submit(self.execute_step, child))

            # join: todos os filhos terminam antes de propagar um erro
            errors = [f.exception() for f in futures]

        for error in errors:
            if error is not None:
                raise error

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _run_in_order(self, steps: Sequence[ResolvedStep]) -> None:
        pause = self.settings.delay_in_linear_sequence
        for index, step in enumerate(steps):
            if index > 0 and pause > 0:
                self.sleep(pause)
            self.execute_step(step)

    def _record(self, invocation: ProfileInvocation) -> None:
        with self._lock:
            self.invocations.append(invocation)
