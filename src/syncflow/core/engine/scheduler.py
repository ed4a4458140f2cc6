# src/syncflow/core/engine/scheduler.py
"""
Scheduler — orquestrador de runs do SyncFlow.

O Scheduler mantém a configuração carregada (parâmetros globais e
tabelas de lookup) e expõe os únicos pontos de entrada de que uma camada
de gatilhos (timer, serviço, CLI) precisa:

    - run(name)       → executa a RunConfiguration `name`
    - run_on_demand() → executa a RunConfiguration configurada como on-demand
    - preview(name)   → plano de execução sem efeitos colaterais

Fluxo de `run(name)`:
    1. lookup case-insensitive na RunConfigurationTable
       (ausente → diagnóstico, nenhuma chamada externa, retorno None)
    2. resolução com estado novo (sem cache entre runs)
    3. execução da árvore (root steps em sequência)
    4. limpeza do histórico do serviço, se habilitada
       (`clear_run_history` e `keep_history_days > 0`)

Invariantes:
    - Cada run possui seu próprio RunContext, Manifest e árvore resolvida
    - A configuração é somente leitura: runs concorrentes não se bloqueiam
    - Erros de resolução e do serviço externo não são levantados ao chamador
"""

from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable, Optional, Tuple

from syncflow.core.config.loader import load_scheduler_config
from syncflow.core.config.settings import SchedulerConfig
from syncflow.core.errors import (
    SchedulerErrorPayload,
    history_clear_error,
    run_configuration_not_found,
)
from syncflow.core.exceptions import ExternalEngineError, NotFoundError
from syncflow.core.pipeline.context import RunContext
from syncflow.core.traceability import manifest as mf

from .executor import Executor, ProfileInvocation
from .preview import render_plan
from .resolver import ResolutionResult, resolve_run_configuration
from .sync_engine import SyncEngine, format_history_cutoff

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class RunReport:
    """Resultado agregado de uma run (somente leitura)."""

    run_id: str
    configuration: str
    diagnostics: Tuple[SchedulerErrorPayload, ...]
    invocations: Tuple[ProfileInvocation, ...]
    history_cleared: bool
    manifest: mf.RunManifest

    @property
    def profiles_invoked(self) -> Tuple[str, ...]:
        return tuple(i.profile for i in self.invocations if not i.failed)

    @property
    def engine_failures(self) -> Tuple[ProfileInvocation, ...]:
        return tuple(i for i in self.invocations if i.failed)


class Scheduler:
    """Orquestrador canônico do SyncFlow (resolver + executor + histórico)."""

    def __init__(
        self,
        config: SchedulerConfig,
        engine: SyncEngine,
        *,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], datetime] = _utcnow,
        manifest_dir: Optional[str | Path] = None,
    ):
        self.config = config
        self.engine = engine
        self.sleep = sleep
        self.clock = clock
        self.manifest_dir = Path(manifest_dir) if manifest_dir is not None else None

    @classmethod
    def from_file(
        cls,
        path: str | Path,
        engine: SyncEngine,
        *,
        local_path: Optional[str | Path] = None,
        **kwargs,
    ) -> "Scheduler":
        """Carrega o documento de configuração e constrói o Scheduler."""
        return cls(load_scheduler_config(path, local_path), engine, **kwargs)

    @property
    def settings(self):
        return self.config.settings

    # ------------------------------------------------------------------
    # Resolução
    # ------------------------------------------------------------------
    def resolve(self, name: Optional[str], *, ctx: Optional[RunContext] = None) -> ResolutionResult:
        """
        Resolve a RunConfiguration `name` sem executá-la.

        Raises:
            NotFoundError: Se a RunConfiguration não existir.
        """
        run_configuration = self.config.run_configurations.get(name)
        return resolve_run_configuration(run_configuration, self.config.sequences, ctx=ctx)

    def preview(self, name: Optional[str]) -> Optional[str]:
        """Plano de execução em texto; None se a RunConfiguration não existir."""
        try:
            resolution = self.resolve(name)
        except NotFoundError:
            self._report_not_found(name)
            return None
        return render_plan(resolution.steps, title=f"Run configuration: {name}")

    # ------------------------------------------------------------------
    # Execução
    # ------------------------------------------------------------------
    def run(self, name: Optional[str]) -> Optional[RunReport]:
        run_configuration = self.config.run_configurations.lookup(name)
        if run_configuration is None:
            self._report_not_found(name)
            return None

        started = self.clock()
        run_id = f"{started.strftime('%Y%m%dT%H%M%S')}-{uuid.uuid4().hex[:8]}"
        ctx = RunContext(run_id=run_id, configuration=run_configuration.name, created_at=started)
        manifest = mf.create_manifest(run_id=run_id, configuration=run_configuration.name, started_at=started)
        mf.add_event(manifest, event_type="run_started", ts=started)
        ctx.log(
            level="INFO",
            message=f"Starting run configuration '{run_configuration.name}'.",
            source=__name__,
        )

        resolution = resolve_run_configuration(run_configuration, self.config.sequences, ctx=ctx)

        executor = Executor(
            self.engine,
            self.settings,
            ctx=ctx,
            manifest=manifest,
            sleep=self.sleep,
            clock=self.clock,
        )
        try:
            executor.execute(resolution.steps)
        except Exception as e:
            ctx.log(level="ERROR", message=f"Run aborted: {e!r}", source=__name__)
            mf.run_aborted(manifest, ts=self.clock(), error=repr(e))
            self._save_manifest(manifest)
            raise

        history_cleared = False
        if self.settings.clear_run_history:
            history_cleared = self._clear_history(ctx, manifest)

        mf.run_finished(manifest, ts=self.clock())
        ctx.log(
            level="INFO",
            message=(
                f"Finished run configuration '{run_configuration.name}': "
                f"{len(executor.invocations)} run profile call(s), {len(ctx.diagnostics)} diagnostic(s)."
            ),
            source=__name__,
        )

        self._save_manifest(manifest)

        return RunReport(
            run_id=run_id,
            configuration=run_configuration.name,
            diagnostics=tuple(ctx.diagnostics),
            invocations=tuple(executor.invocations),
            history_cleared=history_cleared,
            manifest=manifest,
        )

    def run_on_demand(self) -> Optional[RunReport]:
        return self.run(self.settings.on_demand_schedule)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _report_not_found(self, name: Optional[str]) -> SchedulerErrorPayload:
        payload = run_configuration_not_found(name=name, known=self.config.run_configurations.names())
        logger.error(
            "%s %s",
            payload.message,
            payload.hint,
            extra={"error_type": payload.type, "details": payload.details},
        )
        return payload

    def _save_manifest(self, manifest: mf.RunManifest) -> None:
        if self.manifest_dir is not None:
            mf.save_manifest(manifest, self.manifest_dir / f"{manifest.run['run_id']}.json")

    def _clear_history(self, ctx: RunContext, manifest: mf.RunManifest) -> bool:
        days = self.settings.keep_history_days
        if days <= 0:
            return False

        cutoff = self.clock() - timedelta(days=days)
        cutoff_text = format_history_cutoff(cutoff)
        ctx.log(
            level="INFO",
            message=f"Clear run history before {cutoff.astimezone().strftime('%Y-%m-%d %H:%M:%S')}",
            source=__name__,
        )
        try:
            status = self.engine.clear_history(cutoff)
        except ExternalEngineError as e:
            ctx.add_diagnostic(history_clear_error(cutoff=cutoff_text, exc_message=str(e)), source=__name__)
            return False

        ctx.log(level="INFO", message=f"Done clearing history. Status: {status}", source=__name__)
        mf.add_event(
            manifest,
            event_type="history_cleared",
            ts=self.clock(),
            payload={"cutoff": cutoff_text, "status": status},
        )
        return True
