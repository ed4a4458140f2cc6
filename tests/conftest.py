"""
Fixtures compartilhados para testes do SyncFlow.

Este módulo define fixtures reutilizáveis que fornecem:
- documentos de configuração mínimos (YAML e XML)
- um serviço de sincronização falso que registra chamadas (RecordingEngine)
- um `sleep` falso que registra pausas sem bloquear
- um RunContext determinístico
- um helper para construir StepDefinitions

O objetivo destas fixtures é permitir testes do core (config, pipeline,
engine e traceability) sem depender de um serviço de sincronização real
e sem pausas de relógio de parede.

Decisões arquiteturais:
    - RecordingEngine e FakeSleep escrevem na mesma timeline, permitindo
      verificar ordem relativa entre pausas e chamadas
    - Escritas na timeline são protegidas por lock (ParallelSequence)
    - Imports do core são realizados de forma lazy para melhorar a
      clareza de erros durante falhas

Limites explícitos:
    - Não substituir testes de integração com um serviço real
    - Não conter lógica condicional complexa
"""

import threading
import time
from datetime import datetime, timezone

import pytest


# =====================================================
# Documentos de configuração
# =====================================================

@pytest.fixture
def sample_config_yaml() -> str:
    """
    Documento YAML semelhante ao uso real: duas Sequences reutilizáveis,
    uma RunConfiguration noturna e uma on-demand.

    Returns:
        str: Conteúdo YAML do documento de configuração.
    """
    return """\
clear_run_history: true
keep_history_days: 7
delay_in_parallel_sequence: 2
delay_in_linear_sequence: 0
on_demand_schedule: Delta
sequences:
  - name: Imports
    steps:
      - {name: AD, type: RunProfile, action: Full Import}
      - {name: HR, type: RunProfile}
  - name: Exports
    steps:
      - {name: LDAP, type: RunProfile, action: Export}
      - {name: Pause, type: Delay, seconds: 30}
run_configurations:
  - name: Nightly
    profile: Delta Import
    steps:
      - {name: Imports, type: ParallelSequence}
      - {name: Exports, type: LinearSequence}
  - name: Delta
    profile: Delta Sync
    steps:
      - {name: Imports, type: LinearSequence}
"""


@pytest.fixture
def sample_config_xml() -> str:
    """
    Documento XML no formato histórico do scheduler.

    O nome de cada Step é o texto do elemento; `Type`, `Action` e
    `Seconds` são atributos.

    Returns:
        str: Conteúdo XML do documento de configuração.
    """
    return """\
<?xml version="1.0" encoding="utf-8"?>
<SchedulerConfig>
  <ClearRunHistory>True</ClearRunHistory>
  <KeepHistory Days="10" />
  <DelayInParallelSequence Seconds="5" />
  <DelayInLinearSequence Seconds="1" />
  <OnDemandSchedule>X</OnDemandSchedule>
  <Sequence Name="Imports">
    <Step Type="RunProfile" Action="Full Import">AD</Step>
    <Step Type="Delay" Seconds="15">Pause</Step>
  </Sequence>
  <RunConfiguration Name="X" Profile="Y">
    <Step Type="RunProfile">leaf</Step>
    <Step Type="LinearSequence">Imports</Step>
  </RunConfiguration>
</SchedulerConfig>
"""


# =====================================================
# Colaboradores falsos
# =====================================================

class Timeline:
    """Registro ordenado e thread-safe de eventos observados nos testes."""

    def __init__(self):
        self._lock = threading.Lock()
        self.entries = []

    def add(self, entry):
        with self._lock:
            self.entries.append(entry)

    def index(self, entry):
        with self._lock:
            return self.entries.index(entry)


class RecordingEngine:
    """
    Serviço de sincronização falso.

    - registra cada `invoke_run_profile` como ("start", step_name, profile)
      e ("end", step_name, profile) na timeline
    - `fail` contém nomes de Steps que levantam ExternalEngineError
    - `crash` contém nomes de Steps que levantam RuntimeError (erro de programação)
    - `busy` mapeia nomes de Steps para uma duração real (segundos) da chamada
    """

    def __init__(self, timeline=None, *, fail=(), crash=(), busy=None, history_error=False):
        self.timeline = timeline or Timeline()
        self.fail = set(fail)
        self.crash = set(crash)
        self.busy = dict(busy or {})
        self.history_error = history_error
        self.calls = []
        self.started_at = {}
        self.history_cutoffs = []
        self._lock = threading.Lock()

    def invoke_run_profile(self, profile_name, *, step_name):
        from syncflow.core.exceptions import ExternalEngineError

        with self._lock:
            self.calls.append((step_name, profile_name))
            self.started_at[step_name] = time.monotonic()
        self.timeline.add(("start", step_name, profile_name))
        if step_name in self.busy:
            time.sleep(self.busy[step_name])
        if step_name in self.crash:
            raise RuntimeError(f"malformed call for {step_name}")
        if step_name in self.fail:
            self.timeline.add(("end", step_name, profile_name))
            raise ExternalEngineError(f"{step_name} returned stopped-server")
        self.timeline.add(("end", step_name, profile_name))
        return "success"

    def clear_history(self, cutoff_utc):
        from syncflow.core.exceptions import ExternalEngineError

        self.history_cutoffs.append(cutoff_utc)
        if self.history_error:
            raise ExternalEngineError("access denied")
        return "success"

    @property
    def step_names(self):
        return [name for name, _ in self.calls]


class FakeSleep:
    """`sleep` falso: registra ("sleep", seconds) na timeline e retorna imediatamente."""

    def __init__(self, timeline):
        self.timeline = timeline
        self.calls = []

    def __call__(self, seconds):
        self.calls.append(seconds)
        self.timeline.add(("sleep", seconds))


@pytest.fixture
def timeline():
    return Timeline()


@pytest.fixture
def engine(timeline):
    return RecordingEngine(timeline)


@pytest.fixture
def fake_sleep(timeline):
    return FakeSleep(timeline)


@pytest.fixture
def make_engine(timeline):
    """Factory de RecordingEngine com falhas/duração configuráveis."""

    def _make(**kwargs):
        return RecordingEngine(timeline, **kwargs)

    return _make


# =====================================================
# Core fixtures
# =====================================================

@pytest.fixture
def fixed_clock():
    """Relógio fixo em UTC (2026-01-16 12:00:00)."""
    now = datetime(2026, 1, 16, 12, 0, 0, tzinfo=timezone.utc)
    return lambda: now


@pytest.fixture
def dummy_ctx():
    """
    RunContext determinístico para testes de resolver e executor.

    `run_id` e `created_at` são fixos; o contexto inicia sem eventos.
    """
    from syncflow.core.pipeline.context import RunContext

    return RunContext(
        run_id="run-test-001",
        configuration="Nightly",
        created_at=datetime(2026, 1, 16, 0, 0, 0, tzinfo=timezone.utc),
    )


@pytest.fixture
def make_step():
    """Helper para construir StepDefinitions a partir da tag textual do tipo."""
    from syncflow.core.pipeline.types import StepDefinition, StepType

    def _make(name, step_type="RunProfile", action=None, seconds=None):
        return StepDefinition(name=name, type=StepType.parse(step_type), action=action, seconds=seconds)

    return _make


@pytest.fixture
def settings_factory():
    from syncflow.core.config.settings import SchedulerSettings

    def _make(**kwargs):
        return SchedulerSettings(**kwargs)

    return _make
