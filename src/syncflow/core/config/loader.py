# src/syncflow/core/config/loader.py
"""
Loader canônico do documento de configuração do SyncFlow.

Este módulo é responsável por ler, validar estruturalmente e converter o
documento de configuração em `SchedulerConfig` (parâmetros globais,
`SequenceTable` e `RunConfigurationTable`).

Formatos suportados (v1):
    - XML (.xml), formato histórico do scheduler:

        <SchedulerConfig>
          <ClearRunHistory>true</ClearRunHistory>
          <KeepHistory Days="10" />
          <DelayInParallelSequence Seconds="5" />
          <DelayInLinearSequence Seconds="0" />
          <OnDemandSchedule>Delta</OnDemandSchedule>
          <Sequence Name="Imports">
            <Step Type="RunProfile" Action="Full Import">AD</Step>
          </Sequence>
          <RunConfiguration Name="Nightly" Profile="Delta Import">
            <Step Type="LinearSequence">Imports</Step>
          </RunConfiguration>
        </SchedulerConfig>

    - YAML (.yaml, .yml) e JSON (.json), com a mesma estrutura em
      snake_case (`sequences`, `run_configurations`, `steps`, ...).

Política de resolução:
    - O documento base é obrigatório
    - Um documento local opcional é aplicado via `deep_merge`
    - Valores malformados são erro fatal (nunca default silencioso)

Limites explícitos:
    - Não resolve referências entre Sequences (responsabilidade do Resolver)
    - Não executa runs
    - Não recarrega a configuração em runtime
"""

from __future__ import annotations

import json
import logging
import uuid
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml  # PyYAML

from syncflow.core.pipeline.registry import RunConfigurationTable, SequenceTable
from syncflow.core.pipeline.types import RunConfiguration, Sequence, StepDefinition, StepType

from .errors import (
    ConfigFileNotFoundError,
    InvalidConfigRootTypeError,
    InvalidSettingValueError,
    InvalidStepDefinitionError,
    UnsupportedConfigFormatError,
)
from .merge import deep_merge
from .settings import SchedulerConfig, SchedulerSettings, parse_bool, parse_int

logger = logging.getLogger(__name__)

_SETTING_KEYS = (
    "clear_run_history",
    "keep_history_days",
    "delay_in_parallel_sequence",
    "delay_in_linear_sequence",
    "on_demand_schedule",
)
_KNOWN_KEYS = set(_SETTING_KEYS) | {"sequences", "run_configurations"}


# ---------------------------------------------------------------------
# Leitura de arquivos
# ---------------------------------------------------------------------

def _element_text(element: ET.Element) -> str:
    return "".join(element.itertext()).strip()


def _xml_step(element: ET.Element) -> Dict[str, Any]:
    step: Dict[str, Any] = {"name": _element_text(element), "type": element.get("Type")}
    if element.get("Action") is not None:
        step["action"] = element.get("Action")
    if element.get("Seconds") is not None:
        step["seconds"] = element.get("Seconds")
    return step


def _xml_to_document(root: ET.Element) -> Dict[str, Any]:
    """Normaliza o XML histórico para a mesma estrutura de YAML/JSON."""
    doc: Dict[str, Any] = {}

    clear = root.find("ClearRunHistory")
    if clear is not None:
        doc["clear_run_history"] = _element_text(clear)

    keep = root.find("KeepHistory")
    if keep is not None and keep.get("Days") is not None:
        doc["keep_history_days"] = keep.get("Days")

    for tag, key in (
        ("DelayInParallelSequence", "delay_in_parallel_sequence"),
        ("DelayInLinearSequence", "delay_in_linear_sequence"),
    ):
        delay = root.find(tag)
        if delay is not None and delay.get("Seconds") is not None:
            doc[key] = delay.get("Seconds")

    on_demand = root.find("OnDemandSchedule")
    if on_demand is not None:
        doc["on_demand_schedule"] = _element_text(on_demand)

    sequences = root.findall("Sequence")
    if sequences:
        doc["sequences"] = [
            {"name": seq.get("Name"), "steps": [_xml_step(s) for s in seq.findall("Step")]}
            for seq in sequences
        ]

    run_configs = root.findall("RunConfiguration")
    if run_configs:
        doc["run_configurations"] = []
        for rc in run_configs:
            entry: Dict[str, Any] = {"steps": [_xml_step(s) for s in rc.findall("Step")]}
            if rc.get("Name") is not None:
                entry["name"] = rc.get("Name")
            if rc.get("Profile") is not None:
                entry["profile"] = rc.get("Profile")
            doc["run_configurations"].append(entry)

    return doc


def load_document(path: Path) -> Dict[str, Any]:
    """
    Carrega um documento de configuração e valida sua estrutura básica.

    Args:
        path (Path): Caminho para o documento (.xml, .yaml, .yml, .json).

    Returns:
        Dict[str, Any]: Documento normalizado como dicionário.

    Raises:
        ConfigFileNotFoundError: Se o arquivo não existir.
        UnsupportedConfigFormatError: Se o formato não for suportado.
        InvalidConfigRootTypeError: Se o conteúdo raiz não for um mapa
            (ou se o XML não puder ser lido).
    """
    if not path.exists():
        raise ConfigFileNotFoundError(f"Arquivo de configuração não encontrado: {path}")

    suffix = path.suffix.lower()

    if suffix == ".xml":
        try:
            root = ET.parse(str(path)).getroot()
        except ET.ParseError as e:
            raise InvalidConfigRootTypeError(f"XML inválido em {path}: {e}") from e
        return _xml_to_document(root)

    if suffix in {".yaml", ".yml"}:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)

    elif suffix == ".json":
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)

    else:
        raise UnsupportedConfigFormatError(f"Formato não suportado: {path.suffix}")

    if data is None:
        data = {}

    if not isinstance(data, dict):
        raise InvalidConfigRootTypeError(
            f"Config root deve ser dict, recebido: {type(data).__name__}"
        )

    return data


# ---------------------------------------------------------------------
# Construção do modelo
# ---------------------------------------------------------------------

def _as_list(value: Any, *, where: str) -> List[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise InvalidStepDefinitionError(f"{where} deve ser uma lista, recebido: {type(value).__name__}")
    return value


def build_step(raw: Any, *, where: str) -> StepDefinition:
    """
    Constrói uma StepDefinition a partir de uma declaração do documento.

    Raises:
        InvalidStepTypeError: Se `type` estiver ausente ou não for reconhecido.
        InvalidStepDefinitionError: Se o nome estiver ausente, ou `seconds`
            for inválido / ausente em um Delay.
    """
    if not isinstance(raw, dict):
        raise InvalidStepDefinitionError(f"Step em {where} deve ser um mapa, recebido: {type(raw).__name__}")

    name = raw.get("name")
    if not isinstance(name, str) or not name.strip():
        raise InvalidStepDefinitionError(f"Step em {where} sem nome.")
    name = name.strip()

    step_type = StepType.parse(raw.get("type"))

    action = raw.get("action")
    if action is not None:
        action = str(action).strip() or None

    seconds: Optional[int] = None
    if raw.get("seconds") is not None:
        try:
            seconds = parse_int(raw["seconds"], key="Seconds")
        except InvalidSettingValueError as e:
            raise InvalidStepDefinitionError(f"Step '{name}' em {where}: {e}") from e
        if seconds < 0:
            raise InvalidStepDefinitionError(f"Step '{name}' em {where}: Seconds must not be negative.")

    if step_type is StepType.DELAY and seconds is None:
        raise InvalidStepDefinitionError(f"Delay step '{name}' em {where} requires Seconds.")

    return StepDefinition(name=name, type=step_type, action=action, seconds=seconds)


def _build_sequence(raw: Any) -> Sequence:
    if not isinstance(raw, dict):
        raise InvalidStepDefinitionError(f"Sequence deve ser um mapa, recebido: {type(raw).__name__}")
    name = raw.get("name")
    if not isinstance(name, str) or not name.strip():
        raise InvalidStepDefinitionError("Sequence sem nome.")
    name = name.strip()
    where = f"Sequence '{name}'"
    steps = tuple(build_step(s, where=where) for s in _as_list(raw.get("steps"), where=where))
    return Sequence(name=name, steps=steps)


def _build_run_configuration(raw: Any) -> RunConfiguration:
    if not isinstance(raw, dict):
        raise InvalidStepDefinitionError(
            f"RunConfiguration deve ser um mapa, recebido: {type(raw).__name__}"
        )
    name = str(raw.get("name") or "").strip() or str(uuid.uuid4())
    profile = str(raw.get("profile") or "").strip() or str(uuid.uuid4())
    where = f"RunConfiguration '{name}'"
    steps = tuple(build_step(s, where=where) for s in _as_list(raw.get("steps"), where=where))
    return RunConfiguration(name=name, default_run_profile=profile, root_steps=steps)


def build_settings(document: Dict[str, Any]) -> SchedulerSettings:
    kwargs: Dict[str, Any] = {}
    if document.get("clear_run_history") is not None:
        kwargs["clear_run_history"] = parse_bool(document["clear_run_history"], key="ClearRunHistory")
    if document.get("keep_history_days") is not None:
        kwargs["keep_history_days"] = parse_int(document["keep_history_days"], key="KeepHistory")
    if document.get("delay_in_parallel_sequence") is not None:
        kwargs["delay_in_parallel_sequence"] = parse_int(
            document["delay_in_parallel_sequence"], key="DelayInParallelSequence"
        )
    if document.get("delay_in_linear_sequence") is not None:
        kwargs["delay_in_linear_sequence"] = parse_int(
            document["delay_in_linear_sequence"], key="DelayInLinearSequence"
        )
    on_demand = document.get("on_demand_schedule")
    if on_demand is not None and str(on_demand).strip():
        kwargs["on_demand_schedule"] = str(on_demand).strip()
    return SchedulerSettings(**kwargs)


def build_scheduler_config(document: Dict[str, Any]) -> SchedulerConfig:
    """
    Converte um documento normalizado em `SchedulerConfig`.

    Raises:
        ConfigurationError: Em qualquer valor malformado (ver `errors.py`).
    """
    unknown = sorted(set(document) - _KNOWN_KEYS)
    if unknown:
        logger.warning("Ignoring unknown configuration keys: %s", unknown)

    settings = build_settings(document)
    sequences = SequenceTable(
        _build_sequence(s) for s in _as_list(document.get("sequences"), where="sequences")
    )
    run_configurations = RunConfigurationTable(
        _build_run_configuration(rc)
        for rc in _as_list(document.get("run_configurations"), where="run_configurations")
    )
    return SchedulerConfig(settings=settings, sequences=sequences, run_configurations=run_configurations)


def load_scheduler_config(
    path: str | Path,
    local_path: Optional[str | Path] = None,
) -> SchedulerConfig:
    """
    Carrega e resolve a configuração do scheduler.

    Args:
        path: Documento base (obrigatório).
        local_path: Override local opcional; ignorado se não existir.

    Returns:
        SchedulerConfig: parâmetros globais e tabelas de lookup.

    Raises:
        ConfigurationError: Documento ausente, formato não suportado,
            conflito de merge ou valor malformado.
    """
    base_path = Path(path)
    document = load_document(base_path)

    if local_path is not None:
        local_file = Path(local_path)
        if local_file.exists():
            document = deep_merge(document, load_document(local_file))

    config = build_scheduler_config(document)
    logger.info(
        "Loaded %d sequence(s) and %d run configuration(s) from %s",
        len(config.sequences),
        len(config.run_configurations),
        base_path,
    )
    return config
