# tests/core/config/test_loader.py
"""
Testes do carregador de configuração (load_scheduler_config).

Este módulo valida o comportamento do loader responsável por:
- ler documentos XML (formato histórico), YAML e JSON
- aplicar um override local opcional
- construir Sequences, RunConfigurations e parâmetros globais
- rejeitar formatos e valores inválidos

Decisões arquiteturais:
    - Erros estruturais e valores malformados são falhas fatais
    - O override local é opcional; o documento base é obrigatório
    - XML e YAML produzem o mesmo modelo

Limites explícitos:
    - Não valida resolução de referências (ver tests/core/engine)
    - Não executa runs
"""

import logging
from pathlib import Path

import pytest

try:
    from syncflow.core.config.loader import build_step, load_document, load_scheduler_config
    from syncflow.core.config.errors import (
        ConfigFileNotFoundError,
        InvalidConfigRootTypeError,
        InvalidSettingValueError,
        InvalidStepDefinitionError,
        InvalidStepTypeError,
        UnsupportedConfigFormatError,
    )
    from syncflow.core.pipeline.types import StepType
except Exception as e:  # noqa: BLE001
    load_scheduler_config = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    """Falha explicitamente se o loader ou suas exceções tipadas não puderem ser importados."""
    if _IMPORT_ERR is not None:
        pytest.fail(
            "Missing loader/errors modules. Implement:\n"
            "- src/syncflow/core/config/loader.py (load_scheduler_config)\n"
            "- src/syncflow/core/config/errors.py (typed exceptions)\n"
            f"Import error: {_IMPORT_ERR}"
        )


def _write(tmp_path: Path, name: str, content: str) -> Path:
    p = tmp_path / name
    p.write_text(content, encoding="utf-8")
    return p


def test_missing_document_raises(tmp_path: Path):
    """O documento base é obrigatório: ausência é erro fatal."""
    _require_imports()
    with pytest.raises(ConfigFileNotFoundError):
        load_scheduler_config(tmp_path / "scheduler.yaml")


def test_unsupported_extension_raises(tmp_path: Path):
    _require_imports()
    p = _write(tmp_path, "scheduler.ini", "[x]\n")
    with pytest.raises(UnsupportedConfigFormatError):
        load_scheduler_config(p)


def test_non_mapping_root_raises(tmp_path: Path):
    _require_imports()
    p = _write(tmp_path, "scheduler.yaml", "- a\n- b\n")
    with pytest.raises(InvalidConfigRootTypeError):
        load_scheduler_config(p)


def test_malformed_xml_raises(tmp_path: Path):
    _require_imports()
    p = _write(tmp_path, "scheduler.xml", "<SchedulerConfig><Sequence></SchedulerConfig>")
    with pytest.raises(InvalidConfigRootTypeError):
        load_scheduler_config(p)


def test_empty_yaml_yields_defaults(tmp_path: Path):
    _require_imports()
    p = _write(tmp_path, "scheduler.yaml", "")
    config = load_scheduler_config(p)
    assert len(config.sequences) == 0
    assert len(config.run_configurations) == 0
    assert config.settings.keep_history_days == -1
    assert config.settings.clear_run_history is False


def test_load_yaml_document(tmp_path: Path, sample_config_yaml):
    """
    Verifica o carregamento completo de um documento YAML.

    Invariantes:
        - parâmetros globais são convertidos para seus tipos
        - Sequences e RunConfigurations preservam a ordem de declaração
        - `action` ausente permanece None (herdado na resolução)
    """
    _require_imports()
    config = load_scheduler_config(_write(tmp_path, "scheduler.yaml", sample_config_yaml))

    s = config.settings
    assert s.clear_run_history is True
    assert s.keep_history_days == 7
    assert s.delay_in_parallel_sequence == 2
    assert s.delay_in_linear_sequence == 0
    assert s.on_demand_schedule == "Delta"

    assert config.sequences.names() == ["Imports", "Exports"]
    imports = config.sequences.get("imports")
    assert [d.name for d in imports.steps] == ["AD", "HR"]
    assert imports.steps[0].action == "Full Import"
    assert imports.steps[1].action is None

    pause = config.sequences.get("Exports").steps[1]
    assert pause.type is StepType.DELAY
    assert pause.seconds == 30

    nightly = config.run_configurations.get("Nightly")
    assert nightly.default_run_profile == "Delta Import"
    assert [d.type for d in nightly.root_steps] == [StepType.PARALLEL_SEQUENCE, StepType.LINEAR_SEQUENCE]


def test_load_xml_document(tmp_path: Path, sample_config_xml):
    """O formato XML histórico: nome do Step no texto, demais campos como atributos."""
    _require_imports()
    config = load_scheduler_config(_write(tmp_path, "scheduler.xml", sample_config_xml))

    s = config.settings
    assert s.clear_run_history is True
    assert s.keep_history_days == 10
    assert s.delay_in_parallel_sequence == 5
    assert s.delay_in_linear_sequence == 1
    assert s.on_demand_schedule == "X"

    rc = config.run_configurations.get("X")
    assert rc.default_run_profile == "Y"
    assert [d.name for d in rc.root_steps] == ["leaf", "Imports"]
    assert rc.root_steps[0].type is StepType.RUN_PROFILE

    imports = config.sequences.get("Imports")
    assert imports.steps[0].action == "Full Import"
    assert imports.steps[1].seconds == 15


def test_load_json_document(tmp_path: Path):
    _require_imports()
    content = (
        '{"keep_history_days": "3", "run_configurations": '
        '[{"name": "Only", "profile": "P", "steps": [{"name": "A", "type": "runprofile"}]}]}'
    )
    config = load_scheduler_config(_write(tmp_path, "scheduler.json", content))
    assert config.settings.keep_history_days == 3
    assert config.run_configurations.get("only").root_steps[0].type is StepType.RUN_PROFILE


def test_missing_name_and_profile_default_to_unique_ids(tmp_path: Path):
    _require_imports()
    content = "run_configurations:\n  - steps: []\n  - steps: []\n"
    config = load_scheduler_config(_write(tmp_path, "scheduler.yaml", content))
    rcs = list(config.run_configurations)
    assert len(rcs) == 2
    assert rcs[0].name != rcs[1].name
    assert rcs[0].default_run_profile
    assert rcs[0].default_run_profile != rcs[1].default_run_profile


def test_local_override_is_merged(tmp_path: Path, sample_config_yaml, caplog):
    """O override local substitui escalares e listas inteiras do documento base."""
    _require_imports()
    base = _write(tmp_path, "scheduler.yaml", sample_config_yaml)
    local = _write(
        tmp_path,
        "scheduler.local.yaml",
        "keep_history_days: 30\non_demand_schedule: Nightly\n",
    )
    with caplog.at_level(logging.INFO, logger="syncflow"):
        config = load_scheduler_config(base, local)

    assert config.settings.keep_history_days == 30
    assert config.settings.on_demand_schedule == "Nightly"
    # não sobrescrito
    assert config.settings.delay_in_parallel_sequence == 2
    assert "Nightly" in config.run_configurations


def test_missing_local_override_is_ignored(tmp_path: Path, sample_config_yaml):
    _require_imports()
    base = _write(tmp_path, "scheduler.yaml", sample_config_yaml)
    config = load_scheduler_config(base, tmp_path / "missing.local.yaml")
    assert config.settings.keep_history_days == 7


def test_invalid_setting_value_raises(tmp_path: Path):
    _require_imports()
    p = _write(tmp_path, "scheduler.yaml", "keep_history_days: often\n")
    with pytest.raises(InvalidSettingValueError) as exc:
        load_scheduler_config(p)
    assert "KeepHistory" in str(exc.value)


def test_invalid_boolean_in_xml_raises(tmp_path: Path):
    _require_imports()
    p = _write(tmp_path, "scheduler.xml", "<SchedulerConfig><ClearRunHistory>maybe</ClearRunHistory></SchedulerConfig>")
    with pytest.raises(InvalidSettingValueError):
        load_scheduler_config(p)


def test_unknown_step_type_raises(tmp_path: Path):
    _require_imports()
    content = "sequences:\n  - name: S\n    steps:\n      - {name: A, type: Loop}\n"
    with pytest.raises(InvalidStepTypeError) as exc:
        load_scheduler_config(_write(tmp_path, "scheduler.yaml", content))
    assert "Loop" in str(exc.value)


def test_missing_step_type_raises(tmp_path: Path):
    _require_imports()
    p = _write(
        tmp_path,
        "scheduler.xml",
        '<SchedulerConfig><Sequence Name="S"><Step>A</Step></Sequence></SchedulerConfig>',
    )
    with pytest.raises(InvalidStepTypeError):
        load_scheduler_config(p)


def test_build_step_validations():
    _require_imports()
    with pytest.raises(InvalidStepDefinitionError):
        build_step({"type": "RunProfile"}, where="test")
    with pytest.raises(InvalidStepDefinitionError):
        build_step({"name": "Pause", "type": "Delay"}, where="test")
    with pytest.raises(InvalidStepDefinitionError):
        build_step({"name": "Pause", "type": "Delay", "seconds": "soon"}, where="test")
    with pytest.raises(InvalidStepDefinitionError):
        build_step({"name": "Pause", "type": "Delay", "seconds": -1}, where="test")

    step = build_step({"name": " AD ", "type": "RunProfile", "action": ""}, where="test")
    assert step.name == "AD"
    assert step.action is None


def test_load_document_normalizes_xml(tmp_path: Path, sample_config_xml):
    _require_imports()
    doc = load_document(_write(tmp_path, "scheduler.xml", sample_config_xml))
    assert doc["keep_history_days"] == "10"
    assert doc["run_configurations"][0]["steps"][0] == {"name": "leaf", "type": "RunProfile"}
