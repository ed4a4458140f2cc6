# tests/core/config/test_settings.py
"""
Testes das conversões estritas e dos parâmetros globais do scheduler.

Invariantes:
    - valores não conversíveis geram InvalidSettingValueError nomeando a chave
    - nenhum default silencioso é aplicado a um valor malformado
"""

import pytest

try:
    from syncflow.core.config.errors import ConfigurationError, InvalidSettingValueError
    from syncflow.core.config.settings import SchedulerSettings, parse_bool, parse_int
except Exception as e:  # noqa: BLE001
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(f"Missing src/syncflow/core/config/settings.py. Import error: {_IMPORT_ERR}")


@pytest.mark.parametrize("raw", [True, "true", "True", " YES ", "1", "on"])
def test_parse_bool_true(raw):
    _require_imports()
    assert parse_bool(raw, key="ClearRunHistory") is True


@pytest.mark.parametrize("raw", [False, "false", "FALSE", "no", "0", "off"])
def test_parse_bool_false(raw):
    _require_imports()
    assert parse_bool(raw, key="ClearRunHistory") is False


def test_parse_bool_rejects_garbage():
    _require_imports()
    with pytest.raises(InvalidSettingValueError) as exc:
        parse_bool("maybe", key="ClearRunHistory")
    assert "ClearRunHistory" in str(exc.value)
    assert isinstance(exc.value, ConfigurationError)


def test_parse_int_accepts_numbers_and_numeric_text():
    _require_imports()
    assert parse_int(5, key="Seconds") == 5
    assert parse_int(" 12 ", key="Seconds") == 12
    assert parse_int("-1", key="Days") == -1


@pytest.mark.parametrize("raw", ["ten", "1.5", "", None, True])
def test_parse_int_rejects_invalid(raw):
    _require_imports()
    with pytest.raises(InvalidSettingValueError):
        parse_int(raw, key="Seconds")


def test_settings_defaults_disable_optional_behaviour():
    """Sem configuração: sem limpeza de histórico, sem escalonamento e sem pausa linear."""
    _require_imports()
    s = SchedulerSettings()
    assert s.clear_run_history is False
    assert s.keep_history_days == -1
    assert s.delay_in_parallel_sequence == -1
    assert s.delay_in_linear_sequence == 0
    assert s.on_demand_schedule is None
    assert s.history_clearing_enabled is False


def test_history_clearing_requires_flag_and_positive_days():
    _require_imports()
    assert SchedulerSettings(clear_run_history=True, keep_history_days=5).history_clearing_enabled
    assert not SchedulerSettings(clear_run_history=True, keep_history_days=0).history_clearing_enabled
    assert not SchedulerSettings(clear_run_history=False, keep_history_days=5).history_clearing_enabled
