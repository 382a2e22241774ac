import pytest

from rule_engine import ConfigError, EngineConfig
from rule_engine.config import CAP_ENV_VAR


def test_default_cap():
    assert EngineConfig().modifier_cap == 60


def test_from_env(monkeypatch):
    monkeypatch.setenv(CAP_ENV_VAR, "40")
    assert EngineConfig.from_env().modifier_cap == 40


def test_from_env_default(monkeypatch):
    monkeypatch.delenv(CAP_ENV_VAR, raising=False)
    assert EngineConfig.from_env().modifier_cap == 60


@pytest.mark.parametrize("raw", ["abc", "", "-5", "1.5"])
def test_from_env_invalid(monkeypatch, raw):
    monkeypatch.setenv(CAP_ENV_VAR, raw)
    with pytest.raises(ConfigError):
        EngineConfig.from_env()


@pytest.mark.parametrize("cap", [-1, True, 2.5, "60"])
def test_invalid_cap(cap):
    with pytest.raises(ConfigError):
        EngineConfig(modifier_cap=cap)


def test_config_error_is_value_error():
    assert issubclass(ConfigError, ValueError)
