import pytest

from tabreaper.config import CONFIG_ENV, ReaperConfig, load_config


def test_defaults_without_path(monkeypatch):
    monkeypatch.delenv(CONFIG_ENV, raising=False)
    config = load_config()
    assert config == ReaperConfig()
    assert config.alarm_period_minutes == 60
    assert config.state_path is None


def test_load_from_env(tmp_path, monkeypatch):
    path = tmp_path / "tabreaper.yaml"
    path.write_text("state_path: /tmp/state.json\nwarning_window_minutes: 30\n")
    monkeypatch.setenv(CONFIG_ENV, str(path))
    config = load_config()
    assert config.state_path == "/tmp/state.json"
    assert config.warning_window_minutes == 30
    assert config.alarm_name == "tabreaper-sweep"


def test_unknown_keys_rejected(tmp_path):
    path = tmp_path / "tabreaper.yaml"
    path.write_text("max_age: 3\n")
    with pytest.raises(ValueError):
        load_config(str(path))
