"""Tests for YAML + environment configuration loading."""
from daykanban.config import Config


def test_defaults_when_file_missing(tmp_path, monkeypatch):
    monkeypatch.delenv("DAYKANBAN_HOST", raising=False)
    monkeypatch.delenv("DAYKANBAN_PORT", raising=False)
    cfg = Config.load(str(tmp_path / "nope.yaml"))
    assert cfg == Config()
    assert cfg.server_port == 3000
    assert cfg.done_column_id == "done"


def test_yaml_overrides_and_unknown_keys(tmp_path, monkeypatch):
    monkeypatch.delenv("DAYKANBAN_PORT", raising=False)
    path = tmp_path / "config.yaml"
    path.write_text(
        "done_column_id: finished\n"
        "time_format: 24h\n"
        "server_port: 4000\n"
        "not_a_setting: 1\n"
    )
    cfg = Config.load(str(path))
    assert cfg.done_column_id == "finished"
    assert cfg.time_format == "24h"
    assert cfg.server_port == 4000
    assert not hasattr(cfg, "not_a_setting")


def test_bad_yaml_falls_back_to_defaults(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("done_column_id: [unclosed\n")
    assert Config.load(str(path)).done_column_id == "done"


def test_non_mapping_yaml_falls_back(tmp_path, monkeypatch):
    monkeypatch.delenv("DAYKANBAN_HOST", raising=False)
    monkeypatch.delenv("DAYKANBAN_PORT", raising=False)
    path = tmp_path / "config.yaml"
    path.write_text("- just\n- a list\n")
    assert Config.load(str(path)) == Config()


def test_config_path_from_env(tmp_path, monkeypatch):
    path = tmp_path / "alt.yaml"
    path.write_text("in_progress_column_id: wip\n")
    monkeypatch.setenv("DAYKANBAN_CONFIG", str(path))
    assert Config.load().in_progress_column_id == "wip"


def test_env_host_and_port(tmp_path, monkeypatch):
    monkeypatch.setenv("DAYKANBAN_HOST", "0.0.0.0")
    monkeypatch.setenv("DAYKANBAN_PORT", "3001")
    cfg = Config.load(str(tmp_path / "nope.yaml"))
    assert cfg.server_host == "0.0.0.0"
    assert cfg.server_port == 3001


def test_env_bad_port_ignored(tmp_path, monkeypatch):
    monkeypatch.setenv("DAYKANBAN_PORT", "eighty")
    assert Config.load(str(tmp_path / "nope.yaml")).server_port == 3000


def test_unknown_time_format_reset(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("time_format: 36h\n")
    assert Config.load(str(path)).time_format == "12h"


def test_public_dict_hides_server_settings():
    data = Config().public_dict()
    assert "server_port" not in data
    assert "log_level" not in data
    assert data["date_format"] == "%m/%d/%Y"
