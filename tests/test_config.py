"""
Tests for YAML configuration loading.
"""
import pytest

from bonomen.config import DEFAULT_CONFIG, load_config


def test_defaults_without_file():
    cfg = load_config(None)
    assert cfg == DEFAULT_CONFIG
    assert cfg is not DEFAULT_CONFIG
    assert cfg["rules_file"] == "default_procs.txt"


def test_yaml_overrides(tmp_path):
    path = tmp_path / "cfg.yml"
    path.write_text("rules_file: /etc/bonomen/procs.txt\nmax_pids: 2048\nverbose: true\n")
    cfg = load_config(str(path))
    assert cfg["rules_file"] == "/etc/bonomen/procs.txt"
    assert cfg["max_pids"] == 2048
    assert cfg["verbose"] is True
    assert cfg["color"] is True


def test_unknown_keys_ignored(tmp_path, capsys):
    path = tmp_path / "cfg.yml"
    path.write_text("min_score: 3\n")
    cfg = load_config(str(path))
    assert "min_score" not in cfg
    assert "min_score" in capsys.readouterr().err


def test_bad_output_format_falls_back(tmp_path):
    path = tmp_path / "cfg.yml"
    path.write_text("output: xml\n")
    assert load_config(str(path))["output"] == "text"


def test_missing_or_invalid_file_uses_defaults(tmp_path, capsys):
    assert load_config(str(tmp_path / "missing.yml")) == DEFAULT_CONFIG
    bad = tmp_path / "bad.yml"
    bad.write_text("rules_file: [unclosed\n")
    assert load_config(str(bad)) == DEFAULT_CONFIG
    bad.write_text("- just\n- a list\n")
    assert load_config(str(bad)) == DEFAULT_CONFIG
    assert "Could not load config" in capsys.readouterr().err


def test_invalid_values_fall_back_to_defaults(tmp_path, capsys):
    path = tmp_path / "cfg.yml"
    path.write_text("rules_file:\nmax_pids: lots\nverbose: maybe\ncolor: false\n")
    cfg = load_config(str(path))
    assert cfg["rules_file"] == DEFAULT_CONFIG["rules_file"]
    assert cfg["max_pids"] == DEFAULT_CONFIG["max_pids"]
    assert cfg["verbose"] is False
    assert cfg["color"] is False
    err = capsys.readouterr().err
    assert "'max_pids'" in err and "'rules_file'" in err


@pytest.mark.parametrize("value", ["0", "-5", "true", "2.5"])
def test_max_pids_must_be_positive_integer(tmp_path, value):
    path = tmp_path / "cfg.yml"
    path.write_text(f"max_pids: {value}\n")
    assert load_config(str(path))["max_pids"] == DEFAULT_CONFIG["max_pids"]
