"""Tests for study config loading and validation."""

from __future__ import annotations

import json

import pytest

from configs.loader import ConfigLoader, ConfigValidationError, StudyConfig


def test_load_yaml_config_resolves_relative_root(tmp_path) -> None:
    config_dir = tmp_path / "configs"
    config_dir.mkdir()
    config_path = config_dir / "study.yaml"
    config_path.write_text(
        "study_root: ../data/study\n"
        "concurrent_loads: false\n"
        "log_level: debug\n"
        "activation_timeout: 5\n"
        "default_replication: 2\n"
        "owner: ops\n",
        encoding="utf-8",
    )

    config = ConfigLoader.load(config_path)

    assert config.study_root == config_dir / "../data/study"
    assert config.concurrent_loads is False
    assert config.log_level == "DEBUG"
    assert config.activation_timeout == 5.0
    assert config.default_replication == 2
    assert config.replications_dir == "replications"
    assert config.get("owner") == "ops"
    assert config.get("log_level") == "DEBUG"


def test_load_json_config(tmp_path) -> None:
    config_path = tmp_path / "study.json"
    config_path.write_text(json.dumps({"study_root": str(tmp_path), "replications_dir": "runs/"}), encoding="utf-8")

    config = ConfigLoader.load(config_path)

    assert config.study_root == tmp_path
    assert config.replications_dir == "runs"
    assert config.activation_timeout is None


def test_missing_study_root(tmp_path) -> None:
    config_path = tmp_path / "study.json"
    config_path.write_text(json.dumps({"log_level": "INFO"}), encoding="utf-8")

    with pytest.raises(ConfigValidationError, match="study_root"):
        ConfigLoader.load(config_path)


@pytest.mark.parametrize(
    ("payload", "message"),
    [
        ({"study_root": "s", "log_level": "LOUD"}, "log_level"),
        ({"study_root": "s", "activation_timeout": 0}, "activation_timeout"),
        ({"study_root": "s", "activation_timeout": "soon"}, "activation_timeout"),
        ({"study_root": "s", "concurrent_loads": "yes"}, "concurrent_loads"),
        ({"study_root": "s", "default_replication": "1"}, "default_replication"),
    ],
)
def test_invalid_values(payload, message) -> None:
    with pytest.raises(ConfigValidationError, match=message):
        StudyConfig.from_mapping(payload)


def test_unsupported_extension_and_missing_file(tmp_path) -> None:
    config_path = tmp_path / "study.toml"
    config_path.write_text("study_root = 'x'", encoding="utf-8")

    with pytest.raises(ConfigValidationError, match="Unsupported config extension"):
        ConfigLoader.load(config_path)
    with pytest.raises(ConfigValidationError, match="not found"):
        ConfigLoader.load(tmp_path / "absent.yaml")


def test_invalid_yaml(tmp_path) -> None:
    config_path = tmp_path / "study.yaml"
    config_path.write_text("study_root: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigValidationError, match="Failed to parse"):
        ConfigLoader.load(config_path)
