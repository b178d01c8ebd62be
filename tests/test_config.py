"""Tests for generator configuration."""

import json

import pytest

from spatialgen.codegen.core.config import (
    ConfigError,
    ConfigManager,
    GeneratorConfig,
    load_config,
    validate_config,
)


def write_json(path, data):
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def test_defaults():
    config = load_config("python")

    assert config.package == ""
    assert config.dependencies == {}
    assert config.use_formatter
    assert config.formatter_command == ["black", "--quiet", "-"]
    assert config.runtime_module == "spatialgen.runtime"


def test_defaults_not_shared():
    manager = ConfigManager()
    first = manager.get_config("python")
    first.formatter_command.append("--fast")

    assert manager.get_config("python").formatter_command == ["black", "--quiet", "-"]


def test_file_and_overrides(tmp_path):
    path = write_json(
        tmp_path / "spatialgen.json",
        {
            "package": "example",
            "dependencies": {"improbable": "std_generated"},
            "formatter_timeout": 5,
            "generate_registry": False,
        },
    )

    config = load_config("python", custom_config={"package": "other"}, config_file=path)

    assert config.package == "other"
    assert config.dependencies == {"improbable": "std_generated"}
    assert config.formatter_timeout == 5
    assert config.custom == {"generate_registry": False}


def test_missing_file(tmp_path):
    with pytest.raises(ConfigError, match="not found"):
        load_config("python", config_file=tmp_path / "missing.json")


def test_non_json_suffix(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("package: example", encoding="utf-8")

    with pytest.raises(ConfigError, match="must be JSON"):
        load_config("python", config_file=path)


def test_invalid_json(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{broken", encoding="utf-8")

    with pytest.raises(ConfigError, match="Invalid JSON"):
        load_config("python", config_file=path)


def test_non_object_json(tmp_path):
    path = write_json(tmp_path / "config.json", ["package"])

    with pytest.raises(ConfigError, match="JSON object"):
        load_config("python", config_file=path)


def test_save_round_trip(tmp_path):
    manager = ConfigManager()
    config = GeneratorConfig(package="example", custom={"header": "hi"})
    path = tmp_path / "saved.json"

    manager.save_config(config, path)

    assert manager.get_config("python", config_file=path) == config


def test_validate_config():
    config = GeneratorConfig(
        package="example.bad-name",
        dependencies={"improbable": "not valid", "": "root"},
        formatter_timeout=0,
        runtime_module="spatialgen..runtime",
    )

    warnings = validate_config(config)

    assert "Invalid package name: example.bad-name" in warnings
    assert "Invalid import root for dependency 'improbable': 'not valid'" in warnings
    assert "Empty dependency prefix for import root 'root'" in warnings
    assert "Invalid formatter_timeout: 0" in warnings
    assert "Invalid runtime_module: spatialgen..runtime" in warnings


def test_validate_clean_config():
    config = GeneratorConfig(package="example", dependencies={"improbable": "std.generated"})
    assert validate_config(config) == []
