"""Tests for the generator registry."""

import pytest

from spatialgen.codegen import RegistryError, get_generator, list_supported_languages
from spatialgen.codegen.core.config import GeneratorConfig
from spatialgen.codegen.languages.python import PythonGenerator
from spatialgen.codegen.registry import GeneratorRegistry, get_registry


def test_builtin_languages():
    assert list_supported_languages() == ["python"]
    assert get_registry().get_aliases_for_language("python") == ["py"]
    assert get_registry().resolve_name("PY") == "python"


def test_get_generator_by_alias():
    generator = get_generator("py", GeneratorConfig(package="example"))

    assert isinstance(generator, PythonGenerator)
    assert generator.config.package == "example"


def test_get_generator_from_dict():
    generator = get_generator("python", {"package": "example", "use_formatter": False})
    assert generator.config.package == "example"
    assert not generator.config.use_formatter


def test_unknown_language():
    with pytest.raises(RegistryError, match="Available: python"):
        get_generator("cobol")


def test_bad_config_file(tmp_path):
    with pytest.raises(RegistryError, match="Failed to create"):
        get_generator("python", tmp_path / "missing.json")


class TestGeneratorRegistry:
    def test_register_with_aliases(self):
        registry = GeneratorRegistry()
        registry.register("python", PythonGenerator, aliases=["py", "Python3"])

        assert registry.resolve_name("PYTHON3") == "python"
        assert registry.get_generator_class("py") is PythonGenerator
        assert registry.get_aliases_for_language("python") == ["py", "python3"]

    def test_rejects_non_generators(self):
        with pytest.raises(RegistryError):
            GeneratorRegistry().register("text", str)

    def test_alias_conflict(self):
        registry = GeneratorRegistry()
        registry.register("python", PythonGenerator, aliases=["py"])

        with pytest.raises(RegistryError, match="already points"):
            registry.register("pyish", PythonGenerator, aliases=["py"])

    def test_alias_cannot_shadow_language(self):
        registry = GeneratorRegistry()
        registry.register("python", PythonGenerator)

        with pytest.raises(RegistryError, match="conflicts"):
            registry.register("other", PythonGenerator, aliases=["python"])
