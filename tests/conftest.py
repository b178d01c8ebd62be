"""Shared fixtures for spatialgen tests."""

import copy
import importlib.util
import itertools
import json
import shutil
import subprocess
import sys
from pathlib import Path

import pytest

from spatialgen.codegen import generate
from spatialgen.codegen.core.bundle import convert_bundle
from spatialgen.codegen.core.config import GeneratorConfig

DATA_DIR = Path(__file__).parent / "data"
BUNDLE_PATH = DATA_DIR / "bundle.json"

_module_counter = itertools.count()


@pytest.fixture
def bundle_path():
    return BUNDLE_PATH


@pytest.fixture
def bundle_document():
    """Decoded sample bundle; tests may mutate their copy."""
    with open(BUNDLE_PATH, "r", encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture
def bundle(bundle_document):
    return convert_bundle(bundle_document)


@pytest.fixture
def plain_config():
    """Configuration that skips the external formatter."""
    return GeneratorConfig(use_formatter=False)


@pytest.fixture
def load_generated(tmp_path):
    """Write generated code to a file and import it as a module."""
    loaded = []

    def _load(code):
        name = f"spatialgen_generated_{next(_module_counter)}"
        path = tmp_path / f"{name}.py"
        path.write_text(code, encoding="utf-8")

        spec = importlib.util.spec_from_file_location(name, path)
        module = importlib.util.module_from_spec(spec)
        # dataclasses looks the module up while processing string annotations
        sys.modules[name] = module
        loaded.append(name)
        spec.loader.exec_module(module)
        return module

    yield _load

    for name in loaded:
        sys.modules.pop(name, None)


@pytest.fixture
def example_code(bundle, plain_config):
    return generate(bundle, "example", config=plain_config)


@pytest.fixture
def example(example_code, load_generated):
    """The generated module for the 'example' package."""
    return load_generated(example_code)


@pytest.fixture
def reversed_bundle(bundle_document):
    """The sample bundle with every definition list in reverse order."""
    result = copy.deepcopy(bundle_document)
    v1 = result["v1"]
    for key in ("enumDefinitions", "typeDefinitions", "componentDefinitions"):
        v1[key] = list(reversed(v1.get(key, [])))
    for component in v1["componentDefinitions"]:
        component["eventDefinitions"] = list(
            reversed(component.get("eventDefinitions", []))
        )
        component["commandDefinitions"] = list(
            reversed(component.get("commandDefinitions", []))
        )
    return convert_bundle(result)


@pytest.fixture
def fake_compiler(monkeypatch):
    """
    Replace the schema compiler run with one that copies the sample bundle.

    Returns the list of commands run. Setting ``returncode`` and ``stderr``
    on the list makes the compiler fail.
    """

    class Calls(list):
        returncode = 0
        stderr = b""

    calls = Calls()

    def run(command, **kwargs):
        calls.append(list(command))
        if calls.returncode == 0:
            for arg in command:
                if arg.startswith("--bundle_json_out="):
                    shutil.copyfile(BUNDLE_PATH, arg.partition("=")[2])
        return subprocess.CompletedProcess(command, calls.returncode, b"", calls.stderr)

    monkeypatch.setattr(subprocess, "run", run)
    return calls
