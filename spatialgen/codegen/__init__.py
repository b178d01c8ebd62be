"""
Spatialgen Code Generation Module

Generates typed code from compiled schema bundles.
"""

from dataclasses import replace
from typing import Any, Dict, Iterable, Mapping, Optional, Union

from .registry import (
    GeneratorRegistry,
    RegistryError,
    get_generator,
    get_registry,
    list_supported_languages,
)
from .core.generator import CodeGenerator, GenerationResult, generate_code
from .core.bundle import SchemaBundle, convert_bundle, load_bundle
from .core.config import GeneratorConfig, ConfigManager, load_config
from .core.errors import GenerationError


def _as_bundle(bundle: Union[SchemaBundle, str, bytes, Dict[str, Any]]) -> SchemaBundle:
    if isinstance(bundle, SchemaBundle):
        return bundle
    if isinstance(bundle, dict):
        return convert_bundle(bundle)
    return load_bundle(bundle)


def generate(
    bundle: Union[SchemaBundle, str, bytes, Dict[str, Any]],
    package: str,
    dependencies: Optional[Mapping[str, str]] = None,
    prelude: Optional[Iterable[str]] = None,
    config: Optional[GeneratorConfig] = None,
    language: str = "python",
) -> str:
    """
    Generate code for one package of a schema bundle.

    Args:
        bundle: Loaded bundle, bundle JSON text, or decoded JSON document
        package: Dotted package prefix to generate
        dependencies: Map from package prefix to the import root of code
            generated for that package
        prelude: Lines injected at the top of every generated namespace;
            import statements among them are placed at module scope
        config: Base configuration; package, dependencies and prelude
            override its values when given
        language: Target language name or alias

    Returns:
        Generated source text

    Raises:
        GenerationError: If the bundle is invalid or a reference cannot be
            resolved
    """
    schema_bundle = _as_bundle(bundle)

    base = config or load_config(get_registry().resolve_name(language))
    overrides: Dict[str, Any] = {"package": package}
    if dependencies is not None:
        overrides["dependencies"] = dict(dependencies)
    if prelude is not None:
        overrides["prelude"] = list(prelude)
    final_config = replace(base, **overrides)

    generator = get_generator(language, final_config)
    result = generate_code(generator, schema_bundle)
    if not result.success:
        raise result.exception
    return result.code


# Version info
__version__ = "0.1.0"

# Export main interfaces
__all__ = [
    "GeneratorRegistry",
    "RegistryError",
    "CodeGenerator",
    "GenerationResult",
    "GenerationError",
    "GeneratorConfig",
    "ConfigManager",
    "SchemaBundle",
    "generate",
    "generate_code",
    "get_generator",
    "list_supported_languages",
    "load_bundle",
    "load_config",
]
