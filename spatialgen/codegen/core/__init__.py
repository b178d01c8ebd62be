"""
Core code generation components.

Provides the bundle model, reference resolution and base classes used by
all language generators.
"""

from .errors import (
    GenerationError,
    BundleError,
    BundleFormatError,
    UnsupportedBundleVersionError,
    UnresolvedReferenceError,
    MissingDefinitionError,
    UnresolvedDependencyError,
    TemplateError,
)
from .bundle import (
    SchemaBundle,
    SchemaBundleV1,
    PrimitiveType,
    Identifier,
    EnumDefinition,
    TypeDefinition,
    ComponentDefinition,
    FieldDefinition,
    convert_bundle,
    load_bundle,
)
from .generator import (
    CodeGenerator,
    GenerationResult,
    PackageContents,
    generate_code,
    select_package,
)
from .identifiers import (
    IdentifierResolver,
    TypeReferenceResolver,
    EnumReferenceResolver,
    find_dependency,
    is_within_package,
)
from .module_tree import Module, ModuleTree
from .naming import NameSanitizer, NamingCase
from .config import GeneratorConfig, ConfigManager, ConfigError, load_config
from .templates import TemplateEngine, create_template_engine
from .formatter import format_source, run_formatter, FormatterUnavailable

__all__ = [
    # Errors
    "GenerationError",
    "BundleError",
    "BundleFormatError",
    "UnsupportedBundleVersionError",
    "UnresolvedReferenceError",
    "MissingDefinitionError",
    "UnresolvedDependencyError",
    "TemplateError",
    # Bundle model
    "SchemaBundle",
    "SchemaBundleV1",
    "PrimitiveType",
    "Identifier",
    "EnumDefinition",
    "TypeDefinition",
    "ComponentDefinition",
    "FieldDefinition",
    "convert_bundle",
    "load_bundle",
    # Base generator interface
    "CodeGenerator",
    "GenerationResult",
    "PackageContents",
    "generate_code",
    "select_package",
    # Reference resolution
    "IdentifierResolver",
    "TypeReferenceResolver",
    "EnumReferenceResolver",
    "find_dependency",
    "is_within_package",
    # Output assembly
    "Module",
    "ModuleTree",
    # Naming utilities - language-agnostic
    "NameSanitizer",
    "NamingCase",
    # Configuration system
    "GeneratorConfig",
    "ConfigManager",
    "ConfigError",
    "load_config",
    # Template system - language-agnostic
    "TemplateEngine",
    "create_template_engine",
    # Formatting
    "format_source",
    "run_formatter",
    "FormatterUnavailable",
]
