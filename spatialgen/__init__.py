"""
spatialgen: typed Python code from compiled schema bundles.
"""

from .codegen import __version__, generate, load_bundle
from .compiler import SchemaCompilerError, build, compile_bundle
from .codegen.core.errors import (
    GenerationError,
    BundleError,
    BundleFormatError,
    UnsupportedBundleVersionError,
    UnresolvedReferenceError,
    MissingDefinitionError,
    UnresolvedDependencyError,
)

__all__ = [
    "__version__",
    "generate",
    "load_bundle",
    "build",
    "compile_bundle",
    "SchemaCompilerError",
    "GenerationError",
    "BundleError",
    "BundleFormatError",
    "UnsupportedBundleVersionError",
    "UnresolvedReferenceError",
    "MissingDefinitionError",
    "UnresolvedDependencyError",
]
