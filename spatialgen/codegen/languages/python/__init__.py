"""
Python code generator module.

Generates Python modules built on spatialgen.runtime from schema bundles.
"""

from .generator import PythonGenerator, create_python_generator
from .naming import create_python_sanitizer
from .config import (
    PythonConfig,
    get_python_reserved_words,
    get_python_builtin_types,
)

__all__ = [
    # Generator
    "PythonGenerator",
    "create_python_generator",
    # Naming
    "create_python_sanitizer",
    # Configuration
    "PythonConfig",
    "get_python_reserved_words",
    "get_python_builtin_types",
]
