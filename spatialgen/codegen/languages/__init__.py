"""
Language-specific code generators.

This module contains generators for the supported target languages.
"""

from .python import PythonGenerator, create_python_generator

__all__ = [
    "PythonGenerator",
    "create_python_generator",
]
