"""
Python-specific configuration and type mappings.

Maps schema primitives onto Python types and holds the options of the
Python generator that live in GeneratorConfig.custom.
"""

from typing import Any, Dict, List, Mapping, Optional, Set

from ...core.bundle import PrimitiveType
from .naming import PYTHON_BUILTIN_TYPES, PYTHON_RESERVED_WORDS


# Python type and zero value for each primitive. EntityId maps onto the
# runtime's EntityId class and is handled by the generator.
PYTHON_TYPE_MAP = {
    PrimitiveType.INT32: ("int", "0"),
    PrimitiveType.INT64: ("int", "0"),
    PrimitiveType.UINT32: ("int", "0"),
    PrimitiveType.UINT64: ("int", "0"),
    PrimitiveType.SINT32: ("int", "0"),
    PrimitiveType.SINT64: ("int", "0"),
    PrimitiveType.FIXED32: ("int", "0"),
    PrimitiveType.FIXED64: ("int", "0"),
    PrimitiveType.SFIXED32: ("int", "0"),
    PrimitiveType.SFIXED64: ("int", "0"),
    PrimitiveType.BOOL: ("bool", "False"),
    PrimitiveType.FLOAT: ("float", "0.0"),
    PrimitiveType.DOUBLE: ("float", "0.0"),
    PrimitiveType.STRING: ("str", '""'),
    PrimitiveType.BYTES: ("bytes", 'b""'),
}

# Standard library modules every generated file imports
STANDARD_IMPORTS = [
    "import dataclasses",
    "import enum",
    "import typing",
]


class PythonConfig:
    """Python-specific configuration."""

    def __init__(self, **kwargs):
        """Initialize Python configuration."""
        # Emit COMPONENTS and register_components() at the end of the module
        self.generate_registry = kwargs.get("generate_registry", True)

        # Mention the schema source file in class docstrings
        self.source_locations = kwargs.get("source_locations", True)

        # Header comment placed at the top of the module
        self.header: Optional[str] = kwargs.get(
            "header", "Generated by spatialgen. Do not edit."
        )

        # Extra module level imports, after the standard ones
        self.extra_imports: List[str] = list(kwargs.get("extra_imports", []))

    def get_python_type(self, primitive: PrimitiveType) -> str:
        """Get Python type string for a primitive."""
        return PYTHON_TYPE_MAP[primitive][0]

    def get_zero_value(self, primitive: PrimitiveType) -> str:
        """Get the source text of the default value for a primitive."""
        return PYTHON_TYPE_MAP[primitive][1]

    def get_required_imports(self, dependency_imports: Mapping[str, str]) -> List[str]:
        """
        Get the import lines of a generated module, standard library first.

        Args:
            dependency_imports: Map from import root to the alias it is bound to
        """
        imports = list(STANDARD_IMPORTS)
        imports.extend(
            f"import {root} as {dependency_imports[root]}"
            for root in sorted(dependency_imports)
        )
        imports.extend(self.extra_imports)
        return imports

    def to_dict(self) -> Dict[str, Any]:
        return {
            "generate_registry": self.generate_registry,
            "source_locations": self.source_locations,
            "header": self.header,
            "extra_imports": list(self.extra_imports),
        }


def get_python_reserved_words() -> Set[str]:
    """Get Python reserved words."""
    return PYTHON_RESERVED_WORDS


def get_python_builtin_types() -> Set[str]:
    """Get Python builtin types."""
    return PYTHON_BUILTIN_TYPES
