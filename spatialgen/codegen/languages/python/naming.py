"""
Python-specific naming utilities and sanitization.

Handles Python reserved words, builtins, and the names generated code
relies on, so schema names never shadow them.
"""

import keyword

from ...core.naming import NameSanitizer


# Python reserved keywords
PYTHON_RESERVED_WORDS = set(keyword.kwlist)

# Python built-in types and functions
PYTHON_BUILTIN_TYPES = {
    # Types
    "int",
    "float",
    "str",
    "bool",
    "list",
    "dict",
    "set",
    "tuple",
    "bytes",
    "bytearray",
    "frozenset",
    "range",
    "object",
    "type",
    "complex",
    "memoryview",
    # Special attributes
    "property",
    "staticmethod",
    "classmethod",
    "super",
    # Common functions
    "len",
    "print",
    "input",
    "open",
    "all",
    "any",
    "abs",
    "min",
    "max",
    "sum",
    "sorted",
    "reversed",
    "enumerate",
    "zip",
    "map",
    "filter",
    "isinstance",
    "issubclass",
    "hasattr",
    "getattr",
    "setattr",
    "delattr",
    "dir",
    "vars",
    "id",
    "hash",
    "repr",
    "format",
    "iter",
    "next",
    "slice",
    "callable",
    # Exceptions
    "Exception",
    "BaseException",
    "ValueError",
    "TypeError",
    "KeyError",
    "AttributeError",
    "IndexError",
    "RuntimeError",
    "NotImplementedError",
    "StopIteration",
}

# Module level names every generated file binds
GENERATED_MODULE_NAMES = {
    "annotations",
    "dataclasses",
    "enum",
    "typing",
    "runtime",
    "field",
    "COMPONENTS",
    "register_components",
}

# Members defined on generated records, updates and components
RECORD_MEMBER_NAMES = {
    "COMPONENT_ID",
    "from_object",
    "to_object",
    "from_data",
    "to_data",
    "from_update",
    "to_update",
    "from_request",
    "to_request",
    "from_response",
    "to_response",
    "get_request_command_index",
    "get_response_command_index",
    "update_type",
    "command_request_type",
    "command_response_type",
    "merge",
    "is_empty",
}

# Members of generated enums
ENUM_MEMBER_NAMES = {
    "from_u32",
    "as_u32",
    "name",
    "value",
    "mro",
}

# Members of generated command unions
COMMAND_UNION_MEMBER_NAMES = {
    "COMPONENT_NAME",
    "COMPONENT_ID",
    "KIND",
    "VARIANTS",
    "INDICES",
    "decode",
    "encode",
    "index_of",
}


def create_python_sanitizer() -> NameSanitizer:
    """Create a name sanitizer configured for Python."""
    return NameSanitizer(
        PYTHON_RESERVED_WORDS | GENERATED_MODULE_NAMES, PYTHON_BUILTIN_TYPES
    )


def create_member_sanitizer() -> NameSanitizer:
    """Sanitizer for field and event attributes of generated classes."""
    return NameSanitizer(
        PYTHON_RESERVED_WORDS | GENERATED_MODULE_NAMES | RECORD_MEMBER_NAMES,
        PYTHON_BUILTIN_TYPES,
    )


def create_enum_value_sanitizer() -> NameSanitizer:
    """Sanitizer for enum member names."""
    return NameSanitizer(
        PYTHON_RESERVED_WORDS | ENUM_MEMBER_NAMES, PYTHON_BUILTIN_TYPES
    )


def create_variant_sanitizer() -> NameSanitizer:
    """Sanitizer for command variant class names."""
    return NameSanitizer(
        PYTHON_RESERVED_WORDS | GENERATED_MODULE_NAMES | COMMAND_UNION_MEMBER_NAMES,
        PYTHON_BUILTIN_TYPES,
    )
