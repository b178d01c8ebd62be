"""
Runtime support for code generated by spatialgen.

Generated modules import this package as ``runtime`` and build on its
schema objects, field helpers, command unions and component registry.
"""

from .errors import (
    DispatchError,
    UnknownCommandError,
    UnknownComponentError,
    ComponentRegistrationError,
    SchemaDriftError,
    UnknownEnumValueError,
)
from .schema import (
    CLEARED,
    Cleared,
    SchemaObject,
    EntityId,
    ComponentData,
    ComponentUpdate,
    CommandRequest,
    CommandResponse,
    identity,
    read,
    write,
    read_option,
    write_option,
    read_list,
    write_list,
    read_map,
    write_map,
    read_update,
    write_update,
    read_update_option,
    write_update_option,
    read_update_list,
    write_update_list,
    read_update_map,
    write_update_map,
    read_events,
    write_events,
    merge_events,
    merge_field,
    merge_update_field,
)
from .commands import CommandUnion, Component
from .registry import ComponentRegistry

__all__ = [
    # Errors
    "DispatchError",
    "UnknownCommandError",
    "UnknownComponentError",
    "ComponentRegistrationError",
    "SchemaDriftError",
    "UnknownEnumValueError",
    # Wire objects
    "CLEARED",
    "Cleared",
    "SchemaObject",
    "EntityId",
    "ComponentData",
    "ComponentUpdate",
    "CommandRequest",
    "CommandResponse",
    # Field helpers
    "identity",
    "read",
    "write",
    "read_option",
    "write_option",
    "read_list",
    "write_list",
    "read_map",
    "write_map",
    "read_update",
    "write_update",
    "read_update_option",
    "write_update_option",
    "read_update_list",
    "write_update_list",
    "read_update_map",
    "write_update_map",
    "read_events",
    "write_events",
    "merge_events",
    "merge_field",
    "merge_update_field",
    # Components
    "CommandUnion",
    "Component",
    "ComponentRegistry",
]
