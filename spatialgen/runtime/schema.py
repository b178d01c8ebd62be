"""
In-memory schema objects and the field helpers used by generated code.

A SchemaObject maps field ids to the list of values stored under them.
Singular and option fields hold at most one value, list fields hold one
value per element and map fields hold one pair object per entry, with the
key in field 1 and the value in field 2.
"""

import copy
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Set

Codec = Callable[[Any], Any]

MAP_KEY_FIELD = 1
MAP_VALUE_FIELD = 2


class SchemaObject:
    """Field id keyed container of encoded values."""

    def __init__(self):
        self._fields: Dict[int, List[Any]] = {}

    def add(self, field_id: int, value: Any) -> None:
        """Append a value to a field."""
        self._fields.setdefault(field_id, []).append(value)

    def add_object(self, field_id: int) -> "SchemaObject":
        """Append a new empty object to a field and return it."""
        obj = SchemaObject()
        self.add(field_id, obj)
        return obj

    def count(self, field_id: int) -> int:
        return len(self._fields.get(field_id, ()))

    def get(self, field_id: int, default: Any = None) -> Any:
        """Last value stored in a field, or default if there is none."""
        values = self._fields.get(field_id)
        if not values:
            return default
        return values[-1]

    def values(self, field_id: int) -> List[Any]:
        return list(self._fields.get(field_id, ()))

    def field_ids(self) -> List[int]:
        return sorted(self._fields)

    def __eq__(self, other):
        if not isinstance(other, SchemaObject):
            return NotImplemented
        return self._fields == other._fields

    def __repr__(self):
        body = ", ".join(f"{fid}: {self._fields[fid]!r}" for fid in self.field_ids())
        return f"SchemaObject({{{body}}})"


@dataclass(frozen=True, order=True)
class EntityId:
    """Identifier of an entity in the simulation."""

    id: int = 0

    def as_i64(self) -> int:
        return self.id

    def is_valid(self) -> bool:
        return self.id > 0

    def __str__(self):
        return f"EntityId({self.id})"


class Cleared:
    """Type of the CLEARED marker."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return "CLEARED"

    def __reduce__(self):
        return (Cleared, ())


# Marks an option field of an update as changed to absent
CLEARED = Cleared()


@dataclass
class ComponentData:
    """Full value of a component."""

    component_id: int
    fields: SchemaObject = field(default_factory=SchemaObject)


@dataclass
class ComponentUpdate:
    """Partial change to a component, with the events raised alongside it."""

    component_id: int
    fields: SchemaObject = field(default_factory=SchemaObject)
    events: SchemaObject = field(default_factory=SchemaObject)
    cleared_fields: Set[int] = field(default_factory=set)


@dataclass
class CommandRequest:
    component_id: int
    command_index: int
    fields: SchemaObject = field(default_factory=SchemaObject)


@dataclass
class CommandResponse:
    component_id: int
    command_index: int
    fields: SchemaObject = field(default_factory=SchemaObject)


def identity(value: Any) -> Any:
    """Codec for primitives, which are stored as is."""
    return value


def _map_order(encoded_key: Any) -> Any:
    if isinstance(encoded_key, SchemaObject):
        return repr(encoded_key)
    return encoded_key


# Object fields


def read(obj: SchemaObject, field_id: int, decode: Codec,
         default_factory: Callable[[], Any]) -> Any:
    """Read a singular field, falling back to its default when absent."""
    if not obj.count(field_id):
        return default_factory()
    return decode(obj.get(field_id))


def write(obj: SchemaObject, field_id: int, value: Any, encode: Codec) -> None:
    obj.add(field_id, encode(value))


def read_option(obj: SchemaObject, field_id: int, decode: Codec) -> Optional[Any]:
    if not obj.count(field_id):
        return None
    return decode(obj.get(field_id))


def write_option(obj: SchemaObject, field_id: int, value: Optional[Any],
                 encode: Codec) -> None:
    if value is not None:
        obj.add(field_id, encode(value))


def read_list(obj: SchemaObject, field_id: int, decode: Codec) -> List[Any]:
    return [decode(value) for value in obj.values(field_id)]


def write_list(obj: SchemaObject, field_id: int, values: Iterable[Any],
               encode: Codec) -> None:
    for value in values:
        obj.add(field_id, encode(value))


def read_map(obj: SchemaObject, field_id: int, decode_key: Codec,
             decode_value: Codec) -> Dict[Any, Any]:
    result = {}
    for entry in obj.values(field_id):
        result[decode_key(entry.get(MAP_KEY_FIELD))] = decode_value(
            entry.get(MAP_VALUE_FIELD)
        )
    return result


def write_map(obj: SchemaObject, field_id: int, values: Mapping[Any, Any],
              encode_key: Codec, encode_value: Codec) -> None:
    """Write map entries ordered by their encoded key."""
    entries = sorted(
        ((encode_key(key), encode_value(value)) for key, value in values.items()),
        key=lambda entry: _map_order(entry[0]),
    )
    for key, value in entries:
        pair = obj.add_object(field_id)
        pair.add(MAP_KEY_FIELD, key)
        pair.add(MAP_VALUE_FIELD, value)


# Update fields
#
# None means "unchanged". Option fields read back CLEARED and list or map
# fields read back empty when the field id is in the cleared set.


def read_update(update: ComponentUpdate, field_id: int, decode: Codec) -> Optional[Any]:
    return read_option(update.fields, field_id, decode)


def write_update(update: ComponentUpdate, field_id: int, value: Optional[Any],
                 encode: Codec) -> None:
    write_option(update.fields, field_id, value, encode)


def read_update_option(update: ComponentUpdate, field_id: int, decode: Codec) -> Any:
    if field_id in update.cleared_fields:
        return CLEARED
    return read_option(update.fields, field_id, decode)


def write_update_option(update: ComponentUpdate, field_id: int, value: Any,
                        encode: Codec) -> None:
    if value is CLEARED:
        update.cleared_fields.add(field_id)
    else:
        write_option(update.fields, field_id, value, encode)


def read_update_list(update: ComponentUpdate, field_id: int,
                     decode: Codec) -> Optional[List[Any]]:
    if field_id in update.cleared_fields:
        return []
    if not update.fields.count(field_id):
        return None
    return read_list(update.fields, field_id, decode)


def write_update_list(update: ComponentUpdate, field_id: int,
                      values: Optional[List[Any]], encode: Codec) -> None:
    if values is None:
        return
    if not values:
        update.cleared_fields.add(field_id)
    else:
        write_list(update.fields, field_id, values, encode)


def read_update_map(update: ComponentUpdate, field_id: int, decode_key: Codec,
                    decode_value: Codec) -> Optional[Dict[Any, Any]]:
    if field_id in update.cleared_fields:
        return {}
    if not update.fields.count(field_id):
        return None
    return read_map(update.fields, field_id, decode_key, decode_value)


def write_update_map(update: ComponentUpdate, field_id: int,
                     values: Optional[Mapping[Any, Any]], encode_key: Codec,
                     encode_value: Codec) -> None:
    if values is None:
        return
    if not values:
        update.cleared_fields.add(field_id)
    else:
        write_map(update.fields, field_id, values, encode_key, encode_value)


def read_events(update: ComponentUpdate, event_index: int, decode: Codec) -> List[Any]:
    return read_list(update.events, event_index, decode)


def write_events(update: ComponentUpdate, event_index: int, events: Iterable[Any],
                 encode: Codec) -> None:
    write_list(update.events, event_index, events, encode)


# Merging


def merge_field(current: Any, incoming: Any) -> Any:
    """
    New value of a component field after applying an update value.

    The result never shares lists, dicts or records with the update.
    """
    if incoming is None:
        return current
    if incoming is CLEARED:
        return None
    return copy.deepcopy(incoming)


def merge_update_field(current: Any, incoming: Any) -> Any:
    """New value of an update field after applying a later update value."""
    return current if incoming is None else copy.deepcopy(incoming)


def merge_events(current: List[Any], incoming: Iterable[Any]) -> None:
    """Append copies of a later update's events to an event buffer."""
    current.extend(copy.deepcopy(list(incoming)))
