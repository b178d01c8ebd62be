"""
Schema bundle representation for code generation.

Converts the JSON bundle produced by the schema compiler into a typed,
immutable model that generators can work with consistently.
"""

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from .errors import BundleFormatError, UnsupportedBundleVersionError
from ...logging_config import get_logger

logger = get_logger(__name__)


class PrimitiveType(Enum):
    """Wire-level scalar kinds, numbered as the schema compiler numbers them."""

    INVALID = 0
    INT32 = 1
    INT64 = 2
    UINT32 = 3
    UINT64 = 4
    SINT32 = 5
    SINT64 = 6
    FIXED32 = 7
    FIXED64 = 8
    SFIXED32 = 9
    SFIXED64 = 10
    BOOL = 11
    FLOAT = 12
    DOUBLE = 13
    STRING = 14
    ENTITY_ID = 15
    BYTES = 16

    @classmethod
    def parse(cls, raw: Union[str, int], path: str = "$") -> "PrimitiveType":
        """Parse a primitive from its bundle spelling ("Int32", "EntityId" or 1)."""
        if isinstance(raw, bool):
            raise BundleFormatError(f"Invalid primitive type {raw!r}", path)
        if isinstance(raw, int):
            try:
                return cls(raw)
            except ValueError as e:
                raise BundleFormatError(f"Unknown primitive type code {raw}", path, e)
        if isinstance(raw, str):
            key = raw.replace("_", "").lower()
            for member in cls:
                if member.name.replace("_", "").lower() == key:
                    return member
        raise BundleFormatError(f"Unknown primitive type {raw!r}", path)


@dataclass(frozen=True)
class Identifier:
    """Fully scoped name of a schema entity."""

    qualified_name: str
    name: str
    path: Tuple[str, ...]

    @property
    def namespace(self) -> Tuple[str, ...]:
        """Path segments preceding the simple name."""
        return self.path[:-1]


@dataclass(frozen=True)
class PrimitiveReference:
    primitive: PrimitiveType


@dataclass(frozen=True)
class EnumReference:
    qualified_name: str


@dataclass(frozen=True)
class TypeReference:
    qualified_name: str


ValueTypeReference = Union[PrimitiveReference, EnumReference, TypeReference]


@dataclass(frozen=True)
class SingularType:
    value_type: ValueTypeReference


@dataclass(frozen=True)
class OptionalType:
    inner_type: ValueTypeReference


@dataclass(frozen=True)
class ListType:
    inner_type: ValueTypeReference


@dataclass(frozen=True)
class MapType:
    key_type: ValueTypeReference
    value_type: ValueTypeReference


FieldTypeDefinition = Union[SingularType, OptionalType, ListType, MapType]


@dataclass(frozen=True)
class FieldDefinition:
    """A single field of a type or inline component."""

    identifier: Identifier
    field_id: int
    ty: FieldTypeDefinition
    transient: bool = False
    annotations: Tuple[Any, ...] = ()


@dataclass(frozen=True)
class EnumValueDefinition:
    identifier: Identifier
    value: int
    annotations: Tuple[Any, ...] = ()


@dataclass(frozen=True)
class EnumDefinition:
    identifier: Identifier
    value_definitions: Tuple[EnumValueDefinition, ...] = ()
    annotations: Tuple[Any, ...] = ()


@dataclass(frozen=True)
class TypeDefinition:
    identifier: Identifier
    field_definitions: Tuple[FieldDefinition, ...] = ()
    annotations: Tuple[Any, ...] = ()


@dataclass(frozen=True)
class InlineData:
    """Component data declared directly on the component."""

    field_definitions: Tuple[FieldDefinition, ...]


@dataclass(frozen=True)
class DataReference:
    """Component data taken from a separately declared type."""

    type_reference: TypeReference


ComponentDataDefinition = Union[InlineData, DataReference]


@dataclass(frozen=True)
class EventDefinition:
    identifier: Identifier
    event_index: int
    value_type: ValueTypeReference
    annotations: Tuple[Any, ...] = ()


@dataclass(frozen=True)
class CommandDefinition:
    identifier: Identifier
    command_index: int
    request_type: ValueTypeReference
    response_type: ValueTypeReference
    annotations: Tuple[Any, ...] = ()


@dataclass(frozen=True)
class ComponentDefinition:
    identifier: Identifier
    component_id: int
    data_definition: ComponentDataDefinition
    event_definitions: Tuple[EventDefinition, ...] = ()
    command_definitions: Tuple[CommandDefinition, ...] = ()
    annotations: Tuple[Any, ...] = ()


@dataclass(frozen=True)
class SourceReference:
    file_path: str
    line: int
    column: int


@dataclass(frozen=True)
class SchemaBundleV1:
    """All enums, types and components of one compiled schema."""

    enum_definitions: Tuple[EnumDefinition, ...] = ()
    type_definitions: Tuple[TypeDefinition, ...] = ()
    component_definitions: Tuple[ComponentDefinition, ...] = ()

    def get_referenced_type(self, type_ref: TypeReference) -> TypeDefinition:
        """Look up the definition behind a type reference."""
        from .identifiers import TypeReferenceResolver

        return TypeReferenceResolver(self).resolve(type_ref.qualified_name)

    def get_referenced_enum(self, enum_ref: EnumReference) -> EnumDefinition:
        """Look up the definition behind an enum reference."""
        from .identifiers import EnumReferenceResolver

        return EnumReferenceResolver(self).resolve(enum_ref.qualified_name)


@dataclass(frozen=True)
class SchemaBundle:
    """Versioned bundle; only the v1 payload is understood."""

    v1: Optional[SchemaBundleV1] = None
    source_references: Mapping[str, SourceReference] = field(default_factory=dict)
    versions: Tuple[str, ...] = ()

    def require_v1(self) -> SchemaBundleV1:
        """Return the v1 payload or fail with UnsupportedBundleVersionError."""
        if self.v1 is None:
            raise UnsupportedBundleVersionError(self.versions)
        return self.v1


# JSON conversion


def _expect(node: Any, kind: type, path: str) -> Any:
    if not isinstance(node, kind) or (kind is int and isinstance(node, bool)):
        raise BundleFormatError(
            f"Expected {kind.__name__}, got {type(node).__name__}", path
        )
    return node


def _get(node: Dict[str, Any], key: str, kind: type, path: str) -> Any:
    if key not in node:
        raise BundleFormatError(f"Missing required key '{key}'", path)
    return _expect(node[key], kind, f"{path}.{key}")


def _annotations(node: Dict[str, Any], path: str) -> Tuple[Any, ...]:
    return tuple(_expect(node.get("annotations", []), list, f"{path}.annotations"))


def _convert_identifier(node: Any, path: str) -> Identifier:
    node = _expect(node, dict, path)
    qualified_name = _get(node, "qualifiedName", str, path)
    name = _get(node, "name", str, path)
    segments = _get(node, "path", list, path)

    if not segments:
        raise BundleFormatError(f"Identifier {qualified_name} has an empty path", path)
    for index, segment in enumerate(segments):
        _expect(segment, str, f"{path}.path[{index}]")
    if segments[-1] != name:
        raise BundleFormatError(
            f"Identifier {qualified_name}: last path segment '{segments[-1]}' "
            f"does not match name '{name}'",
            path,
        )

    return Identifier(qualified_name=qualified_name, name=name, path=tuple(segments))


def _convert_qualified_reference(node: Any, path: str) -> str:
    node = _expect(node, dict, path)
    return _get(node, "qualifiedName", str, path)


def _convert_value_type(node: Any, path: str) -> ValueTypeReference:
    node = _expect(node, dict, path)
    if len(node) != 1:
        raise BundleFormatError(
            f"Value type reference must have exactly one of primitive/enum/type, got {sorted(node)}",
            path,
        )

    if "primitive" in node:
        primitive = PrimitiveType.parse(node["primitive"], f"{path}.primitive")
        if primitive == PrimitiveType.INVALID:
            raise BundleFormatError("Invalid primitive type", f"{path}.primitive")
        return PrimitiveReference(primitive)
    if "enum" in node:
        return EnumReference(_convert_qualified_reference(node["enum"], f"{path}.enum"))
    if "type" in node:
        return TypeReference(_convert_qualified_reference(node["type"], f"{path}.type"))

    raise BundleFormatError(f"Unknown value type reference {sorted(node)}", path)


def _convert_field_type(node: Dict[str, Any], path: str) -> FieldTypeDefinition:
    shapes = [
        key
        for key in ("singularType", "optionType", "listType", "mapType")
        if key in node
    ]
    if len(shapes) != 1:
        raise BundleFormatError(
            f"Field must declare exactly one field type, got {shapes or 'none'}", path
        )

    shape = shapes[0]
    shape_path = f"{path}.{shape}"
    body = _expect(node[shape], dict, shape_path)

    if shape == "singularType":
        return SingularType(_convert_value_type(body.get("type"), f"{shape_path}.type"))
    if shape == "optionType":
        return OptionalType(
            _convert_value_type(body.get("innerType"), f"{shape_path}.innerType")
        )
    if shape == "listType":
        return ListType(
            _convert_value_type(body.get("innerType"), f"{shape_path}.innerType")
        )
    return MapType(
        key_type=_convert_value_type(body.get("keyType"), f"{shape_path}.keyType"),
        value_type=_convert_value_type(body.get("valueType"), f"{shape_path}.valueType"),
    )


def _convert_fields(nodes: Any, owner: str, path: str) -> Tuple[FieldDefinition, ...]:
    nodes = _expect(nodes, list, path)
    fields = []
    seen_ids: Dict[int, str] = {}

    for index, node in enumerate(nodes):
        field_path = f"{path}[{index}]"
        node = _expect(node, dict, field_path)
        identifier = _convert_identifier(node.get("identifier"), f"{field_path}.identifier")
        field_id = _get(node, "fieldId", int, field_path)

        if field_id in seen_ids:
            raise BundleFormatError(
                f"Duplicate field id {field_id} in {owner} "
                f"('{seen_ids[field_id]}' and '{identifier.name}')",
                field_path,
            )
        seen_ids[field_id] = identifier.name

        fields.append(
            FieldDefinition(
                identifier=identifier,
                field_id=field_id,
                ty=_convert_field_type(node, field_path),
                transient=bool(node.get("transient", False)),
                annotations=_annotations(node, field_path),
            )
        )

    return tuple(fields)


def _convert_enum(node: Any, path: str) -> EnumDefinition:
    node = _expect(node, dict, path)
    identifier = _convert_identifier(node.get("identifier"), f"{path}.identifier")

    values = []
    for index, value_node in enumerate(_get(node, "valueDefinitions", list, path)):
        value_path = f"{path}.valueDefinitions[{index}]"
        value_node = _expect(value_node, dict, value_path)
        values.append(
            EnumValueDefinition(
                identifier=_convert_identifier(
                    value_node.get("identifier"), f"{value_path}.identifier"
                ),
                value=_get(value_node, "value", int, value_path),
                annotations=_annotations(value_node, value_path),
            )
        )

    return EnumDefinition(
        identifier=identifier,
        value_definitions=tuple(values),
        annotations=_annotations(node, path),
    )


def _convert_type(node: Any, path: str) -> TypeDefinition:
    node = _expect(node, dict, path)
    identifier = _convert_identifier(node.get("identifier"), f"{path}.identifier")
    return TypeDefinition(
        identifier=identifier,
        field_definitions=_convert_fields(
            node.get("fieldDefinitions", []),
            identifier.qualified_name,
            f"{path}.fieldDefinitions",
        ),
        annotations=_annotations(node, path),
    )


def _convert_component(node: Any, path: str) -> ComponentDefinition:
    node = _expect(node, dict, path)
    identifier = _convert_identifier(node.get("identifier"), f"{path}.identifier")
    owner = identifier.qualified_name

    if "dataDefinition" in node and "fieldDefinitions" in node:
        raise BundleFormatError(
            f"Component {owner} declares both inline fields and a data definition",
            path,
        )
    if "dataDefinition" in node:
        data: ComponentDataDefinition = DataReference(
            TypeReference(
                _convert_qualified_reference(
                    node["dataDefinition"], f"{path}.dataDefinition"
                )
            )
        )
    else:
        data = InlineData(
            _convert_fields(
                node.get("fieldDefinitions", []), owner, f"{path}.fieldDefinitions"
            )
        )

    events = []
    seen_events: Dict[int, str] = {}
    for index, event_node in enumerate(
        _expect(node.get("eventDefinitions", []), list, f"{path}.eventDefinitions")
    ):
        event_path = f"{path}.eventDefinitions[{index}]"
        event_node = _expect(event_node, dict, event_path)
        event = EventDefinition(
            identifier=_convert_identifier(
                event_node.get("identifier"), f"{event_path}.identifier"
            ),
            event_index=_get(event_node, "eventIndex", int, event_path),
            value_type=_convert_value_type(event_node.get("type"), f"{event_path}.type"),
            annotations=_annotations(event_node, event_path),
        )
        if event.event_index in seen_events:
            raise BundleFormatError(
                f"Duplicate event index {event.event_index} in component {owner}",
                event_path,
            )
        seen_events[event.event_index] = event.identifier.name
        events.append(event)

    commands = []
    seen_commands: Dict[int, str] = {}
    for index, command_node in enumerate(
        _expect(node.get("commandDefinitions", []), list, f"{path}.commandDefinitions")
    ):
        command_path = f"{path}.commandDefinitions[{index}]"
        command_node = _expect(command_node, dict, command_path)
        command = CommandDefinition(
            identifier=_convert_identifier(
                command_node.get("identifier"), f"{command_path}.identifier"
            ),
            command_index=_get(command_node, "commandIndex", int, command_path),
            request_type=_convert_value_type(
                command_node.get("requestType"), f"{command_path}.requestType"
            ),
            response_type=_convert_value_type(
                command_node.get("responseType"), f"{command_path}.responseType"
            ),
            annotations=_annotations(command_node, command_path),
        )
        if command.command_index in seen_commands:
            raise BundleFormatError(
                f"Duplicate command index {command.command_index} in component {owner} "
                f"('{seen_commands[command.command_index]}' and '{command.identifier.name}')",
                command_path,
            )
        seen_commands[command.command_index] = command.identifier.name
        commands.append(command)

    return ComponentDefinition(
        identifier=identifier,
        component_id=_get(node, "componentId", int, path),
        data_definition=data,
        event_definitions=tuple(events),
        command_definitions=tuple(commands),
        annotations=_annotations(node, path),
    )


def _convert_v1(node: Any, path: str) -> SchemaBundleV1:
    node = _expect(node, dict, path)

    enums = tuple(
        _convert_enum(item, f"{path}.enumDefinitions[{i}]")
        for i, item in enumerate(
            _expect(node.get("enumDefinitions", []), list, f"{path}.enumDefinitions")
        )
    )
    types = tuple(
        _convert_type(item, f"{path}.typeDefinitions[{i}]")
        for i, item in enumerate(
            _expect(node.get("typeDefinitions", []), list, f"{path}.typeDefinitions")
        )
    )
    components = tuple(
        _convert_component(item, f"{path}.componentDefinitions[{i}]")
        for i, item in enumerate(
            _expect(
                node.get("componentDefinitions", []),
                list,
                f"{path}.componentDefinitions",
            )
        )
    )

    seen_ids: Dict[int, str] = {}
    for component in components:
        other = seen_ids.get(component.component_id)
        if other is not None:
            raise BundleFormatError(
                f"Component id {component.component_id} is used by both "
                f"{other} and {component.identifier.qualified_name}",
                f"{path}.componentDefinitions",
            )
        seen_ids[component.component_id] = component.identifier.qualified_name

    return SchemaBundleV1(
        enum_definitions=enums,
        type_definitions=types,
        component_definitions=components,
    )


def _convert_source_map(node: Any, path: str) -> Dict[str, SourceReference]:
    node = _expect(node, dict, path)
    references = _expect(
        node.get("sourceReferences", {}), dict, f"{path}.sourceReferences"
    )

    result = {}
    for name, reference in references.items():
        ref_path = f"{path}.sourceReferences.{name}"
        reference = _expect(reference, dict, ref_path)
        result[name] = SourceReference(
            file_path=_get(reference, "filePath", str, ref_path),
            line=_get(reference, "line", int, ref_path),
            column=_get(reference, "column", int, ref_path),
        )
    return result


def convert_bundle(document: Any) -> SchemaBundle:
    """
    Convert a decoded bundle document to the internal bundle model.

    Args:
        document: Parsed JSON document

    Returns:
        SchemaBundle with the v1 payload (if any) converted

    Raises:
        BundleFormatError: If the document structure is invalid
    """
    document = _expect(document, dict, "$")

    v1 = None
    if document.get("v1") is not None:
        v1 = _convert_v1(document["v1"], "$.v1")

    source_references: Dict[str, SourceReference] = {}
    if document.get("sourceMapV1") is not None:
        source_references = _convert_source_map(document["sourceMapV1"], "$.sourceMapV1")

    versions = tuple(
        sorted(
            key
            for key, value in document.items()
            if value is not None and not key.startswith("sourceMap")
        )
    )
    return SchemaBundle(v1=v1, source_references=source_references, versions=versions)


def load_bundle(data: Union[str, bytes]) -> SchemaBundle:
    """
    Parse a UTF-8 bundle document.

    Args:
        data: Bundle JSON text

    Returns:
        The parsed SchemaBundle

    Raises:
        BundleFormatError: If the text is not valid JSON or has the wrong shape
    """
    if isinstance(data, bytes):
        try:
            data = data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise BundleFormatError("Bundle is not valid UTF-8", "$", e) from e

    try:
        document = json.loads(data)
    except json.JSONDecodeError as e:
        raise BundleFormatError(f"Invalid bundle JSON: {e}", "$", e) from e

    bundle = convert_bundle(document)
    if bundle.v1 is not None:
        logger.debug(
            "Loaded bundle: %d enums, %d types, %d components",
            len(bundle.v1.enum_definitions),
            len(bundle.v1.type_definitions),
            len(bundle.v1.component_definitions),
        )
    return bundle


def component_fields(
    bundle: SchemaBundleV1, component: ComponentDefinition
) -> Tuple[FieldDefinition, ...]:
    """Fields of a component, following a data definition reference if needed."""
    if isinstance(component.data_definition, InlineData):
        return component.data_definition.field_definitions
    return bundle.get_referenced_type(component.data_definition.type_reference).field_definitions


def iter_value_types(field_type: FieldTypeDefinition) -> List[ValueTypeReference]:
    """Value type references used by a field type."""
    if isinstance(field_type, SingularType):
        return [field_type.value_type]
    if isinstance(field_type, (OptionalType, ListType)):
        return [field_type.inner_type]
    return [field_type.key_type, field_type.value_type]
