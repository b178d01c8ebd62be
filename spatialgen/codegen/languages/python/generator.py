"""
Python code generator implementation.

Generates a single Python module from a schema bundle: enums, dataclass
records, component updates and command unions, all serializing into
spatialgen.runtime schema objects. Schema namespaces become nested
namespace classes.
"""

from dataclasses import dataclass
from typing import Dict, List, Any, Optional, Tuple
from pathlib import Path

from ...core.bundle import (
    ComponentDefinition,
    EnumDefinition,
    EnumReference,
    FieldDefinition,
    Identifier,
    InlineData,
    ListType,
    OptionalType,
    PrimitiveReference,
    PrimitiveType,
    SchemaBundle,
    SchemaBundleV1,
    SingularType,
    TypeDefinition,
    ValueTypeReference,
    component_fields,
)
from ...core.config import GeneratorConfig
from ...core.generator import CodeGenerator, select_package
from ...core.identifiers import (
    EnumReferenceResolver,
    IdentifierResolver,
    TypeReferenceResolver,
)
from ...core.module_tree import ModuleTree
from ...core.naming import NamingCase, to_snake_case
from ...core.templates import escape_docstring
from ....logging_config import get_logger
from .config import PythonConfig
from .naming import (
    create_enum_value_sanitizer,
    create_member_sanitizer,
    create_python_sanitizer,
    create_variant_sanitizer,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class ValueCodec:
    """Source snippets describing how one value type is stored."""

    annotation: str
    decode: str
    encode: str
    # Callable producing the default value, evaluated when called
    factory: str
    # Dataclass default, evaluated while the class body executes
    default: str
    is_object: bool = False


def _qualified_name(definition) -> str:
    return definition.identifier.qualified_name


def _join(prefix: str, name: str) -> str:
    return f"{prefix}.{name}" if prefix else name


def split_prelude(lines: List[str]) -> Tuple[List[str], List[str]]:
    """
    Split prelude lines into import statements and namespace lines.

    Imports bound inside a namespace class are invisible to the methods of
    its nested classes, so they are placed at module scope instead.

    Returns:
        Tuple of (unique import statements, remaining lines)
    """
    imports: List[str] = []
    others: List[str] = []
    for line in lines:
        statement = line.strip()
        if statement.startswith(("import ", "from ")):
            if statement not in imports:
                imports.append(statement)
        else:
            others.append(line)
    return imports, others


class PythonGenerator(CodeGenerator):
    """Code generator for Python modules built on spatialgen.runtime."""

    def __init__(self, config: Optional[GeneratorConfig] = None):
        """Initialize Python generator with configuration."""
        super().__init__(config)

        # Initialize naming
        self.sanitizer = create_python_sanitizer()
        self.member_sanitizer = create_member_sanitizer()
        self.enum_value_sanitizer = create_enum_value_sanitizer()
        self.variant_sanitizer = create_variant_sanitizer()

        # Initialize Python-specific configuration
        self.python_config = PythonConfig(**self.config.custom)

        # Per-generation state
        self.resolver: Optional[IdentifierResolver] = None
        self._bundle: Optional[SchemaBundleV1] = None
        self._source_references: Dict[str, Any] = {}
        self._types: Optional[TypeReferenceResolver] = None
        self._enums: Optional[EnumReferenceResolver] = None
        self._enum_values: Dict[str, List[Tuple[str, int]]] = {}

    @property
    def language_name(self) -> str:
        """Return the language name."""
        return "python"

    @property
    def file_extension(self) -> str:
        """Return Python file extension."""
        return ".py"

    def get_template_directory(self) -> Path:
        """Return the Python templates directory."""
        return Path(__file__).parent / "templates"

    def generate(self, bundle: SchemaBundle) -> str:
        """Generate the Python module for the configured package."""
        v1 = bundle.require_v1()
        self._reset(bundle, v1)

        contents = select_package(v1, self.config.package)
        logger.info(
            f"Generating package '{self.config.package}': "
            f"{len(contents.enums)} enums, {len(contents.types)} types, "
            f"{len(contents.components)} components"
        )

        prelude_imports, namespace_prelude = split_prelude(self.config.prelude)
        tree = ModuleTree(namespace_prelude)

        for enum_def in sorted(contents.enums, key=_qualified_name):
            self._emit_enum(tree, enum_def)

        for type_def in sorted(contents.types, key=_qualified_name):
            self._emit_type(tree, type_def)

        components = [
            self._emit_component(tree, component)
            for component in sorted(contents.components, key=_qualified_name)
        ]

        body = tree.render()

        context = {
            "header": self.python_config.header,
            "package": self.config.package,
            "imports": self.python_config.get_required_imports(
                self.resolver.import_aliases
            )
            + prelude_imports,
            "runtime_module": self.config.runtime_module,
            "body": body,
            "components": components,
            "generate_registry": self.python_config.generate_registry,
        }

        return self.render_template("module.py.j2", context)

    def _reset(self, bundle: SchemaBundle, v1: SchemaBundleV1):
        """Reset state for a new generation pass."""
        self.sanitizer.reset_used_names()
        self.resolver = IdentifierResolver(
            self.sanitizer, self.config.package, self.config.dependencies
        )
        self._bundle = v1
        self._source_references = dict(bundle.source_references)
        self._types = TypeReferenceResolver(v1)
        self._enums = EnumReferenceResolver(v1)
        self._enum_values = {}

    # Emitters

    def _emit_enum(self, tree: ModuleTree, enum_def: EnumDefinition):
        identifier = enum_def.identifier
        context = {
            "class_name": self.resolver.declaration_name(identifier),
            "path": self.resolver.local_path(identifier),
            "qualified_name": identifier.qualified_name,
            "docstring": self._docstring(identifier, "Enum"),
            "values": [
                {"name": name, "value": value}
                for name, value in self._enum_value_names(enum_def)
            ],
        }

        module = tree.get_or_create(self.resolver.module_path(identifier))
        module.add(self.render_template("enum.py.j2", context))
        logger.debug(f"Emitted enum {identifier.qualified_name}")

    def _emit_type(self, tree: ModuleTree, type_def: TypeDefinition):
        identifier = type_def.identifier
        field_names, _ = self._member_names(type_def.field_definitions)

        context = {
            "class_name": self.resolver.declaration_name(identifier),
            "path": self.resolver.local_path(identifier),
            "docstring": self._docstring(identifier, "Type"),
            "fields": [
                self._field_context(field_def, name)
                for field_def, name in zip(type_def.field_definitions, field_names)
            ],
            "component": None,
        }

        module = tree.get_or_create(self.resolver.module_path(identifier))
        module.add(self.render_template("record.py.j2", context))
        logger.debug(f"Emitted type {identifier.qualified_name}")

    def _emit_component(self, tree: ModuleTree, component: ComponentDefinition) -> str:
        """Emit a component with its companions and return its module path."""
        identifier = component.identifier
        name = self.resolver.declaration_name(identifier)
        prefix = ".".join(self.resolver.module_path(identifier))
        path = _join(prefix, name)

        field_defs = component_fields(self._bundle, component)
        events = sorted(component.event_definitions, key=lambda e: e.event_index)
        commands = sorted(component.command_definitions, key=lambda c: c.command_index)

        field_names, event_names = self._member_names(
            field_defs, [event.identifier.name for event in events]
        )
        fields = [
            self._field_context(field_def, field_name)
            for field_def, field_name in zip(field_defs, field_names)
        ]

        update_path = _join(prefix, f"{name}Update")
        request_path = _join(prefix, f"{name}CommandRequest")
        response_path = _join(prefix, f"{name}CommandResponse")

        record = {
            "class_name": name,
            "path": path,
            "docstring": self._docstring(identifier, "Component"),
            "fields": fields,
            "component": {
                "component_id": component.component_id,
                "update_path": update_path,
                "request_path": request_path,
                "response_path": response_path,
            },
        }

        update = {
            "class_name": f"{name}Update",
            "path": update_path,
            "docstring": (
                f"Partial update of {path}." if self.config.add_comments else None
            ),
            "component_id": component.component_id,
            "fields": fields,
            "events": [
                self._event_context(event, event_name)
                for event, event_name in zip(events, event_names)
            ],
        }

        variant_sanitizer = self.variant_sanitizer.fork()
        variant_names = [
            variant_sanitizer.sanitize_name(
                command.identifier.name,
                NamingCase.PASCAL_CASE,
                check_builtins=False,
                unique=True,
            )
            for command in commands
        ]

        module = tree.get_or_create(self.resolver.module_path(identifier))
        module.add(self.render_template("record.py.j2", record))
        module.add(self.render_template("update.py.j2", update))

        for kind, union_path in (("request", request_path), ("response", response_path)):
            union = {
                "class_name": union_path.rsplit(".", 1)[-1],
                "qualified_name": identifier.qualified_name,
                "component_id": component.component_id,
                "kind": kind,
                "docstring": (
                    f"Command {kind}s of {path}." if self.config.add_comments else None
                ),
                "variants": [
                    self._variant_context(
                        command.request_type if kind == "request" else command.response_type,
                        variant_name,
                        command.command_index,
                        union_path,
                    )
                    for command, variant_name in zip(commands, variant_names)
                ],
            }
            module.add(self.render_template("commands.py.j2", union))

        logger.debug(
            f"Emitted component {identifier.qualified_name} "
            f"(id {component.component_id}, {len(fields)} fields, "
            f"{len(events)} events, {len(commands)} commands)"
        )
        return path

    # Context builders

    def _member_names(
        self, field_defs, extra_names: Optional[List[str]] = None
    ) -> Tuple[List[str], List[str]]:
        """Attribute names for fields, then for extra members such as events."""
        sanitizer = self.member_sanitizer.fork()
        field_names = [
            sanitizer.sanitize_name(
                field_def.identifier.name, NamingCase.SNAKE_CASE, unique=True
            )
            for field_def in field_defs
        ]
        other_names = [
            sanitizer.sanitize_name(name, NamingCase.SNAKE_CASE, unique=True)
            for name in extra_names or []
        ]
        return field_names, other_names

    def _enum_value_names(self, enum_def: EnumDefinition) -> List[Tuple[str, int]]:
        """Member names and values of an enum, computed once per enum."""
        key = enum_def.identifier.qualified_name
        if key not in self._enum_values:
            sanitizer = self.enum_value_sanitizer.fork()
            self._enum_values[key] = [
                (
                    sanitizer.sanitize_name(
                        value_def.identifier.name,
                        NamingCase.PRESERVE,
                        check_builtins=False,
                        unique=True,
                    ),
                    value_def.value,
                )
                for value_def in enum_def.value_definitions
            ]
        return self._enum_values[key]

    def _value_codec(self, value_type: ValueTypeReference) -> ValueCodec:
        """Describe how a value type is annotated, defaulted and encoded."""
        if isinstance(value_type, PrimitiveReference):
            if value_type.primitive == PrimitiveType.ENTITY_ID:
                return ValueCodec(
                    annotation="runtime.EntityId",
                    decode="runtime.EntityId",
                    encode="runtime.EntityId.as_i64",
                    factory="runtime.EntityId",
                    default="runtime.EntityId(0)",
                )
            python_type = self.python_config.get_python_type(value_type.primitive)
            return ValueCodec(
                annotation=python_type,
                decode="runtime.identity",
                encode="runtime.identity",
                factory=python_type,
                default=self.python_config.get_zero_value(value_type.primitive),
            )

        if isinstance(value_type, EnumReference):
            enum_def = self._enums.resolve(value_type.qualified_name)
            path = self.resolver.resolve(enum_def.identifier)
            values = self._enum_value_names(enum_def)
            factory = f"lambda: {path}.{values[0][0]}" if values else "lambda: None"
            return ValueCodec(
                annotation=path,
                decode=f"{path}.from_u32",
                encode=f"{path}.as_u32",
                factory=factory,
                default=f"dataclasses.field(default_factory={factory})",
            )

        type_def = self._types.resolve(value_type.qualified_name)
        path = self.resolver.resolve(type_def.identifier)
        return ValueCodec(
            annotation=path,
            decode=f"{path}.from_object",
            encode=f"{path}.to_object",
            factory=path,
            default=f"dataclasses.field(default_factory=lambda: {path}())",
            is_object=True,
        )

    def _field_context(self, field_def: FieldDefinition, name: str) -> Dict[str, Any]:
        """Generate field data for templates."""
        field_id = field_def.field_id
        ty = field_def.ty

        if isinstance(ty, SingularType):
            codec = self._value_codec(ty.value_type)
            annotation = codec.annotation
            default = codec.default
            read = f"runtime.read(obj, {field_id}, {codec.decode}, {codec.factory})"
            write = f"runtime.write(obj, {field_id}, self.{name}, {codec.encode})"
            update_annotation = f"typing.Optional[{annotation}]"
            update_read = f"runtime.read_update(update, {field_id}, {codec.decode})"
            update_write = (
                f"runtime.write_update(update, {field_id}, self.{name}, {codec.encode})"
            )
        elif isinstance(ty, OptionalType):
            codec = self._value_codec(ty.inner_type)
            annotation = f"typing.Optional[{codec.annotation}]"
            default = "None"
            read = f"runtime.read_option(obj, {field_id}, {codec.decode})"
            write = f"runtime.write_option(obj, {field_id}, self.{name}, {codec.encode})"
            update_annotation = f"typing.Union[{codec.annotation}, runtime.Cleared, None]"
            update_read = f"runtime.read_update_option(update, {field_id}, {codec.decode})"
            update_write = (
                f"runtime.write_update_option(update, {field_id}, self.{name}, "
                f"{codec.encode})"
            )
        elif isinstance(ty, ListType):
            codec = self._value_codec(ty.inner_type)
            annotation = f"typing.List[{codec.annotation}]"
            default = "dataclasses.field(default_factory=list)"
            read = f"runtime.read_list(obj, {field_id}, {codec.decode})"
            write = f"runtime.write_list(obj, {field_id}, self.{name}, {codec.encode})"
            update_annotation = f"typing.Optional[{annotation}]"
            update_read = f"runtime.read_update_list(update, {field_id}, {codec.decode})"
            update_write = (
                f"runtime.write_update_list(update, {field_id}, self.{name}, "
                f"{codec.encode})"
            )
        else:
            key = self._value_codec(ty.key_type)
            value = self._value_codec(ty.value_type)
            annotation = f"typing.Dict[{key.annotation}, {value.annotation}]"
            default = "dataclasses.field(default_factory=dict)"
            read = f"runtime.read_map(obj, {field_id}, {key.decode}, {value.decode})"
            write = (
                f"runtime.write_map(obj, {field_id}, self.{name}, "
                f"{key.encode}, {value.encode})"
            )
            update_annotation = f"typing.Optional[{annotation}]"
            update_read = (
                f"runtime.read_update_map(update, {field_id}, "
                f"{key.decode}, {value.decode})"
            )
            update_write = (
                f"runtime.write_update_map(update, {field_id}, self.{name}, "
                f"{key.encode}, {value.encode})"
            )

        return {
            "name": name,
            "schema_name": field_def.identifier.name,
            "field_id": field_id,
            "transient": field_def.transient,
            "annotation": annotation,
            "default": default,
            "read": read,
            "write": write,
            "update_annotation": update_annotation,
            "update_read": update_read,
            "update_write": update_write,
        }

    def _event_context(self, event, name: str) -> Dict[str, Any]:
        codec = self._value_codec(event.value_type)
        return {
            "name": name,
            "event_index": event.event_index,
            "annotation": codec.annotation,
            "read": f"runtime.read_events(update, {event.event_index}, {codec.decode})",
            "write": (
                f"runtime.write_events(update, {event.event_index}, self.{name}, "
                f"{codec.encode})"
            ),
        }

    def _variant_context(
        self,
        payload_type: ValueTypeReference,
        name: str,
        command_index: int,
        union_path: str,
    ) -> Dict[str, Any]:
        codec = self._value_codec(payload_type)
        if codec.is_object:
            read = f"{codec.decode}(obj)"
        else:
            # Non-object payloads travel in field 1 of the command object
            read = f"runtime.read(obj, 1, {codec.decode}, {codec.factory})"

        return {
            "name": name,
            "path": f"{union_path}.{name}",
            "command_index": command_index,
            "annotation": codec.annotation,
            "default": codec.default,
            "read": read,
            "encode": codec.encode,
            "is_object": codec.is_object,
        }

    def _docstring(self, identifier: Identifier, kind: str) -> Optional[str]:
        """Class docstring naming the schema entity, if comments are enabled."""
        if not self.config.add_comments:
            return None

        text = f"{kind} {identifier.qualified_name}."
        if self.python_config.source_locations:
            reference = self._source_references.get(identifier.qualified_name)
            if reference is not None:
                text += (
                    f"\n\nDefined at {reference.file_path}:"
                    f"{reference.line}:{reference.column}."
                )
        return escape_docstring(text)

    def validate_bundle(self, bundle: SchemaBundleV1) -> List[str]:
        """Validate a bundle for Python generation."""
        warnings = super().validate_bundle(bundle)
        contents = select_package(bundle, self.config.package)

        # Report fields whose attribute name differs from the schema name
        definitions = [
            (type_def.identifier.qualified_name, type_def.field_definitions)
            for type_def in contents.types
        ]
        definitions.extend(
            (component.identifier.qualified_name, component.data_definition.field_definitions)
            for component in contents.components
            if isinstance(component.data_definition, InlineData)
        )

        for owner, field_defs in definitions:
            names, _ = self._member_names(field_defs)
            for field_def, name in zip(field_defs, names):
                if name != to_snake_case(field_def.identifier.name):
                    warnings.append(
                        f"Field {owner}.{field_def.identifier.name} renamed to {name}"
                    )

        return warnings


# Factory functions
def create_python_generator(
    config: Optional[GeneratorConfig] = None, **custom: Any
) -> PythonGenerator:
    """Create a Python generator, with custom options merged into config."""
    if config is None:
        config = GeneratorConfig()
    if custom:
        config.custom = {**config.custom, **custom}
    return PythonGenerator(config)
