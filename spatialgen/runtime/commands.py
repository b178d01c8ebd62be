"""
Command unions and the component base class used by generated code.
"""

from typing import Any, Dict, Tuple, Type

from .errors import UnknownCommandError
from .schema import (
    CommandRequest,
    CommandResponse,
    ComponentData,
    ComponentUpdate,
    SchemaObject,
)


class CommandUnion:
    """
    Base class of the generated command request and response unions.

    Subclasses declare VARIANTS, mapping command index to the nested variant
    class. INDICES, the reverse mapping, is derived when the subclass is
    created. Variants provide from_object/to_object.
    """

    COMPONENT_NAME = ""
    COMPONENT_ID = 0
    KIND = "request"
    VARIANTS: Dict[int, type] = {}
    INDICES: Dict[type, int] = {}

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        cls.INDICES = {variant: index for index, variant in cls.VARIANTS.items()}

    @classmethod
    def decode(cls, command_index: int, fields: SchemaObject) -> Any:
        """
        Decode the variant for a command index.

        Raises:
            UnknownCommandError: If the component declares no such command
        """
        variant = cls.VARIANTS.get(command_index)
        if variant is None:
            raise UnknownCommandError(
                cls.COMPONENT_NAME, cls.COMPONENT_ID, command_index, cls.KIND
            )
        return variant.from_object(fields)

    @classmethod
    def index_of(cls, command: Any) -> int:
        """Command index of a variant instance."""
        index = cls.INDICES.get(type(command))
        if index is None:
            raise TypeError(
                f"{type(command).__name__} is not a command {cls.KIND} "
                f"of {cls.COMPONENT_NAME}"
            )
        return index

    @classmethod
    def encode(cls, command: Any) -> Tuple[int, SchemaObject]:
        """Encode a variant instance as (command index, fields)."""
        return cls.index_of(command), command.to_object()


class Component:
    """
    Base class of generated component records.

    Subclasses set COMPONENT_ID, implement from_object/to_object and expose
    their companion classes through update_type, command_request_type and
    command_response_type.
    """

    COMPONENT_ID = 0

    @staticmethod
    def update_type() -> Type[Any]:
        raise NotImplementedError

    @staticmethod
    def command_request_type() -> Type[CommandUnion]:
        raise NotImplementedError

    @staticmethod
    def command_response_type() -> Type[CommandUnion]:
        raise NotImplementedError

    @classmethod
    def from_data(cls, data: ComponentData) -> "Component":
        return cls.from_object(data.fields)

    def to_data(self) -> ComponentData:
        return ComponentData(self.COMPONENT_ID, self.to_object())

    @classmethod
    def from_update(cls, update: ComponentUpdate) -> Any:
        return cls.update_type().from_update(update)

    @classmethod
    def to_update(cls, update: Any) -> ComponentUpdate:
        return update.to_update()

    @classmethod
    def from_request(cls, request: CommandRequest) -> Any:
        return cls.command_request_type().decode(request.command_index, request.fields)

    @classmethod
    def to_request(cls, command: Any) -> CommandRequest:
        index, fields = cls.command_request_type().encode(command)
        return CommandRequest(cls.COMPONENT_ID, index, fields)

    @classmethod
    def from_response(cls, response: CommandResponse) -> Any:
        return cls.command_response_type().decode(
            response.command_index, response.fields
        )

    @classmethod
    def to_response(cls, command: Any) -> CommandResponse:
        index, fields = cls.command_response_type().encode(command)
        return CommandResponse(cls.COMPONENT_ID, index, fields)

    @classmethod
    def get_request_command_index(cls, command: Any) -> int:
        return cls.command_request_type().index_of(command)

    @classmethod
    def get_response_command_index(cls, command: Any) -> int:
        return cls.command_response_type().index_of(command)
