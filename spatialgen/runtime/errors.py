"""Exceptions raised by generated code and the runtime support library."""


class DispatchError(Exception):
    """A message could not be routed to generated code.

    Dispatch errors are recoverable: the caller can drop the message and
    carry on.
    """

    pass


class UnknownCommandError(DispatchError):
    """A command index is not declared by the component."""

    def __init__(self, component: str, component_id: int, command_index: int,
                 kind: str = "request"):
        self.component = component
        self.component_id = component_id
        self.command_index = command_index
        self.kind = kind
        super().__init__(
            f"Unknown command {kind} index {command_index} "
            f"for component {component} (id {component_id})"
        )


class UnknownComponentError(DispatchError):
    """No component class is registered for a component id."""

    def __init__(self, component_id: int):
        self.component_id = component_id
        super().__init__(f"No component registered for id {component_id}")


class ComponentRegistrationError(DispatchError):
    """A different component class already owns the component id."""

    pass


class SchemaDriftError(RuntimeError):
    """Data on the wire does not match the schema the code was generated from.

    Unlike DispatchError this is not meant to be handled: the generated code
    is out of date and the program should stop.
    """

    pass


class UnknownEnumValueError(SchemaDriftError):
    """An enum field carries a value the enum does not declare."""

    def __init__(self, enum_name: str, value: int):
        self.enum_name = enum_name
        self.value = value
        super().__init__(f"Unknown value {value} for enum {enum_name}")
