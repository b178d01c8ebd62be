"""
Registry of component classes keyed by component id.

Generated modules expose register_components(registry), which adds every
component they define to a registry owned by the caller.
"""

from typing import Any, Dict, Iterator, List, Type

from .commands import Component
from .errors import ComponentRegistrationError, UnknownComponentError
from .schema import CommandRequest, CommandResponse, ComponentData, ComponentUpdate


class ComponentRegistry:
    """Maps component ids to generated component classes."""

    def __init__(self):
        self._components: Dict[int, Type[Component]] = {}

    def register(self, component: Type[Component]) -> None:
        """
        Register a component class under its COMPONENT_ID.

        Registering the same class twice is a no-op.

        Raises:
            ComponentRegistrationError: If another class owns the id
        """
        component_id = component.COMPONENT_ID
        existing = self._components.get(component_id)
        if existing is component:
            return
        if existing is not None:
            raise ComponentRegistrationError(
                f"Component id {component_id} is already registered to "
                f"{existing.__qualname__}, cannot register {component.__qualname__}"
            )
        self._components[component_id] = component

    def get(self, component_id: int) -> Type[Component]:
        """
        Component class for an id.

        Raises:
            UnknownComponentError: If nothing is registered under the id
        """
        try:
            return self._components[component_id]
        except KeyError:
            raise UnknownComponentError(component_id) from None

    def component_ids(self) -> List[int]:
        return sorted(self._components)

    def __contains__(self, component_id: int) -> bool:
        return component_id in self._components

    def __len__(self) -> int:
        return len(self._components)

    def __iter__(self) -> Iterator[Type[Component]]:
        for component_id in self.component_ids():
            yield self._components[component_id]

    # Dispatch by component id

    def decode_data(self, data: ComponentData) -> Any:
        return self.get(data.component_id).from_data(data)

    def decode_update(self, update: ComponentUpdate) -> Any:
        return self.get(update.component_id).from_update(update)

    def decode_request(self, request: CommandRequest) -> Any:
        return self.get(request.component_id).from_request(request)

    def decode_response(self, response: CommandResponse) -> Any:
        return self.get(response.component_id).from_response(response)
