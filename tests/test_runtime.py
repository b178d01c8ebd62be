"""Tests for the runtime support library."""

import dataclasses

import pytest

from spatialgen import runtime


class TestSchemaObject:
    def test_fields(self):
        obj = runtime.SchemaObject()
        obj.add(2, "a")
        obj.add(2, "b")
        nested = obj.add_object(1)
        nested.add(1, 5)

        assert obj.count(2) == 2
        assert obj.get(2) == "b"
        assert obj.values(2) == ["a", "b"]
        assert obj.get(3, "missing") == "missing"
        assert obj.field_ids() == [1, 2]
        assert obj.get(1).get(1) == 5

    def test_equality(self):
        first, second = runtime.SchemaObject(), runtime.SchemaObject()
        first.add(1, 1)
        assert first != second
        second.add(1, 1)
        assert first == second


def test_entity_id():
    assert runtime.EntityId(5).as_i64() == 5
    assert runtime.EntityId(5).is_valid()
    assert not runtime.EntityId().is_valid()
    assert runtime.EntityId(1) < runtime.EntityId(2)
    assert str(runtime.EntityId(3)) == "EntityId(3)"


def test_cleared_is_singleton():
    assert runtime.Cleared() is runtime.CLEARED
    assert repr(runtime.CLEARED) == "CLEARED"


class TestFieldHelpers:
    def test_read_default(self):
        obj = runtime.SchemaObject()
        assert runtime.read(obj, 1, runtime.identity, int) == 0

        runtime.write(obj, 1, 7, runtime.identity)
        assert runtime.read(obj, 1, runtime.identity, int) == 7

    def test_option(self):
        obj = runtime.SchemaObject()
        runtime.write_option(obj, 1, None, runtime.identity)
        assert runtime.read_option(obj, 1, runtime.identity) is None

        runtime.write_option(obj, 1, "x", runtime.identity)
        assert runtime.read_option(obj, 1, runtime.identity) == "x"

    def test_map_order_and_round_trip(self):
        obj = runtime.SchemaObject()
        values = {runtime.EntityId(3): "c", runtime.EntityId(1): "a"}

        runtime.write_map(obj, 4, values, runtime.EntityId.as_i64, runtime.identity)

        assert [entry.get(1) for entry in obj.values(4)] == [1, 3]
        assert runtime.read_map(obj, 4, runtime.EntityId, runtime.identity) == values


class TestUpdateHelpers:
    def test_singular(self):
        update = runtime.ComponentUpdate(1)
        assert runtime.read_update(update, 1, runtime.identity) is None

        runtime.write_update(update, 1, 0, runtime.identity)
        assert runtime.read_update(update, 1, runtime.identity) == 0

    def test_option_cleared(self):
        update = runtime.ComponentUpdate(1)
        runtime.write_update_option(update, 2, runtime.CLEARED, runtime.identity)

        assert update.cleared_fields == {2}
        assert runtime.read_update_option(update, 2, runtime.identity) is runtime.CLEARED

    def test_empty_list_clears(self):
        update = runtime.ComponentUpdate(1)
        runtime.write_update_list(update, 3, [], runtime.identity)
        runtime.write_update_list(update, 4, None, runtime.identity)
        runtime.write_update_map(update, 5, {}, runtime.identity, runtime.identity)

        assert update.cleared_fields == {3, 5}
        assert runtime.read_update_list(update, 3, runtime.identity) == []
        assert runtime.read_update_list(update, 4, runtime.identity) is None
        assert runtime.read_update_map(update, 5, runtime.identity, runtime.identity) == {}

    def test_events(self):
        update = runtime.ComponentUpdate(1)
        runtime.write_events(update, 1, [1, 2], runtime.identity)

        assert runtime.read_events(update, 1, runtime.identity) == [1, 2]
        assert runtime.read_events(update, 2, runtime.identity) == []
        assert update.fields.field_ids() == []

    @pytest.mark.parametrize(
        "current, incoming, expected",
        [(1, None, 1), (1, 5, 5), ("x", runtime.CLEARED, None), ([1], [], [])],
    )
    def test_merge_field(self, current, incoming, expected):
        assert runtime.merge_field(current, incoming) == expected

    def test_merge_update_field(self):
        assert runtime.merge_update_field(1, None) == 1
        assert runtime.merge_update_field(1, runtime.CLEARED) is runtime.CLEARED

    def test_merged_values_are_copies(self):
        incoming = {"a": [1, 2]}

        merged = runtime.merge_field({}, incoming)
        incoming["a"].append(3)

        assert merged == {"a": [1, 2]}
        assert runtime.merge_update_field(None, incoming)["a"] is not incoming["a"]

    def test_merge_events_appends_copies(self):
        current = [[1]]
        incoming = [[2], [3]]

        runtime.merge_events(current, incoming)
        incoming[0].append(99)

        assert current == [[1], [2], [3]]


@dataclasses.dataclass
class Ping:
    payload: int = 0

    @classmethod
    def from_object(cls, obj):
        return cls(runtime.read(obj, 1, runtime.identity, int))

    def to_object(self):
        obj = runtime.SchemaObject()
        runtime.write(obj, 1, self.payload, runtime.identity)
        return obj


class PingRequests(runtime.CommandUnion):
    COMPONENT_NAME = "test.Pinger"
    COMPONENT_ID = 10
    VARIANTS = {3: Ping}


@dataclasses.dataclass
class Pinger(runtime.Component):
    COMPONENT_ID = 10

    @classmethod
    def from_object(cls, obj):
        return cls()

    def to_object(self):
        return runtime.SchemaObject()

    @staticmethod
    def command_request_type():
        return PingRequests


class TestCommandUnion:
    def test_indices_derived(self):
        assert PingRequests.INDICES == {Ping: 3}
        assert runtime.CommandUnion.INDICES == {}

    def test_encode_decode(self):
        index, fields = PingRequests.encode(Ping(4))
        assert index == 3
        assert PingRequests.decode(index, fields) == Ping(4)

    def test_unknown_index(self):
        with pytest.raises(runtime.UnknownCommandError) as exc_info:
            PingRequests.decode(9, runtime.SchemaObject())

        error = exc_info.value
        assert (error.component, error.component_id, error.command_index) == (
            "test.Pinger",
            10,
            9,
        )
        assert "request index 9" in str(error)

    def test_component_dispatch(self):
        request = Pinger.to_request(Ping(1))

        assert request == runtime.CommandRequest(10, 3, Ping(1).to_object())
        assert Pinger.from_request(request) == Ping(1)
        assert Pinger.get_request_command_index(Ping(2)) == 3

    def test_missing_companion(self):
        with pytest.raises(NotImplementedError):
            Pinger.from_update(runtime.ComponentUpdate(10))


class TestComponentRegistry:
    def test_register_once(self):
        registry = runtime.ComponentRegistry()
        registry.register(Pinger)
        registry.register(Pinger)

        assert len(registry) == 1
        assert 10 in registry
        assert list(registry) == [Pinger]

    def test_conflicting_id(self):
        class Other(runtime.Component):
            COMPONENT_ID = 10

        registry = runtime.ComponentRegistry()
        registry.register(Pinger)

        with pytest.raises(runtime.ComponentRegistrationError):
            registry.register(Other)

    def test_unknown_component(self):
        with pytest.raises(runtime.UnknownComponentError) as exc_info:
            runtime.ComponentRegistry().get(77)

        assert exc_info.value.component_id == 77
        assert isinstance(exc_info.value, runtime.DispatchError)

    def test_decode_request(self):
        registry = runtime.ComponentRegistry()
        registry.register(Pinger)

        request = runtime.CommandRequest(10, 3, Ping(8).to_object())
        assert registry.decode_request(request) == Ping(8)
        assert registry.decode_data(runtime.ComponentData(10)) == Pinger()
