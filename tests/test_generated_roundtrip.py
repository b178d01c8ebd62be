"""Round trips through the code generated for the sample bundle."""

import importlib
import sys

import pytest

from spatialgen import runtime
from spatialgen.codegen import generate


class TestRecords:
    def test_defaults(self, example):
        value = example.example.Everything()

        assert value.count == 0
        assert value.name == ""
        assert value.owner == runtime.EntityId(0)
        assert value.color is example.example.Color.RED
        assert value.position == example.example.Vec(0.0, 0.0)
        assert value.nickname is None
        assert value.tags == []
        assert value.scores == {}
        assert value.waypoints == []
        assert value.id_ == 0
        assert value.flag is False
        assert value.data == b""
        assert value.favorite is None
        assert value.inner is None

    def test_missing_fields_decode_to_defaults(self, example):
        decoded = example.example.Everything.from_object(runtime.SchemaObject())
        assert decoded == example.example.Everything()

    def test_full_round_trip(self, example):
        ns = example.example
        value = ns.Everything(
            count=-7,
            name="crate",
            owner=runtime.EntityId(42),
            color=ns.Color.GREEN,
            position=ns.Vec(1.5, -2.0),
            nickname="box",
            tags=["a", "b", "c"],
            scores={"b": 2, "a": 1},
            waypoints=[ns.Vec(0.0, 1.0), ns.Vec(2.0, 3.0)],
            id_=2 ** 40,
            flag=True,
            data=b"\x00\x01",
            favorite=ns.Color.RED,
            inner=ns.sub.Inner(value=9),
        )

        obj = value.to_object()

        assert ns.Everything.from_object(obj) == value
        assert obj.get(3) == 42
        assert obj.get(4) == 1
        assert obj.get(10) == 2 ** 40

    @pytest.mark.parametrize("tags", [[], ["one"], ["x", "y", "z"]])
    def test_list_lengths(self, example, tags):
        value = example.example.Everything(tags=tags)
        obj = value.to_object()

        assert obj.count(7) == len(tags)
        assert example.example.Everything.from_object(obj).tags == tags

    def test_absent_option_writes_nothing(self, example):
        obj = example.example.Everything(nickname=None).to_object()
        assert obj.count(6) == 0

        obj = example.example.Everything(nickname="n").to_object()
        assert obj.values(6) == ["n"]

    def test_map_entries_sorted_by_key(self, example):
        obj = example.example.Everything(scores={"b": 2, "c": 3, "a": 1}).to_object()

        entries = obj.values(8)
        assert [entry.get(1) for entry in entries] == ["a", "b", "c"]
        assert [entry.get(2) for entry in entries] == [1, 2, 3]

    def test_nested_type_stored_as_object(self, example):
        obj = example.example.Everything(position=example.example.Vec(3.0, 4.0)).to_object()

        nested = obj.get(5)
        assert isinstance(nested, runtime.SchemaObject)
        assert nested.get(1) == 3.0
        assert nested.get(2) == 4.0

    def test_unknown_enum_value_is_fatal(self, example):
        obj = runtime.SchemaObject()
        obj.add(4, 7)

        with pytest.raises(runtime.UnknownEnumValueError) as exc_info:
            example.example.Everything.from_object(obj)

        assert exc_info.value.enum_name == "example.Color"
        assert exc_info.value.value == 7
        assert isinstance(exc_info.value, runtime.SchemaDriftError)
        assert not isinstance(exc_info.value, runtime.DispatchError)


class TestEnums:
    def test_values(self, example):
        color = example.example.Color
        assert [member.name for member in color] == ["RED", "GREEN"]
        assert color.from_u32(1) is color.GREEN
        assert color.GREEN.as_u32() == 1


class TestComponents:
    def test_component_data_round_trip(self, example):
        ns = example.example
        health = ns.Health(current=3, maximum=10, label="ok", buffs=[1, 2])

        data = health.to_data()

        assert data.component_id == 1000
        assert ns.Health.from_data(data) == health

    def test_data_definition_component(self, example):
        ns = example.example
        position = ns.Position(x=1.0, y=2.0)

        data = position.to_data()

        assert ns.Position.COMPONENT_ID == 54
        assert data.component_id == 54
        assert ns.Position.from_data(data) == position
        assert ns.PositionUpdate(x=5.0).to_update().fields.get(1) == 5.0

    def test_merge_replaces_present_fields(self, example):
        ns = example.example
        health = ns.Health(current=1, maximum=2)

        health.merge(ns.HealthUpdate(current=5, maximum=None))

        assert health.current == 5
        assert health.maximum == 2

    def test_merge_clears_option_and_collections(self, example):
        ns = example.example
        health = ns.Health(label="hurt", buffs=[1, 2, 3])

        health.merge(ns.HealthUpdate(label=runtime.CLEARED, buffs=[]))

        assert health.label is None
        assert health.buffs == []

    def test_merge_does_not_share_values(self, example):
        ns = example.example
        health = ns.Health()
        update = ns.HealthUpdate(buffs=[1, 2])

        health.merge(update)
        update.buffs.append(99)

        assert health.buffs == [1, 2]

    def test_update_merge_does_not_share_values(self, example):
        ns = example.example
        first = ns.HealthUpdate()
        second = ns.HealthUpdate(buffs=[3], healed=[ns.Vec(1.0, 1.0)])

        first.merge(second)
        second.buffs.append(4)
        second.healed[0].x = 9.0

        assert first.buffs == [3]
        assert first.healed == [ns.Vec(1.0, 1.0)]

    def test_update_round_trip(self, example):
        ns = example.example
        update = ns.HealthUpdate(
            current=5,
            label=runtime.CLEARED,
            buffs=[],
            hit=[1, 2],
            healed=[ns.Vec(1.0, 1.0)],
        )

        wire = ns.Health.to_update(update)

        assert wire.component_id == 1000
        assert wire.cleared_fields == {3, 4}
        assert wire.fields.field_ids() == [1]
        assert wire.events.values(1) == [1, 2]
        assert ns.Health.from_update(wire) == update

    def test_unchanged_update_fields_not_written(self, example):
        wire = example.example.HealthUpdate().to_update()

        assert wire.fields.field_ids() == []
        assert wire.cleared_fields == set()
        assert example.example.HealthUpdate().is_empty()
        assert not example.example.HealthUpdate(hit=[1]).is_empty()

    def test_update_merge_appends_events(self, example):
        ns = example.example
        first = ns.HealthUpdate(current=1, maximum=2, hit=[1])
        second = ns.HealthUpdate(current=5, hit=[2, 3])

        first.merge(second)

        assert first.current == 5
        assert first.maximum == 2
        assert first.hit == [1, 2, 3]

    def test_companion_accessors(self, example):
        ns = example.example
        assert ns.Health.update_type() is ns.HealthUpdate
        assert ns.Health.command_request_type() is ns.HealthCommandRequest
        assert ns.Health.command_response_type() is ns.HealthCommandResponse


class TestCommands:
    def test_request_round_trip(self, example):
        ns = example.example
        command = ns.HealthCommandRequest.Heal(payload=25)

        request = ns.Health.to_request(command)

        assert request.component_id == 1000
        assert request.command_index == 1
        assert request.fields.get(1) == 25
        assert ns.Health.from_request(request) == command

    def test_type_payload_is_the_command_object(self, example):
        ns = example.example
        response = ns.Health.to_response(
            ns.HealthCommandResponse.Heal(payload=ns.Vec(1.0, 2.0))
        )

        assert response.fields.get(1) == 1.0
        assert response.fields.get(2) == 2.0
        assert ns.Health.from_response(response).payload == ns.Vec(1.0, 2.0)

    def test_enum_response(self, example):
        ns = example.example
        command = ns.HealthCommandResponse.Reset(payload=ns.Color.GREEN)

        response = ns.Health.to_response(command)

        assert response.command_index == 2
        assert ns.Health.from_response(response) == command

    def test_variants_follow_command_index(self, example):
        request = example.example.HealthCommandRequest
        assert request.VARIANTS == {1: request.Heal, 2: request.Reset}
        assert request.INDICES == {request.Heal: 1, request.Reset: 2}
        assert example.example.Health.get_request_command_index(request.Reset()) == 2

    def test_unknown_command_index(self, example):
        request = runtime.CommandRequest(1000, 99)

        with pytest.raises(runtime.UnknownCommandError) as exc_info:
            example.example.Health.from_request(request)

        assert exc_info.value.command_index == 99
        assert exc_info.value.component == "example.Health"
        assert isinstance(exc_info.value, runtime.DispatchError)

    def test_wrong_union_member(self, example):
        ns = example.example
        with pytest.raises(TypeError):
            ns.Health.to_request(ns.HealthCommandResponse.Heal())


class TestRegistration:
    def test_register_components(self, example):
        registry = runtime.ComponentRegistry()

        example.register_components(registry)
        example.register_components(registry)

        assert registry.component_ids() == [54, 1000]
        assert registry.get(1000) is example.example.Health

    def test_dispatch_by_component_id(self, example):
        registry = runtime.ComponentRegistry()
        example.register_components(registry)
        health = example.example.Health(current=4)

        assert registry.decode_data(health.to_data()) == health
        with pytest.raises(runtime.UnknownComponentError):
            registry.decode_data(runtime.ComponentData(7))


@pytest.fixture
def game_std(tmp_path, monkeypatch, bundle, plain_config):
    """The improbable package generated into an importable game.std module."""
    package_dir = tmp_path / "deps" / "game"
    package_dir.mkdir(parents=True)
    (package_dir / "__init__.py").write_text("", encoding="utf-8")
    (package_dir / "std.py").write_text(
        generate(bundle, "improbable", config=plain_config), encoding="utf-8"
    )
    monkeypatch.syspath_prepend(str(tmp_path / "deps"))

    yield importlib.import_module("game.std")

    for name in ("game.std", "game"):
        sys.modules.pop(name, None)


class TestCrossPackage:
    def test_dependency_root_shares_namespace_name(
        self, bundle, plain_config, game_std, load_generated
    ):
        code = generate(
            bundle, "game", dependencies={"improbable": "game.std"}, config=plain_config
        )
        module = load_generated(code)

        spawn = module.game.Spawn()
        assert isinstance(spawn.coords, game_std.improbable.Coordinates)

        spawn.coords.x = 2.5
        decoded = module.game.Spawn.from_object(spawn.to_object())

        assert decoded == spawn
        assert decoded.coords.x == 2.5


def test_two_generations_import_independently(bundle, plain_config, load_generated):
    first = load_generated(generate(bundle, "example", config=plain_config))
    second = load_generated(generate(bundle, "example.sub", config=plain_config))

    assert first.example.sub.Inner(value=1).to_object().get(1) == 1
    assert second.COMPONENTS == ()
    assert second.example.sub.Inner.from_object(runtime.SchemaObject()).value == 0
