"""Tests for loading schema bundles."""

import copy
import json

import pytest

from spatialgen.codegen.core.bundle import (
    DataReference,
    InlineData,
    ListType,
    MapType,
    OptionalType,
    PrimitiveReference,
    PrimitiveType,
    SingularType,
    component_fields,
    convert_bundle,
    iter_value_types,
    load_bundle,
)
from spatialgen.codegen.core.errors import (
    BundleError,
    BundleFormatError,
    MissingDefinitionError,
    UnsupportedBundleVersionError,
)


def _type_definitions(document):
    return {
        definition["identifier"]["qualifiedName"]: definition
        for definition in document["v1"]["typeDefinitions"]
    }


class TestLoadBundle:
    def test_counts(self, bundle):
        v1 = bundle.require_v1()

        assert len(v1.enum_definitions) == 1
        assert len(v1.type_definitions) == 7
        assert len(v1.component_definitions) == 2
        assert bundle.versions == ("v1",)

    def test_identifier(self, bundle):
        definition = next(
            d for d in bundle.v1.type_definitions
            if d.identifier.qualified_name == "example.sub.Inner"
        )

        assert definition.identifier.name == "Inner"
        assert definition.identifier.namespace == ("example", "sub")

    def test_field_shapes(self, bundle):
        everything = next(
            d for d in bundle.v1.type_definitions
            if d.identifier.name == "Everything"
        )
        shapes = {f.identifier.name: type(f.ty) for f in everything.field_definitions}

        assert shapes["count"] is SingularType
        assert shapes["nickname"] is OptionalType
        assert shapes["tags"] is ListType
        assert shapes["scores"] is MapType

        owner = next(f for f in everything.field_definitions if f.identifier.name == "owner")
        assert owner.ty.value_type == PrimitiveReference(PrimitiveType.ENTITY_ID)

    def test_components(self, bundle):
        health, position = bundle.v1.component_definitions

        assert isinstance(health.data_definition, InlineData)
        assert health.component_id == 1000
        assert [e.event_index for e in health.event_definitions] == [2, 1]
        assert health.data_definition.field_definitions[4].transient
        assert isinstance(position.data_definition, DataReference)

    def test_component_fields_follow_data_definition(self, bundle):
        position = bundle.v1.component_definitions[1]
        names = [f.identifier.name for f in component_fields(bundle.v1, position)]
        assert names == ["x", "y"]

    def test_source_references(self, bundle):
        reference = bundle.source_references["example.Color"]
        assert (reference.file_path, reference.line, reference.column) == (
            "schema/example.schema",
            3,
            1,
        )

    def test_load_from_bytes(self, bundle_path, bundle):
        assert load_bundle(bundle_path.read_bytes()) == bundle

    def test_iter_value_types(self, bundle):
        everything = next(
            d for d in bundle.v1.type_definitions
            if d.identifier.name == "Everything"
        )
        scores = next(f for f in everything.field_definitions if f.identifier.name == "scores")

        assert iter_value_types(scores.ty) == [
            PrimitiveReference(PrimitiveType.STRING),
            PrimitiveReference(PrimitiveType.INT32),
        ]


class TestPrimitiveType:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("Int32", PrimitiveType.INT32),
            ("EntityId", PrimitiveType.ENTITY_ID),
            ("uint64", PrimitiveType.UINT64),
            (16, PrimitiveType.BYTES),
        ],
    )
    def test_parse(self, raw, expected):
        assert PrimitiveType.parse(raw) is expected

    @pytest.mark.parametrize("raw", ["Int128", 99, True])
    def test_parse_invalid(self, raw):
        with pytest.raises(BundleFormatError):
            PrimitiveType.parse(raw)


class TestInvalidBundles:
    def test_invalid_json(self):
        with pytest.raises(BundleFormatError) as exc_info:
            load_bundle("{not json")
        assert exc_info.value.path == "$"

    def test_unsupported_version(self):
        bundle = load_bundle(json.dumps({"v3": {"anything": 1}}))

        with pytest.raises(UnsupportedBundleVersionError) as exc_info:
            bundle.require_v1()
        assert exc_info.value.versions_found == ["v3"]

    def test_duplicate_field_id(self, bundle_document):
        document = copy.deepcopy(bundle_document)
        vec = _type_definitions(document)["example.Vec"]
        vec["fieldDefinitions"][1]["fieldId"] = 1

        with pytest.raises(BundleFormatError) as exc_info:
            convert_bundle(document)
        assert "Duplicate field id 1" in str(exc_info.value)
        assert exc_info.value.path.endswith("fieldDefinitions[1]")

    def test_duplicate_component_id(self, bundle_document):
        document = copy.deepcopy(bundle_document)
        document["v1"]["componentDefinitions"][1]["componentId"] = 1000

        with pytest.raises(BundleFormatError, match="Component id 1000"):
            convert_bundle(document)

    def test_duplicate_command_index(self, bundle_document):
        document = copy.deepcopy(bundle_document)
        commands = document["v1"]["componentDefinitions"][0]["commandDefinitions"]
        commands[1]["commandIndex"] = commands[0]["commandIndex"]

        with pytest.raises(BundleFormatError, match="Duplicate command index"):
            convert_bundle(document)

    def test_duplicate_event_index(self, bundle_document):
        document = copy.deepcopy(bundle_document)
        events = document["v1"]["componentDefinitions"][0]["eventDefinitions"]
        events[1]["eventIndex"] = events[0]["eventIndex"]

        with pytest.raises(BundleFormatError, match="Duplicate event index"):
            convert_bundle(document)

    def test_name_must_match_path(self, bundle_document):
        document = copy.deepcopy(bundle_document)
        document["v1"]["enumDefinitions"][0]["identifier"]["name"] = "Colour"

        with pytest.raises(BundleFormatError, match="does not match name"):
            convert_bundle(document)

    def test_invalid_primitive_in_field(self, bundle_document):
        document = copy.deepcopy(bundle_document)
        vec = _type_definitions(document)["example.Vec"]
        vec["fieldDefinitions"][0]["singularType"] = {"type": {"primitive": "Invalid"}}

        with pytest.raises(BundleError):
            convert_bundle(document)

    def test_field_without_type(self, bundle_document):
        document = copy.deepcopy(bundle_document)
        vec = _type_definitions(document)["example.Vec"]
        del vec["fieldDefinitions"][0]["singularType"]

        with pytest.raises(BundleFormatError, match="exactly one field type"):
            convert_bundle(document)

    def test_missing_referenced_data_type(self, bundle_document):
        document = copy.deepcopy(bundle_document)
        document["v1"]["componentDefinitions"][1]["dataDefinition"] = {
            "qualifiedName": "example.Missing"
        }
        bundle = convert_bundle(document)

        with pytest.raises(MissingDefinitionError):
            component_fields(bundle.v1, bundle.v1.component_definitions[1])
