from pathlib import Path
from unittest.mock import patch

import pytest

from apigen.errors import NamingError, OptionalityError, UnsupportedFeatureError
from apigen.model.definitions import ApiErr, ApiErrVariant, Enum, Struct
from apigen.model.inliner import TypeInliner
from apigen.model.store import DefinitionStore
from apigen.model.types import (
    ANY,
    BOOLEAN,
    FLOAT,
    INTEGER,
    STRING,
    Array,
    Detailed,
    Json,
    Option,
    Reference,
    Result,
)
from apigen.parser.base import Components, Parameter, RequestBody, Response, Schema
from apigen.parser.base import Reference as OasReference
from apigen.parser.context import OpenApiContext
from apigen.parser.openapi import load_document

FIXTURES = Path(__file__).parent / "fixtures"


def _inliner(components: dict | None = None) -> TypeInliner:
    ctx = OpenApiContext(Components.model_validate(components) if components is not None else None)
    return TypeInliner(ctx, DefinitionStore(), 1)


def _schema(data: dict) -> Schema:
    return Schema.model_validate(data)


def _data(inliner: TypeInliner, name: str):
    return inliner.store.get(name).data


def _json_response(schema: dict, description: str = "") -> Response:
    return Response.model_validate(
        {"description": description, "content": {"application/json": {"schema": schema}}}
    )


class TestInlineSchema:
    @pytest.mark.parametrize(
        "type_,expected",
        [("string", STRING), ("integer", INTEGER), ("number", FLOAT), ("boolean", BOOLEAN)],
    )
    def test_scalars(self, type_, expected):
        inliner = _inliner()
        assert inliner.inline_schema(_schema({"type": type_}), "Unused") == expected
        assert len(inliner.store) == 0

    def test_nullable(self):
        assert _inliner().inline_schema(_schema({"type": "integer", "nullable": True}), "X") == Option(inner=INTEGER)

    def test_array(self):
        schema = _schema({"type": "array", "items": {"type": "string"}})
        assert _inliner().inline_schema(schema, "Tags") == Array(inner=STRING)

    def test_array_without_items(self):
        assert _inliner().inline_schema(_schema({"type": "array"}), "Tags") == Array(inner=ANY)

    def test_array_item_naming(self):
        inliner = _inliner()
        schema = _schema({"type": "array", "items": {"type": "string", "enum": ["a", "b"]}})
        assert inliner.inline_schema(schema, "Tags") == Array(inner=Reference(name="TagsItem"))
        assert isinstance(_data(inliner, "TagsItem"), Enum)

    def test_string_enum(self):
        inliner = _inliner()
        schema = _schema({"type": "string", "description": "Colors", "enum": ["dark red", "blue"]})
        assert inliner.inline_schema(schema, "Color") == Reference(name="Color")
        enum = _data(inliner, "Color")
        assert enum.doc == "Colors"
        assert [(v.name, v.rename) for v in enum.variants] == [("DarkRed", "dark red"), ("Blue", "blue")]
        assert enum.discriminator is None

    def test_non_ascii_enum_values(self):
        inliner = _inliner()
        inliner.inline_schema(_schema({"type": "string", "enum": ["Größe", "Grüße", "東京"]}), "Word")
        assert [v.name for v in _data(inliner, "Word").variants] == ["Größe", "Grüße", "東京"]

    def test_enum_variant_collision(self):
        with pytest.raises(NamingError):
            _inliner().inline_schema(_schema({"type": "string", "enum": ["a b", "A-B"]}), "X")

    def test_title_overrides_name(self):
        inliner = _inliner()
        schema = _schema({"type": "object", "title": "hello response", "properties": {}})
        assert inliner.inline_schema(schema, "GreetUser") == Reference(name="HelloResponse")

    def test_empty_object(self):
        inliner = _inliner()
        assert inliner.inline_schema(_schema({"type": "object"}), "Empty") == Reference(name="Empty")
        assert _data(inliner, "Empty") == Struct()

    @pytest.mark.parametrize(
        "data",
        [
            {"anyOf": [{"type": "string"}, {"type": "integer"}]},
            {"allOf": [{"type": "string"}]},
            {"not": {"type": "string"}},
            {"description": "no type"},
            {"type": "file"},
        ],
    )
    def test_unsupported(self, data):
        with pytest.raises(UnsupportedFeatureError):
            _inliner().inline_schema(_schema(data), "X")

    def test_reference(self):
        inliner = _inliner({"schemas": {"Pet": {"type": "object", "properties": {}}}})
        schema = _schema({"type": "array", "items": {"$ref": "#/components/schemas/Pet"}})
        assert inliner.inline_schema(schema, "Pets") == Array(inner=Reference(name="PetsItem"))


class TestInlineObject:
    def test_nested_naming(self):
        inliner = _inliner()
        schema = _schema(
            {
                "type": "object",
                "description": "Request body",
                "required": ["name", "obj", "tags"],
                "properties": {
                    "name": {"type": "string", "description": "Who to greet"},
                    "obj": {"type": "object", "required": ["x"], "properties": {"x": {"type": "integer"}}},
                    "tags": {
                        "type": "array",
                        "items": {"type": "object", "required": ["y"], "properties": {"y": {"type": "boolean"}}},
                    },
                },
            }
        )
        assert inliner.inline_schema(schema, "GreetUserBody") == Reference(name="GreetUserBody")
        assert list(inliner.store.definitions) == ["GreetUserBodyObj", "GreetUserBodyTagsItem", "GreetUserBody"]

        struct = _data(inliner, "GreetUserBody")
        assert struct.doc == "Request body"
        name, obj, tags = struct.properties
        assert (name.name, name.rename, name.type_, name.doc) == ("name", "name", STRING, "Who to greet")
        assert obj.type_ == Reference(name="GreetUserBodyObj")
        assert tags.type_ == Array(inner=Reference(name="GreetUserBodyTagsItem"))

    def test_field_names_are_escaped(self):
        inliner = _inliner()
        schema = _schema(
            {"type": "object", "required": ["type", "userName"], "properties": {"type": {"type": "string"}, "userName": {"type": "string"}}}
        )
        inliner.inline_schema(schema, "X")
        assert [(p.name, p.rename) for p in _data(inliner, "X").properties] == [("type_", "type"), ("user_name", "userName")]

    def test_property_name_collision(self):
        schema = _schema(
            {"type": "object", "required": ["userName", "user_name"], "properties": {"userName": {"type": "string"}, "user_name": {"type": "string"}}}
        )
        with pytest.raises(NamingError):
            _inliner().inline_schema(schema, "X")

    def test_optional_property_with_default(self):
        inliner = _inliner()
        schema = _schema({"type": "object", "properties": {"count": {"type": "integer", "default": 3}}})
        inliner.inline_schema(schema, "X")
        (count,) = _data(inliner, "X").properties
        assert count.type_ == INTEGER
        assert count.default == "default_int_3"
        assert list(inliner.store.definitions) == ["default_int_3", "X"]

    def test_optional_nullable_property(self):
        inliner = _inliner()
        schema = _schema({"type": "object", "properties": {"count": {"type": "integer", "nullable": True}}})
        inliner.inline_schema(schema, "X")
        (count,) = _data(inliner, "X").properties
        assert count.type_ == Option(inner=INTEGER)
        assert count.default is None

    def test_optional_property_without_default(self):
        schema = _schema({"type": "object", "properties": {"count": {"type": "integer"}}})
        with pytest.raises(OptionalityError) as exc_info:
            _inliner().inline_schema(schema, "X")
        assert str(exc_info.value).startswith("property count: ")

    def test_doc_from_referenced_schema(self):
        inliner = _inliner({"schemas": {"Name": {"type": "string", "description": "A name"}}})
        schema = _schema({"type": "object", "required": ["n"], "properties": {"n": {"$ref": "#/components/schemas/Name"}}})
        inliner.inline_schema(schema, "X")
        assert _data(inliner, "X").properties[0].doc == "A name"

    def test_property_reference_is_resolved_once(self):
        inliner = _inliner({"schemas": {"Name": {"type": "string", "default": "x"}}})
        schema = _schema({"type": "object", "properties": {"n": {"$ref": "#/components/schemas/Name"}}})
        with patch.object(inliner.ctx, "resolve", wraps=inliner.ctx.resolve) as mock_resolve:
            inliner.inline_schema(schema, "X")

        references = [c for c in mock_resolve.call_args_list if isinstance(c.args[0], OasReference)]
        assert len(references) == 1
        assert _data(inliner, "X").properties[0].default == "default_str_x"


ONE_OF = {
    "oneOf": [
        {
            "type": "object",
            "required": ["kind", "radius"],
            "properties": {"kind": {"type": "string", "enum": ["a"]}, "radius": {"type": "number"}},
        },
        {
            "type": "object",
            "required": ["kind"],
            "properties": {"kind": {"type": "string", "enum": ["b"]}},
        },
    ],
    "discriminator": {"propertyName": "kind"},
}


class TestInlineOneOf:
    def test_tagged_union(self):
        inliner = _inliner()
        assert inliner.inline_schema(_schema(ONE_OF), "Shape") == Reference(name="Shape")

        enum = _data(inliner, "Shape")
        assert enum.discriminator == "kind"
        assert [(v.name, v.rename, v.data) for v in enum.variants] == [
            ("A", "a", Reference(name="ShapeA")),
            ("B", "b", Reference(name="ShapeB")),
        ]
        assert [p.rename for p in _data(inliner, "ShapeA").properties] == ["radius"]
        assert _data(inliner, "ShapeB") == Struct()

    def test_fixture(self):
        doc = load_document((FIXTURES / "oneof.yaml").read_text(encoding="utf-8"))
        inliner = TypeInliner(OpenApiContext(doc.components), DefinitionStore(), 1)
        body = doc.paths["/hello/{user}"].post.request_body

        assert inliner.inline_request_body(body, "GreetUserBody") == Json(inner=Reference(name="GreetUserBody"))
        enum = _data(inliner, "GreetUserBody")
        assert [(v.name, v.rename) for v in enum.variants] == [
            ("FirstVariant", "First variant"),
            ("SecondVariant", "Second variant"),
        ]
        assert [p.rename for p in _data(inliner, "Variant1").properties] == ["foo"]
        assert _data(inliner, "Variant2").properties[0].type_ == INTEGER

    def test_missing_discriminator(self):
        with pytest.raises(UnsupportedFeatureError, match="discriminator"):
            _inliner().inline_schema(_schema({"oneOf": ONE_OF["oneOf"]}), "Shape")

    def test_mapping(self):
        data = {**ONE_OF, "discriminator": {"propertyName": "kind", "mapping": {"a": "#/components/schemas/A"}}}
        with pytest.raises(UnsupportedFeatureError, match="mapping"):
            _inliner().inline_schema(_schema(data), "Shape")

    def test_extensions(self):
        data = {**ONE_OF, "discriminator": {"propertyName": "kind", "x-rename": True}}
        with pytest.raises(UnsupportedFeatureError, match="extensions"):
            _inliner().inline_schema(_schema(data), "Shape")

    def test_variant_without_tag(self):
        data = {**ONE_OF, "oneOf": [{"type": "object", "properties": {"radius": {"type": "number", "nullable": True}}}]}
        with pytest.raises(UnsupportedFeatureError, match="kind"):
            _inliner().inline_schema(_schema(data), "Shape")

    def test_tag_with_several_values(self):
        branch = {"type": "object", "required": ["kind"], "properties": {"kind": {"type": "string", "enum": ["a", "b"]}}}
        with pytest.raises(UnsupportedFeatureError, match="exactly one value"):
            _inliner().inline_schema(_schema({**ONE_OF, "oneOf": [branch]}), "Shape")

    def test_duplicate_tag(self):
        data = {**ONE_OF, "oneOf": [ONE_OF["oneOf"][1], ONE_OF["oneOf"][1]]}
        with pytest.raises(NamingError):
            _inliner().inline_schema(_schema(data), "Shape")


class TestInlineParameters:
    def test_no_parameters(self):
        assert _inliner().inline_parameters([], "GreetUserPath") is None

    def test_struct(self):
        inliner = _inliner()
        params = [
            Parameter.model_validate(
                {"name": "user", "in": "path", "required": True, "description": "The user", "schema": {"type": "string"}}
            )
        ]
        assert inliner.inline_parameters(params, "GreetUserPath") == Reference(name="GreetUserPath")
        (user,) = _data(inliner, "GreetUserPath").properties
        assert (user.name, user.type_, user.doc) == ("user", STRING, "The user")

    def test_duplicate_parameter(self):
        param = Parameter.model_validate({"name": "user", "in": "path", "required": True, "schema": {"type": "string"}})
        with pytest.raises(NamingError):
            _inliner().inline_parameters([param, param], "GreetUserPath")

    def test_optionality_error_names_parameter(self):
        param = Parameter.model_validate({"name": "limit", "in": "query", "schema": {"type": "integer"}})
        with pytest.raises(OptionalityError, match="parameter limit"):
            _inliner().inline_parameters([param], "ListQuery")


class TestInlineRequestBody:
    def test_absent(self):
        assert _inliner().inline_request_body(None, "XBody") is None

    def test_required(self):
        body = RequestBody.model_validate(
            {"required": True, "content": {"application/json": {"schema": {"type": "string"}}}}
        )
        assert _inliner().inline_request_body(body, "XBody") == Json(inner=STRING)

    def test_optional(self):
        body = RequestBody.model_validate({"content": {"application/json": {"schema": {"type": "string"}}}})
        assert _inliner().inline_request_body(body, "XBody") == Option(inner=Json(inner=STRING))

    def test_reference(self):
        inliner = _inliner(
            {"requestBodies": {"Greeting": {"required": True, "content": {"application/json": {"schema": {"type": "integer"}}}}}}
        )
        body = OasReference.model_validate({"$ref": "#/components/requestBodies/Greeting"})
        assert inliner.inline_request_body(body, "XBody") == Json(inner=INTEGER)

    def test_non_json(self):
        body = RequestBody.model_validate({"required": True, "content": {"text/plain": {"schema": {"type": "string"}}}})
        with pytest.raises(UnsupportedFeatureError):
            _inliner().inline_request_body(body, "XBody")


class TestInlineResponses:
    def test_success_only(self):
        responses = {"200": _json_response({"type": "string"})}
        assert _inliner().inline_responses(responses, "GreetUser") == Json(inner=STRING)

    def test_success_object_is_named_after_operation(self):
        inliner = _inliner()
        responses = {"200": _json_response({"type": "object", "properties": {}})}
        assert inliner.inline_responses(responses, "GreetUser") == Json(inner=Reference(name="GreetUser"))

    @pytest.mark.parametrize("codes", [["200", "201"], ["201"], []])
    def test_unsupported_success_codes(self, codes):
        responses = {code: _json_response({"type": "string"}) for code in codes}
        with pytest.raises(UnsupportedFeatureError):
            _inliner().inline_responses(responses, "GreetUser")

    def test_response_without_content(self):
        with pytest.raises(UnsupportedFeatureError, match="content"):
            _inliner().inline_responses({"200": Response(description="empty")}, "GreetUser")

    def test_errors(self):
        doc = load_document((FIXTURES / "error.yaml").read_text(encoding="utf-8"))
        inliner = TypeInliner(OpenApiContext(doc.components), DefinitionStore(), 1)
        responses = doc.paths["/hello/{user}"].get.responses

        result = inliner.inline_responses(responses, "GreetUser")
        assert result == Result(ok=Json(inner=STRING), err=Detailed(inner=Reference(name="GreetUserError")))
        assert str(result) == "Result<web::Json<String>,Detailed<GreetUserError>>"

        api_err = _data(inliner, "GreetUserError")
        assert isinstance(api_err, ApiErr)
        assert api_err.doc == "Status NOT_FOUND:\nUser not found\n\nStatus BAD_REQUEST:\nInput data error"
        assert api_err.variants == (
            ApiErrVariant(name="NotFound", detail="Not found", code="NOT_FOUND"),
            ApiErrVariant(name="InvalidCharacterInName", detail="Invalid character in name", code="BAD_REQUEST"),
            ApiErrVariant(name="NameContainsSpace", detail="Name contains space", code="BAD_REQUEST"),
        )

    def test_error_must_be_string_enum(self):
        responses = {"200": _json_response({"type": "string"}), "404": _json_response({"type": "string"})}
        with pytest.raises(UnsupportedFeatureError, match="non-empty enum"):
            _inliner().inline_responses(responses, "GreetUser")

    @pytest.mark.parametrize("code", ["default", "4XX", "499"])
    def test_unknown_status_code(self, code):
        responses = {
            "200": _json_response({"type": "string"}),
            code: _json_response({"type": "string", "enum": ["Oops"]}),
        }
        with pytest.raises(UnsupportedFeatureError, match="Status code"):
            _inliner().inline_responses(responses, "GreetUser")

    def test_duplicate_error_variant(self):
        responses = {
            "200": _json_response({"type": "string"}),
            "400": _json_response({"type": "string", "enum": ["Bad"]}),
            "409": _json_response({"type": "string", "enum": ["Bad"]}),
        }
        with pytest.raises(NamingError):
            _inliner().inline_responses(responses, "GreetUser")
