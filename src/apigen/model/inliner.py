"""Schema to type inlining.

Turns schemas, parameters, request bodies and responses into inline types,
registering a named definition in the store for every struct, enum and
error type encountered on the way down.

Nested types are named after their parent: property `obj` of `GreetUserBody`
becomes `GreetUserBodyObj`, items of an array named `Tags` become
`TagsItem`. A schema `title` overrides the derived name.
"""

from collections.abc import Iterable
from http import HTTPStatus

from apigen.errors import NamingError, UnsupportedFeatureError, error_context
from apigen.model.defaults import push_default, validate_optionality
from apigen.model.definitions import (
    ApiErr,
    ApiErrVariant,
    DefinitionData,
    Enum,
    EnumVariant,
    Struct,
    StructProperty,
)
from apigen.model.naming import child_name, to_field_identifier, to_type_identifier
from apigen.model.store import DefinitionStore
from apigen.model.types import (
    ANY,
    BOOLEAN,
    FLOAT,
    INTEGER,
    STRING,
    Array,
    Detailed,
    InlineType,
    Json,
    Option,
    Reference,
    Result,
)
from apigen.parser import base as oas
from apigen.parser.context import OpenApiContext

SUCCESS_CODE = "200"

SCALARS = {"integer": INTEGER, "number": FLOAT, "boolean": BOOLEAN}


class TypeInliner:
    """Inlines the nodes of one document into a shared DefinitionStore."""

    def __init__(self, ctx: OpenApiContext, store: DefinitionStore, version: int):
        self.ctx = ctx
        self.store = store
        self.version = version

    # Schemas
    # -------------------------------

    def inline_schema(self, schema_ref: oas.Reference | oas.Schema, name: str) -> InlineType:
        schema = self.ctx.resolve(schema_ref, oas.Schema)
        if schema.title:
            name = to_type_identifier(schema.title)

        inline = self._inline_kind(schema, name)
        if schema.nullable:
            inline = Option(inner=inline)
        return inline

    def _inline_kind(self, schema: oas.Schema, name: str) -> InlineType:
        if schema.any_of is not None:
            raise UnsupportedFeatureError("anyOf is not supported")
        if schema.all_of is not None:
            raise UnsupportedFeatureError("allOf is not supported")
        if schema.not_ is not None:
            raise UnsupportedFeatureError("not is not supported")
        if schema.one_of is not None:
            return self._inline_one_of(schema, name)

        if schema.type == "string":
            if schema.enumeration:
                return self._inline_enum(schema, name)
            return STRING
        if schema.type in SCALARS:
            return SCALARS[schema.type]
        if schema.type == "array":
            if schema.items is None:
                return Array(inner=ANY)
            return Array(inner=self.inline_schema(schema.items, child_name(name, "Item")))
        if schema.type == "object":
            return self._inline_object(schema, name)

        if schema.type is None:
            raise UnsupportedFeatureError("Schema without type is not supported")
        raise UnsupportedFeatureError(f"Schema type {schema.type!r} is not supported")

    def _inline_enum(self, schema: oas.Schema, name: str) -> InlineType:
        variants = []
        for value in schema.enumeration:
            if not isinstance(value, str):
                raise UnsupportedFeatureError(f"String enum value {value!r} is not a string")
            variants.append(EnumVariant(name=to_type_identifier(value), rename=value))

        _ensure_unique((v.name for v in variants), "enum variant")
        return self._push(name, Enum(doc=schema.description, variants=tuple(variants)))

    def _inline_object(self, schema: oas.Schema, name: str) -> InlineType:
        properties = []
        for prop_name, prop_ref in schema.properties.items():
            with error_context(f"property {prop_name}"):
                prop_schema = self.ctx.resolve(prop_ref, oas.Schema)
                properties.append(
                    self._struct_property(
                        rename=prop_name,
                        schema_ref=prop_schema,
                        required=prop_name in schema.required,
                        parent_name=name,
                        doc=prop_schema.description,
                    )
                )

        return self._push_struct(name, schema.description, properties)

    def _inline_one_of(self, schema: oas.Schema, name: str) -> InlineType:
        discriminator = schema.discriminator
        if discriminator is None:
            raise UnsupportedFeatureError("oneOf without discriminator is not supported")
        if discriminator.mapping:
            raise UnsupportedFeatureError("Discriminator mapping is not supported")
        if discriminator.extensions:
            raise UnsupportedFeatureError("Discriminator extensions are not supported")

        tag = discriminator.property_name
        variants = []
        for branch_ref in schema.one_of:
            branch = self.ctx.resolve(branch_ref, oas.Schema)
            value = self._discriminator_value(branch, tag)

            stripped = branch.model_copy(
                update={
                    "properties": {k: v for k, v in branch.properties.items() if k != tag},
                    "required": [r for r in branch.required if r != tag],
                }
            )
            with error_context(f"oneOf variant {value!r}"):
                payload = self.inline_schema(stripped, child_name(name, value))
            variants.append(EnumVariant(name=to_type_identifier(value), rename=value, data=payload))

        _ensure_unique((v.name for v in variants), "oneOf variant")
        return self._push(
            name,
            Enum(doc=schema.description, variants=tuple(variants), discriminator=tag),
        )

    def _discriminator_value(self, branch: oas.Schema, tag: str) -> str:
        if tag not in branch.properties:
            raise UnsupportedFeatureError(f"oneOf variant is missing discriminator property {tag!r}")

        prop = self.ctx.resolve(branch.properties[tag], oas.Schema)
        values = prop.enumeration or []
        if prop.type != "string" or len(values) != 1 or not isinstance(values[0], str):
            raise UnsupportedFeatureError(
                f"Discriminator property {tag!r} must be a string enum with exactly one value"
            )
        return values[0]

    # Structs
    # -------------------------------

    def _struct_property(
        self,
        rename: str,
        schema_ref: oas.Reference | oas.Schema,
        required: bool,
        parent_name: str,
        doc: str | None,
    ) -> StructProperty:
        schema = self.ctx.resolve(schema_ref, oas.Schema)
        has_default = schema.default is not None
        validate_optionality(required, has_default, schema.nullable)

        type_ = self.inline_schema(schema_ref, child_name(parent_name, rename))
        default = None
        if has_default:
            default = push_default(self.store, self.version, schema.default, type_)

        return StructProperty(
            name=to_field_identifier(rename),
            rename=rename,
            default=default,
            type_=type_,
            doc=doc,
        )

    def _push_struct(self, name: str, doc: str | None, properties: list[StructProperty]) -> InlineType:
        _ensure_unique((p.name for p in properties), "property")
        return self._push(name, Struct(doc=doc, properties=tuple(properties)))

    def _push(self, name: str, data: DefinitionData) -> Reference:
        return Reference(name=self.store.push(name, self.version, data))

    # Operation parts
    # -------------------------------

    def inline_parameters(self, parameters: list[oas.Parameter], name: str) -> InlineType | None:
        """Inline one location's parameters as a struct, or None if there are none."""
        if not parameters:
            return None

        properties = []
        for parameter in parameters:
            with error_context(f"parameter {parameter.name}"):
                properties.append(
                    self._struct_property(
                        rename=parameter.name,
                        schema_ref=self.ctx.parameter_schema(parameter),
                        required=parameter.required,
                        parent_name=name,
                        doc=parameter.description,
                    )
                )

        return self._push_struct(name, None, properties)

    def inline_request_body(
        self, body_ref: oas.Reference | oas.RequestBody | None, name: str
    ) -> InlineType | None:
        if body_ref is None:
            return None

        body = self.ctx.resolve(body_ref, oas.RequestBody)
        schema_ref = self.ctx.content_schema(body.content)
        inline = Json(inner=self.inline_schema(schema_ref, name))
        return inline if body.required else Option(inner=inline)

    def inline_responses(
        self, responses: dict[str, oas.Reference | oas.Response], name: str
    ) -> InlineType:
        """Inline the success response and merge all error responses into one ApiErr."""
        success = None
        errors = []
        for code, response_ref in responses.items():
            response = self.ctx.resolve(response_ref, oas.Response)
            if code.startswith("2"):
                if code != SUCCESS_CODE:
                    raise UnsupportedFeatureError(
                        f"Only code {SUCCESS_CODE} supported for success responses, got {code}"
                    )
                success = response
            else:
                errors.append((_status_symbol(code), response))

        if success is None:
            raise UnsupportedFeatureError(f"Response with code {SUCCESS_CODE} must be specified")

        with error_context(f"response {SUCCESS_CODE}"):
            success_type = Json(inner=self.inline_schema(self._response_schema(success), name))

        if not errors:
            return success_type

        error_type = self._inline_errors(errors, f"{name}Error")
        return Result(ok=success_type, err=Detailed(inner=error_type))

    def _inline_errors(self, errors: list[tuple[str, oas.Response]], name: str) -> InlineType:
        variants = []
        docs = []
        for symbol, response in errors:
            with error_context(f"response {symbol}"):
                schema = self.ctx.resolve(self._response_schema(response), oas.Schema)
                if schema.type != "string" or not schema.enumeration:
                    raise UnsupportedFeatureError(
                        "Error response schema must be a string with non-empty enum"
                    )
                for detail in schema.enumeration:
                    if not isinstance(detail, str):
                        raise UnsupportedFeatureError(f"Error enum value {detail!r} is not a string")
                    variants.append(
                        ApiErrVariant(name=to_type_identifier(detail), detail=detail, code=symbol)
                    )
            docs.append(f"Status {symbol}:\n{response.description}")

        _ensure_unique((v.name for v in variants), "error variant")
        return self._push(name, ApiErr(doc="\n\n".join(docs), variants=tuple(variants)))

    def _response_schema(self, response: oas.Response) -> oas.Reference | oas.Schema:
        if not response.content:
            raise UnsupportedFeatureError("Response must have content")
        return self.ctx.content_schema(response.content)


def _status_symbol(code: str) -> str:
    try:
        return HTTPStatus(int(code)).name
    except ValueError:
        raise UnsupportedFeatureError(f"Status code {code!r} is not supported") from None


def _ensure_unique(names: Iterable[str], what: str) -> None:
    seen = set()
    for name in names:
        if name in seen:
            raise NamingError(f"Duplicate {what} {name!r}")
        seen.add(name)
