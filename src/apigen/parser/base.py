"""Typed OpenAPI 3.0 document tree.

Covers the subset of OpenAPI 3.0 that the model compiler consumes.
Every node OpenAPI allows to be a `$ref` is typed `ReferenceOr[T]`.
"""

from typing import Annotated, Any, Literal, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

T = TypeVar("T")


class Reference(BaseModel):
    """A `$ref` pointer, e.g. `#/components/schemas/Pet`."""

    model_config = ConfigDict(populate_by_name=True)

    ref: str = Field(alias="$ref")


# Reference is tried first so that `{"$ref": ...}` never validates as an item.
ReferenceOr = Annotated[Union[Reference, T], Field(union_mode="left_to_right")]


class Discriminator(BaseModel):
    # extra keys are kept so that `x-` extensions can be rejected later
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    property_name: str = Field(alias="propertyName")
    mapping: dict[str, str] | None = None

    @property
    def extensions(self) -> dict[str, Any]:
        return {k: v for k, v in (self.model_extra or {}).items() if k.startswith("x-")}


class Schema(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: str | None = None
    format: str | None = None
    title: str | None = None
    description: str | None = None
    enumeration: list[Any] | None = Field(default=None, alias="enum")
    properties: dict[str, ReferenceOr["Schema"]] = {}
    required: list[str] = []
    items: ReferenceOr["Schema"] | None = None
    additional_properties: Any = Field(default=None, alias="additionalProperties")
    nullable: bool = False
    default: Any = None
    one_of: list[ReferenceOr["Schema"]] | None = Field(default=None, alias="oneOf")
    any_of: list[ReferenceOr["Schema"]] | None = Field(default=None, alias="anyOf")
    all_of: list[ReferenceOr["Schema"]] | None = Field(default=None, alias="allOf")
    not_: ReferenceOr["Schema"] | None = Field(default=None, alias="not")
    discriminator: Discriminator | None = None


class MediaType(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    schema_: ReferenceOr[Schema] | None = Field(default=None, alias="schema")


class Parameter(BaseModel):
    """A single operation parameter (query, path, header, or cookie)."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    location: Literal["query", "path", "header", "cookie"] = Field(alias="in")
    required: bool = False
    description: str | None = None
    schema_: ReferenceOr[Schema] | None = Field(default=None, alias="schema")
    content: dict[str, MediaType] | None = None


class RequestBody(BaseModel):
    description: str | None = None
    content: dict[str, MediaType] = {}
    required: bool = False


class Response(BaseModel):
    description: str = ""
    content: dict[str, MediaType] | None = None


class Operation(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    operation_id: str | None = Field(default=None, alias="operationId")
    summary: str | None = None
    description: str | None = None
    tags: list[str] = []
    parameters: list[ReferenceOr[Parameter]] = []
    request_body: ReferenceOr[RequestBody] | None = Field(default=None, alias="requestBody")
    responses: dict[str, ReferenceOr[Response]] = {}

    @field_validator("responses", mode="before")
    @classmethod
    def _status_codes_as_strings(cls, value: Any) -> Any:
        # YAML reads unquoted `200:` as an integer key
        if isinstance(value, dict):
            return {str(code): response for code, response in value.items()}
        return value


class PathItem(BaseModel):
    summary: str | None = None
    description: str | None = None
    parameters: list[ReferenceOr[Parameter]] = []
    get: Operation | None = None
    post: Operation | None = None
    put: Operation | None = None
    patch: Operation | None = None
    delete: Operation | None = None


class Components(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    schemas: dict[str, ReferenceOr[Schema]] = {}
    parameters: dict[str, ReferenceOr[Parameter]] = {}
    responses: dict[str, ReferenceOr[Response]] = {}
    request_bodies: dict[str, ReferenceOr[RequestBody]] = Field(default={}, alias="requestBodies")


class Info(BaseModel):
    title: str = ""
    version: str
    description: str | None = None

    @field_validator("version", mode="before")
    @classmethod
    def _version_as_string(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value


class OpenApiDocument(BaseModel):
    """Root of an OpenAPI 3.0 document."""

    openapi: str
    info: Info
    paths: dict[str, ReferenceOr[PathItem]] = {}
    components: Components | None = None

    @field_validator("openapi", mode="before")
    @classmethod
    def _openapi_as_string(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value


Schema.model_rebuild()
