"""Definitions, operations and routes of the compiled API model.

All models are frozen: two definitions are the same definition exactly
when their data compares equal, whatever name they were registered under.
"""

from collections.abc import Iterator
from enum import Enum as _Enum
from typing import Annotated, ClassVar, Literal, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field

from apigen.model.types import InlineType


class Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class DefinitionData(Frozen):
    # transparent definitions get a `_v<N>` suffix on name collision, others `V<N>`
    transparent: ClassVar[bool] = False

    def references(self) -> Iterator[str]:
        yield from ()


class StructProperty(Frozen):
    name: str
    rename: str
    default: str | None = None
    type_: InlineType
    doc: str | None = None


class Struct(DefinitionData):
    kind: Literal["Struct"] = "Struct"
    doc: str | None = None
    properties: tuple[StructProperty, ...] = ()

    def references(self) -> Iterator[str]:
        for prop in self.properties:
            if prop.default is not None:
                yield prop.default
            yield from prop.type_.references()


class EnumVariant(Frozen):
    name: str
    rename: str
    data: InlineType | None = None


class Enum(DefinitionData):
    kind: Literal["Enum"] = "Enum"
    doc: str | None = None
    variants: tuple[EnumVariant, ...] = ()
    # tag property of a discriminated union
    discriminator: str | None = None

    def references(self) -> Iterator[str]:
        for variant in self.variants:
            if variant.data is not None:
                yield from variant.data.references()

    def variant_for(self, rename: str) -> EnumVariant | None:
        return next((v for v in self.variants if v.rename == rename), None)


class ApiErrVariant(Frozen):
    name: str
    detail: str
    code: str


class ApiErr(DefinitionData):
    kind: Literal["ApiErr"] = "ApiErr"
    doc: str | None = None
    variants: tuple[ApiErrVariant, ...] = ()


class DefaultProvider(DefinitionData):
    transparent: ClassVar[bool] = True

    kind: Literal["DefaultProvider"] = "DefaultProvider"
    vtype: InlineType
    value: str

    def references(self) -> Iterator[str]:
        yield from self.vtype.references()


class StaticStr(DefinitionData):
    """Contents of a file embedded into the generated server."""

    kind: Literal["StaticStr"] = "StaticStr"
    path: str


class StaticStringPath(DefinitionData):
    """Serves a StaticStr definition as plain text."""

    transparent: ClassVar[bool] = True

    kind: Literal["StaticStringPath"] = "StaticStringPath"
    data: str

    def references(self) -> Iterator[str]:
        yield self.data


class StaticHtmlPath(DefinitionData):
    """Serves a StaticStr definition as HTML."""

    transparent: ClassVar[bool] = True

    kind: Literal["StaticHtmlPath"] = "StaticHtmlPath"
    data: str

    def references(self) -> Iterator[str]:
        yield self.data


class Redirect(DefinitionData):
    """Temporary redirect to `target`, relative to the requested path."""

    transparent: ClassVar[bool] = True

    kind: Literal["Redirect"] = "Redirect"
    target: str


AnyDefinitionData = Annotated[
    Union[
        Struct,
        Enum,
        ApiErr,
        DefaultProvider,
        StaticStr,
        StaticStringPath,
        StaticHtmlPath,
        Redirect,
    ],
    Field(discriminator="kind"),
]


class Definition(Frozen):
    data: AnyDefinitionData

    @property
    def transparent(self) -> bool:
        return self.data.transparent


class HttpMethod(str, _Enum):
    GET = "Get"
    POST = "Post"
    PUT = "Put"
    PATCH = "Patch"
    DELETE = "Delete"

    @property
    def attribute(self) -> str:
        """Name of the matching PathItem field."""
        return self.value.lower()

    def __str__(self) -> str:
        return self.attribute


class RustOperation(Frozen):
    doc: str | None = None
    param_path: InlineType | None = None
    param_query: InlineType | None = None
    param_body: InlineType | None = None
    response: InlineType

    def references(self) -> Iterator[str]:
        for param in (self.param_path, self.param_query, self.param_body, self.response):
            if param is not None:
                yield from param.references()


class OperationPath(Frozen):
    operation: str
    path: str
    method: HttpMethod


class StaticService(Frozen):
    method: HttpMethod = HttpMethod.GET
    path: str
    data: str


class ApiService(BaseModel):
    definitions: dict[str, Definition] = {}
    operations: dict[str, RustOperation] = {}
    paths: list[OperationPath] = []
    static_services: list[StaticService] = []


class ApiModule(BaseModel):
    """The complete model handed to the renderer."""

    api: ApiService

    def dump_yaml(self) -> str:
        return yaml.safe_dump(
            self.model_dump(mode="json"),
            sort_keys=False,
            allow_unicode=True,
            width=10_000,
        )
