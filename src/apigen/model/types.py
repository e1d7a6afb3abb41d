"""Inline types: the type expressions used by properties and operations.

An inline type never owns a definition. It refers to one by its assigned
name, so renaming during deduplication needs no rewriting of the tree.
`str()` renders the type as it appears in the generated server code.
"""

from collections.abc import Iterator
from enum import Enum
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, model_serializer


class InlineType(BaseModel):
    model_config = ConfigDict(frozen=True)

    def references(self) -> Iterator[str]:
        """Yield the names of all definitions this type refers to."""
        yield from ()

    @model_serializer
    def _serialize(self) -> str:
        return str(self)


class ScalarKind(str, Enum):
    STRING = "String"
    INTEGER = "i64"
    FLOAT = "f64"
    BOOLEAN = "bool"
    ANY = "serde_json::Value"


class Scalar(InlineType):
    kind: ScalarKind

    def __str__(self) -> str:
        return self.kind.value


class Reference(InlineType):
    name: str

    def references(self) -> Iterator[str]:
        yield self.name

    def __str__(self) -> str:
        return self.name


class Wrapper(InlineType):
    """A type with a single type argument."""

    inner: InlineType
    template: ClassVar[str] = "{}"

    def references(self) -> Iterator[str]:
        yield from self.inner.references()

    def __str__(self) -> str:
        return self.template.format(self.inner)


class Array(Wrapper):
    template: ClassVar[str] = "Vec<{}>"


class Option(Wrapper):
    template: ClassVar[str] = "Option<{}>"


class Json(Wrapper):
    template: ClassVar[str] = "web::Json<{}>"


class Path(Wrapper):
    template: ClassVar[str] = "web::Path<{}>"


class Query(Wrapper):
    template: ClassVar[str] = "web::Query<{}>"


class Detailed(Wrapper):
    template: ClassVar[str] = "Detailed<{}>"


class Result(InlineType):
    ok: InlineType
    err: InlineType

    def references(self) -> Iterator[str]:
        yield from self.ok.references()
        yield from self.err.references()

    def __str__(self) -> str:
        return f"Result<{self.ok},{self.err}>"


STRING = Scalar(kind=ScalarKind.STRING)
INTEGER = Scalar(kind=ScalarKind.INTEGER)
FLOAT = Scalar(kind=ScalarKind.FLOAT)
BOOLEAN = Scalar(kind=ScalarKind.BOOLEAN)
ANY = Scalar(kind=ScalarKind.ANY)
