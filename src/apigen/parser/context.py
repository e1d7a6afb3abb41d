"""Reference resolution and parameter classification.

Only references into `#/components/<namespace>/<name>` are followed, and
only one level deep: a component that is itself a reference is rejected,
which rules out reference cycles.
"""

from typing import TypeVar

from pydantic import BaseModel

from apigen.errors import (
    InvalidReferenceError,
    NestedReferenceError,
    ReferenceNotFoundError,
    UnsupportedFeatureError,
)
from apigen.parser.base import (
    Components,
    MediaType,
    Parameter,
    PathItem,
    Reference,
    RequestBody,
    Response,
    Schema,
)

T = TypeVar("T")

JSON_CONTENT_TYPE = "application/json"

# component type -> (namespace in the reference string, Components attribute)
NAMESPACES: dict[type, tuple[str, str]] = {
    Schema: ("schemas", "schemas"),
    Parameter: ("parameters", "parameters"),
    Response: ("responses", "responses"),
    RequestBody: ("requestBodies", "request_bodies"),
}


class SplitParameters(BaseModel):
    """Parameters of one operation grouped by location."""

    query: list[Parameter] = []
    path: list[Parameter] = []
    header: list[Parameter] = []
    cookie: list[Parameter] = []

    def ensure_supported(self) -> None:
        if self.header:
            raise UnsupportedFeatureError("Header parameters not supported")
        if self.cookie:
            raise UnsupportedFeatureError("Cookie parameters not supported")


def split_reference(ref: str) -> tuple[str, str]:
    """Split `#/components/<namespace>/<name>` into (namespace, name)."""
    parts = ref.split("/")
    if len(parts) != 4:
        raise InvalidReferenceError(f"Invalid reference {ref!r}")

    root, components, namespace, name = parts
    if root != "#":
        raise InvalidReferenceError(f"Reference must start with '#/': {ref!r}")
    if components != "components":
        raise InvalidReferenceError(f"Reference must start with '#/components/': {ref!r}")

    # JSON pointer escapes
    return namespace, name.replace("~1", "/").replace("~0", "~")


class OpenApiContext:
    """Dereferences objects against the components of one document."""

    def __init__(self, components: Components | None):
        self.components = components

    def resolve(self, obj: Reference | T, kind: type[T]) -> T:
        """Return `obj` itself, or the component it references."""
        if not isinstance(obj, Reference):
            return obj

        if kind is PathItem:
            raise UnsupportedFeatureError("Referencing path items not supported")

        expected, attribute = NAMESPACES[kind]
        namespace, name = split_reference(obj.ref)
        if namespace != expected:
            raise InvalidReferenceError(
                f"Expected #/components/{expected} got #/components/{namespace}"
            )

        if self.components is None:
            raise ReferenceNotFoundError(
                f"Reference {obj.ref!r} found, but components are not specified"
            )

        table = getattr(self.components, attribute)
        if name not in table:
            raise ReferenceNotFoundError(f"Reference {obj.ref!r} not found")

        value = table[name]
        if isinstance(value, Reference):
            raise NestedReferenceError(f"Reference in reference not supported: {obj.ref!r}")
        return value

    def split_parameters(
        self,
        global_params: list[Reference | Parameter],
        local_params: list[Reference | Parameter],
    ) -> SplitParameters:
        """Group path-level then operation-level parameters by location.

        Local parameters do not override global ones; duplicates surface
        later as duplicate properties.
        """
        split = SplitParameters()
        for parameter in [*global_params, *local_params]:
            parameter = self.resolve(parameter, Parameter)
            getattr(split, parameter.location).append(parameter)
        return split

    def content_schema(self, content: dict[str, MediaType]) -> Reference | Schema:
        """Return the schema of a single `application/json` content entry."""
        if len(content) > 1:
            raise UnsupportedFeatureError("Multiple content types are not supported")

        media = content.get(JSON_CONTENT_TYPE)
        if media is None:
            raise UnsupportedFeatureError(f"Only {JSON_CONTENT_TYPE} content type is supported")

        if media.schema_ is None:
            raise UnsupportedFeatureError("Content must have schema specified")
        return media.schema_

    def parameter_schema(self, parameter: Parameter) -> Reference | Schema:
        if parameter.schema_ is not None:
            return parameter.schema_
        if parameter.content is not None:
            return self.content_schema(parameter.content)
        raise UnsupportedFeatureError(f"Parameter {parameter.name!r} must have schema or content")
