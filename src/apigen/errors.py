"""Error types raised while compiling OpenAPI documents.

Every failure aborts the whole compilation. Errors collect context on the
way up (operation, path, property) without changing their kind, so callers
can still match on the class while users see the full trail.
"""

from collections.abc import Iterator
from contextlib import contextmanager


class ApiGenError(Exception):
    """Base class for all compilation failures."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
        self.context: list[str] = []

    def add_context(self, context: str) -> "ApiGenError":
        self.context.append(context)
        return self

    def __str__(self) -> str:
        return ": ".join([*reversed(self.context), self.message])


class DocumentError(ApiGenError):
    """Input text is not a valid OpenAPI document."""


class ReferenceResolutionError(ApiGenError):
    """A `$ref` pointer could not be dereferenced."""


class InvalidReferenceError(ReferenceResolutionError):
    pass


class ReferenceNotFoundError(ReferenceResolutionError):
    pass


class NestedReferenceError(ReferenceResolutionError):
    pass


class UnsupportedFeatureError(ApiGenError):
    """The document uses a schema feature that is deliberately not supported."""


class NamingError(ApiGenError):
    """Names are missing, duplicated or dangling."""


class OptionalityError(ApiGenError):
    """Invalid combination of `required`, `default` and `nullable`."""


class DefaultValueError(ApiGenError):
    """A default literal does not match the type of its schema."""


class VersionError(ApiGenError):
    """API version is missing, malformed or repeated."""


@contextmanager
def error_context(message: str) -> Iterator[None]:
    """Attach `message` to any ApiGenError raised inside the block."""
    try:
        yield
    except ApiGenError as err:
        err.add_context(message)
        raise
