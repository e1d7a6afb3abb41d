"""OpenAPI document loader.

Accepts YAML or JSON text (JSON is a subset of YAML).
"""

import yaml
from pydantic import ValidationError

from apigen.errors import DocumentError
from apigen.parser.base import OpenApiDocument


def load_document(content: str) -> OpenApiDocument:
    """Parse OpenAPI text into an OpenApiDocument."""
    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise DocumentError(f"Could not deserialize input: {e}") from e

    if not isinstance(data, dict):
        raise DocumentError("Document root must be a mapping")

    try:
        return OpenApiDocument.model_validate(data)
    except ValidationError as e:
        raise DocumentError(f"Invalid OpenAPI document: {e}") from e
