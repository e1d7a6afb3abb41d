"""Entry points for compiling a set of OpenAPI documents."""

from pydantic import BaseModel

from apigen.errors import error_context
from apigen.generator.module import ApiModuleBuilder
from apigen.model.definitions import ApiModule
from apigen.parser.openapi import load_document


class OpenApiSpec(BaseModel):
    """One input document and the path it is served from, relative to the generated code."""

    content: str
    path: str


def to_api_module(docs_path: str, specs: list[OpenApiSpec]) -> ApiModule:
    """Compile all documents into one ApiModule.

    Documents are processed in order; each must declare a distinct major version.
    """
    builder = ApiModuleBuilder(docs_path)
    for spec in specs:
        with error_context(f"Could not generate module from {spec.path}"):
            builder.add_document(load_document(spec.content), spec.path)
    return builder.build()


def generate_api(docs_path: str, specs: list[OpenApiSpec]) -> str:
    """Compile all documents and return the serialized model."""
    return to_api_module(docs_path, specs).dump_yaml()
