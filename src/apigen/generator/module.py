"""Multi-version API module builder.

Each input document describes one major version of the API. All documents
share one DefinitionStore, so identical types and operations across versions
collapse into one, while differently shaped types under the same name get a
version suffix. Routes are served under `/v<N>/...`; version 1 is also
served without a prefix.
"""

import logging

from apigen.errors import NamingError, VersionError, error_context
from apigen.model.definitions import (
    ApiModule,
    ApiService,
    HttpMethod,
    OperationPath,
    Redirect,
    RustOperation,
    StaticHtmlPath,
    StaticService,
    StaticStr,
    StaticStringPath,
)
from apigen.model.inliner import TypeInliner
from apigen.model.naming import to_type_identifier
from apigen.model.store import DefinitionStore
from apigen.model.types import Path, Query
from apigen.parser import base as oas
from apigen.parser.context import OpenApiContext

logger = logging.getLogger(__name__)


def parse_major_version(version: str) -> int:
    """Major version of a semver-like `info.version` string."""
    major = version.split(".")[0]
    if not (major.isascii() and major.isdigit()):
        raise VersionError(f"Could not parse major version from {version!r}")
    return int(major)


def to_rust_operation(
    inliner: TypeInliner,
    operation: oas.Operation,
    global_params: list[oas.Reference | oas.Parameter],
) -> tuple[str, RustOperation]:
    """Convert one OpenAPI operation, returning its name and model."""
    name = operation.operation_id
    if not name:
        raise NamingError("Operation must have operation_id")

    name_upper = to_type_identifier(name)
    doc = operation.summary or operation.description

    params = inliner.ctx.split_parameters(global_params, operation.parameters)
    params.ensure_supported()

    param_path = inliner.inline_parameters(params.path, f"{name_upper}Path")
    param_query = inliner.inline_parameters(params.query, f"{name_upper}Query")
    param_body = inliner.inline_request_body(operation.request_body, f"{name_upper}Body")
    response = inliner.inline_responses(operation.responses, name_upper)

    return name, RustOperation(
        doc=doc,
        param_path=Path(inner=param_path) if param_path is not None else None,
        param_query=Query(inner=param_query) if param_query is not None else None,
        param_body=param_body,
        response=response,
    )


class ApiModuleBuilder:
    """Accumulates documents into one ApiModule."""

    def __init__(self, docs_path: str):
        self.docs_path = docs_path
        self.store = DefinitionStore()
        self.paths: list[OperationPath] = []
        self.static_services: list[StaticService] = []
        self.versions: set[int] = set()

    def add_document(self, document: oas.OpenApiDocument, spec_path: str) -> None:
        version = parse_major_version(document.info.version)
        if version in self.versions:
            raise VersionError(f"Major version {version} is specified more than once")
        self.versions.add(version)
        logger.info("Processing %s (version %d)", spec_path, version)

        self._add_version_services(version, spec_path)

        ctx = OpenApiContext(document.components)
        inliner = TypeInliner(ctx, self.store, version)

        for path, path_item in document.paths.items():
            with error_context(f"Could not resolve path item {path}"):
                path_item = ctx.resolve(path_item, oas.PathItem)

            for method in HttpMethod:
                operation = getattr(path_item, method.attribute)
                if operation is None:
                    continue

                with error_context(f"Could not convert to rust operation at {method.attribute} {path}"):
                    name, rust_operation = to_rust_operation(inliner, operation, path_item.parameters)
                    name = self.store.push_operation(name, version, rust_operation)
                    for route in _versioned_routes(version, path):
                        self._add_path(OperationPath(operation=name, path=route, method=method))

    def build(self) -> ApiModule:
        if not self.versions:
            raise VersionError("No API version found")

        latest = max(self.versions)
        if latest == 1:
            root = self.store.push("to_docs", latest, Redirect(target="docs"))
        else:
            root = self.store.push(f"to_v{latest}_docs", latest, Redirect(target=f"v{latest}/docs"))
        self._add_static_service("/", root)

        module = ApiModule(
            api=ApiService(
                definitions=self.store.definitions,
                operations=self.store.operations,
                paths=sorted(self.paths, key=lambda p: p.path),
                static_services=sorted(self.static_services, key=lambda s: s.path),
            )
        )
        _check_references(module)
        return module

    # Routes
    # -------------------------------

    def _add_path(self, route: OperationPath) -> None:
        for existing in self.paths:
            if (existing.method, existing.path) != (route.method, route.path):
                continue
            if existing == route:
                return
            raise NamingError(
                f"Route {route.method.attribute} {route.path} is already served by {existing.operation!r}"
            )
        self.paths.append(route)

    def _add_static_service(self, path: str, target: str) -> None:
        service = StaticService(path=path, data=target)
        for existing in self.static_services:
            if existing.path != path:
                continue
            if existing == service:
                return
            raise NamingError(f"Static route {path} is already served by {existing.data!r}")
        self.static_services.append(service)

    def _add_version_services(self, version: int, spec_path: str) -> None:
        if version == 1:
            self._add_docs_services("", version, spec_path)

        prefix = f"v{version}"
        to_version_docs = self.store.push(
            f"to_{prefix}_docs", version, Redirect(target=f"{prefix}/docs")
        )
        self._add_static_service(f"/{prefix}", to_version_docs)
        # relative to "/v<N>/"
        to_docs = self.store.push("to_docs", version, Redirect(target="docs"))
        self._add_static_service(f"/{prefix}/", to_docs)

        self._add_docs_services(f"/{prefix}", version, spec_path)

    def _add_docs_services(self, prefix: str, version: int, spec_path: str) -> None:
        openapi_str = self.store.push("DOCS_OPENAPI", version, StaticStr(path=spec_path))
        html_str = self.store.push("DOCS_HTML", version, StaticStr(path=self.docs_path))
        openapi = self.store.push("openapi", version, StaticStringPath(data=openapi_str))
        docs = self.store.push("docs", version, StaticHtmlPath(data=html_str))

        self._add_static_service(f"{prefix}/openapi.yaml", openapi)
        self._add_static_service(f"{prefix}/docs", docs)


def _versioned_routes(version: int, path: str) -> list[str]:
    routes = [f"/v{version}{path}"]
    if version == 1:
        routes.insert(0, path)
    return routes


def _check_references(module: ApiModule) -> None:
    """Every name the renderer will look up must be defined."""
    api = module.api
    for name, definition in api.definitions.items():
        for ref in definition.data.references():
            if ref not in api.definitions:
                raise NamingError(f"Definition {name!r} refers to unknown definition {ref!r}")

    for name, operation in api.operations.items():
        for ref in operation.references():
            if ref not in api.definitions:
                raise NamingError(f"Operation {name!r} refers to unknown definition {ref!r}")

    for route in api.paths:
        if route.operation not in api.operations:
            raise NamingError(f"Route {route.path} refers to unknown operation {route.operation!r}")

    for service in api.static_services:
        if service.data not in api.definitions:
            raise NamingError(f"Static route {service.path} refers to unknown definition {service.data!r}")
