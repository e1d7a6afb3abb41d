"""Insertion-ordered, structurally deduplicating store of definitions.

Pushing a definition that is structurally equal to one already stored
returns the existing name. Pushing a different definition under a taken
name renames it by appending the major version of the document it came
from. A content-keyed index makes the equality lookup constant time
while keeping the first-registered name as the canonical one.
"""

import logging

from apigen.errors import NamingError
from apigen.model.definitions import Definition, DefinitionData, RustOperation

logger = logging.getLogger(__name__)


def versioned_name(name: str, version: int, transparent: bool) -> str:
    if transparent:
        return f"{name}_v{version}"
    return f"{name}V{version}"


class DefinitionStore:
    """Definitions and operations accumulated during one compilation."""

    def __init__(self):
        self.definitions: dict[str, Definition] = {}
        self.operations: dict[str, RustOperation] = {}
        self._definition_names: dict[Definition, str] = {}
        self._operation_names: dict[RustOperation, str] = {}

    def push(self, name: str, version: int, data: DefinitionData) -> str:
        """Store a definition and return the name it is available under."""
        definition = Definition(data=data)

        existing = self._definition_names.get(definition)
        if existing is not None:
            if existing != name:
                logger.debug("Reusing definition %s for %s", existing, name)
            return existing

        if name in self.definitions:
            renamed = versioned_name(name, version, definition.transparent)
            logger.debug("Definition name %s is taken, renaming to %s", name, renamed)
            name = renamed

        if name in self.definitions:
            raise NamingError(f"Duplicate definition name {name!r}")

        self.definitions[name] = definition
        self._definition_names[definition] = name
        return name

    def push_operation(self, name: str, version: int, operation: RustOperation) -> str:
        """Store an operation and return the name it is available under."""
        existing = self._operation_names.get(operation)
        if existing is not None:
            return existing

        if name in self.operations:
            renamed = versioned_name(name, version, transparent=True)
            logger.debug("Operation name %s is taken, renaming to %s", name, renamed)
            name = renamed

        if name in self.operations:
            raise NamingError(f"Duplicate operation name {name!r}")

        self.operations[name] = operation
        self._operation_names[operation] = name
        return name

    def get(self, name: str) -> Definition | None:
        return self.definitions.get(name)

    def __contains__(self, name: str) -> bool:
        return name in self.definitions

    def __len__(self) -> int:
        return len(self.definitions)
