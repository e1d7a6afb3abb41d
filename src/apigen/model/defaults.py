"""Optionality rules and default value providers.

OpenAPI has three independent signals for a value that may be absent:
`required`, `default` and `nullable`. Only four combinations are accepted:

| required | default | nullable | result                 |
|----------|---------|----------|------------------------|
| yes      | yes     | any      | error                  |
| yes      | no      | no       | ok                     |
| yes      | no      | yes      | error                  |
| no       | yes     | any      | ok, uses default       |
| no       | no      | yes      | ok, absent means null  |
| no       | no      | no       | error                  |
"""

import math
from typing import Any

from apigen.errors import DefaultValueError, OptionalityError, UnsupportedFeatureError
from apigen.model.definitions import DefaultProvider, Enum
from apigen.model.naming import to_snake
from apigen.model.store import DefinitionStore
from apigen.model.types import BOOLEAN, FLOAT, INTEGER, STRING, InlineType, Option, Reference


def validate_optionality(required: bool, has_default: bool, nullable: bool) -> None:
    if required and has_default:
        raise OptionalityError("Required value can not have a default")
    if required and nullable:
        raise OptionalityError("Required value can not be nullable")
    if not required and not has_default and not nullable:
        raise OptionalityError(
            "Optional value must either have a default or be nullable"
        )


def push_default(store: DefinitionStore, version: int, value: Any, type_: InlineType) -> str:
    """Register a DefaultProvider for `value` and return its name."""
    optional = isinstance(type_, Option)
    target = type_.inner if optional else type_

    name, expression = _lower_literal(store, value, target)
    if optional:
        name, expression = f"opt_{name}", f"Some({expression})"

    return store.push(name, version, DefaultProvider(vtype=type_, value=expression))


def _lower_literal(store: DefinitionStore, value: Any, target: InlineType) -> tuple[str, str]:
    if isinstance(value, (list, dict)):
        raise UnsupportedFeatureError("Array and object default values are not supported")

    if target == BOOLEAN:
        if not isinstance(value, bool):
            raise _mismatch(value, target)
        literal = "true" if value else "false"
        return f"default_{literal}", literal

    if target == INTEGER:
        if isinstance(value, bool) or not isinstance(value, int):
            raise _mismatch(value, target)
        return f"default_int_{_number_suffix(value)}", str(value)

    if target == FLOAT:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise _mismatch(value, target)
        if not math.isfinite(value):
            raise DefaultValueError(f"Default value {value!r} is not a finite number")
        return f"default_float_{_number_suffix(value)}", repr(float(value))

    if target == STRING:
        if not isinstance(value, str):
            raise _mismatch(value, target)
        return f"default_str_{to_snake(value) or 'empty'}", f"{_string_literal(value)}.to_string()"

    if isinstance(target, Reference):
        definition = store.get(target.name)
        if definition is not None and isinstance(definition.data, Enum) and not definition.data.discriminator:
            variant = definition.data.variant_for(value) if isinstance(value, str) else None
            if variant is None:
                raise DefaultValueError(f"Default value {value!r} is not a variant of {target.name}")
            return (
                f"default_{to_snake(target.name)}_{to_snake(variant.name)}",
                f"{target.name}::{variant.name}",
            )

    raise UnsupportedFeatureError(f"Default values are not supported for type {target}")


def _mismatch(value: Any, target: InlineType) -> DefaultValueError:
    return DefaultValueError(f"Default value {value!r} does not match type {target}")


def _number_suffix(value: int | float) -> str:
    return str(value).replace(".", "_").replace("-", "neg_").replace("+", "")


def _string_literal(value: str) -> str:
    escaped = []
    for char in value:
        if char == "\\":
            escaped.append("\\\\")
        elif char == '"':
            escaped.append('\\"')
        elif char == "\n":
            escaped.append("\\n")
        elif char == "\r":
            escaped.append("\\r")
        elif char == "\t":
            escaped.append("\\t")
        elif ord(char) < 0x20 or ord(char) == 0x7F:
            escaped.append(f"\\u{{{ord(char):x}}}")
        else:
            escaped.append(char)
    return '"' + "".join(escaped) + '"'
