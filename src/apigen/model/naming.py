"""Identifier derivation for generated types, fields and variants."""

import re
import unicodedata

from apigen.errors import NamingError

# anything that is not a letter or digit separates words
_SEPARATOR = re.compile(r"[\W_]+")

RUST_KEYWORDS = frozenset(
    {
        "as", "async", "await", "break", "const", "continue", "crate", "dyn",
        "else", "enum", "extern", "false", "fn", "for", "if", "impl", "in",
        "let", "loop", "match", "mod", "move", "mut", "pub", "ref", "return",
        "self", "Self", "static", "struct", "super", "trait", "true", "type",
        "unsafe", "use", "where", "while", "abstract", "become", "box", "do",
        "final", "macro", "override", "priv", "try", "typeof", "unsized",
        "virtual", "yield",
    }
)


def split_words(value: str) -> list[str]:
    """Split on separators, case changes, acronym ends and digit runs.

    Works on any Unicode letters; letters without case (CJK) never start
    a new word on their own.
    """
    words = []
    for run in _SEPARATOR.split(unicodedata.normalize("NFC", value)):
        if run:
            words.extend(_split_run(run))
    return words


def _split_run(run: str) -> list[str]:
    words = []
    start = 0
    for i in range(1, len(run)):
        prev, cur = run[i - 1], run[i]
        following = run[i + 1] if i + 1 < len(run) else ""
        if (
            prev.isdecimal() != cur.isdecimal()
            or (cur.isupper() and not prev.isupper())
            # end of an acronym: "HTTPServer" -> HTTP, Server
            or (prev.isupper() and cur.isupper() and following.islower())
        ):
            words.append(run[start:i])
            start = i
    words.append(run[start:])
    return words


def to_upper_camel(value: str) -> str:
    return "".join(word[0].upper() + word[1:].lower() for word in split_words(value))


def to_snake(value: str) -> str:
    return "_".join(word.lower() for word in split_words(value))


def _escape(identifier: str, source: str) -> str:
    if not identifier:
        raise NamingError(f"Could not derive an identifier from {source!r}")
    if identifier[0].isdigit():
        return f"_{identifier}"
    if identifier in RUST_KEYWORDS:
        return f"{identifier}_"
    return identifier


def to_type_identifier(value: str) -> str:
    """UpperCamel identifier for types and enum variants."""
    return _escape(to_upper_camel(value), value)


def to_field_identifier(value: str) -> str:
    """snake_case identifier for struct fields."""
    return _escape(to_snake(value), value)


def child_name(parent: str, key: str) -> str:
    """Default name of a type nested under `parent` at `key`."""
    return parent + to_upper_camel(key)
