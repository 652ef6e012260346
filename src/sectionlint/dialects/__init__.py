"""Dialect registry.

Dialects are the per-language adapters behind the tokenizer. They are
looked up by name (or alias) or inferred from a file extension.

Example:
    >>> from sectionlint.dialects import dialect_for_path, get_dialect
    >>> get_dialect("csharp").display_name
    'C#'
    >>> dialect_for_path("tests/test_orders.py").name
    'python'
"""

from __future__ import annotations

from pathlib import PurePath
from types import MappingProxyType
from typing import Final

from sectionlint.dialects.base import Dialect
from sectionlint.dialects.builtin import BUILTIN_DIALECTS
from sectionlint.errors import UnsupportedDialectError


def _build_name_index() -> MappingProxyType[str, Dialect]:
    index: dict[str, Dialect] = {}
    for dialect in BUILTIN_DIALECTS:
        index[dialect.name] = dialect
        for alias in dialect.aliases:
            index.setdefault(alias, dialect)
    return MappingProxyType(index)


def _build_extension_index() -> MappingProxyType[str, Dialect]:
    index: dict[str, Dialect] = {}
    for dialect in BUILTIN_DIALECTS:
        for extension in dialect.extensions:
            # first registration wins (.h belongs to C)
            index.setdefault(extension.lower(), dialect)
    return MappingProxyType(index)


_BY_NAME: Final[MappingProxyType[str, Dialect]] = _build_name_index()
_BY_EXTENSION: Final[MappingProxyType[str, Dialect]] = _build_extension_index()


def available_dialects() -> list[str]:
    """Return the canonical names of all registered dialects, sorted."""
    return sorted(dialect.name for dialect in BUILTIN_DIALECTS)


def get_dialect(name: str, *, path: str = "<config>") -> Dialect:
    """Look up a dialect by name or alias (case-insensitive).

    Args:
        name: Dialect name or alias (e.g. "csharp", "c#", "ts").
        path: File the lookup is for, used in the error message.

    Returns:
        The matching Dialect.

    Raises:
        UnsupportedDialectError: If no dialect has that name.
    """
    dialect = _BY_NAME.get(name.strip().lower())
    if dialect is None:
        raise UnsupportedDialectError(path, name, available_dialects())
    return dialect


def dialect_for_path(path: str | PurePath) -> Dialect:
    """Infer the dialect of a file from its extension.

    Raises:
        UnsupportedDialectError: If the extension is not registered.
    """
    suffix = PurePath(path).suffix.lower()
    dialect = _BY_EXTENSION.get(suffix)
    if dialect is None:
        raise UnsupportedDialectError(str(path), suffix or "<none>", available_dialects())
    return dialect


def supported_extensions() -> frozenset[str]:
    """Return every file extension with a registered dialect."""
    return frozenset(_BY_EXTENSION)


__all__ = [
    "Dialect",
    "available_dialects",
    "dialect_for_path",
    "get_dialect",
    "supported_extensions",
]
