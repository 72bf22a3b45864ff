# File: schemagen/utils.py
"""
SchemaGen - Utility Functions & Helpers
========================================
Name derivation, template token substitution, file I/O and timing helpers
shared by the model and service generators.

Naming strategy:
- ``class_name_of`` / ``relation_accessor_name`` are pure and decorated with
  ``@lru_cache(maxsize=None)``; the same table name is resolved many times
  per run (once per file, once per relationship pointing at it).
- Singularisation is deliberately naive: at most one trailing ``s`` is
  stripped.  Irregular plurals are not handled and already-singular names
  ending in ``s`` are mangled (``status`` → ``Statu``).  Changing this
  changes generated file and class names.
"""

from __future__ import annotations

import functools
import logging
import os
import re
import tempfile
import time
from pathlib import Path
from typing import List, Mapping, Optional, Sequence

from schemagen.errors import GenerationError

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("schemagen.utils")

# ---------------------------------------------------------------------------
# Pre-compiled regex patterns
# ---------------------------------------------------------------------------

_TOKEN_RE: re.Pattern[str] = re.compile(r"\{\{(\w+)\}\}")


# ---------------------------------------------------------------------------
# Name derivation
# ---------------------------------------------------------------------------


@functools.lru_cache(maxsize=None)
def class_name_of(table_name: str) -> str:
    """
    Derive a PHP class name from a table name.

    Examples:
        >>> class_name_of("products")
        'Product'
        >>> class_name_of("order_items")
        'OrderItem'
        >>> class_name_of("status")
        'Statu'
    """
    stem: str = table_name[:-1] if table_name.endswith("s") else table_name
    return "".join(segment[:1].upper() + segment[1:] for segment in stem.split("_"))


@functools.lru_cache(maxsize=None)
def relation_accessor_name(target_table: str, plural: bool = False) -> str:
    """
    Accessor method name for a relationship to *target_table*.

    ``hasMany`` accessors are plural (``orderItems``), ``belongsTo``
    accessors are not (``product``).
    """
    class_name: str = class_name_of(target_table)
    name: str = class_name[:1].lower() + class_name[1:]
    return f"{name}s" if plural else name


# ---------------------------------------------------------------------------
# Template helpers
# ---------------------------------------------------------------------------


def substitute_tokens(template: str, replacements: Mapping[str, str]) -> str:
    """
    Replace every ``{{token}}`` whose name is a key of *replacements*.

    Placeholders not listed in *replacements* are left exactly as they are.
    Substitution is a single pass: replacement values are never re-scanned
    for placeholders.
    """

    def _replace(match: re.Match[str]) -> str:
        token: str = match.group(1)
        if token in replacements:
            return replacements[token]
        return match.group(0)

    return _TOKEN_RE.sub(_replace, template)


def find_tokens(template: str) -> List[str]:
    """Return placeholder names in order of first appearance."""
    seen: List[str] = []
    for match in _TOKEN_RE.finditer(template):
        if match.group(1) not in seen:
            seen.append(match.group(1))
    return seen


def format_quoted_list(items: Sequence[str]) -> str:
    """
    Format items as a comma-joined list of single-quoted PHP strings.

    Example:
        >>> format_quoted_list(["product", "orderItems"])
        "'product','orderItems'"
    """
    return ",".join(f"'{item}'" for item in items)


# ---------------------------------------------------------------------------
# File I/O helpers
# ---------------------------------------------------------------------------


def ensure_directory(path: Path) -> Path:
    """
    Create *path* (and parents) unless it already exists.

    Raises:
        GenerationError: if the filesystem refuses to create the directory.
    """
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise GenerationError(f"Could not create directory {path}: {exc}") from exc
    logger.debug("Ensured directory exists: %s", path)
    return path


def write_file(path: Path, content: str) -> int:
    """
    Write *content* to *path* as UTF-8, replacing any existing file.

    Writes go to a temporary file in the same directory which is then renamed
    over the target, so a crash never leaves a half-written file behind.

    Returns the number of bytes written.

    Raises:
        GenerationError: if the file cannot be written.
    """
    encoded: bytes = content.encode("utf-8")
    tmp_path: Optional[str] = None
    try:
        fd, tmp_path = tempfile.mkstemp(
            dir=str(path.parent),
            prefix=f".{path.name}.",
            suffix=".tmp",
        )
        with os.fdopen(fd, "wb") as fh:
            fh.write(encoded)
        os.replace(tmp_path, str(path))
    except OSError as exc:
        if tmp_path is not None and os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise GenerationError(f"Could not write file {path}: {exc}") from exc

    logger.debug("Wrote %d bytes to %s", len(encoded), path)
    return len(encoded)


# ---------------------------------------------------------------------------
# Timer context manager
# ---------------------------------------------------------------------------


class Timer:
    """
    Simple context-manager timer for profiling pipeline steps.

    Usage:
        with Timer("introspection") as t:
            ...
        print(t.elapsed)
    """

    __slots__ = ("label", "start_time", "end_time", "elapsed")

    def __init__(self, label: str = "operation") -> None:
        self.label: str = label
        self.start_time: float = 0.0
        self.end_time: float = 0.0
        self.elapsed: float = 0.0

    def __enter__(self) -> "Timer":
        self.start_time = time.perf_counter()
        return self

    def __exit__(
        self,
        exc_type: Optional[type],
        exc_val: Optional[BaseException],
        exc_tb: Optional[object],
    ) -> None:
        self.end_time = time.perf_counter()
        self.elapsed = self.end_time - self.start_time
        logger.info("Timer [%s]: %.4f seconds", self.label, self.elapsed)

    def __repr__(self) -> str:
        return f"<Timer {self.label}: {self.elapsed:.4f}s>"


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "class_name_of",
    "relation_accessor_name",
    "substitute_tokens",
    "find_tokens",
    "format_quoted_list",
    "ensure_directory",
    "write_file",
    "Timer",
]

logger.debug("schemagen.utils loaded — %d public symbols.", len(__all__))
