# File: schemagen/errors.py
"""
SchemaGen - Error Hierarchy
============================

Every failure aborts the whole run.  Callers catch ``SchemaGenError`` (or
one of its kinds) and surface the kind plus the message; nothing is retried
and files already written by a failed run are left on disk.

.. autoexception:: SchemaGenError
.. autoexception:: ConfigurationError
.. autoexception:: CatalogConnectionError
.. autoexception:: IntrospectionError
.. autoexception:: TemplateError
.. autoexception:: GenerationError
"""

from __future__ import annotations

from typing import List


class SchemaGenError(Exception):
    """Base class for all SchemaGen errors."""

    pass


class ConfigurationError(SchemaGenError):
    """Settings are incomplete or invalid; raised before any I/O."""

    pass


class CatalogConnectionError(SchemaGenError, ConnectionError):
    """The database catalog is unreachable or rejected the credentials."""

    pass


class IntrospectionError(SchemaGenError):
    """The catalog returned malformed or inconsistent metadata."""

    pass


class TemplateError(SchemaGenError):
    """A named template is missing or unreadable."""

    pass


class GenerationError(SchemaGenError):
    """An output directory could not be created or a file could not be written."""

    pass


__all__: List[str] = [
    "SchemaGenError",
    "ConfigurationError",
    "CatalogConnectionError",
    "IntrospectionError",
    "TemplateError",
    "GenerationError",
]
