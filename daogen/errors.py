# File: daogen/errors.py
"""
DaoGen - Error Taxonomy
========================

Every failure raised by the generation pipeline derives from
``DaoGenError``.  Third-party exceptions (SQLAlchemy, Jinja2, OS errors)
are translated at the component boundary and chained with ``from`` so the
original cause stays visible in tracebacks.
"""

from __future__ import annotations

from typing import Optional


class DaoGenError(Exception):
    """Base class for all daogen errors."""


class ConfigurationError(DaoGenError):
    """The settings file is missing, unreadable or invalid."""


class DbConnectionError(DaoGenError):
    """The database driver could not be resolved or the connection failed."""


class SchemaReadError(DaoGenError):
    """A metadata query against the database failed."""

    def __init__(self, message: str, table_name: Optional[str] = None) -> None:
        super().__init__(message)
        self.table_name: Optional[str] = table_name


class MappingError(DaoGenError):
    """A table descriptor violates an invariant needed for mapping."""

    def __init__(self, message: str, table_name: str, column_name: str) -> None:
        super().__init__(message)
        self.table_name: str = table_name
        self.column_name: str = column_name


class TableNotFoundError(DaoGenError):
    """The requested table is absent after filtering."""

    def __init__(self, table_name: str) -> None:
        super().__init__(f"Table not found (or filtered out): {table_name!r}")
        self.table_name: str = table_name


class TemplateRenderError(DaoGenError):
    """A template could not be resolved or failed while rendering."""

    def __init__(self, message: str, template_name: str) -> None:
        super().__init__(message)
        self.template_name: str = template_name


class OutputWriteError(DaoGenError):
    """An output directory or file could not be written."""

    def __init__(self, message: str, path: str) -> None:
        super().__init__(message)
        self.path: str = path


__all__ = [
    "DaoGenError",
    "ConfigurationError",
    "DbConnectionError",
    "SchemaReadError",
    "MappingError",
    "TableNotFoundError",
    "TemplateRenderError",
    "OutputWriteError",
]
