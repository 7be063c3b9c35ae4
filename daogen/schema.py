# File: daogen/schema.py
"""
DaoGen - Schema Reader
=======================
Reads table, column and primary-key metadata through SQLAlchemy's
``Inspector`` and normalises it into the descriptors of ``daogen.models``.

Each read runs inside ``_metadata_query`` so that any SQLAlchemy failure
(permissions, closed connection, unknown schema) is turned into a
``SchemaReadError``.  There is no retry and no caching: every call hits
the catalog again.

Complexity: one catalog round-trip per table for columns and one for keys.
"""

from __future__ import annotations

import logging
import re
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

from sqlalchemy import inspect
from sqlalchemy.engine import Connection, Inspector
from sqlalchemy.exc import CompileError, SQLAlchemyError
from sqlalchemy.types import TypeEngine

from daogen.errors import SchemaReadError
from daogen.models import ColumnDesc, PrimaryKeyDesc, TableDesc
from daogen.utils import Timer

logger: logging.Logger = logging.getLogger("daogen.schema")

_TYPE_PARAMS_RE: re.Pattern[str] = re.compile(r"\(.*?\)")


@contextmanager
def _metadata_query(
    connection: Connection,
    what: str,
    table_name: Optional[str] = None,
) -> Iterator[Inspector]:
    """Yield a fresh inspector and translate any SQLAlchemy failure."""
    try:
        yield inspect(connection)
    except SQLAlchemyError as exc:
        target: str = f" for table {table_name!r}" if table_name else ""
        raise SchemaReadError(
            f"Failed to read {what}{target}: {exc}", table_name=table_name
        ) from exc


def native_type_name(col_type: TypeEngine, connection: Connection) -> str:
    """
    Return the database-native label of *col_type* without parameters.

    ``VARCHAR(50)`` becomes ``VARCHAR``, ``NUMERIC(10, 2)`` becomes
    ``NUMERIC``.  Types the dialect cannot render fall back to the class name.
    """
    try:
        compiled: str = col_type.compile(dialect=connection.dialect)
    except (CompileError, NotImplementedError):
        compiled = type(col_type).__name__
    return _TYPE_PARAMS_RE.sub("", compiled).strip().upper()


def column_size(col_type: TypeEngine) -> Optional[int]:
    """Length for character types, precision for numeric ones."""
    for attr in ("length", "precision"):
        value: Any = getattr(col_type, attr, None)
        if isinstance(value, int):
            return value
    return None


# ---------------------------------------------------------------------------
# Catalog queries
# ---------------------------------------------------------------------------


def list_tables(connection: Connection, schema_name: Optional[str] = None) -> List[str]:
    """
    Return the names of the base tables in *schema_name*.

    Views are excluded even if the dialect lists them among the tables.
    """
    with _metadata_query(connection, "table list") as insp:
        names: List[str] = insp.get_table_names(schema=schema_name)
        views: set = set(insp.get_view_names(schema=schema_name))

    tables: List[str] = [name for name in names if name not in views]
    logger.debug(
        "Schema %s: %d table(s) found.", schema_name or "<default>", len(tables)
    )
    return tables


def list_columns(
    connection: Connection,
    table_name: str,
    schema_name: Optional[str] = None,
) -> List[ColumnDesc]:
    """Return the columns of *table_name* in catalog order."""
    with _metadata_query(connection, "columns", table_name) as insp:
        reflected: List[Dict[str, Any]] = insp.get_columns(table_name, schema=schema_name)

    return [
        ColumnDesc(
            column_name=col["name"],
            type_name=native_type_name(col["type"], connection),
            nullable=bool(col.get("nullable", True)),
            size=column_size(col["type"]),
        )
        for col in reflected
    ]


def list_primary_keys(
    connection: Connection,
    table_name: str,
    schema_name: Optional[str] = None,
) -> List[PrimaryKeyDesc]:
    """Return the primary-key columns of *table_name* in key order."""
    with _metadata_query(connection, "primary key", table_name) as insp:
        constraint: Dict[str, Any] = insp.get_pk_constraint(table_name, schema=schema_name)

    key_name: Optional[str] = constraint.get("name")
    return [
        PrimaryKeyDesc(
            key_name=key_name,
            column_name=column_name,
            key_sequence=str(position),
        )
        for position, column_name in enumerate(
            constraint.get("constrained_columns") or [], start=1
        )
    ]


def read_all_table_descs(
    connection: Connection,
    schema_name: Optional[str] = None,
) -> List[TableDesc]:
    """
    Read a descriptor for every table in the schema.

    The first failing query aborts the whole read; no partial list is returned.
    """
    with Timer("read schema") as timer:
        descs: List[TableDesc] = [
            TableDesc(
                table_name=table_name,
                primary_keys=tuple(list_primary_keys(connection, table_name, schema_name)),
                columns=tuple(list_columns(connection, table_name, schema_name)),
            )
            for table_name in list_tables(connection, schema_name)
        ]

    logger.info(
        "Read %d table descriptor(s) from schema %s in %.3fs.",
        len(descs),
        schema_name or "<default>",
        timer.elapsed,
    )
    return descs


__all__ = [
    "list_tables",
    "list_columns",
    "list_primary_keys",
    "read_all_table_descs",
    "native_type_name",
    "column_size",
]
