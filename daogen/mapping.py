# File: daogen/mapping.py
"""
DaoGen - Mapping Engine
========================
Pure transforms from ``TableDesc`` to the flattened render context handed
to the template engine::

    TableDesc ──▶ primary-key entries ─┐
              └─▶ column entries ──────┴─▶ build_render_context(className)

Each entry is a plain dict with the keys ``name`` (from the caller's
property-name mapper), ``camelizeName`` (always ``camelize(columnName)``),
``typeName`` (from the caller's type-name mapper) and ``nullable``.

The module also ships the stock mapper functions used when a settings
file does not override them.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from daogen.errors import MappingError
from daogen.models import ColumnDesc, TableDesc
from daogen.utils import lower_first, to_camel_case

logger: logging.Logger = logging.getLogger("daogen.mapping")

# ---------------------------------------------------------------------------
# Mapper signatures
# ---------------------------------------------------------------------------

ClassNameMapper = Callable[[str], Sequence[str]]
TypeNameMapper = Callable[[str], str]
PropertyNameMapper = Callable[[str], str]
TableNameFilter = Callable[[str], bool]
TemplateNameMapper = Callable[[str], str]

RenderEntry = Dict[str, Any]
RenderContext = Dict[str, Any]

_SEGMENT_DELIMITER: str = "_"


def camelize(identifier: str) -> str:
    """
    Convert an underscore-separated identifier to UpperCamelCase.

    Each segment is lower-cased and its first letter upper-cased, so
    upper-case catalogs (H2, Oracle, DB2) camelize the same way.

    Examples:
        >>> camelize("user_id")
        'UserId'
        >>> camelize("id")
        'Id'
        >>> camelize("ORDER_LINES")
        'OrderLines'
    """
    return "".join(
        segment[0].upper() + segment[1:].lower()
        for segment in identifier.split(_SEGMENT_DELIMITER)
        if segment
    )


def _entry(
    column: ColumnDesc,
    type_mapper: TypeNameMapper,
    property_mapper: PropertyNameMapper,
) -> RenderEntry:
    return {
        "name": property_mapper(column.column_name),
        "camelizeName": camelize(column.column_name),
        "typeName": type_mapper(column.type_name),
        "nullable": column.nullable,
    }


def build_primary_key_entries(
    type_mapper: TypeNameMapper,
    property_mapper: PropertyNameMapper,
    table_desc: TableDesc,
) -> List[RenderEntry]:
    """
    Build one entry per primary-key column, in key order.

    Raises:
        MappingError: a key column is missing from the table's columns.
    """
    entries: List[RenderEntry] = []
    for key in table_desc.primary_keys:
        column: Optional[ColumnDesc] = table_desc.find_column(key.column_name)
        if column is None:
            raise MappingError(
                f"Primary-key column {key.column_name!r} not found among the "
                f"columns of table {table_desc.table_name!r}.",
                table_name=table_desc.table_name,
                column_name=key.column_name,
            )
        entries.append(_entry(column, type_mapper, property_mapper))
    return entries


def build_column_entries(
    type_mapper: TypeNameMapper,
    property_mapper: PropertyNameMapper,
    table_desc: TableDesc,
) -> List[RenderEntry]:
    """Build one entry per non-key column, preserving catalog order."""
    key_names: frozenset = frozenset(table_desc.primary_key_column_names)
    return [
        _entry(column, type_mapper, property_mapper)
        for column in table_desc.columns
        if column.column_name not in key_names
    ]


def build_render_context(
    primary_key_entries: Sequence[RenderEntry],
    column_entries: Sequence[RenderEntry],
    class_name: str,
    table_name: Optional[str] = None,
) -> RenderContext:
    """Compose the flattened mapping handed to the template engine."""
    primary_keys: List[RenderEntry] = [dict(e) for e in primary_key_entries]
    columns: List[RenderEntry] = [dict(e) for e in column_entries]
    return {
        "className": class_name,
        "lowerCamelClassName": lower_first(class_name),
        "tableName": table_name,
        "primaryKeys": primary_keys,
        "columns": columns,
        "primaryKeysWithColumns": primary_keys + columns,
    }


def map_table(
    table_desc: TableDesc,
    class_name: str,
    type_mapper: TypeNameMapper,
    property_mapper: PropertyNameMapper,
) -> RenderContext:
    """Run the full mapping for one (table, class name) pair."""
    primary_keys: List[RenderEntry] = build_primary_key_entries(
        type_mapper, property_mapper, table_desc
    )
    columns: List[RenderEntry] = build_column_entries(
        type_mapper, property_mapper, table_desc
    )
    return build_render_context(primary_keys, columns, class_name, table_desc.table_name)


# ---------------------------------------------------------------------------
# Stock mappers
# ---------------------------------------------------------------------------


def default_class_name_mapper(table_name: str) -> List[str]:
    return [camelize(table_name)]


def default_property_name_mapper(column_name: str) -> str:
    return to_camel_case(column_name)


class TypeNameMap:
    """
    Type-name mapper backed by a lookup table.

    Lookups are case-insensitive on the native type label; unknown labels
    map to *default*, or pass through unchanged when *default* is None.
    """

    def __init__(self, mapping: Mapping[str, str], default: Optional[str] = None) -> None:
        self._mapping: Dict[str, str] = {k.upper(): v for k, v in mapping.items()}
        self._default: Optional[str] = default

    def __call__(self, type_name: str) -> str:
        mapped: Optional[str] = self._mapping.get(type_name.upper())
        if mapped is not None:
            return mapped
        if self._default is None:
            return type_name
        logger.debug("No mapping for type %r, using %r.", type_name, self._default)
        return self._default

    @property
    def default(self) -> Optional[str]:
        return self._default

    def __repr__(self) -> str:
        return f"<TypeNameMap {len(self._mapping)} types, default={self._default!r}>"


PYTHON_TYPE_NAMES: Dict[str, str] = {
    "INTEGER": "int",
    "INT": "int",
    "SMALLINT": "int",
    "BIGINT": "int",
    "TINYINT": "int",
    "SERIAL": "int",
    "BIGSERIAL": "int",
    "BOOLEAN": "bool",
    "BOOL": "bool",
    "BIT": "bool",
    "REAL": "float",
    "FLOAT": "float",
    "DOUBLE": "float",
    "DOUBLE PRECISION": "float",
    "NUMERIC": "Decimal",
    "DECIMAL": "Decimal",
    "CHAR": "str",
    "VARCHAR": "str",
    "NCHAR": "str",
    "NVARCHAR": "str",
    "TEXT": "str",
    "CLOB": "str",
    "UUID": "UUID",
    "DATE": "date",
    "TIME": "time",
    "DATETIME": "datetime",
    "TIMESTAMP": "datetime",
    "TIMESTAMP WITHOUT TIME ZONE": "datetime",
    "TIMESTAMP WITH TIME ZONE": "datetime",
    "BLOB": "bytes",
    "BYTEA": "bytes",
    "BINARY": "bytes",
    "VARBINARY": "bytes",
    "JSON": "dict",
    "JSONB": "dict",
}

default_type_name_mapper: TypeNameMap = TypeNameMap(PYTHON_TYPE_NAMES, default="Any")


__all__: List[str] = [
    "ClassNameMapper",
    "TypeNameMapper",
    "PropertyNameMapper",
    "TableNameFilter",
    "TemplateNameMapper",
    "RenderEntry",
    "RenderContext",
    "camelize",
    "build_primary_key_entries",
    "build_column_entries",
    "build_render_context",
    "map_table",
    "default_class_name_mapper",
    "default_property_name_mapper",
    "TypeNameMap",
    "PYTHON_TYPE_NAMES",
    "default_type_name_mapper",
]
