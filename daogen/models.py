# File: daogen/models.py
"""
DaoGen - Schema Descriptor Models
==================================
Immutable Pydantic V2 snapshots of the database metadata read by
``daogen.schema``.  One instance is built per metadata row and never
mutated afterwards; a fresh set is read on every generation run.

    ColumnDesc      ← one row of column metadata
    PrimaryKeyDesc  ← one row of primary-key metadata
    TableDesc       ← table name + its primary keys + its columns

``TableDesc`` does NOT check that every primary-key column exists among
its columns.  That lookup happens in ``daogen.mapping`` and fails there
with ``MappingError``.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("daogen.models")

# ---------------------------------------------------------------------------
# Shared model configuration
# ---------------------------------------------------------------------------

_DESCRIPTOR_CONFIG: ConfigDict = ConfigDict(
    strict=False,
    populate_by_name=True,
    frozen=True,
    extra="forbid",
)


class ColumnDesc(BaseModel):
    """A single column as reported by the database catalog."""

    model_config = _DESCRIPTOR_CONFIG

    column_name: str = Field(..., min_length=1, description="Column name.")
    type_name: str = Field(
        ..., description="Database-native type label, e.g. 'VARCHAR'."
    )
    nullable: bool = Field(..., description="True when the column accepts NULL.")
    size: Optional[int] = Field(
        default=None, description="Length or precision, when the catalog reports one."
    )

    def __repr__(self) -> str:
        null_marker: str = "NULL" if self.nullable else "NOT NULL"
        size_marker: str = f"({self.size})" if self.size is not None else ""
        return f"<ColumnDesc {self.column_name} {self.type_name}{size_marker} {null_marker}>"


class PrimaryKeyDesc(BaseModel):
    """One column of a table's primary key."""

    model_config = _DESCRIPTOR_CONFIG

    key_name: Optional[str] = Field(
        default=None, description="Constraint name (some databases report none)."
    )
    column_name: str = Field(..., min_length=1, description="Key column name.")
    key_sequence: str = Field(
        ...,
        description="Ordinal position within the key, kept as reported (a string).",
    )

    def __repr__(self) -> str:
        return f"<PrimaryKeyDesc {self.column_name} seq={self.key_sequence}>"


class TableDesc(BaseModel):
    """Normalized snapshot of one table: name, primary keys, columns."""

    model_config = _DESCRIPTOR_CONFIG

    table_name: str = Field(..., min_length=1, description="Table name.")
    primary_keys: Tuple[PrimaryKeyDesc, ...] = Field(
        default=(), description="Primary-key columns in key order."
    )
    columns: Tuple[ColumnDesc, ...] = Field(
        default=(), description="Columns in catalog order."
    )

    @property
    def primary_key_column_names(self) -> List[str]:
        return [pk.column_name for pk in self.primary_keys]

    @property
    def column_names(self) -> List[str]:
        return [col.column_name for col in self.columns]

    def find_column(self, column_name: str) -> Optional[ColumnDesc]:
        """Return the column named *column_name*, or None."""
        for col in self.columns:
            if col.column_name == column_name:
                return col
        return None

    def __repr__(self) -> str:
        return (
            f"<TableDesc {self.table_name}: "
            f"{len(self.columns)} columns, {len(self.primary_keys)} pk>"
        )


__all__: List[str] = [
    "ColumnDesc",
    "PrimaryKeyDesc",
    "TableDesc",
]
