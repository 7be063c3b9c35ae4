# File: daogen/__init__.py
"""
DaoGen — Schema-Driven DAO Source Generator
=============================================

Reads table, column and primary-key metadata from a live database and
renders one source file per (table, class name) pair from Jinja2 templates.

Architecture overview::

    ┌──────────────┐     ┌──────────────┐     ┌────────────────┐
    │  CLI / Entry │────▶│ DaoGenerator │────▶│TemplateRenderer│
    │   (cli.py)   │     │(generator.py)│     │ (renderer.py)  │
    └──────────────┘     └──────┬───────┘     └────────────────┘
                                │
             ┌──────────────┬───┴──────────┬──────────────┐
             ▼              ▼              ▼              ▼
       ┌──────────┐   ┌──────────┐   ┌──────────┐   ┌───────────┐
       │connection│   │  schema  │   │ mapping  │   │ exporters │
       └──────────┘   └──────────┘   └──────────┘   └───────────┘

Usage::

    # As a library
    from daogen import load_settings, generate_from_settings
    paths = generate_from_settings(load_settings("daogen.yaml"), ["users"])

    # From the command line
    python -m daogen -c daogen.yaml users -v
"""

from __future__ import annotations

__version__: str = "1.0.0"
__license__: str = "MIT"

from daogen.errors import (
    ConfigurationError,
    DaoGenError,
    DbConnectionError,
    MappingError,
    OutputWriteError,
    SchemaReadError,
    TableNotFoundError,
    TemplateRenderError,
)
from daogen.models import ColumnDesc, PrimaryKeyDesc, TableDesc
from daogen.connection import connect, open_connection
from daogen.schema import (
    list_columns,
    list_primary_keys,
    list_tables,
    read_all_table_descs,
)
from daogen.mapping import (
    TypeNameMap,
    build_column_entries,
    build_primary_key_entries,
    build_render_context,
    camelize,
)
from daogen.renderer import TemplateRenderer
from daogen.exporters import write_generated_file
from daogen.generator import (
    DaoGenerator,
    GenerationContext,
    generate_from_settings,
    list_generatable_tables,
)
from daogen.config import GeneratorSettings, load_settings

__all__: list[str] = [
    "__version__",
    "__license__",
    # Errors
    "DaoGenError",
    "ConfigurationError",
    "DbConnectionError",
    "SchemaReadError",
    "MappingError",
    "TableNotFoundError",
    "TemplateRenderError",
    "OutputWriteError",
    # Descriptors
    "ColumnDesc",
    "PrimaryKeyDesc",
    "TableDesc",
    # Pipeline
    "connect",
    "open_connection",
    "list_tables",
    "list_columns",
    "list_primary_keys",
    "read_all_table_descs",
    "camelize",
    "build_primary_key_entries",
    "build_column_entries",
    "build_render_context",
    "TypeNameMap",
    "TemplateRenderer",
    "write_generated_file",
    "DaoGenerator",
    "GenerationContext",
    "generate_from_settings",
    "list_generatable_tables",
    # Settings
    "GeneratorSettings",
    "load_settings",
]
