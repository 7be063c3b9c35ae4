# File: daogen/generator.py
"""
DaoGen - Generation Orchestrator
=================================

Connects every stage of the pipeline::

    Connection → Schema Reader → table filter → Mapping Engine
               → Template Renderer → File Materializer

Three entry points share one algorithm: pick table descriptors, fan each
table out to its class names, and generate one file per (table, class)
pair, sequentially.

Error handling strategy:
    - Fail-fast.  The first ``DaoGenError`` from any stage aborts the rest
      of the run and propagates to the caller.  No partial list of paths
      is returned.
    - Files written before the failure stay on disk; each of them was
      written atomically.
    - ``generate_many`` tolerates requested names that match no table: it
      logs a warning per name and carries on.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Iterable, List, Optional, Sequence, Set

from sqlalchemy.engine import Connection

from daogen.connection import open_connection
from daogen.errors import DaoGenError, TableNotFoundError
from daogen.exporters import DEFAULT_FILE_EXTENSION, write_generated_file
from daogen.mapping import (
    ClassNameMapper,
    PropertyNameMapper,
    RenderContext,
    TableNameFilter,
    TemplateNameMapper,
    TypeNameMapper,
    map_table,
)
from daogen.models import TableDesc
from daogen.renderer import TemplateRenderer
from daogen.schema import list_tables, read_all_table_descs
from daogen.utils import Timer

if TYPE_CHECKING:
    from daogen.config import GeneratorSettings

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("daogen.generator")

OutputDirectoryMapper = Callable[[str], Path]


# ---------------------------------------------------------------------------
# Generation context
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class GenerationContext:
    """
    Everything one generation request needs, bundled once per invocation.

    The connection is borrowed: whoever built the context opens and closes it.
    """

    connection: Connection
    class_name_mapper: ClassNameMapper
    type_name_mapper: TypeNameMapper
    property_name_mapper: PropertyNameMapper
    table_name_filter: TableNameFilter
    template_directory: Path
    template_name_mapper: TemplateNameMapper
    output_directory_mapper: OutputDirectoryMapper
    schema_name: Optional[str] = None
    file_extension: str = DEFAULT_FILE_EXTENSION


# ---------------------------------------------------------------------------
# DaoGenerator — orchestrator
# ---------------------------------------------------------------------------


class DaoGenerator:
    """
    Generates source files for the tables of a live database.

    Usage::

        with open_connection("sqlite", "sqlite:///app.db") as conn:
            generator = DaoGenerator(context_for(conn))
            paths = generator.generate_all()

    One instance serves one request; the context it wraps is not reused.
    """

    def __init__(self, context: GenerationContext) -> None:
        self._context: GenerationContext = context
        self._renderer: TemplateRenderer = TemplateRenderer(context.template_directory)

    @property
    def context(self) -> GenerationContext:
        return self._context

    # -----------------------------------------------------------------
    # Public entry points
    # -----------------------------------------------------------------

    def generate_one(self, table_name: str) -> List[Path]:
        """
        Generate the files for the single table named *table_name*.

        Raises:
            TableNotFoundError: the table does not exist or is filtered out.
        """
        logger.info("Generating for table %r.", table_name)
        for table_desc in self.filtered_table_descs():
            if table_desc.table_name == table_name:
                return self._generate_tables([table_desc])
        raise TableNotFoundError(table_name)

    def generate_many(self, table_names: Iterable[str]) -> List[Path]:
        """
        Generate the files for every requested table that exists.

        Output follows catalog order, not the order of *table_names*.
        Requested names with no matching table are skipped with a warning.
        """
        requested: List[str] = list(table_names)
        wanted: Set[str] = set(requested)
        selected: List[TableDesc] = [
            desc for desc in self.filtered_table_descs() if desc.table_name in wanted
        ]

        found: Set[str] = {desc.table_name for desc in selected}
        for name in requested:
            if name not in found:
                logger.warning("Requested table %r not found (or filtered out); skipped.", name)

        logger.info(
            "Generating for %d of %d requested table(s).", len(selected), len(wanted)
        )
        return self._generate_tables(selected)

    def generate_all(self) -> List[Path]:
        """Generate the files for every table that passes the table filter."""
        selected: List[TableDesc] = self.filtered_table_descs()
        logger.info("Generating for all %d table(s).", len(selected))
        return self._generate_tables(selected)

    # -----------------------------------------------------------------
    # Pipeline steps
    # -----------------------------------------------------------------

    def filtered_table_descs(self) -> List[TableDesc]:
        """Read the schema and keep the tables accepted by the table filter."""
        ctx: GenerationContext = self._context
        descs: List[TableDesc] = read_all_table_descs(ctx.connection, ctx.schema_name)
        kept: List[TableDesc] = [d for d in descs if ctx.table_name_filter(d.table_name)]
        if len(kept) != len(descs):
            logger.debug("Table filter kept %d of %d table(s).", len(kept), len(descs))
        return kept

    def generate_file(self, class_name: str, table_desc: TableDesc) -> Path:
        """Map, render and write the file for one (table, class name) pair."""
        ctx: GenerationContext = self._context
        template_name: str = ctx.template_name_mapper(class_name)
        output_directory: Path = Path(ctx.output_directory_mapper(class_name))

        render_context: RenderContext = map_table(
            table_desc, class_name, ctx.type_name_mapper, ctx.property_name_mapper
        )
        text: str = self._renderer.render(template_name, render_context)
        path: Path = write_generated_file(
            output_directory, class_name, text, ctx.file_extension
        )

        logger.info(
            "tableName = %s, templateName = %s, generated file = %s",
            table_desc.table_name,
            template_name,
            path,
        )
        return path

    def _generate_tables(self, table_descs: Sequence[TableDesc]) -> List[Path]:
        ctx: GenerationContext = self._context
        paths: List[Path] = []

        with Timer("generate files") as timer:
            try:
                for table_desc in table_descs:
                    for class_name in ctx.class_name_mapper(table_desc.table_name):
                        paths.append(self.generate_file(class_name, table_desc))
            except DaoGenError as exc:
                logger.error(
                    "Generation aborted after %d file(s): %s: %s",
                    len(paths),
                    type(exc).__name__,
                    exc,
                )
                raise

        logger.info(
            "Generated %d file(s) from %d table(s) in %.3fs.",
            len(paths),
            len(table_descs),
            timer.elapsed,
        )
        return paths


# ---------------------------------------------------------------------------
# Settings-driven entry points
# ---------------------------------------------------------------------------


def generate_from_settings(
    settings: "GeneratorSettings",
    table_names: Optional[Sequence[str]] = None,
) -> List[Path]:
    """
    Full request: open the connection, build the context, generate, close.

    No table names generates everything; one name uses ``generate_one``
    (so a missing table is an error); several use ``generate_many``.
    """
    db = settings.database
    with open_connection(db.driver, db.url, db.user, db.resolve_password()) as connection:
        generator: DaoGenerator = DaoGenerator(settings.build_context(connection))
        if not table_names:
            return generator.generate_all()
        if len(table_names) == 1:
            return generator.generate_one(table_names[0])
        return generator.generate_many(table_names)


def list_generatable_tables(settings: "GeneratorSettings") -> List[str]:
    """Names of the tables a full run would generate for, in catalog order."""
    db = settings.database
    with open_connection(db.driver, db.url, db.user, db.resolve_password()) as connection:
        table_filter: TableNameFilter = settings.table_name_filter()
        return [name for name in list_tables(connection, db.schema_name) if table_filter(name)]


__all__: List[str] = [
    "GenerationContext",
    "DaoGenerator",
    "generate_from_settings",
    "list_generatable_tables",
]
