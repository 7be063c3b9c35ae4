# File: daogen/cli.py
"""
DaoGen - Command-Line Interface
================================

Usage examples::

    # Generate for every table that passes the filters
    daogen -c daogen.yaml

    # One table (an unknown name is an error)
    daogen -c daogen.yaml users

    # Several tables (unknown names are skipped with a warning)
    daogen -c daogen.yaml users orders ghost_table

    # Show which tables would be generated
    daogen -c daogen.yaml --list-tables --schema public

Exit codes:
    0 — success
    1 — settings / input error
    2 — connection error
    3 — schema read error
    4 — mapping error or table not found
    5 — template error
    6 — output write error
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Dict, List, NoReturn, Optional, Sequence, Type

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

# ---------------------------------------------------------------------------
# Logger (configured in _setup_logging)
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("daogen")


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------

EXIT_SUCCESS: int = 0
EXIT_INPUT_ERROR: int = 1
EXIT_CONNECTION_ERROR: int = 2
EXIT_SCHEMA_ERROR: int = 3
EXIT_MAPPING_ERROR: int = 4
EXIT_TEMPLATE_ERROR: int = 5
EXIT_OUTPUT_ERROR: int = 6

_EXIT_CODES: Dict[Type[DaoGenError], int] = {
    ConfigurationError: EXIT_INPUT_ERROR,
    DbConnectionError: EXIT_CONNECTION_ERROR,
    SchemaReadError: EXIT_SCHEMA_ERROR,
    MappingError: EXIT_MAPPING_ERROR,
    TableNotFoundError: EXIT_MAPPING_ERROR,
    TemplateRenderError: EXIT_TEMPLATE_ERROR,
    OutputWriteError: EXIT_OUTPUT_ERROR,
}


def exit_code_for(exc: DaoGenError) -> int:
    for error_type, code in _EXIT_CODES.items():
        if isinstance(exc, error_type):
            return code
    return EXIT_INPUT_ERROR


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


def _setup_logging(verbosity: int) -> None:
    """
    Configure the ``daogen`` logger.

    Args:
        verbosity: -1 = ERROR, 0 = WARNING, 1 = INFO, 2+ = DEBUG.
    """
    if verbosity < 0:
        level = logging.ERROR
    elif verbosity >= 2:
        level = logging.DEBUG
    elif verbosity >= 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    handler: logging.StreamHandler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s",
            datefmt="%H:%M:%S",
        )
    )

    root_logger: logging.Logger = logging.getLogger("daogen")
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.propagate = False


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser."""
    from daogen import __version__

    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        prog="daogen",
        description=(
            "DaoGen — generate data-access source files from a live database "
            "schema and Jinja2 templates."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  %(prog)s -c daogen.yaml\n"
            "  %(prog)s -c daogen.yaml users\n"
            "  %(prog)s -c daogen.yaml users orders -v\n"
            "  %(prog)s -c daogen.yaml --list-tables\n"
        ),
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"DaoGen v{__version__}",
    )
    parser.add_argument(
        "tables",
        nargs="*",
        metavar="TABLE",
        help="Tables to generate for. Omit to generate for every table.",
    )
    parser.add_argument(
        "-c", "--config",
        type=str,
        default="daogen.yaml",
        metavar="PATH",
        help="Settings file (YAML or JSON). Default: daogen.yaml.",
    )

    override_group = parser.add_argument_group("settings overrides")
    override_group.add_argument(
        "--schema",
        type=str,
        default=None,
        metavar="NAME",
        help="Database schema to read (overrides the settings file).",
    )

    mode_group = parser.add_argument_group("operation modes")
    mode_group.add_argument(
        "--list-tables",
        action="store_true",
        default=False,
        help="Print the tables that would be generated for, then exit.",
    )

    verbosity_group = parser.add_argument_group("verbosity")
    verbosity_group.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v for INFO, -vv for DEBUG).",
    )
    verbosity_group.add_argument(
        "-q", "--quiet",
        action="store_true",
        default=False,
        help="Suppress all output except the result.",
    )
    return parser


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def _run(args: argparse.Namespace) -> int:
    from daogen.config import GeneratorSettings, load_settings, with_schema
    from daogen.generator import generate_from_settings, list_generatable_tables

    settings: GeneratorSettings = with_schema(load_settings(Path(args.config)), args.schema)

    if args.list_tables:
        for name in list_generatable_tables(settings):
            print(name)
        return EXIT_SUCCESS

    paths: List[Path] = generate_from_settings(settings, args.tables)
    for path in paths:
        print(path)
    logger.info("Generated %d file(s).", len(paths))
    return EXIT_SUCCESS


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def cli_main(argv: Optional[Sequence[str]] = None) -> NoReturn:
    """
    Main CLI entry point.

    Args:
        argv: Optional argument list (defaults to sys.argv[1:]).
    """
    parser: argparse.ArgumentParser = _build_parser()
    args: argparse.Namespace = parser.parse_args(argv)

    verbosity: int = -1 if args.quiet else args.verbose
    _setup_logging(verbosity)

    try:
        exit_code: int = _run(args)
    except DaoGenError as exc:
        exit_code = exit_code_for(exc)
        logger.error("%s: %s", type(exc).__name__, exc)

    sys.exit(exit_code)


__all__: List[str] = [
    "cli_main",
    "exit_code_for",
    "EXIT_SUCCESS",
    "EXIT_INPUT_ERROR",
    "EXIT_CONNECTION_ERROR",
    "EXIT_SCHEMA_ERROR",
    "EXIT_MAPPING_ERROR",
    "EXIT_TEMPLATE_ERROR",
    "EXIT_OUTPUT_ERROR",
]
