"""
tests/conftest.py
Shared fixtures for the daogen test suite.

Real SQLite databases and real Jinja2 template directories are created
under pytest's tmp_path; nothing is mocked.
"""

from __future__ import annotations

import logging
import pathlib
from typing import Callable, Dict, Iterator, List, Optional, Sequence

import pytest
import yaml
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Connection

from daogen.connection import open_connection
from daogen.generator import GenerationContext


# ---------------------------------------------------------------------------
# Database fixtures
# ---------------------------------------------------------------------------

SCHEMA_DDL: List[str] = [
    "CREATE TABLE users ("
    " id INTEGER NOT NULL PRIMARY KEY,"
    " name VARCHAR(50)"
    ")",
    "CREATE TABLE orders ("
    " order_id INTEGER NOT NULL,"
    " line_no INTEGER NOT NULL,"
    " amount NUMERIC(10, 2) NOT NULL,"
    " note TEXT,"
    " PRIMARY KEY (order_id, line_no)"
    ")",
    "CREATE TABLE audit_log ("
    " event TEXT NOT NULL,"
    " created_at TIMESTAMP"
    ")",
    "CREATE VIEW active_users AS SELECT id, name FROM users",
]


@pytest.fixture(autouse=True)
def _reset_daogen_logger() -> Iterator[None]:
    """The CLI reconfigures the ``daogen`` logger; undo that between tests."""
    yield
    root = logging.getLogger("daogen")
    root.handlers.clear()
    root.setLevel(logging.NOTSET)
    root.propagate = True


@pytest.fixture()
def sqlite_path(tmp_path: pathlib.Path) -> pathlib.Path:
    """A SQLite file holding users, orders, audit_log and one view."""
    path = tmp_path / "app.db"
    engine = create_engine(f"sqlite:///{path}")
    with engine.begin() as conn:
        for statement in SCHEMA_DDL:
            conn.execute(text(statement))
    engine.dispose()
    return path


@pytest.fixture()
def sqlite_url(sqlite_path: pathlib.Path) -> str:
    return f"sqlite:///{sqlite_path}"


@pytest.fixture()
def connection(sqlite_url: str) -> Iterator[Connection]:
    with open_connection("sqlite", sqlite_url) as conn:
        yield conn


# ---------------------------------------------------------------------------
# Template fixtures
# ---------------------------------------------------------------------------

ENTITY_TEMPLATE: str = (
    "{{ className }}|{{ lowerCamelClassName }}|{{ tableName }}\n"
    "{% for c in primaryKeys %}"
    "pk:{{ c.name }}:{{ c.camelizeName }}:{{ c.typeName }}:{{ c.nullable }}\n"
    "{% endfor %}"
    "{% for c in columns %}"
    "col:{{ c.name }}:{{ c.camelizeName }}:{{ c.typeName }}:{{ c.nullable }}\n"
    "{% endfor %}"
)

DAO_TEMPLATE: str = (
    "class {{ className }}:\n"
    "    key = ({% for c in primaryKeys %}{{ c.name | snake_case }}, {% endfor %})\n"
)


@pytest.fixture()
def template_dir(tmp_path: pathlib.Path) -> pathlib.Path:
    path = tmp_path / "templates"
    path.mkdir()
    (path / "entity.j2").write_text(ENTITY_TEMPLATE, encoding="utf-8")
    (path / "dao.j2").write_text(DAO_TEMPLATE, encoding="utf-8")
    (path / "broken.j2").write_text("{{ notInContext }}\n", encoding="utf-8")
    return path


@pytest.fixture()
def output_dir(tmp_path: pathlib.Path) -> pathlib.Path:
    return tmp_path / "out"


# ---------------------------------------------------------------------------
# Context factory
# ---------------------------------------------------------------------------

CLASS_NAMES: Dict[str, List[str]] = {
    "users": ["User"],
    "orders": ["Order"],
    "audit_log": ["AuditLog"],
}


def mapped_type(type_name: str) -> str:
    return f"T_{type_name}"


@pytest.fixture()
def make_context(
    connection: Connection,
    template_dir: pathlib.Path,
    output_dir: pathlib.Path,
) -> Callable[..., GenerationContext]:
    """Build a GenerationContext; keyword arguments replace the defaults."""

    def factory(
        class_name_mapper: Optional[Callable[[str], Sequence[str]]] = None,
        table_name_filter: Optional[Callable[[str], bool]] = None,
        template_name_mapper: Optional[Callable[[str], str]] = None,
        output_directory_mapper: Optional[Callable[[str], pathlib.Path]] = None,
        **overrides: object,
    ) -> GenerationContext:
        return GenerationContext(
            connection=connection,
            class_name_mapper=class_name_mapper or (lambda t: CLASS_NAMES.get(t, [])),
            type_name_mapper=overrides.pop("type_name_mapper", mapped_type),
            property_name_mapper=overrides.pop("property_name_mapper", str),
            table_name_filter=table_name_filter or (lambda t: True),
            template_directory=template_dir,
            template_name_mapper=template_name_mapper or (lambda c: "entity.j2"),
            output_directory_mapper=output_directory_mapper or (lambda c: output_dir),
            **overrides,
        )

    return factory


# ---------------------------------------------------------------------------
# Settings fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def settings_dict(sqlite_url: str) -> Dict[str, object]:
    return {
        "database": {"driver": "sqlite", "url": sqlite_url},
        "template_directory": "templates",
        "file_extension": ".py",
        "exclude_tables": ["^audit_"],
        "property_naming": "camel",
        "classes": [
            {"name": "{class_name}", "template": "entity.j2", "output": "out/models"},
            {"name": "{class_name}Dao", "template": "dao.j2", "output": "out/dao"},
        ],
    }


@pytest.fixture()
def settings_path(
    settings_dict: Dict[str, object],
    template_dir: pathlib.Path,
    tmp_path: pathlib.Path,
) -> pathlib.Path:
    """Write the settings dict next to the templates directory."""
    path = tmp_path / "daogen.yaml"
    with open(path, "w", encoding="utf-8") as fh:
        yaml.safe_dump(settings_dict, fh, default_flow_style=False)
    return path
