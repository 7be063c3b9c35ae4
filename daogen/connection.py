# File: daogen/connection.py
"""
DaoGen - Connection Provider
=============================
Opens a database connection from a driver identifier, a URL and a
credential pair.

The driver identifier is a SQLAlchemy ``dialect[+driver]`` name such as
``postgresql+psycopg2`` or ``sqlite``.  SQLAlchemy's dialect registry
resolves it (and imports the DBAPI module) when the engine is created;
any failure along that path surfaces as ``DbConnectionError``.

The caller owns the returned connection.  ``open_connection`` is the
scoped form: it closes the connection and disposes the engine on every
exit path.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import URL, Connection, Engine, make_url
from sqlalchemy.exc import ArgumentError, NoSuchModuleError, SQLAlchemyError

from daogen.errors import DbConnectionError
from daogen.utils import mask_secret

logger: logging.Logger = logging.getLogger("daogen.connection")


def build_url(
    driver_name: Optional[str],
    url: str,
    user: Optional[str] = None,
    password: Optional[str] = None,
) -> URL:
    """
    Combine the driver identifier and credentials with *url*.

    Explicit arguments win over the values embedded in *url*; ``None``
    leaves the URL's own value in place.
    """
    try:
        parsed: URL = make_url(url)
    except ArgumentError as exc:
        raise DbConnectionError(f"Invalid database URL {url!r}: {exc}") from exc

    overrides = {}
    if driver_name:
        overrides["drivername"] = driver_name
    if user is not None:
        overrides["username"] = user
    if password is not None:
        overrides["password"] = password
    return parsed.set(**overrides) if overrides else parsed


def connect(
    driver_name: Optional[str],
    url: str,
    user: Optional[str] = None,
    password: Optional[str] = None,
) -> Connection:
    """
    Open and return a live connection.

    Raises:
        DbConnectionError: driver unknown, DBAPI missing, or handshake failed.
    """
    target: URL = build_url(driver_name, url, user, password)
    logger.info(
        "Connecting: driver=%s, url=%s, user=%s, password=%s",
        target.drivername,
        target.render_as_string(hide_password=True),
        target.username or "<none>",
        mask_secret(target.password),
    )

    try:
        engine: Engine = create_engine(target)
    except NoSuchModuleError as exc:
        raise DbConnectionError(
            f"Unknown database driver {target.drivername!r}: {exc}"
        ) from exc
    except (ArgumentError, ImportError) as exc:
        raise DbConnectionError(
            f"Cannot load database driver {target.drivername!r}: {exc}"
        ) from exc

    try:
        connection: Connection = engine.connect()
    except SQLAlchemyError as exc:
        engine.dispose()
        raise DbConnectionError(
            f"Connection to {target.render_as_string(hide_password=True)} failed: {exc}"
        ) from exc

    logger.debug("Connection established to %s.", target.drivername)
    return connection


@contextmanager
def open_connection(
    driver_name: Optional[str],
    url: str,
    user: Optional[str] = None,
    password: Optional[str] = None,
) -> Iterator[Connection]:
    """Scoped ``connect``: the connection is released however the block exits."""
    connection: Connection = connect(driver_name, url, user, password)
    try:
        yield connection
    finally:
        engine: Engine = connection.engine
        try:
            connection.close()
        finally:
            engine.dispose()
            logger.debug("Connection closed.")


__all__ = [
    "build_url",
    "connect",
    "open_connection",
]
