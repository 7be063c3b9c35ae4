# File: daogen/exporters.py
"""
DaoGen - File Materializer
===========================
Writes rendered text to ``<output_directory>/<className><extension>``.

The output directory is created on demand.  Writes go to a temporary
file in the target directory which is then renamed over the destination,
so a failed write never leaves a truncated source file behind.  The file
descriptor is closed on every exit path.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import List, Union

from daogen.errors import OutputWriteError
from daogen.utils import count_lines, ensure_directory

logger: logging.Logger = logging.getLogger("daogen.exporters")

DEFAULT_FILE_EXTENSION: str = ".py"


def output_path_for(
    output_directory: Union[str, Path],
    class_name: str,
    extension: str = DEFAULT_FILE_EXTENSION,
) -> Path:
    """Path of the file generated for *class_name*."""
    return Path(output_directory) / f"{class_name}{extension}"


def _atomic_write(target_path: Path, data: bytes) -> None:
    """
    Write *data* to *target_path* via a temp file in the same directory.

    ``os.replace`` is atomic when both paths share a filesystem, which is
    why the temp file lives next to the target.
    """
    fd, tmp_path = tempfile.mkstemp(
        dir=str(target_path.parent),
        prefix=f".{target_path.name}.",
        suffix=".tmp",
    )
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(data)
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(tmp_path, str(target_path))
    except BaseException:
        if os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise


def write_generated_file(
    output_directory: Union[str, Path],
    class_name: str,
    text: str,
    extension: str = DEFAULT_FILE_EXTENSION,
) -> Path:
    """
    Write *text* as the source file for *class_name* and return its path.

    Raises:
        OutputWriteError: the directory or the file could not be written.
    """
    directory: Path = Path(output_directory)
    target: Path = output_path_for(directory, class_name, extension)

    try:
        ensure_directory(directory)
    except OSError as exc:
        raise OutputWriteError(
            f"Cannot create output directory {directory}: {exc}", path=str(directory)
        ) from exc

    data: bytes = text.encode("utf-8")
    try:
        _atomic_write(target, data)
    except OSError as exc:
        raise OutputWriteError(f"Cannot write {target}: {exc}", path=str(target)) from exc

    logger.debug(
        "Wrote %s (%d bytes, %d lines).", target, len(data), count_lines(text)
    )
    return target


__all__: List[str] = [
    "DEFAULT_FILE_EXTENSION",
    "output_path_for",
    "write_generated_file",
]
