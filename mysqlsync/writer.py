"""Script file sinks and output file naming.

Scripts follow a **write-then-rename** strategy: text goes to a ``.tmp``
file next to the final path and is only renamed to its final name when the
writer is closed after a successful sync.  A table that fails never leaves a
partial script behind.
"""

from __future__ import annotations

import gzip
import logging
import os
from datetime import datetime, timezone
from types import TracebackType
from typing import IO, Optional, Type

from ._constants import GZIP_EXTENSION, SCRIPT_EXTENSION

logger = logging.getLogger(__name__)

_TEMP_SUFFIX = ".tmp"
_TIMESTAMP_FORMAT = "%Y-%m-%d-%H-%M-%S-%Z"


def extension(compress: bool) -> str:
    return SCRIPT_EXTENSION + (GZIP_EXTENSION if compress else "")


def run_timestamp(now: Optional[datetime] = None) -> str:
    """Format *now* (default: current UTC time) for use in a file name."""
    now = now or datetime.now(timezone.utc)
    return now.strftime(_TIMESTAMP_FORMAT)


def output_path(
    output: Optional[str],
    source_schema: str,
    target_schema: Optional[str] = None,
    *,
    compress: bool = False,
    incremental: bool = False,
    anonymized: bool = False,
    table: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Optional[str]:
    """Resolve where a script goes; ``None`` when no output was requested.

    When *output* is an existing directory a name is generated inside it::

        <incr-|full-><source>[-<target>]-<timestamp>[_anon][.sql][.gz]

    With *table* set (split mode) the resolved path is itself a directory
    and the result is ``<path>/<table>.sql[.gz]``.  Parent directories are
    created as needed.
    """
    if output is None:
        return None
    if os.path.isdir(output):
        name = (
            ("incr-" if incremental else "full-")
            + source_schema
            + ("" if target_schema is None else f"-{target_schema}")
            + f"-{run_timestamp(now)}"
            + ("_anon" if anonymized else "")
            + ("" if table is not None else extension(compress))
        )
        path = os.path.join(output, name)
    else:
        path = output
    path = os.path.abspath(path)
    if table is None:
        os.makedirs(os.path.dirname(path), exist_ok=True)
        return path
    os.makedirs(path, exist_ok=True)
    return os.path.join(path, table + extension(compress))


class ScriptWriter:
    """Text sink for one SQL script, optionally gzip-compressed.

    Usage::

        with ScriptWriter("/dumps/customer.sql.gz", compress=True) as w:
            w.write("TRUNCATE customer;\\n")

    Leaving the block with an exception discards the temp file.
    """

    def __init__(self, path: str, *, compress: bool = False) -> None:
        self.path = path
        self.compress = compress
        self.temp_path = path + _TEMP_SUFFIX
        self.closed = False
        if compress:
            self._fh: IO[str] = gzip.open(self.temp_path, "wt", encoding="utf-8")
        else:
            self._fh = open(self.temp_path, "w", encoding="utf-8")
        logger.debug("Writing script to %s", self.temp_path)

    def write(self, text: str) -> None:
        self._fh.write(text)

    def close(self) -> None:
        """Flush, close and rename the temp file to its final name."""
        if self.closed:
            return
        self._fh.close()
        os.replace(self.temp_path, self.path)
        self.closed = True
        logger.info("Wrote %s", self.path)

    def abort(self) -> None:
        """Close and delete the temp file without publishing it."""
        if self.closed:
            return
        self._fh.close()
        if os.path.exists(self.temp_path):
            os.remove(self.temp_path)
        self.closed = True
        logger.debug("Discarded %s", self.temp_path)

    def __enter__(self) -> "ScriptWriter":
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        if exc_type is None:
            self.close()
        else:
            self.abort()

    def __repr__(self) -> str:
        return f"ScriptWriter(path={self.path!r}, compress={self.compress})"
