"""MySQL connection helper.

Provides :class:`MySQLConnection`, a pyodbc connection wrapper with
context-manager support, :func:`get_connection` and
:func:`connection_factory`, which produces the zero-argument factories
:class:`~mysqlsync.client.Synchronizer` opens connections with.

Configuration is resolved in order: explicit arguments > environment
variables > built-in defaults.  A ``.env`` file is loaded automatically (if
present) via :func:`load_dotenv`.

Env vars:
    MYSQL_HOST      -- server host name (default: localhost)
    MYSQL_PORT      -- server port (default: 3306)
    MYSQL_USER      -- login (default: root)
    MYSQL_PASSWORD  -- login password (**required** unless passed explicitly)
    ODBC_DRIVER     -- ODBC driver name (default: MySQL ODBC 8.0 Unicode Driver)
"""

from __future__ import annotations

import logging
import os
from types import TracebackType
from typing import Callable, Optional, Type, Union

import pyodbc

logger = logging.getLogger(__name__)

_DEFAULT_HOST = "localhost"
_DEFAULT_PORT = 3306
_DEFAULT_USER = "root"
_DEFAULT_DRIVER = "MySQL ODBC 8.0 Unicode Driver"

ConnectionFactory = Callable[[], pyodbc.Connection]

_dotenv_loaded: set = set()


def load_dotenv(path: Optional[str] = None) -> None:
    """Read a simple key=value .env file into ``os.environ``.

    Existing variables win.  Subsequent calls with the same resolved *path*
    are no-ops.
    """
    if path is None:
        path = os.path.join(os.getcwd(), ".env")
    resolved = os.path.abspath(path)
    if resolved in _dotenv_loaded or not os.path.isfile(resolved):
        return
    with open(resolved) as f:
        for line in f:
            line = line.strip()
            if line and not line.startswith("#") and "=" in line:
                k, v = line.split("=", 1)
                os.environ.setdefault(k.strip(), v.strip().strip("'\""))
    _dotenv_loaded.add(resolved)
    logger.debug("Loaded environment from %s", resolved)


class MySQLConnection:
    """Managed pyodbc connection to a MySQL server.

    Cursors are forward-only and the driver does not cache result sets, so
    large tables can be streamed with ``fetchmany``.

    Usage as a context manager::

        with MySQLConnection(host="db1", password="secret") as conn:
            cur = conn.cursor()
            cur.execute("SELECT 1")
    """

    def __init__(
        self,
        host: Optional[str] = None,
        port: Optional[Union[int, str]] = None,
        user: Optional[str] = None,
        password: Optional[str] = None,
        database: Optional[str] = None,
        driver: Optional[str] = None,
        *,
        dotenv_path: Optional[str] = None,
    ) -> None:
        load_dotenv(dotenv_path)

        self.host = host or os.environ.get("MYSQL_HOST", _DEFAULT_HOST)
        self.port = int(port or os.environ.get("MYSQL_PORT", _DEFAULT_PORT))
        self.user = user or os.environ.get("MYSQL_USER", _DEFAULT_USER)
        self.database = database
        self.driver = driver or os.environ.get("ODBC_DRIVER", _DEFAULT_DRIVER)
        self._password = password or os.environ.get("MYSQL_PASSWORD")
        self._conn: Optional[pyodbc.Connection] = None

    @property
    def connection_string(self) -> str:
        """Build the ODBC connection string (raises if no password)."""
        if not self._password:
            raise ValueError(
                "No password supplied. Set MYSQL_PASSWORD in your environment "
                "or .env file, or pass it to the constructor."
            )
        parts = [
            f"Driver={{{self.driver}}}",
            f"Server={self.host}",
            f"Port={self.port}",
            f"Uid={self.user}",
            f"Pwd={self._password}",
            "CHARSET=utf8mb4",
            "NO_CACHE=1",
            "FORWARD_CURSOR=1",
        ]
        if self.database:
            parts.insert(3, f"Database={self.database}")
        return ";".join(parts) + ";"

    def connect(self) -> pyodbc.Connection:
        """Open and return a ``pyodbc.Connection``.

        Subsequent calls return the same connection unless :meth:`close` has
        been called.
        """
        if self._conn is not None:
            return self._conn
        logger.debug("Connecting to %s:%d as %s", self.host, self.port, self.user)
        self._conn = pyodbc.connect(self.connection_string)
        return self._conn

    def close(self) -> None:
        """Close the underlying connection if open."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def __enter__(self) -> pyodbc.Connection:
        return self.connect()

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        self.close()

    def __repr__(self) -> str:
        return (
            f"MySQLConnection(host={self.host!r}, port={self.port}, "
            f"user={self.user!r}, database={self.database!r})"
        )


def get_connection(
    host: Optional[str] = None,
    port: Optional[Union[int, str]] = None,
    user: Optional[str] = None,
    password: Optional[str] = None,
    database: Optional[str] = None,
    driver: Optional[str] = None,
    *,
    dotenv_path: Optional[str] = None,
) -> pyodbc.Connection:
    """Create a :class:`MySQLConnection` and return the open ``pyodbc.Connection``.

    Raises ``ValueError`` if *password* cannot be resolved.
    """
    return MySQLConnection(
        host=host, port=port, user=user, password=password,
        database=database, driver=driver, dotenv_path=dotenv_path,
    ).connect()


def connection_factory(
    host: Optional[str] = None,
    port: Optional[Union[int, str]] = None,
    user: Optional[str] = None,
    password: Optional[str] = None,
    database: Optional[str] = None,
    driver: Optional[str] = None,
) -> ConnectionFactory:
    """Return a callable that opens a new connection on every call.

    Settings are resolved once, when the factory is built, so a missing
    password fails here rather than in a worker thread.
    """
    template = MySQLConnection(
        host=host, port=port, user=user, password=password,
        database=database, driver=driver,
    )
    conn_str = template.connection_string

    def _connect() -> pyodbc.Connection:
        logger.debug("Opening connection to %s:%d", template.host, template.port)
        return pyodbc.connect(conn_str)

    return _connect
