"""mysqlsync -- Copy and anonymize the rows of one MySQL schema into another."""

from .anonymizer import DEFAULT_ANONYMIZERS, Anonymizer
from .client import Synchronizer
from .connection import MySQLConnection, connection_factory, get_connection
from .errors import SyncError
from .sync import sync_table
from .writer import ScriptWriter

__all__ = [
    "Synchronizer",
    "Anonymizer",
    "DEFAULT_ANONYMIZERS",
    "MySQLConnection",
    "connection_factory",
    "get_connection",
    "sync_table",
    "ScriptWriter",
    "SyncError",
]
