"""Shared constants for the mysqlsync package."""

# Migration bookkeeping tables are never synchronized.
BOOKKEEPING_TABLES = frozenset({"schema_version", "flyway_schema_history"})

DEFAULT_MAX_ROWS_PER_PAGE = 500_000
DEFAULT_FETCH_SIZE = 1_000
DEFAULT_MAX_WORKERS = 4

# Rows per INSERT statement before a new statement is started.
INSERT_BATCH_ROWS = 150

SCRIPT_EXTENSION = ".sql"
GZIP_EXTENSION = ".gz"

CREATION_DATE_COLUMNS = ("creationDate", "creation_date")
LAST_MODIFIED_DATE_COLUMNS = ("lastModifiedDate", "last_modified_date")
EMPTY_WATERMARK = "0000-01-01 00:00:00"
