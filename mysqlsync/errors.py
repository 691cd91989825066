"""Exception hierarchy for the sync engine.

Every failure the engine raises derives from :class:`SyncError`; driver
exceptions are always chained so the original cause stays visible.
"""

from __future__ import annotations


class SyncError(RuntimeError):
    """Base class for all synchronization failures."""


class SchemaMismatch(SyncError):
    """Source and target disagree on the primary keys of a synced table."""


class CatalogQueryFailure(SyncError):
    """An INFORMATION_SCHEMA (or other metadata) query failed."""


class RowStreamFailure(SyncError):
    """A page query or a per-row callback failed while streaming a table."""


class WatermarkUndeterminable(SyncError):
    """Incremental prerequisites are not met; the table is fully reloaded."""


class StatementExecutionFailure(SyncError):
    """The target rejected a generated statement."""
