"""High-level synchronization facade.

``Synchronizer`` is the primary user-facing entry point::

    from mysqlsync import Synchronizer, connection_factory
    from mysqlsync.anonymizer import DEFAULT_ANONYMIZERS

    s = Synchronizer(
        connection_factory(host="db1", user="sync", password="secret"),
        connection_factory(host="db2", user="sync", password="secret"),
        anonymizers=DEFAULT_ANONYMIZERS,
        exclusions=[r".*\\.emailAddress"],
    )

    # Live copy, also written to one gzip script per table:
    s.sync("shop", "shop_staging", output="./dumps", compress=True,
           split_by_table=True)

    # Script only (no target schema forces a dry run):
    s.sync("shop", output="./dumps")

    # Tables in parallel, each with its own connections:
    s.sync("shop", "shop_staging", split_by_table=True, allow_parallel=True)

Or from a config file::

    Synchronizer.from_config("sync.yaml").run()
"""

from __future__ import annotations

import json
import logging
import os
import re
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Union

from ._constants import DEFAULT_MAX_ROWS_PER_PAGE, DEFAULT_MAX_WORKERS
from .anonymizer import DEFAULT_ANONYMIZERS, Anonymizer, AnonymizerRule, parse_rule, rule
from .codec import armor
from .connection import connection_factory, load_dotenv
from .schema import ExclusionRule, SchemaReconciler, column_set, compile_rules
from .statements import StatementSink, TableStatements, write_footer, write_header
from .sync import sync_table
from .writer import ScriptWriter, output_path

logger = logging.getLogger(__name__)

ConnectionFactory = Callable[[], Any]

_RUN_OPTIONS = frozenset({
    "output", "compress", "split_by_table", "drop_and_recreate", "dry_run",
    "incremental", "allow_parallel", "max_rows_per_page", "isolate_failures",
})
_CONNECTION_KEYS = ("host", "port", "user", "password", "driver")


def expand_env(value: str) -> str:
    """Expand ``${VAR}`` references in *value* with environment variables."""

    def _repl(m):
        name = m.group(1)
        if name not in os.environ:
            raise KeyError(
                f"Environment variable {name!r} is not set "
                f"(referenced in config as ${{{name}}})"
            )
        return os.environ[name]

    return re.sub(r"\$\{(\w+)}", _repl, str(value))


def _expand_section(section: Mapping[str, Any]) -> Dict[str, Any]:
    return {k: expand_env(v) if isinstance(v, str) else v for k, v in section.items()}


def _load_config_file(path: Union[str, Path]) -> dict:
    """Load a YAML or JSON config file, chosen by extension."""
    p = Path(path)
    text = p.read_text()
    if p.suffix in (".yaml", ".yml"):
        import yaml

        return yaml.safe_load(text) or {}
    return json.loads(text)


def anonymizer_rules(value: Any) -> List[AnonymizerRule]:
    """Normalise an ``anonymize`` setting into an ordered rule list.

    Accepts ``None``/``False`` (no anonymization), ``"default"``/``True``
    (the built-in rules), or a list whose items are ``"/regex/:name"``
    strings, ``{"pattern": ..., "anonymizer": ...}`` maps, ``(pattern,
    anonymizer)`` pairs or ``"default"``.
    """
    if value is None or value is False:
        return []
    if value is True or value == "default":
        return list(DEFAULT_ANONYMIZERS)
    if isinstance(value, str):
        value = [value]
    rules: List[AnonymizerRule] = []
    for item in value:
        if item == "default":
            rules.extend(DEFAULT_ANONYMIZERS)
        elif isinstance(item, str):
            rules.append(parse_rule(item))
        elif isinstance(item, Mapping):
            rules.append(rule(item["pattern"], item["anonymizer"]))
        else:
            pattern, anonymizer = item
            rules.append(rule(pattern, anonymizer))
    return rules


def _close_quietly(conn: Optional[Any]) -> None:
    if conn is None:
        return
    try:
        conn.close()
    except Exception as exc:
        logger.debug("Ignoring error while closing connection: %s", exc)


@dataclass(frozen=True)
class _Plan:
    """Tables, keys and column sets agreed for one run."""

    tables: List[str]
    primary_keys: Dict[str, List[str]]
    columns: Dict[str, List[str]]


@dataclass(frozen=True)
class _Run:
    source_schema: str
    target_schema: Optional[str]
    output: Optional[str]
    compress: bool
    split_by_table: bool
    drop_and_recreate: bool
    dry_run: bool
    incremental: bool
    max_rows_per_page: int
    isolate_failures: bool
    started: datetime


class Synchronizer:
    """Copy the rows of one MySQL schema into another.

    Args:
        source:      Zero-argument callable returning a new DB-API connection
                     to the source server.
        target:      Same for the target server; may be ``None`` when only
                     scripts are produced.
        anonymizers: Ordered anonymizer rules (see :func:`anonymizer_rules`
                     for the accepted forms).
        exclusions:  Patterns full-matched against ``"table.column"``;
                     matching non-key columns are not synchronized.
        max_workers: Upper bound on tables synchronized in parallel.
    """

    def __init__(
        self,
        source: ConnectionFactory,
        target: Optional[ConnectionFactory] = None,
        *,
        anonymizers: Iterable[Any] = (),
        exclusions: Iterable[ExclusionRule] = (),
        max_workers: int = DEFAULT_MAX_WORKERS,
    ) -> None:
        self.source = source
        self.target = target
        self.anonymizer = Anonymizer(anonymizer_rules(anonymizers))
        self.exclusions = compile_rules(exclusions)
        self.max_workers = max(1, max_workers)
        self.run_options: Dict[str, Any] = {}

    # -- factory ------------------------------------------------------------

    @classmethod
    def from_config(
        cls,
        config: Union[str, Path, dict],
        *,
        output: Optional[str] = None,
        incremental: Optional[bool] = None,
        dry_run: Optional[bool] = None,
        max_workers: Optional[int] = None,
    ) -> "Synchronizer":
        """Create a configured ``Synchronizer`` from a config file or dict.

        Loads ``.env`` automatically and expands ``${VAR}`` references in
        the ``source`` and ``target`` sections.  Keyword arguments that are
        not ``None`` override the file's ``options``.

        .. code-block:: yaml

            source:
              host: db1
              user: sync
              password: ${SRC_PASSWORD}
              schema: shop
            target:           # optional; host/port/user/password default to source
              host: db2
              schema: shop_staging
            anonymize: default
            exclude: ['.*\\.emailAddress']
            options:
              split_by_table: true
              allow_parallel: true
              output: ./dumps
        """
        load_dotenv()

        if isinstance(config, (str, Path)):
            config = _load_config_file(config)

        src_cfg = _expand_section(config.get("source") or {})
        if not src_cfg.get("schema"):
            raise ValueError("config must name a source schema (source.schema)")
        source = connection_factory(**{k: src_cfg.get(k) for k in _CONNECTION_KEYS})

        target = None
        target_schema = None
        if config.get("target"):
            tgt_cfg = _expand_section(config["target"])
            target = connection_factory(
                **{k: tgt_cfg.get(k, src_cfg.get(k)) for k in _CONNECTION_KEYS}
            )
            target_schema = tgt_cfg.get("schema")

        options = dict(config.get("options") or {})
        cfg_workers = options.pop("max_workers", None)
        unknown = set(options) - _RUN_OPTIONS
        if unknown:
            raise ValueError(f"Unknown option(s) in config: {sorted(unknown)}")
        for key, value in (("output", output), ("incremental", incremental), ("dry_run", dry_run)):
            if value is not None:
                options[key] = value

        synchronizer = cls(
            source,
            target,
            anonymizers=anonymizer_rules(config.get("anonymize")),
            exclusions=config.get("exclude") or [],
            max_workers=(
                max_workers if max_workers is not None
                else (cfg_workers or DEFAULT_MAX_WORKERS)
            ),
        )
        synchronizer.run_options = {
            "source_schema": src_cfg["schema"],
            "target_schema": target_schema,
            **options,
        }
        return synchronizer

    def run(self) -> List[dict]:
        """Call :meth:`sync` with :attr:`run_options` (as set by :meth:`from_config`)."""
        if "source_schema" not in self.run_options:
            raise RuntimeError("No run options configured. Use from_config() or call sync().")
        return self.sync(**self.run_options)

    # -- sync ---------------------------------------------------------------

    def sync(
        self,
        source_schema: str,
        target_schema: Optional[str] = None,
        *,
        output: Optional[str] = None,
        compress: bool = False,
        split_by_table: bool = False,
        drop_and_recreate: bool = False,
        dry_run: bool = False,
        incremental: bool = False,
        allow_parallel: bool = False,
        max_rows_per_page: int = DEFAULT_MAX_ROWS_PER_PAGE,
        isolate_failures: bool = False,
    ) -> List[dict]:
        """Synchronize every table *source_schema* shares with *target_schema*.

        Without a *target_schema* nothing is executed and only scripts are
        written.  Tables run in parallel only when both *allow_parallel* and
        *split_by_table* are set.  A failing table aborts the run unless
        *isolate_failures* is set, in which case it is reported as an error
        result and the remaining tables still run.

        Returns a list of per-table result dicts, in table order.
        """
        if target_schema is None:
            dry_run = True
        elif self.target is None:
            raise ValueError("A target schema was given but no target connection factory")

        run = _Run(
            source_schema=source_schema,
            target_schema=target_schema,
            output=output,
            compress=compress,
            split_by_table=split_by_table,
            drop_and_recreate=drop_and_recreate,
            dry_run=dry_run,
            incremental=incremental,
            max_rows_per_page=max_rows_per_page,
            isolate_failures=isolate_failures,
            started=datetime.now(timezone.utc),
        )
        logger.info("Starting synchronization for source schema: %s", source_schema)
        logger.info("Configured chunk size is: %d", max_rows_per_page)

        source_conn = self.source()
        target_conn = None
        try:
            if target_schema is not None:
                target_conn = self.target()
            plan = self._plan(source_conn, target_conn, run)
            if not plan.tables:
                logger.info("No tables found to sync")
                return []
            if allow_parallel and split_by_table:
                results = self._run_parallel(run, plan)
            else:
                results = self._run_sequential(run, plan, source_conn, target_conn)
        finally:
            _close_quietly(target_conn)
            _close_quietly(source_conn)

        logger.info("Finished synchronization for source schema: %s", source_schema)
        return results

    def _plan(self, source_conn: Any, target_conn: Optional[Any], run: _Run) -> _Plan:
        reconciler = SchemaReconciler(
            source_conn.cursor(),
            target_conn.cursor() if target_conn is not None else None,
            run.source_schema,
            run.target_schema,
            self.exclusions,
        )
        tables = reconciler.sync_tables()
        logger.info("Tables to sync: %s", tables)
        if not tables:
            return _Plan([], {}, {})
        primary_keys = reconciler.primary_keys(tables)
        logger.info("Primary keys: %s", primary_keys)
        other = reconciler.sync_columns(tables)
        columns = {t: column_set(primary_keys[t], other[t]) for t in tables}
        logger.info("Columns: %s", columns)
        return _Plan(tables, primary_keys, columns)

    # -- helpers ------------------------------------------------------------

    @staticmethod
    def _error_result(table: str, exc: Exception) -> dict:
        return {"table": table, "status": "error", "error": str(exc)}

    def _script_path(self, run: _Run, table: Optional[str] = None) -> Optional[str]:
        return output_path(
            run.output,
            run.source_schema,
            run.target_schema,
            compress=run.compress,
            incremental=run.incremental,
            anonymized=bool(self.anonymizer),
            table=table,
            now=run.started,
        )

    @staticmethod
    def _open_execution(conn: Any, target_schema: str) -> Any:
        """Prepare *conn* for executing statements and return its cursor."""
        conn.autocommit = False
        cur = conn.cursor()
        cur.execute(f"USE {armor(target_schema)}")
        return cur

    def _sync_one(
        self,
        run: _Run,
        plan: _Plan,
        table: str,
        source_conn: Any,
        target_conn: Optional[Any],
        exec_conn: Optional[Any],
        exec_cursor: Optional[Any],
        shared_sink: Optional[StatementSink] = None,
    ) -> dict:
        """Synchronize *table*; commits *exec_conn* on success, rolls back on failure."""
        logger.info("Synchronizing %s", table)
        script: Optional[ScriptWriter] = None
        if shared_sink is None:
            path = self._script_path(run, table)
            script = ScriptWriter(path, compress=run.compress) if path else None
            sink = StatementSink(cursor=exec_cursor, writer=script)
        else:
            path = None
            sink = shared_sink

        source_cursor = source_conn.cursor()
        statements: Optional[TableStatements] = None
        try:
            if shared_sink is None:
                write_header(sink)
            statements = TableStatements(
                sink, table, plan.columns[table], plan.primary_keys[table], self.anonymizer,
            )
            result = sync_table(
                source_cursor,
                table,
                source_schema=run.source_schema,
                columns=plan.columns[table],
                primary_keys=plan.primary_keys[table],
                statements=statements,
                target_cursor=target_conn.cursor() if target_conn is not None else None,
                target_schema=run.target_schema,
                incremental=run.incremental,
                drop_and_recreate=run.drop_and_recreate,
                page_size=run.max_rows_per_page,
            )
            if shared_sink is None:
                write_footer(sink)
            if exec_conn is not None:
                exec_conn.commit()
            if script is not None:
                script.close()
        except Exception:
            sink.reset()
            if exec_conn is not None:
                exec_conn.rollback()
            if statements is not None:
                # After the rollback: UNLOCK TABLES commits implicitly.
                try:
                    statements.abort()
                except Exception as exc:
                    logger.warning("Could not release %s after failure: %s", table, exc)
            if script is not None:
                script.abort()
            raise
        finally:
            source_cursor.close()

        result["file"] = path
        return result

    def _guarded(self, run: _Run, table: str, fn: Callable[[], dict]) -> dict:
        try:
            return fn()
        except Exception as exc:
            if not run.isolate_failures:
                raise
            logger.error("Failed to sync %s: %s", table, exc)
            return self._error_result(table, exc)

    # -- sequential ---------------------------------------------------------

    def _run_sequential(
        self,
        run: _Run,
        plan: _Plan,
        source_conn: Any,
        target_conn: Optional[Any],
    ) -> List[dict]:
        exec_conn = None if run.dry_run else self.target()
        try:
            exec_cursor = (
                self._open_execution(exec_conn, run.target_schema)
                if exec_conn is not None else None
            )

            if run.split_by_table:
                return [
                    self._guarded(run, table, lambda t=table: self._sync_one(
                        run, plan, t, source_conn, target_conn, exec_conn, exec_cursor,
                    ))
                    for table in sorted(plan.tables)
                ]

            path = self._script_path(run)
            script = ScriptWriter(path, compress=run.compress) if path else None
            sink = StatementSink(cursor=exec_cursor, writer=script)
            results: List[dict] = []
            try:
                write_header(sink)
                for table in sorted(plan.tables):
                    result = self._guarded(run, table, lambda t=table: self._sync_one(
                        run, plan, t, source_conn, target_conn, exec_conn, exec_cursor,
                        shared_sink=sink,
                    ))
                    if result.get("status") == "error":
                        sink.comment(f"synchronization of {table} failed: {result['error']}")
                    result["file"] = path
                    results.append(result)
                write_footer(sink)
            except Exception:
                if script is not None:
                    script.abort()
                raise
            if script is not None:
                script.close()
            return results
        finally:
            _close_quietly(exec_conn)

    # -- parallel -----------------------------------------------------------

    def _sync_task(self, run: _Run, plan: _Plan, table: str) -> dict:
        """Synchronize a single table with its own connections. Thread-safe."""
        source_conn = self.source()
        target_conn = None
        try:
            exec_cursor = None
            if run.target_schema is not None:
                target_conn = self.target()
                if not run.dry_run:
                    exec_cursor = self._open_execution(target_conn, run.target_schema)
            return self._sync_one(
                run, plan, table, source_conn, target_conn,
                None if run.dry_run else target_conn, exec_cursor,
            )
        finally:
            _close_quietly(target_conn)
            _close_quietly(source_conn)

    def _run_parallel(self, run: _Run, plan: _Plan) -> List[dict]:
        workers = min(self.max_workers, len(plan.tables))
        logger.info("Parallel sync with max_workers=%d", workers)
        results: List[Optional[dict]] = [None] * len(plan.tables)

        with ThreadPoolExecutor(max_workers=workers) as pool:
            future_to_idx = {
                pool.submit(
                    self._guarded, run, table,
                    lambda t=table: self._sync_task(run, plan, t),
                ): idx
                for idx, table in enumerate(plan.tables)
            }
            try:
                for future in as_completed(future_to_idx):
                    results[future_to_idx[future]] = future.result()
            except Exception:
                for future in future_to_idx:
                    future.cancel()
                raise

        return results  # type: ignore[return-value]

    def __repr__(self) -> str:
        return (
            f"Synchronizer(anonymizer={self.anonymizer!r}, "
            f"exclusions={len(self.exclusions)}, max_workers={self.max_workers})"
        )
