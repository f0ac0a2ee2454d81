# ==============================================
# ExecutionEngine
# ==============================================
#
# PURPOSE:
#   Run SQL against a fresh connection per call and report either
#   an affected-row count or a materialized TabularResult.
#
# CLASS: ExecutionEngine
# ----------------------
#   Stateless apart from the connection factory.
#
#   Methods:
#   --------
#   - execute_non_query(sql, params=None) -> int
#       One statement, committed on success.
#
#   - execute_non_query_batch(statements) -> int
#       Ordered statements (SQL strings or (sql, params) pairs) on one
#       connection, one cursor and one transaction. First failure rolls
#       everything back and re-raises; otherwise commit once.
#
#   - execute_many(sql, param_sets) -> int
#       One statement, many parameter sets, same all-or-nothing rules.
#
#   - execute_query(sql, params=None) -> TabularResult
#       Fetch everything, then release the connection.
#
#   Connections are opened inside a context manager and closed on
#   every exit path.
#
# ==============================================

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterator, List, Mapping, Optional, Sequence, Tuple, Union

from sqlhelper.errors import (
    ConnectivityError,
    SqlHelperError,
    StatementError,
    ValidationError,
)
from sqlhelper.mapping.tabular import TabularResult
from sqlhelper.storage.connection import ConnectionFactory

logger = logging.getLogger(__name__)

Params = Optional[Mapping[str, Any]]
BatchEntry = Union[str, Tuple[str, Params]]


@dataclass
class StatementOutcome:
    """Result of running one statement: a row count or the driver error."""
    rowcount: int = 0
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _check_sql(sql: Any) -> str:
    if not isinstance(sql, str) or not sql.strip():
        raise ValidationError("SQL text must be a non-empty string")
    return sql


def _normalize_entry(entry: BatchEntry) -> Tuple[str, Params]:
    if isinstance(entry, str):
        return _check_sql(entry), None
    if isinstance(entry, tuple) and len(entry) == 2:
        return _check_sql(entry[0]), entry[1]
    raise ValidationError(f"Batch entries must be SQL strings or (sql, params) pairs, got {entry!r}")


class ExecutionEngine:
    def __init__(self, connection_factory: ConnectionFactory):
        self._factory = connection_factory

    # ------------------------------------------
    # Connection handling
    # ------------------------------------------

    @contextmanager
    def _connection(self) -> Iterator[Any]:
        try:
            conn = self._factory()
        except SqlHelperError:
            raise
        except Exception as e:
            raise ConnectivityError(f"Could not open connection: {e}") from e

        try:
            yield conn
        finally:
            try:
                conn.close()
            except self._factory.statement_errors as e:
                logger.warning("Error while closing connection: %s", e)

    def _translate(self, exc: BaseException, sql: Optional[str]) -> SqlHelperError:
        if self._factory.is_disconnect(exc):
            return ConnectivityError(f"Connection lost: {exc}")
        return StatementError(str(exc), sql=sql)

    def _run(self, cursor: Any, sql: str, params: Params) -> StatementOutcome:
        logger.debug("Executing: %s params=%s", sql, sorted(params) if params else [])
        try:
            if params is None:
                cursor.execute(sql)
            else:
                cursor.execute(sql, dict(params))
        except self._factory.statement_errors as e:
            return StatementOutcome(error=e)
        # DB-API reports -1 when the count is unknown
        return StatementOutcome(rowcount=max(cursor.rowcount, 0))

    def _rollback(self, conn: Any) -> None:
        try:
            conn.rollback()
        except Exception:
            # The caller re-raises the original error
            logger.exception("Rollback failed")

    def _commit(self, conn: Any, sql: Optional[str]) -> None:
        try:
            conn.commit()
        except self._factory.statement_errors as e:
            self._rollback(conn)
            raise self._translate(e, sql) from e

    # ------------------------------------------
    # Public operations
    # ------------------------------------------

    def execute_non_query(self, sql: str, params: Params = None) -> int:
        """
        Execute one statement and commit it.

        Returns:
            Affected-row count reported by the driver

        Raises:
            ConnectivityError, StatementError, ValidationError
        """
        _check_sql(sql)
        with self._connection() as conn:
            cursor = conn.cursor()
            try:
                outcome = self._run(cursor, sql, params)
                if not outcome.ok:
                    self._rollback(conn)
                    raise self._translate(outcome.error, sql) from outcome.error
                self._commit(conn, sql)
                return outcome.rowcount
            finally:
                cursor.close()

    def execute_non_query_batch(self, statements: Sequence[BatchEntry]) -> int:
        """
        Execute statements in order inside one transaction.

        Args:
            statements: SQL strings or (sql, params) pairs

        Returns:
            Cumulative affected-row count

        Raises:
            ValidationError: statements is None or empty (no I/O happens)
            ConnectivityError, StatementError: after the transaction is rolled back
        """
        if isinstance(statements, (str, bytes)):
            raise ValidationError("Queries must be a list of statements, not a single SQL string.")
        if not statements:
            raise ValidationError("Queries must not be null or empty.")
        entries: List[Tuple[str, Params]] = [_normalize_entry(s) for s in statements]

        with self._connection() as conn:
            cursor = conn.cursor()
            try:
                total = 0
                failed: Optional[Tuple[int, str, StatementOutcome]] = None
                try:
                    for index, (sql, params) in enumerate(entries, start=1):
                        outcome = self._run(cursor, sql, params)
                        if not outcome.ok:
                            failed = (index, sql, outcome)
                            break
                        total += outcome.rowcount
                except Exception:
                    self._rollback(conn)
                    raise

                if failed is not None:
                    index, sql, outcome = failed
                    logger.warning(
                        "Statement %d of %d failed, rolling back: %s",
                        index, len(entries), outcome.error,
                    )
                    self._rollback(conn)
                    raise self._translate(outcome.error, sql) from outcome.error

                self._commit(conn, None)
                logger.info("Committed batch of %d statements (%d rows)", len(entries), total)
                return total
            finally:
                cursor.close()

    def execute_many(self, sql: str, param_sets: Sequence[Mapping[str, Any]]) -> int:
        """One statement run once per parameter set, all-or-nothing."""
        _check_sql(sql)
        if not param_sets:
            raise ValidationError("Parameter sets must not be null or empty.")
        return self.execute_non_query_batch([(sql, params) for params in param_sets])

    def execute_query(self, sql: str, params: Params = None) -> TabularResult:
        """
        Execute a query and materialize the full result.

        Returns:
            TabularResult (empty when the statement returns no rows)
        """
        _check_sql(sql)
        with self._connection() as conn:
            cursor = conn.cursor()
            try:
                outcome = self._run(cursor, sql, params)
                if not outcome.ok:
                    raise self._translate(outcome.error, sql) from outcome.error
                try:
                    records = cursor.fetchall() if cursor.description else []
                except self._factory.statement_errors as e:
                    raise self._translate(e, sql) from e
                return TabularResult.from_cursor(cursor.description, records)
            finally:
                cursor.close()
