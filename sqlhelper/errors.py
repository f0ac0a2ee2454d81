# ==============================================
# Errors
# ==============================================
#
# PURPOSE:
#   The four kinds of failure a caller can see. Every public
#   operation raises one of these (or lets a caller bug through).
#
# CLASSES:
# --------
# - SqlHelperError            → base class
# - ConnectivityError         → connection could not be opened / was lost
# - StatementError            → database rejected the SQL
# - ValidationError           → bad input, raised before any I/O
# - TypeCoercionError         → result value does not fit a model field
#
# ==============================================

from typing import Any, Optional


class SqlHelperError(Exception):
    """Base class for all sqlhelper errors."""


class ConnectivityError(SqlHelperError):
    """Raised when a connection cannot be opened or is lost mid-call."""

    def __init__(self, message: str):
        super().__init__(message)


class StatementError(SqlHelperError):
    """Raised when the database rejects a statement (constraint, syntax, type)."""

    def __init__(self, message: str, sql: Optional[str] = None):
        super().__init__(message)
        self.sql = sql


class ValidationError(SqlHelperError):
    """Raised for invalid caller input, always before any I/O happens."""


class TypeCoercionError(SqlHelperError):
    """Raised when a result value cannot be converted to a field's declared type."""

    def __init__(self, field: str, table: Optional[str], value: Any, target: Any):
        self.field = field
        self.table = table
        self.value = value
        self.target = target
        where = f"table '{table}'" if table else "query result"
        target_name = getattr(target, "__name__", str(target))
        super().__init__(
            f"Cannot convert {type(value).__name__} value {value!r} for field "
            f"'{field}' ({where}) to {target_name}"
        )
