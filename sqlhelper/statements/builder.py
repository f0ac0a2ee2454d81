# ==============================================
# Statement Builder
# ==============================================
#
# PURPOSE:
#   Produce parameterized MySQL statements from a table name,
#   an operation and a model's field descriptors. Nothing here
#   touches a connection.
#
# ENUMS:
# ------
# - Operation(Enum): INSERT, SELECT_ALL, SELECT_WHERE, UPDATE, DELETE
#
# CLASSES:
# --------
# - StatementTemplate (frozen dataclass)
#     - sql: str                                   → text with %(name)s placeholders
#     - parameters: tuple[(placeholder, source)]   → source None = predicate value
#     - bind(model=None, match_value=None) -> dict
#
# FUNCTIONS:
# ----------
# - build(operation, table_name, fields, predicate_column=None) -> StatementTemplate
# - quote_identifier(name) -> str
# - check_scalar(value) -> value
#
# RULES:
# ------
#   INSERT        → columns = NORMAL fields, in descriptor order
#   SELECT_ALL    → SELECT * FROM table
#   SELECT_WHERE  → SELECT * FROM table WHERE col = %(match_value)s
#   UPDATE        → SET NORMAL fields except predicate column,
#                   WHERE predicate column = %(column)s
#   DELETE        → DELETE FROM table WHERE col = %(match_value)s
#
# ==============================================

import logging
import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional, Sequence, Tuple, Union

from sqlhelper.errors import ValidationError
from sqlhelper.metadata.fields import FieldDescriptor, FieldKind

logger = logging.getLogger(__name__)

MATCH_PLACEHOLDER = "match_value"

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_$]*$")

# Scalar kinds accepted as a caller-supplied predicate value
SqlScalar = Union[None, bool, int, float, Decimal, str, bytes, datetime, date, time, timedelta]
_SCALAR_TYPES = (bool, int, float, Decimal, str, bytes, bytearray, datetime, date, time, timedelta)


class Operation(Enum):
    INSERT = "insert"
    SELECT_ALL = "select_all"
    SELECT_WHERE = "select_where"
    UPDATE = "update"
    DELETE = "delete"


def quote_identifier(name: str) -> str:
    """
    Backtick-quote a table or column name.

    "schema.table" is quoted part by part. Anything that is not a
    plain identifier is rejected.
    """
    if not isinstance(name, str) or not name:
        raise ValidationError("Identifier must be a non-empty string")

    parts = name.split(".")
    if len(parts) > 2 or not all(_IDENTIFIER.match(p) for p in parts):
        raise ValidationError(f"Invalid SQL identifier: '{name}'")
    return ".".join(f"`{p}`" for p in parts)


def check_scalar(value: Any) -> SqlScalar:
    """Reject predicate values the driver cannot bind as a single scalar."""
    if value is None or isinstance(value, _SCALAR_TYPES):
        return value
    raise ValidationError(
        f"Unsupported predicate value of type {type(value).__name__}; "
        "expected int, float, Decimal, str, bytes, bool, date/time or None"
    )


@dataclass(frozen=True)
class StatementTemplate:
    """
    A statement ready for the execution engine.

    parameters pairs each placeholder with the model attribute that
    feeds it; None marks the caller-supplied predicate value.
    """

    sql: str
    parameters: Tuple[Tuple[str, Optional[str]], ...] = ()

    @property
    def placeholders(self) -> Tuple[str, ...]:
        return tuple(p for p, _ in self.parameters)

    def bind(self, model: Any = None, match_value: Any = None) -> Dict[str, Any]:
        """
        Build the named-parameter dict for one execution.

        A None attribute value is bound as SQL NULL, never dropped.
        """
        values: Dict[str, Any] = {}
        for placeholder, source in self.parameters:
            if source is None:
                values[placeholder] = check_scalar(match_value)
            else:
                values[placeholder] = getattr(model, source, None)
        return values


def _insert(table: str, fields: Sequence[FieldDescriptor]) -> StatementTemplate:
    columns = [f for f in fields if f.kind is FieldKind.NORMAL]
    if not columns:
        raise ValidationError(f"No insertable fields for table '{table}'")

    column_list = ", ".join(quote_identifier(f.name) for f in columns)
    value_list = ", ".join(f"%({f.name})s" for f in columns)
    return StatementTemplate(
        sql=f"INSERT INTO {quote_identifier(table)} ({column_list}) VALUES ({value_list})",
        parameters=tuple((f.name, f.name) for f in columns),
    )


def _update(table: str, fields: Sequence[FieldDescriptor], id_column: str) -> StatementTemplate:
    id_field = next((f for f in fields if f.name == id_column and f.is_mapped), None)
    if id_field is None:
        raise ValidationError(f"Property '{id_column}' not found on model for table '{table}'")

    columns = [f for f in fields if f.kind is FieldKind.NORMAL and f.name != id_column]
    if not columns:
        raise ValidationError(f"No updatable fields for table '{table}'")

    set_clause = ", ".join(f"{quote_identifier(f.name)} = %({f.name})s" for f in columns)
    return StatementTemplate(
        sql=(
            f"UPDATE {quote_identifier(table)} SET {set_clause} "
            f"WHERE {quote_identifier(id_column)} = %({id_column})s"
        ),
        parameters=tuple((f.name, f.name) for f in columns) + ((id_column, id_column),),
    )


def build(
    operation: Operation,
    table_name: str,
    fields: Sequence[FieldDescriptor] = (),
    predicate_column: Optional[str] = None,
) -> StatementTemplate:
    """
    Build the statement template for one CRUD operation.

    Args:
        operation: which statement to build
        table_name: target table ("table" or "schema.table")
        fields: the model's field descriptors (INSERT / UPDATE)
        predicate_column: equality column for SELECT_WHERE / UPDATE / DELETE

    Returns:
        StatementTemplate

    Raises:
        ValidationError: empty column lists, missing predicate column,
            unknown identifier column or an invalid identifier
    """
    table = quote_identifier(table_name)

    if operation in (Operation.SELECT_WHERE, Operation.UPDATE, Operation.DELETE) and not predicate_column:
        raise ValidationError(f"{operation.name} requires a predicate column")

    if operation is Operation.INSERT:
        template = _insert(table_name, fields)
    elif operation is Operation.SELECT_ALL:
        template = StatementTemplate(sql=f"SELECT * FROM {table}")
    elif operation is Operation.SELECT_WHERE:
        template = StatementTemplate(
            sql=f"SELECT * FROM {table} WHERE {quote_identifier(predicate_column)} = %({MATCH_PLACEHOLDER})s",
            parameters=((MATCH_PLACEHOLDER, None),),
        )
    elif operation is Operation.UPDATE:
        template = _update(table_name, fields, predicate_column)
    elif operation is Operation.DELETE:
        template = StatementTemplate(
            sql=f"DELETE FROM {table} WHERE {quote_identifier(predicate_column)} = %({MATCH_PLACEHOLDER})s",
            parameters=((MATCH_PLACEHOLDER, None),),
        )
    else:
        raise ValidationError(f"Unsupported operation: {operation!r}")

    logger.debug("Built %s statement: %s", operation.name, template.sql)
    return template
