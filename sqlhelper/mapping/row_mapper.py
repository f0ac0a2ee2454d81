# ==============================================
# Row Mapper
# ==============================================
#
# PURPOSE:
#   Turn a TabularResult into model instances, one per row.
#
# RULES:
# ------
#   - Only non-excluded fields are populated.
#   - A field is set when the result has a column of the same name
#     and the row value is not NULL; otherwise it keeps its default.
#   - Extra result columns are ignored.
#   - Values are converted to the field's declared type; an
#     incompatible value raises TypeCoercionError and stops the call.
#
# FUNCTIONS:
# ----------
# - map_rows(result, model_type, table=None) -> list
# - map_row(row, columns, model_type, table=None) -> model
# - default_instance(model_type) -> model
# - convert_value(value, descriptor, table=None) -> Any
#
# ==============================================

import dataclasses
import logging
from datetime import date, datetime, time, timedelta
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from sqlhelper.errors import TypeCoercionError
from sqlhelper.mapping.tabular import TabularResult
from sqlhelper.metadata.fields import FieldDescriptor
from sqlhelper.metadata.reflector import describe, mapped_fields

logger = logging.getLogger(__name__)

DATETIME_FORMATS = [
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M:%S.%f",
    "%Y-%m-%dT%H:%M:%SZ",
    "%Y-%m-%dT%H:%M:%S.%fZ",
    "%Y-%m-%d",
    "%d/%m/%Y",
    "%m/%d/%Y",
    "%Y/%m/%d",
]

_ZERO_VALUES: Dict[Any, Any] = {
    int: 0,
    float: 0.0,
    bool: False,
    str: "",
    bytes: b"",
    Decimal: Decimal(0),
    datetime: datetime.min,
    date: date.min,
    time: time.min,
    timedelta: timedelta(0),
}


# ==============================================
# Defaults
# ==============================================

def zero_value(descriptor: FieldDescriptor) -> Any:
    """Zero value for a field that declares no default of its own."""
    if descriptor.nullable:
        return None
    if descriptor.type in _ZERO_VALUES:
        return _ZERO_VALUES[descriptor.type]
    if descriptor.type is not Any and isinstance(descriptor.type, type) and not issubclass(descriptor.type, Enum):
        try:
            return descriptor.type()
        except TypeError:
            return None
    return None


def _build(model_type: type, values: Dict[str, Any]) -> Any:
    """Instantiate model_type with values; everything else at its default."""
    if not dataclasses.is_dataclass(model_type):
        model = model_type()
        for descriptor in describe(model_type):
            if descriptor.name in values:
                setattr(model, descriptor.name, values[descriptor.name])
            elif not hasattr(model, descriptor.name):
                # Annotation without a class-level default
                setattr(model, descriptor.name, zero_value(descriptor))
        return model

    by_name = {d.name: d for d in describe(model_type)}
    kwargs: Dict[str, Any] = {}
    late: Dict[str, Any] = {}
    for f in dataclasses.fields(model_type):
        if not f.init:
            if f.name in values:
                late[f.name] = values[f.name]
            continue
        if f.name in values:
            kwargs[f.name] = values[f.name]
        elif f.default is dataclasses.MISSING and f.default_factory is dataclasses.MISSING:
            descriptor = by_name.get(f.name) or FieldDescriptor(name=f.name)
            kwargs[f.name] = zero_value(descriptor)

    model = model_type(**kwargs)
    for name, value in late.items():
        object.__setattr__(model, name, value)
    return model


def default_instance(model_type: type) -> Any:
    """An instance of model_type with every field at its default value."""
    return _build(model_type, {})


# ==============================================
# Conversion
# ==============================================

def _to_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, (bytes, bytearray)):
        value = bytes(value).decode("ascii")
    if isinstance(value, str):
        text = value.strip()
        try:
            return datetime.fromisoformat(text)
        except ValueError:
            pass
        for fmt in DATETIME_FORMATS:
            try:
                return datetime.strptime(text, fmt)
            except ValueError:
                continue
    raise ValueError(value)


def _to_int(value: Any) -> int:
    if isinstance(value, int):
        return int(value)
    if isinstance(value, (float, Decimal)) and value == int(value):
        return int(value)
    raise ValueError(value)


def _to_float(value: Any) -> float:
    if isinstance(value, (int, float, Decimal)) and not isinstance(value, bool):
        return float(value)
    raise ValueError(value)


def _to_decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        return Decimal(value)
    if isinstance(value, float):
        return Decimal(str(value))
    raise ValueError(value)


def _to_bool(value: Any) -> bool:
    # MySQL BOOLEAN is TINYINT(1)
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    raise ValueError(value)


def _to_bytes(value: Any) -> bytes:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    raise ValueError(value)


def _to_str(value: Any) -> str:
    if isinstance(value, str):
        return value
    raise ValueError(value)


def _to_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return _to_datetime(value).date()


_CONVERTERS = {
    datetime: _to_datetime,
    date: _to_date,
    bool: _to_bool,
    int: _to_int,
    float: _to_float,
    Decimal: _to_decimal,
    str: _to_str,
    bytes: _to_bytes,
}


def convert_value(value: Any, descriptor: FieldDescriptor, table: Optional[str] = None) -> Any:
    """
    Convert a non-NULL column value to the field's declared type.

    Raises:
        TypeCoercionError: value is not compatible with the declared type
    """
    target = descriptor.type
    if target is Any or not isinstance(target, type):
        # Any, string annotations, parameterized generics: assign as is
        return value

    try:
        converter = _CONVERTERS.get(target)
        if converter is not None:
            return converter(value)
        if issubclass(target, Enum):
            return value if isinstance(value, target) else target(value)
        if isinstance(value, target):
            return value
    except (ValueError, TypeError, OverflowError, InvalidOperation, UnicodeDecodeError):
        pass
    raise TypeCoercionError(descriptor.name, table, value, target)


# ==============================================
# Mapping
# ==============================================

def map_row(
    row: Dict[str, Any],
    columns: Iterable[str],
    model_type: type,
    table: Optional[str] = None,
) -> Any:
    """Build one model instance from one result row."""
    available = set(columns)
    values: Dict[str, Any] = {}
    for descriptor in mapped_fields(model_type):
        if descriptor.name not in available:
            continue
        raw = row.get(descriptor.name)
        if raw is None:
            continue
        values[descriptor.name] = convert_value(raw, descriptor, table)
    return _build(model_type, values)


def map_rows(result: TabularResult, model_type: type, table: Optional[str] = None) -> List[Any]:
    """
    Map every row of a result to a model instance.

    Args:
        result: materialized query result
        model_type: target model class
        table: table name, only used in error messages

    Returns:
        One instance per row, in row order (empty list for no rows)
    """
    models = [map_row(row, result.columns, model_type, table) for row in result.rows]
    logger.debug("Mapped %d rows to %s", len(models), model_type.__name__)
    return models
