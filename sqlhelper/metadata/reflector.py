# ==============================================
# Metadata Reflector
# ==============================================
#
# PURPOSE:
#   Turn a model type into its ordered FieldDescriptor tuple.
#   Declaration order is the canonical column order for every
#   generated statement.
#
# FUNCTIONS:
# ----------
# - describe(model_type) -> tuple[FieldDescriptor, ...]
#     All public instance fields, in declaration order, classified
#     as EXCLUDED / IDENTITY / NORMAL. Never fails. Cached per type.
#
# - mapped_fields(model_type)    → kind != EXCLUDED
# - writable_fields(model_type)  → kind == NORMAL
# - find_field(model_type, name) → descriptor or None
#
# ==============================================

import dataclasses
import logging
import types
import typing
from functools import lru_cache
from typing import Any, Dict, List, Optional, Tuple

from sqlhelper.metadata.fields import (
    CRUD_METADATA_KEY,
    FieldDescriptor,
    FieldKind,
    _CrudMarker,
)

logger = logging.getLogger(__name__)

_NONE_TYPE = type(None)
# X | None (3.10+)
_UNION_TYPE = getattr(types, "UnionType", None)


def _declared_names(model_type: type) -> List[str]:
    if dataclasses.is_dataclass(model_type):
        return [f.name for f in dataclasses.fields(model_type)]

    # Plain class: walk the MRO base-first, like dataclasses does
    names: List[str] = []
    for klass in reversed(model_type.__mro__):
        for name in klass.__dict__.get("__annotations__", {}):
            if name not in names:
                names.append(name)
    return names


def _type_hints(model_type: type) -> Dict[str, Any]:
    try:
        return typing.get_type_hints(model_type, include_extras=True)
    except (NameError, TypeError) as e:
        # Unresolvable forward reference: fall back to the raw annotations
        logger.debug("Could not resolve type hints for %s: %s", model_type.__name__, e)
        hints: Dict[str, Any] = {}
        for klass in reversed(model_type.__mro__):
            hints.update(klass.__dict__.get("__annotations__", {}))
        return hints


def _unwrap(hint: Any) -> Tuple[Any, List[Any], bool]:
    """Split a hint into (base type, Annotated extras, nullable)."""
    extras: List[Any] = []
    nullable = False

    while True:
        origin = typing.get_origin(hint)
        if origin is typing.Annotated:
            extras.extend(hint.__metadata__)
            hint = hint.__origin__
            continue
        if origin is typing.Union or origin is _UNION_TYPE:
            args = [a for a in typing.get_args(hint) if a is not _NONE_TYPE]
            if len(args) < len(typing.get_args(hint)):
                nullable = True
            if len(args) == 1:
                hint = args[0]
                continue
        break

    return hint, extras, nullable


def _is_class_var(hint: Any) -> bool:
    return hint is typing.ClassVar or typing.get_origin(hint) is typing.ClassVar


def _classify(markers: List[Any]) -> FieldKind:
    kinds = {m.kind for m in markers if isinstance(m, _CrudMarker)}
    kinds.update(m for m in markers if isinstance(m, FieldKind))
    if FieldKind.EXCLUDED in kinds:
        return FieldKind.EXCLUDED
    if FieldKind.IDENTITY in kinds:
        return FieldKind.IDENTITY
    return FieldKind.NORMAL


@lru_cache(maxsize=None)
def describe(model_type: type) -> Tuple[FieldDescriptor, ...]:
    """
    Derive the ordered field descriptors of a model type.

    Args:
        model_type: a dataclass or a class with annotated attributes

    Returns:
        Tuple of FieldDescriptor in declaration order. Fields with no
        marker are NORMAL, so this never fails for a valid class.
    """
    hints = _type_hints(model_type)
    dc_fields = (
        {f.name: f for f in dataclasses.fields(model_type)}
        if dataclasses.is_dataclass(model_type)
        else {}
    )

    descriptors: List[FieldDescriptor] = []
    for name in _declared_names(model_type):
        if name.startswith("_"):
            continue
        hint = hints.get(name, Any)
        if _is_class_var(hint):
            continue

        base_type, markers, nullable = _unwrap(hint)
        dc_field = dc_fields.get(name)
        if dc_field is not None and CRUD_METADATA_KEY in dc_field.metadata:
            markers.append(dc_field.metadata[CRUD_METADATA_KEY])

        descriptors.append(
            FieldDescriptor(
                name=name,
                kind=_classify(markers),
                type=base_type,
                nullable=nullable,
            )
        )

    logger.debug(
        "Described %s: %s",
        model_type.__name__,
        ", ".join(f"{d.name}({d.kind.value})" for d in descriptors),
    )
    return tuple(descriptors)


def mapped_fields(model_type: type) -> Tuple[FieldDescriptor, ...]:
    return tuple(d for d in describe(model_type) if d.is_mapped)


def writable_fields(model_type: type) -> Tuple[FieldDescriptor, ...]:
    return tuple(d for d in describe(model_type) if d.is_writable)


def find_field(model_type: type, name: str) -> Optional[FieldDescriptor]:
    for descriptor in describe(model_type):
        if descriptor.name == name:
            return descriptor
    return None
