# ==============================================
# Field Descriptors and CRUD Annotations
# ==============================================
#
# PURPOSE:
#   Data classes that describe how a single model field takes
#   part in CRUD statements, plus the markers a model author
#   uses to tag fields.
#
# ENUMS:
# ------
# - FieldKind(Enum): IDENTITY, EXCLUDED, NORMAL
#
# CLASSES:
# --------
# - FieldDescriptor (frozen dataclass)
#     - name: str          → attribute name == column name
#     - kind: FieldKind    → storage role
#     - type: Any          → declared type (Annotated / Optional unwrapped)
#     - nullable: bool     → declared as Optional[...]
#
# MARKERS:
# --------
#   Either style works, on dataclasses or plain annotated classes:
#
#     @dataclass
#     class Person:
#         id: Annotated[int, Identity] = 0
#         name: str = ""
#         nickname: str = excluded_field(default="")
#
# ==============================================

import dataclasses
from dataclasses import dataclass
from enum import Enum
from typing import Any

# Key used in dataclasses.field(metadata=...)
CRUD_METADATA_KEY = "sqlhelper.kind"


class FieldKind(Enum):
    """
    Storage role of a field.

    - IDENTITY: read on SELECT, never written (server generated)
    - EXCLUDED: invisible to every generated statement and mapped row
    - NORMAL:   read and written
    """
    IDENTITY = "identity"
    EXCLUDED = "excluded"
    NORMAL = "normal"


class _CrudMarker:
    def __init__(self, kind: FieldKind):
        self.kind = kind

    def __repr__(self) -> str:
        return self.kind.name.capitalize()


# Annotated[...] markers
Identity = _CrudMarker(FieldKind.IDENTITY)
Excluded = _CrudMarker(FieldKind.EXCLUDED)


def identity_field(**kwargs: Any) -> Any:
    """dataclasses.field() for a server generated column."""
    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata[CRUD_METADATA_KEY] = FieldKind.IDENTITY
    return dataclasses.field(metadata=metadata, **kwargs)


def excluded_field(**kwargs: Any) -> Any:
    """dataclasses.field() for an attribute that is not a column."""
    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata[CRUD_METADATA_KEY] = FieldKind.EXCLUDED
    return dataclasses.field(metadata=metadata, **kwargs)


@dataclass(frozen=True)
class FieldDescriptor:
    """Storage role of one model field, derived once per model type."""

    name: str
    kind: FieldKind = FieldKind.NORMAL
    type: Any = Any
    nullable: bool = False

    @property
    def is_mapped(self) -> bool:
        """Participates in result-row mapping."""
        return self.kind is not FieldKind.EXCLUDED

    @property
    def is_writable(self) -> bool:
        """Participates in INSERT / UPDATE value lists."""
        return self.kind is FieldKind.NORMAL
