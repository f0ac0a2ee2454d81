# ==============================================
# METADATA: model fields and their CRUD roles
# ==============================================
#
# Modules:
# --------
# - fields.py     → FieldKind, FieldDescriptor, Identity / Excluded markers
# - reflector.py  → describe(model_type) and filtered views
#
# ==============================================

from .fields import (
    Excluded,
    FieldDescriptor,
    FieldKind,
    Identity,
    excluded_field,
    identity_field,
)
from .reflector import describe, find_field, mapped_fields, writable_fields

__all__ = [
    "Excluded",
    "FieldDescriptor",
    "FieldKind",
    "Identity",
    "excluded_field",
    "identity_field",
    "describe",
    "find_field",
    "mapped_fields",
    "writable_fields",
]
