# ==============================================
# sqlhelper — typed models over raw SQL
# ==============================================
#
# Package Structure:
#
# sqlhelper/
# ├── metadata/      # Field descriptors, Identity / Excluded markers, reflector
# ├── statements/    # INSERT / SELECT / UPDATE / DELETE generation
# ├── mapping/       # TabularResult and row -> model mapping
# ├── storage/       # Connection factories and the execution engine
# ├── sql_helper.py  # SqlHelper: the public CRUD facade
# ├── errors.py      # Error taxonomy
# └── config.py      # Configuration management
#
# ==============================================

__version__ = "0.1.0"

from .errors import (
    ConnectivityError,
    SqlHelperError,
    StatementError,
    TypeCoercionError,
    ValidationError,
)
from .mapping import TabularResult
from .metadata import Excluded, FieldKind, Identity, describe, excluded_field, identity_field
from .sql_helper import SqlHelper, SqlHelperInterface
from .storage import ConnectionFactory, MySQLConnectionFactory

__all__ = [
    "ConnectivityError",
    "SqlHelperError",
    "StatementError",
    "TypeCoercionError",
    "ValidationError",
    "TabularResult",
    "Excluded",
    "FieldKind",
    "Identity",
    "describe",
    "excluded_field",
    "identity_field",
    "SqlHelper",
    "SqlHelperInterface",
    "ConnectionFactory",
    "MySQLConnectionFactory",
]
