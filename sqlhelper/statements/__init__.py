# ==============================================
# STATEMENTS: SQL text generation
# ==============================================

from .builder import (
    MATCH_PLACEHOLDER,
    Operation,
    SqlScalar,
    StatementTemplate,
    build,
    check_scalar,
    quote_identifier,
)

__all__ = [
    "MATCH_PLACEHOLDER",
    "Operation",
    "SqlScalar",
    "StatementTemplate",
    "build",
    "check_scalar",
    "quote_identifier",
]
