# ==============================================
# STORAGE: connections and statement execution
# ==============================================
#
# Modules:
# --------
# - connection.py  → ConnectionFactory, MySQLConnectionFactory (pymysql)
# - executor.py    → ExecutionEngine (single, batched and query execution)
#
# ==============================================

from .connection import ConnectionFactory, MySQLConnectionFactory
from .executor import ExecutionEngine, StatementOutcome

__all__ = [
    "ConnectionFactory",
    "MySQLConnectionFactory",
    "ExecutionEngine",
    "StatementOutcome",
]
