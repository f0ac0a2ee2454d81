# ==============================================
# Connection Factories
# ==============================================
#
# PURPOSE:
#   Hand the execution engine a fresh DB-API connection per call.
#   A factory also tells the engine which driver exceptions are
#   statement failures and which ones mean the connection is gone.
#
# CLASSES:
# --------
# - ConnectionFactory (base)
#     - __call__() -> connection    (autocommit must be off)
#     - statement_errors: tuple     (driver exception types)
#     - is_disconnect(exc) -> bool
#
# - MySQLConnectionFactory(ConnectionFactory)
#     pymysql backed. Built from a MySQLConfig or a connection string.
#
# USAGE:
# ------
#   factory = MySQLConnectionFactory(get_config().mysql)
#   conn = factory()
#
# ==============================================

from typing import Any, Optional, Tuple, Type

import pymysql

from sqlhelper.config import MySQLConfig, get_config, get_connection_string
from sqlhelper.errors import ValidationError

# CR_CONNECTION_ERROR, CR_CONN_HOST_ERROR, CR_SERVER_GONE_ERROR,
# CR_SERVER_LOST, CR_SERVER_LOST_EXTENDED
MYSQL_DISCONNECT_CODES = frozenset({2002, 2003, 2006, 2013, 2055})


class ConnectionFactory:
    """Produces one new DB-API 2.0 connection per call."""

    statement_errors: Tuple[Type[BaseException], ...] = ()

    def __call__(self) -> Any:
        raise NotImplementedError

    def is_disconnect(self, exc: BaseException) -> bool:
        return False


class MySQLConnectionFactory(ConnectionFactory):
    """pymysql connections with autocommit off."""

    statement_errors = (pymysql.err.Error,)

    def __init__(self, config: Optional[MySQLConfig] = None):
        self.config = config or get_config().mysql

    @classmethod
    def from_url(cls, url: str) -> "MySQLConnectionFactory":
        return cls(MySQLConfig.from_url(url))

    @classmethod
    def from_name(cls, name: str = "DefaultConnection") -> "MySQLConnectionFactory":
        """Resolve a named connection string (see config.get_connection_string)."""
        url = get_connection_string(name)
        if url is None:
            raise ValidationError(f"Connection string '{name}' is not configured")
        return cls.from_url(url)

    def __call__(self) -> Any:
        return pymysql.connect(
            host=self.config.host,
            port=self.config.port,
            user=self.config.user,
            password=self.config.password,
            database=self.config.database,
            charset=self.config.charset,
            connect_timeout=self.config.connect_timeout,
            autocommit=False,
        )

    def is_disconnect(self, exc: BaseException) -> bool:
        if isinstance(exc, pymysql.err.InterfaceError):
            return True
        return (
            isinstance(exc, pymysql.err.OperationalError)
            and bool(exc.args)
            and exc.args[0] in MYSQL_DISCONNECT_CODES
        )

    def __repr__(self) -> str:
        return (
            f"MySQLConnectionFactory(host={self.config.host!r}, port={self.config.port}, "
            f"database={self.config.database!r})"
        )
