# ==============================================
# SqlHelper — CRUD Facade
# ==============================================
#
# PURPOSE:
#   The public operation set. Composes the reflector, the statement
#   builder, the execution engine and the row mapper. Owns nothing
#   but a connection factory.
#
# CLASSES:
# --------
# - SqlHelperInterface (ABC)
#     The contract callers depend on; lets tests and callers swap
#     in their own implementation.
#
# - SqlHelper(SqlHelperInterface)
#     Constructor:
#     ------------
#     - __init__(connection_factory)
#     - from_config(config=None)       → MySQL from MYSQL_* settings
#     - from_url(url)                  → MySQL from a connection string
#     - from_name(name)                → MySQL from a named connection string
#
#     Methods:
#     --------
#     - execute_non_query(sql, params=None) -> int
#     - execute_non_query_batch(queries) -> int
#     - select(sql, params=None) -> TabularResult
#     - select_models(model_type, sql, params=None) -> list
#     - insert_model(model, table) -> int
#     - insert_models(models, table) -> int
#     - get_all_models(model_type, table) -> list
#     - get_model_by_id(model_type, table, id_column, id_value) -> model
#     - update_model(model, table, id_column) -> int
#     - delete_model(table, id_column, id_value) -> int
#
# USAGE:
# ------
#   @dataclass
#   class Person:
#       id: Annotated[int, Identity] = 0
#       PId: int = 0
#       Name: str = ""
#       FName: str = excluded_field(default="")
#
#   helper = SqlHelper.from_config()
#   helper.insert_model(Person(PId=1, Name="A"), "TestTable")
#   people = helper.get_all_models(Person, "TestTable")
#
# ==============================================

import logging
from abc import ABC, abstractmethod
from typing import Any, List, Mapping, Optional, Sequence, Type, TypeVar

from sqlhelper.config import AppConfig, get_config
from sqlhelper.errors import ValidationError
from sqlhelper.mapping.row_mapper import default_instance, map_rows
from sqlhelper.mapping.tabular import TabularResult
from sqlhelper.metadata.reflector import describe
from sqlhelper.statements.builder import Operation, build
from sqlhelper.storage.connection import ConnectionFactory, MySQLConnectionFactory
from sqlhelper.storage.executor import BatchEntry, ExecutionEngine

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SqlHelperInterface(ABC):
    """CRUD contract over one relational database."""

    @abstractmethod
    def execute_non_query(self, sql: str, params: Optional[Mapping[str, Any]] = None) -> int: ...

    @abstractmethod
    def execute_non_query_batch(self, queries: Sequence[BatchEntry]) -> int: ...

    @abstractmethod
    def select(self, sql: str, params: Optional[Mapping[str, Any]] = None) -> TabularResult: ...

    @abstractmethod
    def select_models(self, model_type: Type[T], sql: str, params: Optional[Mapping[str, Any]] = None) -> List[T]: ...

    @abstractmethod
    def insert_model(self, model: Any, table: str) -> int: ...

    @abstractmethod
    def insert_models(self, models: Sequence[Any], table: str) -> int: ...

    @abstractmethod
    def get_all_models(self, model_type: Type[T], table: str) -> List[T]: ...

    @abstractmethod
    def get_model_by_id(self, model_type: Type[T], table: str, id_column: str, id_value: Any) -> T: ...

    @abstractmethod
    def update_model(self, model: Any, table: str, id_column: str) -> int: ...

    @abstractmethod
    def delete_model(self, table: str, id_column: str, id_value: Any) -> int: ...


class SqlHelper(SqlHelperInterface):
    """
    Maps model instances to table rows with generated SQL.

    Every call opens and releases its own connection; batched writes
    run in a single transaction.
    """

    def __init__(self, connection_factory: ConnectionFactory):
        """
        Args:
            connection_factory: produces a fresh DB-API connection per call
        """
        self._engine = ExecutionEngine(connection_factory)

    @classmethod
    def from_config(cls, config: Optional[AppConfig] = None) -> "SqlHelper":
        config = config or get_config()
        return cls(MySQLConnectionFactory(config.mysql))

    @classmethod
    def from_url(cls, url: str) -> "SqlHelper":
        return cls(MySQLConnectionFactory.from_url(url))

    @classmethod
    def from_name(cls, name: str = "DefaultConnection") -> "SqlHelper":
        return cls(MySQLConnectionFactory.from_name(name))

    # ------------------------------------------
    # Raw SQL
    # ------------------------------------------

    def execute_non_query(self, sql: str, params: Optional[Mapping[str, Any]] = None) -> int:
        return self._engine.execute_non_query(sql, params)

    def execute_non_query_batch(self, queries: Sequence[BatchEntry]) -> int:
        """Run queries in order in one transaction; all commit or none do."""
        return self._engine.execute_non_query_batch(queries)

    def select(self, sql: str, params: Optional[Mapping[str, Any]] = None) -> TabularResult:
        return self._engine.execute_query(sql, params)

    def select_models(self, model_type: Type[T], sql: str, params: Optional[Mapping[str, Any]] = None) -> List[T]:
        """Run a query and map each row to model_type."""
        return map_rows(self.select(sql, params), model_type)

    # ------------------------------------------
    # Model CRUD
    # ------------------------------------------

    def insert_model(self, model: Any, table: str) -> int:
        """
        Insert one model. Identity and excluded fields are left out.

        Returns:
            Affected-row count (1 on success)
        """
        if model is None:
            raise ValidationError("Model must not be None.")
        template = build(Operation.INSERT, table, describe(type(model)))
        return self._engine.execute_non_query(template.sql, template.bind(model))

    def insert_models(self, models: Sequence[Any], table: str) -> int:
        """
        Insert many models of one type in a single transaction.

        A failing row rolls back every row of the call.
        """
        if not models:
            raise ValidationError("Models must not be null or empty.")

        model_type = type(models[0])
        if any(type(m) is not model_type for m in models):
            raise ValidationError(f"All models must be of type {model_type.__name__}")

        template = build(Operation.INSERT, table, describe(model_type))
        param_sets = [template.bind(m) for m in models]
        logger.debug("Inserting %d %s rows into %s", len(models), model_type.__name__, table)
        return self._engine.execute_many(template.sql, param_sets)

    def get_all_models(self, model_type: Type[T], table: str) -> List[T]:
        template = build(Operation.SELECT_ALL, table)
        return map_rows(self._engine.execute_query(template.sql), model_type, table)

    def get_model_by_id(self, model_type: Type[T], table: str, id_column: str, id_value: Any) -> T:
        """
        Fetch the row whose id_column equals id_value.

        Returns:
            The first matching model, or a default instance when no row matches
        """
        template = build(Operation.SELECT_WHERE, table, predicate_column=id_column)
        result = self._engine.execute_query(template.sql, template.bind(match_value=id_value))
        if len(result) == 0:
            return default_instance(model_type)
        return map_rows(TabularResult(result.columns, result.rows[:1]), model_type, table)[0]

    def update_model(self, model: Any, table: str, id_column: str) -> int:
        """
        Update the row identified by model.<id_column>.

        Raises:
            ValidationError: model is None or id_column is not a field of the model
        """
        if model is None:
            raise ValidationError("Model must not be None.")
        if not id_column:
            raise ValidationError("Property name cannot be null or empty.")

        template = build(Operation.UPDATE, table, describe(type(model)), predicate_column=id_column)
        return self._engine.execute_non_query(template.sql, template.bind(model))

    def delete_model(self, table: str, id_column: str, id_value: Any) -> int:
        template = build(Operation.DELETE, table, predicate_column=id_column)
        return self._engine.execute_non_query(template.sql, template.bind(match_value=id_value))
