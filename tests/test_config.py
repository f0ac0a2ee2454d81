# ==============================================
# Tests for Configuration
# ==============================================

import pytest

from sqlhelper import config as config_module
from sqlhelper.config import MySQLConfig, get_config, get_connection_string, reset_config
from sqlhelper.errors import ValidationError
from sqlhelper.sql_helper import SqlHelper
from sqlhelper.storage import MySQLConnectionFactory


@pytest.fixture(autouse=True)
def fresh_config(monkeypatch):
    # Keep a developer's .env out of the tests
    monkeypatch.setattr(config_module, "load_dotenv", lambda *args, **kwargs: False)
    reset_config()
    yield
    reset_config()


class TestGetConfig:
    def test_defaults(self, monkeypatch):
        for name in ("MYSQL_HOST", "MYSQL_PORT", "MYSQL_DATABASE", "SQLHELPER_LOG_LEVEL"):
            monkeypatch.delenv(name, raising=False)
        config = get_config()
        assert config.mysql.host == "localhost"
        assert config.mysql.port == 3306
        assert config.mysql.database == "sqlhelper"
        assert config.log_level == "WARNING"

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("MYSQL_HOST", "db.internal")
        monkeypatch.setenv("MYSQL_PORT", "3307")
        monkeypatch.setenv("SQLHELPER_LOG_LEVEL", "debug")
        config = get_config()
        assert (config.mysql.host, config.mysql.port, config.log_level) == ("db.internal", 3307, "DEBUG")

    def test_singleton(self):
        assert get_config() is get_config()


class TestConnectionStrings:
    def test_from_url(self):
        config = MySQLConfig.from_url("mysql://app:s%40cret@db:3310/shop")
        assert (config.user, config.password, config.host, config.port, config.database) == (
            "app", "s@cret", "db", 3310, "shop",
        )

    def test_from_url_defaults(self):
        config = MySQLConfig.from_url("mysql://db")
        assert (config.port, config.user, config.database) == (3306, "root", "sqlhelper")

    def test_bad_scheme(self):
        with pytest.raises(ValidationError):
            MySQLConfig.from_url("postgresql://db/x")

    def test_named_connection_string(self, monkeypatch):
        monkeypatch.setenv("SQLHELPER_CONNECTION_DEFAULTCONNECTION", "mysql://u:p@h/db")
        assert get_connection_string() == "mysql://u:p@h/db"
        factory = MySQLConnectionFactory.from_name("DefaultConnection")
        assert (factory.config.host, factory.config.database) == ("h", "db")

    def test_missing_named_connection_string(self, monkeypatch):
        monkeypatch.delenv("SQLHELPER_CONNECTION_REPORTING", raising=False)
        with pytest.raises(ValidationError):
            SqlHelper.from_name("Reporting")


class TestMySQLConnectionFactory:
    def test_disconnect_codes(self):
        import pymysql

        factory = MySQLConnectionFactory(MySQLConfig())
        assert factory.is_disconnect(pymysql.err.OperationalError(2013, "Lost connection"))
        assert not factory.is_disconnect(pymysql.err.OperationalError(1054, "Unknown column"))
        assert not factory.is_disconnect(pymysql.err.IntegrityError(1062, "Duplicate entry"))


class TestConfigureLogging:
    def test_handler_attached_once(self):
        import logging

        from sqlhelper.config import configure_logging

        logger = logging.getLogger("sqlhelper")
        saved_handlers, saved_level = list(logger.handlers), logger.level
        logger.handlers = []
        try:
            configure_logging("DEBUG")
            configure_logging("INFO")
            assert len(logger.handlers) == 1
            assert logger.level == logging.INFO
        finally:
            logger.handlers = saved_handlers
            logger.setLevel(saved_level)
