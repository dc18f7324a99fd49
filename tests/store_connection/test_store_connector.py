"""
Tests for StoreConnector class.

This module tests point store connection functionality including retry logic,
timeout handling, and connection lifecycle.
"""

import os
import pytest
import psycopg2
from unittest.mock import MagicMock, patch
from func_timeout import FunctionTimedOut
from tenacity import wait_none

from inspection.config import StoreSettings
from inspection.connection.store_connector import StoreConnector
from inspection.exceptions import RQStoreUnavailableError


class TestStoreConnector:
    """Test cases for StoreConnector class."""

    @pytest.fixture
    def settings(self):
        return StoreSettings(
            backend="postgresql",
            host="db.internal",
            port=5433,
            dbname="inspection_db",
            user="inspector",
            connect_timeout_seconds=5,
            max_retries=3
        )

    @pytest.fixture
    def connector(self, settings):
        connector = StoreConnector(settings)
        connector._retry_wait = wait_none()
        return connector

    @pytest.fixture
    def mock_connection(self):
        return MagicMock()

    def test_init(self, connector, settings):
        assert connector.settings is settings
        assert connector.credential_handler.password_env_var == "RQ_DB_PASSWORD"
        assert not connector.is_connected()
        assert connector.get_connection() is None

    @patch.dict(os.environ, {"RQ_DB_PASSWORD": "s3cret"})
    def test_connection_kwargs_with_password(self, connector):
        assert connector._connection_kwargs() == {
            "host": "db.internal",
            "port": 5433,
            "dbname": "inspection_db",
            "user": "inspector",
            "connect_timeout": 5,
            "password": "s3cret",
        }

    @patch.dict(os.environ, {}, clear=True)
    def test_connection_kwargs_without_password(self, connector):
        assert "password" not in connector._connection_kwargs()

    @patch('inspection.connection.store_connector.func_timeout')
    def test_connect_success(self, mock_func_timeout, connector, mock_connection):
        """Test successful connection to the point store."""
        mock_func_timeout.return_value = mock_connection

        result = connector.connect()

        assert result is mock_connection
        assert connector.is_connected()
        args, kwargs = mock_func_timeout.call_args
        assert args[0] == 5
        assert args[1] is psycopg2.connect
        assert kwargs["kwargs"]["host"] == "db.internal"
        cursor = mock_connection.cursor.return_value.__enter__.return_value
        cursor.execute.assert_called_once_with("SELECT 1")
        mock_connection.rollback.assert_called_once()

    @patch('inspection.connection.store_connector.func_timeout')
    def test_connect_reuses_existing_connection(self, mock_func_timeout, connector, mock_connection):
        mock_func_timeout.return_value = mock_connection

        connector.connect()
        connector.connect()

        assert mock_func_timeout.call_count == 1

    @patch('inspection.connection.store_connector.func_timeout')
    def test_connect_retries_operational_errors(self, mock_func_timeout, connector, mock_connection):
        """Test that transient connection failures are retried."""
        mock_func_timeout.side_effect = [
            psycopg2.OperationalError("could not connect to server"),
            mock_connection,
        ]

        assert connector.connect() is mock_connection
        assert mock_func_timeout.call_count == 2

    @patch('inspection.connection.store_connector.func_timeout')
    def test_connect_fails_after_max_retries(self, mock_func_timeout, connector):
        """Test that exhausted retries raise RQStoreUnavailableError."""
        mock_func_timeout.side_effect = psycopg2.OperationalError("could not connect to server")

        with pytest.raises(RQStoreUnavailableError) as exc_info:
            connector.connect()

        assert mock_func_timeout.call_count == 3
        assert "Failed to connect to point store" in str(exc_info.value)
        assert exc_info.value.context["host"] == "db.internal"
        assert not connector.is_connected()

    @patch('inspection.connection.store_connector.func_timeout')
    def test_connect_does_not_retry_other_errors(self, mock_func_timeout, connector):
        mock_func_timeout.side_effect = psycopg2.ProgrammingError("invalid dsn")

        with pytest.raises(RQStoreUnavailableError):
            connector.connect()

        assert mock_func_timeout.call_count == 1

    @patch('inspection.connection.store_connector.func_timeout')
    def test_connect_timeout(self, mock_func_timeout, connector):
        """Test connection timeout handling."""
        mock_func_timeout.side_effect = FunctionTimedOut()

        with pytest.raises(RQStoreUnavailableError) as exc_info:
            connector.connect()

        assert "Connection timeout" in str(exc_info.value)

    @patch('inspection.connection.store_connector.func_timeout')
    def test_connect_validation_failure(self, mock_func_timeout, connector, mock_connection):
        mock_func_timeout.return_value = mock_connection
        cursor = mock_connection.cursor.return_value.__enter__.return_value
        cursor.execute.side_effect = psycopg2.OperationalError("server closed the connection")

        with pytest.raises(RQStoreUnavailableError) as exc_info:
            connector.connect()

        assert "validation failed" in str(exc_info.value)
        mock_connection.close.assert_called_once()
        assert not connector.is_connected()

    @patch('inspection.connection.store_connector.func_timeout')
    def test_disconnect(self, mock_func_timeout, connector, mock_connection):
        mock_func_timeout.return_value = mock_connection
        connector.connect()

        connector.disconnect()

        mock_connection.close.assert_called_once()
        assert not connector.is_connected()

    @patch('inspection.connection.store_connector.func_timeout')
    def test_disconnect_close_error_is_logged(self, mock_func_timeout, connector, mock_connection):
        mock_func_timeout.return_value = mock_connection
        mock_connection.close.side_effect = psycopg2.InterfaceError("connection already closed")
        connector.connect()

        connector.disconnect()

        assert not connector.is_connected()

    def test_disconnect_when_not_connected(self, connector):
        connector.disconnect()
        assert not connector.is_connected()

    @patch('inspection.connection.store_connector.func_timeout')
    def test_context_manager(self, mock_func_timeout, connector, mock_connection):
        """Test that the connection is released when the block exits."""
        mock_func_timeout.return_value = mock_connection

        with connector as active:
            assert active is connector
            assert connector.get_connection() is mock_connection

        mock_connection.close.assert_called_once()
        assert not connector.is_connected()

    @patch('inspection.connection.store_connector.func_timeout')
    def test_context_manager_releases_on_error(self, mock_func_timeout, connector, mock_connection):
        mock_func_timeout.return_value = mock_connection

        with pytest.raises(ValueError):
            with connector:
                raise ValueError("evaluation failed")

        mock_connection.close.assert_called_once()
