"""
PostgreSQL connector for the Inspection Region Query system.

This module provides point store connection functionality with retry logic
and timeout handling.
"""

from typing import Any, Dict, Optional

import psycopg2
from func_timeout import func_timeout, FunctionTimedOut
from tenacity import Retrying, stop_after_attempt, wait_exponential, retry_if_exception_type

from .credential_handler import CredentialHandler
from ..config import StoreSettings
from ..exceptions import RQStoreUnavailableError
from ..utils import get_logger

logger = get_logger(__name__)


class StoreConnector:
    """
    PostgreSQL connection manager with retry logic and timeout handling.

    The connector owns one connection for the lifetime of a command. Use it
    as a context manager so the connection is released on every exit path.
    """

    def __init__(self, settings: StoreSettings):
        """
        Initialize the store connector.

        Args:
            settings: Validated point store settings
        """
        self.settings = settings
        self.credential_handler = CredentialHandler(settings.password_env_var)
        self._connection: Optional[Any] = None
        self._retry_wait = wait_exponential(multiplier=1, min=1, max=10)
        logger.debug("StoreConnector initialized")

    def _connection_kwargs(self) -> Dict[str, Any]:
        kwargs = {
            "host": self.settings.host,
            "port": self.settings.port,
            "dbname": self.settings.dbname,
            "user": self.settings.user,
            "connect_timeout": self.settings.connect_timeout_seconds,
        }
        password = self.credential_handler.get_password()
        if password:
            kwargs["password"] = password
        return kwargs

    def _connect_with_retry(self, kwargs: Dict[str, Any]):
        retrying = Retrying(
            stop=stop_after_attempt(self.settings.max_retries),
            wait=self._retry_wait,
            retry=retry_if_exception_type(psycopg2.OperationalError),
            reraise=True
        )
        for attempt in retrying:
            with attempt:
                attempt_number = attempt.retry_state.attempt_number
                if attempt_number > 1:
                    logger.warning(f"Retrying point store connection (attempt {attempt_number})")
                return func_timeout(self.settings.connect_timeout_seconds,
                                    psycopg2.connect, kwargs=kwargs)

    def connect(self):
        """
        Establish a connection to the point store with retry logic.

        Returns:
            Open psycopg2 connection

        Raises:
            RQStoreUnavailableError: If connection fails after retries or times out
        """
        if self._connection is not None:
            return self._connection

        context = {"host": self.settings.host, "dbname": self.settings.dbname}
        logger.info(f"Attempting connection to point store at "
                    f"{self.settings.host}:{self.settings.port}/{self.settings.dbname}")

        try:
            connection = self._connect_with_retry(self._connection_kwargs())
        except FunctionTimedOut:
            raise RQStoreUnavailableError(
                "Connection timeout - point store may be unavailable", context
            )
        except psycopg2.Error as e:
            error_msg = f"Failed to connect to point store: {str(e).strip()}"
            logger.error(error_msg)
            raise RQStoreUnavailableError(error_msg, context)

        try:
            self._validate_connection(connection)
        except psycopg2.Error as e:
            connection.close()
            raise RQStoreUnavailableError(
                f"Point store connection validation failed: {str(e).strip()}", context
            )

        self._connection = connection
        logger.info(f"Successfully connected to {self.settings.dbname}")
        return connection

    def _validate_connection(self, connection) -> None:
        """Run a trivial statement to prove the connection is usable."""
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
            cursor.fetchone()
        connection.rollback()
        logger.debug("Connection validation passed")

    def get_connection(self):
        """
        Get the current connection.

        Returns:
            psycopg2 connection if connected, None otherwise
        """
        return self._connection

    def is_connected(self) -> bool:
        """Check if currently connected to the point store."""
        return self._connection is not None

    def disconnect(self) -> None:
        """Close the connection and clean up resources."""
        if self._connection is not None:
            try:
                self._connection.close()
            except psycopg2.Error as e:
                logger.warning(f"Error closing point store connection: {e}")
            self._connection = None
            logger.info("Disconnected from point store")

    def __enter__(self) -> "StoreConnector":
        self.connect()
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.disconnect()
