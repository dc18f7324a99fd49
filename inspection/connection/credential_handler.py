"""
Credential handler for point store connections.

This module loads database credentials from environment variables, ensuring
no credential exposure in logs.
"""

import os
from typing import Dict, List, Optional

from ..exceptions import RQConfigurationError
from ..utils import get_logger

logger = get_logger(__name__)


class CredentialHandler:
    """
    Handles credentials for point store connections.

    Passwords are never read from configuration files; the store settings name
    the environment variable that holds them.
    """

    def __init__(self, password_env_var: str):
        """
        Initialize the credential handler.

        Args:
            password_env_var: Name of the environment variable holding the password
        """
        if not password_env_var or not password_env_var.strip():
            raise RQConfigurationError("Password environment variable name cannot be empty")
        self.password_env_var = password_env_var
        logger.debug("CredentialHandler initialized")

    def get_password(self) -> Optional[str]:
        """
        Get the database password from the environment.

        Returns:
            The password, or None when the variable is unset so libpq can fall
            back to ~/.pgpass or trust authentication
        """
        password = os.getenv(self.password_env_var)
        if not password:
            logger.warning(f"Environment variable {self.password_env_var} is not set; "
                           f"connecting without a password")
            return None

        logger.debug(f"Loaded database password from {self.password_env_var}")
        return password

    def validate_environment_variables(self) -> Dict[str, bool]:
        """
        Report which credential environment variables are set.

        Returns:
            Dictionary indicating which environment variables are set
        """
        results = {}
        for var in self.get_required_environment_variables():
            is_set = bool(os.getenv(var))
            results[var] = is_set

            # Log without exposing values
            if is_set:
                logger.debug(f"Environment variable {var} is set")
            else:
                logger.warning(f"Environment variable {var} is not set")

        return results

    def get_required_environment_variables(self) -> List[str]:
        """Get the environment variables this handler reads."""
        return [self.password_env_var]
