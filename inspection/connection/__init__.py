"""
Connection module for the Inspection Region Query system.

This module provides point store connectivity and credential handling.
"""

from .credential_handler import CredentialHandler
from .store_connector import StoreConnector

__all__ = [
    'CredentialHandler',
    'StoreConnector'
]
