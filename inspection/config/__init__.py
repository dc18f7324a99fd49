"""
Configuration management module for the Inspection Region Query system.

This module provides configuration loading and validation capabilities for
multi-environment deployments (development and production).
"""

from .config_loader import ConfigLoader
from .settings_models import StoreSettings

__all__ = ["ConfigLoader", "StoreSettings"]
