"""
Inspection Region Query Framework Core Package

This package contains the core infrastructure for the inspection region query
tools, providing configuration, logging, exceptions, store connectivity and
the shared processor interface used by query modules.
"""

from .interfaces import ModuleProcessor, ProcessingResult, ModuleStatus

__version__ = "1.0.0"
__all__ = ['ModuleProcessor', 'ProcessingResult', 'ModuleStatus']
