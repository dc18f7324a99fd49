"""Inspection Processing Modules

This package contains the processing modules built on the inspection framework.
Each module implements the ModuleProcessor interface.
"""
