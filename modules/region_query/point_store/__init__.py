"""Point Store Implementations

The primitive interface required by query evaluation, plus an in-memory
store built from bulk-load files and a PostgreSQL store.
"""

from .point_store import PointStore
from .memory_store import InMemoryPointStore
from .postgres_store import PostgresPointStore
from .data_loader import load_inspection_points, DATA_FILES

__all__ = [
    'PointStore',
    'InMemoryPointStore',
    'PostgresPointStore',
    'load_inspection_points',
    'DATA_FILES',
]
