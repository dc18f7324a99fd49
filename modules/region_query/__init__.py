"""Region Query Module

Evaluates crop/and/or predicate trees over labeled inspection points and writes
the matching points ordered by (y, x).
"""

from .processor import RegionQueryProcessor

__all__ = ['RegionQueryProcessor']
