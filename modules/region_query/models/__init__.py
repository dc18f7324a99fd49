"""Region Query Data Models

This package contains Pydantic data models for inspection points, crop filters
and predicate trees, plus the ResultSet used during evaluation.
"""

from .inspection_point import InspectionPoint, Box, CropFilter
from .predicate_tree import (
    CropNode,
    AndNode,
    OrNode,
    PredicateNode,
    iter_nodes,
    iter_crop_filters,
    tree_depth,
    count_nodes,
)
from .result_set import ResultSet

__all__ = [
    'InspectionPoint',
    'Box',
    'CropFilter',
    'CropNode',
    'AndNode',
    'OrNode',
    'PredicateNode',
    'iter_nodes',
    'iter_crop_filters',
    'tree_depth',
    'count_nodes',
    'ResultSet',
]
