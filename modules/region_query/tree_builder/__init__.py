"""Query Tree Builder

Structural validation and translation of JSON query descriptions into
predicate trees.
"""

from .query_tree_builder import (
    QueryTreeBuilder,
    build_predicate_tree,
    load_query_document,
    OPERATOR_CROP,
    OPERATOR_AND,
    OPERATOR_OR,
)

__all__ = [
    'QueryTreeBuilder',
    'build_predicate_tree',
    'load_query_document',
    'OPERATOR_CROP',
    'OPERATOR_AND',
    'OPERATOR_OR',
]
