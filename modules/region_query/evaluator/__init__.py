"""Query Evaluation Engine

Recursive predicate tree evaluation with intersection/union set algebra,
result ordering and evaluation metrics.
"""

from .evaluation_models import EvaluationMetrics, QueryProcessingConfig, QueryExecutionResult
from .query_evaluator import QueryEvaluator
from .result_finalizer import ResultFinalizer, finalize

__all__ = [
    'EvaluationMetrics',
    'QueryProcessingConfig',
    'QueryExecutionResult',
    'QueryEvaluator',
    'ResultFinalizer',
    'finalize',
]
