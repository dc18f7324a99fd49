"""Query Evaluator

Recursively evaluates a predicate tree against a point store.

- Crop leaves call the store's range scan; with ``proper`` set, every group
  seen among the matches must lie entirely inside the box, judged over the
  group's full membership, or all of its points are dropped.
- AND nodes intersect their operands' results by point id and stop as soon
  as the running intersection is empty.
- OR nodes union their operands' results by point id.

Store errors propagate unchanged; nothing is retried and no partial result is
ever returned.
"""

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from typing import List, Sequence

from inspection.exceptions import RQUnknownOperatorError
from .evaluation_models import EvaluationMetrics
from ..models import AndNode, CropFilter, CropNode, OrNode, PredicateNode, ResultSet
from ..point_store import PointStore

logger = logging.getLogger(__name__)


class QueryEvaluator:
    """Evaluate predicate trees against a point store.

    With ``parallel_workers`` above 1 the operands of each AND/OR node are
    evaluated concurrently, with at most ``parallel_workers`` pool threads alive
    across the whole tree; the result is the same as sequential evaluation.
    A single evaluator runs one query at a time.
    """

    def __init__(self, store: PointStore, parallel_workers: int = 1):
        """Initialize the evaluator.

        Args:
            store: Point store answering range and containment primitives
            parallel_workers: Upper bound on worker threads for sibling operands
        """
        self.store = store
        self.parallel_workers = max(1, parallel_workers)
        self.metrics = EvaluationMetrics()
        self._metrics_lock = threading.Lock()
        self._worker_slots = threading.BoundedSemaphore(self.parallel_workers)

    def evaluate(self, node: PredicateNode) -> ResultSet:
        """Evaluate a predicate tree.

        Args:
            node: Root of the predicate tree

        Returns:
            ResultSet of matching points, unique by id

        Raises:
            RQStoreUnavailableError: If the store cannot be reached
            RQStoreError: If the store fails to answer a primitive
            RQUnknownOperatorError: If the tree contains an unrecognized node
        """
        self.metrics = EvaluationMetrics()
        start_time = time.time()

        result = self._evaluate_node(node)

        self.metrics.evaluation_time = time.time() - start_time
        logger.info(f"Evaluation produced {len(result)} points: {self.metrics.get_summary()}")
        return result

    def _count(self, counter: str, amount: int = 1) -> None:
        with self._metrics_lock:
            setattr(self.metrics, counter, getattr(self.metrics, counter) + amount)

    def _evaluate_node(self, node: PredicateNode) -> ResultSet:
        self._count("nodes_evaluated")

        if isinstance(node, CropNode):
            return self._evaluate_crop(node.filter)
        if isinstance(node, AndNode):
            return self._evaluate_and(node.operands)
        if isinstance(node, OrNode):
            return self._evaluate_or(node.operands)

        raise RQUnknownOperatorError(
            f"Cannot evaluate predicate node of type {type(node).__name__}"
        )

    def _evaluate_crop(self, crop_filter: CropFilter) -> ResultSet:
        self._count("crop_leaves_evaluated")

        raw_matches = self.store.range_scan(
            crop_filter.box, crop_filter.category, crop_filter.group_restriction()
        )
        self._count("store_calls")
        self._count("points_scanned", len(raw_matches))
        matches = ResultSet(raw_matches)

        if not crop_filter.proper or not matches:
            return matches

        candidates = matches.group_ids()
        contained = self.store.fully_contained_groups(crop_filter.box, candidates)
        self._count("store_calls")

        rejected = candidates - contained
        if rejected:
            self._count("groups_rejected", len(rejected))
            logger.debug(f"Proper crop {crop_filter.box} rejected groups {sorted(rejected)}")

        return matches.restrict_to_groups(contained)

    def _evaluate_and(self, operands: Sequence[PredicateNode]) -> ResultSet:
        if len(operands) == 1:
            return self._evaluate_node(operands[0])

        if self.parallel_workers > 1:
            results = self._evaluate_concurrently(operands)
            return results[0].intersection(*results[1:])

        result = self._evaluate_node(operands[0])
        for remaining, operand in enumerate(operands[1:], start=1):
            if not result:
                self._count("short_circuited_nodes")
                logger.debug(f"AND short-circuited with {len(operands) - remaining} operands unevaluated")
                return ResultSet.empty()
            result = result.intersection(self._evaluate_node(operand))
        return result

    def _evaluate_or(self, operands: Sequence[PredicateNode]) -> ResultSet:
        if self.parallel_workers > 1 and len(operands) > 1:
            results = self._evaluate_concurrently(operands)
        else:
            results = [self._evaluate_node(operand) for operand in operands]
        return results[0].union(*results[1:])

    def _acquire_workers(self, wanted: int) -> int:
        acquired = 0
        while acquired < wanted and self._worker_slots.acquire(blocking=False):
            acquired += 1
        return acquired

    def _evaluate_concurrently(self, operands: Sequence[PredicateNode]) -> List[ResultSet]:
        # Pool threads across all nested nodes never exceed parallel_workers;
        # a node that gets no worker evaluates its operands inline.
        workers = self._acquire_workers(len(operands))
        if not workers:
            return [self._evaluate_node(operand) for operand in operands]

        try:
            with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="rq-eval") as executor:
                return list(executor.map(self._evaluate_node, operands))
        finally:
            for _ in range(workers):
                self._worker_slots.release()
