"""Query Tree Builder

Converts a query description (the decoded JSON document) into a predicate
tree, validating its structure along the way. The builder performs no
evaluation and, apart from ``load_query_document``, no I/O.

Every validation error carries the JSON path of the offending value, e.g.
``query.operator_and[1].operator_crop.region.p_min.x``.
"""

import json
import logging
import math
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import ValidationError

from inspection.exceptions import (
    RQInputNotFoundError,
    RQMalformedQueryError,
    RQUnknownOperatorError,
)
from ..models import Box, CropFilter, CropNode, AndNode, OrNode, PredicateNode, count_nodes

logger = logging.getLogger(__name__)

OPERATOR_CROP = "operator_crop"
OPERATOR_AND = "operator_and"
OPERATOR_OR = "operator_or"
OPERATORS = (OPERATOR_CROP, OPERATOR_AND, OPERATOR_OR)

CROP_KEYS = frozenset(["region", "category", "one_of_groups", "proper"])


def load_query_document(query_path: Union[str, Path]) -> Dict[str, Any]:
    """Read and decode a query description file.

    Args:
        query_path: Path of the JSON query file

    Returns:
        Decoded JSON document

    Raises:
        RQInputNotFoundError: If the file does not exist
        RQMalformedQueryError: If the file is not valid JSON
    """
    path = Path(query_path)
    if not path.is_file():
        raise RQInputNotFoundError(f"Query file not found: {path}", {"path": str(path)})

    try:
        with open(path, 'r', encoding='utf-8') as f:
            document = json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise RQMalformedQueryError(f"Invalid JSON in query file: {e}", {"path": str(path)})

    logger.debug(f"Loaded query document from {path}")
    return document


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    try:
        return math.isfinite(float(value))
    except OverflowError:
        return False


def _is_integer(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


class QueryTreeBuilder:
    """Build predicate trees from query descriptions.

    The accepted shape is::

        {"query": <node>}
        <node> := {"operator_crop": {"region": {...}, "category"?, "one_of_groups"?, "proper"?}}
                | {"operator_and": [<node>, ...]}
                | {"operator_or": [<node>, ...]}
    """

    def build(self, description: Any) -> PredicateNode:
        """Build a predicate tree from a full query description.

        Raises:
            RQMalformedQueryError: If the description is structurally invalid
            RQUnknownOperatorError: If a node carries no recognized operator
        """
        if not isinstance(description, dict):
            raise RQMalformedQueryError(
                "Query description must be a JSON object", {"path": "$"}
            )
        if "query" not in description:
            raise RQMalformedQueryError(
                "Missing 'query' key in query description", {"path": "$"}
            )

        tree = self.build_node(description["query"], "query")
        logger.info(f"Built predicate tree with {count_nodes(tree)} nodes")
        logger.debug(f"Predicate tree: {tree.describe()}")
        return tree

    def build_node(self, node: Any, path: str = "query") -> PredicateNode:
        """Build a single operator node and its subtree."""
        if not isinstance(node, dict):
            raise RQMalformedQueryError("Operator node must be a JSON object", {"path": path})

        operators = [key for key in node if key in OPERATORS]
        if not operators:
            raise RQUnknownOperatorError(
                f"No recognized operator in node (keys: {sorted(node)}); "
                f"expected one of {list(OPERATORS)}",
                {"path": path}
            )
        if len(node) > 1:
            raise RQMalformedQueryError(
                f"Operator node must contain exactly one key, got {sorted(node)}",
                {"path": path}
            )

        operator = operators[0]
        body = node[operator]
        body_path = f"{path}.{operator}"

        if operator == OPERATOR_CROP:
            return CropNode(filter=self._build_crop_filter(body, body_path))

        operands = self._build_operands(body, body_path)
        if operator == OPERATOR_AND:
            return AndNode(operands=operands)
        return OrNode(operands=operands)

    def _build_operands(self, body: Any, path: str) -> List[PredicateNode]:
        if body is None:
            raise RQMalformedQueryError("Operand list is missing", {"path": path})
        if not isinstance(body, list):
            raise RQMalformedQueryError(
                f"Operand list must be a JSON array, got {type(body).__name__}", {"path": path}
            )
        if not body:
            raise RQMalformedQueryError("Operand list must not be empty", {"path": path})

        return [self.build_node(child, f"{path}[{index}]") for index, child in enumerate(body)]

    def _build_crop_filter(self, body: Any, path: str) -> CropFilter:
        if not isinstance(body, dict):
            raise RQMalformedQueryError("Crop parameters must be a JSON object", {"path": path})

        unknown = sorted(set(body) - CROP_KEYS)
        if unknown:
            raise RQMalformedQueryError(f"Unknown crop parameters: {unknown}", {"path": path})

        box = self._build_box(body.get("region"), f"{path}.region")
        category = self._optional_category(body.get("category"), f"{path}.category")
        groups = self._optional_groups(body.get("one_of_groups"), f"{path}.one_of_groups")

        proper = body.get("proper")
        if proper is None:
            proper = False
        elif not isinstance(proper, bool):
            raise RQMalformedQueryError("'proper' must be a boolean", {"path": f"{path}.proper"})

        return CropFilter(box=box, category=category, one_of_groups=groups, proper=proper)

    def _build_box(self, region: Any, path: str) -> Box:
        if not isinstance(region, dict):
            raise RQMalformedQueryError("Crop region is missing or not an object", {"path": path})

        min_x, min_y = self._corner(region, "p_min", path)
        max_x, max_y = self._corner(region, "p_max", path)

        try:
            return Box(min_x=min_x, min_y=min_y, max_x=max_x, max_y=max_y)
        except ValidationError as e:
            reason = e.errors()[0]["msg"].replace("Value error, ", "")
            raise RQMalformedQueryError(f"Invalid crop region: {reason}", {"path": path})

    def _corner(self, region: Dict[str, Any], key: str, path: str) -> Tuple[float, float]:
        corner = region.get(key)
        corner_path = f"{path}.{key}"
        if not isinstance(corner, dict):
            raise RQMalformedQueryError(f"Region corner '{key}' is missing", {"path": corner_path})

        coordinates = []
        for axis in ("x", "y"):
            value = corner.get(axis)
            if value is None:
                raise RQMalformedQueryError(
                    f"Coordinate '{axis}' is missing", {"path": f"{corner_path}.{axis}"}
                )
            if not _is_number(value):
                raise RQMalformedQueryError(
                    f"Coordinate '{axis}' must be a finite number, got {value!r}",
                    {"path": f"{corner_path}.{axis}"}
                )
            coordinates.append(float(value))
        return coordinates[0], coordinates[1]

    def _optional_category(self, value: Any, path: str) -> Optional[int]:
        if value is None:
            return None
        if not _is_integer(value):
            raise RQMalformedQueryError(f"'category' must be an integer, got {value!r}", {"path": path})
        return value

    def _optional_groups(self, value: Any, path: str) -> Optional[Tuple[int, ...]]:
        if value is None:
            return None
        if not isinstance(value, list):
            raise RQMalformedQueryError("'one_of_groups' must be a JSON array", {"path": path})
        for index, group_id in enumerate(value):
            if not _is_integer(group_id):
                raise RQMalformedQueryError(
                    f"Group id must be an integer, got {group_id!r}", {"path": f"{path}[{index}]"}
                )
        return tuple(value)


def build_predicate_tree(description: Any) -> PredicateNode:
    """Build a predicate tree with a default builder."""
    return QueryTreeBuilder().build(description)
