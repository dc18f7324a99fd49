"""Predicate Tree Data Models

A parsed region query is a closed tagged variant of three node types,
discriminated by their ``kind`` literal:

- ``CropNode``: leaf selecting points through a ``CropFilter``
- ``AndNode``: intersection of its operands' results
- ``OrNode``: union of its operands' results

Operand order follows the query description. It does not change results but
is kept so diagnostics and error paths stay deterministic.
"""

from typing import Annotated, Iterator, List, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from .inspection_point import CropFilter


class CropNode(BaseModel):
    """Leaf predicate selecting points inside a box."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["crop"] = "crop"
    filter: CropFilter

    def describe(self) -> str:
        return f"crop({self.filter.describe()})"


class AndNode(BaseModel):
    """Intersection of operand results by point id."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["and"] = "and"
    operands: List["PredicateNode"] = Field(..., min_length=1)

    def describe(self) -> str:
        return "and(" + ", ".join(op.describe() for op in self.operands) + ")"


class OrNode(BaseModel):
    """Union of operand results by point id."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["or"] = "or"
    operands: List["PredicateNode"] = Field(..., min_length=1)

    def describe(self) -> str:
        return "or(" + ", ".join(op.describe() for op in self.operands) + ")"


PredicateNode = Annotated[Union[CropNode, AndNode, OrNode], Field(discriminator="kind")]

AndNode.model_rebuild()
OrNode.model_rebuild()


def iter_nodes(node: PredicateNode) -> Iterator[PredicateNode]:
    """Yield every node of a tree in depth-first, operand order."""
    yield node
    if isinstance(node, (AndNode, OrNode)):
        for operand in node.operands:
            yield from iter_nodes(operand)


def iter_crop_filters(node: PredicateNode) -> Iterator[CropFilter]:
    for current in iter_nodes(node):
        if isinstance(current, CropNode):
            yield current.filter


def tree_depth(node: PredicateNode) -> int:
    if isinstance(node, CropNode):
        return 1
    return 1 + max(tree_depth(operand) for operand in node.operands)


def count_nodes(node: PredicateNode) -> int:
    return sum(1 for _ in iter_nodes(node))


__all__ = [
    "CropNode",
    "AndNode",
    "OrNode",
    "PredicateNode",
    "iter_nodes",
    "iter_crop_filters",
    "tree_depth",
    "count_nodes",
]
