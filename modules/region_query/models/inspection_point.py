"""Inspection Point and Crop Filter Data Models

This module defines the Pydantic data models for inspection points, axis-aligned
boxes and the attribute filters applied by crop predicates.
"""

from typing import FrozenSet, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class InspectionPoint(BaseModel):
    """A labeled 2D inspection point held by the point store.

    Identity is ``id``; coordinates, group and category are attributes.
    Instances are immutable for the duration of a query.

    Attributes:
        id: Unique point identifier (1-based line position at bulk load)
        group_id: Identifier of the group the point belongs to
        x: X coordinate
        y: Y coordinate
        category: Category label
    """

    model_config = ConfigDict(frozen=True)

    id: int = Field(..., description="Unique point identifier")
    group_id: int = Field(..., description="Group the point belongs to")
    x: float = Field(..., allow_inf_nan=False, description="X coordinate")
    y: float = Field(..., allow_inf_nan=False, description="Y coordinate")
    category: int = Field(..., description="Category label")

    def sort_key(self, tie_break_by_id: bool = True) -> Tuple:
        """Ordering key: ascending y, then x, then id."""
        if tie_break_by_id:
            return (self.y, self.x, self.id)
        return (self.y, self.x)


class Box(BaseModel):
    """Axis-aligned box with inclusive bounds on both ends."""

    model_config = ConfigDict(frozen=True)

    min_x: float = Field(..., allow_inf_nan=False)
    min_y: float = Field(..., allow_inf_nan=False)
    max_x: float = Field(..., allow_inf_nan=False)
    max_y: float = Field(..., allow_inf_nan=False)

    @model_validator(mode='after')
    def validate_bounds(self) -> "Box":
        """Reject inverted boxes rather than treating them as empty."""
        if self.min_x > self.max_x:
            raise ValueError(f"min.x ({self.min_x}) is greater than max.x ({self.max_x})")
        if self.min_y > self.max_y:
            raise ValueError(f"min.y ({self.min_y}) is greater than max.y ({self.max_y})")
        return self

    def contains(self, x: float, y: float) -> bool:
        """Check whether a coordinate lies inside the box (bounds inclusive)."""
        return self.min_x <= x <= self.max_x and self.min_y <= y <= self.max_y

    def contains_point(self, point: InspectionPoint) -> bool:
        return self.contains(point.x, point.y)

    def __str__(self) -> str:
        return f"[({self.min_x:g}, {self.min_y:g}) - ({self.max_x:g}, {self.max_y:g})]"


class CropFilter(BaseModel):
    """Spatial and attribute restrictions applied by a crop predicate.

    ``category`` of None means any category. ``one_of_groups`` of None means
    any group; an empty list is normalized to None. ``proper`` requires every
    member of a point's group to lie inside ``box``.
    """

    model_config = ConfigDict(frozen=True)

    box: Box
    category: Optional[int] = Field(None, description="Exact category to match, or None for any")
    one_of_groups: Optional[Tuple[int, ...]] = Field(None, description="Allowed group ids, or None for any")
    proper: bool = Field(False, description="Require full-group containment in the box")

    @field_validator('one_of_groups')
    @classmethod
    def normalize_groups(cls, v: Optional[Tuple[int, ...]]) -> Optional[Tuple[int, ...]]:
        """Drop duplicate group ids (keeping first occurrence); empty means unrestricted."""
        if not v:
            return None
        return tuple(dict.fromkeys(v))

    def group_restriction(self) -> Optional[FrozenSet[int]]:
        """Allowed group ids as a set, or None when unrestricted."""
        if self.one_of_groups is None:
            return None
        return frozenset(self.one_of_groups)

    def matches(self, point: InspectionPoint) -> bool:
        """Check the box, category and group restrictions (not proper containment)."""
        if not self.box.contains_point(point):
            return False
        if self.category is not None and point.category != self.category:
            return False
        groups = self.group_restriction()
        if groups is not None and point.group_id not in groups:
            return False
        return True

    def describe(self) -> str:
        parts = [f"box={self.box}"]
        if self.category is not None:
            parts.append(f"category={self.category}")
        if self.one_of_groups is not None:
            parts.append(f"groups={list(self.one_of_groups)}")
        if self.proper:
            parts.append("proper")
        return ", ".join(parts)
