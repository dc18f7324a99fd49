"""Result Set

Intermediate evaluator output: a set of inspection points unique by id.
Intersection and union are computed on ids; the point records themselves
come from the point store and cannot disagree for the same id.
"""

from typing import Dict, FrozenSet, Iterable, Iterator, Set, Union

from .inspection_point import InspectionPoint


class ResultSet:
    """Set of inspection points keyed by point id."""

    __slots__ = ("_points",)

    def __init__(self, points: Iterable[InspectionPoint] = ()):
        self._points: Dict[int, InspectionPoint] = {}
        for point in points:
            self._points.setdefault(point.id, point)

    @classmethod
    def empty(cls) -> "ResultSet":
        return cls()

    def ids(self) -> FrozenSet[int]:
        return frozenset(self._points)

    def group_ids(self) -> Set[int]:
        """Groups represented among the points of this set."""
        return {point.group_id for point in self._points.values()}

    def points(self) -> Iterator[InspectionPoint]:
        return iter(self._points.values())

    def get(self, point_id: int) -> InspectionPoint:
        return self._points[point_id]

    def intersection(self, *others: "ResultSet") -> "ResultSet":
        """Points of this set whose ids appear in every other set."""
        if not others:
            return self
        # Probe from the smallest set
        ordered = sorted((self,) + others, key=len)
        smallest, rest = ordered[0], ordered[1:]
        return ResultSet(
            point for point in smallest.points()
            if all(point.id in other for other in rest)
        )

    def union(self, *others: "ResultSet") -> "ResultSet":
        """Points appearing in any set, one copy per id."""
        merged = ResultSet(self.points())
        for other in others:
            for point in other.points():
                merged._points.setdefault(point.id, point)
        return merged

    def restrict_to_groups(self, group_ids: Iterable[int]) -> "ResultSet":
        allowed = set(group_ids)
        return ResultSet(point for point in self.points() if point.group_id in allowed)

    def __contains__(self, item: Union[int, InspectionPoint]) -> bool:
        if isinstance(item, InspectionPoint):
            return item.id in self._points
        return item in self._points

    def __len__(self) -> int:
        return len(self._points)

    def __bool__(self) -> bool:
        return bool(self._points)

    def __iter__(self) -> Iterator[InspectionPoint]:
        return self.points()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ResultSet):
            return NotImplemented
        return self._points == other._points

    def __repr__(self) -> str:
        return f"ResultSet(ids={sorted(self._points)})"
