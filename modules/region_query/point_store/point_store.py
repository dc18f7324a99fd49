"""Point Store Interface

The point store is the system of record for inspection points and groups.
Query evaluation only needs the primitives declared here; how a store answers
them (vectorized frames, SQL, ...) is internal to the implementation.
"""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Iterable, Iterator, List, Optional, Set

from ..models import Box, InspectionPoint


class PointStore(ABC):
    """Abstract base class for point stores.

    Implementations must be safe for concurrent reads, since sibling
    predicates may be evaluated from worker threads.
    """

    @abstractmethod
    def range_scan(self, box: Box, category: Optional[int] = None,
                   group_ids: Optional[Iterable[int]] = None) -> List[InspectionPoint]:
        """Points inside ``box`` (bounds inclusive) matching the attribute filters.

        Args:
            box: Spatial bounds
            category: Exact category to match, or None for any
            group_ids: Allowed group ids; None or empty means any group

        Returns:
            Matching points, unique by id, in ascending id order
        """

    @abstractmethod
    def points_by_group(self, group_id: int) -> List[InspectionPoint]:
        """All points belonging to a group."""

    @abstractmethod
    def group_ids(self) -> Set[int]:
        """Ids of every known group."""

    @abstractmethod
    def point_count(self) -> int:
        """Number of points held by the store."""

    def fully_contained_groups(self, box: Box,
                               candidate_groups: Optional[Iterable[int]] = None) -> Set[int]:
        """Groups whose every member lies inside ``box``.

        Containment is computed over full group membership, never over a
        category- or group-filtered subset. Groups without members are not
        reported.

        Args:
            box: Spatial bounds
            candidate_groups: Only examine these groups; None examines all

        Returns:
            Set of fully contained group ids
        """
        groups = self.group_ids() if candidate_groups is None else set(candidate_groups)
        contained = set()
        for group_id in sorted(groups):
            members = self.points_by_group(group_id)
            if members and all(box.contains_point(point) for point in members):
                contained.add(group_id)
        return contained

    @contextmanager
    def snapshot(self) -> Iterator["PointStore"]:
        """Scope under which one query observes one consistent view."""
        yield self
