"""In-Memory Point Store

Columnar point store backed by a pandas DataFrame. Range scans are vectorized
boolean masks; per-group bounding boxes are precomputed at construction so the
full-group containment check is a comparison over one row per group.
"""

import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Set, Union

import pandas as pd

from inspection.exceptions import RQValidationError
from .data_loader import load_inspection_points
from .point_store import PointStore
from ..models import Box, InspectionPoint

logger = logging.getLogger(__name__)

COLUMNS = ["id", "group_id", "x", "y", "category"]
COLUMN_TYPES = {"id": "int64", "group_id": "int64", "x": "float64", "y": "float64", "category": "int64"}


class InMemoryPointStore(PointStore):
    """Immutable point store holding every point in process memory."""

    def __init__(self, points: Iterable[InspectionPoint]):
        """Build the store from inspection points.

        Args:
            points: Points to hold; ids must be unique

        Raises:
            RQValidationError: If two points share an id
        """
        self._points: Dict[int, InspectionPoint] = {}
        for point in points:
            if point.id in self._points:
                raise RQValidationError(f"Duplicate point id: {point.id}", {"point_id": point.id})
            self._points[point.id] = point

        rows = [(p.id, p.group_id, p.x, p.y, p.category) for p in self._points.values()]
        self._frame = pd.DataFrame(rows, columns=COLUMNS).astype(COLUMN_TYPES)
        self._group_bounds = self._frame.groupby("group_id").agg(
            min_x=("x", "min"),
            max_x=("x", "max"),
            min_y=("y", "min"),
            max_y=("y", "max"),
        )

        logger.info(f"InMemoryPointStore initialized with {len(self._points)} points "
                    f"in {len(self._group_bounds)} groups")

    @classmethod
    def from_data_directory(cls, data_directory: Union[str, Path]) -> "InMemoryPointStore":
        """Build a store from bulk-load text files."""
        return cls(load_inspection_points(data_directory))

    def _points_for(self, ids: Iterable) -> List[InspectionPoint]:
        return [self._points[int(point_id)] for point_id in ids]

    def range_scan(self, box: Box, category: Optional[int] = None,
                   group_ids: Optional[Iterable[int]] = None) -> List[InspectionPoint]:
        frame = self._frame
        mask = frame["x"].between(box.min_x, box.max_x) & frame["y"].between(box.min_y, box.max_y)
        if category is not None:
            mask &= frame["category"] == category
        if group_ids:
            mask &= frame["group_id"].isin(list(group_ids))

        matches = self._points_for(frame.loc[mask, "id"].sort_values())
        logger.debug(f"Range scan {box} category={category} returned {len(matches)} points")
        return matches

    def points_by_group(self, group_id: int) -> List[InspectionPoint]:
        frame = self._frame
        return self._points_for(frame.loc[frame["group_id"] == group_id, "id"])

    def group_ids(self) -> Set[int]:
        return {int(group_id) for group_id in self._group_bounds.index}

    def point_count(self) -> int:
        return len(self._points)

    def fully_contained_groups(self, box: Box,
                               candidate_groups: Optional[Iterable[int]] = None) -> Set[int]:
        bounds = self._group_bounds
        if candidate_groups is not None:
            bounds = bounds[bounds.index.isin(list(candidate_groups))]

        mask = (
            (bounds["min_x"] >= box.min_x) & (bounds["max_x"] <= box.max_x)
            & (bounds["min_y"] >= box.min_y) & (bounds["max_y"] <= box.max_y)
        )
        return {int(group_id) for group_id in bounds.index[mask]}
