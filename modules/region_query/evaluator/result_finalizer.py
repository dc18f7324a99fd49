"""Result Finalizer

Turns an evaluated ResultSet into the output sequence: ascending y, then
ascending x, then (by default) ascending id for points sharing coordinates.
"""

from typing import List

from ..models import InspectionPoint, ResultSet


class ResultFinalizer:
    """Order result points for output."""

    def __init__(self, tie_break_by_id: bool = True):
        self.tie_break_by_id = tie_break_by_id

    def finalize(self, result_set: ResultSet) -> List[InspectionPoint]:
        # sorted() is stable, so without the id tie-break equal coordinates
        # keep the ResultSet's own order
        return sorted(result_set, key=lambda point: point.sort_key(self.tie_break_by_id))


def finalize(result_set: ResultSet) -> List[InspectionPoint]:
    return ResultFinalizer().finalize(result_set)
