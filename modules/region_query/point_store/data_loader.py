"""Bulk Loader for Inspection Point Files

Reads the three parallel text files describing an inspection data set. Line
``i`` of each file describes the same point:

- ``points.txt``: ``x y`` coordinates
- ``categories.txt``: integer category
- ``groups.txt``: integer group id

Blank lines are skipped; point ids are the 1-based positions of the
remaining lines.
"""

import logging
from pathlib import Path
from typing import List, Union

import pandas as pd
from pydantic import ValidationError

from inspection.exceptions import RQInputNotFoundError, RQValidationError
from inspection.utils import log_performance
from ..models import InspectionPoint

logger = logging.getLogger(__name__)

POINTS_FILE = "points.txt"
CATEGORIES_FILE = "categories.txt"
GROUPS_FILE = "groups.txt"
DATA_FILES = (POINTS_FILE, CATEGORIES_FILE, GROUPS_FILE)


def _read_whitespace_table(path: Path, names: List[str], dtype: str) -> pd.DataFrame:
    """Read a whitespace-separated file without a header into a typed frame."""
    if not path.is_file():
        raise RQInputNotFoundError(f"Required data file not found: {path}", {"path": str(path)})

    try:
        frame = pd.read_csv(
            path,
            sep=r"\s+",
            header=None,
            names=names,
            index_col=False,
            skip_blank_lines=True,
            dtype=dtype,
        )
    except pd.errors.EmptyDataError:
        return pd.DataFrame({name: pd.Series(dtype=dtype) for name in names})
    except (ValueError, pd.errors.ParserError) as e:
        raise RQValidationError(f"Unparseable values in {path.name}: {e}", {"path": str(path)})

    if frame.isna().any().any():
        first_bad = int(frame.index[frame.isna().any(axis=1)][0]) + 1
        raise RQValidationError(
            f"Missing values in {path.name} at record {first_bad}",
            {"path": str(path), "record": first_bad}
        )

    logger.info(f"Read {len(frame)} records from {path}")
    return frame


@log_performance
def load_inspection_points(data_directory: Union[str, Path]) -> List[InspectionPoint]:
    """Load inspection points from a bulk-load data directory.

    Args:
        data_directory: Directory containing points.txt, categories.txt and groups.txt

    Returns:
        Points with ids assigned from their 1-based record position

    Raises:
        RQInputNotFoundError: If the directory or one of the files is missing
        RQValidationError: If the files disagree in length or hold invalid values
    """
    directory = Path(data_directory)
    if not directory.is_dir():
        raise RQInputNotFoundError(
            f"Data directory does not exist: {directory}", {"path": str(directory)}
        )

    coordinates = _read_whitespace_table(directory / POINTS_FILE, ["x", "y"], "float64")
    categories = _read_whitespace_table(directory / CATEGORIES_FILE, ["category"], "int64")
    groups = _read_whitespace_table(directory / GROUPS_FILE, ["group_id"], "int64")

    counts = {
        POINTS_FILE: len(coordinates),
        CATEGORIES_FILE: len(categories),
        GROUPS_FILE: len(groups),
    }
    if len(set(counts.values())) != 1:
        raise RQValidationError("Data files have different numbers of records", counts)

    try:
        points = [
            InspectionPoint(id=index, group_id=int(group_id), x=float(x), y=float(y),
                            category=int(category))
            for index, (x, y, category, group_id) in enumerate(
                zip(coordinates["x"], coordinates["y"], categories["category"], groups["group_id"]),
                start=1
            )
        ]
    except ValidationError as e:
        raise RQValidationError(f"Invalid point record: {e.errors()[0]['msg']}",
                                {"path": str(directory / POINTS_FILE)})

    logger.info(f"Loaded {len(points)} inspection points from {directory}")
    return points
