"""Result Writer

Writes ordered result points as ``"<x> <y>"`` lines. The file is written to a
temporary sibling and moved into place, so a failed write never leaves a
partial output file behind.
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import Iterable, Union

from inspection.exceptions import RQProcessingError
from ..models import InspectionPoint

logger = logging.getLogger(__name__)

COORDINATE_FORMATS = ("g", "repr")


def format_coordinate(value: float, coordinate_format: str = "g") -> str:
    """Render one coordinate.

    ``g`` gives six significant digits, matching C++ stream output; ``repr``
    gives the shortest string that round-trips the float.
    """
    if coordinate_format == "g":
        return f"{value:g}"
    if coordinate_format == "repr":
        return repr(float(value))
    raise ValueError(f"Unknown coordinate format: {coordinate_format!r}")


def format_point(point: InspectionPoint, coordinate_format: str = "g") -> str:
    return (f"{format_coordinate(point.x, coordinate_format)} "
            f"{format_coordinate(point.y, coordinate_format)}")


def write_points(points: Iterable[InspectionPoint], output_path: Union[str, Path],
                 coordinate_format: str = "g") -> int:
    """Write points to a text file, one ``"<x> <y>"`` line per point.

    Args:
        points: Points in output order
        output_path: Destination file
        coordinate_format: ``g`` or ``repr``

    Returns:
        Number of lines written

    Raises:
        RQProcessingError: If the file cannot be written
    """
    if coordinate_format not in COORDINATE_FORMATS:
        raise RQProcessingError(
            f"Unknown coordinate format: {coordinate_format!r}", {"stage": "write"}
        )

    destination = Path(output_path)
    directory = destination.parent if str(destination.parent) else Path(".")
    temp_path = None
    count = 0

    try:
        fd, temp_path = tempfile.mkstemp(prefix=f".{destination.name}.", suffix=".tmp",
                                         dir=str(directory))
        with os.fdopen(fd, 'w', encoding='utf-8', newline='\n') as f:
            for point in points:
                f.write(format_point(point, coordinate_format))
                f.write("\n")
                count += 1
        os.replace(temp_path, destination)
        temp_path = None
    except OSError as e:
        raise RQProcessingError(
            f"Cannot write output file {destination}: {e.strerror or e}",
            {"stage": "write", "path": str(destination)}
        )
    finally:
        if temp_path is not None and os.path.exists(temp_path):
            os.unlink(temp_path)

    logger.info(f"Output written to: {destination} with {count} points")
    return count
