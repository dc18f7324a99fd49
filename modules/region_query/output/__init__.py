"""Result output formatting and atomic file writing."""

from .result_writer import write_points, format_point, format_coordinate, COORDINATE_FORMATS

__all__ = ['write_points', 'format_point', 'format_coordinate', 'COORDINATE_FORMATS']
