"""
Object filter: drops logical objects too degenerate or too small to
measure.
"""

from typing import Iterable, List

from . import geometry
from .hierarchy_resolver import LogicalObject


DEFAULT_MIN_PERIMETER = 20.0


def accepts(obj: LogicalObject, min_perimeter: float = DEFAULT_MIN_PERIMETER) -> bool:
    """True if the object has enough points and a long enough boundary."""
    if geometry.is_degenerate(obj.shape):
        return False
    return geometry.perimeter(obj.shape, closed=True) >= min_perimeter


def filter_objects(
    objects: Iterable[LogicalObject],
    min_perimeter: float = DEFAULT_MIN_PERIMETER
) -> List[LogicalObject]:
    """Keep accepted objects, preserving order."""
    return [obj for obj in objects if accepts(obj, min_perimeter)]
