"""
Geometry Utilities
==================

Pure functions on traced boundary polygons. Polygons are numpy arrays of
shape (N, 2) or OpenCV's (N, 1, 2), holding integer or float points, and
are implicitly closed.

Author: Cell Separation Metrics Team
Version: 1.0.0
"""

import math
from typing import Tuple

import cv2
import numpy as np


# Below this many points a contour cannot be ellipse-fitted
MIN_SHAPE_POINTS = 5


def as_points(polygon) -> np.ndarray:
    """
    Normalise a polygon to an OpenCV-compatible (N, 1, 2) array.

    Integer input stays int32, everything else becomes float32, the two
    dtypes cv2 contour functions accept. Used for drawing; measurements go
    through ``_local_points`` to keep float64 precision.
    """
    points = np.asarray(polygon)
    if points.size == 0:
        return np.empty((0, 1, 2), dtype=np.int32)
    points = points.reshape(-1, 1, 2)
    if np.issubdtype(points.dtype, np.integer):
        return points.astype(np.int32, copy=False)
    return points.astype(np.float32, copy=False)


def _local_points(polygon) -> np.ndarray:
    """(N, 2) float64 points translated so their minimum corner is the origin."""
    points = np.asarray(polygon, dtype=np.float64).reshape(-1, 2)
    if len(points):
        points = points - points.min(axis=0)
    return points


def point_count(polygon) -> int:
    """Number of points in the polygon."""
    return int(np.asarray(polygon).size // 2)


def area(polygon) -> float:
    """Absolute shoelace area of the polygon. Never negative."""
    points = _local_points(polygon)
    if len(points) < 3:
        return 0.0
    x, y = points[:, 0], points[:, 1]
    return float(abs(np.dot(x, np.roll(y, -1)) - np.dot(y, np.roll(x, -1))) / 2.0)


def perimeter(polygon, closed: bool = True) -> float:
    """Arc length of the polygon, wrapping last-to-first when closed."""
    points = _local_points(polygon)
    if len(points) < 2:
        return 0.0
    if closed:
        points = np.vstack([points, points[:1]])
    edges = np.diff(points, axis=0)
    return float(np.hypot(edges[:, 0], edges[:, 1]).sum())


def min_bounding_rotated_rect(polygon) -> Tuple[float, float]:
    """
    Size of the minimum-area enclosing rectangle at any orientation.

    Returns (0.0, 0.0) for an empty polygon; callers check
    ``is_degenerate`` before deriving ratios from the result.
    """
    points = _local_points(polygon)
    if len(points) == 0:
        return (0.0, 0.0)
    _, (width, height), _ = cv2.minAreaRect(points.astype(np.float32))
    return (float(width), float(height))


def is_degenerate(polygon) -> bool:
    """True if the polygon has too few points for shape metrics."""
    return point_count(polygon) < MIN_SHAPE_POINTS


def aspect_ratio(width: float, height: float) -> float:
    """Shorter over longer side, folded into [0, 1]."""
    longer = max(width, height)
    if longer <= 0:
        return 0.0
    return min(width, height) / longer


def equivalent_diameter(object_area: float, pi: float = math.pi) -> float:
    """Diameter of the circle with the same area."""
    return 2.0 * math.sqrt(max(object_area, 0.0) / pi)
