"""Tests for the degenerate / small object filter."""

import numpy as np

from cellsep.detection.hierarchy_resolver import LogicalObject
from cellsep.detection.object_filter import accepts, filter_objects


def _obj(points, index=0):
    points = np.asarray(points, dtype=np.float64)
    return LogicalObject(index=index, shape=points, net_area=100.0, external_area=100.0)


def test_four_points_rejected_regardless_of_perimeter(rect):
    huge_square = rect(0, 0, 1000, 1000, per_side=1)
    assert not accepts(_obj(huge_square), min_perimeter=20.0)


def test_perimeter_boundary_is_inclusive():
    exactly_20 = [[0, 0], [3, 0], [5, 0], [5, 5], [0, 5]]
    assert accepts(_obj(exactly_20), min_perimeter=20.0)


def test_perimeter_just_below_threshold_rejected():
    just_below = [[0, 0], [2, 0], [4.9995, 0], [4.9995, 5], [0, 5]]
    assert not accepts(_obj(just_below), min_perimeter=20.0)


def test_filter_preserves_order(rect):
    objects = [
        _obj(rect(0, 0, 10, 10), index=0),
        _obj(rect(0, 0, 3, 3), index=1),
        _obj(rect(0, 0, 8, 8), index=2),
        _obj(rect(0, 0, 50, 50, per_side=1), index=3),
    ]
    kept = filter_objects(objects, min_perimeter=20.0)
    assert [obj.index for obj in kept] == [0, 2]


def test_filter_of_nothing_is_empty():
    assert filter_objects([], min_perimeter=20.0) == []


def test_shortfall_below_float32_resolution_rejected():
    side = 5 - 1e-9
    shape = [[0, 0], [side / 2, 0], [side, 0], [side, side], [0, side]]
    assert not accepts(_obj(shape), min_perimeter=20.0)
