"""Tests for channel metric aggregation."""

import math

import numpy as np
import pytest

from cellsep.analysis.metrics import (
    ChannelRecord,
    ImageRecord,
    MetricsAccumulator,
    aggregate,
    bin_index,
    bin_labels
)
from cellsep.detection.hierarchy_resolver import ContainmentHierarchy, LogicalObject, resolve
from cellsep.detection.object_filter import filter_objects


def _obj(shape, net_area, index=0):
    return LogicalObject(index=index, shape=shape, net_area=net_area, external_area=net_area)


def test_bin_index():
    assert bin_index(45, 40, 11) == 1
    assert bin_index(10000, 40, 11) == 10
    assert bin_index(0, 40, 11) == 0
    assert bin_index(39.999, 40, 11) == 0
    assert bin_index(40, 40, 11) == 1
    assert bin_index(400, 40, 11) == 10


def test_bin_labels():
    labels = bin_labels('Green', 40, 11)
    assert len(labels) == 11
    assert labels[0] == '0 <= Green_Contour_Area < 40'
    assert labels[9] == '360 <= Green_Contour_Area < 400'
    assert labels[10] == 'Green_Contour_Area >= 400'


def test_empty_input_gives_zero_record():
    record = aggregate([], bin_width=40, num_bins=11)
    assert record == ChannelRecord.empty(11)
    assert record.mean_diameter == 0.0
    assert record.mean_aspect_ratio == 0.0
    assert record.to_row() == [0, '0.000000', '0.000000'] + [0] * 11


def test_two_square_scenario(rect):
    big = rect(0, 0, 10, 10)
    small = rect(50, 50, 3, 3)
    hierarchy = ContainmentHierarchy.flat(2)

    resolved = resolve([big, small], hierarchy, min_area=1.0)
    assert [obj.index for obj in resolved.objects] == [0, 1]

    kept = filter_objects(resolved.objects, min_perimeter=20.0)
    assert [obj.index for obj in kept] == [0]

    record = aggregate(kept, bin_width=40, num_bins=11, pi=math.pi)
    assert record.count == 1
    assert record.diameter_sum == pytest.approx(2 * math.sqrt(100 / math.pi))
    assert record.aspect_ratio_sum == pytest.approx(1.0)
    assert record.histogram == (0, 0, 1, 0, 0, 0, 0, 0, 0, 0, 0)


def test_reference_pi_is_default(rect):
    record = aggregate([_obj(rect(0, 0, 10, 10), 100.0)])
    assert record.diameter_sum == pytest.approx(2 * math.sqrt(100 / 3.14))


def test_diameter_uses_net_area(rect):
    ring = LogicalObject(index=0, shape=rect(0, 0, 20, 20), net_area=300.0, external_area=400.0)
    record = aggregate([ring], pi=math.pi)
    assert record.diameter_sum == pytest.approx(2 * math.sqrt(300 / math.pi))
    assert record.histogram[7] == 1


def test_overflow_goes_to_last_bin(rect):
    record = aggregate([_obj(rect(0, 0, 100, 100), 10000.0)], bin_width=40, num_bins=11)
    assert record.histogram[-1] == 1
    assert sum(record.histogram) == record.count


def test_aspect_ratio_within_unit_interval(rect):
    shapes = [rect(0, 0, 40, 5), rect(0, 0, 5, 40), rect(0, 0, 12, 12)]
    objects = [_obj(s, 200.0, i) for i, s in enumerate(shapes)]
    for obj in objects:
        ratio = aggregate([obj]).aspect_ratio_sum
        assert 0.0 <= ratio <= 1.0
    assert aggregate(objects[:2]).aspect_ratio_sum == pytest.approx(0.25)


def test_accumulator_is_immutable(rect):
    start = MetricsAccumulator(bin_width=40, num_bins=11)
    after = start.add(_obj(rect(0, 0, 10, 10), 100.0))
    assert start.count == 0
    assert start.histogram == (0,) * 11
    assert after.count == 1


def test_aggregation_is_deterministic(rect):
    objects = [_obj(rect(0, 0, 10, 10), 100.0, 0), _obj(rect(0, 0, 30, 7), 210.0, 1)]
    assert aggregate(objects) == aggregate(objects)


def test_means_and_row_of_sums():
    record = ChannelRecord(count=2, diameter_sum=10.0, aspect_ratio_sum=1.5,
                           histogram=(1, 1, 0))
    assert record.mean_diameter == pytest.approx(5.0)
    assert record.mean_aspect_ratio == pytest.approx(0.75)
    assert record.to_row() == [2, '10.000000', '1.500000', 1, 1, 0]


def test_image_record_row_in_channel_order():
    green = ChannelRecord(2, 8.0, 1.6, (1, 1))
    red = ChannelRecord.empty(2)
    record = ImageRecord('img.tif', {'Green': green, 'Red': red})
    assert record.to_row() == ['img.tif', 2, '8.000000', '1.600000', 1, 1,
                               0, '0.000000', '0.000000', 0, 0]
    assert record['Green'] is green
