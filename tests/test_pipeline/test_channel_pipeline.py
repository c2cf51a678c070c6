"""Tests for the per-image channel pipeline."""

import numpy as np
import pytest

from cellsep.core.config import ProcessingConfig
from cellsep.detection.contour_tracer import ContourMode
from cellsep.pipeline.channel_pipeline import CHANNEL_ORDER, ChannelPipeline
from cellsep.preprocessing.channel_enhancer import ChannelType


def _full(blank_mask):
    mask = blank_mask()
    mask[:] = 255
    return mask


def test_channel_order_and_modes():
    pipeline = ChannelPipeline()
    assert CHANNEL_ORDER == (ChannelType.GREEN, ChannelType.RED, ChannelType.WHITE)
    assert pipeline.tracers[ChannelType.GREEN].mode is ContourMode.EXTERNAL
    assert pipeline.tracers[ChannelType.RED].mode is ContourMode.CCOMP
    assert pipeline.tracers[ChannelType.WHITE].mode is ContourMode.CCOMP


def test_process_masks_builds_record(disk_mask, ring_mask, blank_mask):
    masks = {
        ChannelType.BLUE: _full(blank_mask),
        ChannelType.GREEN: disk_mask([(30, 30), (70, 70)]),
        ChannelType.RED: ring_mask,
    }

    result = ChannelPipeline().process_masks(masks, 'synthetic.png')
    record = result.record

    assert list(record.channels) == ['Green', 'Red', 'White']
    assert record['Green'].count == 2
    assert record['Red'].count == 1
    assert len(record.to_row()) == 1 + 3 * (3 + 11)
    assert record.to_row()[0] == 'synthetic.png'


def test_white_channel_is_intersection(disk_mask, blank_mask):
    masks = {
        ChannelType.BLUE: disk_mask([(30, 30), (70, 70)]),
        ChannelType.GREEN: disk_mask([(30, 30), (70, 70)]),
        ChannelType.RED: disk_mask([(30, 30)]),
    }

    result = ChannelPipeline().process_masks(masks, 'x')

    assert result.record['White'].count == 1
    white = result.masks[ChannelType.WHITE]
    assert white[30, 30] == 255
    assert white[70, 70] == 0


def test_ring_hole_lowers_red_area(ring_mask, disk_mask):
    filled = disk_mask([(30, 30)], radius=20)
    pipeline = ChannelPipeline()

    ring = pipeline.analyze_mask(ring_mask, ChannelType.RED)
    solid = pipeline.analyze_mask(filled, ChannelType.RED)

    assert ring.objects[0].net_area < solid.objects[0].net_area
    assert ring.record.diameter_sum < solid.record.diameter_sum


def test_tiny_blobs_are_dropped(blank_mask):
    mask = blank_mask()
    mask[10:13, 10:13] = 255
    mask[50:53, 50:53] = 255

    channel = ChannelPipeline().analyze_mask(mask, ChannelType.GREEN)

    assert channel.resolution.num_objects == 2
    assert channel.record.count == 0
    assert channel.num_rejected == 2
    assert channel.record.histogram == (0,) * 11


def test_empty_masks_give_zero_records(blank_mask):
    masks = {c: blank_mask() for c in (ChannelType.BLUE, ChannelType.GREEN, ChannelType.RED)}
    record = ChannelPipeline().process_masks(masks, 'empty').record
    for channel in record.channels.values():
        assert channel.count == 0
        assert channel.mean_diameter == 0.0


def test_missing_mask_is_an_error(blank_mask):
    with pytest.raises(ValueError):
        ChannelPipeline().process_masks({ChannelType.GREEN: blank_mask()}, 'x')


def test_process_image(sample_image):
    result = ChannelPipeline().process(sample_image, 'sample.png')

    assert result.record['Green'].count == 2
    assert result.record['Red'].count == 1
    assert result.record['White'].count == 1
    assert set(result.enhanced) == {ChannelType.BLUE, ChannelType.GREEN, ChannelType.RED}
    assert result.enhanced[ChannelType.GREEN].normalized.max() == 255


def test_small_bins_from_config(disk_mask, blank_mask):
    config = ProcessingConfig(bin_width=10, num_bins=3)
    masks = {
        ChannelType.BLUE: _full(blank_mask),
        ChannelType.GREEN: disk_mask([(30, 30)]),
        ChannelType.RED: blank_mask(),
    }
    record = ChannelPipeline(config).process_masks(masks, 'x').record
    assert record['Green'].histogram == (0, 0, 1)


def test_processing_is_repeatable(sample_image):
    pipeline = ChannelPipeline()
    first = pipeline.process(sample_image, 'a').record
    second = pipeline.process(sample_image, 'a').record
    assert first == second
