"""Shared test fixtures: synthetic polygons and channel masks."""

import cv2
import numpy as np
import pytest


def make_rect(x, y, w, h, per_side=2):
    """Axis-aligned rectangle with ``per_side`` points on each side (corners included)."""
    corners = [(x, y), (x + w, y), (x + w, y + h), (x, y + h)]
    points = []
    for i in range(4):
        start = np.array(corners[i], dtype=np.float64)
        end = np.array(corners[(i + 1) % 4], dtype=np.float64)
        for t in np.arange(per_side) / per_side:
            points.append(start + (end - start) * t)
    return np.array(points, dtype=np.float64)


@pytest.fixture
def rect():
    return make_rect


@pytest.fixture
def blank_mask():
    def _blank(size=100):
        return np.zeros((size, size), dtype=np.uint8)
    return _blank


@pytest.fixture
def disk_mask(blank_mask):
    """Mask with filled disks at the given centres."""
    def _disks(centres, radius=10, size=100):
        mask = blank_mask(size)
        for cx, cy in centres:
            cv2.circle(mask, (cx, cy), radius, 255, -1)
        return mask
    return _disks


@pytest.fixture
def ring_mask(blank_mask):
    """Disk of radius 20 at (30, 30) with a radius 8 hole in the middle."""
    mask = blank_mask()
    cv2.circle(mask, (30, 30), 20, 255, -1)
    cv2.circle(mask, (30, 30), 8, 0, -1)
    return mask


@pytest.fixture
def sample_image():
    """
    BGR image with one bright disk present in every plane and one disk
    present only in the green plane.
    """
    image = np.zeros((120, 120, 3), dtype=np.uint8)
    cv2.circle(image, (30, 30), 12, (200, 200, 200), -1)
    cv2.circle(image, (85, 85), 12, (0, 200, 0), -1)
    return image
