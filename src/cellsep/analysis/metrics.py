"""
Separation Metrics Module
=========================

Aggregates filtered objects of one channel into a count, diameter and
aspect-ratio sums, and a fixed-width histogram of object areas.

Classes:
--------
- ChannelRecord: Immutable per-channel metrics
- ImageRecord: Image name plus its channel records
- MetricsAccumulator: Running sums folded over objects

Author: Cell Separation Metrics Team
Version: 1.0.0

Usage:
------
>>> record = aggregate(objects, bin_width=40, num_bins=11)
>>> record.count, record.histogram
"""

import math
from dataclasses import dataclass, replace
from typing import Dict, Iterable, List, Tuple

from ..core.config import REFERENCE_PI
from ..detection import geometry
from ..detection.hierarchy_resolver import LogicalObject


DEFAULT_BIN_WIDTH = 40
DEFAULT_NUM_BINS = 11


def bin_index(object_area: float, bin_width: float, num_bins: int) -> int:
    """Area bin of an object; the last bin is open-ended."""
    index = int(math.floor(object_area / bin_width))
    return max(0, min(index, num_bins - 1))


def bin_labels(channel: str, bin_width: float, num_bins: int) -> List[str]:
    """Column labels for the area bins of one channel."""
    labels = [
        f"{_fmt(i * bin_width)} <= {channel}_Contour_Area < {_fmt((i + 1) * bin_width)}"
        for i in range(num_bins - 1)
    ]
    labels.append(f"{channel}_Contour_Area >= {_fmt((num_bins - 1) * bin_width)}")
    return labels


def _fmt(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


# ============================================================
# DATA CLASSES
# ============================================================

@dataclass(frozen=True)
class ChannelRecord:
    """
    Metrics of one channel of one image.

    Attributes
    ----------
    count : int
        Number of measured objects
    diameter_sum : float
        Sum of equivalent circular diameters
    aspect_ratio_sum : float
        Sum of min/max side ratios of the rotated bounding rectangles
    histogram : Tuple[int, ...]
        Object counts per area bin
    """
    count: int
    diameter_sum: float
    aspect_ratio_sum: float
    histogram: Tuple[int, ...]

    @classmethod
    def empty(cls, num_bins: int = DEFAULT_NUM_BINS) -> 'ChannelRecord':
        return cls(count=0, diameter_sum=0.0, aspect_ratio_sum=0.0,
                   histogram=(0,) * num_bins)

    @property
    def mean_diameter(self) -> float:
        """Mean diameter, 0.0 when the channel has no objects."""
        return self.diameter_sum / self.count if self.count else 0.0

    @property
    def mean_aspect_ratio(self) -> float:
        """Mean aspect ratio, 0.0 when the channel has no objects."""
        return self.aspect_ratio_sum / self.count if self.count else 0.0

    def to_row(self) -> List:
        """count, diameter sum, aspect ratio sum, then the bin counts."""
        return [
            self.count,
            f"{self.diameter_sum:.6f}",
            f"{self.aspect_ratio_sum:.6f}",
            *self.histogram,
        ]


@dataclass(frozen=True)
class ImageRecord:
    """
    One report row: an image name followed by its channel records.

    ``channels`` maps channel labels to records in report column order.
    """
    image_name: str
    channels: Dict[str, ChannelRecord]

    def __getitem__(self, label: str) -> ChannelRecord:
        return self.channels[label]

    def to_row(self) -> List:
        row = [self.image_name]
        for record in self.channels.values():
            row.extend(record.to_row())
        return row


@dataclass(frozen=True)
class MetricsAccumulator:
    """Running channel sums. ``add`` returns a new accumulator."""
    bin_width: float = DEFAULT_BIN_WIDTH
    num_bins: int = DEFAULT_NUM_BINS
    pi: float = REFERENCE_PI
    count: int = 0
    diameter_sum: float = 0.0
    aspect_ratio_sum: float = 0.0
    histogram: Tuple[int, ...] = ()

    def __post_init__(self):
        if not self.histogram:
            object.__setattr__(self, 'histogram', (0,) * self.num_bins)

    def add(self, obj: LogicalObject) -> 'MetricsAccumulator':
        width, height = geometry.min_bounding_rotated_rect(obj.shape)
        index = bin_index(obj.net_area, self.bin_width, self.num_bins)
        histogram = list(self.histogram)
        histogram[index] += 1
        return replace(
            self,
            count=self.count + 1,
            diameter_sum=self.diameter_sum + geometry.equivalent_diameter(obj.net_area, self.pi),
            aspect_ratio_sum=self.aspect_ratio_sum + geometry.aspect_ratio(width, height),
            histogram=tuple(histogram),
        )

    def to_record(self) -> ChannelRecord:
        return ChannelRecord(
            count=self.count,
            diameter_sum=self.diameter_sum,
            aspect_ratio_sum=self.aspect_ratio_sum,
            histogram=self.histogram,
        )


def aggregate(
    objects: Iterable[LogicalObject],
    bin_width: float = DEFAULT_BIN_WIDTH,
    num_bins: int = DEFAULT_NUM_BINS,
    pi: float = REFERENCE_PI
) -> ChannelRecord:
    """
    Fold filtered objects into a ChannelRecord.

    Parameters
    ----------
    objects : iterable of LogicalObject
        Objects that passed the object filter
    bin_width : float
        Width of each area bin
    num_bins : int
        Number of bins, the last one catching everything above
    pi : float
        Value of pi used for equivalent diameters

    Returns
    -------
    ChannelRecord
        All-zero record when ``objects`` is empty
    """
    accumulator = MetricsAccumulator(bin_width=bin_width, num_bins=num_bins, pi=pi)
    for obj in objects:
        accumulator = accumulator.add(obj)
    return accumulator.to_record()
