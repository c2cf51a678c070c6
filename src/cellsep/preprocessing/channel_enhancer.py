"""
Channel Enhancement Module
==========================

Splits a colour image into its planes, stretches each plane to the full
8-bit range and binarises it into a foreground mask.

Classes:
--------
- ChannelType: Colour planes plus the combined WHITE channel
- ThresholdMethod: Supported binarisation methods
- EnhancedChannel: Normalised plane and its binary mask
- ChannelEnhancer: Normalisation and thresholding per channel

Author: Cell Separation Metrics Team
Version: 1.0.0

Usage:
------
>>> enhancer = ChannelEnhancer(thresholds={'blue': 35, 'green': 15, 'red': 35})
>>> planes = enhancer.enhance_all(image)
>>> white = combine_masks(*(p.binary for p in planes.values()))
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Mapping, Optional, Union

import cv2
import numpy as np

from ..core.config import DEFAULT_THRESHOLDS


# ============================================================
# ENUMS AND DATA CLASSES
# ============================================================

class ChannelType(Enum):
    """Image channels; values are BGR plane indices."""
    BLUE = 0
    GREEN = 1
    RED = 2
    WHITE = -1     # Intersection of all three binarised planes

    @property
    def label(self) -> str:
        """Capitalised name used in report headers."""
        return self.name.capitalize()

    @property
    def is_plane(self) -> bool:
        return self.value >= 0


COLOR_PLANES = (ChannelType.BLUE, ChannelType.GREEN, ChannelType.RED)


class ThresholdMethod(Enum):
    """Supported thresholding methods."""
    BINARY = "binary"      # Fixed per-channel threshold
    OTSU = "otsu"          # Otsu's automatic thresholding


@dataclass(frozen=True)
class EnhancedChannel:
    """A normalised plane and the mask derived from it."""
    channel: ChannelType
    normalized: np.ndarray
    binary: np.ndarray
    threshold_value: float

    @property
    def foreground_fraction(self) -> float:
        if self.binary.size == 0:
            return 0.0
        return float(np.count_nonzero(self.binary)) / self.binary.size


# ============================================================
# CHANNEL HELPERS
# ============================================================

def split_planes(image: np.ndarray) -> Dict[ChannelType, np.ndarray]:
    """
    Split an image into its B, G and R planes.

    Grayscale images provide the same plane for every colour; a fourth
    (alpha) plane is ignored.
    """
    if image.ndim == 2:
        return {channel: image for channel in COLOR_PLANES}
    if image.ndim != 3 or image.shape[2] < 3:
        raise ValueError(f"Unsupported image shape: {image.shape}")
    planes = cv2.split(image)
    return {channel: planes[channel.value] for channel in COLOR_PLANES}


def combine_masks(*masks: np.ndarray) -> np.ndarray:
    """Pixelwise AND of binary masks."""
    if not masks:
        raise ValueError("At least one mask is required")
    combined = masks[0]
    for mask in masks[1:]:
        combined = cv2.bitwise_and(combined, mask)
    return combined


# ============================================================
# ENHANCER
# ============================================================

class ChannelEnhancer:
    """
    Normalise and binarise colour planes.

    Attributes
    ----------
    thresholds : dict
        Threshold per colour plane name ('blue', 'green', 'red'), applied
        to the min-max normalised plane
    threshold_method : ThresholdMethod
        Binarisation method
    """

    def __init__(
        self,
        thresholds: Optional[Mapping[str, int]] = None,
        threshold_method: Union[str, ThresholdMethod] = ThresholdMethod.BINARY
    ):
        self.thresholds = dict(DEFAULT_THRESHOLDS)
        if thresholds:
            self.thresholds.update(thresholds)

        if isinstance(threshold_method, str):
            threshold_method = ThresholdMethod(threshold_method.lower())
        self.threshold_method = threshold_method

    @staticmethod
    def normalize(plane: np.ndarray) -> np.ndarray:
        """Min-max stretch a plane of any depth to 8-bit 0-255."""
        return cv2.normalize(plane, None, 0, 255, cv2.NORM_MINMAX, cv2.CV_8UC1)

    def binarize(self, normalized: np.ndarray, channel: ChannelType):
        """
        Threshold a normalised plane.

        Returns
        -------
        tuple
            (binary_mask, threshold_value)
        """
        if self.threshold_method == ThresholdMethod.OTSU:
            thresh_val, binary = cv2.threshold(
                normalized, 0, 255,
                cv2.THRESH_BINARY + cv2.THRESH_OTSU
            )
        else:
            thresh_val, binary = cv2.threshold(
                normalized, self.thresholds[channel.name.lower()], 255,
                cv2.THRESH_BINARY
            )
        return binary, float(thresh_val)

    def enhance(self, plane: np.ndarray, channel: ChannelType) -> EnhancedChannel:
        """Normalise and binarise a single colour plane."""
        if not channel.is_plane:
            raise ValueError(f"{channel.name} is not a colour plane")
        normalized = self.normalize(plane)
        binary, thresh_val = self.binarize(normalized, channel)
        return EnhancedChannel(
            channel=channel,
            normalized=normalized,
            binary=binary,
            threshold_value=thresh_val
        )

    def enhance_all(self, image: np.ndarray) -> Dict[ChannelType, EnhancedChannel]:
        """Enhance the blue, green and red planes of an image."""
        planes = split_planes(image)
        return {channel: self.enhance(plane, channel) for channel, plane in planes.items()}
