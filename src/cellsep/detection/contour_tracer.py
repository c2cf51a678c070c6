"""
Contour Tracer Module
=====================

Traces object boundaries in binary channel masks with OpenCV and returns
them together with a validated containment hierarchy.

Classes:
--------
- ContourMode: Enum for contour retrieval modes
- ContourApproximation: Enum for contour approximation methods
- TraceResult: Raw boundaries and hierarchy for one mask
- ContourTracer: Runs cv2.findContours on a mask

Author: Cell Separation Metrics Team
Version: 1.0.0
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Tuple, Union

import cv2
import numpy as np

from .hierarchy_resolver import ContainmentHierarchy


# ============================================================
# ENUMS AND DATA CLASSES
# ============================================================

class ContourMode(Enum):
    """Contour retrieval modes."""
    EXTERNAL = cv2.RETR_EXTERNAL      # Only outermost contours
    LIST = cv2.RETR_LIST              # All contours, no hierarchy
    TREE = cv2.RETR_TREE              # Full hierarchy
    CCOMP = cv2.RETR_CCOMP            # Two-level hierarchy


class ContourApproximation(Enum):
    """Contour approximation methods."""
    NONE = cv2.CHAIN_APPROX_NONE      # All points
    SIMPLE = cv2.CHAIN_APPROX_SIMPLE  # Compress horizontal/vertical/diagonal
    TC89_L1 = cv2.CHAIN_APPROX_TC89_L1
    TC89_KCOS = cv2.CHAIN_APPROX_TC89_KCOS


@dataclass(frozen=True)
class TraceResult:
    """
    Boundaries traced from a single mask.

    Attributes
    ----------
    contours : List[np.ndarray]
        Raw boundary arrays, shape (N, 1, 2), int32
    hierarchy : ContainmentHierarchy
        Containment links for the same boundaries
    image_shape : Tuple[int, int]
        (height, width) of the source mask
    """
    contours: List[np.ndarray]
    hierarchy: ContainmentHierarchy
    image_shape: Tuple[int, int]

    @property
    def num_contours(self) -> int:
        return len(self.contours)


# ============================================================
# TRACER
# ============================================================

class ContourTracer:
    """
    Boundary tracer for binary masks.

    Attributes
    ----------
    mode : ContourMode
        Contour retrieval mode
    approximation : ContourApproximation
        Contour approximation method

    Examples
    --------
    >>> tracer = ContourTracer(mode='ccomp')
    >>> traced = tracer.trace(mask)
    >>> print(f"Found {traced.num_contours} boundaries")
    """

    def __init__(
        self,
        mode: Union[str, ContourMode] = ContourMode.CCOMP,
        approximation: Union[str, ContourApproximation] = ContourApproximation.SIMPLE
    ):
        if isinstance(mode, str):
            mode = ContourMode[mode.upper()]
        self.mode = mode

        if isinstance(approximation, str):
            approximation = ContourApproximation[approximation.upper()]
        self.approximation = approximation

    @staticmethod
    def prepare_mask(binary_mask: np.ndarray) -> np.ndarray:
        """
        Bring a mask into the single-channel uint8 form findContours needs.

        Boolean and 0/1 masks are scaled to 0/255; colour masks are
        converted to grayscale.
        """
        mask = np.asarray(binary_mask)
        if mask.ndim == 3:
            mask = cv2.cvtColor(mask.astype(np.uint8), cv2.COLOR_BGR2GRAY)
        if mask.dtype == bool:
            return mask.astype(np.uint8) * 255
        if mask.size and mask.max() <= 1:
            return (mask * 255).astype(np.uint8)
        return mask.astype(np.uint8)

    def trace(self, binary_mask: np.ndarray) -> TraceResult:
        """
        Trace all boundaries in a binary mask.

        Parameters
        ----------
        binary_mask : np.ndarray
            Mask image; any nonzero pixel is foreground

        Returns
        -------
        TraceResult
            Boundaries and their validated hierarchy
        """
        mask = self.prepare_mask(binary_mask)

        # findContours modified its input in OpenCV 3, keep the caller's copy intact
        contours, hierarchy = cv2.findContours(
            mask.copy(),
            self.mode.value,
            self.approximation.value
        )
        contours = list(contours)

        return TraceResult(
            contours=contours,
            hierarchy=ContainmentHierarchy.from_opencv(hierarchy, len(contours)),
            image_shape=mask.shape[:2]
        )
