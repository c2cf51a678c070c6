"""
Cell Separation Metrics - Visualization Utilities
=================================================

Overlays of measured boundaries on the normalised image, debug renders of
the normalised and binarised planes, and a size-distribution chart.

Author: Cell Separation Metrics Team
Version: 1.0.0
"""

import logging
from pathlib import Path
from typing import Dict, Iterable, Tuple, Union

import cv2
import numpy as np

from ..analysis.metrics import ImageRecord
from ..detection.hierarchy_resolver import LogicalObject
from ..detection.geometry import as_points
from ..preprocessing.channel_enhancer import COLOR_PLANES, ChannelType
from .image_utils import merge_planes, save_image


logger = logging.getLogger(__name__)


# ============================================================
# COLOR SCHEMES
# ============================================================

# Boundary colors (BGR)
BOUNDARY_COLORS = {
    ChannelType.GREEN: (0, 255, 255),
    ChannelType.WHITE: (255, 0, 255),
}

# Bar colors for the size chart (matplotlib names)
CHART_COLORS = {
    'Green': 'tab:green',
    'Red': 'tab:red',
    'White': 'tab:gray',
}


# ============================================================
# OVERLAYS
# ============================================================

def draw_boundaries(
    canvas: np.ndarray,
    objects: Iterable[LogicalObject],
    color: Tuple[int, int, int],
    thickness: int = 1
) -> np.ndarray:
    """Draw object boundaries on a BGR canvas in place and return it."""
    contours = [as_points(obj.shape).astype(np.int32) for obj in objects]
    if contours:
        cv2.drawContours(canvas, contours, -1, color, thickness, cv2.LINE_8)
    return canvas


def _merged(planes: Dict[ChannelType, np.ndarray]) -> np.ndarray:
    return merge_planes(*(planes[c] for c in COLOR_PLANES))


def render_normalized(result: 'ImageResult') -> np.ndarray:
    """Min-max normalised planes merged back into a BGR image."""
    return _merged({c: e.normalized for c, e in result.enhanced.items()})


def render_enhanced(result: 'ImageResult') -> np.ndarray:
    """Binary masks of the colour planes merged into a BGR image."""
    return _merged({c: result.masks[c] for c in COLOR_PLANES})


def render_analysis(result: 'ImageResult') -> np.ndarray:
    """
    Normalised image with measured GREEN and WHITE boundaries drawn on it.

    Falls back to the merged masks when the result was built from masks
    only.
    """
    if result.enhanced:
        canvas = render_normalized(result)
    else:
        canvas = render_enhanced(result)
    for channel, color in BOUNDARY_COLORS.items():
        draw_boundaries(canvas, result.channels[channel].objects, color)
    return canvas


def _suffixed(output_dir: Path, image_name: str, suffix: str) -> Path:
    name = Path(image_name)
    return output_dir / f"{name.stem}{suffix}{name.suffix}"


def save_result_images(
    result: 'ImageResult',
    output_dir: Union[str, Path],
    debug: bool = True
) -> Dict[str, Path]:
    """
    Write the result images for one processed image.

    With ``debug`` the normalised and binarised renders are written as
    ``<stem>_a_normalized`` and ``<stem>_b_enhanced`` and the overlay as
    ``<stem>_c_analyzed``; otherwise only the overlay is written, under the
    image's own name.

    Returns:
        Mapping of render name to the path written
    """
    output_dir = Path(output_dir)
    renders = {}
    if debug and result.enhanced:
        renders['normalized'] = (render_normalized(result),
                                 _suffixed(output_dir, result.image_name, '_a_normalized'))
        renders['enhanced'] = (render_enhanced(result),
                               _suffixed(output_dir, result.image_name, '_b_enhanced'))
    analyzed_path = (_suffixed(output_dir, result.image_name, '_c_analyzed')
                     if debug else output_dir / Path(result.image_name).name)
    renders['analyzed'] = (render_analysis(result), analyzed_path)

    written = {}
    for key, (image, path) in renders.items():
        if save_image(image, path):
            written[key] = path
        else:
            logger.warning(f"Failed to write {key} image for {result.image_name}")
    return written


# ============================================================
# CHARTS
# ============================================================

def plot_size_histograms(
    record: ImageRecord,
    bin_width: float = 40,
    figsize: Tuple[int, int] = (12, 4)
) -> 'matplotlib.figure.Figure':
    """
    Bar chart of the area histogram of every channel.

    Args:
        record: Image record to plot
        bin_width: Bin width used to build the histograms
        figsize: Figure size

    Returns:
        matplotlib Figure (not attached to pyplot)
    """
    from matplotlib.figure import Figure

    fig = Figure(figsize=figsize)
    axes = fig.subplots(1, len(record.channels), squeeze=False)[0]

    for ax, (label, channel) in zip(axes, record.channels.items()):
        num_bins = len(channel.histogram)
        edges = [f"{int(i * bin_width)}" for i in range(num_bins)]
        edges[-1] = f">={int((num_bins - 1) * bin_width)}"
        ax.bar(range(num_bins), channel.histogram,
               color=CHART_COLORS.get(label, 'steelblue'), edgecolor='white')
        ax.set_xticks(range(num_bins))
        ax.set_xticklabels(edges, rotation=45, fontsize=8)
        ax.set_title(f"{label} (n={channel.count})", fontweight='bold')
        ax.set_xlabel('Area (px)')
        ax.set_ylabel('Count')

    fig.suptitle(record.image_name, fontsize=12, fontweight='bold')
    fig.tight_layout()
    return fig


def save_size_histograms(
    record: ImageRecord,
    output_path: Union[str, Path],
    bin_width: float = 40
) -> Path:
    """Render the size chart of a record to an image file."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    fig = plot_size_histograms(record, bin_width=bin_width)
    fig.savefig(str(output_path), dpi=100)
    return output_path
