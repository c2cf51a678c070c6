"""
Cell Separation Metrics
=======================

Per-channel object counts, size distributions and shape regularity for
3-channel microscopy images, for downstream statistical analysis.

Modules:
--------
- detection: Boundary tracing, hierarchy resolution and object filtering
- analysis: Channel metric aggregation
- preprocessing: Channel normalisation and binarisation
- pipeline: Per-image orchestration and batch processing
- utils: Image I/O, report export, visualization and errors
"""

__version__ = "1.0.0"
__author__ = "Cell Separation Metrics Team"

from .analysis.metrics import ChannelRecord, ImageRecord, aggregate
from .core.config import ProcessingConfig, load_config
from .detection.hierarchy_resolver import (
    ContainmentHierarchy,
    HierarchyResolver,
    LogicalObject,
    ObjectRole,
    resolve
)
from .detection.object_filter import filter_objects
from .pipeline.channel_pipeline import ChannelPipeline

__all__ = [
    'ChannelRecord',
    'ImageRecord',
    'aggregate',
    'ProcessingConfig',
    'load_config',
    'ContainmentHierarchy',
    'HierarchyResolver',
    'LogicalObject',
    'ObjectRole',
    'resolve',
    'filter_objects',
    'ChannelPipeline'
]
