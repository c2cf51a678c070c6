"""
Utilities Module
================

Common utilities for image I/O, report export, visualization and errors.

Modules:
--------
- image_utils: Image loading and saving
- export_utils: CSV metrics report
- visualization: Boundary overlays and size charts
- error_handler: Exception hierarchy and error decorator
"""

from .error_handler import (
    CellSepError,
    ImageLoadError,
    HierarchyError,
    ConfigurationError,
    ReportError,
    handle_errors
)

from .image_utils import load_image, save_image

__all__ = [
    'CellSepError',
    'ImageLoadError',
    'HierarchyError',
    'ConfigurationError',
    'ReportError',
    'handle_errors',
    'load_image',
    'save_image'
]
