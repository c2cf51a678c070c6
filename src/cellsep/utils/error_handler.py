# File: src/cellsep/utils/error_handler.py

"""
Error handling utilities shared by the processing pipeline
"""

import logging
import traceback
from functools import wraps

import cv2


logger = logging.getLogger(__name__)


class CellSepError(Exception):
    """Base exception for separation metric errors"""
    pass


class ImageLoadError(CellSepError):
    """Error loading or decoding images"""
    pass


class HierarchyError(CellSepError):
    """Contour hierarchy is malformed (bad shape, dangling link or cycle)"""
    pass


class ConfigurationError(CellSepError):
    """Invalid processing configuration"""
    pass


class ReportError(CellSepError):
    """Error writing the metrics report"""
    pass


def handle_errors(func):
    """Decorator translating low-level failures into CellSepError subclasses"""
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except CellSepError:
            raise
        except FileNotFoundError as e:
            logger.error(f"File not found: {e}")
            raise ImageLoadError(f"Could not find required file: {e}") from e
        except cv2.error as e:
            logger.error(f"OpenCV error: {e}")
            raise CellSepError(f"Image processing failed: {e}") from e
        except Exception as e:
            logger.error(f"Unexpected error: {e}\n{traceback.format_exc()}")
            raise CellSepError(f"An unexpected error occurred: {e}") from e

    return wrapper
