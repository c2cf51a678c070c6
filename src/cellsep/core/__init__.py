"""
Core Module
===========

Configuration and logging setup.
"""

from .config import ProcessingConfig, load_config
from .logging import setup_logging

__all__ = ['ProcessingConfig', 'load_config', 'setup_logging']
