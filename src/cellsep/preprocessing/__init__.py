"""
Preprocessing Module
====================

Contains tools for preparing image channels for boundary tracing.

Classes:
--------
- ChannelEnhancer: Normalise and binarise colour planes
"""

from .channel_enhancer import (
    ChannelEnhancer,
    ChannelType,
    EnhancedChannel,
    ThresholdMethod,
    combine_masks,
    split_planes
)

__all__ = [
    'ChannelEnhancer',
    'ChannelType',
    'EnhancedChannel',
    'ThresholdMethod',
    'combine_masks',
    'split_planes'
]
