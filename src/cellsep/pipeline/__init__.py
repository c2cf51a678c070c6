"""
Cell Separation Metrics - Pipeline Module
=========================================

Main Components:
    - ChannelPipeline: Per-image orchestration of the three channels
    - ImageResult: Record plus intermediate planes of one image
    - BatchRunner: Image list to CSV report (cellsep.pipeline.batch_runner)

Usage:
    >>> from cellsep.pipeline import ChannelPipeline
    >>> result = ChannelPipeline().process(image, 'slide_01.tif')
"""

from .channel_pipeline import (
    CHANNEL_ORDER,
    ChannelPipeline,
    ChannelResult,
    ImageResult
)

__all__ = [
    'CHANNEL_ORDER',
    'ChannelPipeline',
    'ChannelResult',
    'ImageResult'
]
