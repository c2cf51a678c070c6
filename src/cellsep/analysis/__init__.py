from .metrics import ChannelRecord, ImageRecord, MetricsAccumulator, aggregate, bin_index

__all__ = ['ChannelRecord', 'ImageRecord', 'MetricsAccumulator', 'aggregate', 'bin_index']
