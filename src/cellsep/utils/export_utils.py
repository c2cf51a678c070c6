"""
Cell Separation Metrics - Export Utilities
==========================================

CSV report of per-image channel metrics. One header row, then one row per
successfully processed image:

    Image_Name, <count, diameter sum, aspect ratio sum, bins...> x 3

The sum columns keep their historical `_(mean)` header names; consumers
derive the means by dividing by the count (0 when the count is 0).

Author: Cell Separation Metrics Team
Version: 1.0.0
"""

import csv
import io
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Union

from ..analysis.metrics import ImageRecord, bin_labels
from .error_handler import ReportError


logger = logging.getLogger(__name__)

DEFAULT_CHANNEL_LABELS = ('Green', 'Red', 'White')


# ============================================================
# DATA CLASSES
# ============================================================

@dataclass
class ExportConfig:
    """Configuration for the CSV report."""
    bin_width: float = 40
    num_bins: int = 11
    channel_labels: Sequence[str] = DEFAULT_CHANNEL_LABELS
    csv_delimiter: str = ','


def report_header(config: Optional[ExportConfig] = None) -> List[str]:
    """
    Column names of the metrics report.

    Args:
        config: Export configuration

    Returns:
        Header cells, starting with Image_Name
    """
    config = config or ExportConfig()
    header = ['Image_Name']
    for label in config.channel_labels:
        header.extend([
            f"{label}_Contour_Count",
            f"{label}_Contour_Diameter_(mean)",
            f"{label}_Contour_Aspect_Ratio_(mean)",
        ])
        header.extend(bin_labels(label, config.bin_width, config.num_bins))
    return header


# ============================================================
# CSV EXPORT
# ============================================================

def export_records_csv(
    records: Iterable[ImageRecord],
    config: Optional[ExportConfig] = None
) -> str:
    """
    Export image records to CSV text.

    Args:
        records: Records in report order
        config: Export configuration

    Returns:
        CSV content as string
    """
    config = config or ExportConfig()

    output = io.StringIO()
    writer = csv.writer(output, delimiter=config.csv_delimiter, lineterminator='\n')
    writer.writerow(report_header(config))
    for record in records:
        writer.writerow(record.to_row())

    return output.getvalue()


class MetricsReportWriter:
    """
    Streams image records into a CSV report file.

    The header is written on open, so a run that fails on every image
    still leaves a well-formed empty report.

    Example:
        >>> with MetricsReportWriter('data/computed_metrics.csv') as writer:
        ...     writer.write(result.record)
    """

    def __init__(
        self,
        output_path: Union[str, Path],
        config: Optional[ExportConfig] = None
    ):
        self.output_path = Path(output_path)
        self.config = config or ExportConfig()
        self.rows_written = 0
        self._file = None
        self._writer = None

    def open(self) -> 'MetricsReportWriter':
        try:
            self.output_path.parent.mkdir(parents=True, exist_ok=True)
            self._file = open(self.output_path, 'w', newline='')
        except OSError as e:
            raise ReportError(f"Could not create the metrics file {self.output_path}: {e}") from e

        self._writer = csv.writer(
            self._file, delimiter=self.config.csv_delimiter, lineterminator='\n'
        )
        self._writer.writerow(report_header(self.config))
        return self

    def write(self, record: ImageRecord) -> None:
        """Append one image row."""
        if self._writer is None:
            raise ReportError("Report writer is not open")
        row = record.to_row()
        expected = len(report_header(self.config))
        if len(row) != expected:
            raise ReportError(
                f"Row for {record.image_name} has {len(row)} cells, header has {expected}"
            )
        self._writer.writerow(row)
        self._file.flush()
        self.rows_written += 1

    def close(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None
            self._writer = None
            logger.info(f"Wrote {self.rows_written} rows to {self.output_path}")

    def __enter__(self) -> 'MetricsReportWriter':
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
