"""
Batch processing of an image list into a metrics report.

Layout of a data directory::

    <data_dir>/image_list.dat        one image file name per line
    <data_dir>/original/<name>       input images
    <data_dir>/result/               rendered overlays (written)
    <data_dir>/computed_metrics.csv  report (written)
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Sequence, Tuple, Union

from tqdm import tqdm

from ..core.config import ProcessingConfig
from ..utils.error_handler import CellSepError, ImageLoadError
from ..utils.export_utils import ExportConfig, MetricsReportWriter
from ..utils.image_utils import load_image
from ..utils.visualization import save_result_images, save_size_histograms
from .channel_pipeline import CHANNEL_ORDER, ChannelPipeline, ImageResult


logger = logging.getLogger(__name__)


@dataclass
class BatchSummary:
    """Outcome of a batch run."""
    report_path: Path
    processed: List[str] = field(default_factory=list)
    failed: Dict[str, str] = field(default_factory=dict)

    @property
    def num_processed(self) -> int:
        return len(self.processed)

    @property
    def num_failed(self) -> int:
        return len(self.failed)


def read_image_list(list_path: Union[str, Path]) -> List[str]:
    """Image names from a list file, one per line; blank lines are skipped."""
    list_path = Path(list_path)
    if not list_path.exists():
        raise ImageLoadError(f"Image list not found: {list_path}")
    with open(list_path, 'r') as f:
        return [line.strip() for line in f if line.strip()]


class BatchRunner:
    """
    Processes every image of a data directory and writes the report.

    A failing image is logged and left out of the report; the remaining
    images are still processed. Rows are written in image-list order, also
    when images are processed on several worker threads.

    Example:
        >>> runner = BatchRunner('data/', ProcessingConfig(workers=4))
        >>> summary = runner.run()
        >>> print(summary.num_processed, summary.failed)
    """

    def __init__(
        self,
        data_dir: Union[str, Path],
        config: Optional[ProcessingConfig] = None,
        plot: bool = False,
        show_progress: bool = True
    ):
        self.data_dir = Path(data_dir)
        self.config = (config or ProcessingConfig()).validate()
        self.pipeline = ChannelPipeline(self.config)
        self.plot = plot
        self.show_progress = show_progress

    @property
    def input_dir(self) -> Path:
        return self.data_dir / self.config.input_dir_name

    @property
    def result_dir(self) -> Path:
        return self.data_dir / self.config.result_dir_name

    @property
    def report_path(self) -> Path:
        return self.data_dir / self.config.report_name

    def process_one(self, image_name: str) -> ImageResult:
        """Load, measure and render a single image of the data directory."""
        image = load_image(self.input_dir / image_name)
        result = self.pipeline.process(image, image_name)

        save_result_images(result, self.result_dir, debug=self.config.debug_images)
        if self.plot:
            save_size_histograms(
                result.record,
                self.result_dir / f"{Path(image_name).stem}_d_sizes.png",
                bin_width=self.config.bin_width
            )
        return result

    def _safe_process(self, image_name: str) -> Tuple[str, Optional[ImageResult], Optional[str]]:
        try:
            return image_name, self.process_one(image_name), None
        except CellSepError as e:
            return image_name, None, str(e)

    def _results(self, image_names: Sequence[str]) -> Iterator[Tuple[str, Optional[ImageResult], Optional[str]]]:
        if self.config.workers == 1:
            for name in image_names:
                yield self._safe_process(name)
            return
        with ThreadPoolExecutor(max_workers=self.config.workers) as executor:
            # map() yields in submission order
            yield from executor.map(self._safe_process, image_names)

    def run(self, image_names: Optional[Sequence[str]] = None) -> BatchSummary:
        """
        Process the image list and write the report.

        Args:
            image_names: Images to process; defaults to the data directory's
                list file

        Returns:
            BatchSummary with processed and failed image names
        """
        if image_names is None:
            image_names = read_image_list(self.data_dir / self.config.list_name)

        summary = BatchSummary(report_path=self.report_path)
        export_config = ExportConfig(
            bin_width=self.config.bin_width,
            num_bins=self.config.num_bins,
            channel_labels=tuple(c.label for c in CHANNEL_ORDER)
        )

        logger.info(f"Processing {len(image_names)} images from {self.input_dir}")
        with MetricsReportWriter(self.report_path, export_config) as writer:
            results = self._results(image_names)
            for name, result, error in tqdm(results, total=len(image_names),
                                            disable=not self.show_progress):
                if result is None:
                    logger.error(f"Skipping {name}: {error}")
                    summary.failed[name] = error
                    continue
                writer.write(result.record)
                summary.processed.append(name)

        logger.info(
            f"Batch complete: {summary.num_processed} processed, "
            f"{summary.num_failed} failed"
        )
        return summary
