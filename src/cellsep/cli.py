"""
Command-line interface: measure every image listed in a data directory.

    cellsep /path/to/data/ --workers 4
"""

import argparse
import logging
import sys
from typing import List, Optional

from .core.config import load_config
from .core.logging import setup_logging
from .pipeline.batch_runner import BatchRunner
from .utils.error_handler import CellSepError


logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='cellsep',
        description='Per-channel object count, size and shape metrics for microscopy images'
    )

    parser.add_argument(
        'data_dir',
        type=str,
        help='Directory holding image_list.dat and the original/ images'
    )

    parser.add_argument(
        '-w', '--workers',
        type=int,
        default=None,
        help='Number of images processed concurrently'
    )

    parser.add_argument(
        '--no-debug-images',
        action='store_true',
        help='Only write the analyzed overlay, not the normalized/enhanced renders'
    )

    parser.add_argument(
        '--plot',
        action='store_true',
        help='Also write a size-distribution chart per image'
    )

    parser.add_argument(
        '--exact-pi',
        action='store_true',
        help='Use full-precision pi for equivalent diameters instead of 3.14'
    )

    parser.add_argument(
        '--env-file',
        type=str,
        default=None,
        help='Path to a .env file with CELLSEP_* settings'
    )

    parser.add_argument(
        '--log-level',
        type=str,
        default='INFO',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        help='Logging level'
    )

    parser.add_argument(
        '--log-file',
        type=str,
        default=None,
        help='Also write logs to this file'
    )

    parser.add_argument(
        '--quiet',
        action='store_true',
        help='Hide the progress bar'
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Command-line entry point. Returns the process exit code."""
    args = build_parser().parse_args(argv)
    setup_logging(level=args.log_level, log_file=args.log_file)

    try:
        config = load_config(
            env_file=args.env_file,
            workers=args.workers,
            debug_images=False if args.no_debug_images else None
        )
        if args.exact_pi:
            config = config.with_exact_pi()

        runner = BatchRunner(args.data_dir, config, plot=args.plot,
                             show_progress=not args.quiet)
        summary = runner.run()
    except CellSepError as e:
        logger.error(str(e))
        return 1

    for name, reason in summary.failed.items():
        logger.warning(f"Not in report: {name} ({reason})")
    return 0


if __name__ == '__main__':
    sys.exit(main())
