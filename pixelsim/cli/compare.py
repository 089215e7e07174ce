import argparse
import logging
import sys
from typing import List, Tuple

import cv2
from dotenv import load_dotenv
from tqdm import tqdm

# Load environment variables first
load_dotenv()

from ..models.errors import SimilarityError
from ..pipeline.batch_scorer import default_workers, score_batch
from ..repositories.image_repository import ImageRepository
from ..services.difference_service import DifferenceService
from ..services.image_service import ImageService
from ..services.report_service import ReportService
from ..services.similarity_service import SimilarityService


def _parse_size(value: str) -> Tuple[int, int]:
    try:
        width, height = (int(part) for part in value.lower().split("x"))
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected WIDTHxHEIGHT, got '{value}'")
    if width <= 0 or height <= 0:
        raise argparse.ArgumentTypeError(f"size must be positive, got '{value}'")
    return width, height


def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--include-alpha", action="store_true", default=None,
                        help="count the alpha channel (default: PIXELSIM_INCLUDE_ALPHA or off)")
    common.add_argument("--lane-width", type=int, default=None,
                        help="vector kernel width in bytes (default: detected)")
    common.add_argument("--interpolation", default=None,
                        choices=["nearest", "linear", "cubic", "area", "lanczos"],
                        help="resize interpolation (default: PIXELSIM_RESIZE_INTERPOLATION or linear)")
    common.add_argument("--fixed-size", type=_parse_size, default=None, metavar="WxH",
                        help="resize both images to WxH before scoring")
    common.add_argument("-v", "--verbose", action="store_true", help="debug logging")

    parser = argparse.ArgumentParser(
        prog="pixelsim",
        description="Similarity score (0-100) from the mean absolute per-channel difference.",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    pair = sub.add_parser("pair", parents=[common], help="compare two image files")
    pair.add_argument("image_a")
    pair.add_argument("image_b")

    batch = sub.add_parser("batch", parents=[common], help="compare two directories, paired by sorted file order")
    batch.add_argument("dir_a")
    batch.add_argument("dir_b")
    batch.add_argument("--workers", type=int, default=None,
                       help="parallel workers (default: PIXELSIM_MAX_WORKERS or CPU count)")
    batch.add_argument("--recursive", action="store_true", help="descend into sub-directories")
    batch.add_argument("--no-progress", action="store_true", help="hide the progress bar")
    return parser


def _run_pair(args, similarity_service: SimilarityService, image_service: ImageService) -> int:
    image_a = image_service.load(args.image_a)
    image_b = image_service.load(args.image_b)
    if args.fixed_size:
        result = similarity_service.score_resized(image_a, image_b, *args.fixed_size)
    else:
        result = similarity_service.score_single(image_a, image_b)

    if result.note:
        print(f"Note: {result.note}")
    print(f"Image similarity score: {result.similarity:.2f}%")
    return 0


def _run_batch(args, similarity_service: SimilarityService, image_service: ImageService) -> int:
    paths_a, paths_b = image_service.pair_directories(args.dir_a, args.dir_b, recursive=args.recursive)
    workers = args.workers or default_workers()

    with tqdm(total=len(paths_a), desc="Comparing", unit="pair", disable=args.no_progress) as bar:
        report = score_batch(
            paths_a,
            paths_b,
            similarity_service=similarity_service,
            image_service=image_service,
            max_workers=workers,
            on_progress=lambda done, total, result: bar.update(1),
            fixed_size=args.fixed_size,
        )

    ReportService().log_report(report)
    print(report.summary())
    for note in report.notes:
        print(f"Note: {note}")
    if report.errors:
        print(f"\n{len(report.errors)} errors:")
        for error in report.errors:
            print(f"  {error}")
    return 0


def main(argv: List[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    # --- Centralized Logging Configuration ---
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s - %(name)-25s - %(levelname)-8s - %(message)s',
        datefmt='%H:%M:%S'
    )

    try:
        image_service = ImageService(ImageRepository(interpolation=args.interpolation))
        similarity_service = SimilarityService(
            args.include_alpha,
            image_service=image_service,
            difference_service=DifferenceService(lane_width=args.lane_width),
        )
        if args.command == "pair":
            return _run_pair(args, similarity_service, image_service)
        return _run_batch(args, similarity_service, image_service)
    except (SimilarityError, NotADirectoryError, ValueError, cv2.error) as err:
        print(f"Error: {err}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
