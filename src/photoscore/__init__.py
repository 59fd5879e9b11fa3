"""photoscore: Photo quality and composition critic."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

__version__ = "0.1.0"

DEFAULT_TOP = 10


def _parse_extensions(ext_arg: str) -> frozenset[str]:
    """Parse comma-separated extensions into a frozenset."""
    exts = []
    for e in ext_arg.split(","):
        e = e.strip().lower()
        if not e.startswith("."):
            e = "." + e
        exts.append(e)
    return frozenset(exts)


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    from photoscore.ingest import IMAGE_EXTENSIONS

    parser = argparse.ArgumentParser(
        prog="photoscore",
        description="Score photos on technical quality and composition.",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable debug logging"
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # analyze command
    analyze_parser = subparsers.add_parser("analyze", help="Analyse a single photo")
    analyze_parser.add_argument("image", type=Path, help="Image file")
    analyze_parser.add_argument(
        "--detections",
        type=Path,
        default=None,
        help="JSON file with detected objects (default: IMAGE.detections.json)",
    )
    analyze_parser.add_argument(
        "--predictions",
        type=Path,
        default=None,
        help="JSON file with classifier output (default: IMAGE.predictions.json)",
    )
    analyze_parser.add_argument(
        "--exposure",
        type=float,
        default=None,
        help="Exposure time in seconds (default: read from EXIF)",
    )
    analyze_parser.add_argument(
        "--seed", type=int, default=None, help="Seed for reproducible scores"
    )
    analyze_parser.add_argument(
        "--json", action="store_true", help="Print the result as JSON"
    )

    # batch command
    batch_parser = subparsers.add_parser(
        "batch", help="Analyse every photo in a directory and rank them"
    )
    batch_parser.add_argument("directory", type=Path, help="Directory to scan")
    batch_parser.add_argument("--out", type=Path, default=None, help="Report file")
    batch_parser.add_argument(
        "--format",
        choices=["json", "list"],
        default="json",
        help="Report format: json or list (default: json)",
    )
    batch_parser.add_argument(
        "--workers", type=int, default=None, help="Worker processes"
    )
    batch_parser.add_argument(
        "--seed", type=int, default=None, help="Seed for reproducible scores"
    )
    batch_parser.add_argument(
        "--top",
        type=int,
        default=DEFAULT_TOP,
        help=f"Show top N images (default: {DEFAULT_TOP})",
    )
    batch_parser.add_argument(
        "--ext",
        default=",".join(sorted(IMAGE_EXTENSIONS)),
        help=f"File extensions, comma-separated (default: {','.join(sorted(IMAGE_EXTENSIONS))})",
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command == "analyze":
        return cmd_analyze(
            args.image,
            args.detections,
            args.predictions,
            args.exposure,
            args.seed,
            args.json,
        )
    if args.command == "batch":
        return cmd_batch(
            args.directory,
            args.out,
            args.format,
            args.workers,
            args.seed,
            args.top,
            args.ext,
        )

    parser.print_help()
    return 1


def cmd_analyze(
    image: Path,
    detections_path: Path | None,
    predictions_path: Path | None,
    exposure: float | None,
    seed: int | None,
    as_json: bool,
) -> int:
    """Analyse a single photo and print its scores."""
    import numpy as np
    from PIL import Image, UnidentifiedImageError

    from photoscore.advice import critique
    from photoscore.ingest import (
        detections_sidecar,
        load_detections,
        load_predictions,
        predictions_sidecar,
    )
    from photoscore.scoring import analyze_image
    from photoscore.ui import print_result

    if not image.is_file():
        print(f"Error: {image} is not a file", file=sys.stderr)
        return 1

    if detections_path is None:
        detections_path = detections_sidecar(image)
    if predictions_path is None:
        predictions_path = predictions_sidecar(image)

    try:
        detections = load_detections(detections_path)
        predictions = load_predictions(predictions_path)
        result = analyze_image(
            image, detections, exposure_time=exposure, rng=np.random.default_rng(seed)
        )
    except (
        OSError,
        UnidentifiedImageError,
        Image.DecompressionBombError,
        ValueError,
    ) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    notes = critique(result, predictions)

    if as_json:
        payload = result.as_dict()
        payload.update(notes)
        print(json.dumps(payload, indent=2))
        return 0

    print_result(result)
    print(f"Detections: {len(detections)}")
    print(f"Subject: {notes['content']['mainSubject']}")
    for heading, tips in notes["improvements"].items():
        print(f"\n{heading.title()}:")
        for tip in tips:
            print(f"  - {tip}")
    return 0


def cmd_batch(
    directory: Path,
    out: Path | None,
    fmt: str,
    workers: int | None,
    seed: int | None,
    top: int,
    ext: str,
) -> int:
    """Analyse and rank every photo in a directory."""
    from photoscore.advice import Prediction
    from photoscore.export import export_json, export_list, rank_results
    from photoscore.ingest import find_image_files
    from photoscore.parallel import analyze_files_parallel, get_default_workers
    from photoscore.scoring.types import AnalysisResult
    from photoscore.ui import create_progress

    if not directory.is_dir():
        print(f"Error: {directory} is not a directory", file=sys.stderr)
        return 1

    files = find_image_files(directory, _parse_extensions(ext))
    if not files:
        print(f"No images found in {directory}", file=sys.stderr)
        return 1

    results: list[tuple[str, AnalysisResult]] = []
    predictions: dict[str, list[Prediction]] = {}
    failed = 0

    with create_progress() as progress:
        task = progress.add_task("[cyan]Analysing images...", total=len(files))

        for file_result in analyze_files_parallel(
            files, workers=workers or get_default_workers(), seed=seed
        ):
            if file_result.success and file_result.result is not None:
                results.append((file_result.path, file_result.result))
                predictions[file_result.path] = file_result.predictions
            else:
                failed += 1
                print(
                    f"  Warning: failed to analyse {Path(file_result.path).name}: "
                    f"{file_result.error}"
                )
            progress.advance(task)

    ranked = rank_results(results)

    print(f"{'Rank':<5} {'Score':<7} {'Tech':<6} {'Comp':<6} {'File'}")
    print("-" * 60)
    for i, (path, result) in enumerate(ranked[:top], 1):
        print(
            f"{i:<5} {result.overall_score:>5.1f}  "
            f"{result.technical.mean():>5.2f}  {result.composition.mean():>5.2f}  "
            f"{Path(path).name}"
        )

    print()
    print(f"Top {min(top, len(ranked))} of {len(ranked)} analysed images")
    if failed:
        print(f"{failed} images could not be analysed")

    if out is not None:
        if fmt == "json":
            export_json(results, out, predictions)
        else:
            export_list(results, out, source_dir=directory)
        print(f"Wrote {fmt} report to {out}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
