"""Parallel processing utilities for photoscore.

Uses ProcessPoolExecutor for CPU-bound full-image scoring. Each file is
analysed independently, so no state is shared between workers.
"""

from __future__ import annotations

import os
from concurrent.futures import ProcessPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator

from photoscore.advice import Prediction
from photoscore.scoring.types import AnalysisResult


@dataclass
class FileResult:
    """Result of analysing a single file."""

    path: str
    success: bool
    result: AnalysisResult | None = None
    error: str | None = None
    predictions: list[Prediction] = field(default_factory=list)


def analyze_single_file(path_str: str, seed: int | None = None) -> FileResult:
    """Analyse a single file (runs in worker process).

    This function is designed to run in a separate process, so it
    imports everything it needs locally to avoid pickling issues.

    Args:
        path_str: Absolute path to image file.
        seed: Seed for this file's jitter source (None = unseeded).

    Returns:
        FileResult with the analysis and sidecar predictions, or the
        error message.
    """
    import numpy as np

    from photoscore.ingest import (
        detections_sidecar,
        load_detections,
        load_predictions,
        predictions_sidecar,
    )
    from photoscore.scoring import analyze_image

    path = Path(path_str)

    try:
        detections = load_detections(detections_sidecar(path))
        predictions = load_predictions(predictions_sidecar(path))
        result = analyze_image(path, detections, rng=np.random.default_rng(seed))
        return FileResult(
            path=path_str, success=True, result=result, predictions=predictions
        )

    except Exception as e:
        return FileResult(path=path_str, success=False, error=str(e))


def analyze_files_parallel(
    files: list[Path],
    workers: int | None = None,
    seed: int | None = None,
) -> Iterator[FileResult]:
    """Analyse multiple files in parallel.

    Args:
        files: List of image paths to analyse.
        workers: Number of worker processes (default: CPU count).
        seed: Base seed; file i is analysed with ``seed + i``.

    Yields:
        FileResult for each processed file, in completion order.
    """
    if not files:
        return

    if workers is None:
        workers = os.cpu_count() or 4

    # Limit workers to reasonable bounds
    workers = max(1, min(workers, 16, len(files)))

    with ProcessPoolExecutor(max_workers=workers) as executor:
        futures = {
            executor.submit(
                analyze_single_file,
                str(path.resolve()),
                None if seed is None else seed + i,
            ): path
            for i, path in enumerate(files)
        }

        for future in as_completed(futures):
            yield future.result()


def get_default_workers() -> int:
    """Get default number of workers based on CPU count."""
    cpu_count = os.cpu_count() or 4
    # Use N-1 CPUs to leave headroom, minimum 1
    return max(1, cpu_count - 1)
