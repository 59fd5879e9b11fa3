"""Two-pass scoring system for single-photo critique.

Scoring Passes:
    1. Technical - sharpness, focus, lighting, exposure, color balance,
       resolution, overall image quality, noise, artifacts. Computed from
       pixel statistics plus the optional EXIF exposure time.
    2. Composition - element arrangement, rule of thirds, leading lines,
       balance, symmetry, depth of field. Computed from detected object
       boxes and the frame size.

Every score is on a 1-10 scale. The overall score is the mean of the
two pass averages.
"""

from __future__ import annotations

from concurrent.futures import Executor
from pathlib import Path
from typing import Iterable

import numpy as np
from PIL import Image

# Re-export types for convenience
from photoscore.scoring.types import (
    AnalysisResult,
    BrightnessProfile,
    CompositionScores,
    Detection,
    InvalidBufferError,
    PixelBuffer,
    PixelStatistics,
    TechnicalScores,
)

# Import pass functions for direct use
from photoscore.scoring.composition import (
    compute_composition_scores,
    score_balance,
    score_depth_of_field,
    score_element_arrangement,
    score_leading_lines,
    score_rule_of_thirds,
    score_symmetry,
)
from photoscore.scoring.pixels import (
    brightness_profile,
    channel_means,
    compute_pixel_statistics,
    gradient_magnitude_mean,
    local_deviation_mean,
)
from photoscore.scoring.technical import (
    Jitter,
    compute_technical_scores,
    score_color_balance,
    score_exposure,
    score_lighting,
    score_resolution,
)

__all__ = [
    # Types
    "AnalysisResult",
    "BrightnessProfile",
    "CompositionScores",
    "Detection",
    "InvalidBufferError",
    "Jitter",
    "PixelBuffer",
    "PixelStatistics",
    "TechnicalScores",
    # Main scoring
    "aggregate",
    "analyze_buffer",
    "analyze_image",
    # Pass functions
    "compute_pixel_statistics",
    "compute_technical_scores",
    "compute_composition_scores",
    # Individual metrics (for direct access)
    "gradient_magnitude_mean",
    "brightness_profile",
    "channel_means",
    "local_deviation_mean",
    "score_lighting",
    "score_exposure",
    "score_color_balance",
    "score_resolution",
    "score_rule_of_thirds",
    "score_balance",
    "score_element_arrangement",
    "score_symmetry",
    "score_leading_lines",
    "score_depth_of_field",
]


def aggregate(
    technical: TechnicalScores,
    composition: CompositionScores,
    width: int = 0,
    height: int = 0,
    exposure_time: float | None = None,
    detections: Iterable[Detection] = (),
) -> AnalysisResult:
    """Combine both score records into one result.

    The records are carried as-is; the overall score is derived from
    them on access.
    """
    return AnalysisResult(
        technical=technical,
        composition=composition,
        width=width,
        height=height,
        exposure_time=exposure_time,
        detections=tuple(detections),
    )


def analyze_buffer(
    buffer: PixelBuffer,
    detections: Iterable[Detection] = (),
    exposure_time: float | None = None,
    rng: Jitter | None = None,
    executor: Executor | None = None,
) -> AnalysisResult:
    """Score a decoded buffer.

    Args:
        buffer: Decoded RGBA pixels.
        detections: Objects found by an external detector.
        exposure_time: Exposure time in seconds, if known.
        rng: Jitter source shared by both passes (default: fresh generator).
        executor: Optional executor for the pixel scans.

    Returns:
        AnalysisResult with both passes computed.
    """
    if rng is None:
        rng = np.random.default_rng()
    detections = tuple(detections)

    technical = compute_technical_scores(
        buffer, exposure_time=exposure_time, rng=rng, executor=executor
    )
    composition = compute_composition_scores(
        detections, buffer.width, buffer.height, rng=rng
    )
    return aggregate(
        technical,
        composition,
        width=buffer.width,
        height=buffer.height,
        exposure_time=exposure_time,
        detections=detections,
    )


def analyze_image(
    img: Image.Image | Path | str,
    detections: Iterable[Detection] = (),
    exposure_time: float | None = None,
    rng: Jitter | None = None,
) -> AnalysisResult:
    """Decode and score an image.

    Args:
        img: PIL Image or path to image.
        detections: Objects found by an external detector.
        exposure_time: Exposure time in seconds; read from EXIF if omitted.
        rng: Jitter source (default: fresh generator).

    Returns:
        AnalysisResult with both passes computed.
    """
    from photoscore.ingest import extract_exposure_time, load_buffer

    if exposure_time is None:
        exposure_time = extract_exposure_time(img)
    buffer = load_buffer(img)
    return analyze_buffer(buffer, detections, exposure_time=exposure_time, rng=rng)
