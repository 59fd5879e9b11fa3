"""Technical scoring pass: sharpness, lighting, exposure, color, noise."""

from __future__ import annotations

import logging
import math
from concurrent.futures import Executor
from typing import Protocol

import numpy as np

from photoscore.scoring.pixels import compute_pixel_statistics
from photoscore.scoring.types import (
    SCORE_MAX,
    SCORE_MIN,
    BrightnessProfile,
    PixelBuffer,
    PixelStatistics,
    TechnicalScores,
)

logger = logging.getLogger(__name__)

SHARPNESS_SCALE = 25.0
NOISE_SCALE = 50.0
COLOR_DEVIATION_SCALE = 30.0

# Exposure time tiers (seconds)
LONG_EXPOSURE = 0.1
SHORT_EXPOSURE = 0.001

# (megapixels, score), checked top-down with strict >
RESOLUTION_STEPS = ((20, 10.0), (12, 9.0), (8, 8.0), (5, 7.0), (2, 6.0))
RESOLUTION_FLOOR = 5.0


class Jitter(Protocol):
    """Source of bounded random offsets.

    ``numpy.random.Generator`` satisfies this; tests pass a seeded
    generator or a stub to pin exact outputs.
    """

    def uniform(self, low: float, high: float) -> float: ...


def clamp(value: float, low: float = SCORE_MIN, high: float = SCORE_MAX) -> float:
    """Clamp value into [low, high]."""
    return max(low, min(high, value))


def score_sharpness(gradient_mean: float) -> float:
    return clamp(gradient_mean / SHARPNESS_SCALE)


def score_focus(sharpness: float, rng: Jitter) -> float:
    """Approximate focus from sharpness plus a small offset (0-0.5)."""
    return clamp(sharpness * 0.9 + float(rng.uniform(0.0, 0.5)))


def score_lighting(profile: BrightnessProfile) -> float:
    """Reward mid-gray average brightness and balanced dark/bright areas."""
    balance = 1.0 - abs(profile.dark_ratio - profile.bright_ratio)
    brightness = 1.0 - abs(profile.mean - 128.0) / 128.0
    return clamp((balance + brightness) * 5.0)


def score_exposure(
    exposure_time: float | None,
    lighting: float,
    rng: Jitter,
) -> float:
    """Score exposure from the shutter time, or estimate it from lighting.

    Args:
        exposure_time: Exposure time in seconds, if known.
        lighting: Lighting score, used when no exposure time is known.
        rng: Jitter source for the estimate.
    """
    if exposure_time is not None and math.isfinite(exposure_time) and exposure_time > 0:
        if exposure_time > LONG_EXPOSURE:
            return 5.0
        if exposure_time < SHORT_EXPOSURE:
            return 6.0
        return 8.5
    return clamp(lighting * 0.8 + float(rng.uniform(0.0, 2.0)))


def score_color_balance(means: tuple[float, float, float]) -> float:
    """Penalise divergence of the channel means from neutral gray."""
    r, g, b = means
    deviation = abs(r - g) + abs(g - b) + abs(r - b)
    return clamp(10.0 - deviation / COLOR_DEVIATION_SCALE)


def score_resolution(width: int, height: int) -> float:
    megapixels = width * height / 1e6
    for threshold, score in RESOLUTION_STEPS:
        if megapixels > threshold:
            return score
    return RESOLUTION_FLOOR


def score_noise(local_deviation: float) -> float:
    return clamp(10.0 - local_deviation / NOISE_SCALE)


def score_artifacts(local_deviation: float) -> float:
    return clamp(9.0 - (local_deviation / NOISE_SCALE) * 0.5)


def _score_statistics(
    stats: PixelStatistics,
    width: int,
    height: int,
    exposure_time: float | None,
    rng: Jitter,
) -> TechnicalScores:
    if not stats.is_finite():
        raise ValueError(f"non-finite pixel statistics for {width}x{height} buffer")

    sharpness = score_sharpness(stats.gradient_mean)
    lighting = score_lighting(stats.brightness)
    color_balance = score_color_balance(stats.channel_means)

    return TechnicalScores(
        sharpness=sharpness,
        # focus and image_quality build on the clamped sharpness, not gradient / 25
        focus=score_focus(sharpness, rng),
        lighting=lighting,
        exposure=score_exposure(exposure_time, lighting, rng),
        color_balance=color_balance,
        resolution=score_resolution(width, height),
        image_quality=clamp((sharpness + lighting + color_balance) / 3.0),
        noise=score_noise(stats.local_deviation),
        artifacts=score_artifacts(stats.local_deviation),
    )


def compute_technical_scores(
    buffer: PixelBuffer,
    exposure_time: float | None = None,
    rng: Jitter | None = None,
    stats: PixelStatistics | None = None,
    executor: Executor | None = None,
) -> TechnicalScores:
    """Compute all technical scores for a buffer.

    Never returns a partial record: if the computation fails, the whole
    of ``TechnicalScores.FALLBACK`` is returned instead.

    Args:
        buffer: Decoded RGBA buffer.
        exposure_time: Exposure time in seconds from EXIF, if any.
        rng: Jitter source (default: fresh numpy generator).
        stats: Precomputed pixel statistics for this buffer.
        executor: Optional executor for the pixel scans.

    Returns:
        TechnicalScores with every field in [1, 10].
    """
    if rng is None:
        rng = np.random.default_rng()

    try:
        if stats is None:
            stats = compute_pixel_statistics(buffer, executor=executor)
        return _score_statistics(stats, buffer.width, buffer.height, exposure_time, rng)
    except (ArithmeticError, ValueError) as e:
        logger.warning("Technical analysis failed, using fallback scores: %s", e)
        return TechnicalScores.FALLBACK
