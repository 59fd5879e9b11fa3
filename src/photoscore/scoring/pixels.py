"""Pixel statistics: full-buffer scans producing raw signals.

Each scan is a read-only pass over the same immutable buffer, so the
four can run in any order or concurrently. Results are unnormalised;
the technical pass maps them onto the 1-10 scale.
"""

from __future__ import annotations

from concurrent.futures import Executor

import numpy as np
from numpy.typing import NDArray
from scipy import ndimage  # type: ignore[import-untyped]

from photoscore.scoring.types import BrightnessProfile, PixelBuffer, PixelStatistics

LUMA_WEIGHTS = (0.299, 0.587, 0.114)
DARK_THRESHOLD = 50
BRIGHT_THRESHOLD = 200

# 8-neighbour sum, center excluded
_NEIGHBOUR_KERNEL = np.array([[1, 1, 1], [1, 0, 1], [1, 1, 1]], dtype=np.float64)


def _rgb(buffer: PixelBuffer) -> NDArray[np.float64]:
    return buffer.pixels[:, :, :3].astype(np.float64)


def _has_interior(buffer: PixelBuffer) -> bool:
    return buffer.width >= 3 and buffer.height >= 3


def gradient_magnitude_mean(buffer: PixelBuffer) -> float:
    """Mean luma gradient magnitude over interior pixels.

    Each interior pixel is differenced against its right and lower
    neighbours; the 1-pixel border is skipped rather than padded.

    Returns:
        Mean gradient magnitude, or nan if the buffer has no interior.
    """
    if not _has_interior(buffer):
        return float("nan")

    rgb = _rgb(buffer)
    luma = rgb @ np.array(LUMA_WEIGHTS)

    gray = luma[1:-1, 1:-1]
    gx = np.abs(gray - luma[1:-1, 2:])
    gy = np.abs(gray - luma[2:, 1:-1])
    return float(np.sqrt(gx**2 + gy**2).mean())


def brightness_profile(buffer: PixelBuffer) -> BrightnessProfile:
    """Mean brightness and the fractions of dark and bright pixels.

    Brightness is the plain mean of R, G and B. The dark/bright
    thresholds are absolute values on the 0-255 scale.
    """
    if buffer.width * buffer.height == 0:
        nan = float("nan")
        return BrightnessProfile(mean=nan, dark_ratio=nan, bright_ratio=nan)

    brightness = _rgb(buffer).mean(axis=2)
    return BrightnessProfile(
        mean=float(brightness.mean()),
        dark_ratio=float((brightness < DARK_THRESHOLD).mean()),
        bright_ratio=float((brightness > BRIGHT_THRESHOLD).mean()),
    )


def channel_means(buffer: PixelBuffer) -> tuple[float, float, float]:
    """Arithmetic mean of the R, G and B channels."""
    if buffer.width * buffer.height == 0:
        nan = float("nan")
        return (nan, nan, nan)

    means = _rgb(buffer).reshape(-1, 3).mean(axis=0)
    return (float(means[0]), float(means[1]), float(means[2]))


def local_deviation_mean(buffer: PixelBuffer) -> float:
    """Mean absolute deviation of each pixel from its 8 neighbours.

    Works on the per-pixel sum R+G+B. This picks up fine texture as
    well as sensor noise; the noise score is calibrated against
    exactly this signal.

    Returns:
        Mean deviation over interior pixels, or nan if there are none.
    """
    if not _has_interior(buffer):
        return float("nan")

    total = _rgb(buffer).sum(axis=2)
    neighbours = ndimage.convolve(total, _NEIGHBOUR_KERNEL, mode="constant")

    deviation = np.abs(total[1:-1, 1:-1] - neighbours[1:-1, 1:-1] / 8.0)
    return float(deviation.mean())


def compute_pixel_statistics(
    buffer: PixelBuffer,
    executor: Executor | None = None,
) -> PixelStatistics:
    """Run all four scans over a buffer.

    Args:
        buffer: Decoded RGBA buffer.
        executor: Optional executor; when given, the scans are submitted
            to it and joined before returning.

    Returns:
        PixelStatistics with every signal computed.
    """
    if executor is None:
        return PixelStatistics(
            gradient_mean=gradient_magnitude_mean(buffer),
            brightness=brightness_profile(buffer),
            channel_means=channel_means(buffer),
            local_deviation=local_deviation_mean(buffer),
        )

    gradient = executor.submit(gradient_magnitude_mean, buffer)
    brightness = executor.submit(brightness_profile, buffer)
    channels = executor.submit(channel_means, buffer)
    deviation = executor.submit(local_deviation_mean, buffer)

    return PixelStatistics(
        gradient_mean=gradient.result(),
        brightness=brightness.result(),
        channel_means=channels.result(),
        local_deviation=deviation.result(),
    )
