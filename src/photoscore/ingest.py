"""Ingest module: image decoding, exposure metadata and detector sidecars."""

from __future__ import annotations

import json
import logging
from fractions import Fraction
from pathlib import Path
from typing import Any

from PIL import Image, ImageOps

from photoscore.advice import Prediction
from photoscore.scoring.types import Detection, PixelBuffer

logger = logging.getLogger(__name__)

# Formats Pillow decodes that we scan by default (case-insensitive)
IMAGE_EXTENSIONS = frozenset(
    {".jpg", ".jpeg", ".png", ".webp", ".tif", ".tiff", ".bmp"}
)

TAG_EXIF_IFD = 0x8769
TAG_EXPOSURE_TIME = 33434

DETECTIONS_SUFFIX = ".detections.json"
PREDICTIONS_SUFFIX = ".predictions.json"


def find_image_files(
    directory: Path,
    extensions: frozenset[str] | None = None,
) -> list[Path]:
    """Find all image files in directory (recursive).

    Args:
        directory: Root directory to scan.
        extensions: Set of extensions to match (lowercase, with dot).
                   Defaults to IMAGE_EXTENSIONS.

    Returns:
        Sorted list of paths to image files.
    """
    if extensions is None:
        extensions = IMAGE_EXTENSIONS

    result = []
    for path in directory.rglob("*"):
        if path.is_file() and path.suffix.lower() in extensions:
            result.append(path)
    return sorted(result)


def load_buffer(image: Image.Image | Path | str) -> PixelBuffer:
    """Decode an image into an upright RGBA pixel buffer.

    Box coordinates from a detector refer to the upright image, so the
    EXIF orientation is applied before the pixels are copied.

    Args:
        image: PIL Image, or path to image file.

    Returns:
        PixelBuffer at the image's full resolution.

    Raises:
        FileNotFoundError: If the path does not exist.
        PIL.UnidentifiedImageError: If the file is not a readable image.
    """
    if isinstance(image, (str, Path)):
        with Image.open(image) as img:
            img.load()
            return PixelBuffer.from_image(ImageOps.exif_transpose(img))
    return PixelBuffer.from_image(ImageOps.exif_transpose(image))


def _to_seconds(value: Any) -> float | None:
    """Convert an EXIF rational (or tuple, or number) to float seconds."""
    try:
        if isinstance(value, tuple) and len(value) == 2:
            return float(Fraction(int(value[0]), int(value[1])))
        if hasattr(value, "numerator") and hasattr(value, "denominator"):
            return value.numerator / value.denominator
        return float(value)
    except (TypeError, ValueError, ZeroDivisionError):
        return None


def extract_exposure_time(image: Image.Image | Path | str) -> float | None:
    """Read the exposure time (seconds) from EXIF.

    Args:
        image: PIL Image, or path to image file.

    Returns:
        Exposure time in seconds, or None if missing or unreadable.
    """
    try:
        if isinstance(image, (str, Path)):
            with Image.open(image) as img:
                exif = img.getexif()
        else:
            exif = image.getexif()
    except (OSError, ValueError) as e:
        logger.debug("No EXIF for %s: %s", image, e)
        return None

    if not exif:
        return None

    # ExposureTime normally lives in the Exif sub-IFD
    raw = exif.get_ifd(TAG_EXIF_IFD).get(TAG_EXPOSURE_TIME)
    if raw is None:
        raw = exif.get(TAG_EXPOSURE_TIME)
    if raw is None:
        return None

    seconds = _to_seconds(raw)
    if seconds is None or seconds <= 0:
        return None
    return seconds


def _parse_detection(item: dict[str, Any]) -> Detection:
    x, y, w, h = (float(v) for v in item["bbox"])
    label = item.get("class", item.get("label", ""))
    confidence = item.get("score", item.get("confidence", 1.0))
    return Detection(bbox=(x, y, w, h), label=str(label), confidence=float(confidence))


def load_detections(path: Path) -> list[Detection]:
    """Load detections from a JSON sidecar.

    The file holds a list of objects with a ``bbox`` of [x, y, w, h],
    a ``class`` or ``label`` and a ``score`` or ``confidence``, which is
    what common object detectors emit.

    Args:
        path: Path to JSON file.

    Returns:
        Detections in file order (empty if the file does not exist).

    Raises:
        ValueError: If the file is not a list of detection objects.
    """
    if not path.exists():
        return []

    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, list):
        raise ValueError(f"{path}: expected a JSON list of detections")

    try:
        return [_parse_detection(item) for item in data]
    except (KeyError, TypeError, ValueError) as e:
        raise ValueError(f"{path}: malformed detection: {e}") from e


def detections_sidecar(image_path: Path) -> Path:
    """Path of the detection sidecar for an image (IMG.jpg.detections.json)."""
    return image_path.with_name(image_path.name + DETECTIONS_SUFFIX)


def _parse_prediction(item: dict[str, Any]) -> Prediction:
    label = item.get("className", item.get("label"))
    if label is None:
        raise KeyError("className")
    probability = item.get("probability", item.get("score"))
    if probability is None:
        raise KeyError("probability")
    return str(label), float(probability)


def load_predictions(path: Path) -> list[Prediction]:
    """Load classifier output from a JSON sidecar.

    The file holds a list of objects with a ``className`` or ``label``
    and a ``probability`` or ``score``, as image classifiers such as
    MobileNet emit them.

    Args:
        path: Path to JSON file.

    Returns:
        ``(label, probability)`` pairs, most probable first (empty if the
        file does not exist).

    Raises:
        ValueError: If the file is not a list of prediction objects.
    """
    if not path.exists():
        return []

    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, list):
        raise ValueError(f"{path}: expected a JSON list of predictions")

    try:
        predictions = [_parse_prediction(item) for item in data]
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise ValueError(f"{path}: malformed prediction: {e}") from e

    return sorted(predictions, key=lambda p: p[1], reverse=True)


def predictions_sidecar(image_path: Path) -> Path:
    """Path of the classifier sidecar for an image (IMG.jpg.predictions.json)."""
    return image_path.with_name(image_path.name + PREDICTIONS_SUFFIX)
