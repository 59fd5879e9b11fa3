"""Score dataclasses and input records for the scoring engine."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import ClassVar

import numpy as np
from numpy.typing import NDArray
from PIL import Image

SCORE_MIN = 1.0
SCORE_MAX = 10.0

# Bounding box as (x, y, w, h) in pixel coordinates
Box = tuple[float, float, float, float]


class InvalidBufferError(ValueError):
    """Raised when a pixel buffer does not match its declared dimensions."""


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


@dataclass(frozen=True)
class PixelBuffer:
    """Read-only view over width x height RGBA samples.

    Validated on construction, so every scan can assume
    ``len(data) == width * height * 4``.
    """

    width: int
    height: int
    data: bytes = field(repr=False)

    def __post_init__(self) -> None:
        if not isinstance(self.data, bytes):
            # bytearray or memoryview input would give a writable view
            object.__setattr__(self, "data", bytes(self.data))
        if self.width < 0 or self.height < 0:
            raise InvalidBufferError(
                f"negative dimensions {self.width}x{self.height}"
            )
        expected = self.width * self.height * 4
        if len(self.data) != expected:
            raise InvalidBufferError(
                f"buffer holds {len(self.data)} bytes, "
                f"expected {expected} for {self.width}x{self.height} RGBA"
            )

    @property
    def pixels(self) -> NDArray[np.uint8]:
        """Pixel samples as a read-only (height, width, 4) array."""
        arr = np.frombuffer(self.data, dtype=np.uint8)
        return arr.reshape(self.height, self.width, 4)

    @property
    def megapixels(self) -> float:
        return self.width * self.height / 1e6

    @classmethod
    def from_array(cls, arr: NDArray[np.uint8]) -> PixelBuffer:
        """Build a buffer from an HxWx3 (RGB) or HxWx4 (RGBA) uint8 array."""
        arr = np.asarray(arr, dtype=np.uint8)
        if arr.ndim != 3 or arr.shape[2] not in (3, 4):
            raise InvalidBufferError(f"expected HxWx3 or HxWx4 array, got {arr.shape}")
        if arr.shape[2] == 3:
            alpha = np.full(arr.shape[:2] + (1,), 255, dtype=np.uint8)
            arr = np.concatenate([arr, alpha], axis=2)
        h, w = arr.shape[:2]
        return cls(width=w, height=h, data=np.ascontiguousarray(arr).tobytes())

    @classmethod
    def from_image(cls, img: Image.Image) -> PixelBuffer:
        """Build a buffer from a PIL image (converted to RGBA)."""
        if img.mode != "RGBA":
            img = img.convert("RGBA")
        return cls(width=img.width, height=img.height, data=img.tobytes())


@dataclass(frozen=True)
class Detection:
    """A detected object, produced by an external detector."""

    bbox: Box
    label: str = ""
    confidence: float = 1.0

    @property
    def is_degenerate(self) -> bool:
        _, _, w, h = self.bbox
        return w <= 0 or h <= 0


@dataclass(frozen=True)
class BrightnessProfile:
    """Brightness distribution over a buffer (0-255 scale)."""

    mean: float
    dark_ratio: float  # fraction of pixels below 50
    bright_ratio: float  # fraction of pixels above 200


@dataclass(frozen=True)
class PixelStatistics:
    """Raw signals from the pixel scans, before scoring."""

    gradient_mean: float
    brightness: BrightnessProfile
    channel_means: tuple[float, float, float]
    local_deviation: float

    def is_finite(self) -> bool:
        values = [
            self.gradient_mean,
            self.brightness.mean,
            self.brightness.dark_ratio,
            self.brightness.bright_ratio,
            *self.channel_means,
            self.local_deviation,
        ]
        return bool(np.all(np.isfinite(values)))


class _ScoreRecord:
    """Shared helpers for the score dataclasses."""

    def as_dict(self, camel: bool = False) -> dict[str, float]:
        values = asdict(self)  # type: ignore[call-overload]
        if camel:
            return {_camel(k): v for k, v in values.items()}
        return values

    def mean(self) -> float:
        values = list(self.as_dict().values())
        return sum(values) / len(values)


@dataclass(frozen=True)
class TechnicalScores(_ScoreRecord):
    """Technical quality metrics, each in [1, 10]."""

    sharpness: float
    focus: float
    lighting: float
    exposure: float
    color_balance: float
    resolution: float
    image_quality: float
    noise: float  # 10 = clean
    artifacts: float  # 10 = no artifacts

    FALLBACK: ClassVar[TechnicalScores]


# Substituted whole when technical analysis fails
TechnicalScores.FALLBACK = TechnicalScores(
    sharpness=7.0,
    focus=7.0,
    lighting=6.5,
    exposure=6.5,
    color_balance=7.0,
    resolution=8.0,
    image_quality=7.0,
    noise=8.0,
    artifacts=8.5,
)


@dataclass(frozen=True)
class CompositionScores(_ScoreRecord):
    """Compositional metrics derived from detections, each in [1, 10]."""

    element_arrangement: float
    rule_of_thirds: float
    leading_lines: float
    balance: float
    symmetry: float
    depth_of_field: float


@dataclass(frozen=True)
class AnalysisResult:
    """Combined result of one analysis call."""

    technical: TechnicalScores
    composition: CompositionScores
    width: int = 0
    height: int = 0
    exposure_time: float | None = None
    detections: tuple[Detection, ...] = ()

    @property
    def overall_score(self) -> float:
        """Mean of the technical and composition averages (1-10)."""
        return (self.technical.mean() + self.composition.mean()) / 2

    @property
    def display_score(self) -> float:
        """Overall score rounded for display."""
        return round(self.overall_score, 1)

    def as_dict(self) -> dict[str, object]:
        return {
            "technical": self.technical.as_dict(camel=True),
            "composition": self.composition.as_dict(camel=True),
            "overallScore": self.overall_score,
            "width": self.width,
            "height": self.height,
            "exposureTime": self.exposure_time,
            "detections": [
                {"bbox": list(d.bbox), "label": d.label, "confidence": d.confidence}
                for d in self.detections
            ],
        }
