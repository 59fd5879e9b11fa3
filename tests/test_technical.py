"""Tests for photoscore.scoring.technical module."""

import numpy as np
import pytest

from photoscore.scoring.technical import (
    clamp,
    compute_technical_scores,
    score_artifacts,
    score_color_balance,
    score_exposure,
    score_focus,
    score_lighting,
    score_noise,
    score_resolution,
    score_sharpness,
)
from photoscore.scoring.types import (
    BrightnessProfile,
    PixelBuffer,
    PixelStatistics,
    TechnicalScores,
)


class StubRng:
    """Jitter source returning a fixed fraction of the requested range."""

    def __init__(self, fraction: float = 0.0) -> None:
        self.fraction = fraction

    def uniform(self, low: float, high: float) -> float:
        return low + (high - low) * self.fraction


def make_buffer(
    w: int = 20, h: int = 20, color: tuple = (128, 128, 128)
) -> PixelBuffer:
    """Create a uniform test buffer."""
    arr = np.zeros((h, w, 3), dtype=np.uint8)
    arr[:, :] = color
    return PixelBuffer.from_array(arr)


def make_noise_buffer(w: int = 64, h: int = 48, seed: int = 0) -> PixelBuffer:
    rng = np.random.default_rng(seed)
    return PixelBuffer.from_array(rng.integers(0, 256, size=(h, w, 3), dtype=np.uint8))


def assert_in_range(scores: TechnicalScores) -> None:
    for name, value in scores.as_dict().items():
        assert 1.0 <= value <= 10.0, name


class TestClamp:
    def test_within(self):
        assert clamp(5.5) == 5.5

    def test_floor_and_ceiling(self):
        assert clamp(-3) == 1.0
        assert clamp(42) == 10.0


class TestScoreFunctions:
    def test_sharpness_scaling(self):
        assert score_sharpness(125) == 5.0
        assert score_sharpness(0) == 1.0
        assert score_sharpness(1000) == 10.0

    def test_focus_jitter_bounds(self):
        assert score_focus(5.0, StubRng(0.0)) == pytest.approx(4.5)
        assert score_focus(5.0, StubRng(1.0)) == pytest.approx(5.0)

    def test_lighting_mid_gray_is_max(self):
        assert score_lighting(BrightnessProfile(128.0, 0.0, 0.0)) == 10.0

    def test_lighting_black_is_min(self):
        assert score_lighting(BrightnessProfile(0.0, 1.0, 0.0)) == 1.0

    def test_lighting_balanced_extremes(self):
        # Balanced dark/bright areas but mean 64 away from mid-gray
        assert score_lighting(BrightnessProfile(64.0, 0.3, 0.3)) == pytest.approx(7.5)

    def test_noise_and_artifacts(self):
        assert score_noise(0) == 10.0
        assert score_artifacts(0) == 9.0
        assert score_noise(100) == pytest.approx(8.0)
        assert score_artifacts(100) == pytest.approx(8.0)
        assert score_noise(10_000) == 1.0
        assert score_artifacts(10_000) == 1.0


class TestScoreExposure:
    def test_long_exposure(self):
        assert score_exposure(0.5, 10.0, StubRng()) == 5.0

    def test_short_exposure(self):
        assert score_exposure(1 / 4000, 10.0, StubRng()) == 6.0

    def test_normal_exposure(self):
        assert score_exposure(1 / 125, 10.0, StubRng()) == 8.5

    def test_tier_boundaries_are_strict(self):
        assert score_exposure(0.1, 1.0, StubRng()) == 8.5
        assert score_exposure(0.001, 1.0, StubRng()) == 8.5

    def test_missing_uses_lighting(self):
        assert score_exposure(None, 10.0, StubRng(0.0)) == pytest.approx(8.0)
        assert score_exposure(None, 5.0, StubRng(0.5)) == pytest.approx(5.0)

    def test_estimate_is_clamped(self):
        assert score_exposure(None, 10.0, StubRng(1.0)) == 10.0

    def test_non_positive_treated_as_missing(self):
        assert score_exposure(0.0, 5.0, StubRng(0.0)) == pytest.approx(4.0)
        assert score_exposure(float("nan"), 5.0, StubRng(0.0)) == pytest.approx(4.0)


class TestScoreColorBalance:
    def test_neutral_is_max(self):
        assert score_color_balance((128.0, 128.0, 128.0)) == 10.0

    def test_decreases_with_skew(self):
        scores = [
            score_color_balance((128.0 + skew, 128.0, 128.0))
            for skew in (0, 30, 60, 90)
        ]
        assert scores == pytest.approx([10.0, 8.0, 6.0, 4.0])
        assert all(a > b for a, b in zip(scores, scores[1:]))

    def test_from_buffers(self):
        scores = []
        for skew in (0, 20, 40, 80, 120):
            buf = make_buffer(color=(120 + skew, 120, 120 - skew // 2))
            scores.append(compute_technical_scores(buf, rng=StubRng()).color_balance)
        assert scores[0] == 10.0
        assert all(a > b for a, b in zip(scores, scores[1:]))

    def test_extreme_cast_floors_at_one(self):
        assert score_color_balance((255.0, 0.0, 0.0)) == 1.0


class TestScoreResolution:
    @pytest.mark.parametrize(
        "width,height,expected",
        [
            (1, 1, 5.0),
            (2000, 1000, 5.0),  # exactly 2 MP
            (2001, 1000, 6.0),
            (5000, 1000, 6.0),  # exactly 5 MP
            (5001, 1000, 7.0),
            (8000, 1000, 7.0),
            (8001, 1000, 8.0),
            (12000, 1000, 8.0),
            (12001, 1000, 9.0),
            (20000, 1000, 9.0),  # exactly 20 MP
            (20001, 1000, 10.0),
            (10000, 10000, 10.0),
        ],
    )
    def test_steps(self, width, height, expected):
        assert score_resolution(width, height) == expected

    def test_never_below_five(self):
        assert score_resolution(0, 0) == 5.0


class TestComputeTechnicalScores:
    def test_uniform_mid_gray(self):
        scores = compute_technical_scores(make_buffer(), rng=StubRng(0.0))
        assert scores.sharpness == 1.0
        assert scores.focus == 1.0
        assert scores.lighting == 10.0
        assert scores.exposure == pytest.approx(8.0)
        assert scores.color_balance == 10.0
        assert scores.resolution == 5.0
        assert scores.image_quality == pytest.approx(7.0)
        assert scores.noise == 10.0
        assert scores.artifacts == 9.0

    def test_focus_and_quality_use_clamped_sharpness(self):
        # gradient 500 is 20 on the raw scale, clamped to 10
        stats = PixelStatistics(
            gradient_mean=500.0,
            brightness=BrightnessProfile(mean=128.0, dark_ratio=0.0, bright_ratio=0.0),
            channel_means=(173.0, 128.0, 128.0),
            local_deviation=0.0,
        )
        scores = compute_technical_scores(make_buffer(), rng=StubRng(0.0), stats=stats)
        assert scores.sharpness == 10.0
        assert scores.focus == pytest.approx(9.0)
        assert scores.color_balance == pytest.approx(7.0)
        assert scores.image_quality == pytest.approx(9.0)

    def test_exposure_hint_used(self):
        scores = compute_technical_scores(make_buffer(), exposure_time=0.5, rng=StubRng())
        assert scores.exposure == 5.0

    def test_noise_in_range(self):
        scores = compute_technical_scores(make_noise_buffer(), rng=np.random.default_rng(1))
        assert_in_range(scores)
        assert scores.noise < 10.0

    def test_random_buffers_in_range(self):
        for seed in range(5):
            buf = make_noise_buffer(seed=seed)
            assert_in_range(compute_technical_scores(buf, rng=np.random.default_rng(seed)))

    def test_seeded_rng_reproducible(self):
        buf = make_noise_buffer()
        a = compute_technical_scores(buf, rng=np.random.default_rng(42))
        b = compute_technical_scores(buf, rng=np.random.default_rng(42))
        assert a == b

    def test_default_rng_stays_in_range(self):
        assert_in_range(compute_technical_scores(make_noise_buffer()))

    def test_precomputed_statistics(self):
        stats = PixelStatistics(
            gradient_mean=500.0,
            brightness=BrightnessProfile(128.0, 0.0, 0.0),
            channel_means=(128.0, 128.0, 128.0),
            local_deviation=1000.0,
        )
        scores = compute_technical_scores(make_buffer(), rng=StubRng(), stats=stats)
        assert scores.sharpness == 10.0
        assert scores.noise == 1.0
        assert scores.artifacts == 1.0

    def test_tiny_buffer_falls_back(self):
        scores = compute_technical_scores(make_buffer(2, 2), rng=StubRng())
        assert scores == TechnicalScores.FALLBACK

    def test_empty_buffer_falls_back(self):
        buf = PixelBuffer(width=0, height=0, data=b"")
        assert compute_technical_scores(buf) == TechnicalScores.FALLBACK

    def test_fallback_logged(self, caplog):
        with caplog.at_level("WARNING", logger="photoscore.scoring.technical"):
            compute_technical_scores(make_buffer(1, 1), rng=StubRng())
        assert "fallback" in caplog.text

    def test_fallback_vector(self):
        assert TechnicalScores.FALLBACK.as_dict() == {
            "sharpness": 7.0,
            "focus": 7.0,
            "lighting": 6.5,
            "exposure": 6.5,
            "color_balance": 7.0,
            "resolution": 8.0,
            "image_quality": 7.0,
            "noise": 8.0,
            "artifacts": 8.5,
        }
        assert_in_range(TechnicalScores.FALLBACK)
