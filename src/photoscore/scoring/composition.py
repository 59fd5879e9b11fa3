"""Composition scoring pass: thirds, balance, arrangement, symmetry.

Scores come from the detected object boxes only, not from pixels.
With no detections every measured score sits at the neutral 5.
"""

from __future__ import annotations

import logging
from itertools import combinations
from typing import Iterable, Sequence

import numpy as np

from photoscore.scoring import geometry
from photoscore.scoring.technical import Jitter, clamp
from photoscore.scoring.types import SCORE_MAX, CompositionScores, Detection

logger = logging.getLogger(__name__)

NEUTRAL_SCORE = 5.0
THIRDS_TOLERANCE = 0.1
THIRDS_HIT_BONUS = 3.0
SINGLE_SUBJECT_SCORE = 8.0
ARRANGEMENT_BASE = 9.0
ARRANGEMENT_FLOOR = 3.0
SYMMETRY_PAIR_BONUS = 2.0

# Placeholder ranges for signals the box model cannot measure
LEADING_LINES_RANGE = (6.0, 9.0)
DEPTH_OF_FIELD_RANGE = (7.0, 9.0)


def usable_detections(detections: Iterable[Detection]) -> list[Detection]:
    """Drop detections whose box has no area."""
    kept = []
    for d in detections:
        if d.is_degenerate:
            logger.debug("Skipping degenerate detection %r with bbox %s", d.label, d.bbox)
            continue
        kept.append(d)
    return kept


def score_rule_of_thirds(
    detections: Sequence[Detection], width: float, height: float
) -> float:
    """Add a bonus for every subject centered near a thirds line."""
    if not detections:
        return NEUTRAL_SCORE

    score = NEUTRAL_SCORE
    for d in detections:
        cx, cy = geometry.center(d.bbox)
        if geometry.near_thirds_line(cx, cy, width, height, THIRDS_TOLERANCE):
            score += THIRDS_HIT_BONUS
    return min(SCORE_MAX, score)


def score_balance(detections: Sequence[Detection], width: float, height: float) -> float:
    """Score how evenly box area is spread left/right and top/bottom.

    Each box puts its whole area on one side of each midline, chosen
    by its center.
    """
    if not detections:
        return NEUTRAL_SCORE

    left = right = top = bottom = 0.0
    for d in detections:
        cx, cy = geometry.center(d.bbox)
        weight = geometry.area(d.bbox)
        if cx < width / 2:
            left += weight
        else:
            right += weight
        if cy < height / 2:
            top += weight
        else:
            bottom += weight

    # +1 keeps the ratio defined when total weight is zero
    horizontal = 1 - abs(left - right) / (left + right + 1)
    vertical = 1 - abs(top - bottom) / (top + bottom + 1)
    return clamp((horizontal + vertical) * 5)


def score_element_arrangement(detections: Sequence[Detection]) -> float:
    """Score clutter: a lone subject scores 8, overlaps pull the score down."""
    if not detections:
        return NEUTRAL_SCORE
    if len(detections) == 1:
        return SINGLE_SUBJECT_SCORE

    overlap_count = sum(
        1 for a, b in combinations(detections, 2) if geometry.overlaps(a.bbox, b.bbox)
    )
    return max(ARRANGEMENT_FLOOR, ARRANGEMENT_BASE - overlap_count)


def score_symmetry(detections: Sequence[Detection], width: float, height: float) -> float:
    """Reward pairs of similar boxes mirrored across the vertical centerline.

    Every ordered pair is checked, so a matching pair usually counts
    twice (once from each side). Size tolerance is relative to the
    reference box.
    """
    if not detections:
        return NEUTRAL_SCORE

    score = 0.0
    for i, d in enumerate(detections):
        x, y, w, h = d.bbox
        mirror = geometry.mirror_x(geometry.center(d.bbox)[0], width)

        for j, other in enumerate(detections):
            if i == j:
                continue
            ox, oy, ow, oh = other.bbox
            other_cx = geometry.center(other.bbox)[0]
            if (
                abs(other_cx - mirror) < width * 0.1
                and abs(oy - y) < height * 0.1
                and abs(ow - w) < w * 0.3
                and abs(oh - h) < h * 0.3
            ):
                score += SYMMETRY_PAIR_BONUS

    return min(SCORE_MAX, NEUTRAL_SCORE + score)


def score_leading_lines(rng: Jitter) -> float:
    """Placeholder: a plausible value in the leading-lines range."""
    return float(rng.uniform(*LEADING_LINES_RANGE))


def score_depth_of_field(rng: Jitter) -> float:
    """Placeholder: a plausible value in the depth-of-field range."""
    return float(rng.uniform(*DEPTH_OF_FIELD_RANGE))


def compute_composition_scores(
    detections: Iterable[Detection],
    width: int,
    height: int,
    rng: Jitter | None = None,
) -> CompositionScores:
    """Compute all composition scores from detected objects.

    Args:
        detections: Detected objects (order does not matter).
        width: Image width in pixels.
        height: Image height in pixels.
        rng: Jitter source for the placeholder scores.

    Returns:
        CompositionScores with every field in [1, 10].
    """
    if rng is None:
        rng = np.random.default_rng()

    boxes = usable_detections(detections)

    return CompositionScores(
        element_arrangement=score_element_arrangement(boxes),
        rule_of_thirds=score_rule_of_thirds(boxes, width, height),
        leading_lines=score_leading_lines(rng),
        balance=score_balance(boxes, width, height),
        symmetry=score_symmetry(boxes, width, height),
        depth_of_field=score_depth_of_field(rng),
    )
