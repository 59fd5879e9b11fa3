"""Bounding-box helpers over (x, y, w, h) boxes in pixel coordinates."""

from __future__ import annotations

from photoscore.scoring.types import Box


def center(box: Box) -> tuple[float, float]:
    x, y, w, h = box
    return (x + w / 2, y + h / 2)


def area(box: Box) -> float:
    _, _, w, h = box
    return w * h


def overlaps(a: Box, b: Box) -> bool:
    """Axis-aligned rectangle intersection (touching edges don't count)."""
    ax, ay, aw, ah = a
    bx, by, bw, bh = b
    return ax < bx + bw and ax + aw > bx and ay < by + bh and ay + ah > by


def near_thirds_line(
    cx: float,
    cy: float,
    width: float,
    height: float,
    tolerance: float = 0.1,
) -> bool:
    """Check whether a point lies close to any of the four thirds lines.

    Args:
        cx, cy: Point to test.
        width, height: Frame dimensions.
        tolerance: Allowed distance as a fraction of the matching dimension.

    Returns:
        True if within tolerance of a vertical or horizontal thirds line.
    """
    near_vertical = min(abs(cx - width / 3), abs(cx - 2 * width / 3)) < width * tolerance
    near_horizontal = (
        min(abs(cy - height / 3), abs(cy - 2 * height / 3)) < height * tolerance
    )
    return near_vertical or near_horizontal


def mirror_x(cx: float, width: float) -> float:
    """Reflect an x coordinate across the vertical centerline."""
    return width - cx
