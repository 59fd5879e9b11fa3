"""Improvement suggestions and content descriptions built from scores.

Both helpers take plain data: score records, detections, and
``(label, probability)`` predictions from whatever classifier the
caller runs. Nothing here loads or calls a model.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from photoscore.scoring.types import (
    AnalysisResult,
    CompositionScores,
    Detection,
    TechnicalScores,
)

# (label, probability), best first
Prediction = tuple[str, float]

WEAK_SCORE = 6.0
CONFIDENT_SUBJECT = 0.7
VERY_CONFIDENT_SUBJECT = 0.8

MAX_TECHNICAL = 4
MAX_COMPOSITIONAL = 4
MAX_PRESENTATION = 3


@dataclass(frozen=True)
class Improvements:
    """Suggestions grouped by area."""

    technical: list[str] = field(default_factory=list)
    compositional: list[str] = field(default_factory=list)
    presentation: list[str] = field(default_factory=list)

    def as_dict(self) -> dict[str, list[str]]:
        return {
            "technical": list(self.technical),
            "compositional": list(self.compositional),
            "presentation": list(self.presentation),
        }


@dataclass(frozen=True)
class ContentDescription:
    """Short text descriptions of what the photo shows."""

    main_subject: str
    background: str
    environment: str
    colors: str
    tones: str
    mood: str
    atmosphere: str
    story: str

    def as_dict(self) -> dict[str, str]:
        return {
            "mainSubject": self.main_subject,
            "background": self.background,
            "environment": self.environment,
            "colors": self.colors,
            "tones": self.tones,
            "mood": self.mood,
            "atmosphere": self.atmosphere,
            "story": self.story,
        }


def _top(predictions: Sequence[Prediction]) -> Prediction | None:
    return predictions[0] if predictions else None


def suggest_improvements(
    technical: TechnicalScores,
    composition: CompositionScores,
    predictions: Sequence[Prediction] = (),
) -> Improvements:
    """Turn weak scores into concrete shooting and editing tips.

    Args:
        technical: Technical scores for the photo.
        composition: Composition scores for the photo.
        predictions: Classifier output, best first (optional).

    Returns:
        Improvements with at most 4 technical, 4 compositional and
        3 presentation tips.
    """
    tech: list[str] = []
    comp: list[str] = []
    pres: list[str] = []

    if technical.sharpness < WEAK_SCORE:
        tech.append("Image lacks sharpness - use a tripod or a faster shutter speed")
    if technical.lighting < WEAK_SCORE:
        tech.append("Lighting is uneven - adjust exposure or add fill light")
    if technical.color_balance < WEAK_SCORE:
        tech.append("Colors show a cast - correct the white balance")
    if technical.noise < WEAK_SCORE:
        tech.append("Noticeable noise - lower the ISO or apply noise reduction")

    if composition.rule_of_thirds < WEAK_SCORE:
        comp.append("Place the main subject along a rule-of-thirds line")
    if composition.balance < WEAK_SCORE:
        comp.append("Composition is unbalanced - redistribute visual weight")
    if composition.element_arrangement < WEAK_SCORE:
        comp.append("Simplify the frame - fewer overlapping elements")

    top = _top(predictions)
    confidence = top[1] if top else 0.0
    if confidence < CONFIDENT_SUBJECT:
        pres.append("Give the main subject a clearer focus so it reads at a glance")
    pres.append("Try different angles for a more dynamic composition")
    pres.append("Consider post-processing to address the weaker areas above")

    if not tech:
        tech.append("Solid technical quality - nothing stands out to fix")
    if not comp:
        comp.append("Good compositional structure")

    return Improvements(
        technical=tech[:MAX_TECHNICAL],
        compositional=comp[:MAX_COMPOSITIONAL],
        presentation=pres[:MAX_PRESENTATION],
    )


def describe_content(
    predictions: Sequence[Prediction],
    detections: Sequence[Detection] = (),
) -> ContentDescription:
    """Compose a text description from classifier and detector output."""
    top = _top(predictions)
    subject, confidence = top if top else ("unknown object", 0.0)
    count = len(detections)
    labels = ", ".join(d.label for d in detections)

    if count > 1:
        background = f"{count} objects detected in the scene: {labels}"
    else:
        background = "Simple composition with a single focused subject"

    if any("outdoor" in label for label, _ in predictions):
        environment = "Classified as an outdoor scene"
    else:
        environment = "Looks like an indoor setting"

    if confidence > VERY_CONFIDENT_SUBJECT:
        mood = "Subject recognised with high confidence - a clear, clean composition"
    else:
        mood = "A more complex scene that rewards a closer look"

    return ContentDescription(
        main_subject=(
            f'"{subject}" identified as the main subject '
            f"with {confidence * 100:.1f}% confidence"
        ),
        background=background,
        environment=environment,
        colors="Dominant tones are summarised by the color balance score",
        tones="Tonal distribution is summarised by the lighting score",
        mood=mood,
        atmosphere=f"{len(predictions)} candidate classifications considered",
        story=f"The photo shows {subject} with {count} main elements in the composition",
    )


def critique(
    result: AnalysisResult,
    predictions: Sequence[Prediction] = (),
) -> dict[str, dict]:
    """Improvements and content description for a result, ready for JSON."""
    improvements = suggest_improvements(result.technical, result.composition, predictions)
    content = describe_content(predictions, result.detections)
    return {"improvements": improvements.as_dict(), "content": content.as_dict()}
