"""Tests for photoscore.advice module."""

from photoscore.advice import critique, describe_content, suggest_improvements
from photoscore.scoring import aggregate
from photoscore.scoring.types import CompositionScores, Detection, TechnicalScores


def tech(**overrides: float) -> TechnicalScores:
    values = dict(
        sharpness=8.0,
        focus=8.0,
        lighting=8.0,
        exposure=8.0,
        color_balance=8.0,
        resolution=8.0,
        image_quality=8.0,
        noise=8.0,
        artifacts=8.0,
    )
    values.update(overrides)
    return TechnicalScores(**values)


def comp(**overrides: float) -> CompositionScores:
    values = dict(
        element_arrangement=8.0,
        rule_of_thirds=8.0,
        leading_lines=8.0,
        balance=8.0,
        symmetry=8.0,
        depth_of_field=8.0,
    )
    values.update(overrides)
    return CompositionScores(**values)


class TestSuggestImprovements:
    def test_good_photo_gets_defaults(self):
        tips = suggest_improvements(tech(), comp(), [("cat", 0.95)])
        assert len(tips.technical) == 1
        assert "Solid technical quality" in tips.technical[0]
        assert tips.compositional == ["Good compositional structure"]
        assert len(tips.presentation) == 2

    def test_low_confidence_adds_presentation_tip(self):
        tips = suggest_improvements(tech(), comp(), [("cat", 0.4)])
        assert len(tips.presentation) == 3
        assert "clearer focus" in tips.presentation[0]

    def test_no_predictions_counts_as_low_confidence(self):
        assert len(suggest_improvements(tech(), comp()).presentation) == 3

    def test_weak_technical_scores(self):
        tips = suggest_improvements(
            tech(sharpness=3.0, lighting=4.0, color_balance=5.9, noise=2.0), comp()
        )
        assert len(tips.technical) == 4
        assert "sharpness" in tips.technical[0]
        assert "noise" in tips.technical[3]

    def test_clean_image_no_noise_tip(self):
        tips = suggest_improvements(tech(noise=10.0), comp())
        assert not any("noise" in t for t in tips.technical)

    def test_threshold_is_strict(self):
        tips = suggest_improvements(tech(sharpness=6.0), comp())
        assert not any("sharpness" in t for t in tips.technical)

    def test_weak_composition(self):
        tips = suggest_improvements(
            tech(), comp(rule_of_thirds=5.0, balance=2.0, element_arrangement=3.0)
        )
        assert len(tips.compositional) == 3
        assert "rule-of-thirds" in tips.compositional[0]

    def test_as_dict(self):
        data = suggest_improvements(tech(), comp()).as_dict()
        assert set(data) == {"technical", "compositional", "presentation"}


class TestDescribeContent:
    def test_main_subject(self):
        desc = describe_content([("golden retriever", 0.92)])
        assert "golden retriever" in desc.main_subject
        assert "92.0%" in desc.main_subject
        assert "high confidence" in desc.mood

    def test_no_predictions(self):
        desc = describe_content([])
        assert "unknown object" in desc.main_subject
        assert "0.0%" in desc.main_subject
        assert "0 candidate" in desc.atmosphere

    def test_multiple_detections(self):
        dets = [
            Detection(bbox=(0, 0, 10, 10), label="person"),
            Detection(bbox=(20, 0, 10, 10), label="dog"),
        ]
        desc = describe_content([("park", 0.5)], dets)
        assert desc.background == "2 objects detected in the scene: person, dog"
        assert "2 main elements" in desc.story
        assert "complex scene" in desc.mood

    def test_single_detection(self):
        desc = describe_content([("cat", 0.5)], [Detection(bbox=(0, 0, 1, 1), label="cat")])
        assert "single focused subject" in desc.background

    def test_outdoor(self):
        desc = describe_content([("outdoor scene", 0.6), ("tree", 0.2)])
        assert "outdoor" in desc.environment
        assert "2 candidate" in desc.atmosphere

    def test_indoor(self):
        assert "indoor" in describe_content([("sofa", 0.6)]).environment

    def test_as_dict_keys(self):
        data = describe_content([("cat", 0.9)]).as_dict()
        assert list(data) == [
            "mainSubject",
            "background",
            "environment",
            "colors",
            "tones",
            "mood",
            "atmosphere",
            "story",
        ]


class TestCritique:
    def test_uses_predictions_and_detections(self):
        dets = (
            Detection(bbox=(0, 0, 10, 10), label="person"),
            Detection(bbox=(20, 0, 10, 10), label="bicycle"),
        )
        result = aggregate(tech(), comp(), detections=dets)
        notes = critique(result, [("mountain bike", 0.75)])
        assert set(notes) == {"improvements", "content"}
        assert len(notes["improvements"]["presentation"]) == 2
        assert "mountain bike" in notes["content"]["mainSubject"]
        assert notes["content"]["background"] == (
            "2 objects detected in the scene: person, bicycle"
        )

    def test_without_predictions(self):
        notes = critique(aggregate(tech(), comp()))
        assert len(notes["improvements"]["presentation"]) == 3
        assert "unknown object" in notes["content"]["mainSubject"]
