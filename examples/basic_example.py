"""Basic example: score a synthetic photo with two detected subjects.

Run with ``python examples/basic_example.py``.
"""

import numpy as np

from photoscore.advice import critique
from photoscore.scoring import Detection, PixelBuffer, analyze_buffer


def main() -> None:
    """Run the basic example."""
    print("=" * 60)
    print("photoscore - Basic Example")
    print("=" * 60)

    # A soft gradient with some sensor-like noise
    rng = np.random.default_rng(0)
    h, w = 600, 900
    base = np.linspace(60, 190, w)[None, :, None].repeat(h, axis=0).repeat(3, axis=2)
    noisy = base + rng.normal(0, 6, size=base.shape)
    buffer = PixelBuffer.from_array(np.clip(noisy, 0, 255).astype(np.uint8))

    # Two subjects mirrored across the centerline, on the thirds lines
    detections = [
        Detection(bbox=(250, 150, 100, 100), label="person", confidence=0.93),
        Detection(bbox=(550, 150, 100, 100), label="person", confidence=0.88),
    ]

    result = analyze_buffer(buffer, detections, exposure_time=1 / 250, rng=rng)

    print("\nTechnical:")
    for name, value in result.technical.as_dict().items():
        print(f"   {name:<15} {value:5.1f}")

    print("\nComposition:")
    for name, value in result.composition.as_dict().items():
        print(f"   {name:<20} {value:5.1f}")

    print(f"\nOverall: {result.display_score}")

    # Classifier output, as a predictions sidecar would hold it
    notes = critique(result, [("person", 0.93), ("outdoor scene", 0.41)])
    print(f"\nSubject: {notes['content']['mainSubject']}")
    print(f"Story:   {notes['content']['story']}")

    print("\nSuggestions:")
    for tips in notes["improvements"].values():
        for tip in tips:
            print(f"   - {tip}")

    print("\n" + "=" * 60)


if __name__ == "__main__":
    main()
