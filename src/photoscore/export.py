"""Export module: write analysis reports in various formats."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from pathlib import Path
from typing import Literal, Mapping, Sequence

import blake3

from photoscore.advice import Prediction, critique
from photoscore.scoring.types import AnalysisResult

ExportFormat = Literal["json", "list"]


def compute_file_hash(path: Path) -> str:
    """Compute blake3 hash of file contents.

    Args:
        path: Path to file.

    Returns:
        Hex string of blake3 hash.
    """
    hasher = blake3.blake3()
    with open(path, "rb") as f:
        # Read in chunks for large files
        while chunk := f.read(65536):
            hasher.update(chunk)
    return hasher.hexdigest()


def rank_results(
    results: list[tuple[str, AnalysisResult]],
) -> list[tuple[str, AnalysisResult]]:
    """Sort (path, result) pairs best first."""
    return sorted(results, key=lambda x: x[1].overall_score, reverse=True)


def export_json(
    results: list[tuple[str, AnalysisResult]],
    out_path: Path,
    predictions: Mapping[str, Sequence[Prediction]] | None = None,
) -> None:
    """Export full analysis records as JSON.

    Field names inside the score dicts use camelCase
    (``colorBalance``, ``ruleOfThirds``, ...).

    Args:
        results: (path, result) pairs.
        out_path: Output file path.
        predictions: Classifier output per path, used for the suggestions
            and the content description.
    """
    if predictions is None:
        predictions = {}

    records = []
    for path_str, result in rank_results(results):
        path = Path(path_str)
        record: dict[str, object] = {
            "fileName": path.name,
            "path": path_str,
            "hash": compute_file_hash(path) if path.exists() else None,
        }
        record.update(result.as_dict())
        record.update(critique(result, predictions.get(path_str, ())))
        records.append(record)

    payload = {
        "generated": datetime.now(UTC).strftime("%Y-%m-%dT%H:%M:%SZ"),
        "count": len(records),
        "results": records,
    }
    out_path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")


def export_list(
    results: list[tuple[str, AnalysisResult]],
    out_path: Path,
    source_dir: Path | None = None,
    metadata: dict[str, str] | None = None,
) -> None:
    """Export ranked scores and paths to a text file.

    Args:
        results: (path, result) pairs.
        out_path: Output file path.
        source_dir: Original source directory (for header).
        metadata: Optional metadata to include in header.
    """
    timestamp = datetime.now(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")

    lines = [
        "# photoscore export",
        f"# generated: {timestamp}",
        f"# count: {len(results)}",
    ]

    if source_dir:
        lines.append(f"# source: {source_dir}")

    if metadata:
        for key, value in metadata.items():
            lines.append(f"# {key}: {value}")

    lines.append("")
    lines.extend(
        f"{result.overall_score:.2f}\t{path}" for path, result in rank_results(results)
    )

    out_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
