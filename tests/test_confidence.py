from __future__ import annotations

from pf_engine.models import JobRecord
from pf_engine.pipeline.confidence import analyze, job_confidence


def test_analyze_uses_provided_scores_and_defaults() -> None:
    jobs = [JobRecord(title=t) for t in ("Mapped Scored", "Mapped Plain", "Unmapped", "Zero Score")]
    mappings = {"Mapped Scored": "C1", "Mapped Plain": "C2", "Zero Score": "C3"}
    scores = {"Mapped Scored": 0.7, "Zero Score": 0.0}
    thresholds = {"Mapped Scored": 0.75, "Mapped Plain": 0.8, "Unmapped": 0.6, "Zero Score": 0.6}

    analysis = analyze(jobs, mappings, scores, thresholds)

    assert analysis["Mapped Scored"].confidence_score == 0.7
    assert analysis["Mapped Scored"].threshold_met is False
    assert analysis["Mapped Plain"].confidence_score == 0.85
    assert analysis["Mapped Plain"].threshold_met is True
    assert analysis["Mapped Plain"].skill_gaps == []
    assert analysis["Zero Score"].confidence_score == 0.0
    unmapped = analysis["Unmapped"]
    assert unmapped.confidence_score == 0.65
    assert unmapped.threshold_met is True
    assert unmapped.skill_gaps == ["core competencies"]
    assert unmapped.missing_competencies == ["formal education requirements"]


def test_missing_threshold_defaults_to_eighty_percent() -> None:
    analysis = analyze([JobRecord(title="X")], {"X": "C"}, {}, {})
    assert analysis["X"].threshold == 0.80
    assert analysis["X"].threshold_met is True


def test_job_confidence() -> None:
    assert job_confidence("A", {"A": "C"}, {}) == 0.85
    assert job_confidence("B", {}, {}) == 0.65
    assert job_confidence("A", {"A": "C"}, {"A": 0.5}) == 0.5
