from __future__ import annotations

import pytest

from pf_engine.models import CourseRecord, JobRecord
from pf_engine.pipeline import suggestions
from pf_engine.pipeline.suggestions import (
    JobGroup,
    SuggestionStage,
    build_suggestion,
    extract_technologies,
    group_by_category,
    job_category,
    maybe_suggest,
    should_suggest,
)

UNMAPPED_TITLES = [
    "Backend Developer",
    "Frontend Developer",
    "Platform Engineer",
    "Data Analyst",
    "BI Analyst",
    "Product Manager",
    "Team Lead",
    "Chef",
]


def _courses(count: int):
    return [CourseRecord(label=f"Course {i}") for i in range(count)]


def _mapped_jobs(count: int):
    jobs = [JobRecord(title=f"Mapped Role {i}") for i in range(count)]
    return jobs, {job.title: f"Course {i}" for i, job in enumerate(jobs)}


@pytest.fixture(autouse=True)
def _fixed_clock(monkeypatch) -> None:
    monkeypatch.setattr(suggestions, "utc_now_z", lambda: "2026-02-07T12:34:56Z")


def test_should_suggest_gate() -> None:
    assert should_suggest(13, 8, 0, 5) is True
    assert should_suggest(13, 8, 1, 5) is False
    assert should_suggest(12, 7, 0, 5) is False
    assert should_suggest(10, 6, 0, 5) is False
    assert should_suggest(13, 8, 0, 4) is False


def test_unused_course_blocks_suggestions() -> None:
    jobs = [JobRecord(title=f"Role {i}") for i in range(10)]
    courses = _courses(6)
    mappings = {f"Role {i}": f"Course {i % 5}" for i in range(9)}
    outcome = maybe_suggest(jobs, courses, mappings, {})
    assert outcome.suggested_courses == []
    assert outcome.job_suggestion_mappings == {}
    assert outcome.gated_in is False


def test_category_grouping_emits_two_largest_groups() -> None:
    mapped, mappings = _mapped_jobs(5)
    jobs = mapped + [JobRecord(title=title) for title in UNMAPPED_TITLES]
    outcome = SuggestionStage().run(jobs, _courses(5), mappings, {})

    assert outcome.gated_in is True
    assert [s.title for s in outcome.suggested_courses] == [
        "Advanced Software Engineering Practices",
        "Advanced Data Science and Analytics",
    ]
    engineering = outcome.suggested_courses[0]
    assert engineering.related_jobs == ["Backend Developer", "Frontend Developer", "Platform Engineer"]
    assert engineering.confidence == 0.75
    assert engineering.improvement_type == "new_course"
    assert engineering.created_at == "2026-02-07T12:34:56Z"
    assert outcome.job_suggestion_mappings["BI Analyst"] == "Advanced Data Science and Analytics"
    assert "Chef" not in outcome.job_suggestion_mappings
    assert "Team Lead" not in outcome.job_suggestion_mappings


def test_technology_grouping_when_descriptions_exist() -> None:
    mapped, mappings = _mapped_jobs(5)
    unmapped = [JobRecord(title=f"Analyst {i}", description="Python and SQL for reporting") for i in range(4)]
    unmapped += [JobRecord(title=f"Ops {i}", description="Runs AWS workloads with Docker") for i in range(3)]
    unmapped.append(JobRecord(title="Chef", description="Cooks"))
    thresholds = {job.title: 0.8 for job in unmapped}
    outcome = SuggestionStage().run(mapped + unmapped, _courses(5), mappings, thresholds)

    first, second = outcome.suggested_courses
    assert first.title == "Applied Python for Professional Practice"
    assert first.skill_gaps == ["Python", "SQL"]
    assert first.related_jobs == [f"Analyst {i}" for i in range(4)]
    assert first.confidence == 0.72
    assert second.skill_gaps == ["AWS", "Docker"]
    assert second.related_jobs == [f"Ops {i}" for i in range(3)]
    assert "Chef" not in outcome.job_suggestion_mappings


def test_no_shared_technology_falls_back_to_categories() -> None:
    mapped, mappings = _mapped_jobs(5)
    skills = ["Python", "React", "Terraform", "Tableau", "Excel", "Agile", "Scrum", "Git"]
    unmapped = [JobRecord(title=title, skills=[skill]) for title, skill in zip(UNMAPPED_TITLES, skills)]
    outcome = SuggestionStage().run(mapped + unmapped, _courses(5), mappings, {})
    assert [s.title for s in outcome.suggested_courses][0] == "Advanced Software Engineering Practices"


def test_extract_technologies_respects_word_boundaries() -> None:
    job = JobRecord(title="Dev", description="JavaScript on Node.js, excellent digital skills", skills=["Power BI"])
    assert extract_technologies(job) == ["javascript", "node", "power bi"]
    assert extract_technologies(JobRecord(title="Empty")) == []


def test_job_category_order() -> None:
    assert job_category("Data Engineer") == "Engineering & Development"
    assert job_category("Data Analyst") == "Data & Analytics"
    assert job_category("Engineering Manager") == "Engineering & Development"
    assert job_category("Cyber Defense Specialist") == "Security & Compliance"
    assert job_category("Chef") == "General Professional Development"


def test_general_group_uses_fundamentals_template() -> None:
    groups = group_by_category(["Chef", "Baker", "Data Analyst"])
    assert [g.key for g in groups] == ["General Professional Development"]
    suggestion = build_suggestion(groups[0], {"Chef": 0.7}, created_at="2026-01-01T00:00:00Z")
    assert suggestion.title == "General Professional Development Fundamentals"
    assert suggestion.confidence == 0.63
    assert suggestion.skill_gaps == ["Core Skills", "Industry Knowledge"]
    assert suggestion.reasoning == "Foundational skills for 2 related positions"


def test_security_template() -> None:
    group = JobGroup(key="Security & Compliance", jobs=("Security Analyst", "Cyber Officer"), by_technology=False)
    suggestion = build_suggestion(group, {})
    assert suggestion.title == "Applied Cybersecurity and Compliance"
    assert suggestion.created_at == "2026-02-07T12:34:56Z"
