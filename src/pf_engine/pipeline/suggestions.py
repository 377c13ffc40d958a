"""
Pathfinder Engine
Copyright (c) 2026 Chris Menendez.
All Rights Reserved.
See LICENSE for permitted use.
"""

from __future__ import annotations

import logging
import re
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from pf_engine.models import CourseRecord, JobRecord, SuggestedCourse
from pf_engine.utils.time import utc_now_z

logger = logging.getLogger(__name__)

MAX_SUGGESTIONS = 2
MIN_GROUP_SIZE = 2
MIN_UNMAPPED_JOBS = 7
MIN_UNMAPPED_FLOOR = 5
MIN_UNMAPPED_SHARE = 0.6
MIN_COURSES = 5

TECH_KEYWORDS: Tuple[Tuple[str, str], ...] = (
    ("python", "Python"),
    ("java", "Java"),
    ("javascript", "JavaScript"),
    ("typescript", "TypeScript"),
    ("sql", "SQL"),
    ("nosql", "NoSQL"),
    ("aws", "AWS"),
    ("azure", "Azure"),
    ("gcp", "Google Cloud"),
    ("docker", "Docker"),
    ("kubernetes", "Kubernetes"),
    ("terraform", "Terraform"),
    ("react", "React"),
    ("node", "Node.js"),
    ("spark", "Apache Spark"),
    ("hadoop", "Hadoop"),
    ("tableau", "Tableau"),
    ("power bi", "Power BI"),
    ("excel", "Excel"),
    ("machine learning", "Machine Learning"),
    ("deep learning", "Deep Learning"),
    ("tensorflow", "TensorFlow"),
    ("pytorch", "PyTorch"),
    ("statistics", "Statistics"),
    ("data visualization", "Data Visualization"),
    ("etl", "ETL"),
    ("git", "Git"),
    ("linux", "Linux"),
    ("ci/cd", "CI/CD"),
    ("rest api", "REST APIs"),
    ("microservices", "Microservices"),
    ("agile", "Agile"),
    ("scrum", "Scrum"),
    ("cybersecurity", "Cybersecurity"),
    ("networking", "Networking"),
)

_TECH_PATTERNS = tuple(
    (keyword, label, re.compile(r"(?<![a-z0-9])" + re.escape(keyword) + r"(?![a-z0-9])"))
    for keyword, label in TECH_KEYWORDS
)
_TECH_LABELS = {keyword: label for keyword, label in TECH_KEYWORDS}

CATEGORY_ENGINEERING = "Engineering & Development"
CATEGORY_DATA = "Data & Analytics"
CATEGORY_MANAGEMENT = "Management & Leadership"
CATEGORY_SECURITY = "Security & Compliance"
CATEGORY_GENERAL = "General Professional Development"

_CATEGORY_RULES: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (("engineer", "developer"), CATEGORY_ENGINEERING),
    (("data", "analyst"), CATEGORY_DATA),
    (("manager", "lead"), CATEGORY_MANAGEMENT),
    (("security", "cyber"), CATEGORY_SECURITY),
)

# category -> (title, confidence, skill gaps, reasoning)
_CATEGORY_TEMPLATES: Dict[str, Tuple[str, float, List[str], str]] = {
    CATEGORY_ENGINEERING: (
        "Advanced Software Engineering Practices",
        0.75,
        ["System Design", "Code Quality", "DevOps"],
        "Comprehensive engineering skills for multiple technical roles",
    ),
    CATEGORY_DATA: (
        "Advanced Data Science and Analytics",
        0.78,
        ["Statistical Analysis", "Machine Learning", "Data Visualization"],
        "Core data skills applicable across multiple analytical roles",
    ),
    CATEGORY_MANAGEMENT: (
        "Strategic Leadership and Project Management",
        0.72,
        ["Leadership", "Strategy", "Project Management"],
        "Essential management skills for leadership positions",
    ),
    CATEGORY_SECURITY: (
        "Applied Cybersecurity and Compliance",
        0.76,
        ["Threat Modeling", "Security Operations", "Compliance Frameworks"],
        "Shared security foundations for several protection-focused roles",
    ),
}


@dataclass
class SuggestionOutcome:
    suggested_courses: List[SuggestedCourse] = field(default_factory=list)
    job_suggestion_mappings: Dict[str, str] = field(default_factory=dict)
    gated_in: bool = False


@dataclass(frozen=True)
class JobGroup:
    key: str
    jobs: Tuple[str, ...]
    by_technology: bool
    shared: Tuple[str, ...] = ()


def should_suggest(total_jobs: int, unmapped_count: int, unused_courses: int, course_count: int) -> bool:
    """All four conditions must hold; unused courses always win over new suggestions."""
    if unused_courses > 0:
        return False
    if unmapped_count < max(MIN_UNMAPPED_FLOOR, MIN_UNMAPPED_SHARE * total_jobs):
        return False
    if unmapped_count < MIN_UNMAPPED_JOBS:
        return False
    return course_count >= MIN_COURSES


def extract_technologies(job: JobRecord) -> List[str]:
    text = " ".join([job.description or "", " ".join(job.skills)]).lower()
    if not text.strip():
        return []
    return [keyword for keyword, _label, pattern in _TECH_PATTERNS if pattern.search(text)]


def job_category(title: str) -> str:
    lowered = title.lower()
    for keywords, category in _CATEGORY_RULES:
        if any(keyword in lowered for keyword in keywords):
            return category
    return CATEGORY_GENERAL


def group_by_technology(jobs: Sequence[JobRecord]) -> List[JobGroup]:
    techs = {job.title: extract_technologies(job) for job in jobs}
    remaining = [job.title for job in jobs if techs[job.title]]
    order = {keyword: idx for idx, (keyword, _label) in enumerate(TECH_KEYWORDS)}
    groups: List[JobGroup] = []
    while len(groups) < MAX_SUGGESTIONS and remaining:
        counts = Counter(tech for title in remaining for tech in techs[title])
        tech, count = min(counts.items(), key=lambda item: (-item[1], order[item[0]]))
        if count < MIN_GROUP_SIZE:
            break
        members = [title for title in remaining if tech in techs[title]]
        shared_counts = Counter(t for title in members for t in techs[title])
        ranked = sorted(shared_counts.items(), key=lambda item: (-item[1], order[item[0]]))
        shared = [tech] + [t for t, c in ranked if t != tech and c >= MIN_GROUP_SIZE]
        groups.append(JobGroup(key=tech, jobs=tuple(members), by_technology=True, shared=tuple(shared[:3])))
        remaining = [title for title in remaining if title not in members]
    return groups


def group_by_category(titles: Sequence[str]) -> List[JobGroup]:
    buckets: Dict[str, List[str]] = {}
    for title in titles:
        buckets.setdefault(job_category(title), []).append(title)
    ranked = sorted(buckets.items(), key=lambda item: -len(item[1]))
    return [
        JobGroup(key=category, jobs=tuple(members), by_technology=False)
        for category, members in ranked
        if len(members) >= MIN_GROUP_SIZE
    ][:MAX_SUGGESTIONS]


def _group_threshold(group: JobGroup, thresholds: Dict[str, float]) -> float:
    values = [thresholds.get(title, 0.8) for title in group.jobs]
    return sum(values) / len(values) if values else 0.8


def build_suggestion(
    group: JobGroup,
    thresholds: Dict[str, float],
    created_at: Optional[str] = None,
) -> SuggestedCourse:
    created_at = created_at or utc_now_z()
    if group.by_technology:
        label = _TECH_LABELS.get(group.key, group.key.title())
        return SuggestedCourse(
            title=f"Applied {label} for Professional Practice",
            confidence=round(_group_threshold(group, thresholds) * 0.9, 2),
            skill_gaps=[_TECH_LABELS.get(t, t) for t in group.shared],
            related_jobs=list(group.jobs),
            reasoning=f"{label} is required by {len(group.jobs)} unmapped positions with no matching course",
            created_at=created_at,
        )
    template = _CATEGORY_TEMPLATES.get(group.key)
    if template is not None:
        title, confidence, skill_gaps, reasoning = template
        return SuggestedCourse(
            title=title,
            confidence=confidence,
            skill_gaps=list(skill_gaps),
            related_jobs=list(group.jobs),
            reasoning=reasoning,
            created_at=created_at,
        )
    return SuggestedCourse(
        title=f"{group.key} Fundamentals",
        confidence=round(thresholds.get(group.jobs[0], 0.8) * 0.9, 2),
        skill_gaps=["Core Skills", "Industry Knowledge"],
        related_jobs=list(group.jobs),
        reasoning=f"Foundational skills for {len(group.jobs)} related positions",
        created_at=created_at,
    )


class SuggestionStage:
    """Synthesizes at most two new-course suggestions, and only when existing courses are exhausted."""

    def run(
        self,
        jobs: Sequence[JobRecord],
        courses: Sequence[CourseRecord],
        mappings: Dict[str, str],
        thresholds: Dict[str, float],
    ) -> SuggestionOutcome:
        used = set(mappings.values())
        unused = [course.label for course in courses if course.label not in used]
        unmapped = [job for job in jobs if job.title not in mappings]
        gated_in = should_suggest(len(jobs), len(unmapped), len(unused), len(courses))
        logger.info(
            "[suggestions][gate] unused=%s unmapped=%s/%s courses=%s needs_suggestions=%s",
            len(unused),
            len(unmapped),
            len(jobs),
            len(courses),
            gated_in,
        )
        if not gated_in:
            return SuggestionOutcome()

        groups: List[JobGroup] = []
        if any(job.has_description or job.skills for job in unmapped):
            groups = group_by_technology(unmapped)
        if not groups:
            groups = group_by_category([job.title for job in unmapped])

        outcome = SuggestionOutcome(gated_in=True)
        created_at = utc_now_z()
        for group in groups:
            suggestion = build_suggestion(group, thresholds, created_at=created_at)
            outcome.suggested_courses.append(suggestion)
            for title in group.jobs:
                outcome.job_suggestion_mappings.setdefault(title, suggestion.title)
        logger.info("[suggestions][built] count=%s", len(outcome.suggested_courses))
        return outcome


def maybe_suggest(
    jobs: Sequence[JobRecord],
    courses: Sequence[CourseRecord],
    mappings: Dict[str, str],
    thresholds: Dict[str, float],
) -> SuggestionOutcome:
    return SuggestionStage().run(jobs, courses, mappings, thresholds)
