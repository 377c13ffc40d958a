"""
Pathfinder Engine
Copyright (c) 2026 Chris Menendez.
All Rights Reserved.
See LICENSE for permitted use.
"""

from __future__ import annotations

from typing import Dict, List, Sequence

from pf_engine.models import CourseRecord, JobRecord

DESCRIPTION_PREVIEW_CHARS = 200
CONNECTION_TEST_PROMPT = 'Respond with exactly: "API connection successful"'

THRESHOLD_RUBRIC: List[tuple[str, str]] = [
    ("0.90-0.95", "Critical roles (security, healthcare, finance) requiring extensive formal training"),
    ("0.85-0.90", "Senior technical roles requiring deep theoretical knowledge"),
    ("0.80-0.85", "Standard engineering roles needing solid foundations"),
    ("0.75-0.80", "Balanced roles mixing theory and practice"),
    ("0.70-0.75", "Creative/flexible roles where experience matters more"),
    ("0.65-0.70", "Experience-based roles with moderate formal requirements"),
    ("0.60-0.65", "Hands-on roles where practical experience dominates"),
]

CONFIDENCE_BANDS: List[tuple[str, str]] = [
    ("90-100%", "Perfect match"),
    ("70-89%", "Good match (STILL MAP IT)"),
    ("60-69%", "Acceptable match (STILL MAP IT)"),
    ("50-59%", "Marginal match (STILL MAP IT if course available)"),
    ("Below 50%", "Only then skip mapping"),
]


def build_threshold_prompt(job_titles: Sequence[str]) -> str:
    rubric = "\n".join(f"- {band}: {text}" for band, text in THRESHOLD_RUBRIC)
    return f"""You are an educational adequacy analyst. Determine what percentage of each job's skills should be learned through formal education vs on-the-job experience.

SCORING GUIDE:
{rubric}

Analyze these job titles: {", ".join(job_titles)}

MANDATORY RESPONSE FORMAT (return valid JSON only):
{{
  "threshold_analysis": [
    {{
      "job_title": "Job Title Here",
      "threshold": 0.75,
      "reasoning": "One sentence explanation based on scoring guide"
    }}
  ]
}}"""


def truncate_description(text: str, limit: int = DESCRIPTION_PREVIEW_CHARS) -> str:
    text = " ".join(text.split())
    if len(text) <= limit:
        return text
    return text[:limit]


def build_mapping_prompt(
    jobs: Sequence[JobRecord],
    courses: Sequence[CourseRecord],
    thresholds: Dict[str, float],
) -> str:
    threshold_context = "\n".join(
        f"- {job.title}: {thresholds[job.title] * 100:.0f}% adequacy threshold" for job in jobs if job.title in thresholds
    )
    described = [job for job in jobs if job.has_description]
    description_block = ""
    if described:
        lines = [f"- {job.title}: {truncate_description(job.description or '')}" for job in described]
        description_block = "\nJOB DESCRIPTIONS (truncated):\n" + "\n".join(lines) + "\n"
    bands = "\n".join(f"   - {band}: {text}" for band, text in CONFIDENCE_BANDS)
    course_labels = ", ".join(course.label for course in courses)

    return f"""You are a career path analysis expert. Create optimal job-to-course mappings using AI-determined educational adequacy standards.

CONTEXT: Each job has a different educational adequacy threshold:
{threshold_context}
{description_block}
CRITICAL RULES:
1. ALWAYS prioritize mapping to EXISTING AVAILABLE COURSES first
2. Map each job to the BEST MATCHING available course from the list provided
3. Use confidence levels as follows:
{bands}
4. Consider the SPECIFIC adequacy threshold for each job
5. NEVER suggest new courses - ALWAYS use existing courses even if imperfect
6. Return response as valid JSON only

MANDATORY: You have {len(courses)} courses available. You MUST use existing courses for ALL jobs. Do NOT suggest any new courses under any circumstances.

JOB TITLES: {", ".join(job.title for job in jobs)}
AVAILABLE COURSES: {course_labels}

MANDATORY RESPONSE FORMAT (return valid JSON only):
{{
  "mappings": {{
    "Job Title": "Course Name"
  }},
  "reasoning": {{
    "Job Title": "Explanation of why this course matches"
  }},
  "confidence_scores": {{
    "Job Title": 0.75
  }}
}}"""
