"""Shared test utility functions."""

import json
from pathlib import Path

from jobhackr.schemas.candidate import CandidateProfile
from jobhackr.schemas.job import JobPosting
from jobhackr.schemas.match import MatchResult


def make_test_job(
    id: str = "job-1",
    title: str = "Senior React Developer",
    company: str = "Acme",
    location: str = "Remote",
    skills: list[str] | None = None,
    language: str = "en",
    remote: bool = True,
    **kwargs,
) -> JobPosting:
    """Create a dummy job posting for testing."""
    return JobPosting(
        id=id,
        title=title,
        company=company,
        location=location,
        skills=skills if skills is not None else ["react", "javascript", "git"],
        language=language,
        remote=remote,
        **kwargs,
    )


def make_test_profile(
    job_titles: list[str] | None = None,
    skills: list[str] | None = None,
    spoken_languages: list[str] | None = None,
    remote_preference: str | None = "remote-only",
    **kwargs,
) -> CandidateProfile:
    """Create a dummy candidate profile for testing."""
    return CandidateProfile(
        job_titles=job_titles if job_titles is not None else ["React Developer"],
        skills=skills if skills is not None else ["react", "javascript"],
        spoken_languages=spoken_languages if spoken_languages is not None else ["english"],
        remote_preference=remote_preference,
        **kwargs,
    )


def make_test_match(
    score: int,
    company: str = "Acme",
    title: str = "Developer",
    reasons: list[str] | None = None,
    should_apply: bool = True,
) -> MatchResult:
    """Create a scored match without running the scorer."""
    return MatchResult(
        job=make_test_job(id=f"{company}-{title}", company=company, title=title),
        match_score=score,
        match_reasons=reasons if reasons is not None else ["Language match: EN"],
        should_apply=should_apply,
    )


def write_json(path: Path, data) -> Path:
    """Write JSON test data to a file and return its path."""
    path.write_text(json.dumps(data), encoding="utf-8")
    return path
