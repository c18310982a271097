"""Normalization of raw job-source records into JobPosting objects."""

import re
from datetime import UTC, datetime
from html.parser import HTMLParser

from jobhackr.analysis.text_analyzer import TextAnalyzer
from jobhackr.schemas.job import JobPosting


class HTMLTextExtractor(HTMLParser):
    """Extract plain text from HTML content."""

    def __init__(self):
        super().__init__()
        self.text_parts = []

    def handle_data(self, data: str) -> None:
        self.text_parts.append(data)

    def get_text(self) -> str:
        return " ".join(self.text_parts)


def strip_html(html: str | None) -> str:
    """Remove HTML tags and return plain text with collapsed whitespace."""
    if not html:
        return ""
    parser = HTMLTextExtractor()
    parser.feed(html)
    parser.close()
    return re.sub(r"\s+", " ", parser.get_text()).strip()


def _first(raw: dict, *keys: str):
    for key in keys:
        value = raw.get(key)
        if value not in (None, ""):
            return value
    return None


def _parse_location(value) -> str:
    # Some APIs return {"city": ..., "name": ...}; prefer the city
    if isinstance(value, dict):
        return value.get("city") or value.get("name") or ""
    return str(value or "")


def _parse_salary(raw: dict) -> int | None:
    value = _first(raw, "salary", "salary_min", "salaryMin")
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return int(value)
    # "$85,000 - $110,000" style strings: keep the lower bound
    digits = re.search(r"\d[\d,]*", str(value))
    if digits is None:
        return None
    return int(digits.group().replace(",", ""))


def _parse_posted_at(value) -> datetime | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value, UTC)
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None


def _parse_remote(raw: dict, location: str) -> bool:
    value = _first(raw, "remote", "is_remote")
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in ("true", "yes", "1", "remote")
    workplace = str(raw.get("workplace_type") or "").lower()
    return "remote" in location.lower() or "remote" in workplace


def normalize_posting(
    raw: dict,
    analyzer: TextAnalyzer,
    source: str | None = None,
) -> JobPosting:
    """Build a JobPosting from a raw record of any supported source.

    Accepts both snake_case and camelCase keys, strips HTML from the
    description, detects the posting language from the description when the
    record carries none, and fills missing skills, industry and level from
    the text.

    Args:
        raw: Raw record as returned by a job source.
        analyzer: Text analyzer used for detection and enrichment.
        source: Source name to use when the record doesn't name one.

    Returns:
        Normalized, enriched JobPosting.

    Raises:
        pydantic.ValidationError: If required fields (title) are missing.
    """
    title = _first(raw, "title", "position", "name")
    description = strip_html(_first(raw, "description", "text", "details"))
    location = _parse_location(raw.get("location"))

    language = _first(raw, "language", "lang")
    if language is None:
        language = analyzer.detect_language(f"{title or ''} {description}")

    skills = _first(raw, "skills", "tags") or []

    posting = JobPosting(
        id=str(_first(raw, "id", "uid") or ""),
        title=title,
        company=str(_first(raw, "company", "company_name", "companyName") or ""),
        location=location,
        description=description,
        salary=_parse_salary(raw),
        experience_level=_first(raw, "experience_level", "experienceLevel"),
        job_type=_first(raw, "job_type", "jobType", "employment_type"),
        industry=_first(raw, "industry"),
        remote=_parse_remote(raw, location),
        language=language,
        skills=[str(skill) for skill in skills],
        source=str(_first(raw, "source") or source or "unknown"),
        url=_first(raw, "url", "position_url"),
        posted_at=_parse_posted_at(_first(raw, "posted_at", "postedAt", "posted", "date")),
    )

    return analyzer.enrich_job(posting)
