import hashlib
import re
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from jobhackr.utils import dedup_key as make_dedup_key
from jobhackr.utils import normalize_key_part

# Accepted spellings for posting/spoken languages, normalized to ISO-639-1
LANGUAGE_CODES: dict[str, str] = {
    "english": "en",
    "french": "fr",
    "francais": "fr",
    "français": "fr",
    "spanish": "es",
    "espanol": "es",
    "español": "es",
    "german": "de",
    "deutsch": "de",
    "italian": "it",
    "portuguese": "pt",
    "mandarin": "zh",
    "chinese": "zh",
    "japanese": "ja",
    "korean": "ko",
    "arabic": "ar",
    "russian": "ru",
}


def normalize_language(value: str | None) -> str | None:
    """Normalize a language name or tag to its two-letter code.

    Unknown values are lowercased and returned unchanged so that custom
    tags still compare consistently.
    """
    if value is None:
        return None
    cleaned = value.strip().lower()
    if not cleaned:
        return None
    # Region-qualified tags such as "en-US" or "fr_FR"
    base = re.split(r"[-_]", cleaned, maxsplit=1)[0]
    return LANGUAGE_CODES.get(cleaned) or LANGUAGE_CODES.get(base) or base


class JobPosting(BaseModel):
    """A job posting returned by a job source. Immutable once fetched."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Source-specific identifier for the posting")
    title: str = Field(description="Job title")
    company: str = Field(default="", description="Hiring company name")
    location: str = Field(default="", description="Job location as free text")
    description: str = Field(default="", description="Free-text job description")
    salary: int | None = Field(default=None, description="Annual salary, if advertised")
    experience_level: str | None = Field(
        default=None,
        description="Required experience level: entry, mid, senior, lead or executive",
    )
    job_type: str | None = Field(default=None, description="full-time, part-time, contract...")
    industry: str | None = Field(default=None, description="Industry category")
    remote: bool = Field(default=False, description="Whether the position is remote")
    language: str = Field(default="en", description="Language of the posting (ISO-639-1)")
    skills: list[str] = Field(default_factory=list, description="Skills required by the job")
    source: str = Field(default="unknown", description="Job board or API the posting came from")
    url: str | None = Field(default=None, description="Link to apply")
    posted_at: datetime | None = Field(default=None, description="When the job was posted")

    @field_validator("language", mode="before")
    @classmethod
    def _normalize_language(cls, value):
        return normalize_language(value) or "en"

    @property
    def job_hash(self) -> str:
        """Stable identity of the posting across sources and runs."""
        raw = "-".join(
            normalize_key_part(part)
            for part in (self.source, self.company, self.title, self.location)
        )
        return hashlib.sha256(raw.encode()).hexdigest()

    @property
    def listing_key(self) -> str:
        """Company+title+location key; the same listing on two boards shares it."""
        return "-".join(
            normalize_key_part(part) for part in (self.company, self.title, self.location)
        )

    @property
    def dedup_key(self) -> str:
        """Company+title key used to detect repeat applications."""
        return make_dedup_key(self.company, self.title)
