from enum import Enum, IntEnum

from pydantic import BaseModel, Field, field_validator

from jobhackr.config import DEFAULT_MAX_APPLICATIONS_PER_DAY, DEFAULT_MIN_MATCH_SCORE
from jobhackr.schemas.job import normalize_language
from jobhackr.schemas.quota import SubscriptionTier

# Labels produced by the text analyzer or typed by users that map onto a level
_LEVEL_ALIASES = {
    "junior": "entry",
    "entry-level": "entry",
    "entry level": "entry",
    "mid-level": "mid",
    "mid level": "mid",
    "intermediate": "mid",
}


class ExperienceLevel(IntEnum):
    """Experience levels in ascending order.

    Use _missing_ for case-insensitive string parsing, including the
    analyzer's "junior" bucket which maps onto ENTRY.
    """

    ENTRY = 0
    MID = 1
    SENIOR = 2
    LEAD = 3
    EXECUTIVE = 4

    @classmethod
    def _missing_(cls, value):
        """Allow case-insensitive string lookup and common aliases."""
        if isinstance(value, str):
            value_lower = value.strip().lower()
            value_lower = _LEVEL_ALIASES.get(value_lower, value_lower)
            for member in cls:
                if member.name.lower() == value_lower:
                    return member
        return None

    @classmethod
    def parse(cls, value) -> "ExperienceLevel | None":
        """Parse a label, returning None instead of raising for unknown labels."""
        if value is None or value == "":
            return None
        try:
            return cls(value)
        except ValueError:
            return None


class RemotePreference(str, Enum):
    REMOTE_ONLY = "remote-only"
    HYBRID = "hybrid"
    ON_SITE = "on-site"
    FLEXIBLE = "flexible"


def _normalize_languages(values: list[str]) -> list[str]:
    normalized = []
    for value in values:
        code = normalize_language(value)
        if code and code not in normalized:
            normalized.append(code)
    return normalized


class UserRecord(BaseModel):
    """The parts of a stored user account the matching core reads."""

    id: int
    location: str | None = None
    years_of_experience: int | None = None
    spoken_languages: list[str] = Field(default_factory=lambda: ["en"])
    subscription_tier: SubscriptionTier = SubscriptionTier.FREE

    @field_validator("spoken_languages")
    @classmethod
    def _normalize_spoken(cls, value: list[str]) -> list[str]:
        return _normalize_languages(value)


class JobCriteria(BaseModel):
    """Stored job search criteria for a user."""

    job_titles: list[str] = Field(default_factory=list)
    industries: list[str] = Field(default_factory=list)
    locations: list[str] = Field(default_factory=list)
    remote_preference: RemotePreference | None = None
    willing_to_relocate: bool = False
    salary_min: int | None = None
    salary_max: int | None = None
    experience_level: str | None = None
    skills: list[str] = Field(default_factory=list)


class UserPreferences(BaseModel):
    """Stored search-behaviour preferences for a user."""

    max_applications_per_day: int = DEFAULT_MAX_APPLICATIONS_PER_DAY
    auto_apply_enabled: bool = True
    aggressive_search: bool = False
    min_match_score: int | None = DEFAULT_MIN_MATCH_SCORE
    excluded_companies: list[str] = Field(default_factory=list)
    priority_companies: list[str] = Field(default_factory=list)


class CandidateProfile(BaseModel):
    """Combined view of a user's criteria, preferences and latest CV analysis."""

    user_id: int | None = Field(default=None, description="Owning user, if persisted")
    spoken_languages: list[str] = Field(
        default_factory=lambda: ["en"],
        description="Languages the candidate can work in (ISO-639-1)",
    )
    job_titles: list[str] = Field(default_factory=list, description="Desired job titles")
    locations: list[str] = Field(default_factory=list, description="Desired locations")
    remote_preference: RemotePreference | None = None
    willing_to_relocate: bool = False
    experience_level: ExperienceLevel | None = None
    years_of_experience: int | None = Field(default=None, ge=0)
    skills: list[str] = Field(default_factory=list, description="Desired or held skills")
    industries: list[str] = Field(default_factory=list, description="Desired industries")
    salary_min: int | None = None
    salary_max: int | None = None
    excluded_companies: list[str] = Field(default_factory=list)
    priority_companies: list[str] = Field(default_factory=list)
    min_match_score: int | None = Field(
        default=DEFAULT_MIN_MATCH_SCORE,
        ge=0,
        le=100,
        description="Minimum score to apply; None falls back to the default",
    )
    max_applications_per_day: int = Field(default=DEFAULT_MAX_APPLICATIONS_PER_DAY, ge=0)
    aggressive_search: bool = False
    subscription_tier: SubscriptionTier = SubscriptionTier.FREE

    @field_validator("spoken_languages")
    @classmethod
    def _normalize_spoken(cls, value: list[str]) -> list[str]:
        return _normalize_languages(value)

    @field_validator("experience_level", mode="before")
    @classmethod
    def _lenient_level(cls, value):
        if isinstance(value, ExperienceLevel) or value is None:
            return value
        return ExperienceLevel.parse(value)

    @property
    def effective_min_match_score(self) -> int:
        if self.min_match_score is None:
            return DEFAULT_MIN_MATCH_SCORE
        return self.min_match_score
