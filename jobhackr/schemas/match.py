from pydantic import BaseModel, Field

from jobhackr.schemas.job import JobPosting
from jobhackr.schemas.quota import QuotaStatus


class MatchResult(BaseModel):
    """Result of scoring one job posting against one candidate profile."""

    job: JobPosting = Field(description="The scored job posting")
    match_score: int = Field(ge=0, le=100, description="Rubric score clamped to 0-100")
    match_reasons: list[str] = Field(
        default_factory=list,
        description="Human-readable reasons, in rubric order",
    )
    should_apply: bool = Field(description="Whether the match clears the apply rules")
    missing_skills: list[str] = Field(
        default_factory=list,
        description="Job skills not found in the candidate's skills (informational)",
    )


class GateResult(BaseModel):
    """Outcome of selecting which matches to actually submit."""

    selected: list[MatchResult] = Field(default_factory=list)
    effective_threshold: int = Field(description="Score floor applied for this run")
    slots_available: int = Field(ge=0, description="Applications still allowed this period")
    duplicates_skipped: int = 0
    below_threshold: int = 0
    daily_limit_reached: bool = False


class AutoApplyReport(BaseModel):
    """Summary of one automatic apply run for a user."""

    user_id: int
    jobs_scored: int = 0
    gate: GateResult
    submitted: list[MatchResult] = Field(default_factory=list)
    quota: QuotaStatus
