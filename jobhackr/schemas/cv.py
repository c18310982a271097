from pydantic import BaseModel, Field


class CVAnalysis(BaseModel):
    """Structured signals extracted from a CV by keyword matching.

    Derived once per CV and cached; scoring reads it but never mutates it.
    """

    skills: list[str] = Field(
        default_factory=list,
        description="Canonical skill categories and the specific keywords matched",
    )
    experience: str = Field(
        default="mid",
        description="Experience bucket: junior, mid, senior or executive",
    )
    years_of_experience: int | None = Field(
        default=None,
        description="Largest 'N years of experience' figure found in the text",
    )
    job_titles: list[str] = Field(default_factory=list, description="Job-title categories")
    industries: list[str] = Field(default_factory=list, description="Industry categories")
    education: list[str] = Field(default_factory=list, description="Education markers")
    languages: list[str] = Field(default_factory=list, description="Spoken languages mentioned")
    score: int = Field(default=0, ge=0, le=100, description="Overall CV strength score")
    strengths: list[str] = Field(default_factory=list)
    improvements: list[str] = Field(default_factory=list)
    writing_suggestions: list[str] = Field(
        default_factory=list,
        description="How the CV text itself could be written more convincingly",
    )
    summary: str = ""
    cv_hash: str | None = Field(default=None, description="SHA256 of the analysed CV text")


class CVValidation(BaseModel):
    """Quality check of raw CV content."""

    is_valid: bool
    score: int
    issues: list[str] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)


class SalaryRange(BaseModel):
    min: int
    max: int


class CriteriaSuggestion(BaseModel):
    """Job criteria proposed from a CV analysis."""

    suggested_job_titles: list[str]
    suggested_skills: list[str]
    suggested_industries: list[str]
    suggested_salary_range: SalaryRange
    reasoning: str
