"""Additive rubric scoring of one job posting against one candidate."""

import logging
from collections.abc import Iterable
from enum import Enum

from pydantic import ValidationError

from jobhackr.matching.filter import (
    EXCLUDED_COMPANY_REASON,
    find_missing_skills,
    rank_matches,
    should_apply,
)
from jobhackr.schemas.candidate import CandidateProfile, ExperienceLevel, RemotePreference
from jobhackr.schemas.job import JobPosting
from jobhackr.schemas.match import MatchResult
from jobhackr.utils import InvalidJobListError, ProfileNotFoundError

logger = logging.getLogger(__name__)

LANGUAGE_MATCH_POINTS = 25
LANGUAGE_MISMATCH_PENALTY = -50
TITLE_EXACT_POINTS = 20
TITLE_CONTAINS_POINTS = 15
TITLE_TOKEN_POINTS = 10
LOCATION_POINTS = 15
RELOCATION_POINTS = 8
EXPERIENCE_POINTS = 15
SKILLS_MAX_POINTS = 10
INDUSTRY_POINTS = 5
SALARY_POINTS = 5
EXCLUDED_COMPANY_PENALTY = -20
PRIORITY_COMPANY_POINTS = 10

# Years of experience expected at each level: (min, max)
EXPERIENCE_YEAR_RANGES: dict[ExperienceLevel, tuple[int, int]] = {
    ExperienceLevel.ENTRY: (0, 2),
    ExperienceLevel.MID: (2, 5),
    ExperienceLevel.SENIOR: (5, 10),
    ExperienceLevel.LEAD: (8, 15),
    ExperienceLevel.EXECUTIVE: (12, 30),
}

# Candidates may exceed a level's upper bound by this many years
EXPERIENCE_OVERSHOOT_YEARS = 2


class TitleMatchStrategy(str, Enum):
    """How to pick among several desired titles.

    FIRST stops at the first desired title that matches at all. BEST keeps
    the highest-scoring desired title.
    """

    FIRST = "first"
    BEST = "best"


def _score_single_title(job_title: str, desired: str) -> int:
    if job_title == desired:
        return TITLE_EXACT_POINTS
    if desired in job_title or job_title in desired:
        return TITLE_CONTAINS_POINTS
    if set(job_title.split()) & set(desired.split()):
        return TITLE_TOKEN_POINTS
    return 0


def score_title(
    job_title: str,
    desired_titles: list[str],
    strategy: TitleMatchStrategy = TitleMatchStrategy.FIRST,
) -> tuple[int, str | None]:
    """Score a job title against the candidate's desired titles.

    Exact case-insensitive equality scores 20, containment in either
    direction 15, any shared whitespace token 10.

    Returns:
        (points, matched desired title or None).
    """
    job_lower = job_title.strip().lower()
    if not job_lower:
        return 0, None

    best_points, best_title = 0, None
    for desired in desired_titles:
        desired_lower = (desired or "").strip().lower()
        if not desired_lower:
            continue

        points = _score_single_title(job_lower, desired_lower)
        if points == 0:
            continue
        if strategy == TitleMatchStrategy.FIRST:
            return points, desired
        if points > best_points:
            best_points, best_title = points, desired

    return best_points, best_title


def score_location(job: JobPosting, profile: CandidateProfile) -> tuple[int, str | None]:
    """Score location fit, honouring a remote-only preference.

    Returns:
        (points, reason detail or None).
    """
    remote_only = profile.remote_preference == RemotePreference.REMOTE_ONLY

    if remote_only:
        if job.remote:
            return LOCATION_POINTS, "Remote position"
        return 0, None

    job_location = job.location.strip().lower()
    if job_location:
        for desired in profile.locations:
            desired_lower = (desired or "").strip().lower()
            if not desired_lower:
                continue
            if desired_lower in job_location or job_location in desired_lower:
                return LOCATION_POINTS, job.location

    if profile.willing_to_relocate:
        return RELOCATION_POINTS, "Open to relocation"

    return 0, None


def matches_experience(
    job_level: str | None,
    candidate_level: ExperienceLevel | None,
    years_of_experience: int | None,
) -> bool:
    """Check the candidate's experience against the job's level.

    Missing or unrecognised labels on either side count as a match. With
    known years, they must fall within the job's range (plus a small
    overshoot); otherwise the two level ranges must overlap.
    """
    parsed_job_level = ExperienceLevel.parse(job_level)
    if parsed_job_level is None or candidate_level is None:
        return True

    job_min, job_max = EXPERIENCE_YEAR_RANGES[parsed_job_level]
    if years_of_experience is not None:
        return job_min <= years_of_experience <= job_max + EXPERIENCE_OVERSHOOT_YEARS

    candidate_min, candidate_max = EXPERIENCE_YEAR_RANGES[candidate_level]
    return candidate_min <= job_max and candidate_max >= job_min


def score_skills(job_skills: list[str], candidate_skills: list[str]) -> tuple[int, list[str]]:
    """Score skill overlap out of 10.

    A candidate skill matches when it contains, or is contained in, any job
    skill (case-insensitive). Points are the matched share of the longer
    list, rounded half up.

    Returns:
        (points, matched candidate skills lowercased).
    """
    job_lower = [skill.lower() for skill in job_skills if skill]
    candidate_lower = [skill.lower() for skill in candidate_skills if skill]

    matched = [
        skill
        for skill in candidate_lower
        if any(job_skill in skill or skill in job_skill for job_skill in job_lower)
    ]
    if not matched:
        return 0, []

    denominator = max(len(job_lower), len(candidate_lower))
    # Integer round-half-up of SKILLS_MAX_POINTS * matched / denominator
    points = (2 * SKILLS_MAX_POINTS * len(matched) + denominator) // (2 * denominator)
    return points, matched


def matches_industry(job_industry: str | None, industries: list[str]) -> bool:
    if not job_industry:
        return False
    return job_industry.strip().lower() in {
        industry.strip().lower() for industry in industries if industry
    }


def matches_salary(salary: int | None, salary_min: int | None, salary_max: int | None) -> bool:
    """Missing salary or missing bounds are treated as a match."""
    if not salary:
        return True
    if salary_min and salary < salary_min:
        return False
    if salary_max and salary > salary_max:
        return False
    return True


def score_company(
    company: str,
    excluded_companies: list[str],
    priority_companies: list[str],
) -> tuple[int, str | None]:
    """Apply excluded/priority company preferences; exclusion wins."""
    company_lower = company.lower()

    def _listed(companies: list[str]) -> bool:
        return any(
            entry.strip().lower() in company_lower
            for entry in companies
            if entry and entry.strip()
        )

    if _listed(excluded_companies):
        return EXCLUDED_COMPANY_PENALTY, EXCLUDED_COMPANY_REASON
    if _listed(priority_companies):
        return PRIORITY_COMPANY_POINTS, "Priority company"
    return 0, None


class MatchScorer:
    """Scores job postings against a candidate profile.

    Scoring is pure: the same (job, profile) pair always yields an equal
    MatchResult.

    Args:
        title_strategy: How to choose among several desired titles.
    """

    def __init__(self, title_strategy: TitleMatchStrategy = TitleMatchStrategy.FIRST):
        self.title_strategy = title_strategy

    def score(self, job: JobPosting, profile: CandidateProfile) -> MatchResult:
        """Score one job against one candidate.

        Args:
            job: Posting to score.
            profile: Candidate to score against.

        Returns:
            MatchResult with the clamped score, ordered reasons and the
            apply decision.
        """
        score = 0
        reasons: list[str] = []

        language = job.language.upper()
        if job.language in profile.spoken_languages:
            score += LANGUAGE_MATCH_POINTS
            reasons.append(f"Language match: {language}")
        else:
            score += LANGUAGE_MISMATCH_PENALTY
            reasons.append(f"Language mismatch: Job requires {language}")

        title_points, matched_title = score_title(
            job.title, profile.job_titles, self.title_strategy
        )
        score += title_points
        if matched_title is not None:
            reasons.append(f"Title match: {matched_title}")

        location_points, location_detail = score_location(job, profile)
        score += location_points
        if location_detail is not None:
            reasons.append(f"Location match: {location_detail}")

        if matches_experience(
            job.experience_level, profile.experience_level, profile.years_of_experience
        ):
            score += EXPERIENCE_POINTS
            reasons.append("Experience level match")

        skill_points, matched_skills = score_skills(job.skills, profile.skills)
        score += skill_points
        if matched_skills:
            reasons.append(f"Skills match: {', '.join(matched_skills)}")

        if matches_industry(job.industry, profile.industries):
            score += INDUSTRY_POINTS
            reasons.append(f"Industry match: {job.industry}")

        if matches_salary(job.salary, profile.salary_min, profile.salary_max):
            score += SALARY_POINTS
            reasons.append("Salary within range")

        company_points, company_reason = score_company(
            job.company, profile.excluded_companies, profile.priority_companies
        )
        score += company_points
        if company_reason is not None:
            reasons.append(company_reason)

        final_score = max(0, min(100, score))

        return MatchResult(
            job=job,
            match_score=final_score,
            match_reasons=reasons,
            should_apply=should_apply(final_score, reasons, profile.min_match_score),
            missing_skills=find_missing_skills(job, profile.skills),
        )

    def score_jobs(self, jobs: Iterable[JobPosting], profile: CandidateProfile | None) -> list[MatchResult]:
        """Score every job and rank the results, best first.

        Equal scores keep their input order.

        Raises:
            ProfileNotFoundError: If no profile is given.
            InvalidJobListError: If jobs is not an iterable of postings.
        """
        if profile is None:
            raise ProfileNotFoundError("Candidate profile is required for scoring")
        if jobs is None or isinstance(jobs, (str, bytes, dict)):
            raise InvalidJobListError(f"Expected a list of job postings, got {type(jobs).__name__}")

        try:
            postings = [self._coerce_job(job) for job in jobs]
        except TypeError as e:
            raise InvalidJobListError(f"Job list is not iterable: {e}") from e

        matches = [self.score(job, profile) for job in postings]
        logger.info(
            f"Scored {len(matches)} jobs; {sum(m.should_apply for m in matches)} cleared the apply rules"
        )
        return rank_matches(matches)

    @staticmethod
    def _coerce_job(job) -> JobPosting:
        if isinstance(job, JobPosting):
            return job
        if isinstance(job, dict):
            try:
                return JobPosting.model_validate(job)
            except ValidationError as e:
                raise InvalidJobListError(f"Invalid job posting: {e}") from e
        raise InvalidJobListError(f"Invalid job posting of type {type(job).__name__}")
