"""Deterministic apply rules and ranking for scored matches."""

from rapidfuzz import fuzz

from jobhackr.config import DEFAULT_MIN_MATCH_SCORE, SKILL_MATCH_THRESHOLD
from jobhackr.schemas.job import JobPosting
from jobhackr.schemas.match import MatchResult

EXCLUDED_COMPANY_REASON = "Excluded company"
LANGUAGE_MISMATCH_MARKER = "Language mismatch"


def has_blocking_reason(reasons: list[str]) -> bool:
    """Check for reasons that veto an application regardless of score."""
    if EXCLUDED_COMPANY_REASON in reasons:
        return True
    return any(LANGUAGE_MISMATCH_MARKER in reason for reason in reasons)


def should_apply(
    match_score: int,
    reasons: list[str],
    min_match_score: int | None = DEFAULT_MIN_MATCH_SCORE,
) -> bool:
    """Decide whether a scored job clears the apply rules.

    The score must reach the threshold, and neither an excluded company nor
    a language mismatch may appear among the reasons. The reason checks
    still matter when the threshold is low enough for a mismatched job to
    pass on score alone.

    Args:
        match_score: Clamped rubric score.
        reasons: Match reasons produced by the scorer.
        min_match_score: Score floor. None falls back to the default; 0 is
            a valid explicit floor.

    Returns:
        True if the job should be applied to.
    """
    threshold = DEFAULT_MIN_MATCH_SCORE if min_match_score is None else min_match_score
    if match_score < threshold:
        return False
    return not has_blocking_reason(reasons)


def rank_matches(matches: list[MatchResult], top_n: int | None = None) -> list[MatchResult]:
    """Sort matches by score descending, keeping input order for equal scores.

    Args:
        matches: Scored matches.
        top_n: Maximum number of results to return (None for all).

    Returns:
        New list of matches, best first.
    """
    ranked = sorted(matches, key=lambda match: match.match_score, reverse=True)
    if top_n is not None:
        ranked = ranked[:top_n]
    return ranked


def find_missing_skills(
    job: JobPosting,
    candidate_skills: list[str],
    threshold: int = SKILL_MATCH_THRESHOLD,
) -> list[str]:
    """Identify skills listed on the job that the candidate doesn't have.

    Uses RapidFuzz so that spelling variants ("nodejs" / "node.js") count as
    held skills.

    Args:
        job: Job posting with a skills list.
        candidate_skills: Skills held or desired by the candidate.
        threshold: Minimum fuzzy ratio (0-100) for a skill to count as held.

    Returns:
        Job skills not matched by any candidate skill, in job order.
    """
    if not job.skills:
        return []

    candidate_terms = {skill.lower() for skill in candidate_skills if skill}

    return [
        skill
        for skill in job.skills
        if not any(
            fuzz.ratio(skill.lower(), term) >= threshold for term in candidate_terms
        )
    ]
