"""Scoring and automatic application pipeline.

This service handles:
- Scoring fetched postings against a candidate profile
- Selecting what to submit through the application gate
- Claiming quota slots and recording the submitted applications
"""

import logging
from datetime import datetime

from jobhackr.db.applications import get_applied_keys, submit_applications
from jobhackr.db.quotas import get_quota_status
from jobhackr.matching.gate import ApplicationGate
from jobhackr.matching.scorer import MatchScorer
from jobhackr.schemas.candidate import CandidateProfile
from jobhackr.schemas.job import JobPosting
from jobhackr.schemas.match import AutoApplyReport, MatchResult

logger = logging.getLogger(__name__)


def match_jobs(
    jobs: list[JobPosting],
    profile: CandidateProfile,
    scorer: MatchScorer | None = None,
    top_n: int | None = None,
) -> list[MatchResult]:
    """Score postings for a candidate, best first.

    Args:
        jobs: Postings to score.
        profile: Candidate profile.
        scorer: Scorer to use (default title strategy if None).
        top_n: Maximum number of results to return (None for all).

    Returns:
        Ranked MatchResult list.
    """
    scorer = scorer or MatchScorer()
    matches = scorer.score_jobs(jobs, profile)
    if top_n is not None:
        matches = matches[:top_n]
    return matches


def run_auto_apply(
    user_id: int,
    profile: CandidateProfile,
    jobs: list[JobPosting],
    now: datetime | None = None,
    scorer: MatchScorer | None = None,
    gate: ApplicationGate | None = None,
) -> AutoApplyReport:
    """Score, gate and record applications for one user.

    Pipeline:
    1. Read the user's quota for the current periods
    2. Score and rank every posting
    3. Select matches through the gate (threshold, duplicates, slots)
    4. Claim quota slots and record the granted matches in one transaction

    Args:
        user_id: User applying.
        profile: Candidate profile for the user.
        jobs: Postings fetched for this run.
        now: Current local time (defaults to now).
        scorer: Scorer to use.
        gate: Application gate to use.

    Returns:
        AutoApplyReport with the gate outcome and quota after the run.
    """
    now = now or datetime.now()
    gate = gate or ApplicationGate()

    status = get_quota_status(user_id, now)
    logger.info(
        f"User {user_id}: {status.applications_left} applications left "
        f"({status.tier.value} tier)"
    )

    matches = match_jobs(jobs, profile, scorer=scorer)
    gate_result = gate.select(
        matches,
        profile,
        slots_available=status.applications_left,
        applied_keys=get_applied_keys(user_id),
        used_today=status.used_today,
    )

    submitted = submit_applications(user_id, gate_result.selected, now)

    logger.info(f"User {user_id}: submitted {len(submitted)} applications")

    return AutoApplyReport(
        user_id=user_id,
        jobs_scored=len(matches),
        gate=gate_result,
        submitted=submitted,
        quota=get_quota_status(user_id, now),
    )
