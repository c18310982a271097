"""Submitted application records."""

import logging
from datetime import UTC, datetime

from jobhackr.db.connection import DatabaseConnection, get_connection, write_transaction
from jobhackr.db.quotas import _claim_slots
from jobhackr.schemas.match import MatchResult

logger = logging.getLogger(__name__)


def get_applied_keys(user_id: int) -> set[str]:
    """Get the company+title keys a user has already applied to.

    Args:
        user_id: User to look up.

    Returns:
        Set of dedup keys (empty if none).
    """
    with get_connection() as db:
        cursor = db.cursor()
        ph = db.placeholder
        cursor.execute(
            f"SELECT dedup_key FROM applications WHERE user_id = {ph}",
            (user_id,),
        )
        rows = cursor.fetchall()

    return {row[0] for row in rows}


def _insert_applications(db: DatabaseConnection, user_id: int, matches: list[MatchResult]) -> int:
    cursor = db.cursor()
    ph = db.placeholder
    now = datetime.now(UTC).isoformat()

    saved = 0
    for match in matches:
        job = match.job
        cursor.execute(
            f"""
            INSERT INTO applications
            (user_id, dedup_key, job_hash, company, title, location, source,
             match_score, created_at)
            VALUES ({ph}, {ph}, {ph}, {ph}, {ph}, {ph}, {ph}, {ph}, {ph})
            ON CONFLICT (user_id, dedup_key) DO NOTHING
            """,
            (
                user_id,
                job.dedup_key,
                job.job_hash,
                job.company,
                job.title,
                job.location,
                job.source,
                match.match_score,
                now,
            ),
        )
        saved += cursor.rowcount
    return saved


def record_applications(user_id: int, matches: list[MatchResult]) -> int:
    """Store one application record per submitted match.

    Records whose company+title key already exists for the user are
    ignored.

    Args:
        user_id: User the applications belong to.
        matches: Matches that were submitted.

    Returns:
        Number of new records stored.
    """
    if not matches:
        return 0

    with get_connection() as db:
        saved = _insert_applications(db, user_id, matches)
        db.commit()

    return saved


def submit_applications(
    user_id: int, matches: list[MatchResult], now: datetime | None = None
) -> list[MatchResult]:
    """Claim quota slots and record the applications they cover.

    Both happen in one write transaction: if storing the records fails the
    claimed slots are rolled back with them.

    Args:
        user_id: User applying.
        matches: Matches to submit, best first.
        now: Current local time (defaults to now).

    Returns:
        The leading matches that were granted a slot and recorded.
    """
    now = now or datetime.now()
    if not matches:
        return []

    with write_transaction() as db:
        tier, granted = _claim_slots(db, user_id, len(matches), now)
        submitted = matches[:granted]
        _insert_applications(db, user_id, submitted)

    if granted < len(matches):
        logger.warning(f"User {user_id}: only {granted} of {len(matches)} slots granted")
    logger.info(f"User {user_id}: recorded {granted} applications ({tier.value})")
    return submitted
