"""CV analysis cache and CV ownership database operations.

Analyses are cached per CV text hash and shared by everyone who uploads the
same text. Which user uploaded which CV, and when, lives in user_cvs.
"""

import hashlib
import json
from datetime import UTC, datetime

from jobhackr.db.connection import get_connection
from jobhackr.schemas.cv import CVAnalysis


def compute_cv_hash(cv_text: str) -> str:
    """Compute SHA256 hash of CV text for deduplication.

    Args:
        cv_text: Raw text extracted from CV.

    Returns:
        Hex-encoded SHA256 hash string.
    """
    return hashlib.sha256(cv_text.encode()).hexdigest()


def save_cv_analysis(cv_hash: str, analysis: CVAnalysis, raw_text: str) -> None:
    """Save (or replace) the analysis of a CV.

    Args:
        cv_hash: SHA256 hash of the CV text.
        analysis: Analysis produced by the text analyzer.
        raw_text: Original CV text.
    """
    analysis_json = analysis.model_dump_json(exclude={"cv_hash"})

    with get_connection() as db:
        cursor = db.cursor()
        ph = db.placeholder

        cursor.execute(f"DELETE FROM cv_analyses WHERE cv_hash = {ph}", (cv_hash,))

        if db.is_postgres:
            cursor.execute(
                f"""
                INSERT INTO cv_analyses (cv_hash, analysis_json, raw_text, created_at)
                VALUES ({ph}, {ph}, {ph}, NOW())
                """,
                (cv_hash, analysis_json, raw_text),
            )
        else:
            cursor.execute(
                f"""
                INSERT INTO cv_analyses (cv_hash, analysis_json, raw_text, created_at)
                VALUES ({ph}, {ph}, {ph}, {ph})
                """,
                (cv_hash, analysis_json, raw_text, datetime.now(UTC).isoformat()),
            )
        db.commit()


def link_user_cv(user_id: int, cv_hash: str, now: datetime | None = None) -> None:
    """Record that a user uploaded a CV, making it their most recent one.

    Uploading the same CV again only refreshes the upload time.

    Args:
        user_id: Uploading user.
        cv_hash: SHA256 hash of the uploaded CV text.
        now: Upload time (defaults to now).
    """
    now = now or datetime.now(UTC)

    with get_connection() as db:
        cursor = db.cursor()
        ph = db.placeholder
        cursor.execute(
            f"""
            INSERT INTO user_cvs (user_id, cv_hash, uploaded_at)
            VALUES ({ph}, {ph}, {ph})
            ON CONFLICT (user_id, cv_hash) DO UPDATE SET uploaded_at = excluded.uploaded_at
            """,
            (user_id, cv_hash, now if db.is_postgres else now.isoformat()),
        )
        db.commit()


def _row_to_analysis(row) -> CVAnalysis:
    analysis_data = row["analysis_json"]
    if isinstance(analysis_data, str):
        analysis_data = json.loads(analysis_data)
    analysis_data["cv_hash"] = row["cv_hash"]
    return CVAnalysis(**analysis_data)


def get_cv_analysis(cv_hash: str) -> CVAnalysis | None:
    """Retrieve a cached CV analysis by CV hash.

    Args:
        cv_hash: SHA256 hash of the CV text.

    Returns:
        CVAnalysis if found, None otherwise.
    """
    with get_connection() as db:
        cursor = db.cursor(dictionary=True)
        ph = db.placeholder
        cursor.execute(
            f"SELECT cv_hash, analysis_json FROM cv_analyses WHERE cv_hash = {ph}",
            (cv_hash,),
        )
        row = cursor.fetchone()

    if row is None:
        return None
    return _row_to_analysis(row)


def get_latest_cv_analysis(user_id: int) -> CVAnalysis | None:
    """Retrieve the analysis of the CV a user uploaded most recently."""
    with get_connection() as db:
        cursor = db.cursor(dictionary=True)
        ph = db.placeholder
        cursor.execute(
            f"""
            SELECT a.cv_hash, a.analysis_json
            FROM user_cvs u
            JOIN cv_analyses a ON a.cv_hash = u.cv_hash
            WHERE u.user_id = {ph}
            ORDER BY u.uploaded_at DESC, u.id DESC
            LIMIT 1
            """,
            (user_id,),
        )
        row = cursor.fetchone()

    if row is None:
        return None
    return _row_to_analysis(row)
