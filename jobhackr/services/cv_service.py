"""CV analysis with caching by CV text hash."""

import logging
from pathlib import Path

from jobhackr.analysis.text_analyzer import TextAnalyzer
from jobhackr.cv.extractor import extract_cv_text
from jobhackr.db.candidates import (
    compute_cv_hash,
    get_cv_analysis,
    link_user_cv,
    save_cv_analysis,
)
from jobhackr.schemas.cv import CVAnalysis

logger = logging.getLogger(__name__)


def get_or_analyze_cv(
    cv_text: str,
    user_id: int | None = None,
    analyzer: TextAnalyzer | None = None,
) -> tuple[CVAnalysis, bool]:
    """Get a CV analysis from cache or run the analyzer.

    Args:
        cv_text: Raw text extracted from the CV.
        user_id: Uploading user; the CV becomes their most recent one,
            whether or not its analysis was already cached.
        analyzer: Text analyzer to use (a default one if None).

    Returns:
        Tuple of (CVAnalysis, was_cached).
    """
    cv_hash = compute_cv_hash(cv_text)

    analysis = get_cv_analysis(cv_hash)
    was_cached = analysis is not None

    if was_cached:
        logger.info(f"Found cached CV analysis (hash: {cv_hash[:16]}...)")
    else:
        analyzer = analyzer or TextAnalyzer()
        analysis = analyzer.analyze_cv(cv_text).model_copy(update={"cv_hash": cv_hash})
        save_cv_analysis(cv_hash, analysis, cv_text)
        logger.info(f"Saved CV analysis to database (hash: {cv_hash[:16]}...)")

    if user_id is not None:
        link_user_cv(user_id, cv_hash)

    return analysis, was_cached


def analyze_cv_file(
    file_path: Path,
    user_id: int | None = None,
    analyzer: TextAnalyzer | None = None,
) -> tuple[CVAnalysis, bool]:
    """Extract a CV file's text and analyze it (cached)."""
    cv_text = extract_cv_text(file_path)
    logger.info(f"Extracted {len(cv_text)} characters from {file_path}")
    return get_or_analyze_cv(cv_text, user_id=user_id, analyzer=analyzer)
