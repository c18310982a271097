"""Parallel job search across several sources."""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed

from pydantic import ValidationError

from jobhackr.analysis.text_analyzer import TextAnalyzer
from jobhackr.config import MAX_JOBS_PER_SEARCH, SEARCH_MAX_WORKERS
from jobhackr.jobs.preprocessor import normalize_posting
from jobhackr.jobs.sources import JobSource
from jobhackr.schemas.candidate import CandidateProfile
from jobhackr.schemas.job import JobPosting

logger = logging.getLogger(__name__)


def _fetch_postings(
    source: JobSource,
    profile: CandidateProfile,
    analyzer: TextAnalyzer,
) -> list[JobPosting]:
    postings = []
    for raw in source.fetch(profile):
        if not isinstance(raw, dict):
            logger.warning(f"Skipping non-object job record from {source.name}: {raw!r:.80}")
            continue
        try:
            postings.append(normalize_posting(raw, analyzer, source=source.name))
        except ValidationError as e:
            logger.warning(f"Skipping invalid job record from {source.name}: {e}")
    return postings


def dedupe_postings(postings: list[JobPosting]) -> list[JobPosting]:
    """Drop postings whose company+title+location was already seen."""
    seen: set[str] = set()
    unique = []
    for posting in postings:
        if posting.listing_key in seen:
            continue
        seen.add(posting.listing_key)
        unique.append(posting)
    return unique


def search_all_sources(
    sources: list[JobSource],
    profile: CandidateProfile,
    analyzer: TextAnalyzer | None = None,
    max_workers: int = SEARCH_MAX_WORKERS,
    max_jobs: int = MAX_JOBS_PER_SEARCH,
) -> list[JobPosting]:
    """Fetch from every source in parallel and merge the results.

    A source that raises contributes zero jobs; the others are kept.
    Results are merged in source order, de-duplicated across sources and
    capped at `max_jobs`.

    Args:
        sources: Job sources to query.
        profile: Candidate the search is for.
        analyzer: Text analyzer for normalization (a default one if None).
        max_workers: Thread pool size.
        max_jobs: Maximum number of postings returned.

    Returns:
        Unique postings, in source order.
    """
    if not sources:
        return []

    analyzer = analyzer or TextAnalyzer()
    results: dict[int, list[JobPosting]] = {}

    with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(sources)))) as executor:
        future_to_index = {
            executor.submit(_fetch_postings, source, profile, analyzer): index
            for index, source in enumerate(sources)
        }

        for future in as_completed(future_to_index):
            index = future_to_index[future]
            source = sources[index]
            try:
                results[index] = future.result()
                logger.info(f"{source.name}: {len(results[index])} jobs")
            except Exception as e:
                logger.error(f"Job source {source.name} failed: {e}")
                results[index] = []

    merged = [posting for index in range(len(sources)) for posting in results[index]]
    unique = dedupe_postings(merged)

    logger.info(
        f"Job search complete: {len(merged)} fetched, {len(unique)} unique "
        f"from {len(sources)} sources"
    )
    return unique[:max_jobs]
