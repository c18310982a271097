"""Selection of the matches that are actually submitted."""

import logging
from collections.abc import Iterable

from jobhackr.config import AGGRESSIVE_MIN_MATCH_SCORE
from jobhackr.matching.filter import rank_matches, should_apply
from jobhackr.schemas.candidate import CandidateProfile
from jobhackr.schemas.match import GateResult, MatchResult

logger = logging.getLogger(__name__)


class ApplicationGate:
    """Decides which scored matches to submit for a user.

    Conservative mode uses the profile's own minimum score. Aggressive mode
    lowers the floor to a fixed value whatever the profile says; excluded
    companies and language mismatches stay blocked in both modes.
    """

    def __init__(self, aggressive_min_score: int = AGGRESSIVE_MIN_MATCH_SCORE):
        self.aggressive_min_score = aggressive_min_score

    def effective_threshold(self, profile: CandidateProfile) -> int:
        if profile.aggressive_search:
            return self.aggressive_min_score
        return profile.effective_min_match_score

    def select(
        self,
        matches: list[MatchResult],
        profile: CandidateProfile,
        slots_available: int,
        applied_keys: Iterable[str] = (),
        used_today: int = 0,
    ) -> GateResult:
        """Pick the matches to submit, best first.

        Args:
            matches: Scored matches for this user.
            profile: Candidate profile (threshold, mode, daily cap).
            slots_available: Remaining subscription quota slots.
            applied_keys: Company+title keys the user already applied to.
            used_today: Applications already submitted today, counted
                against the profile's own daily cap.

        Returns:
            GateResult. Running out of slots is reported through
            daily_limit_reached, never raised.
        """
        threshold = self.effective_threshold(profile)
        seen = set(applied_keys)
        limit = max(0, min(slots_available, profile.max_applications_per_day - used_today))

        selected: list[MatchResult] = []
        duplicates = 0
        below_threshold = 0
        truncated = False

        for match in rank_matches(matches):
            if not should_apply(match.match_score, match.match_reasons, threshold):
                below_threshold += 1
                continue

            key = match.job.dedup_key
            if key in seen:
                duplicates += 1
                continue

            if len(selected) >= limit:
                # Keep scanning so the skip counters cover the whole batch
                truncated = True
                continue

            seen.add(key)
            selected.append(match)

        daily_limit_reached = limit == 0 or truncated
        logger.info(
            f"Gate selected {len(selected)}/{len(matches)} matches "
            f"(threshold {threshold}, {limit} slots, {duplicates} duplicates)"
        )
        if daily_limit_reached:
            logger.info("Application limit reached for this period")

        return GateResult(
            selected=selected,
            effective_threshold=threshold,
            slots_available=max(0, slots_available),
            duplicates_skipped=duplicates,
            below_threshold=below_threshold,
            daily_limit_reached=daily_limit_reached,
        )
