"""Candidate profile assembly from stored user data and CV analysis."""

import json
import logging
from pathlib import Path

from pydantic import BaseModel

from jobhackr.schemas.candidate import CandidateProfile, JobCriteria, UserPreferences, UserRecord
from jobhackr.schemas.cv import CVAnalysis
from jobhackr.utils import ProfileNotFoundError

logger = logging.getLogger(__name__)


class ProfileBundle(BaseModel):
    """The stored records a candidate profile is built from."""

    user: UserRecord
    criteria: JobCriteria | None = None
    preferences: UserPreferences | None = None
    cv_analysis: CVAnalysis | None = None


def build_candidate_profile(
    user: UserRecord | None,
    criteria: JobCriteria | None,
    preferences: UserPreferences | None = None,
    cv_analysis: CVAnalysis | None = None,
) -> CandidateProfile:
    """Combine a user's criteria, preferences and latest CV analysis.

    Explicit criteria win; the CV analysis only fills titles, skills,
    experience level and years the user left empty.

    Args:
        user: Stored user account.
        criteria: Stored job search criteria.
        preferences: Stored preferences (defaults when None).
        cv_analysis: Most recent CV analysis, if any.

    Returns:
        CandidateProfile ready for scoring.

    Raises:
        ProfileNotFoundError: If the user or their criteria are missing.
    """
    if user is None:
        raise ProfileNotFoundError("User not found")
    if criteria is None:
        raise ProfileNotFoundError(f"No job criteria stored for user {user.id}")

    preferences = preferences or UserPreferences()

    job_titles = criteria.job_titles
    skills = criteria.skills
    experience_level = criteria.experience_level
    years_of_experience = user.years_of_experience

    if cv_analysis is not None:
        job_titles = job_titles or cv_analysis.job_titles
        skills = skills or cv_analysis.skills
        experience_level = experience_level or cv_analysis.experience
        if years_of_experience is None:
            years_of_experience = cv_analysis.years_of_experience

    locations = criteria.locations
    if not locations and user.location:
        locations = [user.location]

    return CandidateProfile(
        user_id=user.id,
        spoken_languages=user.spoken_languages,
        job_titles=job_titles,
        locations=locations,
        remote_preference=criteria.remote_preference,
        willing_to_relocate=criteria.willing_to_relocate,
        experience_level=experience_level,
        years_of_experience=years_of_experience,
        skills=skills,
        industries=criteria.industries,
        salary_min=criteria.salary_min,
        salary_max=criteria.salary_max,
        excluded_companies=preferences.excluded_companies,
        priority_companies=preferences.priority_companies,
        min_match_score=preferences.min_match_score,
        max_applications_per_day=preferences.max_applications_per_day,
        aggressive_search=preferences.aggressive_search,
        subscription_tier=user.subscription_tier,
    )


def load_profile_file(path: Path) -> CandidateProfile:
    """Load a candidate profile from JSON.

    The file holds either a flat CandidateProfile or a
    {user, criteria, preferences, cv_analysis} bundle.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ProfileNotFoundError: If a bundle lacks its criteria.
        pydantic.ValidationError: If the content doesn't validate.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Profile file not found: {path}")

    with open(path, encoding="utf-8") as f:
        data = json.load(f)

    if isinstance(data, dict) and "user" in data:
        bundle = ProfileBundle.model_validate(data)
        logger.info(f"Building profile for user {bundle.user.id} from {path}")
        return build_candidate_profile(
            bundle.user, bundle.criteria, bundle.preferences, bundle.cv_analysis
        )

    return CandidateProfile.model_validate(data)
