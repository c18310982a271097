"""Service layer for JobHackr operations."""

from jobhackr.services.apply_service import match_jobs, run_auto_apply
from jobhackr.services.cv_service import analyze_cv_file, get_or_analyze_cv
from jobhackr.services.profile_service import build_candidate_profile, load_profile_file

__all__ = [
    "match_jobs",
    "run_auto_apply",
    "analyze_cv_file",
    "get_or_analyze_cv",
    "build_candidate_profile",
    "load_profile_file",
]
