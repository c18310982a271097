"""Shared utilities for jobhackr."""

import re

_NON_ALNUM = re.compile(r"[^a-z0-9]")


class JobHackrError(Exception):
    """Base class for errors surfaced to callers of the matching core."""

    pass


class ProfileNotFoundError(JobHackrError):
    """Raised when a candidate profile (or its job criteria) is absent."""

    pass


class InvalidJobListError(JobHackrError):
    """Raised when the job list handed to the scorer is not iterable."""

    pass


def normalize_key_part(value: str | None) -> str:
    """Lowercase and strip everything except ASCII letters and digits.

    Args:
        value: Raw string (company, title, location...).

    Returns:
        Normalized string, empty for None.
    """
    return _NON_ALNUM.sub("", (value or "").lower())


def dedup_key(company: str | None, title: str | None) -> str:
    """Build the company+title key used to detect repeat applications."""
    return f"{normalize_key_part(company)}-{normalize_key_part(title)}"
