"""Keyword dictionaries backing the text analyzer.

The dictionaries are configuration data: they are validated once from JSON
into a frozen model and handed to TextAnalyzer, which only reads them.
"""

import logging
from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType

from pydantic import BaseModel, ConfigDict, Field, field_validator

from jobhackr.config import KEYWORDS_PATH

logger = logging.getLogger(__name__)

DEFAULT_KEYWORDS_FILE = Path(__file__).parent / "keywords.json"

_default_dictionaries: "KeywordDictionaries | None" = None


class KeywordDictionaries(BaseModel):
    """Synonym tables used for keyword extraction.

    Mappings group keywords under a canonical category; iteration order is
    the order of the source file and determines output order.
    """

    model_config = ConfigDict(frozen=True)

    skills: Mapping[str, tuple[str, ...]] = Field(description="Skill category -> keywords")
    job_titles: Mapping[str, tuple[str, ...]] = Field(description="Title category -> keywords")
    industries: Mapping[str, tuple[str, ...]] = Field(description="Industry -> keywords")
    experience_levels: Mapping[str, tuple[str, ...]] = Field(
        description="Experience bucket (junior/mid/senior/executive) -> indicator keywords"
    )
    education: tuple[str, ...] = Field(default=(), description="Education markers")
    languages: tuple[str, ...] = Field(default=(), description="Spoken language names")
    language_indicators: Mapping[str, tuple[str, ...]] = Field(
        default_factory=dict,
        validate_default=True,
        description="Posting language -> indicator words (french, spanish, german)",
    )
    high_value_skills: tuple[str, ...] = Field(
        default=(), description="Skills that raise the suggested salary range"
    )
    action_verbs: tuple[str, ...] = Field(
        default=(), description="Verbs expected when describing accomplishments"
    )
    modern_practices: tuple[str, ...] = Field(
        default=(), description="Current technologies and methodologies worth mentioning"
    )
    soft_skills: tuple[str, ...] = Field(default=(), description="Soft skills worth mentioning")

    @field_validator(
        "skills", "job_titles", "industries", "experience_levels", "language_indicators"
    )
    @classmethod
    def _read_only(cls, value: Mapping[str, tuple[str, ...]]) -> Mapping[str, tuple[str, ...]]:
        return MappingProxyType(dict(value))


def load_dictionaries(path: Path) -> KeywordDictionaries:
    """Load and validate keyword dictionaries from a JSON file.

    Args:
        path: Path to a JSON file shaped like the packaged keywords.json.

    Returns:
        Frozen KeywordDictionaries.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        pydantic.ValidationError: If the file doesn't match the expected shape.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Keyword dictionary file not found: {path}")

    return KeywordDictionaries.model_validate_json(path.read_text(encoding="utf-8"))


def get_default_dictionaries() -> KeywordDictionaries:
    """Get the process-wide dictionaries, loading them on first use.

    Uses JOBHACKR_KEYWORDS_PATH when set, otherwise the packaged file.
    """
    global _default_dictionaries
    if _default_dictionaries is None:
        path = Path(KEYWORDS_PATH) if KEYWORDS_PATH else DEFAULT_KEYWORDS_FILE
        logger.info(f"Loading keyword dictionaries from {path}")
        _default_dictionaries = load_dictionaries(path)
    return _default_dictionaries
