"""Job sources: where raw job records come from."""

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path

import requests

from jobhackr.config import SOURCE_TIMEOUT
from jobhackr.schemas.candidate import CandidateProfile

logger = logging.getLogger(__name__)

USER_AGENT = "JobHackr/1.0"


class JobSource(ABC):
    """A provider of raw job records."""

    name: str = "unknown"

    @abstractmethod
    def fetch(self, profile: CandidateProfile) -> list[dict]:
        """Fetch raw job records relevant to a candidate.

        Implementations may raise; the search fan-out treats a failing
        source as contributing zero jobs.
        """


class FileJobSource(JobSource):
    """Job records read from a JSON file (a list, or {"jobs": [...]})."""

    def __init__(self, path: Path, name: str | None = None):
        self.path = Path(path)
        self.name = name or self.path.stem

    def fetch(self, profile: CandidateProfile) -> list[dict]:
        if not self.path.exists():
            raise FileNotFoundError(f"Jobs file not found: {self.path}")

        with open(self.path, encoding="utf-8") as f:
            data = json.load(f)

        if isinstance(data, dict):
            data = data.get("jobs", [])
        if not isinstance(data, list):
            raise ValueError(f"Jobs file must contain a list of jobs: {self.path}")

        logger.info(f"Loaded {len(data)} job records from {self.path}")
        return data


class HttpJobSource(JobSource):
    """Job records fetched from a JSON HTTP API.

    Args:
        name: Source name stamped on the postings.
        url: Endpoint returning a JSON list (or an object wrapping one).
        records_key: Key holding the list when the response is an object.
        params: Static query parameters.
        timeout: Request timeout in seconds.
    """

    def __init__(
        self,
        name: str,
        url: str,
        records_key: str | None = None,
        params: dict | None = None,
        timeout: int = SOURCE_TIMEOUT,
    ):
        self.name = name
        self.url = url
        self.records_key = records_key
        self.params = params or {}
        self.timeout = timeout

    def build_params(self, profile: CandidateProfile) -> dict:
        params = dict(self.params)
        if profile.job_titles:
            params.setdefault("q", " ".join(profile.job_titles))
        return params

    def parse_records(self, payload) -> list[dict]:
        if isinstance(payload, dict):
            payload = payload.get(self.records_key or "jobs", [])
        return [record for record in payload if isinstance(record, dict)]

    def fetch(self, profile: CandidateProfile) -> list[dict]:
        headers = {"User-Agent": USER_AGENT}

        try:
            response = requests.get(
                self.url,
                params=self.build_params(profile),
                headers=headers,
                timeout=self.timeout,
            )
            response.raise_for_status()
            records = self.parse_records(response.json())
            logger.info(f"Fetched {len(records)} job records from {self.name}")
            return records

        except requests.exceptions.RequestException as e:
            logger.error(f"Error fetching jobs from {self.name}: {e}")
            return []


class RemoteOKSource(HttpJobSource):
    """RemoteOK public API; every posting is remote."""

    def __init__(self, limit: int = 20, timeout: int = SOURCE_TIMEOUT):
        super().__init__(name="RemoteOK", url="https://remoteok.com/api", timeout=timeout)
        self.limit = limit

    def build_params(self, profile: CandidateProfile) -> dict:
        return {}

    def parse_records(self, payload) -> list[dict]:
        # The first element is API metadata, not a job
        records = [record for record in payload[1:] if isinstance(record, dict)]
        return [
            {**record, "remote": True, "location": record.get("location") or "Remote"}
            for record in records[: self.limit]
        ]
