"""Tests for job sources."""

from unittest.mock import MagicMock, patch

import pytest
import requests

from jobhackr.jobs.sources import FileJobSource, HttpJobSource, RemoteOKSource
from tests.test_utils import make_test_profile, write_json


def _response(payload) -> MagicMock:
    response = MagicMock()
    response.json.return_value = payload
    response.raise_for_status.return_value = None
    return response


class TestFileJobSource:
    def test_reads_list(self, tmp_path):
        path = write_json(tmp_path / "board.json", [{"id": "1", "title": "Dev"}])

        source = FileJobSource(path)

        assert source.name == "board"
        assert source.fetch(make_test_profile()) == [{"id": "1", "title": "Dev"}]

    def test_reads_wrapped_list(self, tmp_path):
        path = write_json(tmp_path / "jobs.json", {"jobs": [{"id": "1", "title": "Dev"}]})

        assert len(FileJobSource(path, name="custom").fetch(make_test_profile())) == 1

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            FileJobSource(tmp_path / "missing.json").fetch(make_test_profile())

    def test_non_list_raises(self, tmp_path):
        path = write_json(tmp_path / "jobs.json", "not a list")

        with pytest.raises(ValueError, match="list of jobs"):
            FileJobSource(path).fetch(make_test_profile())


class TestHttpJobSource:
    def test_fetches_records(self):
        source = HttpJobSource("board", "https://jobs.example.com/api", records_key="results")
        payload = {"results": [{"id": "1", "title": "Dev"}, "junk"]}

        with patch("jobhackr.jobs.sources.requests.get", return_value=_response(payload)) as get:
            records = source.fetch(make_test_profile(job_titles=["React Developer"]))

        assert records == [{"id": "1", "title": "Dev"}]
        assert get.call_args.kwargs["params"] == {"q": "React Developer"}

    def test_static_params_are_kept(self):
        source = HttpJobSource("board", "https://jobs.example.com/api", params={"q": "python"})

        assert source.build_params(make_test_profile()) == {"q": "python"}

    def test_request_error_returns_empty(self):
        source = HttpJobSource("board", "https://jobs.example.com/api")

        with patch(
            "jobhackr.jobs.sources.requests.get",
            side_effect=requests.exceptions.ConnectionError("down"),
        ):
            assert source.fetch(make_test_profile()) == []

    def test_http_error_returns_empty(self):
        source = HttpJobSource("board", "https://jobs.example.com/api")
        response = _response([])
        response.raise_for_status.side_effect = requests.exceptions.HTTPError("500")

        with patch("jobhackr.jobs.sources.requests.get", return_value=response):
            assert source.fetch(make_test_profile()) == []


class TestRemoteOKSource:
    def test_skips_metadata_and_marks_remote(self):
        payload = [
            {"legal": "API terms"},
            {"id": "1", "position": "Python Developer", "location": ""},
            {"id": "2", "position": "Go Developer", "location": "Europe"},
        ]

        with patch("jobhackr.jobs.sources.requests.get", return_value=_response(payload)):
            records = RemoteOKSource().fetch(make_test_profile())

        assert [r["id"] for r in records] == ["1", "2"]
        assert all(r["remote"] for r in records)
        assert records[0]["location"] == "Remote"
        assert records[1]["location"] == "Europe"

    def test_limit(self):
        payload = [{"legal": "terms"}] + [{"id": str(i)} for i in range(5)]

        with patch("jobhackr.jobs.sources.requests.get", return_value=_response(payload)):
            records = RemoteOKSource(limit=2).fetch(make_test_profile())

        assert len(records) == 2
