"""Tests for CV analysis cache and application records."""

from datetime import UTC, datetime
from unittest.mock import patch

import pytest

from jobhackr.db import applications
from jobhackr.db.applications import get_applied_keys, record_applications, submit_applications
from jobhackr.db.candidates import (
    compute_cv_hash,
    get_cv_analysis,
    get_latest_cv_analysis,
    link_user_cv,
    save_cv_analysis,
)
from jobhackr.db.connection import get_connection, write_transaction
from jobhackr.db.quotas import get_quota_status
from jobhackr.schemas.cv import CVAnalysis
from tests.test_utils import make_test_match

WEDNESDAY = datetime(2026, 10, 21, 14, 30)


class TestComputeCvHash:
    def test_stable_and_content_sensitive(self):
        assert compute_cv_hash("cv text") == compute_cv_hash("cv text")
        assert compute_cv_hash("cv text") != compute_cv_hash("cv text 2")
        assert len(compute_cv_hash("cv text")) == 64


class TestCvAnalysisCache:
    def test_save_and_get(self, temp_db):
        analysis = CVAnalysis(skills=["python"], experience="senior", score=80)

        save_cv_analysis("hash1", analysis, "raw cv")
        loaded = get_cv_analysis("hash1")

        assert loaded.skills == ["python"]
        assert loaded.experience == "senior"
        assert loaded.score == 80
        assert loaded.cv_hash == "hash1"

    def test_missing_returns_none(self, temp_db):
        assert get_cv_analysis("nope") is None
        assert get_latest_cv_analysis(7) is None

    def test_save_replaces_same_hash(self, temp_db):
        save_cv_analysis("hash1", CVAnalysis(score=10), "raw")
        save_cv_analysis("hash1", CVAnalysis(score=20), "raw")

        assert get_cv_analysis("hash1").score == 20

    def test_latest_for_user(self, temp_db):
        save_cv_analysis("hash1", CVAnalysis(score=10), "old cv")
        save_cv_analysis("hash2", CVAnalysis(score=20), "new cv")
        link_user_cv(7, "hash1", datetime(2026, 10, 19, 9, 0, tzinfo=UTC))
        link_user_cv(7, "hash2", datetime(2026, 10, 20, 9, 0, tzinfo=UTC))

        assert get_latest_cv_analysis(7).cv_hash == "hash2"

    def test_shared_cv_belongs_to_each_uploader(self, temp_db):
        save_cv_analysis("hash1", CVAnalysis(score=10), "same cv")
        link_user_cv(1, "hash1")
        link_user_cv(2, "hash1")

        assert get_latest_cv_analysis(1).cv_hash == "hash1"
        assert get_latest_cv_analysis(2).cv_hash == "hash1"
        assert get_latest_cv_analysis(3) is None

    def test_reupload_becomes_latest(self, temp_db):
        save_cv_analysis("hash1", CVAnalysis(score=10), "first cv")
        save_cv_analysis("hash2", CVAnalysis(score=20), "second cv")
        link_user_cv(7, "hash1", datetime(2026, 10, 19, 9, 0, tzinfo=UTC))
        link_user_cv(7, "hash2", datetime(2026, 10, 20, 9, 0, tzinfo=UTC))
        link_user_cv(7, "hash1", datetime(2026, 10, 21, 9, 0, tzinfo=UTC))

        assert get_latest_cv_analysis(7).cv_hash == "hash1"


class TestApplications:
    def test_record_and_read_keys(self, temp_db):
        matches = [make_test_match(90, "Acme", "Developer"), make_test_match(80, "Beta", "QA")]

        assert record_applications(1, matches) == 2
        assert get_applied_keys(1) == {"acme-developer", "beta-qa"}
        assert get_applied_keys(2) == set()

    def test_duplicate_keys_are_ignored(self, temp_db):
        record_applications(1, [make_test_match(90, "Acme", "Developer")])

        assert record_applications(1, [make_test_match(85, "ACME", "Developer")]) == 0

    def test_empty_list(self, temp_db):
        assert record_applications(1, []) == 0


class TestSubmitApplications:
    def test_records_only_granted_matches(self, temp_db):
        matches = [make_test_match(90, f"Company {i}") for i in range(12)]

        submitted = submit_applications(1, matches, WEDNESDAY)

        assert submitted == matches[:10]
        assert len(get_applied_keys(1)) == 10
        assert get_quota_status(1, WEDNESDAY).used_today == 10

    def test_failed_insert_releases_slots(self, temp_db):
        matches = [make_test_match(90, "Acme"), make_test_match(80, "Beta")]

        with (
            patch.object(applications, "_insert_applications", side_effect=RuntimeError("disk full")),
            pytest.raises(RuntimeError),
        ):
            submit_applications(1, matches, WEDNESDAY)

        assert get_quota_status(1, WEDNESDAY).used_today == 0
        assert get_applied_keys(1) == set()

    def test_empty_list(self, temp_db):
        assert submit_applications(1, [], WEDNESDAY) == []
        assert get_quota_status(1, WEDNESDAY).used_today == 0


class TestWriteTransaction:
    def test_rolls_back_on_error(self, temp_db):
        with pytest.raises(RuntimeError), write_transaction() as db:
            cursor = db.cursor()
            cursor.execute(
                "INSERT INTO quota_counters (user_id, subscription_tier) VALUES (1, 'free')"
            )
            raise RuntimeError("boom")

        with get_connection() as db:
            cursor = db.cursor()
            cursor.execute("SELECT COUNT(*) FROM quota_counters")
            assert cursor.fetchone()[0] == 0
