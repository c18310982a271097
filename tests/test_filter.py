"""Tests for apply rules, ranking and missing-skill detection."""

from jobhackr.matching.filter import find_missing_skills, rank_matches, should_apply
from tests.test_utils import make_test_job, make_test_match


class TestShouldApply:
    def test_meets_threshold(self):
        assert should_apply(70, ["Language match: EN"], 70) is True

    def test_below_threshold(self):
        assert should_apply(69, ["Language match: EN"], 70) is False

    def test_none_threshold_falls_back_to_default(self):
        assert should_apply(69, [], None) is False
        assert should_apply(70, [], None) is True

    def test_zero_threshold_is_explicit(self):
        assert should_apply(0, [], 0) is True

    def test_excluded_company_blocks(self):
        assert should_apply(100, ["Excluded company"], 0) is False

    def test_language_mismatch_blocks(self):
        assert should_apply(100, ["Language mismatch: Job requires FR"], 0) is False


class TestRankMatches:
    def test_sorted_by_score_descending(self):
        matches = [make_test_match(50, "A"), make_test_match(90, "B"), make_test_match(70, "C")]

        ranked = rank_matches(matches)

        assert [m.match_score for m in ranked] == [90, 70, 50]

    def test_ties_keep_input_order(self):
        matches = [make_test_match(80, "A"), make_test_match(80, "B"), make_test_match(80, "C")]

        ranked = rank_matches(matches)

        assert [m.job.company for m in ranked] == ["A", "B", "C"]

    def test_top_n(self):
        matches = [make_test_match(score, str(score)) for score in (10, 20, 30)]

        assert [m.match_score for m in rank_matches(matches, top_n=2)] == [30, 20]


class TestFindMissingSkills:
    def test_returns_unmatched_job_skills(self):
        job = make_test_job(skills=["python", "kubernetes", "terraform"])

        assert find_missing_skills(job, ["Python", "Kubernetes"]) == ["terraform"]

    def test_fuzzy_spelling_variants(self):
        job = make_test_job(skills=["node.js"])

        assert find_missing_skills(job, ["nodejs"]) == []

    def test_job_without_skills(self):
        assert find_missing_skills(make_test_job(skills=[]), ["python"]) == []

    def test_candidate_without_skills(self):
        job = make_test_job(skills=["python"])

        assert find_missing_skills(job, []) == ["python"]
