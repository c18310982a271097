"""End-to-end tests for JobHackr.

Tests the complete flows including:
- CV file → analysis → suggested criteria
- Profile + jobs files → search → scoring
- Automatic applications against the subscription quota
- CLI commands (analyze-cv, match, apply, quota, set-tier, info)
"""

import json
from unittest.mock import patch

from typer.testing import CliRunner

from jobhackr.main import app
from tests.test_utils import write_json

runner = CliRunner()

SAMPLE_CV_CONTENT = """
JANE DOE
Senior Full Stack Developer
jane.doe@email.com | Paris, France

PROFESSIONAL SUMMARY
Senior developer with 7+ years of experience building React and Node.js
applications for fintech startups. Team lead mentoring three developers.

TECHNICAL SKILLS
JavaScript, TypeScript, React, Node.js, Python, PostgreSQL, Docker, AWS, Git

EDUCATION
Master degree in Computer Science, University of Lyon

LANGUAGES
English, French
"""

PROFILE = {
    "job_titles": ["React Developer"],
    "skills": ["react", "javascript"],
    "spoken_languages": ["english"],
    "remote_preference": "remote-only",
}


def _job(id: str, title: str = "Senior React Developer", company: str = "Acme", **extra) -> dict:
    record = {
        "id": id,
        "title": title,
        "company": company,
        "location": "Remote",
        "skills": ["react", "javascript", "git"],
        "language": "en",
        "remote": True,
    }
    record.update(extra)
    return record


def _write_inputs(tmp_path, jobs: list[dict]):
    profile_path = write_json(tmp_path / "profile.json", PROFILE)
    jobs_path = write_json(tmp_path / "jobs.json", jobs)
    return profile_path, jobs_path


class TestAnalyzeCvCommand:
    def test_json_output(self, temp_db, tmp_path):
        cv_path = tmp_path / "cv.txt"
        cv_path.write_text(SAMPLE_CV_CONTENT, encoding="utf-8")

        result = runner.invoke(app, ["analyze-cv", "--cv", str(cv_path), "--json"])

        assert result.exit_code == 0
        output = json.loads(result.stdout)
        assert "react" in output["analysis"]["skills"]
        assert output["analysis"]["years_of_experience"] == 7
        assert output["suggested_criteria"]["suggested_job_titles"]

    def test_pretty_output_reports_cache(self, temp_db, tmp_path):
        cv_path = tmp_path / "cv.txt"
        cv_path.write_text(SAMPLE_CV_CONTENT, encoding="utf-8")

        first = runner.invoke(app, ["analyze-cv", "--cv", str(cv_path)])
        second = runner.invoke(app, ["analyze-cv", "--cv", str(cv_path)])

        assert first.exit_code == 0
        assert "fresh analysis" in first.stdout
        assert "cache" in second.stdout

    def test_cv_not_found(self, temp_db):
        result = runner.invoke(app, ["analyze-cv", "--cv", "/nonexistent/cv.pdf"])

        assert result.exit_code == 1
        assert "not found" in result.stdout


class TestMatchCommand:
    def test_json_output_is_ranked(self, tmp_path):
        profile_path, jobs_path = _write_inputs(
            tmp_path,
            [
                _job("weak", title="Accountant", company="Ledger", skills=[]),
                _job("strong"),
                _job("french", company="Baguette", language="fr"),
            ],
        )

        result = runner.invoke(
            app, ["match", "--profile", str(profile_path), "--jobs", str(jobs_path), "--json"]
        )

        assert result.exit_code == 0
        output = json.loads(result.stdout)
        assert [m["job"]["id"] for m in output] == ["strong", "weak", "french"]
        assert output[0]["match_score"] == 82
        assert output[0]["should_apply"] is True
        assert output[2]["should_apply"] is False

    def test_top_n(self, tmp_path):
        profile_path, jobs_path = _write_inputs(
            tmp_path, [_job(str(i), company=f"Company {i}") for i in range(5)]
        )

        result = runner.invoke(
            app,
            ["match", "-p", str(profile_path), "-j", str(jobs_path), "-n", "2", "--json"],
        )

        assert len(json.loads(result.stdout)) == 2

    def test_pretty_output(self, tmp_path):
        profile_path, jobs_path = _write_inputs(tmp_path, [_job("1")])

        result = runner.invoke(app, ["match", "-p", str(profile_path), "-j", str(jobs_path)])

        assert result.exit_code == 0
        assert "Senior React Developer" in result.stdout
        assert "82/100" in result.stdout

    def test_missing_profile(self, tmp_path):
        jobs_path = write_json(tmp_path / "jobs.json", [])

        result = runner.invoke(
            app, ["match", "-p", str(tmp_path / "missing.json"), "-j", str(jobs_path)]
        )

        assert result.exit_code == 1
        assert "Error during matching" in result.stdout


class TestApplyCommand:
    def test_free_tier_limit(self, temp_db, tmp_path):
        profile_path, jobs_path = _write_inputs(
            tmp_path, [_job(str(i), company=f"Company {i}") for i in range(12)]
        )

        result = runner.invoke(
            app,
            ["apply", "-u", "1", "-p", str(profile_path), "-j", str(jobs_path), "--json"],
        )

        assert result.exit_code == 0
        report = json.loads(result.stdout)
        assert len(report["submitted"]) == 10
        assert report["gate"]["daily_limit_reached"] is True
        assert report["quota"]["applications_left"] == 0

    def test_second_run_skips_duplicates(self, temp_db, tmp_path):
        profile_path, jobs_path = _write_inputs(tmp_path, [_job("1"), _job("2", company="Beta")])
        args = ["apply", "-u", "1", "-p", str(profile_path), "-j", str(jobs_path)]

        first = runner.invoke(app, args)
        second = runner.invoke(app, args)

        assert "Applied to 2 jobs" in first.stdout
        assert "No applications submitted" in second.stdout


class TestQuotaCommands:
    def test_quota_for_new_user(self, temp_db):
        result = runner.invoke(app, ["quota", "-u", "1"])

        assert result.exit_code == 0
        assert "free tier" in result.stdout
        assert "Applications left: 10" in result.stdout

    def test_set_tier(self, temp_db):
        result = runner.invoke(app, ["set-tier", "-u", "1", "-t", "Premium"])

        assert result.exit_code == 0
        assert "premium tier" in result.stdout
        assert "Applications left: 30" in result.stdout

    def test_set_unknown_tier(self, temp_db):
        result = runner.invoke(app, ["set-tier", "-u", "1", "-t", "gold"])

        assert result.exit_code == 1
        assert "Unknown tier" in result.stdout


class TestInfoCommand:
    def test_no_database(self, tmp_path):
        with (
            patch("jobhackr.main.DATABASE_URL", None),
            patch("jobhackr.main.DB_PATH", tmp_path / "nonexistent.db"),
        ):
            result = runner.invoke(app, ["info"])

        assert result.exit_code == 0
        assert "Database not found" in result.stdout

    def test_with_data(self, temp_db, tmp_path):
        profile_path, jobs_path = _write_inputs(tmp_path, [_job("1")])
        runner.invoke(app, ["apply", "-u", "1", "-p", str(profile_path), "-j", str(jobs_path)])

        with (
            patch("jobhackr.main.DATABASE_URL", None),
            patch("jobhackr.main.DB_PATH", temp_db),
        ):
            result = runner.invoke(app, ["info"])

        assert result.exit_code == 0
        assert "Database Statistics" in result.stdout
