"""Tests for settings, logging setup and input models."""

from __future__ import annotations

import logging

import pytest
from pydantic import ValidationError

from jobsync.config import DEFAULT_EMBEDDINGS_URL, Settings, load_settings
from jobsync.errors import JobSyncError, ScoringError
from jobsync.logging_config import LOGGER_NAME, configure_logging, log_context
from jobsync.models import ApplicantProfile, JobRequirement, ScoreBreakdown


def test_load_settings_defaults() -> None:
    settings = load_settings({})

    assert settings.hf_api_key is None
    assert settings.embeddings_url == DEFAULT_EMBEDDINGS_URL
    assert settings.embedding_timeout == 10
    assert settings.max_concurrency == 5
    assert settings.log_level == "INFO"
    assert not settings.embeddings_enabled


def test_load_settings_reads_environment() -> None:
    settings = load_settings(
        {
            "HF_API_KEY": "hf_test",
            "HF_EMBEDDINGS_API_URL": "https://example.test/embed",
            "JOBSYNC_EMBEDDING_TIMEOUT": "2.5",
            "JOBSYNC_MAX_CONCURRENCY": "8",
            "JOBSYNC_LOG_LEVEL": "debug",
        }
    )

    assert settings.embeddings_enabled
    assert settings.embeddings_url == "https://example.test/embed"
    assert settings.embedding_timeout == 2.5
    assert settings.max_concurrency == 8
    assert settings.log_level == "DEBUG"


@pytest.mark.parametrize(
    "environ",
    [
        {"JOBSYNC_MAX_CONCURRENCY": "0"},
        {"JOBSYNC_EMBEDDING_TIMEOUT": "-1"},
        {"JOBSYNC_LOG_LEVEL": "LOUD"},
    ],
)
def test_invalid_settings_are_rejected(environ) -> None:
    with pytest.raises(ValidationError):
        load_settings(environ)


def test_configure_logging_installs_handlers(tmp_path) -> None:
    log_file = tmp_path / "logs" / "jobsync.log"

    logger = configure_logging("debug", log_file=log_file)
    logger.debug(log_context("Scored applicant", applicant="a-1", score=87.5))
    for handler in logger.handlers:
        handler.flush()

    assert logger.name == LOGGER_NAME
    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 2
    assert 'Scored applicant | Context: {"applicant": "a-1", "score": 87.5}' in log_file.read_text()

    logger = configure_logging("WARNING")
    assert len(logger.handlers) == 1
    assert logger.level == logging.WARNING
    logger.handlers.clear()


def test_log_context_without_context_is_plain() -> None:
    assert log_context("Ranking applicants") == "Ranking applicants"


def test_job_requirement_cleans_inputs() -> None:
    job = JobRequirement(
        degree_requirement=None,
        eligibilities=[" Registered Nurse ", "", None],
        skills=None,
        years_of_experience=-2,
    )

    assert job.degree_requirement == ""
    assert job.eligibilities == ["Registered Nurse"]
    assert job.skills == []
    assert job.years_of_experience == 0


@pytest.mark.parametrize("years", [float("nan"), "-2", -2, "not a number", None])
def test_invalid_years_are_clamped_to_zero(years) -> None:
    assert JobRequirement(years_of_experience=years).years_of_experience == 0
    assert ApplicantProfile(total_years_experience=years).total_years_experience == 0


def test_numeric_string_years_are_accepted() -> None:
    assert JobRequirement(years_of_experience="3").years_of_experience == 3
    assert ApplicantProfile(total_years_experience="2.5").total_years_experience == 2.5


def test_applicant_eligibilities_accept_strings_and_records() -> None:
    applicant = ApplicantProfile(
        eligibilities=["RA 1080", {"eligibilityTitle": "CSC Professional"}, {"eligibility_title": "PD 907"}, ""]
    )

    assert applicant.eligibility_titles == ["RA 1080", "CSC Professional", "PD 907"]


def test_inputs_are_immutable() -> None:
    job = JobRequirement(title="Clerk")
    with pytest.raises(ValidationError):
        job.title = "Manager"


def test_score_breakdown_clamps_and_rejects_nan() -> None:
    breakdown = ScoreBreakdown(
        education_score=120,
        experience_score=-5,
        skills_score=50,
        eligibility_score=50,
        total_score=100.5,
        algorithm_used="Weighted Sum Model",
        reasoning="",
    )
    assert (breakdown.education_score, breakdown.experience_score, breakdown.total_score) == (100, 0, 100)

    with pytest.raises(ValidationError):
        ScoreBreakdown(
            education_score=float("nan"),
            experience_score=0,
            skills_score=0,
            eligibility_score=0,
            total_score=0,
            algorithm_used="Weighted Sum Model",
            reasoning="",
        )


def test_scoring_error_is_a_value_error() -> None:
    assert issubclass(ScoringError, JobSyncError)
    assert issubclass(ScoringError, ValueError)
