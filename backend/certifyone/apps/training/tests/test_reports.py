from datetime import date, datetime, timezone

import pytest

from certifyone.apps.training import reports
from certifyone.apps.training.models import CertificationTraining, CourseTraining, SessionTraining
from certifyone.apps.training.schemas import TrainingFilters

STAMP = datetime(2024, 1, 1, tzinfo=timezone.utc)
TODAY = date(2024, 6, 1)


def _cert(record_id, expiration=None, level="beginner", **extra):
    return CertificationTraining(
        id=record_id,
        created_at=STAMP,
        updated_at=STAMP,
        name=extra.pop("name", f"Cert {record_id}"),
        issue_date=extra.pop("issue_date", "2023-06-01"),
        expiration_date=expiration,
        level=level,
        **extra,
    )


@pytest.fixture
def records():
    return [
        _cert("c1", name="AWS Solutions Architect", employee_name="John Doe", department="Engineering",
              status="completed", category="Cloud"),
        CourseTraining(
            id="k1", created_at=STAMP, updated_at=STAMP, title="React Advanced Patterns",
            employee_name="Jane Smith", department="Design", status="in-progress",
            category="Frontend", start_date="2024-02-10",
        ),
        SessionTraining(
            id="s1", created_at=STAMP, updated_at=STAMP, topic="Security Awareness",
            employee_name="John Doe", department="", status="scheduled", date="2024-05-20",
        ),
        CourseTraining(id="k2", created_at=STAMP, updated_at=STAMP, title="Undated course"),
    ]


def test_no_filters_returns_everything_in_order(records):
    assert reports.filter_records(records, TrainingFilters()) == records


def test_all_disables_a_filter(records):
    filters = TrainingFilters(kind="all", status="all", department="all")
    assert len(reports.filter_records(records, filters)) == len(records)


def test_search_matches_employee_and_display_name(records):
    by_name = reports.filter_records(records, TrainingFilters(search="jane"))
    by_title = reports.filter_records(records, TrainingFilters(search="security"))

    assert [r.id for r in by_name] == ["k1"]
    assert [r.id for r in by_title] == ["s1"]


def test_filters_combine(records):
    filters = TrainingFilters(employee="John Doe", kind="session")
    assert [r.id for r in reports.filter_records(records, filters)] == ["s1"]

    filters = TrainingFilters(status="in-progress", category="Frontend")
    assert [r.id for r in reports.filter_records(records, filters)] == ["k1"]


def test_date_range_uses_primary_date_and_drops_undated(records):
    filters = TrainingFilters(date_from="2024-01-01", date_to="2024-04-30")
    assert [r.id for r in reports.filter_records(records, filters)] == ["k1"]


def test_summary_counts(records):
    summary = reports.summarize(records)

    assert summary.total_trainings == 4
    assert summary.completed_trainings == 1
    assert summary.in_progress_trainings == 1
    assert summary.scheduled_trainings == 1
    assert summary.pending_trainings == 1
    assert (summary.certifications, summary.courses, summary.sessions) == (1, 2, 1)
    assert summary.completion_rate == 25
    assert summary.department_stats == {"Engineering": 1, "Design": 1, "Unknown": 2}


def test_summary_of_nothing_has_zero_rate():
    summary = reports.summarize([])
    assert summary.total_trainings == 0
    assert summary.completion_rate == 0


@pytest.mark.parametrize(
    "expiration, expired, soon",
    [
        (None, False, False),
        ("2024-05-31", True, False),
        ("2024-06-01", False, False),
        ("2024-06-02", False, True),
        ("2024-08-30", False, True),
        ("2024-08-31", False, False),
        ("not-a-date", False, False),
    ],
)
def test_expiry_windows(expiration, expired, soon):
    cert = _cert("x", expiration)
    assert reports.is_expired(cert, TODAY) is expired
    assert reports.is_expiring_soon(cert, TODAY) is soon


def test_certification_overview(records):
    certs = records + [
        _cert("c2", "2024-01-01", level="expert"),
        _cert("c3", "2024-07-01", level="advanced"),
    ]

    overview = reports.certification_overview(certs, TODAY)

    assert overview.total == 3
    assert overview.expired == 1
    assert overview.expiring_soon == 1
    assert overview.active == 2
    assert overview.advanced_or_expert == 2
