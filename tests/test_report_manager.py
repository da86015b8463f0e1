from datetime import date, timedelta

import pytest

from conftest import (
    as_user,
    make_comment,
    make_contribution,
    make_faculty,
    make_user,
    make_year,
)
from core.exceptions import ValidationError
from utils.formatters import utcnow
from utils.report_manager import ReportManager


@pytest.fixture
def reports(db):
    return ReportManager(db)


@pytest.fixture
def two_years(db):
    now = utcnow()
    older = make_year(
        db,
        start=date(2023, 9, 1),
        end=date(2024, 8, 31),
        new_closure=now - timedelta(days=500),
        final_closure=now - timedelta(days=480),
    )
    newer = make_year(
        db,
        start=date(2025, 1, 1),
        end=date(2025, 12, 31),
        new_closure=now - timedelta(days=100),
        final_closure=now - timedelta(days=80),
    )
    return older, newer


def test_contributions_grouped_by_year_and_faculty(db, reports, two_years):
    older, newer = two_years
    arts = make_faculty(db, "Arts")
    science = make_faculty(db, "Science")
    a1 = make_user(db, "student", arts)
    s1 = make_user(db, "student", science)
    make_contribution(db, a1, newer, status="selected")
    make_contribution(db, a1, newer, status="selected")
    make_contribution(db, s1, newer, status="selected")
    make_contribution(db, s1, newer, status="pending")
    make_contribution(db, s1, older, status="selected")

    report = reports.contributions_by_faculty()

    assert report.total_contributions == 4
    assert [y.year for y in report.academic_years] == ["2025-2026", "2023-2024"]
    first = report.academic_years[0]
    assert [(f.name, f.contribution_count) for f in first.faculties] == [
        ("Arts", 2),
        ("Science", 1),
    ]
    assert first.total_contributions == 3


def test_unique_contributors_not_double_counted(db, reports, two_years):
    older, newer = two_years
    arts = make_faculty(db, "Arts")
    science = make_faculty(db, "Science")
    alice = make_user(db, "student", arts)
    bob = make_user(db, "student", science)
    make_contribution(db, alice, newer, status="selected")
    make_contribution(db, alice, newer, status="selected")
    make_contribution(db, bob, newer, status="selected")
    make_contribution(db, bob, older, status="selected")

    # Alice moves faculty and gets a second selection in the same year
    alice.faculty_id = science.id
    db.commit()
    make_contribution(db, alice, newer, status="selected")

    report = reports.unique_contributors_by_faculty()

    newest = report.academic_years[0]
    by_faculty = {f.name: f.unique_contributors_count for f in newest.faculties}
    assert by_faculty == {"Arts": 1, "Science": 2}
    assert newest.total_unique_contributors == 2
    assert newest.total_unique_contributors >= max(by_faculty.values())
    assert report.academic_years[1].total_unique_contributors == 1
    assert report.total_unique_contributors == 2


def test_empty_reports(reports):
    assert reports.contributions_by_faculty().total_contributions == 0
    contributors = reports.unique_contributors_by_faculty()
    assert contributors.academic_years == []
    assert contributors.total_unique_contributors == 0


def test_guest_list_for_coordinator_faculty(db, reports):
    arts = make_faculty(db, "Arts")
    science = make_faculty(db, "Science")
    coordinator = make_user(db, "marketing_coordinator", arts)
    early = make_user(db, "guest", arts, name="Early")
    late = make_user(db, "guest", arts, name="Late")
    make_user(db, "guest", arts, name="Inactive", status="inactive")
    make_user(db, "guest", science, name="Elsewhere")
    now = utcnow()
    early.last_login = now - timedelta(days=3)
    late.last_login = now - timedelta(hours=1)
    db.commit()

    guests = reports.guests(as_user(coordinator))
    assert [g.name for g in guests] == ["Late", "Early"]
    assert guests[0].faculty_name == "Arts"


def test_contributors_and_contributions(db, reports, two_years):
    older, newer = two_years
    arts = make_faculty(db, "Arts")
    coordinator = make_user(db, "marketing_coordinator", arts)
    alice = make_user(db, "student", arts)
    bob = make_user(db, "student", arts)
    make_contribution(db, alice, newer)
    make_contribution(db, alice, newer, status="selected")
    make_contribution(db, bob, older)

    overall = reports.contributors_and_contributions(as_user(coordinator))
    assert (overall.total_contributions, overall.unique_contributors) == (3, 2)
    assert overall.faculty_name == "Arts"

    scoped = reports.contributors_and_contributions(as_user(coordinator), newer.id)
    assert (scoped.total_contributions, scoped.unique_contributors) == (2, 1)


def test_yearly_stats_covers_recent_years(db, reports):
    arts = make_faculty(db, "Arts")
    coordinator = make_user(db, "marketing_coordinator", arts)
    alice = make_user(db, "student", arts)
    now = utcnow()
    years = [
        make_year(
            db,
            start=date(2015 + i, 9, 1),
            end=date(2016 + i, 8, 31),
            new_closure=now - timedelta(days=1),
            final_closure=now - timedelta(days=1),
        )
        for i in range(8)
    ]
    make_contribution(db, alice, years[-1])
    make_contribution(db, alice, years[-1])

    stats = reports.yearly_stats(as_user(coordinator)).data
    assert len(stats) == 6
    assert stats[0].academic_year == "2022-2023"
    assert (stats[0].contributions, stats[0].contributors) == (2, 1)
    assert all(s.contributions == 0 for s in stats[1:])


def test_uncommented_contributions(db, reports, two_years):
    older, newer = two_years
    arts = make_faculty(db, "Arts")
    coordinator = make_user(db, "marketing_coordinator", arts)
    alice = make_user(db, "student", arts, name="Alice")
    now = utcnow()
    overdue = make_contribution(db, alice, newer, created_at=now - timedelta(days=20))
    fresh = make_contribution(db, alice, newer, created_at=now - timedelta(days=2))
    commented = make_contribution(db, alice, newer, created_at=now - timedelta(days=30))
    make_comment(db, commented, coordinator)
    make_contribution(db, alice, newer, status="selected")
    make_contribution(db, alice, older, created_at=now - timedelta(days=400))

    report = reports.uncommented_contributions(as_user(coordinator))

    assert [item.id for item in report.items] == [overdue.id, fresh.id]
    assert report.items[0].is_more_than_14_days_overdue is True
    assert report.items[1].is_more_than_14_days_overdue is False
    assert report.items[0].student_name == "Alice"
    assert report.items[0].academic_year == "2025-2026"
    assert report.total_contributions_without_comment == 2
    assert report.total_contributions_without_comment_for_more_than14_days == 1

    older_report = reports.uncommented_contributions(as_user(coordinator), older.id)
    assert older_report.total_contributions_without_comment == 1


def test_coordinator_without_faculty_rejected(db, reports):
    coordinator = make_user(db, "marketing_coordinator")
    with pytest.raises(ValidationError):
        reports.yearly_stats(as_user(coordinator))
