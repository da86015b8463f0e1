from datetime import date, datetime, timedelta, timezone

from utils.formatters import format_academic_year, format_timestamp, to_naive_utc


def test_label_for_calendar_year_window():
    assert format_academic_year(date(2025, 1, 1), date(2025, 12, 31)) == "2025-2026"


def test_label_for_split_year_window():
    assert format_academic_year(date(2025, 9, 1), date(2026, 8, 31)) == "2025-2026"


def test_label_for_multi_year_window():
    assert format_academic_year(date(2024, 9, 1), date(2026, 6, 30)) == "2024-2026"


def test_format_timestamp_defaults():
    assert format_timestamp(None) == "N/A"
    assert format_timestamp(datetime(2025, 3, 4, 5, 6, 7)) == "2025-03-04 05:06:07"


def test_to_naive_utc_converts_aware_values():
    aware = datetime(2025, 1, 1, 12, 0, tzinfo=timezone(timedelta(hours=2)))
    assert to_naive_utc(aware) == datetime(2025, 1, 1, 10, 0)
    naive = datetime(2025, 1, 1, 12, 0)
    assert to_naive_utc(naive) is naive
