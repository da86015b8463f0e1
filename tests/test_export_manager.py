import os
import zipfile
from datetime import date, timedelta

import pytest
import requests

from conftest import make_contribution, make_faculty, make_user, make_year
from core.exceptions import ValidationError
from utils.export_manager import MANIFEST_NAME, ExportManager, export_filename
from utils.formatters import utcnow


@pytest.fixture
def exporter(db, storage):
    return ExportManager(db, storage)


@pytest.fixture
def student(db):
    return make_user(db, "student", make_faculty(db, "Arts"), name="Alice", email="alice@uni.test")


def test_export_builds_one_folder_per_contribution(db, exporter, storage, student, tmp_path):
    year = make_year(db)
    first = make_contribution(
        db, student, year, status="selected", images=["contributions/x/photo.jpg"]
    )
    second = make_contribution(db, student, year, status="selected")
    make_contribution(db, student, year, status="pending")

    result = exporter.export_selected(str(tmp_path))

    assert result.filename == export_filename(year)
    assert os.path.dirname(result.zip_path) == str(tmp_path)
    with zipfile.ZipFile(result.zip_path) as archive:
        names = set(archive.namelist())
        manifest = archive.read(f"{first.id}/{MANIFEST_NAME}").decode("utf-8")

    assert {name.split("/")[0] for name in names} == {first.id, second.id}
    assert f"{first.id}/photo.jpg" in names
    assert f"{first.id}/article.docx" in names
    assert f"{second.id}/{MANIFEST_NAME}" in names
    assert "Student Name: Alice" in manifest
    assert "Student Email: alice@uni.test" in manifest
    assert "Faculty: Arts" in manifest
    assert "Status: selected" in manifest
    assert len(storage.downloaded) == 3


def test_export_filename_encodes_year_span(db):
    now = utcnow()
    year = make_year(
        db,
        start=date(2025, 9, 1),
        end=date(2026, 8, 31),
        new_closure=now,
        final_closure=now,
    )
    assert (
        export_filename(year)
        == "selected-contributions-2025-09-to-2026-08-academic-year.zip"
    )


def test_export_by_explicit_year(db, exporter, student, tmp_path):
    now = utcnow()
    past = make_year(
        db,
        start=date(2020, 1, 1),
        end=date(2020, 12, 31),
        new_closure=now - timedelta(days=2000),
        final_closure=now - timedelta(days=1990),
    )
    contribution = make_contribution(db, student, past, status="selected")

    result = exporter.export_selected(str(tmp_path), past.id)

    assert result.filename == "selected-contributions-2020-01-to-2020-12-academic-year.zip"
    with zipfile.ZipFile(result.zip_path) as archive:
        assert f"{contribution.id}/{MANIFEST_NAME}" in archive.namelist()


def test_export_without_selection_names_the_year(db, exporter, student, tmp_path):
    now = utcnow()
    year = make_year(
        db,
        start=date(2020, 1, 1),
        end=date(2020, 12, 31),
        new_closure=now,
        final_closure=now,
    )
    make_contribution(db, student, year, status="pending")
    with pytest.raises(ValidationError, match="2020-2021"):
        exporter.export_selected(str(tmp_path), year.id)


def test_export_unknown_year(exporter, tmp_path):
    with pytest.raises(ValidationError):
        exporter.export_selected(str(tmp_path), "missing")


def test_export_without_current_year(db, exporter, tmp_path):
    with pytest.raises(ValidationError, match="specify an academic year"):
        exporter.export_selected(str(tmp_path))


def test_failed_download_aborts_export(db, exporter, storage, student, tmp_path):
    year = make_year(db)
    make_contribution(db, student, year, status="selected", images=["contributions/x/bad.jpg"])
    storage.fail_keys.add("contributions/x/bad.jpg")

    with pytest.raises(requests.HTTPError):
        exporter.export_selected(str(tmp_path))
    assert not any(name.endswith(".zip") for name in os.listdir(tmp_path))


def test_export_defaults_to_most_recent_overlapping_year(db, exporter, student, tmp_path):
    now = utcnow()
    older = make_year(
        db,
        start=(now - timedelta(days=200)).date(),
        end=(now + timedelta(days=100)).date(),
        new_closure=now,
        final_closure=now,
    )
    newer = make_year(db)
    make_contribution(db, student, older, status="selected")
    contribution = make_contribution(db, student, newer, status="selected")

    result = exporter.export_selected(str(tmp_path))

    assert result.filename == export_filename(newer)
    with zipfile.ZipFile(result.zip_path) as archive:
        assert {name.split("/")[0] for name in archive.namelist()} == {contribution.id}
