"""Unit tests for exam alert windows (src/services/alert_window.py, ExamAlert.covers)."""

from __future__ import annotations

from datetime import date

import pytest

from src.exceptions import ValidationError
from src.services.alert_window import available_dates, ensure_within_alert_window


def test_available_dates_skips_weekends():
    # 2025-02-07 is a Friday, 2025-02-10 a Monday.
    days = available_dates(date(2025, 2, 7), date(2025, 2, 10))

    assert days == [date(2025, 2, 7), date(2025, 2, 10)]


def test_available_dates_empty_when_end_before_start():
    assert available_dates(date(2025, 2, 10), date(2025, 2, 7)) == []


@pytest.mark.asyncio
async def test_date_inside_active_window_returns_alert(campus):
    alert = campus.store.add_alert(date(2025, 2, 4), date(2025, 2, 28))

    found = await ensure_within_alert_window(campus.store, date(2025, 2, 10), campus.cs)

    assert found is alert


@pytest.mark.asyncio
async def test_date_outside_every_window_rejected(campus):
    campus.store.add_alert(date(2025, 2, 4), date(2025, 2, 28))

    with pytest.raises(ValidationError) as exc_info:
        await ensure_within_alert_window(campus.store, date(2025, 3, 3), campus.cs)

    assert exc_info.value.field == "exam_date"
    assert "2025-03-03" in str(exc_info.value)


@pytest.mark.asyncio
async def test_window_limited_to_other_departments_rejected(campus):
    campus.store.add_alert(date(2025, 2, 4), date(2025, 2, 28), departments=["ECE"])

    with pytest.raises(ValidationError):
        await ensure_within_alert_window(campus.store, date(2025, 2, 10), campus.cs)

    found = await ensure_within_alert_window(campus.store, date(2025, 2, 10), campus.ece)
    assert found.departments == ["ECE"]


@pytest.mark.asyncio
async def test_closed_window_does_not_count(campus):
    campus.store.add_alert(date(2025, 2, 4), date(2025, 2, 28), status="closed")

    with pytest.raises(ValidationError):
        await ensure_within_alert_window(campus.store, date(2025, 2, 10), campus.cs)


def test_covers_matches_department_codes_case_insensitively(campus):
    alert = campus.store.add_alert(date(2025, 2, 4), date(2025, 2, 28), departments=["cse"])

    assert alert.covers(date(2025, 2, 4), "CSE") is True
    assert alert.covers(date(2025, 2, 28), "IT") is False
    assert alert.covers(date(2025, 3, 1), "CSE") is False
