"""Integration tests for the Exam Alerts API endpoints.

Endpoints tested
----------------
POST  /exam-alerts                            — create, default title, window validation
PATCH /exam-alerts/{alert_id}                 — window re-validation, 404
GET   /exam-alerts/{alert_id}/available-dates — weekdays in the window

Tests use the ``test_client`` fixture with a mocked DB session.
No real database is used.
"""

from __future__ import annotations

from datetime import date
from unittest.mock import AsyncMock

from src.models.exam_alert import ExamAlert


def _alert(alert_id: int = 3, start: date = date(2025, 2, 4), end: date = date(2025, 2, 14)) -> ExamAlert:
    alert = ExamAlert(
        title="Internal Assessment-II - 2025-26",
        start_date=start,
        end_date=end,
        departments=[],
        status="active",
        year=2,
        semester=4,
    )
    alert.id = alert_id
    return alert


def _assign_id_on_flush(session, new_id: int) -> None:
    """Give the object passed to ``session.add`` an id when flushed."""

    async def _flush():
        session.add.call_args.args[0].id = new_id

    session.flush = AsyncMock(side_effect=_flush)


def test_create_alert_defaults_title_and_uppercases_codes(test_client, mock_db_session, admin_user):
    _assign_id_on_flush(mock_db_session, 11)

    response = test_client.post(
        "/exam-alerts",
        json={
            "exam_type": "Internal Assessment-II",
            "academic_year_label": "2025-26",
            "start_date": "2025-02-04",
            "end_date": "2025-02-28",
            "year": 2,
            "semester": 4,
            "departments": [" cse", "it "],
        },
    )

    assert response.status_code == 201, response.text
    data = response.json()
    assert data["id"] == 11
    assert data["title"] == "Internal Assessment-II - 2025-26"
    assert data["departments"] == ["CSE", "IT"]
    assert data["status"] == "active"
    assert data["created_by"] == admin_user.email


def test_create_alert_end_before_start_is_422(test_client, mock_db_session):
    response = test_client.post(
        "/exam-alerts",
        json={"start_date": "2025-02-10", "end_date": "2025-02-04"},
    )

    assert response.status_code == 422
    mock_db_session.add.assert_not_called()


def test_create_alert_requires_admin(test_client, auth_state, teacher_user):
    auth_state["user"] = teacher_user

    response = test_client.post(
        "/exam-alerts",
        json={"start_date": "2025-02-04", "end_date": "2025-02-10"},
    )

    assert response.status_code == 403
    assert response.json()["role"] == "teacher"


def test_update_rejects_inverted_window(test_client, mock_db_session):
    mock_db_session.get = AsyncMock(return_value=_alert())

    response = test_client.patch("/exam-alerts/3", json={"end_date": "2025-02-01"})

    assert response.status_code == 422
    assert response.json()["field"] == "end_date"


def test_update_closes_alert(test_client, mock_db_session):
    alert = _alert()
    mock_db_session.get = AsyncMock(return_value=alert)

    response = test_client.patch("/exam-alerts/3", json={"status": "closed"})

    assert response.status_code == 200, response.text
    assert response.json()["status"] == "closed"
    assert alert.status == "closed"


def test_update_unknown_alert_is_404(test_client):
    response = test_client.patch("/exam-alerts/99", json={"status": "closed"})

    assert response.status_code == 404
    assert response.json()["error"] == "exam_alert_not_found"


def test_available_dates_skip_weekends(test_client, mock_db_session):
    mock_db_session.get = AsyncMock(return_value=_alert(start=date(2025, 2, 7), end=date(2025, 2, 11)))

    response = test_client.get("/exam-alerts/3/available-dates")

    assert response.status_code == 200, response.text
    assert response.json() == {
        "alert_id": 3,
        "dates": ["2025-02-07", "2025-02-10", "2025-02-11"],
        "count": 3,
    }
