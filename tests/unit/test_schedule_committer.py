"""Unit tests for ScheduleCommitter (src/services/schedule_committer.py).

Scenarios
---------
A. CS schedules shared "Data Structures" → CS and IT rows on the same date,
   IT's row carries CS as priority department.
B. IT later proposes another date for DS → ConflictError naming CS's date.
C. CS proposes a second subject on a day it already sits an exam → ConflictError.
D. Staff with an undeclared-in-catalogue code → canonical subject created once
   and reused on reschedule.

Plus invariants: one exam per department per day, equal dates across a
shared subject, idempotent re-commit, and input validation.
"""

from __future__ import annotations

import uuid
from datetime import date, time

import pytest

from src.exceptions import ConflictError, NotFoundError, ValidationError
from src.services.schedule_committer import (
    Canonical,
    ScheduleCommitter,
    SharedSubjectScheduled,
    StaffDeclared,
)

FEB_10 = date(2025, 2, 10)
FEB_12 = date(2025, 2, 12)
FEB_14 = date(2025, 2, 14)


def _assert_one_exam_per_department_day(store) -> None:
    seen = set()
    for schedule in store.schedules.values():
        key = (schedule.department_id, schedule.exam_date)
        assert key not in seen, f"department {key[0]} has two exams on {key[1]}"
        seen.add(key)


def _assert_shared_dates_equal(store, subject_name: str) -> None:
    dates = {s.exam_date for s in store.rows_for(subject_name)}
    assert len(dates) <= 1, f"{subject_name} scheduled on several dates: {dates}"


# ---------------------------------------------------------------------------
# Scenario A
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_scenario_a_fan_out_to_every_department(campus):
    committer = ScheduleCommitter(campus.store)

    result = await committer.commit(StaffDeclared(campus.cs_teacher.id), FEB_10)

    rows = {s.department_id: s for s in campus.store.rows_for("Data Structures")}
    assert set(rows) == {campus.cs.id, campus.it.id}
    assert rows[campus.cs.id].exam_date == FEB_10
    assert rows[campus.it.id].exam_date == FEB_10
    assert rows[campus.cs.id].priority_department_id is None
    assert rows[campus.it.id].priority_department_id == campus.cs.id
    assert all(r.is_shared for r in rows.values())

    assert result.created_count == 2
    assert result.outcomes[0].schedule.department_id == campus.cs.id
    assert result.subject.id == campus.cs_ds.id
    assert result.event == SharedSubjectScheduled(
        subject_name="Data Structures",
        exam_date=FEB_10,
        acting_department_id=campus.cs.id,
        acting_department_name="Computer Science",
    )


# ---------------------------------------------------------------------------
# Scenario B
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_scenario_b_other_department_cannot_move_shared_date(campus):
    committer = ScheduleCommitter(campus.store)
    await committer.commit(StaffDeclared(campus.cs_teacher.id), FEB_10)

    with pytest.raises(ConflictError) as exc_info:
        await committer.commit(StaffDeclared(campus.it_teacher.id), FEB_12)

    exc = exc_info.value
    assert exc.pinned_date == FEB_10
    assert exc.department == "Computer Science"
    assert "2025-02-10" in str(exc)
    assert "Computer Science" in str(exc)
    _assert_shared_dates_equal(campus.store, "Data Structures")
    assert all(s.exam_date == FEB_10 for s in campus.store.rows_for("Data Structures"))


@pytest.mark.asyncio
async def test_other_department_may_confirm_pinned_date(campus):
    committer = ScheduleCommitter(campus.store)
    await committer.commit(StaffDeclared(campus.cs_teacher.id), FEB_10)

    result = await committer.commit(StaffDeclared(campus.it_teacher.id), FEB_10)

    assert result.created_count == 0
    assert len(campus.store.schedules) == 2
    _assert_shared_dates_equal(campus.store, "Data Structures")
    rows = {s.department_id: s for s in campus.store.rows_for("Data Structures")}
    assert rows[campus.cs.id].priority_department_id is None
    assert rows[campus.it.id].priority_department_id == campus.cs.id


# ---------------------------------------------------------------------------
# Scenario C
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_scenario_c_second_subject_same_day_rejected(campus):
    committer = ScheduleCommitter(campus.store)
    await committer.commit(Canonical(campus.cs_os.id), FEB_10)

    with pytest.raises(ConflictError) as exc_info:
        await committer.commit(StaffDeclared(campus.cs_teacher.id), FEB_10)

    assert "department already has an exam scheduled" in str(exc_info.value)
    assert len(campus.store.schedules) == 1
    _assert_one_exam_per_department_day(campus.store)


@pytest.mark.asyncio
async def test_fan_out_rejected_when_other_department_busy(campus):
    """IT already sits an exam on Feb 10, so CS cannot fix DS there for both."""
    it_other = campus.store.add_subject("IT305", "Computer Networks", campus.it)
    campus.store.seed_schedule(it_other, campus.it, FEB_10)
    committer = ScheduleCommitter(campus.store)

    with pytest.raises(ConflictError) as exc_info:
        await committer.commit(StaffDeclared(campus.cs_teacher.id), FEB_10)

    assert exc_info.value.department == "Information Technology"
    assert campus.store.rows_for("Data Structures") == []
    _assert_one_exam_per_department_day(campus.store)


# ---------------------------------------------------------------------------
# Scenario D
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_scenario_d_subject_created_once_and_reused(store):
    cs = store.add_department("CSE", "Computer Science")
    teacher = store.add_staff(
        "Devi M", cs, subject_name="Compiler Design", subject_code="CS401"
    )
    committer = ScheduleCommitter(store)

    first = await committer.commit(StaffDeclared(teacher.id), FEB_10)

    created = store.subjects_with_code("CS401")
    assert len(created) == 1
    assert created[0].is_shared is True
    assert created[0].shared_subject_code == "CS401"
    assert created[0].department_id == cs.id
    assert first.outcomes[0].schedule.subject_id == created[0].id

    second = await committer.commit(StaffDeclared(teacher.id), FEB_14)

    assert store.subjects_with_code("CS401") == created
    assert second.subject.id == created[0].id
    assert second.created_count == 0
    assert len(store.schedules) == 1
    assert next(iter(store.schedules.values())).exam_date == FEB_14


@pytest.mark.asyncio
async def test_acting_department_reschedule_moves_fanned_out_rows(campus):
    committer = ScheduleCommitter(campus.store)
    await committer.commit(StaffDeclared(campus.cs_teacher.id), FEB_10)

    await committer.commit(StaffDeclared(campus.cs_teacher.id), FEB_12)

    assert {s.exam_date for s in campus.store.rows_for("Data Structures")} == {FEB_12}
    assert len(campus.store.schedules) == 2


# ---------------------------------------------------------------------------
# Idempotence and canonical path
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_recommit_same_date_is_idempotent(campus):
    committer = ScheduleCommitter(campus.store)
    await committer.commit(StaffDeclared(campus.cs_teacher.id), FEB_10, time(9, 0))
    snapshot = {
        (s.subject_id, s.department_id, s.exam_date, s.exam_time)
        for s in campus.store.schedules.values()
    }

    result = await committer.commit(StaffDeclared(campus.cs_teacher.id), FEB_10, time(9, 0))

    assert result.created_count == 0
    assert {
        (s.subject_id, s.department_id, s.exam_date, s.exam_time)
        for s in campus.store.schedules.values()
    } == snapshot


@pytest.mark.asyncio
async def test_recommit_same_date_overwrites_time_and_assigner(campus):
    committer = ScheduleCommitter(campus.store)
    first_user, second_user = uuid.uuid4(), uuid.uuid4()
    await committer.commit(
        StaffDeclared(campus.cs_teacher.id), FEB_10, time(9, 0), assigned_by=first_user
    )

    result = await committer.commit(
        StaffDeclared(campus.cs_teacher.id), FEB_10, time(14, 0), assigned_by=second_user
    )

    assert result.created_count == 0
    rows = list(campus.store.schedules.values())
    assert sorted((s.subject_id, s.department_id) for s in rows) == sorted(
        [(campus.cs_ds.id, campus.cs.id), (campus.it_ds.id, campus.it.id)]
    )
    for schedule in rows:
        assert schedule.exam_date == FEB_10
        assert schedule.exam_time == time(14, 0)
        assert schedule.assigned_by == second_user
        assert schedule.updated_at.tzinfo is None
        assert schedule.updated_at > schedule.created_at


@pytest.mark.asyncio
async def test_canonical_target_writes_only_acting_row_and_no_event(campus):
    committer = ScheduleCommitter(campus.store)

    result = await committer.commit(Canonical(campus.cs_ds.id), FEB_10)

    assert [o.schedule.department_id for o in result.outcomes] == [campus.cs.id]
    assert result.event is None
    assert result.outcomes[0].schedule.is_shared is False


@pytest.mark.asyncio
async def test_canonical_target_respects_pinned_date(campus):
    committer = ScheduleCommitter(campus.store)
    await committer.commit(StaffDeclared(campus.cs_teacher.id), FEB_10)

    with pytest.raises(ConflictError) as exc_info:
        await committer.commit(Canonical(campus.it_ds.id), FEB_12)

    assert exc_info.value.pinned_date == FEB_10


@pytest.mark.asyncio
async def test_canonical_target_cannot_move_rows_it_fanned_out(campus):
    committer = ScheduleCommitter(campus.store)
    await committer.commit(StaffDeclared(campus.cs_teacher.id), FEB_10)

    with pytest.raises(ConflictError) as exc_info:
        await committer.commit(Canonical(campus.cs_ds.id), FEB_12)

    assert exc_info.value.pinned_date == FEB_10
    assert exc_info.value.department == "Information Technology"
    assert {s.exam_date for s in campus.store.rows_for("Data Structures")} == {FEB_10}


@pytest.mark.asyncio
async def test_canonical_target_may_confirm_fanned_out_date(campus):
    committer = ScheduleCommitter(campus.store)
    await committer.commit(StaffDeclared(campus.cs_teacher.id), FEB_10)

    result = await committer.commit(Canonical(campus.cs_ds.id), FEB_10, time(9, 0))

    assert result.created_count == 0
    assert result.outcomes[0].schedule.is_shared is True
    _assert_shared_dates_equal(campus.store, "Data Structures")


# ---------------------------------------------------------------------------
# Input validation
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_unknown_staff_raises_not_found(campus):
    with pytest.raises(NotFoundError):
        await ScheduleCommitter(campus.store).commit(StaffDeclared(9999), FEB_10)


@pytest.mark.asyncio
async def test_unknown_subject_raises_not_found(campus):
    with pytest.raises(NotFoundError):
        await ScheduleCommitter(campus.store).commit(Canonical(9999), FEB_10)


@pytest.mark.asyncio
async def test_staff_without_declared_subject_raises_validation(campus):
    undeclared = campus.store.add_staff("Esther P", campus.cs, subject_name="Graphics")

    with pytest.raises(ValidationError) as exc_info:
        await ScheduleCommitter(campus.store).commit(StaffDeclared(undeclared.id), FEB_10)

    assert exc_info.value.field == "subject"
    assert campus.store.schedules == {}


@pytest.mark.asyncio
async def test_staff_declaring_another_departments_code_is_rejected(campus):
    borrowed = campus.store.add_staff(
        "Devi M", campus.it, subject_name="Data Structures", subject_code="CS301"
    )

    with pytest.raises(ValidationError) as exc_info:
        await ScheduleCommitter(campus.store).commit(StaffDeclared(borrowed.id), FEB_10)

    assert exc_info.value.field == "subject_code"
    assert "CS301" in str(exc_info.value)
    assert campus.store.schedules == {}
    assert campus.store.subjects_with_code("CS301") == [campus.cs_ds]


@pytest.mark.asyncio
async def test_time_outside_slots_rejected(campus):
    committer = ScheduleCommitter(campus.store, allowed_times=[time(9, 0), time(14, 0)])

    with pytest.raises(ValidationError) as exc_info:
        await committer.commit(StaffDeclared(campus.cs_teacher.id), FEB_10, time(12, 30))

    assert exc_info.value.field == "exam_time"
    assert "09:00, 14:00" in str(exc_info.value)


@pytest.mark.asyncio
async def test_time_in_slots_is_stored(campus):
    committer = ScheduleCommitter(campus.store, allowed_times=[time(9, 0), time(14, 0)])

    result = await committer.commit(StaffDeclared(campus.cs_teacher.id), FEB_10, time(14, 0))

    assert all(o.schedule.exam_time == time(14, 0) for o in result.outcomes)
