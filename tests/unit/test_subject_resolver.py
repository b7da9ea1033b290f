"""Unit tests for SubjectIdentityResolver (src/services/subject_resolver.py)."""

from __future__ import annotations

import pytest
from sqlalchemy.exc import IntegrityError

from src.exceptions import ValidationError
from src.models.subject import Subject
from src.services.subject_resolver import SubjectIdentityResolver


@pytest.mark.asyncio
async def test_existing_code_is_returned_without_insert(campus):
    resolver = SubjectIdentityResolver(campus.store)

    subject = await resolver.resolve(
        subject_code="CS301", subject_name="Data Structures", department_id=campus.cs.id
    )

    assert subject is campus.cs_ds
    assert campus.store.calls["insert_subject"] == 0


@pytest.mark.asyncio
async def test_missing_code_creates_shared_subject(campus):
    resolver = SubjectIdentityResolver(campus.store)

    subject = await resolver.resolve(
        subject_code="EC201",
        subject_name="Signals and Systems",
        department_id=campus.ece.id,
        academic_year=2,
    )

    assert subject.id is not None
    assert subject.subject_code == "EC201"
    assert subject.is_shared is True
    assert subject.shared_subject_code == "EC201"
    assert subject.academic_year == 2
    assert campus.store.subjects_with_code("EC201") == [subject]


@pytest.mark.asyncio
async def test_concurrent_create_retries_once_as_lookup(campus):
    """A duplicate-key failure means another request won; its row is returned."""
    winner = Subject(
        subject_code="EC201",
        subject_name="Signals and Systems",
        department_id=campus.ece.id,
        is_shared=True,
    )
    campus.store.concurrent_subject = winner
    resolver = SubjectIdentityResolver(campus.store)

    subject = await resolver.resolve(
        subject_code="EC201", subject_name="Signals and Systems", department_id=campus.ece.id
    )

    assert subject is winner
    assert campus.store.calls["insert_subject"] == 1
    assert campus.store.calls["find_subject_by_code"] == 2
    assert campus.store.subjects_with_code("EC201") == [winner]


@pytest.mark.asyncio
async def test_integrity_error_without_winner_is_reraised(campus, monkeypatch):
    async def _always_fails(subject):
        raise IntegrityError("INSERT INTO subjects", {}, Exception("check violation"))

    monkeypatch.setattr(campus.store, "insert_subject", _always_fails)
    resolver = SubjectIdentityResolver(campus.store)

    with pytest.raises(IntegrityError):
        await resolver.resolve(
            subject_code="EC999", subject_name="Unknown", department_id=campus.ece.id
        )
    assert campus.store.calls["find_subject_by_code"] == 2


@pytest.mark.asyncio
@pytest.mark.parametrize("code, name", [("", "Data Structures"), ("CS301", "")])
async def test_blank_code_or_name_rejected(campus, code, name):
    resolver = SubjectIdentityResolver(campus.store)

    with pytest.raises(ValidationError):
        await resolver.resolve(subject_code=code, subject_name=name, department_id=campus.cs.id)


@pytest.mark.asyncio
async def test_resolve_for_staff_uses_declared_subject(campus):
    resolver = SubjectIdentityResolver(campus.store)

    subject = await resolver.resolve_for_staff(campus.it_teacher)

    assert subject is campus.it_ds
