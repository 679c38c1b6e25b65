from __future__ import annotations

import pytest
from sqlalchemy.exc import OperationalError

from rribndb.apps.accounts import models as account_models
from rribndb.apps.rids import lifecycle
from rribndb.apps.rids import models as rids_models
from rribndb.apps.rids import services as rids_services
from rribndb.apps.rids.enums import RIDSActionType, RIDSStatus
from rribndb.apps.rids.errors import Conflict, InvalidTransition, NoOpError, NotFound, ValidationError


def _create_account(db_session, *, email: str, role: account_models.AccountRole) -> account_models.Account:
    account = account_models.Account(
        email=email,
        first_name="Juan",
        last_name="Santos",
        role=role,
        status=account_models.AccountStatus.ACTIVE,
    )
    db_session.add(account)
    db_session.commit()
    return account


def _create_form(db_session):
    reservist = _create_account(db_session, email="res@example.com", role=account_models.AccountRole.RESERVIST)
    staff = _create_account(db_session, email="staff@example.com", role=account_models.AccountRole.STAFF)
    form = rids_services.create_rids_form(db_session, reservist_id=reservist.id, created_by=staff.id)
    db_session.commit()
    return form, staff


def _history_count(db_session, form_id: str) -> int:
    return (
        db_session.query(rids_models.RIDSStatusHistory)
        .filter(rids_models.RIDSStatusHistory.rids_form_id == form_id)
        .count()
    )


def test_create_rids_form_starts_in_draft(db_session):
    form, staff = _create_form(db_session)

    assert form.status == RIDSStatus.DRAFT
    assert form.created_by == staff.id
    assert _history_count(db_session, form.id) == 0


def test_create_rids_form_requires_reservist_account(db_session):
    staff = _create_account(db_session, email="staff@example.com", role=account_models.AccountRole.STAFF)

    with pytest.raises(NotFound) as excinfo:
        rids_services.create_rids_form(db_session, reservist_id=staff.id, created_by=staff.id)

    assert excinfo.value.message == "Reservist not found"


def test_create_rids_form_refuses_second_form_for_reservist(db_session):
    form, staff = _create_form(db_session)

    with pytest.raises(Conflict) as excinfo:
        rids_services.create_rids_form(db_session, reservist_id=form.reservist_id, created_by=staff.id)

    assert excinfo.value.message == "RIDS already exists for this reservist"
    assert excinfo.value.status_code == 409
    assert excinfo.value.detail == [{"field": "reservist_id", "reason": f"existing RIDS {form.id}"}]
    assert db_session.query(rids_models.RIDSForm).count() == 1


def test_full_workflow_appends_one_history_row_per_transition(db_session):
    form, staff = _create_form(db_session)

    outcome = rids_services.submit_rids(db_session, form.id, actor_id=staff.id)
    assert outcome.form.status == RIDSStatus.SUBMITTED
    assert outcome.form.submitted_by == staff.id
    assert outcome.warnings == []
    assert _history_count(db_session, form.id) == 1

    outcome = rids_services.reject_rids(
        db_session, form.id, actor_id=staff.id, rejection_reason="Missing signature"
    )
    assert outcome.form.rejection_reason == "Missing signature"
    assert _history_count(db_session, form.id) == 2

    rids_services.submit_rids(db_session, form.id, actor_id=staff.id, reason="Signature added")
    outcome = rids_services.approve_rids(db_session, form.id, actor_id=staff.id, notes="OK")
    assert outcome.form.status == RIDSStatus.APPROVED
    assert outcome.form.approved_by == staff.id
    assert outcome.form.rejection_reason is None

    history = rids_services.list_status_history(db_session, form.id)
    assert [h.action_type for h in history] == [
        RIDSActionType.SUBMIT,
        RIDSActionType.REJECT,
        RIDSActionType.SUBMIT,
        RIDSActionType.APPROVE,
    ]
    assert history[0].reason == "RIDS submitted for approval"
    assert history[-1].notes == "OK"


def test_change_status_revert_records_history(db_session):
    form, staff = _create_form(db_session)
    rids_services.submit_rids(db_session, form.id, actor_id=staff.id)
    rids_services.approve_rids(db_session, form.id, actor_id=staff.id)

    outcome = rids_services.change_rids_status(
        db_session,
        form.id,
        actor_id=staff.id,
        new_status="draft",
        reason="Reservist changed unit",
    )

    assert outcome.form.status == RIDSStatus.DRAFT
    assert outcome.form.approved_by is None
    assert outcome.form.approved_at is None
    assert outcome.history.action_type == RIDSActionType.REVERT
    assert outcome.previous_status == RIDSStatus.APPROVED


def test_failed_transition_leaves_form_and_history_untouched(db_session):
    form, staff = _create_form(db_session)

    with pytest.raises(InvalidTransition):
        rids_services.approve_rids(db_session, form.id, actor_id=staff.id)
    with pytest.raises(NoOpError):
        rids_services.change_rids_status(
            db_session, form.id, actor_id=staff.id, new_status="draft", reason="noop"
        )
    with pytest.raises(ValidationError):
        rids_services.reject_rids(db_session, form.id, actor_id=staff.id, rejection_reason=" ")

    db_session.refresh(form)
    assert form.status == RIDSStatus.DRAFT
    assert _history_count(db_session, form.id) == 0


def test_missing_form_raises_not_found(db_session):
    with pytest.raises(NotFound):
        rids_services.submit_rids(db_session, "does-not-exist", actor_id="staff-1")


def test_history_failure_keeps_status_and_warns(db_session, monkeypatch, caplog):
    form, staff = _create_form(db_session)

    def _boom(db, entry):
        raise OperationalError("INSERT INTO rids_status_history", {}, Exception("disk full"))

    monkeypatch.setattr(rids_services, "_insert_history", _boom)

    with caplog.at_level("WARNING", logger="rribndb.apps.rids.services"):
        outcome = rids_services.submit_rids(db_session, form.id, actor_id=staff.id)

    assert outcome.history is None
    assert outcome.warnings == [rids_services.HISTORY_NOT_RECORDED]
    assert "Failed to insert RIDS status history" in caplog.text

    stored = db_session.query(rids_models.RIDSForm).filter(rids_models.RIDSForm.id == form.id).one()
    assert stored.status == RIDSStatus.SUBMITTED
    assert _history_count(db_session, form.id) == 0


def test_concurrent_status_change_is_detected(db_session):
    form, staff = _create_form(db_session)
    stale = rids_services.get_rids_form(db_session, form.id)
    record = rids_services.to_record(stale)

    # Another writer moves the form first.
    db_session.query(rids_models.RIDSForm).filter(rids_models.RIDSForm.id == form.id).update(
        {rids_models.RIDSForm.status: RIDSStatus.SUBMITTED}, synchronize_session=False
    )
    db_session.commit()

    result = lifecycle.submit(record, staff.id, "stale submit")
    with pytest.raises(InvalidTransition) as excinfo:
        rids_services._save_record(db_session, stale, result)

    assert excinfo.value.message == "RIDS status changed concurrently"


def test_delete_draft_removes_form_and_history(db_session):
    form, staff = _create_form(db_session)
    rids_services.submit_rids(db_session, form.id, actor_id=staff.id)
    rids_services.change_rids_status(
        db_session, form.id, actor_id=staff.id, new_status="draft", reason="Pulled back"
    )
    assert _history_count(db_session, form.id) == 2

    rids_services.delete_rids_form(db_session, form.id)
    db_session.commit()

    assert db_session.query(rids_models.RIDSForm).filter(rids_models.RIDSForm.id == form.id).first() is None
    assert _history_count(db_session, form.id) == 0


@pytest.mark.parametrize("target", [RIDSStatus.SUBMITTED, RIDSStatus.APPROVED])
def test_delete_refused_once_form_leaves_draft(db_session, target):
    form, staff = _create_form(db_session)
    rids_services.submit_rids(db_session, form.id, actor_id=staff.id)
    if target == RIDSStatus.APPROVED:
        rids_services.approve_rids(db_session, form.id, actor_id=staff.id)

    with pytest.raises(InvalidTransition) as excinfo:
        rids_services.delete_rids_form(db_session, form.id)

    assert excinfo.value.message == "Can only delete draft RIDS"
    assert excinfo.value.detail == [{"field": "status", "reason": f"RIDS is {target.value}"}]
    stored = db_session.query(rids_models.RIDSForm).filter(rids_models.RIDSForm.id == form.id).one()
    assert stored.status == target
    assert _history_count(db_session, form.id) >= 1


def test_delete_missing_form_raises_not_found(db_session):
    with pytest.raises(NotFound):
        rids_services.delete_rids_form(db_session, "does-not-exist")


def test_deleted_reservist_slot_accepts_new_form(db_session):
    form, staff = _create_form(db_session)
    rids_services.delete_rids_form(db_session, form.id)
    db_session.commit()

    replacement = rids_services.create_rids_form(db_session, reservist_id=form.reservist_id, created_by=staff.id)
    db_session.commit()

    assert replacement.id != form.id
    assert replacement.status == RIDSStatus.DRAFT
