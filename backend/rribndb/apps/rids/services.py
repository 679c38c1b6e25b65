"""
Persistence side of the RIDS lifecycle.

Each transition runs in two units of work:
1. compare-and-swap update of the form's status columns, committed;
2. insert of the matching history row, committed separately.

A failure in step 2 is logged, rolled back on its own and reported to the
caller as the `history_not_recorded` warning. The status change from step 1
stands.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from rribndb.apps.accounts import models as account_models
from rribndb.utils.identifiers import generate_uuid7

from . import lifecycle, models
from .enums import RIDSStatus
from .errors import Conflict, InvalidTransition, NotFound

logger = logging.getLogger(__name__)

HISTORY_NOT_RECORDED = "history_not_recorded"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class TransitionOutcome:
    form: models.RIDSForm
    result: lifecycle.TransitionResult
    history: Optional[models.RIDSStatusHistory] = None
    warnings: List[str] = field(default_factory=list)

    @property
    def previous_status(self) -> RIDSStatus:
        return self.result.history.from_status


# ---------------------------------------------------------------------------
# LOOKUPS
# ---------------------------------------------------------------------------


def get_rids_form(db: Session, rids_id: str) -> models.RIDSForm:
    form = db.query(models.RIDSForm).filter(models.RIDSForm.id == rids_id).first()
    if form is None:
        raise NotFound("RIDS not found", detail=[{"field": "id", "reason": "no such RIDS"}])
    return form


def to_record(form: models.RIDSForm) -> lifecycle.RIDSRecord:
    """Boundary check: ORM row -> typed record the lifecycle works on."""
    return lifecycle.RIDSRecord(
        id=form.id,
        reservist_id=form.reservist_id,
        status=form.status,
        submitted_by=form.submitted_by,
        submitted_at=form.submitted_at,
        approved_by=form.approved_by,
        approved_at=form.approved_at,
        rejection_reason=form.rejection_reason,
    )


def list_status_history(db: Session, rids_id: str) -> List[models.RIDSStatusHistory]:
    get_rids_form(db, rids_id)
    return (
        db.query(models.RIDSStatusHistory)
        .filter(models.RIDSStatusHistory.rids_form_id == rids_id)
        .order_by(models.RIDSStatusHistory.created_at.asc(), models.RIDSStatusHistory.id.asc())
        .all()
    )


def create_rids_form(
    db: Session,
    *,
    reservist_id: str,
    created_by: Optional[str],
) -> models.RIDSForm:
    reservist = (
        db.query(account_models.Account)
        .filter(
            account_models.Account.id == reservist_id,
            account_models.Account.role == account_models.AccountRole.RESERVIST,
        )
        .first()
    )
    if reservist is None:
        raise NotFound(
            "Reservist not found",
            detail=[{"field": "reservist_id", "reason": "no reservist account with this id"}],
        )

    existing = db.query(models.RIDSForm.id).filter(models.RIDSForm.reservist_id == reservist_id).first()
    if existing is not None:
        raise Conflict(
            "RIDS already exists for this reservist",
            detail=[{"field": "reservist_id", "reason": f"existing RIDS {existing.id}"}],
        )

    form = models.RIDSForm(
        reservist_id=reservist_id,
        status=RIDSStatus.DRAFT,
        created_by=created_by,
    )
    db.add(form)
    db.flush()
    return form


def delete_rids_form(db: Session, rids_id: str) -> None:
    """
    Remove a draft RIDS together with its status history. Forms that have
    left draft are kept. The caller commits.
    """
    form = get_rids_form(db, rids_id)
    if form.status != RIDSStatus.DRAFT:
        raise InvalidTransition(
            "Can only delete draft RIDS",
            detail=[{"field": "status", "reason": f"RIDS is {form.status.value}"}],
        )

    # Same effect as ON DELETE CASCADE where the backend does not enforce it.
    db.query(models.RIDSStatusHistory).filter(
        models.RIDSStatusHistory.rids_form_id == form.id
    ).delete(synchronize_session=False)
    deleted = (
        db.query(models.RIDSForm)
        .filter(models.RIDSForm.id == form.id, models.RIDSForm.status == RIDSStatus.DRAFT)
        .delete(synchronize_session=False)
    )
    if deleted != 1:
        db.rollback()
        raise InvalidTransition(
            "RIDS status changed concurrently",
            detail=[{"field": "status", "reason": "expected draft"}],
        )
    logger.info("RIDS deleted", extra={"rids_id": rids_id, "reservist_id": form.reservist_id})
    db.expunge(form)


# ---------------------------------------------------------------------------
# PERSISTENCE STEPS
# ---------------------------------------------------------------------------


def _save_record(db: Session, form: models.RIDSForm, result: lifecycle.TransitionResult) -> None:
    record = result.record
    expected = result.history.from_status
    updated = (
        db.query(models.RIDSForm)
        .filter(models.RIDSForm.id == form.id, models.RIDSForm.status == expected)
        .update(
            {
                models.RIDSForm.status: record.status,
                models.RIDSForm.submitted_by: record.submitted_by,
                models.RIDSForm.submitted_at: record.submitted_at,
                models.RIDSForm.approved_by: record.approved_by,
                models.RIDSForm.approved_at: record.approved_at,
                models.RIDSForm.rejection_reason: record.rejection_reason,
                models.RIDSForm.updated_at: _utcnow(),
            },
            synchronize_session=False,
        )
    )
    if updated != 1:
        db.rollback()
        raise InvalidTransition(
            "RIDS status changed concurrently",
            detail=[{"field": "status", "reason": f"expected {expected.value}"}],
        )
    db.commit()
    db.refresh(form)


def _insert_history(db: Session, entry: lifecycle.StatusHistoryEntry) -> models.RIDSStatusHistory:
    row = models.RIDSStatusHistory(
        id=generate_uuid7(entry.timestamp),
        rids_form_id=entry.rids_form_id,
        from_status=entry.from_status,
        to_status=entry.to_status,
        reason=entry.reason,
        notes=entry.notes,
        changed_by=entry.changed_by,
        action_type=entry.action_type,
        metadata_json={},
        created_at=entry.timestamp,
    )
    db.add(row)
    db.commit()
    return row


def _append_history(
    db: Session,
    entry: lifecycle.StatusHistoryEntry,
) -> Optional[models.RIDSStatusHistory]:
    try:
        return _insert_history(db, entry)
    except SQLAlchemyError:
        db.rollback()
        logger.warning(
            "Failed to insert RIDS status history",
            exc_info=True,
            extra={
                "rids_id": entry.rids_form_id,
                "from_status": entry.from_status.value,
                "to_status": entry.to_status.value,
                "action_type": entry.action_type.value,
            },
        )
        return None


def _commit_transition(
    db: Session,
    form: models.RIDSForm,
    result: lifecycle.TransitionResult,
) -> TransitionOutcome:
    _save_record(db, form, result)

    outcome = TransitionOutcome(form=form, result=result)
    outcome.history = _append_history(db, result.history)
    if outcome.history is None:
        outcome.warnings.append(HISTORY_NOT_RECORDED)

    logger.info(
        "RIDS status changed",
        extra={
            "rids_id": form.id,
            "from_status": result.history.from_status.value,
            "to_status": result.history.to_status.value,
            "action_type": result.history.action_type.value,
            "changed_by": result.history.changed_by,
        },
    )
    return outcome


# ---------------------------------------------------------------------------
# TRANSITIONS
# ---------------------------------------------------------------------------


def submit_rids(
    db: Session,
    rids_id: str,
    *,
    actor_id: str,
    reason: str = lifecycle.DEFAULT_SUBMIT_REASON,
    notes: Optional[str] = None,
) -> TransitionOutcome:
    form = get_rids_form(db, rids_id)
    result = lifecycle.submit(to_record(form), actor_id, reason, notes)
    return _commit_transition(db, form, result)


def approve_rids(
    db: Session,
    rids_id: str,
    *,
    actor_id: str,
    notes: Optional[str] = None,
) -> TransitionOutcome:
    form = get_rids_form(db, rids_id)
    result = lifecycle.approve(to_record(form), actor_id, notes)
    return _commit_transition(db, form, result)


def reject_rids(
    db: Session,
    rids_id: str,
    *,
    actor_id: str,
    rejection_reason: str,
    notes: Optional[str] = None,
) -> TransitionOutcome:
    form = get_rids_form(db, rids_id)
    result = lifecycle.reject(to_record(form), rejection_reason, actor_id, notes)
    return _commit_transition(db, form, result)


def change_rids_status(
    db: Session,
    rids_id: str,
    *,
    actor_id: str,
    new_status: str,
    reason: str,
    notes: Optional[str] = None,
) -> TransitionOutcome:
    form = get_rids_form(db, rids_id)
    result = lifecycle.change_status(to_record(form), new_status, reason, actor_id, notes)
    return _commit_transition(db, form, result)
