from __future__ import annotations

from typing import List

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status
from sqlalchemy.orm import Session

from ...database import get_db
from ...security import require_staff
from ..accounts import models as account_models
from ..notifications import service as notification_service
from . import schemas, services
from .errors import RIDSError

router = APIRouter(prefix="/staff/rids", tags=["rids"])


# ---------------------------------------------------------------------------
# HELPERS
# ---------------------------------------------------------------------------


def _http_error(exc: RIDSError) -> HTTPException:
    return HTTPException(status_code=exc.status_code, detail=exc.as_payload())


def _transition_response(
    outcome: services.TransitionOutcome,
    message: str,
    background_tasks: BackgroundTasks,
) -> schemas.RIDSTransitionResponse:
    entry = outcome.result.history
    background_tasks.add_task(
        notification_service.notify_rids_status_change,
        reservist_id=outcome.form.reservist_id,
        rids_form_id=outcome.form.id,
        new_status=entry.to_status,
        reason=entry.reason,
    )
    return schemas.RIDSTransitionResponse(
        data=schemas.RIDSFormRead.model_validate(outcome.form),
        history=(
            schemas.RIDSStatusHistoryRead.model_validate(outcome.history)
            if outcome.history is not None
            else None
        ),
        message=message,
        warnings=outcome.warnings,
    )


# ---------------------------------------------------------------------------
# FORMS
# ---------------------------------------------------------------------------


@router.post("", response_model=schemas.RIDSFormRead, status_code=status.HTTP_201_CREATED)
def create_rids(
    payload: schemas.RIDSCreate,
    db: Session = Depends(get_db),
    current_user: account_models.Account = Depends(require_staff),
):
    try:
        form = services.create_rids_form(
            db, reservist_id=payload.reservist_id, created_by=current_user.id
        )
    except RIDSError as exc:
        raise _http_error(exc)
    db.commit()
    db.refresh(form)
    return form


@router.get("/{rids_id}", response_model=schemas.RIDSFormRead)
def get_rids(
    rids_id: str,
    db: Session = Depends(get_db),
    current_user: account_models.Account = Depends(require_staff),
):
    try:
        return services.get_rids_form(db, rids_id)
    except RIDSError as exc:
        raise _http_error(exc)


@router.delete("/{rids_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_rids(
    rids_id: str,
    db: Session = Depends(get_db),
    current_user: account_models.Account = Depends(require_staff),
):
    """Draft forms only; submitted and decided forms stay on record."""
    try:
        services.delete_rids_form(db, rids_id)
    except RIDSError as exc:
        raise _http_error(exc)
    db.commit()
    return None


@router.get("/{rids_id}/history", response_model=List[schemas.RIDSStatusHistoryRead])
def get_rids_history(
    rids_id: str,
    db: Session = Depends(get_db),
    current_user: account_models.Account = Depends(require_staff),
):
    try:
        return services.list_status_history(db, rids_id)
    except RIDSError as exc:
        raise _http_error(exc)


# ---------------------------------------------------------------------------
# TRANSITIONS
# ---------------------------------------------------------------------------


@router.put("/{rids_id}/submit", response_model=schemas.RIDSTransitionResponse)
def submit_rids(
    rids_id: str,
    payload: schemas.RIDSSubmitRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: account_models.Account = Depends(require_staff),
):
    try:
        outcome = services.submit_rids(
            db, rids_id, actor_id=current_user.id, reason=payload.reason, notes=payload.notes
        )
    except RIDSError as exc:
        raise _http_error(exc)
    return _transition_response(outcome, "RIDS submitted for approval successfully", background_tasks)


@router.put("/{rids_id}/approve", response_model=schemas.RIDSTransitionResponse)
def approve_rids(
    rids_id: str,
    payload: schemas.RIDSApproveRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: account_models.Account = Depends(require_staff),
):
    try:
        outcome = services.approve_rids(db, rids_id, actor_id=current_user.id, notes=payload.notes)
    except RIDSError as exc:
        raise _http_error(exc)
    return _transition_response(outcome, "RIDS approved successfully", background_tasks)


@router.put("/{rids_id}/reject", response_model=schemas.RIDSTransitionResponse)
def reject_rids(
    rids_id: str,
    payload: schemas.RIDSRejectRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: account_models.Account = Depends(require_staff),
):
    try:
        outcome = services.reject_rids(
            db,
            rids_id,
            actor_id=current_user.id,
            rejection_reason=payload.rejection_reason,
            notes=payload.notes,
        )
    except RIDSError as exc:
        raise _http_error(exc)
    return _transition_response(outcome, "RIDS rejected successfully", background_tasks)


@router.put("/{rids_id}/change-status", response_model=schemas.RIDSTransitionResponse)
def change_rids_status(
    rids_id: str,
    payload: schemas.RIDSChangeStatusRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: account_models.Account = Depends(require_staff),
):
    try:
        outcome = services.change_rids_status(
            db,
            rids_id,
            actor_id=current_user.id,
            new_status=payload.new_status,
            reason=payload.reason,
            notes=payload.notes,
        )
    except RIDSError as exc:
        raise _http_error(exc)
    new_status = outcome.result.record.status.value
    return _transition_response(
        outcome, f"RIDS status changed to {new_status} successfully", background_tasks
    )
