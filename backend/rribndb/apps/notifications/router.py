from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ...database import get_db
from ...security import get_current_active_user
from ..accounts import models as account_models
from . import schemas, service

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=List[schemas.NotificationRead])
def list_my_notifications(
    unread_only: bool = Query(False),
    limit: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db),
    current_user: account_models.Account = Depends(get_current_active_user),
):
    return service.list_notifications(
        db, account_id=current_user.id, unread_only=unread_only, limit=limit
    )


@router.get("/unread-count", response_model=schemas.UnreadCount)
def get_unread_count(
    db: Session = Depends(get_db),
    current_user: account_models.Account = Depends(get_current_active_user),
):
    return schemas.UnreadCount(count=service.unread_count(db, account_id=current_user.id))


@router.put("/{notification_id}/read", response_model=schemas.NotificationRead)
def mark_notification_read(
    notification_id: str,
    db: Session = Depends(get_db),
    current_user: account_models.Account = Depends(get_current_active_user),
):
    notification = service.mark_read(db, account_id=current_user.id, notification_id=notification_id)
    if notification is None:
        raise HTTPException(status_code=404, detail="Notification not found")
    db.commit()
    db.refresh(notification)
    return notification


@router.put("/mark-all-read", response_model=schemas.MarkAllReadResult)
def mark_all_notifications_read(
    db: Session = Depends(get_db),
    current_user: account_models.Account = Depends(get_current_active_user),
):
    updated = service.mark_all_read(db, account_id=current_user.id)
    db.commit()
    return schemas.MarkAllReadResult(updated=updated)
