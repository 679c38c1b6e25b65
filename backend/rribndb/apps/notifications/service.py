from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from rribndb.apps.rids.enums import RIDSStatus
from rribndb.database import WriteSessionLocal

from . import models

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def rids_status_message(status: RIDSStatus, reason: Optional[str]) -> Tuple[str, str]:
    """Title and body shown to the reservist after their RIDS moves."""
    reason = (reason or "").strip()
    if status == RIDSStatus.DRAFT:
        return "RIDS Status Changed", f"Your RIDS status was changed to Draft. Reason: {reason}"
    if status == RIDSStatus.SUBMITTED:
        return "RIDS Submitted", f"Your RIDS was submitted for approval. Reason: {reason}"
    if status == RIDSStatus.APPROVED:
        note = f" Note: {reason}" if reason else ""
        return "RIDS Approved", f"Your RIDS has been approved.{note}"
    return "RIDS Rejected", f"Your RIDS was rejected. Reason: {reason}"


def create_notification(
    db: Session,
    *,
    account_id: str,
    type: models.NotificationType,
    title: str,
    message: str,
    reference_id: Optional[str] = None,
) -> models.Notification:
    notification = models.Notification(
        account_id=account_id,
        type=type,
        title=title,
        message=message,
        reference_id=reference_id,
        is_read=False,
    )
    db.add(notification)
    db.flush()
    return notification


def notify_rids_status_change(
    *,
    reservist_id: str,
    rids_form_id: str,
    new_status: RIDSStatus,
    reason: Optional[str],
    db: Optional[Session] = None,
) -> Optional[models.Notification]:
    """
    Fire-and-forget notice for the owning reservist.

    Runs after the transition has been committed (usually as a background
    task with its own session). Failures are logged and swallowed so they
    can never undo the status change.
    """
    owns_session = db is None
    db = db or WriteSessionLocal()
    try:
        title, message = rids_status_message(new_status, reason)
        notification = create_notification(
            db,
            account_id=reservist_id,
            type=models.NotificationType.RIDS,
            title=title,
            message=message,
            reference_id=rids_form_id,
        )
        db.commit()
        return notification
    except Exception:
        db.rollback()
        logger.warning(
            "Failed to create RIDS notification",
            exc_info=True,
            extra={"rids_id": rids_form_id, "reservist_id": reservist_id, "status": new_status.value},
        )
        return None
    finally:
        if owns_session:
            db.close()


def list_notifications(
    db: Session,
    *,
    account_id: str,
    unread_only: bool = False,
    limit: int = 50,
) -> List[models.Notification]:
    query = db.query(models.Notification).filter(models.Notification.account_id == account_id)
    if unread_only:
        query = query.filter(models.Notification.is_read.is_(False))
    return (
        query.order_by(models.Notification.created_at.desc(), models.Notification.id.desc())
        .limit(limit)
        .all()
    )


def unread_count(db: Session, *, account_id: str) -> int:
    return (
        db.query(models.Notification)
        .filter(
            models.Notification.account_id == account_id,
            models.Notification.is_read.is_(False),
        )
        .count()
    )


def mark_read(db: Session, *, account_id: str, notification_id: str) -> Optional[models.Notification]:
    notification = (
        db.query(models.Notification)
        .filter(
            models.Notification.id == notification_id,
            models.Notification.account_id == account_id,
        )
        .first()
    )
    if notification is None:
        return None
    if not notification.is_read:
        notification.is_read = True
        notification.read_at = _utcnow()
        db.add(notification)
    return notification


def mark_all_read(db: Session, *, account_id: str) -> int:
    return (
        db.query(models.Notification)
        .filter(
            models.Notification.account_id == account_id,
            models.Notification.is_read.is_(False),
        )
        .update(
            {models.Notification.is_read: True, models.Notification.read_at: _utcnow()},
            synchronize_session=False,
        )
    )
