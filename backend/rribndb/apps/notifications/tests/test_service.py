from __future__ import annotations

import logging

import pytest
from fastapi import HTTPException

from rribndb.apps.accounts import models as account_models
from rribndb.apps.notifications import models as notification_models
from rribndb.apps.notifications import router as notification_router
from rribndb.apps.notifications import service as notification_service
from rribndb.apps.rids.enums import RIDSStatus


def _create_reservist(db_session) -> account_models.Account:
    account = account_models.Account(
        email="res@example.com",
        first_name="Juan",
        last_name="Santos",
        role=account_models.AccountRole.RESERVIST,
        status=account_models.AccountStatus.ACTIVE,
    )
    db_session.add(account)
    db_session.commit()
    return account


@pytest.mark.parametrize(
    "status,reason,title,message",
    [
        (RIDSStatus.DRAFT, "Wrong unit", "RIDS Status Changed", "Your RIDS status was changed to Draft. Reason: Wrong unit"),
        (RIDSStatus.SUBMITTED, "Ready", "RIDS Submitted", "Your RIDS was submitted for approval. Reason: Ready"),
        (RIDSStatus.APPROVED, "Checked", "RIDS Approved", "Your RIDS has been approved. Note: Checked"),
        (RIDSStatus.APPROVED, None, "RIDS Approved", "Your RIDS has been approved."),
        (RIDSStatus.REJECTED, "Blurry photo", "RIDS Rejected", "Your RIDS was rejected. Reason: Blurry photo"),
    ],
)
def test_rids_status_message(status, reason, title, message):
    assert notification_service.rids_status_message(status, reason) == (title, message)


def test_notification_types_cover_rids_only():
    assert [member.value for member in notification_models.NotificationType] == ["rids"]


def test_notify_rids_status_change_creates_unread_notification(db_session):
    reservist = _create_reservist(db_session)

    notification = notification_service.notify_rids_status_change(
        reservist_id=reservist.id,
        rids_form_id="rids-1",
        new_status=RIDSStatus.REJECTED,
        reason="Missing signature",
        db=db_session,
    )

    assert notification is not None
    assert notification.type == notification_models.NotificationType.RIDS
    assert notification.reference_id == "rids-1"
    assert notification.is_read is False
    assert notification_service.unread_count(db_session, account_id=reservist.id) == 1


def test_notify_failure_is_logged_and_swallowed(db_session, monkeypatch, caplog):
    reservist = _create_reservist(db_session)

    def _boom(*args, **kwargs):
        raise RuntimeError("mail queue down")

    monkeypatch.setattr(notification_service, "create_notification", _boom)

    with caplog.at_level(logging.WARNING, logger="rribndb.apps.notifications.service"):
        result = notification_service.notify_rids_status_change(
            reservist_id=reservist.id,
            rids_form_id="rids-1",
            new_status=RIDSStatus.APPROVED,
            reason=None,
            db=db_session,
        )

    assert result is None
    assert "Failed to create RIDS notification" in caplog.text


def test_mark_read_and_mark_all_read(db_session):
    reservist = _create_reservist(db_session)
    first = notification_service.create_notification(
        db_session,
        account_id=reservist.id,
        type=notification_models.NotificationType.RIDS,
        title="RIDS Submitted",
        message="Your RIDS was submitted for approval. Reason: Ready",
    )
    for index in range(2):
        notification_service.create_notification(
            db_session,
            account_id=reservist.id,
            type=notification_models.NotificationType.RIDS,
            title="RIDS Rejected",
            message=f"Your RIDS was rejected. Reason: Missing page {index}",
        )
    db_session.commit()

    marked = notification_service.mark_read(db_session, account_id=reservist.id, notification_id=first.id)
    db_session.commit()
    assert marked.is_read is True
    assert marked.read_at is not None
    assert notification_service.unread_count(db_session, account_id=reservist.id) == 2

    assert notification_service.mark_read(db_session, account_id="someone-else", notification_id=first.id) is None

    unread = notification_service.list_notifications(db_session, account_id=reservist.id, unread_only=True)
    assert len(unread) == 2

    updated = notification_service.mark_all_read(db_session, account_id=reservist.id)
    db_session.commit()
    assert updated == 2
    assert notification_service.unread_count(db_session, account_id=reservist.id) == 0
    assert len(notification_service.list_notifications(db_session, account_id=reservist.id)) == 3


def test_router_endpoints_scope_to_current_account(db_session):
    reservist = _create_reservist(db_session)
    notification_service.notify_rids_status_change(
        reservist_id=reservist.id,
        rids_form_id="rids-1",
        new_status=RIDSStatus.SUBMITTED,
        reason="Ready",
        db=db_session,
    )

    listed = notification_router.list_my_notifications(
        unread_only=True, limit=50, db=db_session, current_user=reservist
    )
    assert [n.title for n in listed] == ["RIDS Submitted"]
    assert notification_router.get_unread_count(db=db_session, current_user=reservist).count == 1

    with pytest.raises(HTTPException) as excinfo:
        notification_router.mark_notification_read(
            notification_id="missing", db=db_session, current_user=reservist
        )
    assert excinfo.value.status_code == 404

    result = notification_router.mark_all_notifications_read(db=db_session, current_user=reservist)
    assert result.updated == 1
