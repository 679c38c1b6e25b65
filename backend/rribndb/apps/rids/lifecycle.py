"""
RIDS status state machine.

Every function here is pure: it receives the current record, the acting
account and the clock reading, and returns a new record together with the
history entry describing the move. Nothing is persisted and the input record
is never mutated; `rids.services` owns loading, saving and the history insert.

States: draft -> submitted -> approved | rejected. No state is terminal;
approved and rejected forms can be sent back through `change_status`.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Any, Optional, Union

from .enums import RIDSActionType, RIDSStatus
from .errors import InvalidTransition, NoOpError, ValidationError
from .registry import allowed_targets, guards_for

DEFAULT_SUBMIT_REASON = "RIDS submitted for approval"
DEFAULT_APPROVE_REASON = "RIDS approved by staff"

VALID_STATUSES = tuple(s.value for s in RIDSStatus)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_status(value: Union[RIDSStatus, str, None]) -> RIDSStatus:
    if isinstance(value, RIDSStatus):
        return value
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(
            "new_status is required",
            detail=[{"field": "new_status", "reason": "status required"}],
        )
    try:
        return RIDSStatus(str(value).strip().lower())
    except ValueError:
        raise ValidationError(
            f"Invalid status. Must be one of: {', '.join(VALID_STATUSES)}",
            detail=[{"field": "new_status", "reason": f"unknown status {value!r}"}],
        )


@dataclass(frozen=True)
class RIDSRecord:
    id: str
    reservist_id: str
    status: RIDSStatus = RIDSStatus.DRAFT
    submitted_by: Optional[str] = None
    submitted_at: Optional[datetime] = None
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "status", parse_status(self.status))

    @property
    def has_approval(self) -> bool:
        return self.approved_by is not None or self.approved_at is not None

    @property
    def has_rejection(self) -> bool:
        return self.rejection_reason is not None

    def fields_consistent(self) -> bool:
        """Approval and rejection data never coexist and only match their own status."""
        if self.has_approval and self.has_rejection:
            return False
        if self.status in (RIDSStatus.DRAFT, RIDSStatus.SUBMITTED):
            return not (self.has_approval or self.has_rejection)
        if self.status == RIDSStatus.APPROVED:
            return not self.has_rejection
        return not self.has_approval


@dataclass(frozen=True)
class StatusHistoryEntry:
    rids_form_id: str
    from_status: RIDSStatus
    to_status: RIDSStatus
    reason: str
    changed_by: str
    action_type: RIDSActionType
    timestamp: datetime
    notes: Optional[str] = None


@dataclass(frozen=True)
class TransitionResult:
    record: RIDSRecord
    history: StatusHistoryEntry


# ---------------------------------------------------------------------------
# HELPERS
# ---------------------------------------------------------------------------


def _require_text(value: Optional[str], field: str, message: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(message, detail=[{"field": field, "reason": "required"}])
    return str(value).strip()


def _clean_notes(notes: Optional[str]) -> Optional[str]:
    if notes is None:
        return None
    notes = notes.strip()
    return notes or None


def _cleared(record: RIDSRecord, status: RIDSStatus) -> RIDSRecord:
    return replace(
        record,
        status=status,
        approved_by=None,
        approved_at=None,
        rejection_reason=None,
    )


def _check_registered(record: RIDSRecord, target: RIDSStatus, verb: str, after: RIDSRecord) -> None:
    guards = guards_for(record.status, target)
    if guards is None:
        allowed = ", ".join(s.value for s in allowed_targets(record.status)) or "none"
        raise InvalidTransition(
            f"Cannot {verb} RIDS with status: {record.status.value}",
            detail=[{
                "field": "status",
                "reason": f"Cannot transition from {record.status.value} to {target.value} (allowed: {allowed})",
            }],
        )

    failures = []
    for guard in guards:
        failures.extend(guard(before_obj=record, after_obj=after))
    if failures:
        raise ValidationError("Missing requirements", detail=failures)


def derive_action_type(current: RIDSStatus, target: RIDSStatus) -> RIDSActionType:
    current = parse_status(current)
    target = parse_status(target)
    if target == RIDSStatus.SUBMITTED:
        return RIDSActionType.SUBMIT
    if target == RIDSStatus.APPROVED:
        return RIDSActionType.APPROVE
    if target == RIDSStatus.REJECTED:
        return RIDSActionType.REJECT
    if target == RIDSStatus.DRAFT and current in (RIDSStatus.APPROVED, RIDSStatus.REJECTED):
        return RIDSActionType.REVERT
    return RIDSActionType.MANUAL_CHANGE


def _entry(
    record: RIDSRecord,
    after: RIDSRecord,
    *,
    reason: str,
    notes: Optional[str],
    actor_id: str,
    action_type: RIDSActionType,
    now: datetime,
) -> StatusHistoryEntry:
    return StatusHistoryEntry(
        rids_form_id=record.id,
        from_status=record.status,
        to_status=after.status,
        reason=reason,
        notes=_clean_notes(notes),
        changed_by=actor_id,
        action_type=action_type,
        timestamp=now,
    )


# ---------------------------------------------------------------------------
# TRANSITIONS
# ---------------------------------------------------------------------------


def submit(
    record: RIDSRecord,
    actor_id: str,
    reason: str,
    notes: Optional[str] = None,
    *,
    now: Optional[datetime] = None,
) -> TransitionResult:
    """draft | rejected -> submitted."""
    reason = _require_text(reason, "reason", "reason is required for submission")
    now = now or _utcnow()

    after = replace(
        _cleared(record, RIDSStatus.SUBMITTED),
        submitted_by=actor_id,
        submitted_at=now,
    )
    _check_registered(record, RIDSStatus.SUBMITTED, "submit", after)

    return TransitionResult(
        record=after,
        history=_entry(
            record, after,
            reason=reason, notes=notes, actor_id=actor_id,
            action_type=RIDSActionType.SUBMIT, now=now,
        ),
    )


def approve(
    record: RIDSRecord,
    approver_id: str,
    notes: Optional[str] = None,
    *,
    reason: str = DEFAULT_APPROVE_REASON,
    now: Optional[datetime] = None,
) -> TransitionResult:
    """submitted -> approved."""
    reason = _require_text(reason, "reason", "reason is required for approval")
    now = now or _utcnow()

    after = replace(
        _cleared(record, RIDSStatus.APPROVED),
        approved_by=approver_id,
        approved_at=now,
    )
    _check_registered(record, RIDSStatus.APPROVED, "approve", after)

    return TransitionResult(
        record=after,
        history=_entry(
            record, after,
            reason=reason, notes=notes, actor_id=approver_id,
            action_type=RIDSActionType.APPROVE, now=now,
        ),
    )


def reject(
    record: RIDSRecord,
    rejection_reason: str,
    actor_id: str,
    notes: Optional[str] = None,
    *,
    now: Optional[datetime] = None,
) -> TransitionResult:
    """submitted -> rejected. The reason is validated before the status."""
    rejection_reason = _require_text(
        rejection_reason, "rejection_reason", "Rejection reason is required"
    )
    now = now or _utcnow()

    after = replace(_cleared(record, RIDSStatus.REJECTED), rejection_reason=rejection_reason)
    _check_registered(record, RIDSStatus.REJECTED, "reject", after)

    return TransitionResult(
        record=after,
        history=_entry(
            record, after,
            reason=rejection_reason, notes=notes, actor_id=actor_id,
            action_type=RIDSActionType.REJECT, now=now,
        ),
    )


def change_status(
    record: RIDSRecord,
    new_status: Any,
    reason: str,
    actor_id: str,
    notes: Optional[str] = None,
    *,
    now: Optional[datetime] = None,
) -> TransitionResult:
    """
    Administrative override: move to any other status with a mandatory reason.
    """
    reason = _require_text(reason, "reason", "reason is required for status changes")
    actor_id = _require_text(actor_id, "changed_by", "actor is required for status changes")
    target = parse_status(new_status)
    if target == record.status:
        raise NoOpError(
            f"RIDS is already {target.value}",
            detail=[{"field": "new_status", "reason": "already in that status"}],
        )
    now = now or _utcnow()

    after = _cleared(record, target)
    if target == RIDSStatus.APPROVED:
        after = replace(after, approved_by=actor_id, approved_at=now)
    elif target == RIDSStatus.REJECTED:
        after = replace(after, rejection_reason=reason)
    elif target == RIDSStatus.SUBMITTED:
        after = replace(after, submitted_by=actor_id, submitted_at=now)

    return TransitionResult(
        record=after,
        history=_entry(
            record, after,
            reason=reason, notes=notes, actor_id=actor_id,
            action_type=derive_action_type(record.status, target), now=now,
        ),
    )
