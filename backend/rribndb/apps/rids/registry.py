from __future__ import annotations

from typing import Any, Callable, Dict, List

from .enums import RIDSStatus

GuardResult = List[Dict[str, str]]
Guard = Callable[..., GuardResult]


def _get_value(obj: Any, key: str) -> Any:
    if obj is None:
        return None
    if isinstance(obj, dict):
        return obj.get(key)
    return getattr(obj, key, None)


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def guard_submitter(*, before_obj: Any, after_obj: Any) -> GuardResult:
    if _blank(_get_value(after_obj, "submitted_by")):
        return [{"field": "submitted_by", "reason": "submitter required"}]
    return []


def guard_approver(*, before_obj: Any, after_obj: Any) -> GuardResult:
    if _blank(_get_value(after_obj, "approved_by")):
        return [{"field": "approved_by", "reason": "approver required"}]
    return []


def guard_rejection_reason(*, before_obj: Any, after_obj: Any) -> GuardResult:
    if _blank(_get_value(after_obj, "rejection_reason")):
        return [{"field": "rejection_reason", "reason": "rejection reason required"}]
    return []


# Transitions reachable through submit / approve / reject. The administrative
# change-status operation is not bound by this table.
RIDS_WORKFLOW: Dict[str, Dict[RIDSStatus, Dict[RIDSStatus, List[Guard]]]] = {
    "transitions": {
        RIDSStatus.DRAFT: {
            RIDSStatus.SUBMITTED: [guard_submitter],
        },
        RIDSStatus.REJECTED: {
            RIDSStatus.SUBMITTED: [guard_submitter],
        },
        RIDSStatus.SUBMITTED: {
            RIDSStatus.APPROVED: [guard_approver],
            RIDSStatus.REJECTED: [guard_rejection_reason],
        },
        RIDSStatus.APPROVED: {},
    }
}


def allowed_targets(from_state: RIDSStatus) -> List[RIDSStatus]:
    return list(RIDS_WORKFLOW["transitions"].get(from_state, {}))


def guards_for(from_state: RIDSStatus, to_state: RIDSStatus):
    """Return the guard list, or None when the pair is not registered."""
    return RIDS_WORKFLOW["transitions"].get(from_state, {}).get(to_state)
