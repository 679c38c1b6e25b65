from __future__ import annotations

import enum


class RIDSStatus(str, enum.Enum):
    DRAFT = "draft"
    SUBMITTED = "submitted"
    APPROVED = "approved"
    REJECTED = "rejected"


class RIDSActionType(str, enum.Enum):
    SUBMIT = "submit"
    APPROVE = "approve"
    REJECT = "reject"
    REVERT = "revert"
    MANUAL_CHANGE = "manual_change"
