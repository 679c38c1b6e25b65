from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .enums import RIDSActionType, RIDSStatus
from .lifecycle import DEFAULT_SUBMIT_REASON


class RIDSCreate(BaseModel):
    reservist_id: str = Field(min_length=1)


class RIDSSubmitRequest(BaseModel):
    reason: str = DEFAULT_SUBMIT_REASON
    notes: Optional[str] = None


class RIDSApproveRequest(BaseModel):
    notes: Optional[str] = None


class RIDSRejectRequest(BaseModel):
    # Emptiness is checked by the lifecycle so the caller gets the RIDS error shape.
    rejection_reason: str = ""
    notes: Optional[str] = None


class RIDSChangeStatusRequest(BaseModel):
    # Kept as a plain string: unknown values are reported with the valid list.
    new_status: str = ""
    reason: str = ""
    notes: Optional[str] = None


class RIDSFormRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    reservist_id: str
    status: RIDSStatus
    created_by: Optional[str] = None
    submitted_by: Optional[str] = None
    submitted_at: Optional[datetime] = None
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class RIDSStatusHistoryRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    rids_form_id: str
    from_status: RIDSStatus
    to_status: RIDSStatus
    reason: str
    notes: Optional[str] = None
    changed_by: Optional[str] = None
    action_type: RIDSActionType
    created_at: datetime


class RIDSTransitionResponse(BaseModel):
    success: bool = True
    data: RIDSFormRead
    history: Optional[RIDSStatusHistoryRead] = None
    message: str
    warnings: List[str] = Field(default_factory=list)
