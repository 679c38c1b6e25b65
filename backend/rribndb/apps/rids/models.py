from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import (
    Column,
    DateTime,
    Enum as SAEnum,
    ForeignKey,
    Index,
    JSON,
    String,
    Text,
    desc,
)
from sqlalchemy.orm import relationship

from rribndb.database import Base
from rribndb.utils.identifiers import generate_uuid7

from .enums import RIDSActionType, RIDSStatus


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _status_enum(name: str) -> SAEnum:
    return SAEnum(
        RIDSStatus,
        name=name,
        native_enum=False,
        values_callable=lambda enum_cls: [member.value for member in enum_cls],
    )


class RIDSForm(Base):
    """
    Reservist Information Data Sheet header.

    Only the workflow columns are modelled here; the section tables
    (education, trainings, unit assignments...) hang off `id`.
    """

    __tablename__ = "rids_forms"
    __table_args__ = (
        Index("ix_rids_forms_reservist_status", "reservist_id", "status"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid7, index=True)
    reservist_id = Column(
        String(36), ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, unique=True, index=True
    )
    status = Column(_status_enum("rids_status_enum"), nullable=False, default=RIDSStatus.DRAFT, index=True)

    created_by = Column(String(36), ForeignKey("accounts.id", ondelete="SET NULL"), nullable=True)
    submitted_by = Column(String(36), ForeignKey("accounts.id", ondelete="SET NULL"), nullable=True)
    submitted_at = Column(DateTime(timezone=True), nullable=True)
    approved_by = Column(String(36), ForeignKey("accounts.id", ondelete="SET NULL"), nullable=True)
    approved_at = Column(DateTime(timezone=True), nullable=True)
    rejection_reason = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    history = relationship(
        "RIDSStatusHistory",
        back_populates="rids_form",
        order_by="RIDSStatusHistory.created_at",
        lazy="noload",
    )

    def __repr__(self) -> str:
        return f"<RIDSForm id={self.id} status={self.status}>"


class RIDSStatusHistory(Base):
    """
    Append-only log of RIDS status moves. Rows are inserted, never updated.
    """

    __tablename__ = "rids_status_history"
    __table_args__ = (
        Index("ix_rids_status_history_form_time", "rids_form_id", "created_at"),
        Index("ix_rids_status_history_form_time_desc", "rids_form_id", desc("created_at")),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid7, index=True)
    rids_form_id = Column(
        String(36), ForeignKey("rids_forms.id", ondelete="CASCADE"), nullable=False, index=True
    )
    from_status = Column(_status_enum("rids_history_from_status_enum"), nullable=False)
    to_status = Column(_status_enum("rids_history_to_status_enum"), nullable=False)
    reason = Column(Text, nullable=False)
    notes = Column(Text, nullable=True)
    changed_by = Column(String(36), ForeignKey("accounts.id", ondelete="SET NULL"), nullable=True, index=True)
    action_type = Column(
        SAEnum(
            RIDSActionType,
            name="rids_action_type_enum",
            native_enum=False,
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
        ),
        nullable=False,
        index=True,
    )
    metadata_json = Column("metadata", JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, index=True)

    rids_form = relationship("RIDSForm", back_populates="history")

    def __repr__(self) -> str:
        return (
            f"<RIDSStatusHistory form={self.rids_form_id} "
            f"{self.from_status}->{self.to_status} action={self.action_type}>"
        )
