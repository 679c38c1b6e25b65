# backend/rribndb/apps/promotion/models.py

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
)

from ...database import Base
from ...utils.identifiers import generate_uuid7


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# REQUIREMENTS
# ---------------------------------------------------------------------------


class PromotionRequirement(Base):
    """
    Rank-specific thresholds for promotion out of `from_rank`.

    Only rows with is_active=True are used by the analytics.
    `min_education` is optional; when empty, education is not gated.
    """

    __tablename__ = "promotion_requirements"
    __table_args__ = (
        Index("ix_promotion_requirements_rank_active", "from_rank", "is_active"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid7, index=True)
    from_rank = Column(String(64), nullable=False, index=True)
    to_rank = Column(String(64), nullable=True)

    required_training_types = Column(Integer, nullable=False, default=0)
    years_in_current_rank = Column(Integer, nullable=False, default=0)
    seminars_required = Column(Integer, nullable=False, default=0)
    camp_duty_days = Column(Integer, nullable=False, default=30)
    min_education = Column(String(64), nullable=True)

    is_active = Column(Boolean, nullable=False, default=True, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    def __repr__(self) -> str:
        return f"<PromotionRequirement {self.from_rank}->{self.to_rank} active={self.is_active}>"


# ---------------------------------------------------------------------------
# SERVICE RECORDS (inputs to the eligibility metrics)
# ---------------------------------------------------------------------------


class TrainingHours(Base):
    """One completed training; distinct `training_name`s count as training types."""

    __tablename__ = "training_hours"
    __table_args__ = (
        Index("ix_training_hours_reservist_name", "reservist_id", "training_name"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid7, index=True)
    reservist_id = Column(String(36), ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, index=True)
    training_name = Column(String(255), nullable=False)
    training_category = Column(String(64), nullable=True)  # Leadership / Combat / Technical / Seminar
    hours_completed = Column(Float, nullable=False, default=0.0)
    completed_on = Column(Date, nullable=True)


class CampDutyRecord(Base):
    __tablename__ = "camp_duty_records"

    id = Column(String(36), primary_key=True, default=generate_uuid7, index=True)
    reservist_id = Column(String(36), ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, index=True)
    hours = Column(Float, nullable=False, default=0.0)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)


class SeminarActivity(Base):
    __tablename__ = "seminars_activities"

    id = Column(String(36), primary_key=True, default=generate_uuid7, index=True)
    reservist_id = Column(String(36), ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    held_on = Column(Date, nullable=True)


class EducationalRecord(Base):
    __tablename__ = "educational_records"

    id = Column(String(36), primary_key=True, default=generate_uuid7, index=True)
    reservist_id = Column(String(36), ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, index=True)
    degree_type = Column(String(64), nullable=False)  # e.g. "Bachelor's"
    school = Column(String(255), nullable=True)
    year_graduated = Column(Integer, nullable=True)
