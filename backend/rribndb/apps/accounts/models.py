# backend/rribndb/apps/accounts/models.py

from __future__ import annotations

import enum
from datetime import datetime, timezone

from sqlalchemy import (
    Column,
    Date,
    DateTime,
    Enum as SAEnum,
    ForeignKey,
    Index,
    String,
)
from sqlalchemy.orm import relationship

from rribndb.database import Base
from rribndb.utils.identifiers import generate_uuid7


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# ENUMS
# ---------------------------------------------------------------------------


class AccountRole(str, enum.Enum):
    """Dashboard roles, from widest to narrowest scope."""

    SUPER_ADMIN = "super_admin"
    ADMIN = "admin"
    STAFF = "staff"
    RESERVIST = "reservist"


class AccountStatus(str, enum.Enum):
    PENDING = "pending"
    ACTIVE = "active"
    INACTIVE = "inactive"
    DEACTIVATED = "deactivated"


class CommissionType(str, enum.Enum):
    NCO = "NCO"
    CO = "CO"


class ReservistStatus(str, enum.Enum):
    READY = "ready"
    STANDBY = "standby"
    RETIRED = "retired"


# ---------------------------------------------------------------------------
# ACCOUNTS
# ---------------------------------------------------------------------------


class Account(Base):
    """
    Login identity for every dashboard user.

    Credentials live with the external identity provider; this row only
    carries the role and status the backend authorises against.
    """

    __tablename__ = "accounts"
    __table_args__ = (
        Index("ix_accounts_role_status", "role", "status"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid7, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    first_name = Column(String(120), nullable=False)
    last_name = Column(String(120), nullable=False)

    role = Column(
        SAEnum(AccountRole, name="account_role_enum", native_enum=False),
        nullable=False,
        default=AccountRole.RESERVIST,
        index=True,
    )
    status = Column(
        SAEnum(AccountStatus, name="account_status_enum", native_enum=False),
        nullable=False,
        default=AccountStatus.PENDING,
        index=True,
    )

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    reservist_details = relationship(
        "ReservistDetails",
        back_populates="account",
        uselist=False,
        lazy="joined",
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def is_active(self) -> bool:
        return self.status == AccountStatus.ACTIVE

    @property
    def is_super_admin(self) -> bool:
        return self.role == AccountRole.SUPER_ADMIN

    def __repr__(self) -> str:
        return f"<Account id={self.id} email={self.email} role={self.role}>"


class ReservistDetails(Base):
    """
    Service particulars for accounts with the reservist role.

    `date_of_commission` drives years-in-service for promotion analytics.
    """

    __tablename__ = "reservist_details"
    __table_args__ = (
        Index("ix_reservist_details_company_rank", "company", "rank"),
    )

    account_id = Column(
        String(36),
        ForeignKey("accounts.id", ondelete="CASCADE"),
        primary_key=True,
    )
    service_number = Column(String(32), unique=True, nullable=True)   # AFPSN
    rank = Column(String(64), nullable=False, index=True)
    company = Column(String(32), nullable=True, index=True)
    commission_type = Column(
        SAEnum(CommissionType, name="commission_type_enum", native_enum=False),
        nullable=False,
        default=CommissionType.NCO,
    )
    reservist_status = Column(
        SAEnum(ReservistStatus, name="reservist_status_enum", native_enum=False),
        nullable=False,
        default=ReservistStatus.READY,
    )
    date_of_commission = Column(Date, nullable=True)

    account = relationship("Account", back_populates="reservist_details")

    def __repr__(self) -> str:
        return f"<ReservistDetails account_id={self.account_id} rank={self.rank}>"
