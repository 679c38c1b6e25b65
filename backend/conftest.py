from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

ROOT = Path(__file__).resolve().parent
sys.path.append(str(ROOT))

os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["DATABASE_WRITE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["SECRET_KEY"] = "test-secret-key"

from rribndb.database import Base  # noqa: E402
from rribndb.apps.accounts import models as account_models  # noqa: E402
from rribndb.apps.rids import models as rids_models  # noqa: E402
from rribndb.apps.promotion import models as promotion_models  # noqa: E402
from rribndb.apps.notifications import models as notification_models  # noqa: E402


@pytest.fixture()
def db_session():
    engine = create_engine("sqlite+pysqlite:///:memory:")
    Base.metadata.create_all(
        bind=engine,
        tables=[
            account_models.Account.__table__,
            account_models.ReservistDetails.__table__,
            rids_models.RIDSForm.__table__,
            rids_models.RIDSStatusHistory.__table__,
            promotion_models.PromotionRequirement.__table__,
            promotion_models.TrainingHours.__table__,
            promotion_models.CampDutyRecord.__table__,
            promotion_models.SeminarActivity.__table__,
            promotion_models.EducationalRecord.__table__,
            notification_models.Notification.__table__,
        ],
    )
    TestingSession = sessionmaker(
        bind=engine,
        autoflush=False,
        autocommit=False,
        expire_on_commit=False,
    )
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
