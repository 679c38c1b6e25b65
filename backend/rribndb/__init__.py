# backend/rribndb/__init__.py
"""
Import ORM models from each app so that Base.metadata.create_all() sees
all tables.

The actual model classes are kept in rribndb/apps/*/models.py.
"""

from .apps.accounts import models as accounts_models              # accounts + reservist details
from .apps.rids import models as rids_models                      # RIDS forms + status history
from .apps.promotion import models as promotion_models            # requirements + service records
from .apps.notifications import models as notifications_models    # in-app notifications

__all__ = [
    "accounts_models",
    "rids_models",
    "promotion_models",
    "notifications_models",
]
