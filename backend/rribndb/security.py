# backend/rribndb/security.py

"""
Security helpers for the RRIBn backend.

Responsibilities:
- JWT access token creation and decoding
- FastAPI dependencies for the current account
- Role-based access helpers for router dependencies

Sign-in and password handling belong to the external identity provider.
This module only trusts tokens signed with SECRET_KEY whose `sub` claim is
an `accounts.id`.
"""

from __future__ import annotations

import os
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional, Set, Union

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from .database import get_db
from rribndb.apps.accounts import models as account_models
from rribndb.apps.accounts.models import AccountRole

# ---------------------------------------------------------------------------
# CONFIG
# ---------------------------------------------------------------------------

# In production, ALWAYS override these via environment variables.
SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME_IN_PRODUCTION")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")

try:
    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(
        os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60")
    )
except ValueError:
    ACCESS_TOKEN_EXPIRE_MINUTES = 60

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")


# ---------------------------------------------------------------------------
# JWT TOKENS
# ---------------------------------------------------------------------------


def create_access_token(
    *,
    data: dict,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Create a signed JWT.

    The `data` dict should already include the subject, e.g.:
        {"sub": account.id, "role": account.role.value}
    """
    to_encode = data.copy()

    expire = datetime.now(timezone.utc) + (
        expires_delta
        if expires_delta is not None
        else timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode.update({"exp": expire})

    return jwt.encode(to_encode, SECRET_KEY, algorithm=JWT_ALGORITHM)


# ---------------------------------------------------------------------------
# ACCOUNT LOOKUP HELPERS
# ---------------------------------------------------------------------------


def get_account_by_id(
    db: Session,
    account_id: Union[str, int, None],
) -> Optional[account_models.Account]:
    if account_id is None:
        return None

    normalised_id = str(account_id).strip()

    return (
        db.query(account_models.Account)
        .filter(account_models.Account.id == normalised_id)
        .first()
    )


# ---------------------------------------------------------------------------
# FASTAPI DEPENDENCIES
# ---------------------------------------------------------------------------


def _credentials_exception() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> account_models.Account:
    """
    Decode the JWT access token and return the corresponding Account.
    """
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[JWT_ALGORITHM])
        account_id: Optional[str] = payload.get("sub")
        if account_id is None:
            raise _credentials_exception()
    except JWTError:
        raise _credentials_exception()

    account = get_account_by_id(db, account_id)
    if account is None:
        raise _credentials_exception()

    return account


def get_current_active_user(
    current_user: account_models.Account = Depends(get_current_user),
) -> account_models.Account:
    """
    Ensure the current account is active.

    Pending and deactivated accounts are blocked here rather than deeper in
    the app.
    """
    if not current_user.is_active:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Inactive account",
        )
    return current_user


# ---------------------------------------------------------------------------
# ROLE-BASED ACCESS HELPER
# ---------------------------------------------------------------------------


def require_roles(
    *allowed_roles: Union[AccountRole, str],
) -> Callable[[account_models.Account], account_models.Account]:
    """
    Dependency factory to enforce that the current account has one of the
    given roles.

    Usage:
        @router.put(...)
        def endpoint(
            current_user: Account = Depends(require_roles("staff", "admin"))
        ):
            ...

    Behaviour:
    - super_admin always passes, even if not explicitly listed.
    - Otherwise, the account's `role` must be in the allowed set.
    """
    normalised_roles: Set[AccountRole] = set()
    for r in allowed_roles:
        if isinstance(r, AccountRole):
            normalised_roles.add(r)
        else:
            try:
                normalised_roles.add(AccountRole(r))
            except ValueError:
                raise ValueError(f"Unknown role {r!r} passed to require_roles()")

    def dependency(
        current_user: account_models.Account = Depends(get_current_active_user),
    ) -> account_models.Account:
        if current_user.is_super_admin:
            return current_user

        if current_user.role not in normalised_roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions for this operation",
            )
        return current_user

    return dependency


# Shorthands used across routers
require_staff = require_roles(AccountRole.STAFF, AccountRole.ADMIN)
require_admin = require_roles(AccountRole.ADMIN)
