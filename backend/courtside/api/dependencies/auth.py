# backend/courtside/api/dependencies/auth.py
"""
Identity dependencies.

Authentication lives in front of this service. Requests arrive with the
authenticated user's id in ``X-User-Id``; it is resolved to a ``Principal``
carrying the stored role.
"""

import logging
from typing import Optional

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from ...core.identity import Principal
from ...models.user import User, UserRole
from ...repositories import RepositoryFactory
from .database import get_db

logger = logging.getLogger(__name__)

USER_ID_HEADER = "X-User-Id"


def get_current_principal(
    x_user_id: Optional[str] = Header(default=None, alias=USER_ID_HEADER),
    db: Session = Depends(get_db),
) -> Principal:
    if not x_user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"message": "Not authenticated", "code": "UNAUTHENTICATED", "details": {}},
        )
    user = RepositoryFactory.create_base_repository(db, User).get_by_id(x_user_id)
    if user is None or not user.is_active:
        logger.warning("Rejected unknown or inactive user", extra={"user_id": x_user_id})
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"message": "Not authenticated", "code": "UNAUTHENTICATED", "details": {}},
        )
    return Principal(id=user.id, role=UserRole(user.role), name=user.name, email=user.email)
