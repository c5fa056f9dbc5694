"""Caller identity from bearer tokens.

Tokens are issued by the credential service; this module only verifies them
and resolves ``sub`` to an existing user id.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from app.core.config import settings
from app.db.session import get_db
from app.models.user import User

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def decode_user_id(token: str) -> Optional[int]:
    """Return the ``sub`` claim as an int, or None when the token is unusable.

    The credential service signs ``sub`` as a number; string ids are accepted too.
    """
    try:
        payload: dict[str, Any] = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            options={"verify_sub": False},
        )
    except JWTError as exc:
        logger.warning("Rejected bearer token: %s", exc)
        return None
    subject = payload.get("sub")
    if isinstance(subject, bool):
        return None
    try:
        return int(subject)
    except (TypeError, ValueError):
        return None


def _resolve_user_id(
    credentials: Optional[HTTPAuthorizationCredentials],
    db: Session,
) -> Optional[int]:
    if credentials is None or not credentials.credentials:
        return None
    user_id = decode_user_id(credentials.credentials)
    if user_id is None or db.get(User, user_id) is None:
        return None
    return user_id


def get_optional_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> Optional[int]:
    """Viewer id, or None for anonymous callers. Never fails the request."""
    return _resolve_user_id(credentials, db)


def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> int:
    """Authenticated user id; 401 otherwise."""
    user_id = _resolve_user_id(credentials, db)
    if user_id is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Autenticacao necessaria.")
    return user_id
