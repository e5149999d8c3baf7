"""
Bearer-token auth dependency for FastAPI.
Validates HS256 JWTs signed with SECRET_KEY and auto-creates local user records.
"""

import os
import jwt
import logging
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from cv_assistant.core.config import settings
from cv_assistant.db.database import get_db
from cv_assistant.db import models

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)  # Don't auto-error so dev mode can skip


def decode_token(token: str) -> dict:
    """Decode and verify a JWT with the shared secret."""
    return jwt.decode(
        token,
        settings.SECRET_KEY,
        algorithms=[settings.ALGORITHM],
        options={"verify_exp": True},
    )


def _dev_user(db: Session) -> models.User:
    user = db.query(models.User).first()
    if not user:
        user = models.User(email="dev@localhost", external_id="dev-local-user", is_active=True)
        db.add(user)
        db.commit()
        db.refresh(user)
        logger.info("Dev mode: created dev user")
    return user


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> models.User:
    """
    Validate the bearer JWT and return the local user record.
    Auto-creates the user on first sight of a new ``sub``.
    """
    if os.environ.get("DEV_MODE", "").lower() == "true":
        return _dev_user(db)

    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        payload = decode_token(credentials.credentials)
    except jwt.ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has expired",
            headers={"WWW-Authenticate": "Bearer"},
        )
    except jwt.InvalidTokenError as e:
        logger.error(f"Invalid token: {e}")
        raise credentials_exception

    sub = payload.get("sub")
    email = payload.get("email")
    if sub is None:
        raise credentials_exception

    user = db.query(models.User).filter(models.User.external_id == sub).first()
    if user is None:
        user = models.User(email=email or f"{sub}@users.local", external_id=sub, is_active=True)
        db.add(user)
        db.commit()
        db.refresh(user)
        logger.info(f"Created local user {user.id} for sub={sub!r}")

    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Inactive user")
    return user
