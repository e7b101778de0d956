# backend/weddinglens/api/dependencies/auth.py
"""
Authentication dependencies.

Only the credential check lives here: a bearer token is decoded and its
``sub`` claim becomes the acting user id.
"""

import logging
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jwt import PyJWTError

from ...auth import decode_access_token

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def _credentials_exception(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> int:
    """
    Dependency returning the authenticated user's id.

    Raises:
        HTTPException: 401 if the token is missing, invalid, expired or has no usable ``sub``
    """
    if credentials is None or not credentials.credentials:
        raise _credentials_exception("Not authenticated")

    try:
        payload = decode_access_token(credentials.credentials)
    except PyJWTError as e:
        logger.warning(f"JWT validation error: {str(e)}")
        raise _credentials_exception("Could not validate credentials")

    subject = payload.get("sub")
    try:
        user_id = int(subject)
    except (TypeError, ValueError):
        logger.warning("Token payload missing a numeric 'sub' claim")
        raise _credentials_exception("Could not validate credentials")
    if user_id <= 0:
        raise _credentials_exception("Could not validate credentials")
    return user_id
