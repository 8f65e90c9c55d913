import logging
from typing import Optional
from uuid import UUID

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt

from locallist.core.settings import Settings

# Set up logging
logger = logging.getLogger(__name__)

# Tokens are issued by the auth service; this module only reads them.
oauth2_scheme_optional = OAuth2PasswordBearer(tokenUrl="/auth/login", auto_error=False)


def decode_user_id(token: str, settings: Optional[Settings] = None) -> Optional[UUID]:
    """Return the caller id carried in `sub`, or None if the token is unusable"""
    settings = settings or Settings()
    options = {"verify_aud": bool(settings.JWT_AUDIENCE)}
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            audience=settings.JWT_AUDIENCE or None,
            issuer=settings.JWT_ISSUER or None,
            options=options,
        )
    except JWTError as e:
        logger.warning(f"Ignoring invalid bearer token: {e}")
        return None

    sub = payload.get("sub")
    if not sub:
        return None
    try:
        return UUID(str(sub))
    except ValueError:
        logger.warning("Bearer token subject is not a UUID")
        return None


async def get_optional_user_id(token: Optional[str] = Depends(oauth2_scheme_optional)) -> Optional[UUID]:
    """Caller identity for endpoints that also serve anonymous users"""
    if not token:
        return None
    return decode_user_id(token)
