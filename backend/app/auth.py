# app/auth.py
"""Bearer token verification.

Users sign in with an external identity provider which issues JWTs; the
API only verifies those tokens and uses the ``sub`` claim as the user id.
``create_access_token`` mints compatible tokens for local development
and the test suite.
"""

from datetime import datetime, timedelta
from jose import JWTError, jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

import os

SECRET_KEY = os.getenv("AUTH_SECRET_KEY", "dev-secret-key")
ALGORITHM = os.getenv("AUTH_ALGORITHM", "HS256")
ISSUER = os.getenv("AUTH_ISSUER")
TOKEN_URL = os.getenv("AUTH_TOKEN_URL", "/token")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "30"))
ADMIN_USER_IDS = {
    uid.strip() for uid in os.getenv("ADMIN_USER_IDS", "").split(",") if uid.strip()
}

# tokenUrl points at the identity provider; it only feeds the OpenAPI docs
oauth2_scheme = OAuth2PasswordBearer(tokenUrl=TOKEN_URL, auto_error=False)


def create_access_token(data: dict, expires_delta: timedelta | None = None):
    to_encode = data.copy()
    expire = datetime.utcnow() + (
        expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode.update({"exp": expire})
    if ISSUER:
        to_encode.setdefault("iss", ISSUER)
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def decode_user_id(token: str) -> str | None:
    """Return the ``sub`` claim of a valid token or ``None``."""
    options = {"verify_aud": False}
    try:
        payload = jwt.decode(
            token,
            SECRET_KEY,
            algorithms=[ALGORITHM],
            issuer=ISSUER,
            options=options,
        )
    except JWTError:
        return None
    sub = payload.get("sub")
    if not sub:
        return None
    return str(sub)


async def get_current_user_id(
    token: str | None = Depends(oauth2_scheme),
) -> str:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Unauthorized",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if not token:
        raise credentials_exception
    user_id = decode_user_id(token)
    if user_id is None:
        raise credentials_exception
    return user_id


def is_admin(user_id: str) -> bool:
    return user_id in ADMIN_USER_IDS


async def require_admin(user_id: str = Depends(get_current_user_id)) -> str:
    """Dependency restricting a route to configured administrators."""
    if not is_admin(user_id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Insufficient permissions",
        )
    return user_id
