# File: civicvoice/core/security.py
# Project: civicvoice-backend
"""Bearer-token authentication.

Credential issuance lives outside this service; tokens arrive already signed
with the shared ``JWT_SECRET`` and carry ``sub``, ``role`` and, for department
officers, ``department``. ``make_token`` exists for local development and tests.
"""
from fastapi import HTTPException, status, Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from typing import Optional
import time, jwt

from civicvoice.core.config import settings
from civicvoice.services.authz import Principal, Role

ALGO = "HS256"
ACCESS_TTL = 15 * 60
# width of the actor columns (created_by, added_by, actor)
MAX_SUBJECT_LENGTH = 64
bearer = HTTPBearer(auto_error=False)


def make_token(sub: str, role: str, department: Optional[str] = None, ttl: int = ACCESS_TTL) -> str:
    now = int(time.time())
    payload = {"sub": sub, "role": role, "iat": now, "exp": now + ttl}
    if department:
        payload["department"] = department
    return jwt.encode(payload, settings.jwt_secret, algorithm=ALGO)


def _decode_token(creds: Optional[HTTPAuthorizationCredentials]) -> dict:
    if not creds:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    try:
        return jwt.decode(creds.credentials, settings.jwt_secret, algorithms=[ALGO])
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token expired")
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")


def principal_from_claims(payload: dict) -> Principal:
    sub = payload.get("sub")
    try:
        role = Role(payload.get("role"))
    except ValueError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token payload")
    if not sub or len(str(sub)) > MAX_SUBJECT_LENGTH:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token payload")
    return Principal(id=str(sub), role=role, department=payload.get("department") or None)


def get_current_principal(creds: Optional[HTTPAuthorizationCredentials] = Depends(bearer)) -> Principal:
    return principal_from_claims(_decode_token(creds))


def get_optional_principal(creds: Optional[HTTPAuthorizationCredentials] = Depends(bearer)) -> Optional[Principal]:
    """Anonymous callers get None; a present but broken token is still a 401."""
    if not creds:
        return None
    return principal_from_claims(_decode_token(creds))
