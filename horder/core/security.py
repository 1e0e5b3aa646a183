from __future__ import annotations

import base64
import hmac
import json
import time
from hashlib import sha256

from fastapi import Header, HTTPException
from pydantic import BaseModel

from horder.core.config import get_settings


class SessionContext(BaseModel):
    """Who is calling; handed explicitly to whichever layer needs it."""

    username: str
    issued_at: int
    expires_at: int


def _auth_error(detail: str) -> HTTPException:
    return HTTPException(status_code=401, detail=detail, headers={"WWW-Authenticate": "Bearer"})


def _token_key() -> bytes:
    return get_settings().token_signing_secret.encode("utf-8")


def create_access_token(username: str, ttl_seconds: int | None = None, now: int | None = None) -> str:
    settings = get_settings()
    issued = int(time.time()) if now is None else now
    payload = {
        "sub": username,
        "iat": issued,
        "exp": issued + (ttl_seconds or settings.token_ttl_seconds),
    }
    body = json.dumps(payload, separators=(",", ":"), sort_keys=True).encode("utf-8")
    mac = hmac.new(_token_key(), body, sha256).digest()
    return base64.urlsafe_b64encode(body + mac).decode("ascii")


def verify_access_token(token: str, now: int | None = None) -> SessionContext:
    try:
        raw = base64.urlsafe_b64decode(token.encode("ascii"))
    except (ValueError, UnicodeEncodeError) as exc:
        raise _auth_error("invalid token encoding") from exc

    if len(raw) <= 32:
        raise _auth_error("invalid token body")

    body, mac = raw[:-32], raw[-32:]
    expected = hmac.new(_token_key(), body, sha256).digest()
    if not hmac.compare_digest(mac, expected):
        raise _auth_error("token signature mismatch")

    payload = json.loads(body.decode("utf-8"))
    current = int(time.time()) if now is None else now
    if current > int(payload.get("exp", 0)):
        raise _auth_error("token expired")
    return SessionContext(
        username=str(payload["sub"]),
        issued_at=int(payload.get("iat", 0)),
        expires_at=int(payload["exp"]),
    )


def _extract_bearer(authorization: str | None) -> str | None:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise _auth_error("invalid authorization header")
    return token.strip()


def get_session_context(authorization: str | None = Header(default=None)) -> SessionContext:
    settings = get_settings()
    if not settings.auth_enabled:
        return SessionContext(username=settings.default_admin_username, issued_at=0, expires_at=0)

    token = _extract_bearer(authorization)
    if not token:
        raise _auth_error("access denied")
    return verify_access_token(token)
