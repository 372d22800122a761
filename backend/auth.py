import hashlib
import hmac
import time
from typing import Optional

from fastapi import Cookie, HTTPException

from config import settings

SESSION_COOKIE = "rv_session"


def _sign(payload: str) -> str:
    return hmac.new(settings.SECRET_KEY.encode(), payload.encode(), hashlib.sha256).hexdigest()


def check_password(password: str) -> bool:
    return hmac.compare_digest(password or "", settings.ADMIN_PASSWORD)


def issue_session_token(now: Optional[float] = None) -> str:
    expires = int((now or time.time()) + settings.SESSION_MAX_AGE)
    return f"{expires}.{_sign(str(expires))}"


def verify_session_token(token: Optional[str], now: Optional[float] = None) -> bool:
    if not token or "." not in token:
        return False
    expires, signature = token.split(".", 1)
    if not expires.isdigit() or not hmac.compare_digest(signature, _sign(expires)):
        return False
    return int(expires) > (now or time.time())


def require_admin(rv_session: Optional[str] = Cookie(default=None)):
    if not verify_session_token(rv_session):
        raise HTTPException(401, "Unauthorized")
