"""
Authentication utilities: admin session cookie (signed JWT) and device
bearer-token checks.
"""

import hmac
import logging
from datetime import datetime, timedelta
from typing import Optional
from jose import JWTError, jwt
from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session

from nfc_attendance.config import Settings, settings as app_settings
from nfc_attendance.database import Database, get_database, get_db
from nfc_attendance.models.device import Device
from nfc_attendance.services.device_service import DeviceService
from nfc_attendance.utils.errors import AuthError

logger = logging.getLogger(__name__)


def get_settings(request: Request) -> Settings:
    """FastAPI dependency returning the application's settings."""
    return getattr(request.app.state, "settings", app_settings)


def create_session_token(username: str, settings: Settings = None, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a signed session token for the admin cookie.

    Args:
        username: Authenticated admin username
        settings: Application settings (secret, algorithm, lifetime)
        expires_delta: Token lifetime, defaults to SESSION_EXPIRE_HOURS

    Returns:
        Encoded JWT string
    """
    settings = settings or app_settings
    now = datetime.utcnow()
    expire = now + (expires_delta or timedelta(hours=settings.SESSION_EXPIRE_HOURS))

    to_encode = {"sub": username, "iat": now, "exp": expire}
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def verify_session_token(token: str, settings: Settings = None) -> dict:
    """
    Verify and decode a session token.

    Raises:
        AuthError: If the token is invalid, expired or has no subject
    """
    settings = settings or app_settings
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        raise AuthError("Unauthorized")

    if not payload.get("sub"):
        raise AuthError("Unauthorized")
    return payload


def check_admin_credentials(username: Optional[str], password: Optional[str], settings: Settings = None) -> bool:
    """Compare submitted credentials with the configured admin account."""
    settings = settings or app_settings
    if not username or not password:
        return False

    user_ok = hmac.compare_digest(str(username).encode(), settings.ADMIN_USERNAME.encode())
    pass_ok = hmac.compare_digest(str(password).encode(), settings.ADMIN_PASSWORD.encode())
    return user_ok and pass_ok


async def require_admin(request: Request, settings: Settings = Depends(get_settings)) -> str:
    """
    Require a valid admin session cookie.

    Returns:
        The admin username stored in the session

    Raises:
        AuthError: If the cookie is missing or invalid
    """
    token = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if not token:
        raise AuthError("Unauthorized")

    payload = verify_session_token(token, settings)
    return payload["sub"]


def get_current_device(
    authorization: Optional[str] = Header(None),
    db: Session = Depends(get_db),
    database: Database = Depends(get_database)
) -> Device:
    """
    Authenticate an NFC reader by its bearer token.

    On success the device's lastSeen is stamped right away in its own
    session, before the scan itself is handled, so the stamp lands even when
    the scan is later rejected. A failed stamp never fails the request.

    Raises:
        AuthError: If the header is absent, malformed or the token is unknown
    """
    device = DeviceService(db).authenticate(authorization)
    if device is None:
        logger.warning("Rejected scan with missing or unknown device token")
        raise AuthError("Unauthorized")

    DeviceService.touch_last_seen(database, device.id)
    return device


def client_ip(request: Request) -> str:
    """Source address of the reader, honouring reverse-proxy headers."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()

    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()

    if request.client and request.client.host:
        return request.client.host
    return "unknown"
