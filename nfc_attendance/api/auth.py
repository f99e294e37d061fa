"""
Admin login/logout routes issuing the session cookie.
"""

import logging
from typing import Optional
from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel

from nfc_attendance.config import Settings
from nfc_attendance.utils.auth import check_admin_credentials, create_session_token, get_settings
from nfc_attendance.utils.errors import AuthError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["authentication"])

class LoginRequest(BaseModel):
    """Admin login request model"""
    username: Optional[str] = None
    password: Optional[str] = None

@router.post("/login", summary="管理員登入")
async def login(
    credentials: LoginRequest,
    response: Response,
    settings: Settings = Depends(get_settings)
):
    """
    管理員登入。

    - 帳號密碼與環境變數設定比對
    - 成功時設定 HttpOnly session cookie，有效 8 小時
    """
    if not check_admin_credentials(credentials.username, credentials.password, settings):
        logger.warning(f"Failed admin login attempt for {credentials.username!r}")
        raise AuthError("Invalid credentials")

    token = create_session_token(credentials.username, settings)
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        max_age=settings.session_max_age,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.is_production
    )

    logger.info(f"Admin {credentials.username} logged in")
    return {"ok": True}

@router.post("/logout", summary="管理員登出")
async def logout(
    response: Response,
    settings: Settings = Depends(get_settings)
):
    """清除 session cookie"""
    response.delete_cookie(
        key=settings.SESSION_COOKIE_NAME,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.is_production
    )
    return {"ok": True}
