"""
Canteen order cutoff settings API routes.
"""

import logging
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from nfc_attendance.config import Settings
from nfc_attendance.database import get_db
from nfc_attendance.schemas.setting import SettingResponse, SettingUpdate
from nfc_attendance.services.setting_service import SettingService
from nfc_attendance.utils.auth import get_settings, require_admin
from nfc_attendance.utils.errors import AppError, InternalError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/settings", tags=["settings"])

@router.get("", summary="取得訂餐截止時間")
async def get_setting(
    admin: str = Depends(require_admin),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings)
):
    try:
        cutoff = SettingService(db, settings.DEFAULT_ORDER_CUTOFF).get_order_cutoff()
        return {"setting": SettingResponse(order_cutoff=cutoff).model_dump(by_alias=True)}
    except AppError:
        raise
    except Exception:
        logger.exception("Failed to get settings")
        raise InternalError("Failed to get settings")

@router.post("", summary="更新訂餐截止時間")
async def update_setting(
    setting_data: SettingUpdate,
    admin: str = Depends(require_admin),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings)
):
    """
    更新訂餐截止時間。

    - 必須為 24 小時制 HH:MM，格式錯誤回傳 400 且不修改設定
    """
    try:
        cutoff = SettingService(db, settings.DEFAULT_ORDER_CUTOFF).set_order_cutoff(setting_data.order_cutoff)
        return {"setting": SettingResponse(order_cutoff=cutoff).model_dump(by_alias=True)}
    except AppError:
        raise
    except Exception:
        db.rollback()
        logger.exception("Failed to update settings")
        raise InternalError("Failed to update settings")
