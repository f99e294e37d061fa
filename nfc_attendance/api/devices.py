"""
Device management API routes. The plaintext token is returned only once,
in the registration response.
"""

import logging
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from nfc_attendance.database import get_db
from nfc_attendance.schemas.device import DeviceCreate, DeviceCreatedResponse, DeviceResponse
from nfc_attendance.services.device_service import DeviceService
from nfc_attendance.utils.auth import require_admin
from nfc_attendance.utils.errors import AppError, InternalError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/devices", tags=["devices"])

@router.get("", summary="取得讀卡機列表")
async def list_devices(
    admin: str = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """取得所有已註冊的讀卡機（不含 token）"""
    try:
        devices = DeviceService(db).list_devices()
        return {
            "devices": [
                DeviceResponse.model_validate(device).model_dump(by_alias=True, mode="json")
                for device in devices
            ]
        }
    except AppError:
        raise
    except Exception:
        logger.exception("Failed to list devices")
        raise InternalError("Failed to list devices")

@router.post("", status_code=status.HTTP_201_CREATED, summary="註冊讀卡機")
async def register_device(
    device_data: DeviceCreate,
    admin: str = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """
    註冊新讀卡機。

    - 產生 64 字元 token，只在此回應中顯示一次
    """
    try:
        device, token = DeviceService(db).register_device(device_data.name, device_data.description)
        created = DeviceCreatedResponse.model_validate({
            **DeviceResponse.model_validate(device).model_dump(),
            "token": token
        })
        return {"device": created.model_dump(by_alias=True, mode="json")}
    except AppError:
        raise
    except Exception:
        logger.exception("Failed to register device")
        raise InternalError("Failed to register device")

@router.delete("/{device_id}", summary="刪除讀卡機")
async def delete_device(
    device_id: int,
    admin: str = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """刪除讀卡機，立即撤銷其 token"""
    try:
        DeviceService(db).delete_device(device_id)
        return {"ok": True}
    except AppError:
        raise
    except Exception:
        db.rollback()
        logger.exception(f"Failed to delete device {device_id}")
        raise InternalError("Failed to delete device")
