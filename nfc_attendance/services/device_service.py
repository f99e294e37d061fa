"""
Device registry and bearer-token authentication for NFC readers.
"""

import logging
import secrets
from typing import List, Optional, Tuple
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from nfc_attendance.database import Database
from nfc_attendance.models.device import Device
from nfc_attendance.utils.datetime_utils import utc_now
from nfc_attendance.utils.errors import ConflictError, NotFoundError, ValidationError
from nfc_attendance.utils.validators import sanitize_input

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


def generate_device_token() -> str:
    """產生 64 字元的十六進位隨機 token"""
    return secrets.token_hex(32)


class DeviceService:
    """讀卡機管理業務邏輯服務"""

    def __init__(self, db: Session):
        self.db = db

    def register_device(self, name: Optional[str], description: Optional[str] = None) -> Tuple[Device, str]:
        """
        註冊新讀卡機並產生 token。

        Args:
            name: 裝置名稱
            description: 裝置說明

        Returns:
            (新裝置, 明文 token) 的元組；token 之後不會再回傳

        Raises:
            ValidationError: 如果名稱為空
            ConflictError: 如果 token 重複
        """
        name = sanitize_input(name)
        if not name:
            raise ValidationError("Device name is required", field="name")

        token = generate_device_token()
        device = Device(
            name=name,
            description=sanitize_input(description),
            token=token
        )

        try:
            self.db.add(device)
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ConflictError("Device token already exists")

        self.db.refresh(device)
        logger.info(f"Registered device {device.id} - {device.name}")
        return device, token

    def list_devices(self) -> List[Device]:
        """取得所有裝置，最新的在前"""
        return self.db.query(Device).order_by(Device.created_at.desc(), Device.id.desc()).all()

    def delete_device(self, device_id: int) -> None:
        """
        刪除裝置，立即撤銷其 token。

        Raises:
            NotFoundError: 如果裝置不存在
        """
        device = self.db.query(Device).filter(Device.id == device_id).first()
        if not device:
            raise NotFoundError("Device not found")

        self.db.delete(device)
        self.db.commit()
        logger.info(f"Deleted device {device_id} - {device.name}")

    def authenticate(self, auth_header: Optional[str]) -> Optional[Device]:
        """
        Resolve an ``Authorization: Bearer <token>`` header to a device.

        Returns None for an absent or malformed header, or for a token that
        matches no registered device.
        """
        if not auth_header or not auth_header.startswith(BEARER_PREFIX):
            return None

        token = auth_header[len(BEARER_PREFIX):].strip()
        if not token:
            return None

        return self.db.query(Device).filter(Device.token == token).first()

    @staticmethod
    def touch_last_seen(database: Database, device_id: int) -> None:
        """Best-effort lastSeen stamp; failures are logged and dropped."""
        try:
            with database.session() as db:
                db.query(Device).filter(Device.id == device_id).update(
                    {Device.last_seen: utc_now()}, synchronize_session=False
                )
        except Exception as e:
            logger.warning(f"Failed to update last_seen for device {device_id}: {e}")
