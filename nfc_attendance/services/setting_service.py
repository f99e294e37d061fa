import logging
from sqlalchemy.orm import Session

from nfc_attendance.config import settings as app_settings
from nfc_attendance.models.setting import Setting, SETTING_ROW_ID
from nfc_attendance.utils.errors import ValidationError
from nfc_attendance.utils.validators import validate_cutoff_time

logger = logging.getLogger(__name__)


class SettingService:
    """每日訂餐截止時間設定"""

    def __init__(self, db: Session, default_cutoff: str = None):
        self.db = db
        self.default_cutoff = default_cutoff or app_settings.DEFAULT_ORDER_CUTOFF

    def get_order_cutoff(self) -> str:
        """取得截止時間，未設定時回傳預設值"""
        setting = self.db.query(Setting).filter(Setting.id == SETTING_ROW_ID).first()
        if setting is None or not setting.order_cutoff:
            return self.default_cutoff
        return setting.order_cutoff

    def set_order_cutoff(self, value: str) -> str:
        """
        更新截止時間。

        Args:
            value: 24 小時制 HH:MM

        Returns:
            儲存後的截止時間

        Raises:
            ValidationError: 格式錯誤時，不會修改既有設定
        """
        if not value:
            raise ValidationError("orderCutoff required", field="orderCutoff")

        value = str(value).strip()
        if not validate_cutoff_time(value):
            raise ValidationError("orderCutoff must be HH:MM (24-hour)", field="orderCutoff")

        setting = self.db.query(Setting).filter(Setting.id == SETTING_ROW_ID).first()
        if setting is None:
            setting = Setting(id=SETTING_ROW_ID, order_cutoff=value)
            self.db.add(setting)
        else:
            setting.order_cutoff = value

        self.db.commit()
        logger.info(f"Order cutoff changed to {value}")
        return value
