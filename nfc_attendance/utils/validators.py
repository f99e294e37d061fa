import re
from typing import Optional, Tuple

from nfc_attendance.config import settings
from nfc_attendance.utils.errors import ValidationError

CUTOFF_PATTERN = re.compile(r'^([01]\d|2[0-3]):[0-5]\d$')
MONTH_PATTERN = re.compile(r'^(\d{4})-(0[1-9]|1[0-2])$')
EXTERNAL_ID_MAX_LENGTH = 16


def validate_cutoff_time(value: str) -> bool:
    """驗證 24 小時制 HH:MM 格式"""
    if not isinstance(value, str):
        return False
    return CUTOFF_PATTERN.match(value) is not None


def validate_external_id(external_id: str) -> bool:
    """驗證卡片編號（寫入 NFC 卡的字串）"""
    if not external_id or len(external_id.strip()) == 0:
        return False
    return len(external_id.strip()) <= EXTERNAL_ID_MAX_LENGTH


def parse_month(month: Optional[str]) -> Optional[Tuple[int, int]]:
    """解析 YYYY-MM 月份字串"""
    if not month:
        return None
    match = MONTH_PATTERN.match(month.strip())
    if not match:
        raise ValidationError("month must be in YYYY-MM format", field="month")
    return int(match.group(1)), int(match.group(2))


def clamp_pagination(page: Optional[int], limit: Optional[int]) -> Tuple[int, int]:
    """Floor page at 1 and clamp limit into [1, MAX_PAGE_SIZE]."""
    if limit is None:
        limit = settings.DEFAULT_PAGE_SIZE
    page = max(1, page or 1)
    limit = min(settings.MAX_PAGE_SIZE, max(1, limit))
    return page, limit


def sanitize_input(text: Optional[str]) -> str:
    """清理輸入文字"""
    if not text:
        return ""

    # 移除前後空白
    text = str(text).strip()

    # 移除多餘的空白字符
    text = re.sub(r'\s+', ' ', text)

    return text
