from datetime import datetime, date, time, timedelta
from typing import Optional, Tuple
import pytz

from nfc_attendance.config import settings


def get_timezone(timezone_str: str = None) -> pytz.BaseTzInfo:
    """獲取伺服器時區"""
    try:
        return pytz.timezone(timezone_str or settings.TIMEZONE)
    except pytz.UnknownTimeZoneError:
        return pytz.timezone("Asia/Taipei")


def utc_now() -> datetime:
    """獲取當前 UTC 時間"""
    return datetime.now(pytz.UTC)


def local_now(timezone_str: str = None) -> datetime:
    """獲取伺服器時區當前時間"""
    return utc_now().astimezone(get_timezone(timezone_str))


def to_local(dt: datetime, timezone_str: str = None) -> datetime:
    """將時間轉換為伺服器時區；naive 時間視為已在該時區"""
    tz = get_timezone(timezone_str)
    if dt.tzinfo is None:
        return tz.localize(dt)
    return dt.astimezone(tz)


def to_utc(dt: datetime, timezone_str: str = None) -> datetime:
    """將伺服器時區時間轉換為 UTC"""
    return to_local(dt, timezone_str).astimezone(pytz.UTC)


def format_date(dt: datetime) -> str:
    """格式化為日期字符串 (YYYY-MM-DD)"""
    return dt.strftime("%Y-%m-%d")


def parse_date(date_str: str) -> Optional[date]:
    """解析日期字符串"""
    try:
        return datetime.strptime(date_str, "%Y-%m-%d").date()
    except (TypeError, ValueError):
        return None


def cutoff_instant(now: datetime, cutoff: str, timezone_str: str = None) -> datetime:
    """
    Combine the calendar day of ``now`` (in the server time zone) with an
    ``HH:MM`` cutoff string.
    """
    local = to_local(now, timezone_str)
    hours, minutes = (int(part) for part in cutoff.split(":"))
    naive = datetime.combine(local.date(), time(hours, minutes))
    return get_timezone(timezone_str).localize(naive)


def day_bounds_utc(day: date, timezone_str: str = None) -> Tuple[datetime, datetime]:
    """Start and end (inclusive) of a local calendar day, expressed in UTC."""
    tz = get_timezone(timezone_str)
    start = tz.localize(datetime.combine(day, time.min))
    end = tz.localize(datetime.combine(day, time.max))
    return start.astimezone(pytz.UTC), end.astimezone(pytz.UTC)


def month_label(year: int, month: int) -> str:
    return f"{year}-{month:02d}"


def month_range(year: int, month: int) -> Tuple[date, date]:
    """取得月份的第一天與最後一天"""
    start_date = date(year, month, 1)
    if month == 12:
        end_date = date(year + 1, 1, 1) - timedelta(days=1)
    else:
        end_date = date(year, month + 1, 1) - timedelta(days=1)
    return start_date, end_date
