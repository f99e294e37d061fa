"""
Read-side queries over logged scans for the dashboard.
"""

from typing import Dict, List, Optional, Tuple
from sqlalchemy import desc, func
from sqlalchemy.orm import Session

from nfc_attendance.config import Settings, settings as app_settings
from nfc_attendance.models.attendance_log import AttendanceLog
from nfc_attendance.models.daily_record import DailyRecord
from nfc_attendance.models.subject import Subject
from nfc_attendance.schemas.scan import ScanStatus
from nfc_attendance.utils.datetime_utils import day_bounds_utc, format_date, local_now, parse_date
from nfc_attendance.utils.validators import clamp_pagination


class QueryService:
    """刷卡紀錄查詢服務"""

    def __init__(self, db: Session, settings: Settings = None):
        self.db = db
        self.settings = settings or app_settings

    def list_records(
        self,
        date_str: Optional[str] = None,
        subject_id: Optional[str] = None,
        page: Optional[int] = 1,
        limit: Optional[int] = None
    ) -> Tuple[List, int, int, int]:
        """
        分頁查詢刷卡紀錄，最新的在前。

        Args:
            date_str: 日期篩選 (YYYY-MM-DD)
            subject_id: 卡片編號篩選
            page: 頁碼（最小為 1）
            limit: 每頁筆數（限制在 1-100）

        Returns:
            (紀錄列表, 總數, 頁碼, 每頁筆數) 的元組
        """
        page, limit = clamp_pagination(page, limit)

        if self.settings.is_canteen_mode:
            query = self.db.query(DailyRecord)
            if subject_id:
                query = query.filter(DailyRecord.subject_id == subject_id)
            if date_str:
                query = query.filter(DailyRecord.date == date_str)
            query = query.order_by(desc(DailyRecord.date), desc(DailyRecord.updated_at), desc(DailyRecord.id))
        else:
            query = self.db.query(AttendanceLog)
            if subject_id:
                query = query.filter(AttendanceLog.subject_id == subject_id)
            if date_str:
                day = parse_date(date_str)
                if day is None:
                    return [], 0, page, limit
                start, end = day_bounds_utc(day, self.settings.TIMEZONE)
                query = query.filter(AttendanceLog.timestamp >= start, AttendanceLog.timestamp <= end)
            query = query.order_by(desc(AttendanceLog.timestamp), desc(AttendanceLog.id))

        total = query.count()
        items = query.offset((page - 1) * limit).limit(limit).all()

        return items, total, page, limit

    def today_stats(self) -> Dict[str, int]:
        """取得今日統計（儀表板用）"""
        total_subjects = self.db.query(Subject).count()
        today = local_now(self.settings.TIMEZONE).date()

        if self.settings.is_canteen_mode:
            day = format_date(today)
            ordered = self.db.query(DailyRecord).filter(
                DailyRecord.date == day,
                DailyRecord.ordered_at.isnot(None)
            ).count()
            taken = self.db.query(DailyRecord).filter(
                DailyRecord.date == day,
                DailyRecord.status == ScanStatus.TAKEN.value
            ).count()
            return {
                "totalSubjects": total_subjects,
                "orderedToday": ordered,
                "takenToday": taken,
                "notOrderedToday": max(0, total_subjects - ordered),
            }

        start, end = day_bounds_utc(today, self.settings.TIMEZONE)
        window = (AttendanceLog.timestamp >= start, AttendanceLog.timestamp <= end)
        today_scans = self.db.query(AttendanceLog).filter(*window).count()
        present = self.db.query(func.count(func.distinct(AttendanceLog.subject_id))).filter(*window).scalar() or 0

        return {
            "totalSubjects": total_subjects,
            "presentToday": present,
            "todayScans": today_scans,
            "absentToday": max(0, total_subjects - present),
        }
