"""
Scan ingestion: turns an authenticated badge tap into an attendance log
entry or a canteen order/collection on the subject's daily record.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from sqlalchemy import case, func
from sqlalchemy.orm import Session

from nfc_attendance.config import Settings, settings as app_settings
from nfc_attendance.database import dialect_insert
from nfc_attendance.models.attendance_log import AttendanceLog
from nfc_attendance.models.daily_record import DailyRecord
from nfc_attendance.models.subject import Subject
from nfc_attendance.schemas.scan import ScanStatus
from nfc_attendance.services.setting_service import SettingService
from nfc_attendance.services.subject_service import SubjectService
from nfc_attendance.utils.datetime_utils import (
    cutoff_instant,
    format_date,
    to_local,
    to_utc,
    utc_now
)
from nfc_attendance.utils.errors import NotFoundError

logger = logging.getLogger(__name__)


@dataclass
class ScanResult:
    """刷卡結果"""
    status: ScanStatus
    record_id: int
    message: str

    @property
    def created(self) -> bool:
        # A collection updates (or late-creates) the day's record; the API answers 200
        return self.status != ScanStatus.TAKEN


class ScanService:
    """刷卡業務邏輯服務"""

    def __init__(self, db: Session, settings: Settings = None):
        self.db = db
        self.settings = settings or app_settings
        self.subject_service = SubjectService(db)
        self.setting_service = SettingService(db, self.settings.DEFAULT_ORDER_CUTOFF)

    def record_scan(self, subject_id: str, source_ip: str = "unknown", now: datetime = None) -> ScanResult:
        """
        依設定的模式處理一次刷卡。

        Args:
            subject_id: 卡片編號
            source_ip: 讀卡機來源 IP
            now: 刷卡時間（可選，默認當前時間）

        Raises:
            NotFoundError: 如果卡片編號不在名冊中
        """
        if self.settings.is_canteen_mode:
            return self.record_canteen_scan(subject_id, source_ip, now)

        log = self.record_attendance(subject_id, source_ip, now)
        return ScanResult(status=ScanStatus.PRESENT, record_id=log.id, message="Attendance recorded")

    def _resolve_subject(self, subject_id: str) -> Subject:
        subject = self.subject_service.find_by_external_id(subject_id)
        if not subject:
            logger.info(f"Scan rejected, unknown subject: {subject_id}")
            raise NotFoundError("Subject not found")
        return subject

    def record_attendance(self, subject_id: str, source_ip: str = "unknown", now: datetime = None) -> AttendanceLog:
        """
        簽到模式：每次刷卡都新增一筆紀錄，不做去重。

        Returns:
            新建立的簽到紀錄
        """
        subject = self._resolve_subject(subject_id)
        timestamp = to_utc(now, self.settings.TIMEZONE) if now else utc_now()

        log = AttendanceLog(
            subject_id=subject.external_id,
            subject_name=subject.name,
            group_label=subject.group_label or "",
            timestamp=timestamp,
            device_ip=source_ip,
            status=ScanStatus.PRESENT.value
        )

        self.db.add(log)
        self.db.commit()
        self.db.refresh(log)

        logger.info(f"Attendance recorded: {subject.external_id} from {source_ip}")
        return log

    def record_canteen_scan(self, subject_id: str, source_ip: str = "unknown", now: datetime = None) -> ScanResult:
        """
        訂餐模式：截止時間前（含）刷卡為訂餐，之後為取餐。

        每個 (成員, 日期) 只有一筆 DailyRecord，所有寫入都是單一條
        INSERT ... ON CONFLICT 敘述。

        Returns:
            刷卡結果 (ordered / taken)
        """
        subject = self._resolve_subject(subject_id)

        now = to_local(now or utc_now(), self.settings.TIMEZONE)
        cutoff = self.setting_service.get_order_cutoff()
        deadline = cutoff_instant(now, cutoff, self.settings.TIMEZONE)
        day = format_date(now)

        if now <= deadline:
            record_id = self._upsert_order(subject, day, now, source_ip)
            result = ScanResult(status=ScanStatus.ORDERED, record_id=record_id, message="Order recorded")
        else:
            record_id = self._upsert_collection(subject, day, now, source_ip)
            result = ScanResult(status=ScanStatus.TAKEN, record_id=record_id, message="Meal collected")

        logger.info(
            f"Canteen scan {result.status.value}: {subject.external_id} on {day} "
            f"(cutoff {cutoff}) from {source_ip}"
        )
        return result

    def _upsert_order(self, subject: Subject, day: str, now: datetime, source_ip: str) -> int:
        """Create the day's record as ordered, or keep the first orderedAt."""
        stamp = to_utc(now)
        stmt = dialect_insert(self.db, DailyRecord).values(
            subject_id=subject.external_id,
            subject_name=subject.name,
            group_label=subject.group_label or "",
            date=day,
            ordered_at=stamp,
            taken_at=None,
            status=ScanStatus.ORDERED.value,
            device_ip=source_ip,
            created_at=stamp,
            updated_at=stamp
        )
        # SET expressions see the pre-update row, so the CASE checks the old ordered_at
        stmt = stmt.on_conflict_do_update(
            index_elements=["subject_id", "date"],
            set_={
                "device_ip": stmt.excluded.device_ip,
                "status": case(
                    (DailyRecord.ordered_at.is_(None), ScanStatus.ORDERED.value),
                    else_=DailyRecord.status
                ),
                "ordered_at": func.coalesce(DailyRecord.ordered_at, stmt.excluded.ordered_at),
                "updated_at": stmt.excluded.updated_at,
            }
        ).returning(DailyRecord.id)

        record_id = self.db.execute(stmt).scalar_one()
        self.db.commit()
        return record_id

    def _upsert_collection(self, subject: Subject, day: str, now: datetime, source_ip: str) -> int:
        """Mark the day's record taken; every post-cutoff scan re-stamps takenAt."""
        stamp = to_utc(now)
        stmt = dialect_insert(self.db, DailyRecord).values(
            subject_id=subject.external_id,
            subject_name=subject.name,
            group_label=subject.group_label or "",
            date=day,
            ordered_at=None,
            taken_at=stamp,
            status=ScanStatus.TAKEN.value,
            device_ip=source_ip,
            created_at=stamp,
            updated_at=stamp
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["subject_id", "date"],
            set_={
                "taken_at": stmt.excluded.taken_at,
                "status": ScanStatus.TAKEN.value,
                "device_ip": stmt.excluded.device_ip,
                "updated_at": stmt.excluded.updated_at,
            }
        ).returning(DailyRecord.id)

        record_id = self.db.execute(stmt).scalar_one()
        self.db.commit()
        return record_id
