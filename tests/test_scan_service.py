import pytest
from sqlalchemy.exc import IntegrityError

from nfc_attendance.models.attendance_log import AttendanceLog
from nfc_attendance.models.daily_record import DailyRecord
from nfc_attendance.schemas.scan import ScanStatus
from nfc_attendance.services.scan_service import ScanService
from nfc_attendance.services.setting_service import SettingService
from nfc_attendance.services.subject_service import SubjectService
from nfc_attendance.utils.errors import NotFoundError

from conftest import add_subject, as_utc, local


@pytest.fixture
def service(db, settings):
    add_subject(db, "EMP001", name="Alice", group_label="Kitchen")
    return ScanService(db, settings)


def test_scan_before_cutoff_orders(service, db):
    result = service.record_scan("EMP001", "10.0.0.5", now=local(2026, 3, 2, 9, 59, 59))

    assert result.status == ScanStatus.ORDERED
    assert result.created
    record = db.get(DailyRecord, result.record_id)
    assert record.date == "2026-03-02"
    assert record.status == "ordered"
    assert record.subject_name == "Alice"
    assert record.group_label == "Kitchen"
    assert record.device_ip == "10.0.0.5"
    assert record.taken_at is None


def test_scan_exactly_at_cutoff_still_orders(service):
    result = service.record_scan("EMP001", now=local(2026, 3, 2, 10, 0, 0))

    assert result.status == ScanStatus.ORDERED


def test_scan_after_cutoff_collects(service, db):
    result = service.record_scan("EMP001", now=local(2026, 3, 2, 10, 0, 1))

    assert result.status == ScanStatus.TAKEN
    assert not result.created
    record = db.get(DailyRecord, result.record_id)
    assert record.status == "taken"
    # Late first scan of the day: no morning order exists
    assert record.ordered_at is None
    assert as_utc(record.taken_at) == local(2026, 3, 2, 10, 0, 1)


def test_repeated_scans_before_cutoff_keep_first_order_time(service, db):
    first = local(2026, 3, 2, 8, 0)
    service.record_scan("EMP001", "10.0.0.5", now=first)
    service.record_scan("EMP001", "10.0.0.6", now=local(2026, 3, 2, 9, 15))

    records = db.query(DailyRecord).filter(DailyRecord.subject_id == "EMP001").all()
    assert len(records) == 1
    assert records[0].status == "ordered"
    assert as_utc(records[0].ordered_at) == first
    assert records[0].device_ip == "10.0.0.6"


def test_repeated_scans_after_cutoff_restamp_taken_time(service, db):
    service.record_scan("EMP001", now=local(2026, 3, 2, 12, 0))
    second = local(2026, 3, 2, 12, 5)
    service.record_scan("EMP001", now=second)

    records = db.query(DailyRecord).all()
    assert len(records) == 1
    assert as_utc(records[0].taken_at) == second


def test_order_then_collect_updates_same_record(service, db):
    ordered = service.record_scan("EMP001", now=local(2026, 3, 2, 9, 0))
    taken = service.record_scan("EMP001", now=local(2026, 3, 2, 12, 30))

    assert ordered.record_id == taken.record_id
    record = db.get(DailyRecord, taken.record_id)
    assert record.status == "taken"
    assert as_utc(record.ordered_at) == local(2026, 3, 2, 9, 0)
    assert as_utc(record.taken_at) == local(2026, 3, 2, 12, 30)


def test_scans_on_different_days_create_separate_records(service, db):
    service.record_scan("EMP001", now=local(2026, 3, 2, 9, 0))
    service.record_scan("EMP001", now=local(2026, 3, 3, 9, 0))

    assert sorted(r.date for r in db.query(DailyRecord).all()) == ["2026-03-02", "2026-03-03"]


def test_custom_cutoff_is_used(service, db, settings):
    SettingService(db, settings.DEFAULT_ORDER_CUTOFF).set_order_cutoff("09:00")

    assert service.record_scan("EMP001", now=local(2026, 3, 2, 9, 0)).status == ScanStatus.ORDERED
    assert service.record_scan("EMP001", now=local(2026, 3, 2, 9, 0, 1)).status == ScanStatus.TAKEN


def test_unknown_subject_is_not_found_and_writes_nothing(service, db):
    with pytest.raises(NotFoundError):
        service.record_scan("NOPE", now=local(2026, 3, 2, 9, 0))

    assert db.query(DailyRecord).count() == 0
    assert db.query(AttendanceLog).count() == 0


def test_unique_constraint_rejects_duplicate_daily_record(service, db):
    service.record_scan("EMP001", now=local(2026, 3, 2, 9, 0))

    db.add(DailyRecord(subject_id="EMP001", date="2026-03-02", status="ordered"))
    with pytest.raises(IntegrityError):
        db.commit()
    db.rollback()


def test_deleting_subject_keeps_record_snapshot(service, db):
    result = service.record_scan("EMP001", now=local(2026, 3, 2, 9, 0))
    subject = SubjectService(db).find_by_external_id("EMP001")

    SubjectService(db).delete_subject(subject.id)

    record = db.get(DailyRecord, result.record_id)
    assert record.subject_name == "Alice"
    assert record.group_label == "Kitchen"


def test_attendance_mode_appends_every_scan(db, attendance_settings):
    add_subject(db, "STU042", name="Bob", group_label="Physics", kind="student")
    service = ScanService(db, attendance_settings)

    first = service.record_scan("STU042", "10.0.0.9", now=local(2026, 3, 2, 8, 0))
    second = service.record_scan("STU042", "10.0.0.9", now=local(2026, 3, 2, 8, 1))

    assert first.status == ScanStatus.PRESENT
    assert first.record_id != second.record_id
    logs = db.query(AttendanceLog).order_by(AttendanceLog.id).all()
    assert len(logs) == 2
    assert all(log.status == "present" for log in logs)
    assert logs[0].subject_name == "Bob"
    assert logs[0].group_label == "Physics"
    assert logs[0].device_ip == "10.0.0.9"
    assert db.query(DailyRecord).count() == 0


def test_order_after_late_collection_fills_order_time(service, db, settings):
    cutoffs = SettingService(db, settings.DEFAULT_ORDER_CUTOFF)
    cutoffs.set_order_cutoff("09:00")
    collected = service.record_scan("EMP001", now=local(2026, 3, 2, 9, 30))
    cutoffs.set_order_cutoff("12:00")

    ordered = service.record_scan("EMP001", now=local(2026, 3, 2, 10, 0))

    assert ordered.status == ScanStatus.ORDERED
    db.expire_all()
    record = db.get(DailyRecord, collected.record_id)
    assert record.status == "ordered"
    assert as_utc(record.ordered_at) == local(2026, 3, 2, 10, 0)
    assert as_utc(record.taken_at) == local(2026, 3, 2, 9, 30)
