from .device import Device
from .subject import Subject
from .setting import Setting
from .daily_record import DailyRecord
from .attendance_log import AttendanceLog

__all__ = ["Device", "Subject", "Setting", "DailyRecord", "AttendanceLog"]
