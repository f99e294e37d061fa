from .device import DeviceCreate, DeviceResponse, DeviceCreatedResponse
from .subject import SubjectKind, SubjectBase, SubjectCreate, SubjectUpdate, SubjectResponse
from .setting import SettingUpdate, SettingResponse
from .scan import (
    ScanRequest, ScanStatus, DailyRecordResponse, AttendanceLogResponse
)

__all__ = [
    "DeviceCreate", "DeviceResponse", "DeviceCreatedResponse",
    "SubjectKind", "SubjectBase", "SubjectCreate", "SubjectUpdate", "SubjectResponse",
    "SettingUpdate", "SettingResponse",
    "ScanRequest", "ScanStatus", "DailyRecordResponse", "AttendanceLogResponse"
]
