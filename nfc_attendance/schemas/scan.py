from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Optional, Union
from datetime import datetime
from enum import Enum

class ScanStatus(str, Enum):
    PRESENT = "present"
    ORDERED = "ordered"
    TAKEN = "taken"

class ScanRequest(BaseModel):
    """NFC 讀卡機送出的刷卡資料"""
    # Older firmware sends employeeId / studentId instead of subjectId
    subject_id: Optional[Union[str, int]] = Field(
        None,
        validation_alias=AliasChoices("subjectId", "subject_id", "employeeId", "studentId")
    )

class DailyRecordResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)

    id: int
    subject_id: str
    subject_name: Optional[str] = None
    group_label: Optional[str] = ""
    date: str
    ordered_at: Optional[datetime] = None
    taken_at: Optional[datetime] = None
    status: str
    device_ip: Optional[str] = ""
    updated_at: Optional[datetime] = None

class AttendanceLogResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)

    id: int
    subject_id: str
    subject_name: Optional[str] = None
    group_label: Optional[str] = ""
    timestamp: datetime
    device_ip: Optional[str] = ""
    status: str

