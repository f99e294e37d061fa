from pydantic import BaseModel, ConfigDict, EmailStr, field_validator
from pydantic.alias_generators import to_camel
from typing import Optional
from datetime import datetime
from enum import Enum

class SubjectKind(str, Enum):
    EMPLOYEE = "employee"
    STUDENT = "student"

class SubjectBase(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    external_id: Optional[str] = None
    kind: SubjectKind = SubjectKind.EMPLOYEE
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    group_label: Optional[str] = ""

    @field_validator("email", mode="before")
    @classmethod
    def blank_email_is_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

class SubjectCreate(SubjectBase):
    pass

class SubjectUpdate(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    external_id: Optional[str] = None
    kind: Optional[SubjectKind] = None
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    group_label: Optional[str] = None

    @field_validator("email", mode="before")
    @classmethod
    def blank_email_is_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

class SubjectResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)

    id: int
    external_id: str
    kind: str
    name: str
    email: Optional[str] = ""
    group_label: Optional[str] = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
