from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from typing import Optional
from datetime import datetime

class DeviceCreate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None

class DeviceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)

    id: int
    name: str
    description: Optional[str] = ""
    last_seen: Optional[datetime] = None
    created_at: Optional[datetime] = None

class DeviceCreatedResponse(DeviceResponse):
    token: str
