from sqlalchemy import Column, Integer, String, DateTime, func
from nfc_attendance.database import Base

SETTING_ROW_ID = 1

class Setting(Base):
    __tablename__ = "settings"
    
    id = Column(Integer, primary_key=True, default=SETTING_ROW_ID)
    order_cutoff = Column(String(5), nullable=False, default="10:00")  # HH:MM (24h)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
