from sqlalchemy import Column, Integer, String, DateTime, func, UniqueConstraint, Index
from nfc_attendance.database import Base

class DailyRecord(Base):
    __tablename__ = "daily_records"
    
    id = Column(Integer, primary_key=True, index=True)
    subject_id = Column(String(16), nullable=False, index=True)
    subject_name = Column(String(100), default="Unknown")
    group_label = Column(String(100), default="")
    date = Column(String(10), nullable=False, index=True)  # YYYY-MM-DD
    ordered_at = Column(DateTime(timezone=True), nullable=True)
    taken_at = Column(DateTime(timezone=True), nullable=True)
    status = Column(String(20), nullable=False)  # 'ordered', 'taken'
    device_ip = Column(String(64), default="")
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
    
    __table_args__ = (
        UniqueConstraint('subject_id', 'date', name='uix_daily_record_subject_date'),
        Index('ix_daily_records_date_updated', 'date', 'updated_at'),
    )
