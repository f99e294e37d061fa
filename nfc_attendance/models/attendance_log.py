from sqlalchemy import Column, Integer, String, DateTime, Index
from nfc_attendance.database import Base

class AttendanceLog(Base):
    __tablename__ = "attendance_logs"
    
    id = Column(Integer, primary_key=True, index=True)
    subject_id = Column(String(16), nullable=False, index=True)
    subject_name = Column(String(100), default="Unknown")
    group_label = Column(String(100), default="")
    timestamp = Column(DateTime(timezone=True), nullable=False, index=True)
    device_ip = Column(String(64), default="")
    status = Column(String(20), default="present")  # 'present', 'unknown'
    
    __table_args__ = (
        Index('ix_attendance_logs_timestamp_subject', 'timestamp', 'subject_id'),
    )
