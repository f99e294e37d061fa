from sqlalchemy import Column, Integer, String, DateTime, func
from nfc_attendance.database import Base

class Subject(Base):
    __tablename__ = "subjects"
    
    id = Column(Integer, primary_key=True, index=True)
    external_id = Column(String(16), unique=True, nullable=False, index=True)  # written onto the NFC card
    kind = Column(String(20), nullable=False, default="employee")  # 'employee', 'student'
    name = Column(String(100), nullable=False)
    email = Column(String(120), default="")
    group_label = Column(String(100), default="")  # department or course
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
