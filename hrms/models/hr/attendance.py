from sqlalchemy import Column, Integer, DateTime, Text, ForeignKey, Enum as SQLEnum, Date, UniqueConstraint
from sqlalchemy.orm import relationship
from hrms.db.base import BaseModel
from hrms.models.shared.enums import AttendanceStatus, enum_values

class Attendance(BaseModel):
    __tablename__ = 'attendance'
    __table_args__ = (
        UniqueConstraint('user_id', 'date', name='uq_attendance_user_date'),
    )

    user_id = Column(Integer, ForeignKey('users.id'), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    check_in_time = Column(DateTime(timezone=True))
    check_out_time = Column(DateTime(timezone=True))
    status = Column(
        SQLEnum(AttendanceStatus, values_callable=enum_values, native_enum=False, length=20),
        nullable=False,
    )
    remarks = Column(Text)

    # Relationships
    user = relationship("User")
