from sqlalchemy import Column, Integer, String, Boolean, Text, ForeignKey, Date, JSON, Enum as SQLEnum, UniqueConstraint
from sqlalchemy.orm import relationship
from hrms.db.base import BaseModel
from hrms.models.shared.enums import FieldType, enum_values

class WorkLogField(BaseModel):
    """Custom work-log field offered to every user of a role"""
    __tablename__ = 'work_log_field_definitions'
    __table_args__ = (
        UniqueConstraint('role', 'field_key', name='uq_work_log_field_role_key'),
    )

    role = Column(String(100), nullable=False, index=True)
    field_key = Column(String(100), nullable=False)
    field_label = Column(String(200), nullable=False)
    field_type = Column(
        SQLEnum(FieldType, values_callable=enum_values, native_enum=False, length=20),
        nullable=False,
    )
    field_options = Column(JSON)  # choices for select fields
    is_required = Column(Boolean, default=False)
    display_order = Column(Integer, default=0)
    is_active = Column(Boolean, default=True)

class WorkLog(BaseModel):
    __tablename__ = 'daily_work_logs'
    __table_args__ = (
        UniqueConstraint('user_id', 'log_date', name='uq_work_log_user_date'),
    )

    user_id = Column(Integer, ForeignKey('users.id'), nullable=False, index=True)
    log_date = Column(Date, nullable=False, index=True)
    role = Column(String(100), nullable=False)
    field_data = Column(JSON, nullable=False, default=dict)
    notes = Column(Text)

    # Relationships
    user = relationship("User")
