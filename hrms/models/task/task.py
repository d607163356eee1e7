from sqlalchemy import Column, Integer, String, DateTime, Boolean, Text, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import relationship
from hrms.db.base import BaseModel
from hrms.models.shared.enums import TaskStatus, TaskPriority, enum_values

class Task(BaseModel):
    __tablename__ = 'tasks'

    title = Column(String(200), nullable=False)
    description = Column(Text)

    # Ownership
    created_by = Column(Integer, ForeignKey('users.id'), nullable=False)

    # Status and priority
    status = Column(
        SQLEnum(TaskStatus, values_callable=enum_values, native_enum=False, length=20),
        default=TaskStatus.PENDING,
        nullable=False,
    )
    priority = Column(
        SQLEnum(TaskPriority, values_callable=enum_values, native_enum=False, length=20),
        default=TaskPriority.MEDIUM,
    )

    # Dates
    deadline = Column(DateTime(timezone=True))
    started_at = Column(DateTime(timezone=True))
    completed_at = Column(DateTime(timezone=True))

    is_active = Column(Boolean, default=True)

    # Relationships
    creator = relationship("User", foreign_keys=[created_by])
    assignments = relationship("TaskAssignment", back_populates="task", cascade="all, delete-orphan")
    ratings = relationship("TaskRating", back_populates="task", cascade="all, delete-orphan")
    reports = relationship("TaskReport", back_populates="task", cascade="all, delete-orphan")
