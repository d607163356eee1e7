from sqlalchemy import Column, Integer, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from hrms.db.base import BaseModel

class TaskAssignment(BaseModel):
    __tablename__ = 'task_assignments'
    __table_args__ = (
        UniqueConstraint('task_id', 'user_id', name='uq_task_assignment_task_user'),
    )

    task_id = Column(Integer, ForeignKey('tasks.id'), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey('users.id'), nullable=False, index=True)
    assigned_by = Column(Integer, ForeignKey('users.id'))

    # Relationships
    task = relationship("Task", back_populates="assignments")
    assigned_user = relationship("User", foreign_keys=[user_id])
