from sqlalchemy import Column, Integer, Text, ForeignKey, JSON, UniqueConstraint
from sqlalchemy.orm import relationship
from hrms.db.base import BaseModel

class TaskReport(BaseModel):
    """Completion report filed by an assignee. Never updated once stored."""
    __tablename__ = 'task_reports'
    __table_args__ = (
        UniqueConstraint('task_id', 'user_id', name='uq_task_report_task_user'),
    )

    task_id = Column(Integer, ForeignKey('tasks.id'), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey('users.id'), nullable=False, index=True)
    report_text = Column(Text, nullable=False)
    working_links = Column(JSON)
    completion_files = Column(JSON)

    # Relationships
    task = relationship("Task", back_populates="reports")
