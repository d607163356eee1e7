from sqlalchemy import Column, Integer, Text, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from hrms.db.base import BaseModel

class TaskRating(BaseModel):
    __tablename__ = 'task_ratings'
    __table_args__ = (
        CheckConstraint('rating >= 1 AND rating <= 5', name='ck_task_rating_range'),
    )

    task_id = Column(Integer, ForeignKey('tasks.id'), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey('users.id'), nullable=False, index=True)  # rated employee
    rated_by = Column(Integer, ForeignKey('users.id'), nullable=False)
    rating = Column(Integer, nullable=False)
    comments = Column(Text)

    # Relationships
    task = relationship("Task", back_populates="ratings")
