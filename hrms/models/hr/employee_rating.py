from sqlalchemy import Column, Integer, String, Text, ForeignKey
from sqlalchemy.orm import relationship
from hrms.db.base import BaseModel

class EmployeeRating(BaseModel):
    __tablename__ = 'employee_ratings'

    employee_id = Column(Integer, ForeignKey('users.id'), nullable=False, index=True)
    rated_by = Column(Integer, ForeignKey('users.id'), nullable=False)
    workplace_behaviour = Column(Integer)
    discipline = Column(Integer)
    innovations = Column(Integer)
    punctuality = Column(Integer)
    critical_task_delivery = Column(Integer)
    comments = Column(Text)
    rating_period = Column(String(20), index=True)  # e.g. 2024-05

    # Relationships
    employee = relationship("User", foreign_keys=[employee_id])
    rater = relationship("User", foreign_keys=[rated_by])
