from sqlalchemy import Column, Integer, String, Text, ForeignKey
from hrms.db.base import BaseModel

class ActivityLog(BaseModel):
    __tablename__ = "activity_logs"

    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    action = Column(String(100), nullable=False)
    module = Column(String(50), nullable=False)
    details = Column(Text)
