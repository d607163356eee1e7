from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from hrms.db.base import BaseModel

class User(BaseModel):
    __tablename__ = "users"

    email = Column(String(255), unique=True, index=True, nullable=False)
    name = Column(String(255), nullable=False)
    hashed_password = Column(String(255), nullable=False)
    role = Column(String(100), nullable=False, index=True)
    department = Column(String(100), index=True)
    designation = Column(String(100))
    manager_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    is_active = Column(Boolean, default=True)
    last_login = Column(DateTime(timezone=True), nullable=True)

    # Relationships
    manager = relationship("User", remote_side="User.id", back_populates="reports")
    reports = relationship("User", back_populates="manager")

    def __repr__(self):
        return f"<User {self.email}>"
