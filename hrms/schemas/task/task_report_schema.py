from typing import List, Optional
from datetime import datetime
from pydantic import BaseModel, validator

class TaskReportCreate(BaseModel):
    report_text: str
    working_links: Optional[List[str]] = None
    # Keys of files already put in the file store
    completion_files: Optional[List[str]] = None

    @validator("report_text")
    def validate_report_text(cls, v):
        if not v or not v.strip():
            raise ValueError("Report text is required")
        return v.strip()

class TaskReportResponse(BaseModel):
    id: int
    task_id: int
    user_id: int
    user_name: Optional[str] = None
    report_text: str
    working_links: Optional[List[str]] = None
    completion_files: Optional[List[str]] = None
    created_at: Optional[datetime] = None
