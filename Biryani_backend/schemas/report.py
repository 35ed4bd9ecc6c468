from pydantic import BaseModel
from typing import Optional


class ReportCreate(BaseModel):
    post_id: Optional[str] = None
    user_id: Optional[str] = None
    reason: Optional[str] = ""


class ReportAck(BaseModel):
    success: bool = True
