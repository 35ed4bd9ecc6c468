from sqlalchemy import Column, Integer, String, DateTime, Text
from app.database import Base
from models.post import utcnow


class Report(Base):
    __tablename__ = "reports"

    id = Column(Integer, primary_key=True, autoincrement=True)
    post_id = Column(String, index=True)
    user_id = Column(String, nullable=True)
    reason = Column(Text, default="")
    created_at = Column(DateTime, default=utcnow)
