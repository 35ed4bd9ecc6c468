from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, DateTime, Float, ForeignKey, Text, UniqueConstraint
from app.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Post(Base):
    __tablename__ = "posts"

    id = Column(String, primary_key=True, index=True)
    user_id = Column(String, ForeignKey("users.id"), index=True)
    place_name = Column(String)
    description = Column(Text, nullable=True)  # 食物类别或自由文本
    lat = Column(Float, nullable=True)
    lng = Column(Float, nullable=True)
    distribution_time = Column(String, nullable=True)
    created_at = Column(DateTime, default=utcnow, index=True)


class Vote(Base):
    __tablename__ = "votes"
    __table_args__ = (
        UniqueConstraint('post_id', 'user_id', name='uq_vote_post_user'),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    post_id = Column(String, index=True)
    user_id = Column(String)
    vote_type = Column(Integer)  # 1 属实, 0 不实
