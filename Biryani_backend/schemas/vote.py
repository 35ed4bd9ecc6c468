from pydantic import BaseModel
from typing import Optional


class VoteCreate(BaseModel):
    post_id: Optional[str] = None
    user_id: Optional[str] = None
    vote_type: Optional[int] = None  # 1 属实, 0 不实


class VoteResponse(BaseModel):
    post_id: str
    true_votes: int = 0
    false_votes: int = 0
