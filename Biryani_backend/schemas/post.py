from pydantic import BaseModel, computed_field
from typing import Optional
from datetime import datetime

VERIFIED_TRUST_SCORE = 0.7


class PostCreate(BaseModel):
    id: Optional[str] = None
    user_id: Optional[str] = None
    user_name: Optional[str] = None
    place_name: Optional[str] = None
    description: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None
    distribution_time: Optional[str] = None


class PostResponse(BaseModel):
    id: str
    user_id: Optional[str] = None
    user_name: Optional[str] = None
    place_name: str
    description: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None
    distribution_time: Optional[str] = None
    created_at: Optional[datetime] = None
    true_votes: int = 0
    false_votes: int = 0

    @computed_field
    @property
    def trust_score(self) -> float:
        total = self.true_votes + self.false_votes
        if total == 0:
            return 0.5
        return self.true_votes / total

    @computed_field
    @property
    def verified(self) -> bool:
        return self.true_votes + self.false_votes >= 1 and self.trust_score >= VERIFIED_TRUST_SCORE
