from pydantic import BaseModel
from typing import List, Literal, Optional
from datetime import datetime

RoundScope = Literal["all", "unsold", "custom"]
RoundStatus = Literal["draft", "live", "closed"]

class LotRound(BaseModel):
    id: int
    lot_id: int
    round_number: int
    scope: RoundScope
    status: RoundStatus
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    closed_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class RoundCreate(BaseModel):
    scope: Optional[RoundScope] = None
    notes: Optional[str] = None

class RoundUpdate(BaseModel):
    scope: Optional[RoundScope] = None
    status: Optional[RoundStatus] = None
    notes: Optional[str] = None

class RoundListResponse(BaseModel):
    rounds: List[LotRound]
    current_round_id: Optional[int] = None
