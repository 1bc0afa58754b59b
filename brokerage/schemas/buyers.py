from pydantic import BaseModel, field_validator
from typing import List, Optional
from datetime import datetime

class Buyer(BaseModel):
    id: int
    name: str
    email: Optional[str] = None
    company: Optional[str] = None
    tags: Optional[List[str]] = None
    credit_ok: bool = False
    reliability_score: Optional[float] = None
    lots_won_count: int = 0
    po_lots_count: int = 0
    pos_received_count: int = 0
    avg_hours_to_po: Optional[float] = None
    award_conversion_rate: Optional[float] = None
    last_win_at: Optional[datetime] = None
    last_po_at: Optional[datetime] = None
    is_active: bool = True
    do_not_invite: bool = False

    @field_validator("tags", mode="before")
    @classmethod
    def split_tags(cls, value):
        if isinstance(value, str):
            return [t.strip() for t in value.split(",") if t.strip()]
        return value

    class Config:
        from_attributes = True

class RankedBuyer(BaseModel):
    buyer: Buyer
    score: float
    match_count: int

class RankedBuyerListResponse(BaseModel):
    lot_id: int
    tokens: List[str]
    buyers: List[RankedBuyer]
    total_matched: int

class BuyerListResponse(BaseModel):
    buyers: List[Buyer]
    total: int
    page: int
    per_page: int
