from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime
from brokerage.schemas.awards import AwardedLine
from brokerage.schemas.lots import Lot, LineItem

class Invite(BaseModel):
    id: int
    lot_id: int
    round_id: int
    buyer_id: int
    token: str
    status: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class InviteCreate(BaseModel):
    buyer_ids: List[int]

class InviteListResponse(BaseModel):
    round_id: int
    invites: List[Invite]

class InviteLotResponse(BaseModel):
    invite: Invite
    round_number: int
    lot: Lot
    line_items: List[LineItem]

class InviteResultsResponse(BaseModel):
    invite: Invite
    round_id: int
    round_number: int
    is_winner: bool
    awards: List[AwardedLine]
    awards_total: float
