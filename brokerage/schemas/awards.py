from pydantic import BaseModel
from typing import List, Optional

class AwardedLine(BaseModel):
    id: int
    lot_id: int
    round_id: int
    line_item_id: int
    buyer_id: int
    offer_id: Optional[int] = None
    currency: Optional[str] = None
    unit_price: Optional[float] = None
    qty: int
    extended: Optional[float] = None

    class Config:
        from_attributes = True

class AwardResponse(BaseModel):
    status: str
    lot_id: int
    round_id: int
    awarded: List[AwardedLine]
