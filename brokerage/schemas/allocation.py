from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime


class OfferLineView(BaseModel):
    offer_line_id: int
    offer_id: int
    buyer_id: int
    line_item_id: int
    unit_price: float
    qty_snapshot: Optional[int] = None
    currency: Optional[str] = None
    offer_created_at: Optional[datetime] = None


class LineAllocation(BaseModel):
    line_item_id: int
    qty: int
    best: Optional[OfferLineView] = None
    extended: Optional[float] = None
    top: List[OfferLineView] = []


class BuyerAward(BaseModel):
    buyer_id: int
    line_count: int
    total: float
    line_item_ids: List[int] = []


class TakeAllView(BaseModel):
    offer_id: int
    buyer_id: int
    take_all_total: float


class AllocationResult(BaseModel):
    lines: List[LineAllocation]
    buyers: List[BuyerAward]
    split_total: float
    priced_lines: int
    total_lines: int
    best_take_all: Optional[TakeAllView] = None
    # валюты выигравших строк; суммы складываются без конвертации
    currencies: List[str] = []


class AllocationResponse(AllocationResult):
    lot_id: int
    currency: str
