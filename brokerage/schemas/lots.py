from pydantic import BaseModel
from typing import Any, Dict, Optional
from datetime import datetime

class Lot(BaseModel):
    id: int
    title: str
    currency: Optional[str] = None
    status: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class LineItem(BaseModel):
    id: int
    lot_id: int
    description: Optional[str] = None
    model: Optional[str] = None
    qty: Optional[int] = None
    serial_tag: Optional[str] = None
    cpu: Optional[str] = None
    cpu_qty: Optional[int] = None
    memory_part_numbers: Optional[str] = None
    memory_qty: Optional[int] = None
    network_card: Optional[str] = None
    expansion_card: Optional[str] = None
    gpu: Optional[str] = None
    specs: Optional[Dict[str, Any]] = None
    asking_price: Optional[float] = None

    class Config:
        from_attributes = True
