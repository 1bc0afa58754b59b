from pydantic import BaseModel, Field
from typing import Annotated, Dict, List, Literal, Optional, Union

ComponentKey = Literal["cpu", "memory", "network", "expansion", "gpu", "drives"]

# Цены приходят из формы как строки ("1,200.50") или числа
Price = Optional[Union[float, str]]


class TakeAllPayload(BaseModel):
    mode: Literal["take_all"] = "take_all"
    take_all_total: Price = None
    notes: Optional[str] = None


class LinePrice(BaseModel):
    line_item_id: int
    unit_price: Price = None
    currency: Optional[str] = None


class PerLinePayload(BaseModel):
    mode: Literal["lines"] = "lines"
    lines: List[LinePrice] = []
    notes: Optional[str] = None


class ComponentPrice(BaseModel):
    selected: bool = False
    price: Price = None


class ComponentLinePrice(BaseModel):
    line_item_id: int
    components: Dict[ComponentKey, ComponentPrice] = {}
    manual_price: Price = None
    currency: Optional[str] = None


class PerComponentPayload(BaseModel):
    mode: Literal["components"] = "components"
    lines: List[ComponentLinePrice] = []
    notes: Optional[str] = None


OfferPayload = Annotated[
    Union[TakeAllPayload, PerLinePayload, PerComponentPayload],
    Field(discriminator="mode"),
]


class OfferSubmission(BaseModel):
    payload: OfferPayload


class NormalizedLine(BaseModel):
    line_item_id: int
    unit_price: float
    qty: int
    currency: Optional[str] = None


class NormalizedOffer(BaseModel):
    lines: List[NormalizedLine] = []
    take_all_total: Optional[float] = None
    offer_total: float = 0.0

    @property
    def value(self) -> float:
        return self.take_all_total if self.take_all_total is not None else self.offer_total


class OfferResponse(BaseModel):
    status: str
    offer_id: int
    lot_id: int
    buyer_id: int
    total_offer: Optional[float] = None
    priced_lines: int = 0


class OfferStatusResponse(BaseModel):
    lot_id: int
    buyer_id: int
    round_id: int
    lot_status: str
    has_offer: bool
    offer_status: Optional[str] = None
    is_winner: bool
