from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from brokerage.db.database import get_db
from brokerage.schemas.allocation import AllocationResponse
from brokerage.schemas.awards import AwardResponse
from brokerage.services.allocation import load_round_allocation
from brokerage.services.award_service import accept_take_all, award_allocation

router = APIRouter()

@router.get(
    "/lots/{lot_id}/optimize",
    response_model=AllocationResponse,
    summary="Оптимизатор",
    description="Лучшая цена за единицу по каждой позиции текущего раунда и итоги по покупателям. Только чтение.",
)
async def optimize(
        lot_id: int,
        top_n: Optional[int] = Query(None, ge=0, le=50, description="Сколько лучших предложений показывать по позиции"),
        hide_zero_qty: bool = Query(False, description="Скрыть позиции с нулевым количеством"),
        hide_no_bids: bool = Query(False, description="Скрыть позиции без предложений"),
        db: AsyncSession = Depends(get_db)
):
    return await load_round_allocation(db, lot_id, top_n, hide_zero_qty, hide_no_bids)

@router.post("/lots/{lot_id}/award", response_model=AwardResponse)
async def award(lot_id: int, db: AsyncSession = Depends(get_db)):
    round_id, awarded = await award_allocation(db, lot_id)
    return {"status": "success", "lot_id": lot_id, "round_id": round_id, "awarded": awarded}

@router.post("/lots/{lot_id}/offers/{offer_id}/accept", response_model=AwardResponse)
async def accept(lot_id: int, offer_id: int, db: AsyncSession = Depends(get_db)):
    round_id, awarded = await accept_take_all(db, lot_id, offer_id)
    return {"status": "success", "lot_id": lot_id, "round_id": round_id, "awarded": awarded}
