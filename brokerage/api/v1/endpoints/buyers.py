from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from brokerage.db.database import get_db
from brokerage.core.config import settings
from brokerage.core.errors import NotFoundError
from brokerage.core.logging_config import logger
from brokerage.crud.buyers import get_invitable_buyers, list_buyers
from brokerage.crud.lots import get_lot, get_line_items
from brokerage.schemas.buyers import BuyerListResponse, RankedBuyerListResponse
from brokerage.services.buyer_scoring import lot_tokens, rank_buyers

router = APIRouter()

@router.get(
    "/lots/{lot_id}/buyers/ranked",
    response_model=RankedBuyerListResponse,
    summary="Рейтинг покупателей для лота",
    description="Покупатели с совпадающими тегами, по баллу (теги, кредит, надёжность, конверсия, скорость PO, давность).",
)
async def ranked_buyers(
        lot_id: int,
        limit: Optional[int] = Query(None, ge=1, le=1000, description="Сколько покупателей вернуть"),
        db: AsyncSession = Depends(get_db)
):
    lot = await get_lot(db, lot_id)
    if not lot:
        raise NotFoundError("Lot", lot_id)
    tokens = lot_tokens(lot.title, await get_line_items(db, lot_id))
    ranked = rank_buyers(await get_invitable_buyers(db), tokens)
    limit = limit or settings.RANKED_BUYERS_LIMIT
    logger.info(f"Ranked {len(ranked)} matching buyers for lot {lot_id}, returning {min(limit, len(ranked))}")
    return {
        "lot_id": lot_id,
        "tokens": tokens,
        "buyers": [{"buyer": b, "score": score, "match_count": match} for b, score, match in ranked[:limit]],
        "total_matched": len(ranked),
    }

@router.get("/buyers/", response_model=BuyerListResponse)
async def browse_buyers(
        page: int = Query(1, ge=1, description="Номер страницы"),
        per_page: int = Query(20, ge=1, le=100, description="Количество записей на странице"),
        q: Optional[str] = Query(None, description="Поиск по имени, компании, email"),
        db: AsyncSession = Depends(get_db)
):
    buyers, total = await list_buyers(db, page, per_page, q)
    return {"buyers": buyers, "total": total, "page": page, "per_page": per_page}
