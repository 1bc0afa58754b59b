from typing import Iterable, List
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from brokerage.models.offers import Offer, OfferLine

async def get_offer(db: AsyncSession, offer_id: int) -> Offer | None:
    result = await db.execute(select(Offer).filter_by(id=offer_id))
    return result.scalars().first()

async def get_offer_by_lot_buyer(db: AsyncSession, lot_id: int, buyer_id: int) -> Offer | None:
    result = await db.execute(select(Offer).filter_by(lot_id=lot_id, buyer_id=buyer_id))
    return result.scalars().first()

async def get_offers_by_lot(db: AsyncSession, lot_id: int) -> List[Offer]:
    result = await db.execute(
        select(Offer).filter_by(lot_id=lot_id).order_by(Offer.created_at, Offer.id)
    )
    return result.scalars().all()

async def get_offer_lines_by_offers(db: AsyncSession, offer_ids: Iterable[int]) -> List[OfferLine]:
    ids = list(offer_ids)
    if not ids:
        return []
    result = await db.execute(
        select(OfferLine)
        .where(OfferLine.offer_id.in_(ids), OfferLine.unit_price.is_not(None))
        .order_by(OfferLine.id)
    )
    return result.scalars().all()

async def set_offer_statuses(db: AsyncSession, lot_id: int, accepted_id: int) -> None:
    """Принятый оффер -> accepted, остальные офферы лота -> rejected (без commit)."""
    for offer in await get_offers_by_lot(db, lot_id):
        offer.status = "accepted" if offer.id == accepted_id else "rejected"
        db.add(offer)
