from typing import List, Optional, Set
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from brokerage.models.awards import AwardedLine

async def get_awarded_lines(db: AsyncSession, lot_id: int, round_id: Optional[int] = None) -> List[AwardedLine]:
    query = select(AwardedLine).filter_by(lot_id=lot_id)
    if round_id is not None:
        query = query.filter_by(round_id=round_id)
    result = await db.execute(query.order_by(AwardedLine.id))
    return result.scalars().all()

async def get_buyer_awarded_lines(db: AsyncSession, lot_id: int, buyer_id: int, round_id: int) -> List[AwardedLine]:
    result = await db.execute(
        select(AwardedLine)
        .filter_by(lot_id=lot_id, buyer_id=buyer_id, round_id=round_id)
        .order_by(AwardedLine.line_item_id)
    )
    return result.scalars().all()

async def get_awarded_line_item_ids(db: AsyncSession, lot_id: int, exclude_round_id: Optional[int] = None) -> Set[int]:
    query = select(AwardedLine.line_item_id).where(AwardedLine.lot_id == lot_id)
    if exclude_round_id is not None:
        query = query.where(AwardedLine.round_id != exclude_round_id)
    result = await db.execute(query)
    return set(result.scalars().all())

async def has_awards(db: AsyncSession, lot_id: int, buyer_id: int, round_id: Optional[int] = None) -> bool:
    query = select(AwardedLine.id).filter_by(lot_id=lot_id, buyer_id=buyer_id)
    if round_id is not None:
        query = query.filter_by(round_id=round_id)
    result = await db.execute(query.limit(1))
    return result.scalars().first() is not None

async def upsert_awarded_line(db: AsyncSession, round_id: int, line_item_id: int, **fields) -> AwardedLine:
    """Одна строка на (round_id, line_item_id): обновляет существующую или добавляет новую (без commit)."""
    result = await db.execute(
        select(AwardedLine).filter_by(round_id=round_id, line_item_id=line_item_id)
    )
    existing = result.scalars().first()
    if existing:
        for key, value in fields.items():
            setattr(existing, key, value)
        db.add(existing)
        return existing
    db_line = AwardedLine(round_id=round_id, line_item_id=line_item_id, **fields)
    db.add(db_line)
    return db_line
