from typing import List
from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from brokerage.models.rounds import LotRound

async def get_round(db: AsyncSession, round_id: int) -> LotRound | None:
    result = await db.execute(select(LotRound).filter_by(id=round_id))
    return result.scalars().first()

async def get_live_round(db: AsyncSession, lot_id: int) -> LotRound | None:
    result = await db.execute(
        select(LotRound)
        .filter_by(lot_id=lot_id, status="live")
        .order_by(LotRound.round_number.desc())
        .limit(1)
    )
    return result.scalars().first()

async def get_live_rounds(db: AsyncSession, lot_id: int) -> List[LotRound]:
    result = await db.execute(
        select(LotRound).filter_by(lot_id=lot_id, status="live").order_by(LotRound.round_number)
    )
    return result.scalars().all()

async def get_max_round_number(db: AsyncSession, lot_id: int) -> int:
    result = await db.execute(
        select(func.max(LotRound.round_number)).where(LotRound.lot_id == lot_id)
    )
    return result.scalar() or 0

async def get_round_by_number(db: AsyncSession, lot_id: int, round_number: int) -> LotRound | None:
    result = await db.execute(
        select(LotRound).filter_by(lot_id=lot_id, round_number=round_number).limit(1)
    )
    return result.scalars().first()

async def list_rounds(db: AsyncSession, lot_id: int) -> List[LotRound]:
    result = await db.execute(
        select(LotRound).filter_by(lot_id=lot_id).order_by(LotRound.round_number)
    )
    return result.scalars().all()
