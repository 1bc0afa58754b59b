from typing import List
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from brokerage.models.invites import LotInvite

async def get_invite(db: AsyncSession, invite_id: int) -> LotInvite | None:
    result = await db.execute(select(LotInvite).filter_by(id=invite_id))
    return result.scalars().first()

async def get_invite_by_token(db: AsyncSession, token: str) -> LotInvite | None:
    result = await db.execute(select(LotInvite).filter_by(token=token))
    return result.scalars().first()

async def get_round_invite(db: AsyncSession, round_id: int, buyer_id: int) -> LotInvite | None:
    result = await db.execute(select(LotInvite).filter_by(round_id=round_id, buyer_id=buyer_id))
    return result.scalars().first()

async def list_invites(db: AsyncSession, round_id: int) -> List[LotInvite]:
    result = await db.execute(
        select(LotInvite).filter_by(round_id=round_id).order_by(LotInvite.id)
    )
    return result.scalars().all()

async def delete_invite(db: AsyncSession, invite_id: int) -> LotInvite | None:
    db_invite = await get_invite(db, invite_id)
    if db_invite:
        await db.delete(db_invite)
        await db.commit()
    return db_invite
