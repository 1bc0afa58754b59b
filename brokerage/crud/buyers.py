from typing import Iterable, List, Optional, Tuple
from sqlalchemy import func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from brokerage.models.buyers import Buyer

async def create_buyer(db: AsyncSession, name: str, **fields) -> Buyer:
    db_buyer = Buyer(name=name, **fields)
    db.add(db_buyer)
    await db.commit()
    await db.refresh(db_buyer)
    return db_buyer

async def get_buyer(db: AsyncSession, buyer_id: int) -> Buyer | None:
    result = await db.execute(select(Buyer).filter_by(id=buyer_id))
    return result.scalars().first()

async def get_buyers_by_ids(db: AsyncSession, buyer_ids: Iterable[int]) -> List[Buyer]:
    ids = list(buyer_ids)
    if not ids:
        return []
    result = await db.execute(select(Buyer).where(Buyer.id.in_(ids)).order_by(Buyer.id))
    return result.scalars().all()

async def get_invitable_buyers(db: AsyncSession) -> List[Buyer]:
    result = await db.execute(
        select(Buyer).filter_by(is_active=True, do_not_invite=False).order_by(Buyer.id)
    )
    return result.scalars().all()

async def list_buyers(db: AsyncSession, page: int = 1, per_page: int = 20,
                      q: Optional[str] = None) -> Tuple[List[Buyer], int]:
    query = select(Buyer)
    if q:
        pattern = f"%{q}%"
        query = query.where(or_(Buyer.name.ilike(pattern), Buyer.company.ilike(pattern), Buyer.email.ilike(pattern)))

    total_query = select(func.count()).select_from(query.subquery())
    total_result = await db.execute(total_query)
    total = total_result.scalar()

    query = query.order_by(Buyer.id).offset((page - 1) * per_page).limit(per_page)
    result = await db.execute(query)
    return result.scalars().all(), total
