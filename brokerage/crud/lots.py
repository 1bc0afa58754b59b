from typing import Iterable, List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from brokerage.models.lots import Lot as LotModel, LineItem as LineItemModel
from brokerage.core.logging_config import logger

async def create_lot(db: AsyncSession, title: str, currency: str | None = None, status: str = "draft") -> LotModel:
    db_lot = LotModel(title=title, currency=currency or "USD", status=status)
    db.add(db_lot)
    await db.commit()
    await db.refresh(db_lot)
    return db_lot

async def create_line_item(db: AsyncSession, lot_id: int, **fields) -> LineItemModel:
    db_item = LineItemModel(lot_id=lot_id, **fields)
    db.add(db_item)
    await db.commit()
    await db.refresh(db_item)
    return db_item

async def get_lot(db: AsyncSession, lot_id: int) -> LotModel | None:
    result = await db.execute(select(LotModel).filter_by(id=lot_id))
    return result.scalars().first()

async def get_line_items(db: AsyncSession, lot_id: int) -> List[LineItemModel]:
    result = await db.execute(
        select(LineItemModel).filter_by(lot_id=lot_id).order_by(LineItemModel.id)
    )
    return result.scalars().all()

async def update_lot_status(db: AsyncSession, lot_id: int, status: str,
                            only_from: Optional[Iterable[str]] = None, commit: bool = True) -> LotModel | None:
    """Меняет статус лота; с only_from только если текущий статус в списке."""
    db_lot = await get_lot(db, lot_id)
    if not db_lot:
        return None
    if db_lot.status == status:
        return db_lot
    if only_from is not None and db_lot.status not in set(only_from):
        logger.debug(f"Lot {lot_id} status {db_lot.status} kept, {status} not applicable")
        return db_lot
    logger.info(f"Lot {lot_id} status {db_lot.status} -> {status}")
    db_lot.status = status
    if commit:
        await db.commit()
        await db.refresh(db_lot)
    return db_lot
