from typing import List
from sqlalchemy.ext.asyncio import AsyncSession
from brokerage.core.errors import NotFoundError, ValidationError
from brokerage.core.logging_config import logger
from brokerage.crud.awards import get_awarded_lines, upsert_awarded_line
from brokerage.crud.lots import get_lot, update_lot_status
from brokerage.crud.offers import get_offer, set_offer_statuses
from brokerage.crud.rounds import get_live_round
from brokerage.models.awards import AwardedLine
from brokerage.services.allocation import load_allocation
from brokerage.services.round_manager import eligible_line_items


async def _current_round(db: AsyncSession, lot_id: int):
    lot = await get_lot(db, lot_id)
    if not lot:
        raise NotFoundError("Lot", lot_id)
    lot_round = await get_live_round(db, lot_id)
    if not lot_round:
        raise ValidationError(f"No live round for lot {lot_id}. Start a round first.", field="round_id")
    return lot, lot_round


async def award_allocation(db: AsyncSession, lot_id: int) -> tuple[int, List[AwardedLine]]:
    """Присуждает победителей оптимизатора в текущем раунде (upsert по round_id, line_item_id)."""
    lot, lot_round = await _current_round(db, lot_id)
    round_id, currency = lot_round.id, lot.currency

    eligible = await eligible_line_items(db, lot_round)
    allocation = await load_allocation(db, lot_id, line_item_ids=[item.id for item in eligible])
    winners = [line for line in allocation.lines if line.best is not None]
    if not winners:
        raise ValidationError("No line-by-line offers found to optimize", field="offer_lines")

    for line in winners:
        await upsert_awarded_line(
            db,
            round_id,
            line.line_item_id,
            lot_id=lot_id,
            buyer_id=line.best.buyer_id,
            offer_id=line.best.offer_id,
            currency=line.best.currency or currency,
            unit_price=line.best.unit_price,
            qty=line.qty,
            extended=line.extended,
        )
    await update_lot_status(db, lot_id, "awarded", commit=False)
    await db.commit()

    logger.info(
        f"Lot {lot_id} round {lot_round.round_number}: {len(winners)} lines awarded "
        f"to {len(allocation.buyers)} buyers, split total {allocation.split_total}"
    )
    return round_id, await get_awarded_lines(db, lot_id, round_id)


async def accept_take_all(db: AsyncSession, lot_id: int, offer_id: int) -> tuple[int, List[AwardedLine]]:
    """Принимает take-all оффер: остальные офферы отклоняются, все доступные позиции раунда присуждаются."""
    lot, lot_round = await _current_round(db, lot_id)
    round_id, currency = lot_round.id, lot.currency

    offer = await get_offer(db, offer_id)
    if not offer or offer.lot_id != lot_id:
        raise NotFoundError("Offer", offer_id)
    if offer.take_all_total is None:
        raise ValidationError(f"Offer {offer_id} has no take-all total", field="take_all_total")

    eligible = await eligible_line_items(db, lot_round)
    if not eligible:
        raise ValidationError("No eligible (unawarded) items remain to award in this round", field="line_items")

    await set_offer_statuses(db, lot_id, offer_id)
    for item in eligible:
        await upsert_awarded_line(
            db,
            round_id,
            item.id,
            lot_id=lot_id,
            buyer_id=offer.buyer_id,
            offer_id=offer.id,
            currency=offer.currency or currency,
            unit_price=None,
            qty=item.qty or 0,
            extended=None,
        )
    await update_lot_status(db, lot_id, "awarded", commit=False)
    await db.commit()

    logger.info(
        f"Lot {lot_id} round {lot_round.round_number}: take-all offer {offer_id} accepted, "
        f"{len(eligible)} items awarded to buyer {offer.buyer_id}"
    )
    return round_id, await get_awarded_lines(db, lot_id, round_id)
