"""Оптимизатор: лучшая цена за единицу по каждой позиции и раскладка по покупателям.

compute_allocation - чистая функция: на вход строки, прочитанные один раз,
на выход AllocationResult. load_* только читают, в базу ничего не пишется.
"""
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from brokerage.core.config import settings
from brokerage.core.errors import NotFoundError
from brokerage.core.logging_config import logger
from brokerage.crud.lots import get_lot, get_line_items
from brokerage.crud.offers import get_offers_by_lot, get_offer_lines_by_offers
from brokerage.crud.rounds import get_live_round
from brokerage.services.round_manager import round_line_items
from brokerage.schemas.allocation import (
    AllocationResponse,
    AllocationResult,
    BuyerAward,
    LineAllocation,
    OfferLineView,
    TakeAllView,
)


def _ts(value: Optional[datetime]) -> float:
    if value is None:
        return float("inf")
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.timestamp()


def winner_key(line: OfferLineView):
    # Выше цена -> раньше оффер -> меньший buyer_id -> меньший id строки
    return (-line.unit_price, _ts(line.offer_created_at), line.buyer_id, line.offer_line_id)


def rank_offer_lines(offer_lines: Iterable[OfferLineView]) -> Dict[int, List[OfferLineView]]:
    by_item: Dict[int, List[OfferLineView]] = {}
    for line in offer_lines:
        if line.unit_price is None:
            continue
        by_item.setdefault(line.line_item_id, []).append(line)
    for rows in by_item.values():
        rows.sort(key=winner_key)
    return by_item


def filter_line_items(line_items: Iterable, ranked: Dict[int, List[OfferLineView]],
                      hide_zero_qty: bool = False, hide_no_bids: bool = False) -> list:
    result = []
    for item in line_items:
        if hide_zero_qty and (item.qty or 0) <= 0:
            continue
        if hide_no_bids and not ranked.get(item.id):
            continue
        result.append(item)
    return result


def best_take_all(offers: Iterable) -> Optional[TakeAllView]:
    candidates = [o for o in offers if o.take_all_total is not None]
    if not candidates:
        return None
    candidates.sort(key=lambda o: (-float(o.take_all_total), _ts(o.created_at), o.buyer_id))
    best = candidates[0]
    return TakeAllView(offer_id=best.id, buyer_id=best.buyer_id, take_all_total=float(best.take_all_total))


def compute_allocation(line_items: Iterable, offer_lines: Iterable[OfferLineView], offers: Iterable = (),
                       top_n: int = 3, hide_zero_qty: bool = False,
                       hide_no_bids: bool = False) -> AllocationResult:
    ranked = rank_offer_lines(offer_lines)
    items = filter_line_items(line_items, ranked, hide_zero_qty, hide_no_bids)

    lines: List[LineAllocation] = []
    by_buyer: Dict[int, BuyerAward] = {}
    split_total = 0.0
    priced_lines = 0
    currencies = set()

    for item in items:
        rows = ranked.get(item.id, [])
        best = rows[0] if rows else None
        if best is None:
            lines.append(LineAllocation(line_item_id=item.id, qty=item.qty or 0, top=[]))
            continue

        if best.qty_snapshot is not None:
            qty = best.qty_snapshot
        else:
            qty = item.qty or 0
        extended = best.unit_price * qty
        lines.append(LineAllocation(
            line_item_id=item.id,
            qty=qty,
            best=best,
            extended=extended,
            top=rows[:top_n],
        ))

        priced_lines += 1
        split_total += extended
        if best.currency:
            currencies.add(best.currency)
        award = by_buyer.get(best.buyer_id)
        if award is None:
            award = BuyerAward(buyer_id=best.buyer_id, line_count=0, total=0.0)
            by_buyer[best.buyer_id] = award
        award.line_count += 1
        award.total += extended
        award.line_item_ids.append(item.id)

    buyers = sorted(by_buyer.values(), key=lambda b: (-b.total, b.buyer_id))

    return AllocationResult(
        lines=lines,
        buyers=buyers,
        split_total=split_total,
        priced_lines=priced_lines,
        total_lines=len(items),
        best_take_all=best_take_all(offers),
        currencies=sorted(currencies),
    )


def offer_line_views(offers: Iterable, offer_lines: Iterable) -> List[OfferLineView]:
    offers_by_id = {o.id: o for o in offers}
    views = []
    for line in offer_lines:
        offer = offers_by_id.get(line.offer_id)
        if offer is None or line.unit_price is None:
            continue
        views.append(OfferLineView(
            offer_line_id=line.id,
            offer_id=offer.id,
            buyer_id=offer.buyer_id,
            line_item_id=line.line_item_id,
            unit_price=float(line.unit_price),
            qty_snapshot=line.qty_snapshot,
            currency=line.currency or offer.currency,
            offer_created_at=offer.created_at,
        ))
    return views


async def load_allocation(db: AsyncSession, lot_id: int, top_n: Optional[int] = None,
                          hide_zero_qty: bool = False, hide_no_bids: bool = False,
                          line_item_ids: Optional[Iterable[int]] = None) -> AllocationResponse:
    lot = await get_lot(db, lot_id)
    if not lot:
        raise NotFoundError("Lot", lot_id)

    items = await get_line_items(db, lot_id)
    if line_item_ids is not None:
        allowed = set(line_item_ids)
        items = [item for item in items if item.id in allowed]

    offers = await get_offers_by_lot(db, lot_id)
    lines = await get_offer_lines_by_offers(db, [o.id for o in offers])

    result = compute_allocation(
        items,
        offer_line_views(offers, lines),
        offers,
        top_n=top_n if top_n is not None else settings.OPTIMIZER_TOP_N,
        hide_zero_qty=hide_zero_qty,
        hide_no_bids=hide_no_bids,
    )
    if len(result.currencies) > 1:
        logger.warning(f"Allocation for lot {lot_id} mixes currencies {result.currencies}, totals are not converted")
    logger.info(
        f"Allocation for lot {lot_id}: {result.priced_lines}/{result.total_lines} lines priced, "
        f"{len(result.buyers)} buyers, split total {result.split_total}"
    )
    return AllocationResponse(lot_id=lot_id, currency=lot.currency or "USD", **result.model_dump())


async def load_round_allocation(db: AsyncSession, lot_id: int, top_n: Optional[int] = None,
                                hide_zero_qty: bool = False, hide_no_bids: bool = False) -> AllocationResponse:
    """Раскладка по области текущего live-раунда; без раунда - по всем позициям лота."""
    line_item_ids = None
    lot_round = await get_live_round(db, lot_id)
    if lot_round:
        line_item_ids = [item.id for item in await round_line_items(db, lot_round)]
    return await load_allocation(db, lot_id, top_n, hide_zero_qty, hide_no_bids, line_item_ids)
