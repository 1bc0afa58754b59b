from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from brokerage.core.errors import NotFoundError, OfferConflictError, is_unique_violation
from brokerage.core.logging_config import logger
from brokerage.crud.awards import get_buyer_awarded_lines, has_awards
from brokerage.crud.invites import get_invite_by_token
from brokerage.crud.lots import get_lot, update_lot_status
from brokerage.crud.offers import get_offer_by_lot_buyer
from brokerage.crud.rounds import get_round
from brokerage.models.offers import Offer, OfferLine
from brokerage.schemas.awards import AwardedLine
from brokerage.schemas.invites import Invite, InviteLotResponse, InviteResultsResponse
from brokerage.schemas.lots import Lot, LineItem
from brokerage.schemas.offers import OfferResponse, OfferStatusResponse
from brokerage.services.bid_normalizer import normalize_offer
from brokerage.services.round_manager import round_line_items


async def _invite_context(db: AsyncSession, token: str):
    """Приглашение, его лот и раунд, в котором оно выдано."""
    invite = await get_invite_by_token(db, token)
    if not invite:
        raise NotFoundError("Invite", token)
    lot = await get_lot(db, invite.lot_id)
    if not lot:
        raise NotFoundError("Lot", invite.lot_id)
    lot_round = await get_round(db, invite.round_id)
    if not lot_round:
        raise NotFoundError("Round", invite.round_id)
    return invite, lot, lot_round


async def submit_offer(db: AsyncSession, token: str, payload) -> OfferResponse:
    invite, lot, lot_round = await _invite_context(db, token)
    lot_id, buyer_id, currency = lot.id, invite.buyer_id, lot.currency or "USD"

    # цены принимаются только на позиции из области раунда приглашения
    items = await round_line_items(db, lot_round)
    normalized = normalize_offer(payload, items, currency)

    db_offer = Offer(
        lot_id=lot_id,
        buyer_id=buyer_id,
        invite_id=invite.id,
        round_id=invite.round_id,
        currency=currency,
        take_all_total=normalized.take_all_total,
        total_offer=normalized.value,
        notes=payload.notes,
        status="new",
    )
    db.add(db_offer)
    try:
        # оффер и его строки в одной транзакции
        await db.flush()
        for line in normalized.lines:
            db.add(OfferLine(
                offer_id=db_offer.id,
                line_item_id=line.line_item_id,
                unit_price=line.unit_price,
                qty_snapshot=line.qty,
                currency=line.currency,
            ))
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        if is_unique_violation(e):
            logger.warning(f"Buyer {buyer_id} already has an offer for lot {lot_id}")
            raise OfferConflictError(lot_id, buyer_id)
        raise

    await db.refresh(db_offer)
    logger.info(
        f"Offer {db_offer.id} stored for lot {lot_id} by buyer {buyer_id}: "
        f"{len(normalized.lines)} priced lines, total {normalized.value}"
    )

    await update_lot_status(db, lot_id, "offers_received", only_from=("draft", "open"))

    return OfferResponse(
        status="success",
        offer_id=db_offer.id,
        lot_id=lot_id,
        buyer_id=buyer_id,
        total_offer=normalized.value,
        priced_lines=len(normalized.lines),
    )


async def get_offer_status(db: AsyncSession, token: str) -> OfferStatusResponse:
    invite, lot, lot_round = await _invite_context(db, token)
    offer = await get_offer_by_lot_buyer(db, lot.id, invite.buyer_id)
    return OfferStatusResponse(
        lot_id=lot.id,
        buyer_id=invite.buyer_id,
        round_id=lot_round.id,
        lot_status=lot.status,
        has_offer=offer is not None,
        offer_status=offer.status if offer else None,
        is_winner=await has_awards(db, lot.id, invite.buyer_id, round_id=lot_round.id),
    )


async def get_invite_lot(db: AsyncSession, token: str) -> InviteLotResponse:
    """Лот глазами покупателя: только позиции, открытые в раунде приглашения."""
    invite, lot, lot_round = await _invite_context(db, token)
    return InviteLotResponse(
        invite=Invite.model_validate(invite),
        round_number=lot_round.round_number,
        lot=Lot.model_validate(lot),
        line_items=[LineItem.model_validate(item) for item in await round_line_items(db, lot_round)],
    )


async def get_invite_results(db: AsyncSession, token: str) -> InviteResultsResponse:
    invite, lot, lot_round = await _invite_context(db, token)
    awards = await get_buyer_awarded_lines(db, lot.id, invite.buyer_id, lot_round.id)
    total = sum(float(line.extended or 0) for line in awards)
    return InviteResultsResponse(
        invite=Invite.model_validate(invite),
        round_id=lot_round.id,
        round_number=lot_round.round_number,
        is_winner=bool(awards),
        awards=[AwardedLine.model_validate(line) for line in awards],
        awards_total=total,
    )
