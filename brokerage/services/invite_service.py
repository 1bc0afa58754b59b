import secrets
from typing import Iterable, List
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from brokerage.core.errors import NotFoundError, ValidationError, is_unique_violation
from brokerage.core.logging_config import logger
from brokerage.crud.buyers import get_buyers_by_ids
from brokerage.crud.invites import delete_invite, get_invite, get_round_invite, list_invites
from brokerage.crud.lots import get_lot, update_lot_status
from brokerage.crud.rounds import get_round
from brokerage.models.invites import LotInvite
from brokerage.services.notifications import send_invite_notification
from brokerage.services.round_manager import ensure_current_round


def new_token() -> str:
    return secrets.token_urlsafe(24)


async def _insert_invite(db: AsyncSession, lot_id: int, round_id: int, buyer_id: int) -> tuple[LotInvite, bool]:
    """Приглашение (раунд, покупатель); повторная вставка не ошибка, возвращает существующее."""
    existing = await get_round_invite(db, round_id, buyer_id)
    if existing:
        return existing, False

    db_invite = LotInvite(lot_id=lot_id, round_id=round_id, buyer_id=buyer_id, token=new_token(), status="pending")
    db.add(db_invite)
    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        if not is_unique_violation(e):
            raise
        existing = await get_round_invite(db, round_id, buyer_id)
        if existing is None:
            raise
        return existing, False
    await db.refresh(db_invite)
    return db_invite, True


async def invite_buyers(db: AsyncSession, lot_id: int, buyer_ids: Iterable[int], notify: bool = True) -> List[LotInvite]:
    buyer_ids = list(dict.fromkeys(buyer_ids))
    if not buyer_ids:
        raise ValidationError("No buyers selected", field="buyer_ids")

    lot = await get_lot(db, lot_id)
    if not lot:
        raise NotFoundError("Lot", lot_id)

    buyers = {b.id: b for b in await get_buyers_by_ids(db, buyer_ids)}
    for buyer_id in buyer_ids:
        buyer = buyers.get(buyer_id)
        if buyer is None:
            raise NotFoundError("Buyer", buyer_id)
        if not buyer.is_active or buyer.do_not_invite:
            raise ValidationError(f"Buyer {buyer_id} cannot be invited", field="buyer_ids")

    lot_round = await ensure_current_round(db, lot_id)
    round_id, round_number = lot_round.id, lot_round.round_number

    created = set()
    for buyer_id in buyer_ids:
        _, is_new = await _insert_invite(db, lot_id, round_id, buyer_id)
        if is_new:
            created.add(buyer_id)
            logger.info(f"Buyer {buyer_id} invited to lot {lot_id} round {round_number}")

    lot = await update_lot_status(db, lot_id, "open", only_from=("draft",))

    # перечитываем: откат после гонки сбрасывает загруженные объекты
    invites = [i for i in await list_invites(db, round_id) if i.buyer_id in set(buyer_ids)]
    if notify and created:
        buyers = {b.id: b for b in await get_buyers_by_ids(db, created)}
        for invite in invites:
            if invite.buyer_id in created:
                await send_invite_notification(lot, buyers[invite.buyer_id], invite, round_number)

    return invites


async def get_round_invites(db: AsyncSession, round_id: int) -> List[LotInvite]:
    if not await get_round(db, round_id):
        raise NotFoundError("Round", round_id)
    return await list_invites(db, round_id)


async def remove_invite(db: AsyncSession, invite_id: int) -> LotInvite:
    if not await get_invite(db, invite_id):
        raise NotFoundError("Invite", invite_id)
    db_invite = await delete_invite(db, invite_id)
    logger.info(f"Invite {invite_id} for buyer {db_invite.buyer_id} removed from round {db_invite.round_id}")
    return db_invite
