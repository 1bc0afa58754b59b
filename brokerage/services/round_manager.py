"""Раунды торгов по лоту.

Текущий раунд каждый раз выводится из базы (status = live). Единственный
примитив согласования между запросами - уникальный ключ
(lot_id, round_number): параллельная вставка того же номера проигрывает
и перечитывает раунд победителя.
"""
from datetime import datetime, timezone
from typing import List, Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from brokerage.core.errors import ConflictError, NotFoundError, ValidationError, is_unique_violation
from brokerage.core.logging_config import logger
from brokerage.crud.awards import get_awarded_line_item_ids
from brokerage.crud.lots import get_lot, get_line_items
from brokerage.crud.rounds import (
    get_live_round,
    get_live_rounds,
    get_max_round_number,
    get_round,
    get_round_by_number,
    list_rounds,
)
from brokerage.models.rounds import LotRound, ROUND_SCOPES
from brokerage.services.round_state_machine import RoundStateMachine

LEFTOVERS_NOTE = "Leftovers round"


def default_scope(round_number: int) -> str:
    return "all" if round_number == 1 else "unsold"


def default_notes(round_number: int) -> Optional[str]:
    return None if round_number == 1 else LEFTOVERS_NOTE


def new_round(lot_id: int, round_number: int, scope: Optional[str] = None, notes: Optional[str] = None) -> LotRound:
    return LotRound(
        lot_id=lot_id,
        round_number=round_number,
        scope=scope or default_scope(round_number),
        status="live",
        notes=notes if notes is not None else default_notes(round_number),
    )


async def _require_lot(db: AsyncSession, lot_id: int):
    lot = await get_lot(db, lot_id)
    if not lot:
        raise NotFoundError("Lot", lot_id)
    return lot


async def reread_round_after_conflict(db: AsyncSession, lot_id: int, round_number: int,
                                      error: IntegrityError) -> LotRound:
    """Повтор ровно один раз: читает раунд по ключу, на котором проиграла вставка."""
    existing = await get_round_by_number(db, lot_id, round_number)
    if existing is None:
        logger.error(f"Round {round_number} of lot {lot_id} conflicted but is not readable")
        raise error
    logger.info(f"Lot {lot_id} round {round_number} created concurrently, using round {existing.id}")
    return existing


async def ensure_current_round(db: AsyncSession, lot_id: int) -> LotRound:
    await _require_lot(db, lot_id)

    live = await get_live_round(db, lot_id)
    if live:
        return live

    next_number = await get_max_round_number(db, lot_id) + 1
    db_round = new_round(lot_id, next_number)
    db.add(db_round)
    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        if not is_unique_violation(e):
            raise
        return await reread_round_after_conflict(db, lot_id, next_number, e)

    await db.refresh(db_round)
    logger.info(f"Lot {lot_id} round {next_number} created as live (scope {db_round.scope})")
    return db_round


async def _supersede_live_rounds(db: AsyncSession, lot_id: int, keep_round_id: Optional[int] = None) -> List[LotRound]:
    closed = []
    for other in await get_live_rounds(db, lot_id):
        if other.id == keep_round_id:
            continue
        sm = RoundStateMachine(other)
        await sm.move_to("closed")
        db.add(other)
        closed.append(other)
    return closed


async def start_new_round(db: AsyncSession, lot_id: int, scope: Optional[str] = None,
                          notes: Optional[str] = None) -> LotRound:
    """Новый live-раунд max+1; прежние live-раунды лота закрываются в той же транзакции."""
    if scope is not None and scope not in ROUND_SCOPES:
        raise ValidationError(f"Unknown round scope: {scope}", field="scope")
    await _require_lot(db, lot_id)

    next_number = await get_max_round_number(db, lot_id) + 1
    superseded = await _supersede_live_rounds(db, lot_id)
    db_round = new_round(lot_id, next_number, scope, notes)
    db.add(db_round)
    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        if not is_unique_violation(e):
            raise
        logger.warning(f"Lot {lot_id} round {next_number} was started by another request")
        raise ConflictError(
            f"Round {next_number} for lot {lot_id} was just started by another request",
            details={"lot_id": lot_id, "round_number": next_number, "constraint": "uq_lot_rounds_lot_number"},
        )

    await db.refresh(db_round)
    if superseded:
        logger.info(f"Lot {lot_id} rounds {[r.round_number for r in superseded]} superseded")
    logger.info(f"Lot {lot_id} round {next_number} started (scope {db_round.scope})")
    return db_round


async def update_round(db: AsyncSession, round_id: int, scope: Optional[str] = None,
                       status: Optional[str] = None, notes: Optional[str] = None) -> LotRound:
    db_round = await get_round(db, round_id)
    if not db_round:
        raise NotFoundError("Round", round_id)

    if scope is not None:
        if scope not in ROUND_SCOPES:
            raise ValidationError(f"Unknown round scope: {scope}", field="scope")
        db_round.scope = scope
    if notes is not None:
        db_round.notes = notes

    if status is not None:
        sm = RoundStateMachine(db_round)
        moved = await sm.move_to(status)
        if moved and status == "live":
            await _supersede_live_rounds(db, db_round.lot_id, keep_round_id=db_round.id)
        elif not moved and status == "closed":
            # повторное закрытие тоже обновляет closed_at
            db_round.closed_at = datetime.now(timezone.utc)

    db.add(db_round)
    await db.commit()
    await db.refresh(db_round)
    return db_round


async def close_round(db: AsyncSession, round_id: int) -> LotRound:
    return await update_round(db, round_id, status="closed")


async def get_rounds(db: AsyncSession, lot_id: int) -> List[LotRound]:
    await _require_lot(db, lot_id)
    return await list_rounds(db, lot_id)


async def round_line_items(db: AsyncSession, lot_round: LotRound) -> list:
    """Позиции в области раунда: all - все, unsold - без наград в других раундах."""
    items = await get_line_items(db, lot_round.lot_id)
    if lot_round.scope == "all":
        return items
    # custom пока ведёт себя как unsold
    return await _without_other_round_awards(db, lot_round, items)


async def eligible_line_items(db: AsyncSession, lot_round: LotRound) -> list:
    """Позиции, которые можно присудить в раунде: одна позиция не продаётся в двух раундах."""
    items = await get_line_items(db, lot_round.lot_id)
    return await _without_other_round_awards(db, lot_round, items)


async def _without_other_round_awards(db: AsyncSession, lot_round: LotRound, items: list) -> list:
    awarded = await get_awarded_line_item_ids(db, lot_round.lot_id, exclude_round_id=lot_round.id)
    return [item for item in items if item.id not in awarded]
