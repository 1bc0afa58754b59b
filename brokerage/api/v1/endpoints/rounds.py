from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from brokerage.db.database import get_db
from brokerage.core.logging_config import logger
from brokerage.crud.rounds import get_live_round
from brokerage.schemas.rounds import LotRound, RoundCreate, RoundListResponse, RoundUpdate
from brokerage.services.round_manager import (
    close_round,
    ensure_current_round,
    get_rounds,
    start_new_round,
    update_round,
)

router = APIRouter()

@router.get("/lots/{lot_id}/rounds", response_model=RoundListResponse)
async def list_lot_rounds(lot_id: int, db: AsyncSession = Depends(get_db)):
    rounds = await get_rounds(db, lot_id)
    live = await get_live_round(db, lot_id)
    return {"rounds": rounds, "current_round_id": live.id if live else None}

@router.post(
    "/lots/{lot_id}/rounds/current",
    response_model=LotRound,
    summary="Текущий раунд лота",
    description="Возвращает live-раунд лота, создавая следующий по номеру, если его нет. Безопасно при параллельных вызовах.",
)
async def current_round(lot_id: int, db: AsyncSession = Depends(get_db)):
    logger.info(f"Ensuring current round for lot {lot_id}")
    return await ensure_current_round(db, lot_id)

@router.post(
    "/lots/{lot_id}/rounds",
    response_model=LotRound,
    status_code=201,
    summary="Новый раунд",
    description="Создаёт раунд max+1 (со 2-го по умолчанию только непроданные позиции) и закрывает прежний live-раунд.",
    responses={409: {"description": "Раунд с таким номером только что создан другим запросом"}},
)
async def new_round(lot_id: int, data: RoundCreate | None = None, db: AsyncSession = Depends(get_db)):
    data = data or RoundCreate()
    return await start_new_round(db, lot_id, scope=data.scope, notes=data.notes)

@router.patch("/rounds/{round_id}", response_model=LotRound)
async def patch_round(round_id: int, data: RoundUpdate, db: AsyncSession = Depends(get_db)):
    return await update_round(db, round_id, scope=data.scope, status=data.status, notes=data.notes)

@router.post("/rounds/{round_id}/close", response_model=LotRound)
async def close(round_id: int, db: AsyncSession = Depends(get_db)):
    return await close_round(db, round_id)
