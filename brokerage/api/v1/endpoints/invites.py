from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from brokerage.db.database import get_db
from brokerage.schemas.invites import Invite, InviteCreate, InviteListResponse, InviteLotResponse, InviteResultsResponse
from brokerage.schemas.offers import OfferResponse, OfferStatusResponse, OfferSubmission
from brokerage.services.invite_service import get_round_invites, invite_buyers, remove_invite
from brokerage.services.offer_service import get_invite_lot, get_invite_results, get_offer_status, submit_offer

router = APIRouter()

@router.post("/lots/{lot_id}/invites", response_model=list[Invite])
async def create_invites(lot_id: int, data: InviteCreate, db: AsyncSession = Depends(get_db)):
    return await invite_buyers(db, lot_id, data.buyer_ids)

@router.get("/rounds/{round_id}/invites", response_model=InviteListResponse)
async def round_invites(round_id: int, db: AsyncSession = Depends(get_db)):
    return {"round_id": round_id, "invites": await get_round_invites(db, round_id)}

@router.delete("/invites/{invite_id}")
async def delete_invite(invite_id: int, db: AsyncSession = Depends(get_db)):
    await remove_invite(db, invite_id)
    return {"status": "success"}

@router.post(
    "/invite/{token}/offer",
    response_model=OfferResponse,
    summary="Оффер покупателя по приглашению",
    description="Принимает take-all, построчный или покомпонентный оффер. Один оффер на покупателя в лоте.",
    responses={
        404: {"description": "Приглашение или лот не найдены"},
        409: {"description": "У покупателя уже есть оффер по этому лоту"},
        422: {"description": "Ошибка валидации цен"},
    }
)
async def offer(token: str, data: OfferSubmission, db: AsyncSession = Depends(get_db)):
    return await submit_offer(db, token, data.payload)

@router.get("/invite/{token}/status", response_model=OfferStatusResponse)
async def offer_status(token: str, db: AsyncSession = Depends(get_db)):
    return await get_offer_status(db, token)

@router.get(
    "/invite/{token}/lot",
    response_model=InviteLotResponse,
    summary="Лот по приглашению",
    description="Лот и позиции, открытые для цен в раунде приглашения.",
)
async def invite_lot(token: str, db: AsyncSession = Depends(get_db)):
    return await get_invite_lot(db, token)

@router.get(
    "/invite/{token}/results",
    response_model=InviteResultsResponse,
    summary="Итоги покупателя",
    description="Позиции, присуждённые покупателю в раунде приглашения, и их сумма.",
)
async def invite_results(token: str, db: AsyncSession = Depends(get_db)):
    return await get_invite_results(db, token)
