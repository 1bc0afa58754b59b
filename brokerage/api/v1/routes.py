from fastapi import APIRouter
from brokerage.api.v1.endpoints import buyers, health, invites, optimizer, rounds

router = APIRouter(prefix="/v1")

router.include_router(health.router, prefix="/health", tags=["Health"])
router.include_router(rounds.router, tags=["Rounds"])
router.include_router(buyers.router, tags=["Buyers"])
router.include_router(invites.router, tags=["Invites"])
router.include_router(optimizer.router, tags=["Optimizer"])
