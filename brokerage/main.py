from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from brokerage.api.v1 import routes
from brokerage.core.config import settings
from brokerage.core.errors import BrokerageError
from brokerage.core.logging_config import logger

app = FastAPI(title="Lot bidding and allocation")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type"],
)


@app.exception_handler(BrokerageError)
async def brokerage_error_handler(request: Request, exc: BrokerageError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path}: {exc.message}")
    else:
        logger.warning(f"{request.method} {request.url.path}: {exc.status_code} {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.to_dict()})


app.include_router(routes.router)
