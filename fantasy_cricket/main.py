import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, OperationalError

from fantasy_cricket.api.router import router
from fantasy_cricket.core.config import get_settings
from fantasy_cricket.db.session import SessionLocal
from fantasy_cricket.services.errors import BudgetExceededError, PlayingXIError
from fantasy_cricket.services.scheduler import start_scheduler

settings = get_settings()
logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger(__name__)

allowed_origins = [
    origin.strip()
    for origin in settings.CORS_ORIGINS.split(",")
    if origin.strip()
]

app = FastAPI(title="Fantasy Cricket League", version="1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router)


@app.on_event("startup")
async def _startup_scheduler() -> None:
    app.state.scheduler_task = start_scheduler()


@app.on_event("shutdown")
async def _shutdown_scheduler() -> None:
    task = getattr(app.state, "scheduler_task", None)
    if task:
        task.cancel()


@app.exception_handler(PlayingXIError)
def handle_playing_xi_error(request: Request, exc: PlayingXIError) -> JSONResponse:
    logger.info(
        "playing_xi_rejected method=%s path=%s code=%s",
        request.method,
        request.url.path,
        exc.code,
    )
    content = {
        "detail": exc.code,
        "accepted": False,
        "reason": exc.message,
        "transfers_remaining": exc.transfers_remaining,
        "errors": exc.errors,
    }
    if exc.transfers_used is not None:
        content["transfers_used"] = exc.transfers_used
    if isinstance(exc, BudgetExceededError):
        content["transfers_this_match"] = exc.transfers_this_match
    return JSONResponse(status_code=exc.status_code, content=content)


@app.exception_handler(OperationalError)
def handle_db_unavailable(request: Request, exc: OperationalError) -> JSONResponse:
    logger.warning(
        "db_unavailable method=%s path=%s detail=%s",
        request.method,
        request.url.path,
        str(exc),
    )
    return JSONResponse(status_code=503, content={"detail": "db_unavailable"})


@app.exception_handler(IntegrityError)
def handle_integrity_error(request: Request, exc: IntegrityError) -> JSONResponse:
    detail = "db_integrity_error"
    orig = getattr(exc, "orig", None)
    constraint = getattr(getattr(orig, "diag", None), "constraint_name", None)
    if constraint:
        detail = f"db_integrity_error:{constraint}"
    content = {"detail": detail}
    if "/playing-xi" in request.url.path:
        content.update(
            {
                "accepted": False,
                "reason": "Conflicting write. Reload and retry.",
                "transfers_remaining": None,
                "errors": [detail],
            }
        )
    return JSONResponse(status_code=400, content=content)


@app.exception_handler(Exception)
def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unexpected_error")
    return JSONResponse(status_code=500, content={"detail": "server_error"})


@app.get("/health")
def health() -> dict:
    return {"ok": True, "env": settings.APP_ENV}


@app.get("/health/db")
def health_db():
    try:
        with SessionLocal() as db:
            db.execute(text("SELECT 1"))
        return {"ok": True, "env": settings.APP_ENV, "db": "up"}
    except OperationalError as exc:
        logger.warning("health_db_unavailable detail=%s", str(exc))
        return JSONResponse(
            status_code=503,
            content={
                "ok": False,
                "env": settings.APP_ENV,
                "db": "down",
                "detail": "db_unavailable",
            },
        )
