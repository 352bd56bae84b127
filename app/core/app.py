from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from app.api.deps import close_clients
from app.api.main import api_router
from app.core.exceptions import TasteMatchError

from .config import settings
from .version import __version__


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifespan events (startup/shutdown).
    """
    logger.info(f"TasteMatch {__version__} starting ({settings.APP_ENV})")
    yield
    try:
        await close_clients()
        logger.info("Profile store and upstream clients closed")
    except Exception as exc:
        logger.warning(f"Failed to close clients on shutdown: {exc}")


app = FastAPI(
    title="TasteMatch",
    description="Match users by taste similarity of the titles they rated",
    version=__version__,
    lifespan=lifespan,
    docs_url=None if settings.APP_ENV != "development" else "/docs",
    redoc_url=None if settings.APP_ENV != "development" else "/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(TasteMatchError)
async def taste_match_error_handler(request: Request, exc: TasteMatchError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.opt(exception=exc.__cause__).error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.info(f"{request.method} request rejected ({exc.kind}): {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


app.include_router(api_router)
