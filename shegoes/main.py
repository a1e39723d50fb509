import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from shegoes.api import auth, dreams, health, insights, ritual, users
from shegoes.core.config import settings, validate_config
from shegoes.core.errors import (
    AppError,
    app_error_handler,
    http_error_handler,
    request_validation_handler,
    unhandled_exception_handler,
)
from shegoes.core.logging import configure_logging
from shegoes.core.middleware.request_id import RequestIdMiddleware

configure_logging(settings.ENV)
validate_config(strict=getattr(settings, "CONFIG_STRICT", False))


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger = logging.getLogger("shegoes")
    logger.info("Starting She Goes backend...")
    try:
        yield
    finally:
        logging.getLogger("shegoes").info("Stopping She Goes backend...")


app = FastAPI(title="She Goes - Backend", lifespan=lifespan)

# Middlewares
app.add_middleware(RequestIdMiddleware)

app.add_exception_handler(AppError, app_error_handler)
app.add_exception_handler(RequestValidationError, request_validation_handler)
app.add_exception_handler(StarletteHTTPException, http_error_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[origin.strip() for origin in settings.CORS_ORIGINS.split(",") if origin.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router)
app.include_router(users.router)
app.include_router(dreams.router)
app.include_router(ritual.router)
app.include_router(insights.router)
app.include_router(health.root_router)


def run():
    import uvicorn

    uvicorn.run("shegoes.main:app", host="0.0.0.0", port=8000, reload=settings.ENV != "production")


if __name__ == "__main__":
    run()
