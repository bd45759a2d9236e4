import logging
from contextlib import asynccontextmanager

import sentry_sdk
from asgi_correlation_id import CorrelationIdMiddleware
from fastapi import FastAPI, HTTPException
from fastapi.exception_handlers import http_exception_handler
from fastapi.middleware.cors import CORSMiddleware

from postboard.config import config
from postboard.entrypoints.errors import register_exception_handlers
from postboard.entrypoints.routers.post import router as post_router
from postboard.entrypoints.routers.user import router as user_router
from postboard.log_config import configure_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    logger.info("Postboard starting (%s)", type(config).__name__)
    yield
    logger.info("Postboard stopped")


async def log_http_exception(request, exc: HTTPException):
    logger.error(f"{request.method} {request.url.path} -> {exc.status_code} {exc.detail}")
    return await http_exception_handler(request, exc)


def create_app() -> FastAPI:
    if config.SENTRY_DSN:
        sentry_sdk.init(dsn=config.SENTRY_DSN, send_default_pii=False)

    application = FastAPI(title="Postboard", lifespan=lifespan)

    application.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["HEAD", "GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    application.add_middleware(CorrelationIdMiddleware)

    register_exception_handlers(application)
    application.add_exception_handler(HTTPException, log_http_exception)

    application.include_router(user_router)
    application.include_router(post_router)

    @application.get("/")
    async def root():
        return {"message": "Server is running"}

    return application


app = create_app()
