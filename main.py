from __future__ import annotations

import logging
from logging.config import dictConfig

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from limits.storage import Storage

from api.errors import register_exception_handlers
from api.router import api_router
from core.config import AppSettings, get_settings
from services.gatekeeper import (
    BodySizeLimitMiddleware,
    BookingGatekeeper,
    SecurityHeadersMiddleware,
)
from services.intake import BookingIntake
from services.mailer import Mailer, build_mailer


def configure_logging(level: str = "INFO") -> None:
    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "json": {
                    "()": "pythonjsonlogger.jsonlogger.JsonFormatter",
                    "fmt": "%(asctime)s %(levelname)s %(name)s %(message)s",
                }
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "json",
                    "level": level,
                }
            },
            "root": {"handlers": ["console"], "level": level},
        }
    )


logger = logging.getLogger(__name__)


def create_app(
    settings: AppSettings | None = None,
    mailer: Mailer | None = None,
    rate_limit_store: Storage | None = None,
) -> FastAPI:
    # Missing required configuration raises here, before anything is served
    settings = settings or get_settings()
    configure_logging(settings.log_level.upper())

    app = FastAPI(title="Altura Booking Notifier", version="0.1.0")
    app.state.settings = settings
    app.state.mailer = mailer or build_mailer(settings)
    app.state.gatekeeper = BookingGatekeeper(settings, rate_limit_store)
    app.state.intake = BookingIntake(settings, app.state.mailer)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origin_list,
        allow_credentials=not settings.allow_all_origins,
        allow_methods=["POST"],
        allow_headers=["Content-Type"],
    )
    app.add_middleware(BodySizeLimitMiddleware, max_bytes=settings.max_body_bytes)
    # Outermost, so size rejections and CORS preflights carry the headers too
    app.add_middleware(SecurityHeadersMiddleware)

    register_exception_handlers(app)
    app.include_router(api_router, prefix="/api")

    @app.on_event("startup")
    async def _verify_mail_transport() -> None:
        if not settings.mail_verify_on_startup:
            return
        transport = app.state.mailer
        if await transport.verify():
            logger.info("mail.transport_ready", extra={"transport": transport.name})
        else:
            logger.error("mail.transport_unavailable", extra={"transport": transport.name})

    logger.info(
        "Application initialized",
        extra={"environment": settings.environment, "transport": app.state.mailer.name},
    )
    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=get_settings().port)
