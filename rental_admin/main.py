"""FastAPI application entry point."""

import asyncio
import contextlib
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from loguru import logger
from tortoise.contrib.fastapi import RegisterTortoise

from rental_admin import settings
from rental_admin.deps import get_otp_store
from rental_admin.otp import sweep_forever
from rental_admin.routers import auth, bookings

TORTOISE_MODULES = {"models": ["rental_admin.models"]}


def configure_logging(level: str = settings.LOG_LEVEL) -> None:
    logger.remove()
    logger.add(sys.stderr, level=level)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    async with RegisterTortoise(
        app,
        db_url=settings.db_url,
        modules=TORTOISE_MODULES,
        generate_schemas=settings.db_url.startswith("sqlite"),
    ):
        sweeper = asyncio.create_task(
            sweep_forever(get_otp_store(), settings.OTP_SWEEP_INTERVAL)
        )
        logger.info("rental-admin started (db={})", settings.db_url.split("://")[0])
        yield
        sweeper.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await sweeper


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(title="Rental Admin", lifespan=lifespan)
    app.include_router(auth.router, prefix=settings.api_prefix)
    app.include_router(bookings.router, prefix=settings.api_prefix)

    @app.get("/health")
    async def health() -> dict:
        return {"status": "ok"}

    return app


app = create_app()
