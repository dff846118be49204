import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from messaging.twilio_client import whatsapp_client
from services.reference_data_service import ReferenceDataService

from .get_db import dispose_engines, store
from .settings import settings
from .store import AccessLevel

logger = logging.getLogger("startup")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Waiting for application startup...")

    missing = settings.missing_twilio_credentials()
    if missing:
        logger.warning(f"Missing Twilio configuration: {', '.join(missing)}")

    try:
        await whatsapp_client.connect()
        if await whatsapp_client.ping():
            logger.info("Twilio WhatsApp client connected.")
    except Exception:
        logger.exception("Failed to connect to Twilio")

    try:
        if await store.ping(AccessLevel.RESTRICTED):
            logger.info("Database connected.")
        else:
            logger.error("Database ping failed")
    except Exception:
        logger.exception("Database connection check failed")

    try:
        await ReferenceDataService(store).initialize_reference_data()
    except Exception:
        logger.exception("Failed to seed reference data")

    logger.info(f"Webhook URL: {settings.WEBHOOK_URL}")
    logger.info("Application startup complete.")

    yield

    try:
        await whatsapp_client.close()
    except Exception:
        logger.exception("Failed to close Twilio client")

    try:
        await dispose_engines()
    except Exception:
        logger.exception("Failed to dispose database engines")
