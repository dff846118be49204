import logging

from fastapi import HTTPException, Request, status
from twilio.request_validator import RequestValidator

from .settings import settings
from .url_parser import parser

logger = logging.getLogger(__name__)


def public_url(request: Request) -> str:
    # Twilio signs the URL it was configured with, not the one behind the proxy
    url = parser.join_url(settings.WEBHOOK_BASE_URL, request.url.path)
    if request.url.query:
        url = f"{url}?{request.url.query}"
    return url


async def validate_twilio_signature(request: Request) -> None:
    if not settings.VALIDATE_TWILIO_SIGNATURE:
        return

    if not settings.TWILIO_AUTH_TOKEN:
        logger.error("Signature validation enabled but TWILIO_AUTH_TOKEN is missing")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Webhook validation is not configured",
        )

    signature = request.headers.get("X-Twilio-Signature", "")
    form = await request.form()
    validator = RequestValidator(settings.TWILIO_AUTH_TOKEN)
    if not validator.validate(public_url(request), dict(form), signature):
        logger.warning(f"Rejected webhook with bad signature from {request.client.host if request.client else 'unknown'}")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid signature")
