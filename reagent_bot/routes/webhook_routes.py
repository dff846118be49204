import logging
from typing import Optional

from fastapi import APIRouter, Depends, Form
from fastapi.responses import PlainTextResponse, Response
from fastapi_utils.cbv import cbv
from twilio.twiml.messaging_response import MessagingResponse

from core.friendly_msg import GENERIC_APOLOGY
from core.get_db import get_store
from core.store import Store
from core.validators import validate_twilio_signature
from models.enums import ResponseKind
from schemas.schema import InboundMessage, ResponseDescriptor
from services.intent_router import IntentRouter
from services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Webhook"])


def render_twiml(reply: ResponseDescriptor) -> str:
    twiml = MessagingResponse()
    message = twiml.message(reply.content)
    if reply.kind == ResponseKind.MEDIA and reply.media_url:
        message.media(reply.media_url)
    return str(twiml)


def twiml_response(reply: ResponseDescriptor) -> Response:
    return Response(content=render_twiml(reply), media_type="text/xml")


@cbv(router)
class WebhookRoutes:
    store: Store = Depends(get_store)

    @router.post("/whatsapp", dependencies=[Depends(validate_twilio_signature)])
    async def receive_message(
        self,
        body: Optional[str] = Form(None, alias="Body"),
        sender: str = Form(..., alias="From"),
        to: Optional[str] = Form(None, alias="To"),
        message_sid: Optional[str] = Form(None, alias="MessageSid"),
        num_media: Optional[str] = Form("0", alias="NumMedia"),
        media_url: Optional[str] = Form(None, alias="MediaUrl0"),
        media_content_type: Optional[str] = Form(None, alias="MediaContentType0"),
        profile_name: Optional[str] = Form(None, alias="ProfileName"),
    ):
        try:
            message = InboundMessage(
                text=body,
                sender_id=sender,
                sender_display_name=profile_name,
                media_count=num_media,
                media_url=media_url,
                media_content_type=media_content_type,
                message_sid=message_sid,
            )
            logger.info(f"New message from {sender} ({profile_name}) to {to}: {body}")

            user = await UserService(self.store).get_or_create_user(
                message.phone_number, profile_name
            )
            reply = await IntentRouter(self.store).route(message, user)
        except Exception:
            logger.exception("Error in receive_message webhook")
            reply = ResponseDescriptor.text(GENERIC_APOLOGY)

        return twiml_response(reply)

    @router.post("/whatsapp/status", response_class=PlainTextResponse)
    async def message_status(
        self,
        message_sid: Optional[str] = Form(None, alias="MessageSid"),
        message_status: Optional[str] = Form(None, alias="MessageStatus"),
        error_code: Optional[str] = Form(None, alias="ErrorCode"),
        error_message: Optional[str] = Form(None, alias="ErrorMessage"),
    ):
        logger.info(f"Message {message_sid} status: {message_status}")
        if error_code:
            logger.error(f"Message {message_sid} error {error_code}: {error_message}")
        return "OK"
