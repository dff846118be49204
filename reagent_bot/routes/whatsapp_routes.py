from fastapi import APIRouter, Depends
from fastapi_utils.cbv import cbv

from core.get_db import get_store
from core.safe_handler import safe_handler
from core.store import Store
from messaging.twilio_client import TwilioWhatsAppClient, whatsapp_client
from models.utils import utcnow
from schemas.schema import (
    DeliveryReceipt,
    MessageStatusOut,
    SendMessageRequest,
    SendTemplateRequest,
    SystemStats,
)
from services.statistics_service import StatisticsService

router = APIRouter(tags=["WhatsApp"])


def get_whatsapp_client() -> TwilioWhatsAppClient:
    return whatsapp_client


@cbv(router)
class WhatsAppRoutes:
    store: Store = Depends(get_store)
    client: TwilioWhatsAppClient = Depends(get_whatsapp_client)

    @router.post("/send")
    @safe_handler
    async def send_message(self, payload: SendMessageRequest):
        receipt = await self.client.send_whatsapp_message(
            payload.to, payload.message, payload.media_url
        )
        return {
            "success": True,
            "data": DeliveryReceipt(**receipt).model_dump(by_alias=True),
            "message": "WhatsApp message sent successfully",
        }

    @router.post("/send-template")
    @safe_handler
    async def send_template(self, payload: SendTemplateRequest):
        receipt = await self.client.send_template_message(
            payload.to, payload.template.value, payload.parameters
        )
        return {
            "success": True,
            "data": DeliveryReceipt(**receipt).model_dump(by_alias=True),
            "message": "Template message sent successfully",
        }

    @router.get("/status/{message_sid}")
    @safe_handler
    async def message_status(self, message_sid: str):
        status = await self.client.get_message_status(message_sid)
        return {"success": True, "data": MessageStatusOut(**status)}

    @router.get("/health")
    async def health(self):
        return {
            "status": "healthy",
            "service": "WhatsApp Bot",
            "messaging_connected": self.client.connected,
            "timestamp": utcnow().isoformat(),
        }

    @router.get("/statistics", response_model=SystemStats)
    @safe_handler
    async def statistics(self):
        return await StatisticsService(self.store).get_system_statistics()
