import logging
from typing import Any, Sequence

import httpx

from core.breaker import CircuitBreaker, breaker
from core.errors import MessagingError
from core.settings import settings
from models.enums import MessageTemplate

logger = logging.getLogger(__name__)

WHATSAPP_PREFIX = "whatsapp:"

TEMPLATES = {
    MessageTemplate.APPOINTMENT_REMINDER: (
        "Your appointment is coming up on {0} at {1}",
        2,
    ),
    MessageTemplate.ORDER_NOTIFICATION: (
        "Your {0} order of {1} has shipped and should be delivered on {2}. Details: {3}",
        4,
    ),
    MessageTemplate.VERIFICATION_CODE: ("Your {0} code is {1}", 2),
}


def render_template(template: str, parameters: Sequence[str]) -> str:
    try:
        key = MessageTemplate(template)
    except ValueError:
        raise ValueError(f"Unknown template: {template}")
    body, arity = TEMPLATES[key]
    padded = list(parameters) + [""] * (arity - len(parameters))
    return body.format(*padded)


class TwilioWhatsAppClient:
    def __init__(
        self,
        account_sid: str | None = None,
        auth_token: str | None = None,
        from_number: str | None = None,
        base_url: str | None = None,
        circuit: CircuitBreaker | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.account_sid = account_sid or settings.TWILIO_ACCOUNT_SID
        self.auth_token = auth_token or settings.TWILIO_AUTH_TOKEN
        self.from_number = from_number or settings.TWILIO_WHATSAPP_NUMBER
        self.base_url = base_url or settings.TWILIO_BASE_URL
        self.breaker = circuit or breaker
        self._transport = transport
        self.client: httpx.AsyncClient | None = None

    async def connect(self):
        if not self.account_sid or not self.auth_token:
            raise RuntimeError("Twilio credentials are not configured")
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            auth=(self.account_sid, self.auth_token),
            timeout=settings.TWILIO_TIMEOUT_SECONDS,
            transport=self._transport,
        )
        logger.info("Twilio client connected")

    async def close(self):
        if self.client:
            await self.client.aclose()
            self.client = None
            logger.info("Twilio connection closed")

    @property
    def connected(self) -> bool:
        return self.client is not None

    def _require_client(self) -> httpx.AsyncClient:
        if not self.client:
            raise RuntimeError("Twilio client not connected")
        return self.client

    @staticmethod
    def format_whatsapp_number(phone_number: str) -> str:
        clean = phone_number.replace(WHATSAPP_PREFIX, "").strip()
        if not clean.startswith("+"):
            clean = f"+{clean}"
        return f"{WHATSAPP_PREFIX}{clean}"

    @staticmethod
    def _raise_for_status(response: httpx.Response):
        if response.is_success:
            return
        try:
            payload = response.json()
        except ValueError:
            payload = {}
        raise MessagingError(
            payload.get("message") or f"Twilio returned {response.status_code}",
            status_code=response.status_code,
            code=payload.get("code"),
        )

    async def ping(self) -> bool:
        client = self._require_client()
        try:
            response = await client.get(f"/Accounts/{self.account_sid}.json")
        except httpx.HTTPError as e:
            logger.warning(f"Twilio ping error: {e}")
            return False
        if response.status_code == 200:
            logger.info("Twilio API ping successful")
            return True
        logger.warning(f"Twilio API ping returned {response.status_code}")
        return False

    async def send_whatsapp_message(
        self, to: str, body: str, media_url: str | None = None
    ) -> dict[str, Any]:
        client = self._require_client()
        data = {
            "From": self.from_number,
            "To": self.format_whatsapp_number(to),
            "Body": body,
        }
        if media_url:
            data["MediaUrl"] = media_url

        async def handler():
            response = await client.post(
                f"/Accounts/{self.account_sid}/Messages.json", data=data
            )
            self._raise_for_status(response)
            return response.json()

        message = await self.breaker.call(handler)
        logger.info(f"Message sent successfully. SID: {message.get('sid')}")
        return {
            "success": True,
            "message_id": message.get("sid"),
            "status": message.get("status"),
            "to": message.get("to"),
            "from": message.get("from"),
        }

    async def send_template_message(
        self, to: str, template: str, parameters: Sequence[str] = ()
    ) -> dict[str, Any]:
        body = render_template(template, parameters)
        return await self.send_whatsapp_message(to, body)

    async def get_message_status(self, message_sid: str) -> dict[str, Any]:
        client = self._require_client()

        async def handler():
            response = await client.get(
                f"/Accounts/{self.account_sid}/Messages/{message_sid}.json"
            )
            self._raise_for_status(response)
            return response.json()

        message = await self.breaker.call(handler)
        return {
            "sid": message.get("sid"),
            "status": message.get("status"),
            "error_code": message.get("error_code"),
            "error_message": message.get("error_message"),
            "date_created": message.get("date_created"),
            "date_sent": message.get("date_sent"),
            "date_updated": message.get("date_updated"),
        }


whatsapp_client = TwilioWhatsAppClient()
