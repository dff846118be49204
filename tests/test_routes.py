"""HTTP surface: Twilio webhook, outbound API and health endpoints."""

import httpx
import pytest
from twilio.request_validator import RequestValidator

import routes.webhook_routes as webhook_routes
from app import app
from core.breaker import CircuitBreaker
from core.get_db import get_store
from core.settings import settings
from messaging.twilio_client import TwilioWhatsAppClient
from routes.whatsapp_routes import get_whatsapp_client
from services.intent_router import MEDIA_ACK
from services.user_service import UserService

from test_twilio_client import SID, FakeTwilio

UK_NUMBER = "+442071838750"


@pytest.fixture
def fake():
    return FakeTwilio()


@pytest.fixture
async def api(seeded_store, fake):
    messaging = TwilioWhatsAppClient(
        account_sid=SID,
        auth_token="secret",
        base_url="https://api.twilio.test/2010-04-01",
        circuit=CircuitBreaker(),
        transport=httpx.MockTransport(fake),
    )
    await messaging.connect()
    app.dependency_overrides[get_store] = lambda: seeded_store
    app.dependency_overrides[get_whatsapp_client] = lambda: messaging

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as http:
        yield http

    app.dependency_overrides.clear()
    await messaging.close()


class TestWebhook:
    async def test_text_message_gets_twiml_reply_and_creates_user(self, api, seeded_store):
        response = await api.post(
            "/webhook/whatsapp",
            data={"Body": "help", "From": "whatsapp:+15550001111", "ProfileName": "Zoe", "NumMedia": "0"},
        )

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/xml")
        assert "<Response><Message>" in response.text
        assert "Welcome to ReAgentBot" in response.text

        user = await UserService(seeded_store).get_user("+15550001111")
        assert user.name == "Zoe"

    async def test_media_is_acknowledged(self, api):
        response = await api.post(
            "/webhook/whatsapp",
            data={"From": "whatsapp:+15550001111", "NumMedia": "1", "MediaUrl0": "https://m.test/1.jpg"},
        )

        assert MEDIA_ACK in response.text

    async def test_failures_still_answer(self, api, monkeypatch):
        async def broken(*args, **kwargs):
            raise RuntimeError("database on fire")

        monkeypatch.setattr(webhook_routes.UserService, "get_or_create_user", broken)

        response = await api.post("/webhook/whatsapp", data={"Body": "hi", "From": "whatsapp:+15550001111"})

        assert response.status_code == 200
        assert "Sorry, I encountered an error" in response.text
        assert "database on fire" not in response.text

    async def test_status_callback(self, api):
        response = await api.post(
            "/webhook/whatsapp/status",
            data={"MessageSid": "SM1", "MessageStatus": "failed", "ErrorCode": "63016"},
        )

        assert response.status_code == 200
        assert response.text == "OK"


class TestSignatureValidation:
    @pytest.fixture(autouse=True)
    def enabled(self, monkeypatch):
        monkeypatch.setattr(settings, "VALIDATE_TWILIO_SIGNATURE", True)
        monkeypatch.setattr(settings, "TWILIO_AUTH_TOKEN", "tok")
        monkeypatch.setattr(settings, "WEBHOOK_BASE_URL", "https://bot.test")

    async def test_valid_signature_accepted(self, api):
        params = {"Body": "help", "From": "whatsapp:+15550001111"}
        signature = RequestValidator("tok").compute_signature("https://bot.test/webhook/whatsapp", params)

        response = await api.post("/webhook/whatsapp", data=params, headers={"X-Twilio-Signature": signature})

        assert response.status_code == 200

    async def test_bad_signature_rejected(self, api):
        response = await api.post(
            "/webhook/whatsapp",
            data={"Body": "help", "From": "whatsapp:+15550001111"},
            headers={"X-Twilio-Signature": "forged"},
        )

        assert response.status_code == 403


class TestOutboundApi:
    async def test_send(self, api, fake):
        response = await api.post("/api/whatsapp/send", json={"to": UK_NUMBER, "message": "Hello"})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["data"]["message_id"] == "SM1"
        assert body["data"]["to"] == f"whatsapp:{UK_NUMBER}"

    async def test_send_rejects_bad_number(self, api):
        response = await api.post("/api/whatsapp/send", json={"to": "12", "message": "Hello"})

        assert response.status_code == 422
        assert response.json()["success"] is False

    async def test_send_template(self, api, fake):
        response = await api.post(
            "/api/whatsapp/send-template",
            json={"to": UK_NUMBER, "template": "appointment_reminder", "parameters": ["Oct 20", "14:00"]},
        )

        assert response.status_code == 200

    async def test_unknown_template_is_validation_error(self, api):
        response = await api.post(
            "/api/whatsapp/send-template", json={"to": UK_NUMBER, "template": "birthday"}
        )

        assert response.status_code == 422

    async def test_provider_failure_is_bad_gateway(self, api, fake):
        fake.status_code = 400

        response = await api.post("/api/whatsapp/send", json={"to": UK_NUMBER, "message": "Hello"})

        assert response.status_code == 502

    async def test_message_status(self, api):
        response = await api.get("/api/whatsapp/status/SM1")

        assert response.json()["data"]["status"] == "delivered"

    async def test_statistics(self, api, renter):
        response = await api.get("/api/whatsapp/statistics")

        assert response.status_code == 200
        assert response.json()["users"]["total"] == 1


class TestSystem:
    async def test_health_reports_database(self, api):
        body = (await api.get("/health")).json()

        assert body["database"] == "connected"

    async def test_whatsapp_health(self, api):
        body = (await api.get("/api/whatsapp/health")).json()

        assert body["status"] == "healthy"
        assert body["messaging_connected"] is True

    async def test_index_lists_endpoints(self, api):
        body = (await api.get("/")).json()

        assert body["endpoints"]["webhook"] == "/webhook/whatsapp"
