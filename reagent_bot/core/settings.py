import os
from typing import List

from dotenv import load_dotenv
from pydantic_settings import BaseSettings

from .url_parser import parser

load_dotenv()


class Settings(BaseSettings):
    PROJECT_NAME: str = "ReAgentBot WhatsApp API"
    VERSION: str = "1.0.0"
    APP_ENV: str = os.getenv("APP_ENV", "development")

    DATABASE_URL: str = os.getenv(
        "DATABASE_URL", "sqlite+aiosqlite:///./reagent_bot.db"
    )
    # Service-role connection, bypasses row-level security.
    ADMIN_DATABASE_URL: str | None = os.getenv("ADMIN_DATABASE_URL")
    STORE_TIMEOUT_SECONDS: float = 5.0

    TWILIO_ACCOUNT_SID: str | None = os.getenv("TWILIO_ACCOUNT_SID")
    TWILIO_AUTH_TOKEN: str | None = os.getenv("TWILIO_AUTH_TOKEN")
    TWILIO_WHATSAPP_NUMBER: str = os.getenv(
        "TWILIO_WHATSAPP_NUMBER", "whatsapp:+14155238886"
    )
    TWILIO_BASE_URL: str = "https://api.twilio.com/2010-04-01"
    TWILIO_TIMEOUT_SECONDS: float = 10.0
    SANDBOX_KEYWORD: str = os.getenv("SANDBOX_KEYWORD", "join")
    VALIDATE_TWILIO_SIGNATURE: bool = False
    WEBHOOK_BASE_URL: str = os.getenv("WEBHOOK_BASE_URL", "http://localhost:8000")

    DEFAULT_USER_ROLE: str = "renter"
    UPCOMING_DAYS: int = 7
    PAST_DAYS: int = 30
    SEARCH_RESULT_LIMIT: int = 5

    ALLOWED_HOSTS_RAW: str = os.getenv("ALLOWED_HOSTS", "*")

    @property
    def ALLOWED_HOSTS(self) -> List[str]:
        return parser.parse_url_list(self.ALLOWED_HOSTS_RAW, "ALLOWED_HOSTS")

    @property
    def ELEVATED_DATABASE_URL(self) -> str:
        return self.ADMIN_DATABASE_URL or self.DATABASE_URL

    @property
    def WEBHOOK_URL(self) -> str:
        return parser.join_url(self.WEBHOOK_BASE_URL, "/webhook/whatsapp")

    def missing_twilio_credentials(self) -> List[str]:
        required = {
            "TWILIO_ACCOUNT_SID": self.TWILIO_ACCOUNT_SID,
            "TWILIO_AUTH_TOKEN": self.TWILIO_AUTH_TOKEN,
        }
        return [key for key, value in required.items() if not value]

    class Config:
        env_file = ".env"
        extra = "ignore"
        case_sensitive = False


settings = Settings()
