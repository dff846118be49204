import re
from datetime import datetime, timezone

WHATSAPP_PREFIX = "whatsapp:"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def clean_phone_number(phone: str) -> str:
    clean = (phone or "").strip()
    if clean.startswith(WHATSAPP_PREFIX):
        clean = clean[len(WHATSAPP_PREFIX):]
    return clean


def normalize_location_name(name: str) -> str:
    cleaned = re.sub(r"\s+", " ", (name or "").strip())
    return " ".join(word.capitalize() for word in cleaned.split(" ") if word)


def compute_price_per_sqm(price, area):
    if price is None or not area:
        return None
    return round(float(price) / float(area), 2)
