import re


def normalize_message(text: str) -> str:
    if not text:
        return ""
    return re.sub(r"\s+", " ", text.strip().lower())


def contains_any(text: str, keywords) -> bool:
    return any(keyword in text for keyword in keywords)
