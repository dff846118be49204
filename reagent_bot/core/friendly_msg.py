from .errors import (
    DomainError,
    DuplicateBooking,
    InvalidPreferences,
    InvalidRole,
    NotFound,
    SlotUnavailable,
    StoreTimeout,
    Unauthorized,
)

GENERIC_APOLOGY = (
    "Sorry, I encountered an error processing your message. Please try again later."
)

FRIENDLY_MESSAGES = {
    SlotUnavailable: "Sorry, that viewing slot has just been taken. Please pick another time.",
    DuplicateBooking: "You already have a viewing booked for that time.",
    Unauthorized: "You can only manage your own appointments and listings.",
    NotFound: "I couldn't find anything for that yet. Send \"help\" to see what I can do.",
    InvalidPreferences: "Some of your preferences don't look right. Please check the ranges and try again.",
    InvalidRole: "That role isn't available. Choose renter, agent or owner.",
    StoreTimeout: "The request took too long. Please try again later.",
}


def get_friendly_message(error: Exception) -> str:
    for error_type, msg in FRIENDLY_MESSAGES.items():
        if isinstance(error, error_type):
            return msg
    if isinstance(error, DomainError) and error.message:
        return error.message
    return GENERIC_APOLOGY
