from enum import Enum


class RoleName(str, Enum):
    RENTER = "renter"
    AGENT = "agent"
    OWNER = "owner"


class PropertyStatus(str, Enum):
    ACTIVE = "active"
    PENDING = "pending"
    RENTED = "rented"
    SOLD = "sold"
    UNAVAILABLE = "unavailable"
    INACTIVE = "inactive"


class ResponseKind(str, Enum):
    TEXT = "text"
    MEDIA = "media"


class Intent(str, Enum):
    HELP = "help"
    SEARCH = "search"
    PREFERENCES = "preferences"
    APPOINTMENT = "appointment"
    MY_APPOINTMENTS = "my_appointments"
    PROFILE = "profile"
    JOIN = "join"
    BUDGET = "budget"
    LOCATION = "location"
    FALLBACK = "fallback"


class MessageTemplate(str, Enum):
    APPOINTMENT_REMINDER = "appointment_reminder"
    ORDER_NOTIFICATION = "order_notification"
    VERIFICATION_CODE = "verification_code"


DEFAULT_APARTMENT_TYPES = (
    "Studio",
    "1 Bedroom",
    "2 Bedroom",
    "3 Bedroom",
    "4+ Bedroom",
    "Penthouse",
)

DEFAULT_TIME_SLOTS = tuple(
    (f"{hour:02d}:00", f"{hour + 1:02d}:00") for hour in range(9, 19)
)
