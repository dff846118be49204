import logging
import random
import re
from dataclasses import dataclass
from decimal import Decimal
from typing import Awaitable, Callable, Optional

from core.date_helper import DateHelper, date_helper
from core.errors import DomainError
from core.friendly_msg import GENERIC_APOLOGY, get_friendly_message
from core.normalizer import contains_any, normalize_message
from core.settings import settings
from core.store import Store
from models.enums import Intent, PropertyStatus
from models.models import User
from schemas.schema import InboundMessage, PropertySearchCriteria, ResponseDescriptor, SearchOptions

from .appointment_service import AppointmentService
from .display_service import DisplayService, display_service
from .preference_service import PreferenceService
from .property_service import PropertyService

logger = logging.getLogger(__name__)

BUDGET_PATTERN = re.compile(
    r"\$(\d{1,3}(?:,\d{3})+|\d+)(?:\.\d+)?(?:\s*-\s*\$?(\d{1,3}(?:,\d{3})+|\d+)(?:\.\d+)?)?"
)
SINGLE_BUDGET_SPREAD = Decimal("1.5")

MEDIA_ACK = "Thank you for sending media! I received your file successfully."

HELP_TEXT = (
    "👋 *Welcome to ReAgentBot!*\n\n"
    "Here's what I can do:\n"
    "• *search* - properties matching your preferences\n"
    "• *preferences* - review your search filters\n"
    "• *budget $1000-2000* - search by price range\n"
    "• *appointment* - upcoming viewings and free slots\n"
    "• *profile* - your account details\n"
    "• *location* - tell me where you want to live\n\n"
    "Send *help* any time to see this menu again."
)

LOCATION_PROMPT = (
    "📍 Which area are you interested in?\n\n"
    "Reply with a district or neighborhood name and I'll save it to your preferences."
)

BUDGET_PROMPT = (
    "💰 Tell me your budget with a dollar amount, for example "
    "\"budget $1500\" or \"$1000-2000\"."
)

FALLBACK_REPLIES = (
    'Hello! You said: "{text}"\n\nSend "help" to see what I can do!',
    'I\'m not sure what you meant by "{text}". Send "help" for the menu.',
    'Got it: "{text}". Try "search", "appointment" or "help".',
)


@dataclass(frozen=True)
class IntentRule:
    intent: Intent
    matches: Callable[[str], bool]


def _containing(*keywords: str) -> Callable[[str], bool]:
    return lambda text: contains_any(text, keywords)


def _exactly(*phrases: str) -> Callable[[str], bool]:
    return lambda text: text in phrases


def _starting_with(prefix: str) -> Callable[[str], bool]:
    return lambda text: text.startswith(prefix)


# First match wins; order is part of the bot's observable behavior.
INTENT_RULES: tuple[IntentRule, ...] = (
    IntentRule(Intent.HELP, _containing("help", "menu", "start")),
    IntentRule(Intent.SEARCH, _containing("search", "property", "properties")),
    IntentRule(Intent.PREFERENCES, _containing("preferences")),
    IntentRule(Intent.APPOINTMENT, _containing("appointment", "viewing", "schedule")),
    IntentRule(Intent.MY_APPOINTMENTS, _exactly("my appointments", "appointments")),
    IntentRule(Intent.PROFILE, _containing("profile", "account")),
    IntentRule(Intent.JOIN, _starting_with(settings.SANDBOX_KEYWORD)),
    IntentRule(Intent.BUDGET, _containing("budget", "price", "$")),
    IntentRule(Intent.LOCATION, _containing("location", "area", "district")),
)


def classify(text: str) -> Intent:
    normalized = normalize_message(text)
    for rule in INTENT_RULES:
        if rule.matches(normalized):
            return rule.intent
    return Intent.FALLBACK


def _amount(raw: str) -> Decimal:
    return Decimal(raw.replace(",", ""))


def parse_budget(text: str) -> Optional[tuple[Decimal, Decimal]]:
    match = BUDGET_PATTERN.search(text or "")
    if not match:
        return None
    low = _amount(match.group(1))
    if match.group(2):
        return low, _amount(match.group(2))
    return low, low * SINGLE_BUDGET_SPREAD


Handler = Callable[[InboundMessage, User], Awaitable[ResponseDescriptor]]


class IntentRouter:
    def __init__(
        self,
        store: Store,
        display: Optional[DisplayService] = None,
        dates: Optional[DateHelper] = None,
        rng: Optional[random.Random] = None,
    ):
        self.properties = PropertyService(store)
        self.preferences = PreferenceService(store)
        self.dates = dates or date_helper
        self.appointments = AppointmentService(store, dates=self.dates)
        self.display = display or display_service
        self.rng = rng or random.Random()
        self.handlers: dict[Intent, Handler] = {
            Intent.HELP: self.handle_help,
            Intent.SEARCH: self.handle_search,
            Intent.PREFERENCES: self.handle_preferences,
            Intent.APPOINTMENT: self.handle_appointment,
            Intent.MY_APPOINTMENTS: self.handle_my_appointments,
            Intent.PROFILE: self.handle_profile,
            Intent.JOIN: self.handle_join,
            Intent.BUDGET: self.handle_budget,
            Intent.LOCATION: self.handle_location,
            Intent.FALLBACK: self.handle_fallback,
        }

    async def route(self, message: InboundMessage, user: User) -> ResponseDescriptor:
        try:
            if message.media_count > 0:
                logger.info(
                    f"Received media from {message.phone_number}: "
                    f"{message.media_content_type} - {message.media_url}"
                )
                return ResponseDescriptor.text(MEDIA_ACK)

            intent = classify(message.text)
            logger.info(f"Message from {message.phone_number} classified as {intent.value}")
            return await self.handlers[intent](message, user)
        except DomainError as e:
            logger.info(f"Business rule stopped {message.phone_number}: {type(e).__name__} {e}")
            return ResponseDescriptor.text(get_friendly_message(e))
        except Exception:
            logger.exception(f"Failed to route message from {message.phone_number}")
            return ResponseDescriptor.text(GENERIC_APOLOGY)

    async def handle_help(self, message: InboundMessage, user: User) -> ResponseDescriptor:
        return ResponseDescriptor.text(HELP_TEXT)

    async def handle_search(self, message: InboundMessage, user: User) -> ResponseDescriptor:
        matches = await self.properties.get_properties_for_user(user.id)
        return ResponseDescriptor.text(
            self.display.format_search_results(matches, title="Properties For You")
        )

    async def handle_preferences(self, message: InboundMessage, user: User) -> ResponseDescriptor:
        prefs = await self.preferences.get_user_preferences(user.phone_number)
        return ResponseDescriptor.text(self.display.format_preferences(prefs))

    async def handle_appointment(self, message: InboundMessage, user: User) -> ResponseDescriptor:
        upcoming = await self.appointments.get_upcoming_appointments(user_id=user.id)
        tomorrow = self.dates.tomorrow()
        free = await self.appointments.get_available_time_slots(tomorrow)
        parts = [
            self.display.format_appointments(upcoming),
            self.display.format_time_slots(free, tomorrow),
        ]
        return ResponseDescriptor.text("\n\n".join(parts))

    async def handle_my_appointments(self, message: InboundMessage, user: User) -> ResponseDescriptor:
        appointments = await self.appointments.get_user_appointments(user.phone_number)
        return ResponseDescriptor.text(self.display.format_appointments(appointments))

    async def handle_profile(self, message: InboundMessage, user: User) -> ResponseDescriptor:
        lines = [
            "👤 *Your Profile*",
            "",
            f"Name: {user.name or 'Not set'}",
            f"Phone: {user.phone_number}",
            f"Role: {(user.role_name or 'unassigned').capitalize()}",
            f"Onboarded: {'Yes' if user.onboarded else 'No'}",
            f"Member since: {user.created_at:%b %d, %Y}",
        ]
        return ResponseDescriptor.text("\n".join(lines))

    async def handle_join(self, message: InboundMessage, user: User) -> ResponseDescriptor:
        return ResponseDescriptor.text(
            "Welcome to the ReAgentBot WhatsApp service! You are now connected to our "
            'sandbox. Send "help" to see available commands.'
        )

    async def handle_budget(self, message: InboundMessage, user: User) -> ResponseDescriptor:
        budget = parse_budget(message.text)
        if budget is None:
            return ResponseDescriptor.text(BUDGET_PROMPT)
        low, high = budget
        matches = await self.properties.search_properties(
            PropertySearchCriteria(
                status=PropertyStatus.ACTIVE, min_price=low, max_price=high
            ),
            SearchOptions(limit=settings.SEARCH_RESULT_LIMIT),
        )
        title = f"Properties {self.display.format_price(low)} - {self.display.format_price(high)}"
        return ResponseDescriptor.text(self.display.format_search_results(matches, title=title))

    async def handle_location(self, message: InboundMessage, user: User) -> ResponseDescriptor:
        return ResponseDescriptor.text(LOCATION_PROMPT)

    async def handle_fallback(self, message: InboundMessage, user: User) -> ResponseDescriptor:
        reply = self.rng.choice(FALLBACK_REPLIES)
        return ResponseDescriptor.text(reply.format(text=message.text.strip()))
