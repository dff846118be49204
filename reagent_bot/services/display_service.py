from datetime import date, time
from decimal import Decimal
from typing import Iterable, Optional

from core.date_helper import parse_date
from models.models import Property, UserPreference, ViewingAppointment, ViewingTimeSlot
from schemas.schema import SystemStats

SEPARATOR = "\n" + "─" * 25 + "\n\n"
APPOINTMENT_DATE_FORMAT = "%a, %b %d, %Y"

STATUS_EMOJI = {
    "active": "✅",
    "inactive": "⏸️",
    "sold": "💰",
    "rented": "🔑",
    "pending": "⏳",
    "unavailable": "🚫",
}


class DisplayService:
    """
    Turns domain rows into WhatsApp-ready text.

    Everything here reads attributes that are already loaded on the row;
    nothing touches the store.
    """

    @staticmethod
    def format_price(price) -> str:
        if price is None:
            return "Price on request"
        amount = Decimal(price)
        if amount == amount.to_integral_value():
            return f"${amount:,.0f}"
        return f"${amount:,.2f}"

    @staticmethod
    def format_time_slot(slot: ViewingTimeSlot) -> str:
        return f"{slot.start_time:%H:%M} - {slot.end_time:%H:%M}"

    def format_property(self, prop: Property, index: Optional[int] = None) -> str:
        heading = f"{index}. " if index is not None else ""
        lines = [f"🏠 *{heading}{prop.address}*", f"💰 {self.format_price(prop.price)}"]

        rooms = []
        if prop.bedrooms is not None:
            rooms.append(f"🛏️ {prop.bedrooms} bed")
        if prop.bathrooms is not None:
            rooms.append(f"🛁 {prop.bathrooms} bath")
        if rooms:
            lines.append(" • ".join(rooms))

        if prop.area:
            area_line = f"📐 {Decimal(prop.area):,.0f} m²"
            if prop.price_per_sqm is not None:
                area_line += f" ({self.format_price(prop.price_per_sqm)}/m²)"
            lines.append(area_line)

        location = [part for part in (prop.neighborhood, str(prop.district) if prop.district else None) if part]
        if location:
            lines.append(f"📍 {', '.join(location)}")
        if prop.apartment_type is not None:
            lines.append(f"🏢 {prop.apartment_type.type}")
        if prop.features:
            lines.append(f"✨ {', '.join(prop.features)}")

        status = getattr(prop.status, "value", prop.status)
        lines.append(f"{STATUS_EMOJI.get(status, '❓')} Status: {status.capitalize()}")

        if prop.description:
            lines.append(f"📝 {prop.description}")
        if prop.property_link:
            lines.append(f"🔗 {prop.property_link}")
        return "\n".join(lines)

    def format_appointment(self, appointment: ViewingAppointment) -> str:
        day = appointment.appointment_date.strftime(APPOINTMENT_DATE_FORMAT)
        return f"{day} at {self.format_time_slot(appointment.time_slot)}"

    @staticmethod
    def parse_appointment_line(line: str) -> tuple[date, time, time]:
        day_part, _, slot_part = line.rpartition(" at ")
        if not day_part or " - " not in slot_part:
            raise ValueError(f"Not an appointment line: {line!r}")
        start, end = (part.strip() for part in slot_part.split(" - ", 1))
        return parse_date(day_part), time.fromisoformat(start), time.fromisoformat(end)

    def format_search_results(self, properties: Iterable[Property], title: str = "Search Results") -> str:
        properties = list(properties)
        if not properties:
            return (
                f"🔍 *{title}*\n\n😔 No properties match right now.\n\n"
                "Try widening your budget or send \"preferences\" to review your filters."
            )
        header = f"🔍 *{title}*\nFound {len(properties)} propert{'y' if len(properties) == 1 else 'ies'}\n\n"
        cards = [self.format_property(prop, index) for index, prop in enumerate(properties, start=1)]
        return header + SEPARATOR.join(cards)

    def format_appointments(self, appointments: Iterable[ViewingAppointment]) -> str:
        appointments = list(appointments)
        if not appointments:
            return "📅 You have no viewing appointments."
        lines = [f"• {self.format_appointment(item)}" for item in appointments]
        return "📅 *Your Viewing Appointments*\n\n" + "\n".join(lines)

    def format_time_slots(self, slots: Iterable[ViewingTimeSlot], on_date: date) -> str:
        slots = list(slots)
        day = on_date.strftime(APPOINTMENT_DATE_FORMAT)
        if not slots:
            return f"No free viewing slots on {day}."
        lines = [f"• {self.format_time_slot(slot)}" for slot in slots]
        return f"🕐 *Free slots on {day}*\n" + "\n".join(lines)

    def format_preferences(self, prefs: Optional[UserPreference]) -> str:
        if prefs is None:
            return (
                "⚙️ You haven't set any search preferences yet.\n\n"
                "Tell me your budget (e.g. \"budget $1000-2000\") or a location to get started."
            )

        def span(low, high, fmt=str):
            if low is None and high is None:
                return None
            if low is None:
                return f"up to {fmt(high)}"
            if high is None:
                return f"from {fmt(low)}"
            return f"{fmt(low)} - {fmt(high)}"

        rows = [
            ("💰 Budget", span(prefs.budget_min, prefs.budget_max, self.format_price)),
            ("🛏️ Bedrooms", span(prefs.bedrooms_min, prefs.bedrooms_max)),
            ("🛁 Bathrooms", span(prefs.bathrooms_min, prefs.bathrooms_max)),
            ("📐 Area (m²)", span(prefs.area_min, prefs.area_max)),
            ("📍 Location", prefs.preferred_location),
            ("🏘️ Neighborhood", prefs.preferred_neighborhood),
            ("⏱️ Moving in (weeks)", prefs.urgency_in_weeks),
        ]
        body = "\n".join(f"{label}: {value}" for label, value in rows if value is not None)
        return "⚙️ *Your Preferences*\n\n" + (body or "No filters set.")

    @staticmethod
    def format_statistics(stats: SystemStats) -> str:
        return (
            "📊 *System Statistics*\n\n"
            f"👥 Users: {stats.users.total} "
            f"({stats.users.renters} renters, {stats.users.agents} agents, {stats.users.owners} owners)\n"
            f"🏠 Properties: {stats.properties.total} ({stats.properties.active} active)\n"
            f"📅 Appointments: {stats.appointments.total} "
            f"({stats.appointments.upcoming} upcoming, {stats.appointments.today} today)"
        )


display_service = DisplayService()
