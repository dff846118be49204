from core.store import Store
from models.utils import utcnow
from schemas.schema import SystemStats

from .appointment_service import AppointmentService
from .property_service import PropertyService
from .user_service import UserService


class StatisticsService:
    def __init__(self, store: Store):
        self.users = UserService(store)
        self.properties = PropertyService(store)
        self.appointments = AppointmentService(store)

    async def get_system_statistics(self) -> SystemStats:
        return SystemStats(
            users=await self.users.get_user_statistics(),
            properties=await self.properties.get_statistics(),
            appointments=await self.appointments.get_statistics(),
            timestamp=utcnow(),
        )
