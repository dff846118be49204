from datetime import date, timedelta
from typing import Callable, Optional

from dateutil import parser as date_parser

Clock = Callable[[], date]


class DateHelper:
    """Source of "today" for every date window in the bot."""

    def __init__(self, clock: Optional[Clock] = None):
        self._clock = clock or date.today

    def today(self) -> date:
        return self._clock()

    def tomorrow(self) -> date:
        return self.today() + timedelta(days=1)

    def upcoming_window(self, days: int) -> tuple[date, date]:
        today = self.today()
        return today, today + timedelta(days=days)

    def past_window(self, days: int) -> tuple[date, date]:
        today = self.today()
        return today - timedelta(days=days), today


def parse_date(value: str) -> date:
    return date_parser.parse(value).date()


date_helper = DateHelper()
