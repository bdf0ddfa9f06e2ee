from dataclasses import dataclass
from datetime import date, datetime, timedelta

from django.utils import timezone

from livestock.exceptions import InvalidWindowError


def _as_date(value):
    if isinstance(value, datetime):
        if timezone.is_aware(value):
            value = timezone.localtime(value)
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def date_range(start, end):
    """Inclusive list of calendar days from start to end."""
    start, end = _as_date(start), _as_date(end)
    return [start + timedelta(days=offset) for offset in range((end - start).days + 1)]


@dataclass(frozen=True)
class DateWindow:
    """
    Inclusive range of calendar days. Time of day is ignored on both ends,
    so a fact recorded at 23:59 on the end date is inside the window.
    """

    start: date
    end: date

    def __post_init__(self):
        object.__setattr__(self, 'start', _as_date(self.start))
        object.__setattr__(self, 'end', _as_date(self.end))
        if self.start > self.end:
            raise InvalidWindowError(
                f"Window start {self.start} is after window end {self.end}"
            )

    @classmethod
    def from_datetimes(cls, start, end):
        return cls(_as_date(start), _as_date(end))

    def days(self):
        return date_range(self.start, self.end)

    def __len__(self):
        return (self.end - self.start).days + 1
