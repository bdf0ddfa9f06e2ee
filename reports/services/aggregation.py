"""
Period Aggregation

Sums, counts and averages of tagged answers over an inclusive date window.

Priced answers hold a JSON list of {"amount", "price"} entries. An entry is
worth price x amount; a missing or non-numeric amount counts as one unit
and a missing price as zero. Quality answers hold a JSON list of {"name"}
readings. The tag table decides how each tag is decoded and measured.
Everything is accumulated as Decimal and rounded only when a report is
formatted. An answer that cannot be decoded is skipped with a warning.
"""

import json
import logging
from collections import defaultdict
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Optional

from django.db.models.functions import TruncDate
from django.utils import timezone

from livestock.exceptions import MalformedPayloadError, ShapeMismatchError
from livestock.services.fact_store import fact_store
from livestock.tags import PayloadShape, Role, payload_shape, tags_for
from livestock.windows import DateWindow, date_range

logger = logging.getLogger(__name__)

ZERO = Decimal('0')
ONE = Decimal('1')

__all__ = [
    'DateWindow',
    'date_range',
    'Measure',
    'measure_for',
    'PricedEntry',
    'PeriodAggregator',
    'parse_priced',
    'parse_quality',
    'parse_scalar_number',
]


# =============================================================================
# PAYLOAD DECODING
# =============================================================================

def _to_decimal(raw):
    """Decimal from a JSON number or numeric string; None when not numeric."""
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, Decimal)):
        return Decimal(raw)
    if isinstance(raw, float):
        return Decimal(str(raw))
    text = str(raw).strip()
    if not text:
        return None
    try:
        number = Decimal(text)
    except InvalidOperation:
        return None
    return number if number.is_finite() else None


@dataclass(frozen=True)
class PricedEntry:
    amount: Optional[Decimal]
    price: Decimal

    @property
    def value(self):
        return self.price * self.quantity

    @property
    def quantity(self):
        return self.amount if self.amount is not None else ONE


def _load_list(value):
    try:
        data = json.loads(value, parse_float=Decimal)
    except (TypeError, ValueError) as exc:
        raise MalformedPayloadError(f"Not a JSON payload: {value!r}") from exc
    if not isinstance(data, list):
        raise MalformedPayloadError(f"Expected a JSON list, got {value!r}")
    for item in data:
        if not isinstance(item, dict):
            raise MalformedPayloadError(f"Expected objects in payload, got {item!r}")
    return data


def parse_priced(value):
    """Decode a priced payload into PricedEntry items."""
    entries = []
    for item in _load_list(value):
        price = _to_decimal(item.get('price'))
        entries.append(PricedEntry(
            amount=_to_decimal(item.get('amount')),
            price=price if price is not None else ZERO,
        ))
    return entries


def parse_quality(value):
    """Decode a quality payload into its numeric readings."""
    readings = []
    for item in _load_list(value):
        reading = _to_decimal(item.get('name'))
        if reading is None:
            raise MalformedPayloadError(f"Non-numeric reading in {value!r}")
        readings.append(reading)
    return readings


def parse_scalar_number(value):
    number = _to_decimal(value)
    if number is None:
        raise MalformedPayloadError(f"Expected a number, got {value!r}")
    return number


# =============================================================================
# AGGREGATOR
# =============================================================================

class Measure(Enum):
    VALUE = 'value'          # price x amount of priced entries
    QUANTITY = 'quantity'    # amount of priced entries
    QUALITY = 'quality'      # readings of quality entries
    SCALAR = 'scalar'        # plain numeric answers


# First entry is the default measure for the shape
SHAPE_MEASURES = {
    PayloadShape.PRICED: (Measure.VALUE, Measure.QUANTITY),
    PayloadShape.QUALITY: (Measure.QUALITY,),
    PayloadShape.SCALAR: (Measure.SCALAR,),
}


def measure_for(tags, measure=None):
    """
    Pick the measure for a group of tags from their payload shape.

    Raises:
        UnknownTagError: a tag is missing from the tag table
        ShapeMismatchError: the tags mix shapes, or `measure` does not fit
        their shape
    """
    tags = (tags,) if isinstance(tags, int) else tuple(tags)
    shapes = {payload_shape(tag) for tag in tags}
    if len(shapes) != 1:
        raise ShapeMismatchError(
            f"Tags {[int(tag) for tag in tags]} do not share one payload shape"
        )
    shape = shapes.pop()
    allowed = SHAPE_MEASURES[shape]
    if measure is None:
        return allowed[0]
    if measure not in allowed:
        raise ShapeMismatchError(
            f"Cannot measure {shape.value} tags {[int(tag) for tag in tags]} "
            f"by {measure.value}"
        )
    return measure


def measure_answer(answer, measure):
    """
    Measure one answer.

    Returns:
        tuple: (total, samples) where samples is 1 per answer, or the number
        of readings for quality answers

    Raises:
        MalformedPayloadError
    """
    if measure == Measure.VALUE:
        return sum((entry.value for entry in parse_priced(answer.value)), ZERO), 1
    if measure == Measure.QUANTITY:
        return sum((entry.quantity for entry in parse_priced(answer.value)), ZERO), 1
    if measure == Measure.QUALITY:
        readings = parse_quality(answer.value)
        return sum(readings, ZERO), len(readings)
    return parse_scalar_number(answer.value), 1


def local_date(moment):
    return timezone.localtime(moment).date() if timezone.is_aware(moment) else moment.date()


class PeriodAggregator:
    """
    Windowed aggregation over one owner's answers.

    The measure defaults to the one the tags' payload shape calls for; passing
    a measure the shape does not allow raises ShapeMismatchError.

    Usage:
        aggregator = PeriodAggregator(user.id)
        window = DateWindow(date(2024, 3, 1), date(2024, 3, 31))
        income = aggregator.aggregate(Role.INCOME, window)
    """

    def __init__(self, owner_id, store=None):
        self.owner_id = owner_id
        self.store = store or fact_store

    def facts(self, tags, window=None, animals_only=False):
        return self.store.scan_owner(self.owner_id, tags, window=window, animals_only=animals_only)

    def measured(self, tags, window, measure=None, animals_only=False):
        """Yield (answer, total, samples) for every decodable answer."""
        measure = measure_for(tags, measure)
        for answer in self.facts(tags, window, animals_only).iterator():
            try:
                total, samples = measure_answer(answer, measure)
            except MalformedPayloadError as exc:
                logger.warning(
                    f"Skipping malformed answer {answer.id} (tag {answer.tag}) "
                    f"of user {self.owner_id}: {exc}"
                )
                continue
            yield answer, total, samples

    def totals(self, tags, window, measure=None, animals_only=False):
        """(sum, samples) over the decodable answers in one pass."""
        total, samples = ZERO, 0
        for _, answer_total, answer_samples in self.measured(tags, window, measure, animals_only):
            total += answer_total
            samples += answer_samples
        return total, samples

    def sum_by_tag(self, tags, window, measure=None, animals_only=False):
        return self.totals(tags, window, measure, animals_only)[0]

    def count_by_tag(self, tags, window, measure=None, animals_only=False):
        """Number of decodable answers, or of readings for quality tags."""
        return self.totals(tags, window, measure, animals_only)[1]

    def average_by_tag(self, tags, window, measure=None, animals_only=False):
        """sum_by_tag / max(count_by_tag, 1)."""
        total, samples = self.totals(tags, window, measure, animals_only)
        return total / max(samples, 1)

    def quantity_by_tag(self, tags, window):
        return self.sum_by_tag(tags, window, Measure.QUANTITY)

    def daily_sums(self, tags, window, measure=None, animals_only=False):
        """Totals grouped by the local calendar day the answer was recorded."""
        totals = defaultdict(lambda: ZERO)
        for answer, total, _ in self.measured(tags, window, measure, animals_only):
            totals[local_date(answer.created_at)] += total
        return dict(totals)

    def daily_samples(self, tags, window, measure=None):
        """Per-day (total, samples) pairs, for averaging readings per day."""
        days = defaultdict(lambda: [ZERO, 0])
        for answer, total, samples in self.measured(tags, window, measure):
            bucket = days[local_date(answer.created_at)]
            bucket[0] += total
            bucket[1] += samples
        return {day: tuple(values) for day, values in days.items()}

    def aggregate(self, role, window, measure=None):
        """Sum over every tag that plays the given report role."""
        animals_only = role == Role.BREEDING_EXPENSE
        return self.sum_by_tag(tags_for(role), window, measure, animals_only=animals_only)

    def active_days(self, window):
        """Distinct days with a daily record in the window, at least 1."""
        days = (
            self.store.live()
            .filter(owner_id=self.owner_id, animal_number='')
            .filter(created_at__date__range=(window.start, window.end))
            .annotate(day=TruncDate('created_at'))
            .order_by()
            .values('day')
            .distinct()
            .count()
        )
        return max(days, 1)
