"""
Breeding Reports

Breeding history is rebuilt from event answers. Answers saved in the same
submission share a timestamp, so grouping by timestamp reassembles one AI
event (date, bull, mother yield, semen company) or one delivery
(date, type) from its separate tagged answers.
"""

import logging
from collections import OrderedDict, defaultdict

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta
from django.conf import settings

from livestock.models import AnimalType, MotherCalfLink
from livestock.services.classification import Bucket, ClassificationEngine
from livestock.services.fact_store import fact_store
from livestock.services.tag_resolver import NOT_AVAILABLE, TagResolver
from livestock.tags import Tag

logger = logging.getLogger(__name__)

AI_TAGS = (Tag.AI_DATE, Tag.BULL_NUMBER, Tag.MOTHER_YIELD, Tag.SEMEN_COMPANY)
DELIVERY_TAGS = (Tag.DELIVERY_DATE, Tag.DELIVERY_TYPE)


def parse_answer_date(value):
    """Date of a free-text date answer, or None when it is not a date."""
    if not value or value == NOT_AVAILABLE:
        return None
    try:
        return date_parser.parse(str(value), dayfirst=False).date()
    except (ValueError, OverflowError):
        return None


def month_label(value):
    return value.strftime('%b %Y') if value else NOT_AVAILABLE


def _group_by_timestamp(answers):
    """OrderedDict of created_at -> {tag: value}, newest event first."""
    events = OrderedDict()
    for answer in answers:
        events.setdefault(answer.created_at, {})
        # Rows arrive newest first; keep the first value per tag
        events[answer.created_at].setdefault(answer.tag, answer.value)
    return events


class BreedingReportService:

    def __init__(self, owner_id, resolver=None, engine=None):
        self.owner_id = owner_id
        self.resolver = resolver or TagResolver()
        self.engine = engine or ClassificationEngine(self.resolver)

    def ai_history(self, subject):
        events = _group_by_timestamp(fact_store.scan(subject, AI_TAGS))
        return [
            {
                'recorded_at': recorded_at.isoformat(),
                'ai_date': values.get(Tag.AI_DATE, NOT_AVAILABLE),
                'bull_number': values.get(Tag.BULL_NUMBER, NOT_AVAILABLE),
                'mother_yield': values.get(Tag.MOTHER_YIELD, NOT_AVAILABLE),
                'semen_company': values.get(Tag.SEMEN_COMPANY, NOT_AVAILABLE),
            }
            for recorded_at, values in events.items()
        ]

    def delivery_history(self, subject):
        events = _group_by_timestamp(fact_store.scan(subject, DELIVERY_TAGS))
        links = MotherCalfLink.objects.filter(
            owner_id=subject.owner_id,
            mother_animal_number=subject.animal_number,
        )
        if subject.animal_type_id is not None:
            links = links.filter(animal_type_id=subject.animal_type_id)
        calves = {link.delivery_date: link.calf_animal_number for link in links}

        history = []
        for recorded_at, values in events.items():
            delivery_value = values.get(Tag.DELIVERY_DATE, NOT_AVAILABLE)
            history.append({
                'recorded_at': recorded_at.isoformat(),
                'delivery_date': delivery_value,
                'delivery_type': values.get(Tag.DELIVERY_TYPE, NOT_AVAILABLE),
                'calf_number': calves.get(parse_answer_date(delivery_value), NOT_AVAILABLE),
            })
        return history

    def heat_history(self, subject):
        return [
            {'recorded_at': answer.created_at.isoformat(), 'heat_date': answer.value}
            for answer in fact_store.scan(subject, Tag.HEAT_DATE)
        ]

    def animal_history(self, subject):
        return {
            'animal_number': subject.animal_number,
            'ai_history': self.ai_history(subject),
            'delivery_history': self.delivery_history(subject),
            'heat_history': self.heat_history(subject),
        }

    def herd_history(self):
        """Every animal's breeding history, split by current pregnancy answer."""
        result = {'pregnant': [], 'no_pregnant': []}
        subjects = sorted(
            fact_store.distinct_subjects(self.owner_id),
            key=lambda s: (s.animal_type_id or 0, s.animal_number)
        )
        for subject in subjects:
            pregnant = self.resolver.latest_value(subject, Tag.PREGNANT, default='')
            key = 'pregnant' if pregnant.strip().lower() == 'yes' else 'no_pregnant'
            result[key].append(self.animal_history(subject))
        return result

    def status(self):
        """
        Current breeding status of every female animal that has a pregnancy
        answer, grouped by animal type name.
        """
        types = {animal_type.id: animal_type for animal_type in AnimalType.objects.all()}
        herd = self.engine.classify_herd(self.owner_id)
        report = defaultdict(lambda: {'pregnant': [], 'non_pregnant': []})

        for subject, classification in sorted(herd.items(), key=lambda item: item[0].animal_number):
            if classification.bucket == Bucket.BULL:
                continue
            pregnant = self.resolver.resolve_latest(subject, Tag.PREGNANT)
            if pregnant is None:
                continue

            animal_type = types.get(subject.animal_type_id)
            type_name = animal_type.name if animal_type else 'Unknown'
            ai_value = self.resolver.latest_value(subject, Tag.AI_DATE)
            ai_date = parse_answer_date(ai_value)

            if classification.is_pregnant:
                gestation = (
                    settings.BUFFALO_GESTATION_MONTHS
                    if animal_type is not None and animal_type.is_buffalo
                    else settings.GESTATION_MONTHS
                )
                report[type_name]['pregnant'].append({
                    'animal_number': subject.animal_number,
                    'bucket': classification.bucket.value,
                    'ai_date': ai_value,
                    'pregnancy_detection_month': month_label(
                        ai_date + relativedelta(months=settings.PREGNANCY_DETECTION_MONTHS)
                        if ai_date else None
                    ),
                    'expected_delivery_month': month_label(
                        ai_date + relativedelta(months=gestation) if ai_date else None
                    ),
                    'bull_number': self.resolver.latest_value(subject, Tag.BULL_NUMBER),
                    'milking_status': (
                        classification.lactation_status.value
                        if classification.lactation_status else NOT_AVAILABLE
                    ),
                })
            else:
                report[type_name]['non_pregnant'].append({
                    'animal_number': subject.animal_number,
                    'bucket': classification.bucket.value,
                    'last_ai_date': ai_value,
                    'last_heat_date': self.resolver.latest_value(subject, Tag.HEAT_DATE),
                    'last_delivery_date': self.resolver.latest_value(subject, Tag.DELIVERY_DATE),
                })
        return dict(report)
