"""
Animal Classification

Derives the herd bucket of each animal from its latest answers:

    1. Gender "male"                 -> Bull (nothing else is computed)
    2. Life stage logic value "calf" -> Heifer, pregnancy from PREGNANT
    3. Anything else                 -> Cow, pregnancy from PREGNANT and
                                        lactation from LACTATING

An animal with neither a gender nor a life stage answer is counted as a Cow.
Every animal with at least one fact lands in exactly one bucket.
"""

import logging
from collections import defaultdict
from dataclasses import asdict, dataclass, fields
from enum import Enum
from typing import Optional

from livestock.models import AnimalType
from livestock.services.fact_store import fact_store
from livestock.services.tag_resolver import TagResolver
from livestock.tags import Tag

logger = logging.getLogger(__name__)

CLASSIFICATION_TAGS = (Tag.GENDER, Tag.LIFE_STAGE, Tag.PREGNANT, Tag.LACTATING)


class Bucket(str, Enum):
    BULL = 'Bull'
    HEIFER = 'Heifer'
    COW = 'Cow'


class ReproductiveStatus(str, Enum):
    PREGNANT = 'Pregnant'
    NON_PREGNANT = 'Non-Pregnant'


class LactationStatus(str, Enum):
    LACTATING = 'Lactating'
    NON_LACTATING = 'Non-Lactating'


@dataclass(frozen=True)
class Classification:
    bucket: Bucket
    reproductive_status: Optional[ReproductiveStatus] = None
    lactation_status: Optional[LactationStatus] = None

    @property
    def is_pregnant(self):
        return self.reproductive_status == ReproductiveStatus.PREGNANT

    @property
    def is_lactating(self):
        return self.lactation_status == LactationStatus.LACTATING


def _is_yes(answer):
    return answer is not None and answer.value.strip().lower() == 'yes'


def classify_answers(gender=None, life_stage=None, pregnant=None, lactating=None):
    """Apply the precedence rules to already-resolved answers (or None)."""
    if gender is not None and gender.value.strip().lower() == 'male':
        return Classification(Bucket.BULL)

    reproductive = (
        ReproductiveStatus.PREGNANT if _is_yes(pregnant)
        else ReproductiveStatus.NON_PREGNANT
    )

    stage = (life_stage.logic_value or '').strip().lower() if life_stage is not None else ''
    if stage == 'calf':
        return Classification(Bucket.HEIFER, reproductive)

    lactation = (
        LactationStatus.LACTATING if _is_yes(lactating)
        else LactationStatus.NON_LACTATING
    )
    return Classification(Bucket.COW, reproductive, lactation)


@dataclass
class HerdSummary:
    """Bucket and status counts for a set of animals."""

    bull: int = 0
    heifer: int = 0
    cow: int = 0
    pregnant_heifer: int = 0
    non_pregnant_heifer: int = 0
    pregnant_cow: int = 0
    non_pregnant_cow: int = 0
    lactating: int = 0
    non_lactating: int = 0
    total: int = 0

    def add(self, classification):
        self.total += 1
        if classification.bucket == Bucket.BULL:
            self.bull += 1
        elif classification.bucket == Bucket.HEIFER:
            self.heifer += 1
            if classification.is_pregnant:
                self.pregnant_heifer += 1
            else:
                self.non_pregnant_heifer += 1
        else:
            self.cow += 1
            if classification.is_pregnant:
                self.pregnant_cow += 1
            else:
                self.non_pregnant_cow += 1
            if classification.is_lactating:
                self.lactating += 1
            else:
                self.non_lactating += 1

    def __add__(self, other):
        return HerdSummary(**{
            f.name: getattr(self, f.name) + getattr(other, f.name) for f in fields(self)
        })

    def as_dict(self):
        return asdict(self)


class ClassificationEngine:
    """Classify single animals or whole herds from the fact log."""

    def __init__(self, resolver=None):
        self.resolver = resolver or TagResolver()

    def classify(self, subject):
        answers = {
            tag: self.resolver.resolve_latest(subject, tag)
            for tag in CLASSIFICATION_TAGS
        }
        return classify_answers(
            gender=answers[Tag.GENDER],
            life_stage=answers[Tag.LIFE_STAGE],
            pregnant=answers[Tag.PREGNANT],
            lactating=answers[Tag.LACTATING],
        )

    def classify_herd(self, owner_id, animal_type_id=None):
        """
        Classify every animal of an owner in a single pass.

        Returns:
            dict: Subject -> Classification
        """
        subjects = fact_store.distinct_subjects(owner_id, animal_type_id)
        latest = self.resolver.resolve_latest_many(
            owner_id, CLASSIFICATION_TAGS, animal_type_id=animal_type_id
        )

        herd = {}
        for subject in subjects:
            herd[subject] = classify_answers(
                gender=self.resolver.latest_for(latest, subject, Tag.GENDER),
                life_stage=self.resolver.latest_for(latest, subject, Tag.LIFE_STAGE),
                pregnant=self.resolver.latest_for(latest, subject, Tag.PREGNANT),
                lactating=self.resolver.latest_for(latest, subject, Tag.LACTATING),
            )
        return herd

    def herd_summary(self, owner_id, animal_type_id=None):
        summary = HerdSummary()
        for classification in self.classify_herd(owner_id, animal_type_id).values():
            summary.add(classification)
        return summary

    def herd_summary_by_type(self, owner_id):
        """Herd summaries keyed by animal type name."""
        type_names = dict(AnimalType.objects.values_list('id', 'name'))
        summaries = defaultdict(HerdSummary)
        for subject, classification in self.classify_herd(owner_id).items():
            name = type_names.get(subject.animal_type_id, 'Unknown')
            summaries[name].add(classification)
        logger.debug(f"Herd summary for {owner_id}: {len(summaries)} animal type(s)")
        return dict(summaries)
