"""
Animal Number Repair

The ANIMAL_NUMBER answer of an animal must equal the animal number the answer
is filed under. Older clients sometimes wrote a stale number into the answer
text; this rewrites those answers in place, keeping their timestamps.
"""

import logging

from django.db.models import F

from livestock.services.fact_store import fact_store
from livestock.tags import Tag

logger = logging.getLogger(__name__)


def mismatched_animal_numbers(owner_id=None):
    qs = fact_store.live(include_excluded=True).filter(
        tag=Tag.ANIMAL_NUMBER
    ).exclude(animal_number='').exclude(value=F('animal_number'))
    if owner_id is not None:
        qs = qs.filter(owner_id=owner_id)
    return qs


def repair_animal_numbers(owner_id=None, dry_run=False):
    """
    Rewrite mismatched ANIMAL_NUMBER answers.

    Returns:
        int: number of answers repaired (or that would be, on a dry run)
    """
    qs = mismatched_animal_numbers(owner_id)
    if dry_run:
        return qs.count()

    # A queryset update leaves created_at untouched
    repaired = qs.update(value=F('animal_number'))
    logger.info(f"Repaired {repaired} animal number answer(s)")
    return repaired
