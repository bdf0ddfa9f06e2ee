"""
Fact Store

Append-only access to the answer log. Every read goes through `live()` so
excluded and soft-deleted answers never reach a report by accident, and every
scan is ordered newest first with the primary key as tie-breaker.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

from django.utils import timezone

from livestock.models import Answer

logger = logging.getLogger(__name__)

# Newest first; among identical timestamps the highest id wins
SCAN_ORDERING = ('-created_at', '-id')


@dataclass(frozen=True)
class Subject:
    """The thing a fact is about: an animal, or the farm itself for daily records."""

    owner_id: Any
    animal_type_id: Optional[int]
    animal_number: str

    @classmethod
    def farm(cls, owner_id):
        return cls(owner_id, None, '')

    @classmethod
    def of(cls, answer):
        return cls(answer.owner_id, answer.animal_type_id, answer.animal_number)

    def filter_kwargs(self):
        return {
            'owner_id': self.owner_id,
            'animal_type_id': self.animal_type_id,
            'animal_number': self.animal_number,
        }


def _tag_list(tags):
    if isinstance(tags, int):
        return [int(tags)]
    return [int(tag) for tag in tags]


class FactStore:
    """Query and append facts in the answer log."""

    def live(self, include_excluded=False, include_deleted=False):
        qs = Answer.objects.all()
        if not include_excluded:
            qs = qs.filter(status=Answer.Status.NORMAL)
        if not include_deleted:
            qs = qs.filter(deleted_at__isnull=True)
        return qs

    def append(self, subject, question, value, logic_value=None, created_at=None):
        """Record one answer. No deduplication: re-answering appends a new fact."""
        answer = Answer.objects.create(
            owner_id=subject.owner_id,
            animal_type_id=subject.animal_type_id,
            animal_number=subject.animal_number,
            question=question,
            tag=question.tag,
            value=value,
            logic_value=logic_value,
            created_at=created_at or timezone.now(),
        )
        return answer

    def scan(self, subject, tag, window=None, include_excluded=False, include_deleted=False):
        """All facts for a subject and tag(s), newest first."""
        qs = self.live(include_excluded, include_deleted).filter(
            tag__in=_tag_list(tag),
            **subject.filter_kwargs()
        )
        if window is not None:
            qs = qs.filter(created_at__date__range=(window.start, window.end))
        return qs.order_by(*SCAN_ORDERING)

    def scan_owner(self, owner_id, tags, window=None, animal_type_id=None, animals_only=False):
        """
        All facts of an owner for the given tags across every subject.

        Args:
            owner_id: Farmer whose log is scanned
            tags: Tag or iterable of tags
            window: Optional DateWindow (inclusive, date only)
            animal_type_id: Restrict to one animal type
            animals_only: Skip farm-level (daily record) facts

        Returns:
            QuerySet ordered newest first
        """
        qs = self.live().filter(owner_id=owner_id, tag__in=_tag_list(tags))
        if animal_type_id is not None:
            qs = qs.filter(animal_type_id=animal_type_id)
        if animals_only:
            qs = qs.exclude(animal_number='')
        if window is not None:
            qs = qs.filter(created_at__date__range=(window.start, window.end))
        return qs.order_by(*SCAN_ORDERING)

    def distinct_subjects(self, owner_id, animal_type_id=None):
        """Every animal with at least one live fact."""
        qs = self.live().filter(owner_id=owner_id).exclude(animal_number='')
        if animal_type_id is not None:
            qs = qs.filter(animal_type_id=animal_type_id)
        rows = qs.values_list('animal_type_id', 'animal_number').distinct()
        return {Subject(owner_id, type_id, number) for type_id, number in rows}

    def soft_delete(self, queryset):
        """Mark facts deleted without removing them. Returns the row count."""
        count = queryset.filter(deleted_at__isnull=True).update(deleted_at=timezone.now())
        if count:
            logger.info(f"Soft-deleted {count} answer(s)")
        return count


fact_store = FactStore()
