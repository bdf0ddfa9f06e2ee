"""
Shared pytest fixtures for the record keeping tests.
"""
from datetime import datetime

import pytest
from django.utils import timezone

from accounts.models import User
from livestock.models import AnimalType, Question
from livestock.services.fact_store import Subject, fact_store
from livestock.tags import Tag, logic_value_for


def at(year, month, day, hour=10, minute=0):
    """Aware datetime in the project time zone."""
    return timezone.make_aware(datetime(year, month, day, hour, minute))


@pytest.fixture
def farmer(db):
    """Create a farmer user for testing."""
    return User.objects.create_user(
        username='ravi_patil',
        first_name='Ravi',
        last_name='Patil',
        password='testpass123',
        phone='+919876543210',
        role=User.UserRole.FARMER,
        created_at=at(2024, 1, 10),
    )


@pytest.fixture
def other_farmer(db):
    return User.objects.create_user(
        username='sunita_more',
        first_name='Sunita',
        last_name='More',
        password='testpass123',
        phone='+919812345678',
        role=User.UserRole.FARMER,
        created_at=at(2024, 2, 1),
    )


@pytest.fixture
def cow_type(db):
    return AnimalType.objects.create(name='Cow')


@pytest.fixture
def buffalo_type(db):
    return AnimalType.objects.create(name='Buffalo')


@pytest.fixture
def question(db):
    """Factory returning the question for a tag, creating it on first use."""
    def _question(tag, scope=None):
        if scope is None:
            scope = Question.Scope.ANIMAL
        obj, _ = Question.objects.get_or_create(
            tag=int(tag),
            scope=scope,
            defaults={'text': Tag(int(tag)).label},
        )
        return obj
    return _question


@pytest.fixture
def record(question):
    """
    Factory appending one fact.

    Facts without an animal number go to the farm-level subject as daily
    record answers; the rest are animal answers.
    """
    def _record(owner, tag, value, when=None, animal_number='', animal_type=None,
                logic_value=None, status=None):
        if animal_number:
            subject = Subject(owner.pk, animal_type.pk, animal_number)
            scope = Question.Scope.ANIMAL
        else:
            subject = Subject.farm(owner.pk)
            scope = Question.Scope.DAILY
        answer = fact_store.append(
            subject,
            question(tag, scope),
            value,
            logic_value=logic_value if logic_value is not None else logic_value_for(value),
            created_at=when or timezone.now(),
        )
        if status is not None:
            answer.status = status
            answer.save(update_fields=['status'])
        return answer
    return _record
