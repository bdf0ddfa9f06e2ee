"""
Answer Submission

The only way facts enter the log. Each batch is written atomically: either
every answer of a submission is recorded or none is.
"""

import logging
from datetime import datetime, time

from django.db import transaction
from django.utils import timezone

from livestock.exceptions import UnknownQuestionError
from livestock.models import Answer, DeletedAnimalDetail, Question
from livestock.services.fact_store import Subject, fact_store
from livestock.tags import logic_value_for

logger = logging.getLogger(__name__)


def _load_questions(answers, scope):
    question_ids = {int(question_id) for question_id, _ in answers}
    questions = Question.objects.filter(id__in=question_ids, scope=scope, is_deleted=False)
    by_id = {question.id: question for question in questions}
    missing = question_ids - set(by_id)
    if missing:
        raise UnknownQuestionError(
            f"Unknown {scope} question id(s): {', '.join(str(i) for i in sorted(missing))}"
        )
    return by_id


def _build(subject, question, value, answered_at):
    return Answer(
        owner_id=subject.owner_id,
        animal_type_id=subject.animal_type_id,
        animal_number=subject.animal_number,
        question=question,
        tag=question.tag,
        value=value,
        logic_value=logic_value_for(value),
        created_at=answered_at,
    )


@transaction.atomic
def submit_animal_answers(owner, animal_type, animal_number, answers, answered_at=None):
    """
    Record a batch of answers about one animal.

    Args:
        owner: Farmer (User) recording the answers
        animal_type: AnimalType of the animal
        animal_number: Farmer's identifier for the animal
        answers: Iterable of (question_id, value) pairs
        answered_at: Timestamp for every fact in the batch (defaults to now)

    Returns:
        list of created Answer rows

    Raises:
        UnknownQuestionError: a question id does not exist; nothing is written
    """
    answers = list(answers)
    questions = _load_questions(answers, Question.Scope.ANIMAL)
    subject = Subject(owner.pk, animal_type.pk, str(animal_number))
    answered_at = answered_at or timezone.now()

    created = Answer.objects.bulk_create([
        _build(subject, questions[int(question_id)], value, answered_at)
        for question_id, value in answers
    ])
    logger.info(
        f"Recorded {len(created)} answer(s) for animal {animal_number} of user {owner.pk}"
    )
    return created


@transaction.atomic
def submit_daily_answers(owner, answered_on, answers):
    """
    Record the farm's daily record for one day.

    A day's daily record is replaced as a whole: earlier answers for the same
    day are soft-deleted before the new batch is written.
    """
    answers = list(answers)
    questions = _load_questions(answers, Question.Scope.DAILY)
    subject = Subject.farm(owner.pk)

    replaced = fact_store.soft_delete(
        fact_store.live().filter(
            created_at__date=answered_on,
            **subject.filter_kwargs()
        )
    )

    answered_at = timezone.make_aware(datetime.combine(answered_on, time(12, 0)))
    created = Answer.objects.bulk_create([
        _build(subject, questions[int(question_id)], value, answered_at)
        for question_id, value in answers
    ])
    logger.info(
        f"Recorded daily record for {answered_on} of user {owner.pk}: "
        f"{len(created)} answer(s), {replaced} replaced"
    )
    return created


@transaction.atomic
def retire_animal(subject):
    """Archive an animal's answers and remove them from every report."""
    answers = fact_store.live().filter(**subject.filter_kwargs())
    archived = DeletedAnimalDetail.objects.bulk_create([
        DeletedAnimalDetail(
            owner_id=answer.owner_id,
            animal_type_id=answer.animal_type_id,
            animal_number=answer.animal_number,
            question_id=answer.question_id,
            tag=answer.tag,
            value=answer.value,
            answered_at=answer.created_at,
        )
        for answer in answers
    ])
    fact_store.soft_delete(answers)
    logger.info(f"Retired animal {subject.animal_number} of user {subject.owner_id}")
    return len(archived)
