"""
Livestock Record Models

Handles:
- Animal types (Cow, Buffalo, ...)
- Tagged questions asked per animal or per farm per day
- The append-only answer log (facts) that every report is derived from
- Mother/calf links recorded at delivery
- Archive of retired animals
"""

from django.db import models
from django.utils import timezone

from accounts.models import User
from livestock.tags import Tag


class AnimalType(models.Model):
    """A species or kind of animal kept on the farm."""

    name = models.CharField(max_length=100, unique=True)

    class Meta:
        db_table = 'animal_types'
        ordering = ['name']

    def __str__(self):
        return self.name

    @property
    def is_buffalo(self):
        return self.name.strip().lower() == 'buffalo'


# =============================================================================
# QUESTION MODEL
# =============================================================================

class Question(models.Model):
    """
    A question asked to the farmer. Only the tag and scope matter to
    the report engine; the rest drives the input forms.
    """

    class Scope(models.TextChoices):
        ANIMAL = 'animal', 'Animal question'
        DAILY = 'daily', 'Daily record question'

    tag = models.PositiveSmallIntegerField(
        choices=Tag.choices,
        null=True,
        blank=True,
        db_index=True,
        help_text="Report meaning of the answers to this question"
    )
    scope = models.CharField(
        max_length=10,
        choices=Scope.choices,
        default=Scope.ANIMAL,
        db_index=True
    )
    category = models.CharField(max_length=100, blank=True)
    subcategory = models.CharField(max_length=100, blank=True)
    validation_rule = models.CharField(
        max_length=50,
        blank=True,
        help_text="Input form type (text, date, price_list, ...)"
    )
    text = models.CharField(max_length=255)
    is_deleted = models.BooleanField(default=False)

    class Meta:
        db_table = 'questions'

    def __str__(self):
        return self.text


# =============================================================================
# ANSWER MODEL - The Fact Log
# =============================================================================

class Answer(models.Model):
    """
    One time-stamped answer to a tagged question about a subject.

    Animal answers carry the animal type and number. Daily record answers
    belong to the owner's farm-level subject (no animal type, empty number).
    """

    class Status(models.TextChoices):
        NORMAL = 'normal', 'Normal'
        EXCLUDED = 'excluded', 'Excluded'

    owner = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='answers'
    )
    animal_type = models.ForeignKey(
        AnimalType,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='answers'
    )
    animal_number = models.CharField(max_length=100, blank=True, default='')
    question = models.ForeignKey(
        Question,
        on_delete=models.PROTECT,
        related_name='answers'
    )
    tag = models.PositiveSmallIntegerField(
        choices=Tag.choices,
        null=True,
        blank=True,
        help_text="Copied from the question when the answer is recorded"
    )
    value = models.TextField(blank=True, default='')
    logic_value = models.CharField(
        max_length=50,
        null=True,
        blank=True,
        help_text="Language-independent value derived from the answer text"
    )
    status = models.CharField(
        max_length=10,
        choices=Status.choices,
        default=Status.NORMAL
    )
    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    deleted_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'answers'
        indexes = [
            models.Index(
                fields=['owner', 'animal_type', 'animal_number', 'tag', 'created_at'],
                name='answer_subject_tag_idx'
            ),
            models.Index(fields=['owner', 'tag', 'created_at'], name='answer_owner_tag_idx'),
        ]

    def __str__(self):
        subject = self.animal_number or 'farm'
        return f"{subject} [{self.tag}] = {self.value}"


class MotherCalfLink(models.Model):
    """Links a calf to its mother at a recorded delivery."""

    owner = models.ForeignKey(User, on_delete=models.CASCADE, related_name='calf_links')
    animal_type = models.ForeignKey(AnimalType, on_delete=models.PROTECT)
    mother_animal_number = models.CharField(max_length=100, db_index=True)
    calf_animal_number = models.CharField(max_length=100)
    delivery_date = models.DateField(null=True, blank=True)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'mother_calf_links'

    def __str__(self):
        return f"{self.mother_animal_number} -> {self.calf_animal_number}"


class DeletedAnimalDetail(models.Model):
    """Archived answers of an animal the farmer removed from the herd."""

    owner = models.ForeignKey(User, on_delete=models.CASCADE, related_name='deleted_animal_details')
    animal_type = models.ForeignKey(AnimalType, on_delete=models.PROTECT, null=True)
    animal_number = models.CharField(max_length=100)
    question = models.ForeignKey(Question, on_delete=models.PROTECT)
    tag = models.PositiveSmallIntegerField(null=True, blank=True)
    value = models.TextField(blank=True, default='')
    answered_at = models.DateTimeField()
    retired_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'deleted_animal_details'
