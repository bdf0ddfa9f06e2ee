"""
Integration Tests for Herd Classification

Verifies the bucket precedence (gender, then life stage, then the Cow
default) and that herd summaries partition every animal exactly once.
"""

import pytest

from livestock.models import Answer
from livestock.services.classification import (
    Bucket,
    ClassificationEngine,
    HerdSummary,
    LactationStatus,
    ReproductiveStatus,
    classify_answers,
)
from livestock.services.fact_store import Subject
from livestock.tags import Tag
from tests.conftest import at


@pytest.fixture
def engine():
    return ClassificationEngine()


@pytest.fixture
def animal(farmer, cow_type, record):
    """Factory recording a set of answers for one cow-type animal."""
    def _animal(number, **answers):
        tags = {
            'gender': Tag.GENDER,
            'life_stage': Tag.LIFE_STAGE,
            'pregnant': Tag.PREGNANT,
            'lactating': Tag.LACTATING,
        }
        for name, value in answers.items():
            record(farmer, tags[name], value, at(2024, 3, 1), number, cow_type)
        return Subject(farmer.pk, cow_type.pk, number)
    return _animal


class TestClassifyAnswers:
    """Precedence rules on unsaved answers."""

    def test_male_is_bull_and_nothing_else(self):
        result = classify_answers(
            gender=Answer(value=' Male '),
            pregnant=Answer(value='yes'),
            lactating=Answer(value='yes'),
        )

        assert result.bucket == Bucket.BULL
        assert result.reproductive_status is None
        assert result.lactation_status is None

    def test_calf_life_stage_is_heifer(self):
        result = classify_answers(
            gender=Answer(value='Female'),
            life_stage=Answer(value='Calf', logic_value='calf'),
            pregnant=Answer(value='Yes'),
        )

        assert result.bucket == Bucket.HEIFER
        assert result.reproductive_status == ReproductiveStatus.PREGNANT
        assert result.lactation_status is None

    def test_no_answers_defaults_to_non_pregnant_non_lactating_cow(self):
        result = classify_answers()

        assert result.bucket == Bucket.COW
        assert result.reproductive_status == ReproductiveStatus.NON_PREGNANT
        assert result.lactation_status == LactationStatus.NON_LACTATING

    def test_life_stage_uses_logic_value_not_text(self):
        result = classify_answers(life_stage=Answer(value='बछड़ा', logic_value='calf'))

        assert result.bucket == Bucket.HEIFER


class TestClassificationEngine:

    def test_male_with_pregnancy_answer_is_still_bull(self, engine, animal):
        subject = animal('B-1', gender='male', pregnant='yes', lactating='yes')

        assert engine.classify(subject).bucket == Bucket.BULL

    def test_heifer_scenario(self, engine, animal):
        subject = animal('H-1', gender='Female', life_stage='calf', pregnant='yes')

        result = engine.classify(subject)

        assert result.bucket == Bucket.HEIFER
        assert result.is_pregnant
        assert result.lactation_status is None

    def test_unanswered_animal_is_cow(self, engine, animal):
        subject = animal('C-1', pregnant='no')

        result = engine.classify(subject)

        assert result.bucket == Bucket.COW
        assert not result.is_pregnant
        assert not result.is_lactating

    def test_latest_gender_answer_decides(self, engine, farmer, cow_type, record):
        record(farmer, Tag.GENDER, 'female', at(2024, 3, 1), 'X-1', cow_type)
        record(farmer, Tag.GENDER, 'male', at(2024, 3, 2), 'X-1', cow_type)

        assert engine.classify(Subject(farmer.pk, cow_type.pk, 'X-1')).bucket == Bucket.BULL

    def test_cow_pregnancy_and_lactation(self, engine, animal):
        subject = animal('C-2', gender='female', life_stage='cow', pregnant='YES', lactating='yes')

        result = engine.classify(subject)

        assert result.bucket == Bucket.COW
        assert result.is_pregnant
        assert result.is_lactating

    def test_classify_herd_agrees_with_classify(self, engine, farmer, animal):
        subjects = [
            animal('B-1', gender='male'),
            animal('H-1', life_stage='calf', pregnant='no'),
            animal('C-1', lactating='yes'),
        ]

        herd = engine.classify_herd(farmer.pk)

        assert set(herd) == set(subjects)
        for subject in subjects:
            assert herd[subject] == engine.classify(subject)


class TestHerdSummary:

    def test_every_animal_lands_in_exactly_one_bucket(self, engine, farmer, animal):
        animal('B-1', gender='male')
        animal('B-2', gender='Male', pregnant='yes')
        animal('H-1', life_stage='calf', pregnant='yes')
        animal('H-2', life_stage='calf')
        animal('C-1', pregnant='yes', lactating='yes')
        animal('C-2', lactating='no')
        animal('C-3', pregnant='no')

        summary = engine.herd_summary(farmer.pk)

        assert summary.total == 7
        assert summary.bull + summary.heifer + summary.cow == summary.total
        assert (summary.bull, summary.heifer, summary.cow) == (2, 2, 3)
        assert summary.pregnant_heifer == 1
        assert summary.non_pregnant_heifer == 1
        assert summary.pregnant_cow == 1
        assert summary.non_pregnant_cow == 2
        assert summary.lactating == 1
        assert summary.non_lactating == 2

    def test_empty_herd(self, engine, farmer):
        assert engine.herd_summary(farmer.pk) == HerdSummary()

    def test_summaries_add_up(self):
        first = HerdSummary(bull=1, cow=2, total=3)
        second = HerdSummary(heifer=1, cow=1, total=2)

        combined = first + second

        assert (combined.bull, combined.heifer, combined.cow, combined.total) == (1, 1, 3, 5)

    def test_summary_by_animal_type(self, engine, farmer, cow_type, buffalo_type, record):
        record(farmer, Tag.GENDER, 'male', at(2024, 3, 1), 'C-1', cow_type)
        record(farmer, Tag.LACTATING, 'yes', at(2024, 3, 1), 'B-1', buffalo_type)
        record(farmer, Tag.LACTATING, 'no', at(2024, 3, 1), 'B-2', buffalo_type)

        summaries = engine.herd_summary_by_type(farmer.pk)

        assert summaries['Cow'].bull == 1
        assert summaries['Buffalo'].cow == 2
        assert summaries['Buffalo'].lactating == 1

GENDERS = ['male', 'Male', 'female', 'bull calf', None]
LIFE_STAGES = ['calf', 'cow', 'buffalo', None]


def _expected_bucket(gender, life_stage):
    if gender is not None and gender.strip().lower() == 'male':
        return Bucket.BULL
    if life_stage == 'calf':
        return Bucket.HEIFER
    return Bucket.COW


class TestHerdPartition:
    """Every combination of gender and life stage lands in exactly one bucket."""

    @pytest.mark.parametrize('life_stage', LIFE_STAGES)
    @pytest.mark.parametrize('gender', GENDERS)
    def test_single_animal(self, engine, farmer, animal, gender, life_stage):
        answers = {'pregnant': 'no'}
        if gender is not None:
            answers['gender'] = gender
        if life_stage is not None:
            answers['life_stage'] = life_stage
        subject = animal('A-1', **answers)

        summary = engine.herd_summary(farmer.pk)

        assert summary.total == 1
        assert summary.bull + summary.heifer + summary.cow == 1
        assert engine.classify(subject).bucket == _expected_bucket(gender, life_stage)

    def test_whole_herd(self, engine, farmer, animal):
        numbers = set()
        for g, gender in enumerate(GENDERS):
            for s, life_stage in enumerate(LIFE_STAGES):
                answers = {'pregnant': 'no'}
                if gender is not None:
                    answers['gender'] = gender
                if life_stage is not None:
                    answers['life_stage'] = life_stage
                number = f'A-{g}-{s}'
                animal(number, **answers)
                numbers.add(number)

        summary = engine.herd_summary(farmer.pk)

        assert summary.total == len(numbers) == 20
        assert summary.bull + summary.heifer + summary.cow == len(numbers)
        assert (summary.bull, summary.heifer, summary.cow) == (8, 3, 9)
