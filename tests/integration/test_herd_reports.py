"""
Integration Tests for Production, Health, Investment and Breeding Reports
"""

import pytest
from datetime import date
from decimal import Decimal

from django.utils import timezone

from livestock.models import MotherCalfLink
from livestock.services.fact_store import Subject
from livestock.tags import Tag
from reports.models import FixedInvestment, InvestmentType, InvestmentTypeTranslation
from reports.services.aggregation import DateWindow
from reports.services.builder import ReportBuilder
from reports.services.lookups import InvestmentTypeNameLookup
from tests.conftest import at

MARCH = DateWindow(date(2024, 3, 1), date(2024, 3, 31))


@pytest.fixture
def builder(farmer):
    return ReportBuilder(farmer.pk, now=at(2024, 3, 31))


class TestMilkReports:

    def test_milk_production_per_day(self, farmer, record, builder):
        record(farmer, Tag.MORNING_MILK, '[{"amount": 10, "price": 40}]', at(2024, 3, 1, 7))
        record(farmer, Tag.EVENING_MILK, '[{"amount": 8, "price": 40}]', at(2024, 3, 1, 18))

        report = builder.milk_production(DateWindow(date(2024, 3, 1), date(2024, 3, 2)))

        first, second = report['rows']
        assert first['morning'] == '10.00'
        assert first['evening'] == '8.00'
        assert first['total'] == '18.00'
        assert second['total'] == '0.00'
        assert report['totals']['total_value'] == '720.00'

    def test_milk_aggregate_average(self, farmer, record, builder):
        record(farmer, Tag.MORNING_MILK, '[{"amount": 10, "price": 40}]', at(2024, 3, 1))
        record(farmer, Tag.MORNING_MILK, '[{"amount": 14, "price": 40}]', at(2024, 3, 2))

        report = builder.milk_aggregate_average(MARCH)

        assert report['aggregate']['morning'] == '24.00'
        assert report['average']['morning'] == '12.00'

    def test_milk_quality_is_averaged(self, farmer, record, builder):
        record(farmer, Tag.MORNING_FAT, '[{"name": "4.0"}]', at(2024, 3, 1, 7))
        record(farmer, Tag.MORNING_FAT, '[{"name": "5.0"}]', at(2024, 3, 1, 8))
        record(farmer, Tag.MORNING_FAT, '[{"name": "6.0"}]', at(2024, 3, 2, 7))

        report = builder.milk_quality(DateWindow(date(2024, 3, 1), date(2024, 3, 2)))

        assert report['rows'][0]['morning_fat'] == '4.50'
        assert report['rows'][1]['morning_fat'] == '6.00'
        assert report['rows'][0]['evening_snf'] == '0.00'
        assert report['averages']['morning_fat'] == '5.00'

    def test_manure_rows_per_entry(self, farmer, record, builder):
        record(farmer, Tag.MANURE, '[{"amount": 100, "price": 2}, {"amount": 50, "price": 2.5}]',
               at(2024, 3, 3))

        report = builder.manure_production(MARCH)

        assert report['rows'] == [
            {'date': '2024-03-03', 'kg': '100.00', 'rate': '2.00', 'total': '200.00'},
            {'date': '2024-03-03', 'kg': '50.00', 'rate': '2.50', 'total': '125.00'},
        ]
        assert report['totals'] == {'kg': '150.00', 'amount': '325.00'}


class TestHealthReport:

    def test_day_listed_only_with_health_date(self, farmer, cow_type, record, builder):
        when = at(2024, 3, 5)
        record(farmer, Tag.HEALTH_DATE, '2024-03-05', when, 'C-1', cow_type)
        record(farmer, Tag.DISEASE, 'Mastitis', when, 'C-1', cow_type)
        record(farmer, Tag.TREATMENT_DETAILS, 'Antibiotics', when, 'C-1', cow_type)
        record(farmer, Tag.MILK_LOSS, '3', when, 'C-1', cow_type)
        record(farmer, Tag.DISEASE, 'Fever', at(2024, 3, 6), 'C-2', cow_type)
        record(farmer, Tag.TREATMENT_COST, '[{"price": 450}]', when, 'C-1', cow_type)
        record(farmer, Tag.TREATMENT_COST, '[{"price": 50}]', at(2024, 3, 6), 'C-2', cow_type)

        report = builder.health(MARCH)

        assert report['rows'] == [{
            'animal_number': 'C-1',
            'date': '2024-03-05',
            'health_date': '2024-03-05',
            'disease': 'Mastitis',
            'treatment': 'Antibiotics',
            'milk_loss': '3',
        }]
        assert report['total_cost_of_treatment'] == '500.00'

    def test_missing_columns_are_not_available(self, farmer, cow_type, record, builder):
        record(farmer, Tag.HEALTH_DATE, '2024-03-05', at(2024, 3, 5), 'C-1', cow_type)

        row = builder.health(MARCH, animal_number='C-1')['rows'][0]

        assert row['disease'] == 'NA'
        assert row['milk_loss'] == 'NA'


class TestInvestmentReport:

    def test_rows_total_and_age(self, farmer):
        shed = InvestmentType.objects.create(name='Cattle shed')
        pump = InvestmentType.objects.create(name='Pump')
        InvestmentTypeTranslation.objects.create(
            investment_type=shed, language_code='mr', name='गोठा'
        )
        FixedInvestment.objects.create(
            owner=farmer, investment_type=shed, amount=Decimal('150000'),
            installed_on=date(2022, 9, 30)
        )
        FixedInvestment.objects.create(
            owner=farmer, investment_type=pump, amount=Decimal('2500.50'),
            installed_on=date(2024, 3, 31)
        )
        FixedInvestment.objects.create(
            owner=farmer, investment_type=pump, amount=Decimal('999'),
            installed_on=date(2023, 1, 1), deleted_at=timezone.now()
        )

        report = ReportBuilder(
            farmer.pk, now=at(2024, 3, 31), name_lookup=InvestmentTypeNameLookup('mr')
        ).investment()

        assert report['count'] == 2
        assert report['total_investment'] == '152500.50'
        first, second = report['rows']
        assert first['type_of_investment'] == 'गोठा'
        assert first['age_in_year'] == '1.5'
        assert second['type_of_investment'] == 'Pump'
        assert second['age_in_year'] == '0.0'

    def test_no_investments(self, builder):
        assert builder.investment() == {'rows': [], 'total_investment': '0.00', 'count': 0}


@pytest.fixture
def breeding_herd(farmer, cow_type, buffalo_type, record):
    ai = at(2024, 1, 10)
    record(farmer, Tag.AI_DATE, '2024-01-10', ai, 'C-1', cow_type)
    record(farmer, Tag.BULL_NUMBER, 'HF-22', ai, 'C-1', cow_type)
    record(farmer, Tag.SEMEN_COMPANY, 'ABS', ai, 'C-1', cow_type)
    record(farmer, Tag.HEAT_DATE, '2024-02-01', at(2024, 2, 1), 'C-1', cow_type)
    record(farmer, Tag.PREGNANT, 'yes', at(2024, 2, 15), 'C-1', cow_type)
    record(farmer, Tag.LACTATING, 'yes', at(2024, 2, 15), 'C-1', cow_type)
    record(farmer, Tag.DELIVERY_DATE, '2023-03-20', at(2023, 3, 20), 'C-1', cow_type)
    record(farmer, Tag.DELIVERY_TYPE, 'Normal', at(2023, 3, 20), 'C-1', cow_type)
    MotherCalfLink.objects.create(
        owner=farmer, animal_type=cow_type, mother_animal_number='C-1',
        calf_animal_number='C-1-1', delivery_date=date(2023, 3, 20)
    )

    record(farmer, Tag.AI_DATE, '2024-01-10', ai, 'B-1', buffalo_type)
    record(farmer, Tag.PREGNANT, 'yes', at(2024, 2, 15), 'B-1', buffalo_type)

    record(farmer, Tag.PREGNANT, 'no', at(2024, 2, 15), 'C-2', cow_type)
    record(farmer, Tag.GENDER, 'male', at(2024, 1, 1), 'BULL-1', cow_type)
    record(farmer, Tag.PREGNANT, 'no', at(2024, 1, 2), 'BULL-1', cow_type)
    record(farmer, Tag.GENDER, 'female', at(2024, 1, 1), 'C-3', cow_type)
    return {'cow': cow_type, 'buffalo': buffalo_type}


class TestBreedingReports:

    def test_animal_breeding_history(self, farmer, breeding_herd, builder):
        subject = Subject(farmer.pk, breeding_herd['cow'].pk, 'C-1')

        history = builder.animal_breeding_history(subject)

        assert len(history['ai_history']) == 1
        event = history['ai_history'][0]
        assert event['ai_date'] == '2024-01-10'
        assert event['bull_number'] == 'HF-22'
        assert event['semen_company'] == 'ABS'
        assert event['mother_yield'] == 'NA'
        assert history['delivery_history'][0]['calf_number'] == 'C-1-1'
        assert history['delivery_history'][0]['delivery_type'] == 'Normal'
        assert [heat['heat_date'] for heat in history['heat_history']] == ['2024-02-01']

    def test_herd_breeding_history_split_by_pregnancy(self, breeding_herd, builder):
        history = builder.herd_breeding_history()

        assert {item['animal_number'] for item in history['pregnant']} == {'C-1', 'B-1'}
        assert {item['animal_number'] for item in history['no_pregnant']} == {'C-2', 'BULL-1', 'C-3'}

    def test_breeding_status_expected_months(self, breeding_herd, builder):
        status = builder.breeding_status()

        cow = status['Cow']['pregnant'][0]
        assert cow['animal_number'] == 'C-1'
        assert cow['pregnancy_detection_month'] == 'Apr 2024'
        assert cow['expected_delivery_month'] == 'Oct 2024'
        assert cow['bull_number'] == 'HF-22'
        assert cow['milking_status'] == 'Lactating'

        buffalo = status['Buffalo']['pregnant'][0]
        assert buffalo['expected_delivery_month'] == 'Nov 2024'

    def test_breeding_status_skips_bulls_and_unanswered(self, breeding_herd, builder):
        status = builder.breeding_status()

        non_pregnant = [row['animal_number'] for row in status['Cow']['non_pregnant']]
        assert non_pregnant == ['C-2']

    def test_herd_status(self, breeding_herd, builder):
        report = builder.herd_status()

        assert report['total_animals'] == 5
        assert report['by_animal_type']['Cow']['bull'] == 1
        assert report['by_animal_type']['Buffalo']['pregnant_cow'] == 1

    def test_animal_profile(self, farmer, cow_type, record, builder):
        record(farmer, Tag.DATE_OF_BIRTH, '2021-01-15', at(2021, 1, 20), 'C-9', cow_type)
        record(farmer, Tag.GENDER, 'female', at(2021, 1, 20), 'C-9', cow_type)

        profile = builder.animal_profile(Subject(farmer.pk, cow_type.pk, 'C-9'))

        assert profile['general']['age'] == '3 years 2 months'
        assert profile['general']['mother_number'] == 'NA'
        assert profile['classification']['bucket'] == 'Cow'
        assert profile['breeding']['ai_history'] == []
