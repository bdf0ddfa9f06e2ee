"""
Farm Report Builder

Composes classification and period aggregation into the named report shapes
shown to farmers:

- Profit / loss (with and without animal sale and purchase prices)
- Income / expense and their aggregate / average summaries
- Milk production quantity and quality
- Manure production
- Animal health
- Fixed investments
- Breeding history and status
- Herd status and animal profile

Every report is read-only and returns a fully populated dict; a window with
no data yields zeros and empty row lists, never missing keys.
"""

import logging
from collections import defaultdict
from decimal import Decimal

from dateutil.relativedelta import relativedelta
from django.utils import timezone

from livestock.exceptions import MalformedPayloadError
from livestock.services.classification import ClassificationEngine
from livestock.services.fact_store import fact_store
from livestock.services.tag_resolver import NOT_AVAILABLE, TagResolver
from livestock.tags import Role, Tag, tags_for
from reports.formatting import display_date, money, one_decimal, split_profit_loss
from reports.models import FixedInvestment
from reports.services.aggregation import Measure, PeriodAggregator, local_date, parse_priced
from reports.services.breeding import BreedingReportService, parse_answer_date
from reports.services.lookups import InvestmentTypeNameLookup

logger = logging.getLogger(__name__)

ZERO = Decimal('0')
DAYS_PER_YEAR = Decimal('365')

FEED_COLUMNS = (
    ('green_feed', Tag.GREEN_FEED),
    ('cattle_feed', Tag.CATTLE_FEED),
    ('dry_feed', Tag.DRY_FEED),
    ('supplement', Tag.SUPPLEMENT),
)

HEALTH_COLUMNS = (
    ('health_date', Tag.HEALTH_DATE),
    ('disease', Tag.DISEASE),
    ('treatment', Tag.TREATMENT_DETAILS),
    ('milk_loss', Tag.MILK_LOSS),
)


def _window_dict(window):
    return {'from': window.start.isoformat(), 'to': window.end.isoformat()}


def _aggregate_and_average(values, days):
    return {
        'aggregate': {key: money(value) for key, value in values.items()},
        'average': {key: money(value / days) for key, value in values.items()},
        'days': days,
    }


class ReportBuilder:
    """
    Report service for a single farmer.

    Usage:
        builder = ReportBuilder(user.id)
        report = builder.profit_loss(DateWindow(start, end))
    """

    def __init__(self, owner_id, *, now=None, name_lookup=None):
        self.owner_id = owner_id
        self.now = now or timezone.now()
        self.name_lookup = name_lookup or InvestmentTypeNameLookup()
        self.aggregator = PeriodAggregator(owner_id)
        self.resolver = TagResolver()
        self.engine = ClassificationEngine(self.resolver)
        self.breeding = BreedingReportService(owner_id, self.resolver, self.engine)

    def today(self):
        return local_date(self.now)

    # =========================================================================
    # FINANCIAL
    # =========================================================================

    def breeding_expense_by_day(self, window):
        return self.aggregator.daily_sums(
            tags_for(Role.BREEDING_EXPENSE), window, animals_only=True
        )

    def profit_loss(self, window):
        """
        Daily profit / loss over every day of the window.

        Computed twice: with animal sale / purchase prices counted as income /
        expense, and without them. Breeding expense is subtracted in both and
        reported on its own.
        """
        daily = self.aggregator.daily_sums
        income_with_sale = daily(tags_for(Role.INCOME_WITH_SALE), window)
        expense_with_purchase = daily(tags_for(Role.EXPENSE_WITH_PURCHASE), window)
        income = daily(tags_for(Role.INCOME), window)
        expense = daily(tags_for(Role.EXPENSE), window)
        breeding = self.breeding_expense_by_day(window)

        rows = []
        net_with_total = net_without_total = breeding_total = ZERO

        for day in window.days():
            breeding_expense = breeding.get(day, ZERO)
            net_with = income_with_sale.get(day, ZERO) - (
                expense_with_purchase.get(day, ZERO) + breeding_expense
            )
            net_without = income.get(day, ZERO) - (expense.get(day, ZERO) + breeding_expense)

            profit, loss = split_profit_loss(net_with)
            profit_without, loss_without = split_profit_loss(net_without)
            rows.append({
                'date': day.isoformat(),
                'display_date': display_date(day),
                'profit': profit,
                'loss': loss,
                'profit_without_sale_purchase': profit_without,
                'loss_without_sale_purchase': loss_without,
                'breeding_expense': money(breeding_expense),
            })

            net_with_total += net_with
            net_without_total += net_without
            breeding_total += breeding_expense

        profit, loss = split_profit_loss(net_with_total)
        profit_without, loss_without = split_profit_loss(net_without_total)
        return {
            'window': _window_dict(window),
            'rows': rows,
            'totals': {
                'profit': profit,
                'loss': loss,
                'profit_without_sale_purchase': profit_without,
                'loss_without_sale_purchase': loss_without,
                'breeding_expense': money(breeding_total),
            },
        }

    def financial_totals(self, window):
        """Unformatted window totals, used by the outlet rollup."""
        aggregate = self.aggregator.aggregate
        income = aggregate(Role.INCOME, window)
        expense = aggregate(Role.EXPENSE, window)
        income_with_sale = aggregate(Role.INCOME_WITH_SALE, window)
        expense_with_purchase = aggregate(Role.EXPENSE_WITH_PURCHASE, window)
        breeding = aggregate(Role.BREEDING_EXPENSE, window)
        return {
            'income': income,
            'expense': expense,
            'breeding_expense': breeding,
            'net': income - (expense + breeding),
            'net_with_sale_purchase': income_with_sale - (expense_with_purchase + breeding),
        }

    def income_expense(self, window):
        """Per-day income, expense and feed costs for days with any activity."""
        daily = self.aggregator.daily_sums
        expense = daily(tags_for(Role.EXPENSE), window)
        income = daily(tags_for(Role.INCOME), window)
        feeds = {name: daily((tag,), window) for name, tag in FEED_COLUMNS}

        active = set(expense) | set(income)
        for column in feeds.values():
            active |= set(column)

        totals = defaultdict(lambda: ZERO)
        rows = []
        for day in sorted(active):
            values = {
                'expense': expense.get(day, ZERO),
                'income': income.get(day, ZERO),
            }
            values['profit'] = values['income'] - values['expense']
            for name, _ in FEED_COLUMNS:
                values[name] = feeds[name].get(day, ZERO)
            values['other_expense'] = values['expense'] - sum(
                values[name] for name, _ in FEED_COLUMNS
            )

            for key, value in values.items():
                totals[key] += value
            row = {'date': day.isoformat()}
            row.update({key: money(value) for key, value in values.items()})
            rows.append(row)

        keys = ['expense', 'income', 'profit'] + [name for name, _ in FEED_COLUMNS] + ['other_expense']
        return {
            'window': _window_dict(window),
            'rows': rows,
            'totals': {key: money(totals[key]) for key in keys},
        }

    def expense_aggregate_average(self, window):
        aggregator = self.aggregator
        values = {}
        feed_cost = ZERO
        for name, tag in FEED_COLUMNS:
            values[f'{name}_qty'] = aggregator.quantity_by_tag((tag,), window)
            cost = aggregator.sum_by_tag((tag,), window)
            values[f'{name}_cost'] = cost
            feed_cost += cost

        total_expense = aggregator.aggregate(Role.EXPENSE, window)
        values['other_expense'] = total_expense - feed_cost
        values['total_expense'] = total_expense

        result = _aggregate_and_average(values, aggregator.active_days(window))
        result['window'] = _window_dict(window)
        return result

    def income_aggregate_average(self, window):
        aggregator = self.aggregator
        morning_qty = aggregator.quantity_by_tag((Tag.MORNING_MILK,), window)
        evening_qty = aggregator.quantity_by_tag((Tag.EVENING_MILK,), window)
        morning_cost = aggregator.sum_by_tag((Tag.MORNING_MILK,), window)
        evening_cost = aggregator.sum_by_tag((Tag.EVENING_MILK,), window)
        manure_qty = aggregator.quantity_by_tag((Tag.MANURE,), window)
        manure_cost = aggregator.sum_by_tag((Tag.MANURE,), window)
        selling = aggregator.aggregate(Role.SALE, window)
        income = aggregator.aggregate(Role.INCOME, window)

        values = {
            'milk_qty_morning': morning_qty,
            'milk_qty_evening': evening_qty,
            'milk_qty_total': morning_qty + evening_qty,
            'milk_cost_morning': morning_cost,
            'milk_cost_evening': evening_cost,
            'milk_cost_total': morning_cost + evening_cost,
            'manure_qty': manure_qty,
            'manure_amount': manure_cost,
            'selling_price_amount': selling,
            'other_income_amount': income + selling - (
                manure_cost + morning_cost + evening_cost + selling
            ),
        }
        result = _aggregate_and_average(values, aggregator.active_days(window))
        result['window'] = _window_dict(window)
        return result

    def sale_purchase_animals(self, window):
        aggregator = self.aggregator
        return {
            'window': _window_dict(window),
            'income_for_sale_animals': money(
                aggregator.quantity_by_tag(tags_for(Role.SALE), window)
            ),
            'expense_for_purchase_animals': money(
                aggregator.quantity_by_tag(tags_for(Role.PURCHASE), window)
            ),
        }

    # =========================================================================
    # PRODUCTION
    # =========================================================================

    def milk_production(self, window):
        daily = self.aggregator.daily_sums
        morning_qty = daily((Tag.MORNING_MILK,), window, Measure.QUANTITY)
        evening_qty = daily((Tag.EVENING_MILK,), window, Measure.QUANTITY)
        morning_value = daily((Tag.MORNING_MILK,), window)
        evening_value = daily((Tag.EVENING_MILK,), window)

        rows = []
        totals = defaultdict(lambda: ZERO)
        for day in window.days():
            values = {
                'morning': morning_qty.get(day, ZERO),
                'evening': evening_qty.get(day, ZERO),
                'morning_value': morning_value.get(day, ZERO),
                'evening_value': evening_value.get(day, ZERO),
            }
            values['total'] = values['morning'] + values['evening']
            values['total_value'] = values['morning_value'] + values['evening_value']
            for key, value in values.items():
                totals[key] += value
            row = {'date': day.isoformat(), 'display_date': display_date(day)}
            row.update({key: money(value) for key, value in values.items()})
            rows.append(row)

        keys = ['morning', 'evening', 'total', 'morning_value', 'evening_value', 'total_value']
        return {
            'window': _window_dict(window),
            'rows': rows,
            'totals': {key: money(totals[key]) for key in keys},
        }

    def milk_aggregate_average(self, window):
        aggregator = self.aggregator
        morning = aggregator.quantity_by_tag((Tag.MORNING_MILK,), window)
        evening = aggregator.quantity_by_tag((Tag.EVENING_MILK,), window)
        result = _aggregate_and_average(
            {'morning': morning, 'evening': evening, 'total': morning + evening},
            aggregator.active_days(window),
        )
        result['window'] = _window_dict(window)
        return result

    def milk_quality(self, window):
        """Fat and SNF readings averaged per day and over the window."""
        columns = (
            ('morning_fat', Tag.MORNING_FAT),
            ('morning_snf', Tag.MORNING_SNF),
            ('evening_fat', Tag.EVENING_FAT),
            ('evening_snf', Tag.EVENING_SNF),
        )
        per_day = {
            name: self.aggregator.daily_samples((tag,), window) for name, tag in columns
        }

        rows = []
        for day in window.days():
            row = {'date': day.isoformat()}
            for name, _ in columns:
                total, samples = per_day[name].get(day, (ZERO, 0))
                row[name] = money(total / max(samples, 1))
            rows.append(row)

        averages = {
            name: money(self.aggregator.average_by_tag((tag,), window))
            for name, tag in columns
        }
        return {'window': _window_dict(window), 'rows': rows, 'averages': averages}

    def manure_production(self, window):
        rows = []
        total_kg = total_amount = ZERO
        facts = self.aggregator.facts((Tag.MANURE,), window).order_by('created_at', 'id')
        for answer in facts:
            try:
                entries = parse_priced(answer.value)
            except MalformedPayloadError as exc:
                logger.warning(f"Skipping malformed manure answer {answer.id}: {exc}")
                continue
            for entry in entries:
                rows.append({
                    'date': local_date(answer.created_at).isoformat(),
                    'kg': money(entry.quantity),
                    'rate': money(entry.price),
                    'total': money(entry.value),
                })
                total_kg += entry.quantity
                total_amount += entry.value

        return {
            'window': _window_dict(window),
            'rows': rows,
            'totals': {'kg': money(total_kg), 'amount': money(total_amount)},
        }

    # =========================================================================
    # HEALTH
    # =========================================================================

    def health(self, window, animal_number=None):
        """
        Per animal, per day view of health answers. A day is listed only when
        the health date was answered that day.
        """
        tags = [tag for _, tag in HEALTH_COLUMNS]
        facts = fact_store.scan_owner(self.owner_id, tags, window=window, animals_only=True)
        if animal_number:
            facts = facts.filter(animal_number=animal_number)

        grouped = defaultdict(dict)
        for answer in facts:
            key = (answer.animal_number, local_date(answer.created_at))
            # Newest first: the first answer per tag and day is the latest
            grouped[key].setdefault(answer.tag, answer.value)

        rows = []
        for (number, day), values in sorted(grouped.items(), key=lambda item: (item[0][1], item[0][0])):
            if Tag.HEALTH_DATE not in values:
                continue
            row = {'animal_number': number, 'date': day.isoformat()}
            for name, tag in HEALTH_COLUMNS:
                row[name] = values.get(tag, NOT_AVAILABLE)
            rows.append(row)

        treatment_cost = self.aggregator.aggregate(Role.TREATMENT_COST, window)
        return {
            'window': _window_dict(window),
            'rows': rows,
            'total_cost_of_treatment': money(treatment_cost),
        }

    # =========================================================================
    # INVESTMENT
    # =========================================================================

    def investment(self):
        investments = FixedInvestment.objects.filter(
            owner_id=self.owner_id,
            deleted_at__isnull=True
        ).select_related('investment_type').order_by('installed_on', 'id')

        today = self.today()
        rows = []
        total = ZERO
        for item in investments:
            age = Decimal((today - item.installed_on).days) / DAYS_PER_YEAR
            rows.append({
                'type_of_investment': self.name_lookup(item.investment_type),
                'amount_in_investment': money(item.amount),
                'date_of_installation': item.installed_on.isoformat(),
                'age_in_year': one_decimal(age),
            })
            total += item.amount

        return {
            'rows': rows,
            'total_investment': money(total),
            'count': len(rows),
        }

    # =========================================================================
    # BREEDING & HERD
    # =========================================================================

    def animal_breeding_history(self, subject):
        return self.breeding.animal_history(subject)

    def herd_breeding_history(self):
        return self.breeding.herd_history()

    def breeding_status(self):
        return self.breeding.status()

    def herd_status(self):
        summaries = self.engine.herd_summary_by_type(self.owner_id)
        total = sum((summary.total for summary in summaries.values()), 0)
        return {
            'by_animal_type': {name: summary.as_dict() for name, summary in summaries.items()},
            'total_animals': total,
        }

    def animal_profile(self, subject):
        """Latest general answers, classification and breeding history of one animal."""
        general = {
            'gender': self.resolver.latest_value(subject, Tag.GENDER),
            'date_of_birth': self.resolver.latest_value(subject, Tag.DATE_OF_BIRTH),
            'life_stage': self.resolver.latest_value(subject, Tag.LIFE_STAGE),
            'mother_number': self.resolver.latest_value(subject, Tag.MOTHER_NUMBER),
            'pregnancy_cycle': self.resolver.latest_value(subject, Tag.PREGNANCY_CYCLE),
        }

        born = parse_answer_date(general['date_of_birth'])
        if born:
            age = relativedelta(self.today(), born)
            general['age'] = f"{age.years} years {age.months} months"
        else:
            general['age'] = NOT_AVAILABLE

        classification = self.engine.classify(subject)
        return {
            'animal_number': subject.animal_number,
            'general': general,
            'classification': {
                'bucket': classification.bucket.value,
                'reproductive_status': (
                    classification.reproductive_status.value
                    if classification.reproductive_status else None
                ),
                'lactation_status': (
                    classification.lactation_status.value
                    if classification.lactation_status else None
                ),
            },
            'breeding': self.breeding.animal_history(subject),
        }
