"""
Outlet Rollup

Folds the herd and financial summaries of an outlet's delegated farmers into
one dashboard. The selector is either ALL_FARMERS or a search term matched
against farmer phone numbers and names.

A failure while summarizing one farmer is logged and reported in
`failed_farmers`; the rollup carries on with the remaining farmers.
"""

import logging
from decimal import Decimal

from django.conf import settings
from django.db.models import CharField, Q, Value
from django.db.models.functions import Cast, Concat
from django.utils import timezone
from phonenumber_field.phonenumber import PhoneNumber
from phonenumbers import NumberParseException

from accounts.models import User
from livestock.services.classification import HerdSummary
from livestock.tags import Role, tags_for
from livestock.windows import DateWindow
from reports.formatting import money, split_profit_loss
from reports.services.aggregation import Measure, local_date
from reports.services.builder import ReportBuilder

logger = logging.getLogger(__name__)

ALL_FARMERS = 'all_users'
NO_MATCH = 'NO_MATCH'
ZERO = Decimal('0')

TOTAL_KEYS = ('income', 'expense', 'breeding_expense', 'net', 'net_with_sale_purchase',
              'milk_litres', 'milk_value')


class OutletAssignmentResolver:
    """
    Farmers delegated to an outlet, read from OutletFarmer assignments.

    Any object with a `farmers(outlet)` method returning an iterable of users
    can stand in for it; the rollup only relies on their primary keys.
    """

    def farmers(self, outlet):
        return User.objects.filter(
            outlet_assignments__outlet=outlet,
            outlet_assignments__deleted_at__isnull=True,
            outlet_assignments__outlet__deleted_at__isnull=True,
        ).distinct().order_by('created_at', 'username')


def _as_phone(term):
    try:
        phone = PhoneNumber.from_string(term, region=settings.PHONENUMBER_DEFAULT_REGION)
    except NumberParseException:
        return None
    return phone if phone.is_valid() else None


def _zero_totals():
    return {key: ZERO for key in TOTAL_KEYS}


def _format_totals(totals):
    profit, loss = split_profit_loss(totals['net'])
    profit_with, loss_with = split_profit_loss(totals['net_with_sale_purchase'])
    return {
        'income': money(totals['income']),
        'expense': money(totals['expense']),
        'breeding_expense': money(totals['breeding_expense']),
        'profit': profit,
        'loss': loss,
        'profit_with_sale_purchase': profit_with,
        'loss_with_sale_purchase': loss_with,
        'milk_litres': money(totals['milk_litres']),
        'milk_value': money(totals['milk_value']),
    }


class OutletRollup:
    """
    Dashboard of an outlet's farmers.

    Usage:
        rollup = OutletRollup(outlet)
        report = rollup.dashboard(ALL_FARMERS)
        report = rollup.dashboard('98765', window=DateWindow(start, end))
    """

    def __init__(self, outlet, *, resolver=None, now=None):
        self.outlet = outlet
        self.resolver = resolver or OutletAssignmentResolver()
        self.now = now or timezone.now()

    # =========================================================================
    # FARMER SELECTION
    # =========================================================================

    def select_farmers(self, selector=ALL_FARMERS):
        """
        Resolve a selector to a list of farmers.

        An exact phone or name match wins; otherwise the earliest registered
        farmer with a partial match is returned. No match gives an empty list.
        """
        farmers = self.resolver.farmers(self.outlet)
        if selector == ALL_FARMERS:
            return list(farmers)

        term = (selector or '').strip()
        if not term:
            return []

        candidates = User.objects.filter(pk__in=[farmer.pk for farmer in farmers])
        farmers = candidates.annotate(
            full_name=Concat('first_name', Value(' '), 'last_name', output_field=CharField()),
            phone_text=Cast('phone', CharField()),
        ).order_by('created_at', 'username')

        exact = Q(username__iexact=term) | Q(first_name__iexact=term) | Q(full_name__iexact=term)
        phone = _as_phone(term)
        if phone is not None:
            exact |= Q(phone=phone)
        match = farmers.filter(exact).first()
        if match is not None:
            return [match]

        partial = (
            Q(username__icontains=term)
            | Q(first_name__icontains=term)
            | Q(last_name__icontains=term)
            | Q(full_name__icontains=term)
        )
        digits = ''.join(ch for ch in term if ch.isdigit())
        if digits:
            partial |= Q(phone_text__contains=digits)
        match = farmers.filter(partial).first()
        return [match] if match is not None else []

    # =========================================================================
    # DASHBOARD
    # =========================================================================

    def farmer_window(self, farmer, window=None):
        """The given window, or the farmer's whole history up to today."""
        if window is not None:
            return window
        today = local_date(self.now)
        return DateWindow(min(farmer.registered_on, today), today)

    def summarize_farmer(self, farmer, window=None):
        window = self.farmer_window(farmer, window)
        builder = ReportBuilder(farmer.pk, now=self.now)
        herd = builder.engine.herd_summary(farmer.pk)
        totals = builder.financial_totals(window)
        milk_tags = tags_for(Role.MILK)
        totals['milk_litres'] = builder.aggregator.sum_by_tag(milk_tags, window, Measure.QUANTITY)
        totals['milk_value'] = builder.aggregator.sum_by_tag(milk_tags, window)
        return window, herd, totals

    def _empty_report(self, selector, reason=None):
        report = {
            'match': reason is None,
            'selector': selector,
            'outlet': {'id': self.outlet.pk, 'business_name': self.outlet.business_name},
            'farmers': [],
            'herd': HerdSummary().as_dict(),
            'totals': _format_totals(_zero_totals()),
            'failed_farmers': [],
        }
        if reason:
            report['reason'] = reason
        return report

    def dashboard(self, selector=ALL_FARMERS, window=None):
        farmers = self.select_farmers(selector)
        if not farmers:
            if selector != ALL_FARMERS:
                logger.info(f"Outlet {self.outlet.pk}: no farmer matches '{selector}'")
                return self._empty_report(selector, reason=NO_MATCH)
            return self._empty_report(selector)

        report = self._empty_report(selector)
        herd_total = HerdSummary()
        totals = _zero_totals()

        for farmer in farmers:
            try:
                farmer_window, herd, farmer_totals = self.summarize_farmer(farmer, window)
            except Exception as exc:
                logger.exception(
                    f"Outlet {self.outlet.pk}: failed to summarize farmer {farmer.pk}"
                )
                report['failed_farmers'].append({
                    'farmer_id': str(farmer.pk),
                    'name': farmer.get_full_name(),
                    'error': str(exc),
                })
                continue

            herd_total = herd_total + herd
            for key in TOTAL_KEYS:
                totals[key] += farmer_totals[key]

            report['farmers'].append({
                'farmer_id': str(farmer.pk),
                'name': farmer.get_full_name(),
                'phone': str(farmer.phone) if farmer.phone else '',
                'window': {
                    'from': farmer_window.start.isoformat(),
                    'to': farmer_window.end.isoformat(),
                },
                'herd': herd.as_dict(),
                'totals': _format_totals(farmer_totals),
            })

        report['herd'] = herd_total.as_dict()
        report['totals'] = _format_totals(totals)
        return report
