"""
Tests for report value formatting.
"""
import pytest
from datetime import date
from decimal import Decimal

from reports.formatting import display_date, money, one_decimal, split_profit_loss


class TestMoney:

    @pytest.mark.parametrize('value,expected', [
        (Decimal('0'), '0.00'),
        (Decimal('12.345'), '12.35'),
        (Decimal('-3.1'), '-3.10'),
        (7, '7.00'),
    ])
    def test_two_decimals(self, value, expected):
        assert money(value) == expected

    def test_one_decimal(self):
        assert one_decimal(Decimal('1.25')) == '1.3'


class TestSplitProfitLoss:

    def test_profit(self):
        assert split_profit_loss(Decimal('120.50')) == ('120.50', '0.00')

    def test_loss_is_floored(self):
        assert split_profit_loss(Decimal('-80.75')) == ('0.00', '80.00')

    def test_zero_is_not_a_profit(self):
        assert split_profit_loss(Decimal('0')) == ('0.00', '0.00')


class TestDisplayDate:

    @pytest.mark.parametrize('day,expected', [
        (1, '1st Mar 2024'),
        (2, '2nd Mar 2024'),
        (3, '3rd Mar 2024'),
        (11, '11th Mar 2024'),
        (12, '12th Mar 2024'),
        (21, '21st Mar 2024'),
        (23, '23rd Mar 2024'),
    ])
    def test_ordinal_suffix(self, day, expected):
        assert display_date(date(2024, 3, day)) == expected
