"""Presentation helpers. Values are accumulated unrounded and only rounded here."""

from decimal import ROUND_FLOOR, ROUND_HALF_UP, Decimal

TWO_PLACES = Decimal('0.01')
ONE_PLACE = Decimal('0.1')
ZERO = Decimal('0')


def money(value):
    """Format a number with exactly two decimals."""
    return str(Decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP))


def one_decimal(value):
    return str(Decimal(value).quantize(ONE_PLACE, rounding=ROUND_HALF_UP))


def split_profit_loss(net):
    """
    Split a net amount into (profit, loss) strings.

    A positive net is profit; anything else is a loss shown as its absolute
    value floored to whole units. The unused side is "0.00".
    """
    net = Decimal(net)
    if net > ZERO:
        return money(net), money(ZERO)
    loss = abs(net).to_integral_value(rounding=ROUND_FLOOR)
    return money(ZERO), money(loss)


def display_date(value):
    """Long display form used by the graph rows, e.g. 5th Mar 2024."""
    day = value.day
    if 11 <= day % 100 <= 13:
        suffix = 'th'
    else:
        suffix = {1: 'st', 2: 'nd', 3: 'rd'}.get(day % 10, 'th')
    return f"{day}{suffix} {value.strftime('%b %Y')}"
