"""Dynamic pricing algorithm.

Pure functions, no database access. The price job and the campaign/quick ad
flows call these with ORM rows; tests call them with plain objects.

Algorithm for one window:
1. mode ``off`` -> price unchanged
2. sales in the window -> raise by ``inc% + r * inc_random%`` unless mode is ``down``
3. no sales -> lower by ``dec% + r * dec_random%`` unless mode is ``up``
4. clamp to [min_price, max_price]
5. round to whole dinars
"""

import random
from decimal import Decimal
from typing import Protocol

from djcafe.features.catalog.models import PricingMode, Trend
from djcafe.shared.utils import round_price, to_cents

HUNDRED = Decimal(100)


class PricedItem(Protocol):
    """Fields the pricing algorithm reads from a product."""

    current_price: Decimal
    min_price: Decimal
    max_price: Decimal
    pricing_mode: str
    price_increase_percent: Decimal
    price_increase_random_percent: Decimal
    price_decrease_percent: Decimal
    price_decrease_random_percent: Decimal


class SalesCounters(Protocol):
    """Sales counters of a product."""

    sales_count: int
    manual_sales_adjustment: int
    sales_count_at_last_update: int


class RandomSource(Protocol):
    """Anything with ``random() -> float`` in [0, 1)."""

    def random(self) -> float: ...


def sales_window(product: SalesCounters) -> int:
    """Units sold since the last price change, including the manual adjustment."""
    return (
        product.sales_count + product.manual_sales_adjustment - product.sales_count_at_last_update
    )


def clamp(value: Decimal, low: Decimal, high: Decimal) -> Decimal:
    """Bound ``value`` to [low, high]."""
    return max(low, min(high, value))


def calculate_price(
    product: PricedItem,
    sales_this_window: int,
    rng: RandomSource | None = None,
) -> Decimal:
    """Compute the next price of a product.

    Args:
        product: Product with current price, bounds, mode and percentages.
        sales_this_window: Units sold since the last price change.
        rng: Source of the random variance; the ``random`` module by default.

    Returns:
        New price rounded to whole dinars; the current price when the mode
        forbids a move in the required direction.
    """
    mode = PricingMode(product.pricing_mode)
    current = Decimal(product.current_price)
    if mode == PricingMode.OFF:
        return current

    source = rng or random
    if sales_this_window > 0:
        if mode == PricingMode.DOWN:
            return current
        variance = Decimal(str(source.random()))
        percent = product.price_increase_percent + variance * product.price_increase_random_percent
        new_price = current * (1 + percent / HUNDRED)
    else:
        if mode == PricingMode.UP:
            return current
        variance = Decimal(str(source.random()))
        percent = product.price_decrease_percent + variance * product.price_decrease_random_percent
        new_price = current * (1 - percent / HUNDRED)

    bounded = clamp(new_price, Decimal(product.min_price), Decimal(product.max_price))
    return round_price(bounded)


def trend_for(new_price: Decimal, old_price: Decimal, current_trend: str) -> str:
    """Trend after a price move; unchanged prices keep the current trend."""
    if new_price > old_price:
        return Trend.UP.value
    if new_price < old_price:
        return Trend.DOWN.value
    return current_trend


def promotional_price(price: Decimal, min_price: Decimal, max_price: Decimal) -> Decimal:
    """Clamp a campaign/quick ad price to the product bounds, two decimals."""
    return to_cents(clamp(Decimal(price), Decimal(min_price), Decimal(max_price)))
