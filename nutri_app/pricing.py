# pricing.py

import math
from typing import Dict, List, Optional
from nutri_app.data_model import PriceLineItem, PriceQuote, Recommendation

# KRW. Shipping and the survey discount are marketing line items: shown on
# every plan but already folded into the base price, never subtracted again.
SHIPPING_COST = 4500
SURVEY_DISCOUNT = 10000
FIRST_SUBSIDY = 10000

DEFAULT_UNIT_PRICE = 10000   # flat monthly price per product on the plan comparison screen
DAYS_PER_MONTH = 30

SUBSCRIBE_DISCOUNT_RATE = 0.15
MONTHLY_DISCOUNT_RATE = 0.05
ANNUAL_DISCOUNT_RATE = 0.15

PLANS = ("monthly", "annual", "once")


class PricingError(ValueError):
    pass


def monthly_unit_price(price_per_unit: float, daily_dosage: int) -> int:
    """round(price per tablet * tablets per day * 30); 0 for unusable numbers"""
    try:
        amount = float(price_per_unit) * float(daily_dosage) * DAYS_PER_MONTH
    except (TypeError, ValueError, OverflowError):
        return 0
    if not math.isfinite(amount) or amount < 0:
        return 0
    return int(math.floor(amount + 0.5))


def subscribe_display_price(monthly_price: int) -> int:
    """Monthly price shown with the flat 15% subscribe discount."""
    return int(math.floor(monthly_price * (1 - SUBSCRIBE_DISCOUNT_RATE)))


def _quote(plan: str, base_price: int, breakdown: Optional[List[PriceLineItem]] = None) -> PriceQuote:
    if plan == "monthly":
        plan_discount = int(math.floor(base_price * MONTHLY_DISCOUNT_RATE))
        total = base_price - plan_discount - FIRST_SUBSIDY
        shipping = SHIPPING_COST
        daily = total // DAYS_PER_MONTH
    elif plan == "annual":
        yearly = base_price * 12
        plan_discount = int(math.floor(yearly * ANNUAL_DISCOUNT_RATE))
        total = yearly - plan_discount - FIRST_SUBSIDY
        shipping = SHIPPING_COST * 12
        daily = total // 365
    elif plan == "once":
        plan_discount = 0
        total = base_price - FIRST_SUBSIDY
        shipping = SHIPPING_COST
        daily = total // DAYS_PER_MONTH
    else:
        raise PricingError(f"Unknown plan '{plan}'. Expected one of: {', '.join(PLANS)}")

    return PriceQuote(
        plan=plan,
        base_price=base_price,
        plan_discount=plan_discount,
        first_subsidy=FIRST_SUBSIDY,
        shipping_cost=shipping,
        survey_discount=SURVEY_DISCOUNT,
        total=total,
        daily_price=daily,
        per_unit_breakdown=breakdown or [],
    )


def quote_plan(selection_count: int, plan: str, unit_price: int = DEFAULT_UNIT_PRICE) -> PriceQuote:
    """
    Plan comparison price for `selection_count` products at a flat unit price.
    Percentage discount first, then the first-subscription subsidy.
    """
    if selection_count < 0:
        raise PricingError("selection_count must be >= 0")
    base_price = selection_count * unit_price
    return _quote(plan, base_price)


def quote_all_plans(selection_count: int, unit_price: int = DEFAULT_UNIT_PRICE) -> Dict[str, PriceQuote]:
    return {plan: quote_plan(selection_count, plan, unit_price) for plan in PLANS}


def quote_cart(recommendations: List[Recommendation], plan: str) -> PriceQuote:
    """
    Checkout price for the subscription cart: the base is the sum of each
    item's own monthly price instead of the flat placeholder.
    """
    breakdown = [
        PriceLineItem(
            name=rec.name,
            monthly_price=rec.monthly_price,
            display_price=subscribe_display_price(rec.monthly_price),
        )
        for rec in recommendations
    ]
    base_price = sum(item.monthly_price for item in breakdown)
    return _quote(plan, base_price, breakdown)
