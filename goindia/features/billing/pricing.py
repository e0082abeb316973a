"""
goindia/features/billing/pricing.py

Price quote for the paid plan. Quotes only; payment is handled outside
this service and upgrade_to_paid runs once it is confirmed.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Optional

from pydantic import BaseModel

BASE_PRICE_USD = Decimal("5.00")

COUPONS: Dict[str, Decimal] = {
    "INDIA30": Decimal("0.30"),
    "INDIAA50": Decimal("0.50"),
    "INDIAA100": Decimal("1.00"),
}


class PriceQuote(BaseModel):
    base_price: Decimal
    discount: Decimal
    price: Decimal
    coupon: Optional[str] = None
    message: Optional[str] = None
    already_unlocked: bool = False


def quote(coupon: Optional[str] = None, *, is_admin: bool = False, is_paid: bool = False) -> PriceQuote:
    if is_admin or is_paid:
        return PriceQuote(
            base_price=BASE_PRICE_USD,
            discount=Decimal("1.00"),
            price=Decimal("0.00"),
            message="You already have full access.",
            already_unlocked=True,
        )

    code = (coupon or "").strip().upper()
    if not code:
        return PriceQuote(base_price=BASE_PRICE_USD, discount=Decimal("0"), price=BASE_PRICE_USD)

    discount = COUPONS.get(code)
    if discount is None:
        return PriceQuote(
            base_price=BASE_PRICE_USD,
            discount=Decimal("0"),
            price=BASE_PRICE_USD,
            coupon=code,
            message="Invalid coupon code.",
        )

    price = (BASE_PRICE_USD * (Decimal("1") - discount)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    percent = int(discount * 100)
    message = f"{percent}% discount applied!"
    if price == 0:
        message = f"{percent}% discount applied! Enjoy for free."
    return PriceQuote(base_price=BASE_PRICE_USD, discount=discount, price=price, coupon=code, message=message)
