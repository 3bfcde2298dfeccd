"""
Price, deposit and discount arithmetic.

All amounts are ``Decimal`` dollars. Nothing here touches the database; the
booking and coupon services look rows up and pass them in.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable, Mapping, Protocol

CENT = Decimal("0.01")
HUNDRED = Decimal("100")


class ServicePrices(Protocol):
    sedan_price: Decimal
    suv_price: Decimal
    truck_price: Decimal


class AddonPrices(Protocol):
    sedan_price: Decimal
    suv_price: Decimal
    commercial_price: Decimal


def to_decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_money(amount: Any) -> Decimal:
    """Round to cents, half up."""
    return to_decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)


def normalize_vehicle(vehicle_type: str) -> str:
    return (vehicle_type or "").strip().lower()


def service_price(service: ServicePrices, vehicle_type: str) -> Decimal:
    """Sedan and SUV have their own column; trucks and commercial vehicles use the truck price."""
    vehicle = normalize_vehicle(vehicle_type)
    if vehicle == "sedan":
        return to_decimal(service.sedan_price)
    if vehicle == "suv":
        return to_decimal(service.suv_price)
    return to_decimal(service.truck_price)


def package_price(base_price: Any, vehicle_multipliers: Mapping[str, Any] | None, vehicle_type: str) -> Decimal:
    """Legacy packages: base price scaled by the vehicle multiplier (1.0 when unlisted)."""
    multipliers = vehicle_multipliers or {}
    multiplier = multipliers.get(normalize_vehicle(vehicle_type)) or 1
    return to_decimal(base_price) * to_decimal(multiplier)


def addon_price(addon: AddonPrices, vehicle_type: str) -> Decimal:
    """Commercial and SUV have their own column; sedans and trucks use the sedan price."""
    vehicle = normalize_vehicle(vehicle_type)
    if vehicle == "commercial":
        return to_decimal(addon.commercial_price)
    if vehicle == "suv":
        return to_decimal(addon.suv_price)
    return to_decimal(addon.sedan_price)


def addons_total(prices: Iterable[Decimal]) -> Decimal:
    return sum((to_decimal(price) for price in prices), Decimal("0"))


def deposit_for(total: Any, percentage: Any) -> Decimal:
    return to_decimal(total) * to_decimal(percentage)


def coupon_discount(discount_type: str, discount_value: Any, subtotal: Any) -> Decimal:
    """
    Discount a coupon grants on ``subtotal``.

    Percent coupons take a share of the subtotal, fixed coupons a flat amount.
    The result is never negative and never more than the subtotal.
    """
    subtotal = max(to_decimal(subtotal), Decimal("0"))
    value = to_decimal(discount_value)

    if discount_type == "percent":
        discount = subtotal * value / HUNDRED
    else:
        discount = value

    discount = max(min(discount, subtotal), Decimal("0"))
    return round_money(discount)


def rebalance_after_discount(total: Any, deposit: Any, discount: Any) -> tuple[Decimal, Decimal]:
    """
    New (total, deposit) after taking ``discount`` off the total.

    The deposit keeps its share of the total.
    """
    total = to_decimal(total)
    deposit = to_decimal(deposit)
    discount = to_decimal(discount)

    ratio = deposit / total if total > 0 else Decimal("0")
    new_total = max(total - discount, Decimal("0"))
    new_deposit = new_total * ratio
    return round_money(new_total), round_money(new_deposit)
