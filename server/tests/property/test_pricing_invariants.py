"""Property-based tests for pricing and discount invariants."""

from decimal import Decimal

from hypothesis import given
from hypothesis import strategies as st

from autodetail.services import pricing

# Strategies for generating test data
amounts = st.decimals(min_value=0, max_value=100000, places=2, allow_nan=False, allow_infinity=False)
percentages = st.decimals(min_value=Decimal("0.01"), max_value=100, places=2, allow_nan=False, allow_infinity=False)
deposit_shares = st.decimals(min_value=0, max_value=1, places=2, allow_nan=False, allow_infinity=False)
discount_types = st.sampled_from(["percent", "fixed"])


@given(discount_type=discount_types, value=amounts, subtotal=amounts)
def test_discount_between_zero_and_subtotal(discount_type, value, subtotal):
    """A coupon never takes more than the subtotal and never adds to it."""
    discount = pricing.coupon_discount(discount_type, value, subtotal)

    assert Decimal("0") <= discount <= subtotal
    assert discount == pricing.round_money(discount)


@given(value=percentages, subtotal=amounts)
def test_percent_discount_matches_rate(value, subtotal):
    discount = pricing.coupon_discount("percent", value, subtotal)

    assert abs(discount - subtotal * value / 100) <= Decimal("0.005")


@given(total=amounts, share=deposit_shares, discount=amounts)
def test_rebalanced_deposit_never_exceeds_total(total, share, discount):
    deposit = pricing.round_money(pricing.deposit_for(total, share))
    new_total, new_deposit = pricing.rebalance_after_discount(total, deposit, discount)

    assert Decimal("0") <= new_total <= total
    assert Decimal("0") <= new_deposit <= new_total


@given(total=amounts, share=deposit_shares)
def test_deposit_plus_balance_is_total(total, share):
    deposit = pricing.round_money(pricing.deposit_for(total, share))

    assert deposit <= total
    assert deposit + (total - deposit) == total


@given(amount=st.decimals(min_value=-1000, max_value=1000, allow_nan=False, allow_infinity=False))
def test_round_money_is_idempotent(amount):
    once = pricing.round_money(amount)

    assert pricing.round_money(once) == once
    assert abs(once - amount) <= Decimal("0.005")
