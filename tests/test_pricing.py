"""Tests for price derivation."""

from decimal import Decimal

import pytest

from storefront.pricing import compute_pricing


class TestComputePricing:
    def test_small_order_pays_shipping(self):
        pricing = compute_pricing(Decimal("10.00"))

        assert pricing.shipping == Decimal("9.99")
        assert pricing.tax == Decimal("0.80")
        assert pricing.total == Decimal("20.79")

    def test_large_order_ships_free(self):
        pricing = compute_pricing(Decimal("60.00"))

        assert pricing.shipping == 0
        assert pricing.tax == Decimal("4.80")
        assert pricing.total == Decimal("64.80")

    def test_threshold_is_exclusive(self):
        assert compute_pricing(Decimal("50.00")).shipping == Decimal("9.99")
        assert compute_pricing(Decimal("50.01")).shipping == 0

    @pytest.mark.parametrize(
        "subtotal, tax",
        [
            ("0", "0.00"),
            ("12.34", "0.99"),
            ("19.99", "1.60"),
            ("109.95", "8.80"),
            ("0.06", "0.00"),
            ("0.07", "0.01"),
        ],
    )
    def test_tax_rounded_to_cents(self, subtotal, tax):
        assert compute_pricing(Decimal(subtotal)).tax == Decimal(tax)

    def test_total_is_sum_of_parts(self):
        pricing = compute_pricing(Decimal("33.33"))

        assert pricing.total == pricing.subtotal + pricing.shipping + pricing.tax

    def test_overrides(self):
        pricing = compute_pricing(
            Decimal("10"),
            free_shipping_threshold=Decimal("5"),
            shipping_fee=Decimal("4.00"),
            tax_rate=Decimal("0.10"),
        )

        assert pricing.shipping == 0
        assert pricing.tax == Decimal("1.00")
        assert pricing.total == Decimal("11.00")

    def test_to_dict(self):
        assert compute_pricing(Decimal("10.00")).to_dict() == {
            "subtotal": "10.00",
            "shipping": "9.99",
            "tax": "0.80",
            "total": "20.79",
        }
