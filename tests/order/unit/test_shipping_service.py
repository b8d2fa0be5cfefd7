"""
Unit Tests: ShippingService

Distance based estimates with free shipping threshold and delivery dates.
"""

from datetime import datetime, timedelta

from enums.shipping_method import ShippingMethod
from services.shipping import ShippingService


class TestShippingEstimate:

    def test_standard_rate(self):
        estimate = ShippingService.estimate(ShippingMethod.STANDARD, distance_km=10, subtotal=1000)
        # 100 base + 5/km
        assert estimate.cost == 150.0
        assert estimate.free_shipping is False
        assert estimate.estimated_days == 3

    def test_express_rate(self):
        estimate = ShippingService.estimate(ShippingMethod.EXPRESS, distance_km=10, subtotal=1000)
        # 200 base + 10/km
        assert estimate.cost == 300.0
        assert estimate.estimated_days == 1

    def test_free_above_threshold(self):
        estimate = ShippingService.estimate(ShippingMethod.EXPRESS, distance_km=50, subtotal=5000.01)
        assert estimate.cost == 0.0
        assert estimate.free_shipping is True

    def test_threshold_itself_is_not_free(self):
        estimate = ShippingService.estimate(ShippingMethod.STANDARD, distance_km=0, subtotal=5000)
        assert estimate.cost == 100.0

    def test_free_shipping_products(self):
        estimate = ShippingService.estimate(ShippingMethod.STANDARD, distance_km=20, subtotal=10,
                                            free_shipping_products=True)
        assert estimate.cost == 0.0

    def test_negative_distance_counts_as_zero(self):
        estimate = ShippingService.estimate(ShippingMethod.STANDARD, distance_km=-5, subtotal=10)
        assert estimate.cost == 100.0

    def test_delivery_date(self):
        now = datetime(2026, 1, 1, 12, 0)
        estimate = ShippingService.estimate(ShippingMethod.STANDARD, distance_km=1, subtotal=10, now=now)
        assert estimate.estimated_delivery_date == now + timedelta(days=3)
