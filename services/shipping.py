from datetime import datetime, timedelta

import config
from enums.shipping_method import ShippingMethod
from models.order import ShippingEstimateDTO


class ShippingService:
    """
    Distance based shipping rates:
    - standard: SHIPPING_STANDARD_BASE + SHIPPING_STANDARD_PER_KM per km, SHIPPING_STANDARD_DAYS
    - express: SHIPPING_EXPRESS_BASE + SHIPPING_EXPRESS_PER_KM per km, SHIPPING_EXPRESS_DAYS
    Orders with subtotal above FREE_SHIPPING_THRESHOLD ship for free.
    """

    @staticmethod
    def get_rates(method: ShippingMethod) -> tuple[float, float, int]:
        match method:
            case ShippingMethod.EXPRESS:
                return config.SHIPPING_EXPRESS_BASE, config.SHIPPING_EXPRESS_PER_KM, config.SHIPPING_EXPRESS_DAYS
            case _:
                return config.SHIPPING_STANDARD_BASE, config.SHIPPING_STANDARD_PER_KM, config.SHIPPING_STANDARD_DAYS

    @staticmethod
    def estimate(method: ShippingMethod, distance_km: float, subtotal: float,
                 free_shipping_products: bool = False, now: datetime | None = None) -> ShippingEstimateDTO:
        base, per_km, days = ShippingService.get_rates(method)
        free = free_shipping_products or subtotal > config.FREE_SHIPPING_THRESHOLD
        cost = 0.0 if free else round(base + per_km * max(distance_km, 0), 2)
        now = now or datetime.now()
        return ShippingEstimateDTO(
            method=method,
            cost=cost,
            free_shipping=free,
            estimated_days=days,
            estimated_delivery_date=now + timedelta(days=days)
        )
