from enum import Enum


class SectionName(str, Enum):
    """Built-in merchandising placements seeded at startup."""
    FLASH_SALES = "FlashSales"
    BEST_DEALS = "BestDeals"
    NEW_ARRIVALS = "NewArrivals"
    TOP_TRENDING = "TopTrending"
