from enum import Enum


class ProductStatus(str, Enum):
    PENDING = "Pending"      # Waiting for admin moderation
    ACTIVE = "Active"        # Approved and sellable
    INACTIVE = "Inactive"    # Rejected or soft deleted


class ProductVisibility(str, Enum):
    PRIVATE = "Private"
    PUBLIC = "Public"


class ProductSort(str, Enum):
    LATEST = "latest"
    PRICE_LOW_HIGH = "priceLowHigh"
    PRICE_HIGH_LOW = "priceHighLow"
    RATING = "rating"
    RANDOM = "random"
