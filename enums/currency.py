from enum import Enum


class Currency(str, Enum):
    KES = "KES"
    USD = "USD"
    EUR = "EUR"
