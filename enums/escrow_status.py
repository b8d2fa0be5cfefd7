from enum import Enum


class EscrowStatus(str, Enum):
    HELD = "Held"
    RELEASED = "Released"
    REFUNDED = "Refunded"
