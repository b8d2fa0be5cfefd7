from enum import Enum


class OrderStatus(str, Enum):
    PENDING = "Pending"          # Created, waiting for payment (or cash on delivery)
    PROCESSING = "Processing"    # Paid (or COD accepted), supplier preparing
    SHIPPED = "Shipped"          # Handed to the delivery provider
    DELIVERED = "Delivered"      # Buyer received the goods, escrow can be released
    CANCELLED = "Cancelled"      # Final
    REFUNDED = "Refunded"        # Final, buyer refunded after approved refund request
