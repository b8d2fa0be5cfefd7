"""
Chat exceptions.
"""

from .base import MarketplaceException


class ChatException(MarketplaceException):
    """Base exception for chat errors."""
    pass


class ChatNotAllowedException(ChatException):
    """Raised when sender and receiver are not the buyer and supplier of the order."""

    def __init__(self, order_id: int, sender_id: int, receiver_id: int):
        super().__init__(
            "You are not allowed to chat in this order",
            details={'order_id': order_id, 'sender_id': sender_id, 'receiver_id': receiver_id}
        )
        self.order_id = order_id
        self.sender_id = sender_id
        self.receiver_id = receiver_id


class EmptyMessageException(ChatException):

    def __init__(self):
        super().__init__("Message must have text or media")
