"""
Models Package

This file ensures all SQLAlchemy models are imported and registered,
which is required for relationships to work correctly.
"""

from models.base import Base
from models.user import User
from models.supplier import Supplier
from models.category import Category
from models.product import Product
from models.section import Section, section_products
from models.cart import Cart
from models.cartItem import CartItem
from models.wishlist import WishlistItem
from models.recently_viewed import RecentlyViewed
from models.address import Address
from models.order import Order
from models.orderItem import OrderItem
from models.payment import Payment
from models.pending_payment import PendingPayment
from models.dispute import Dispute
from models.review import Review
from models.report import Report
from models.chat_message import ChatMessage
from models.coupon import Coupon
from models.wallet import Wallet, WalletTransaction

__all__ = [
    'Base',
    'User',
    'Supplier',
    'Category',
    'Product',
    'Section',
    'section_products',
    'Cart',
    'CartItem',
    'WishlistItem',
    'RecentlyViewed',
    'Address',
    'Order',
    'OrderItem',
    'Payment',
    'PendingPayment',
    'Dispute',
    'Review',
    'Report',
    'ChatMessage',
    'Coupon',
    'Wallet',
    'WalletTransaction',
]
