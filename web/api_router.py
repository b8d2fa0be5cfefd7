"""
Aggregates every REST/WebSocket router under API_PREFIX (/api/v1).
"""

from fastapi import APIRouter

import config
from web.admin_router import admin_router, analytics_router
from web.auth_router import auth_router, users_router
from web.catalog_router import category_router, product_router, section_router
from web.chat_router import chat_router
from web.feedback_router import dispute_router, review_router, report_router
from web.order_router import order_router
from web.payment_router import payment_router
from web.promotion_router import coupon_router, offers_router, wallet_router
from web.shopper_router import cart_router, wishlist_router, recently_viewed_router, address_router
from web.supplier_router import supplier_router

api_router = APIRouter(prefix=config.API_PREFIX)

for router in (
    auth_router,
    users_router,
    supplier_router,
    category_router,
    product_router,
    section_router,
    cart_router,
    wishlist_router,
    recently_viewed_router,
    address_router,
    order_router,
    payment_router,
    dispute_router,
    review_router,
    report_router,
    chat_router,
    coupon_router,
    offers_router,
    wallet_router,
    admin_router,
    analytics_router,
):
    api_router.include_router(router)
