from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from db import session_commit
from exceptions.cart import WishlistItemNotFoundException
from models.product import ProductDTO
from models.recently_viewed import RecentlyViewed
from models.user import UserDTO
from models.wishlist import WishlistItem
from repositories.product import ProductRepository
from repositories.recently_viewed import RecentlyViewedRepository
from repositories.wishlist import WishlistRepository
from services.product import ProductService

RECENTLY_VIEWED_LIMIT = 10


class WishlistService:

    @staticmethod
    async def _products(product_ids: list[int], session: AsyncSession) -> list[ProductDTO]:
        products = await ProductRepository.get_by_ids(product_ids, session)
        ordered = [products[pid] for pid in product_ids if pid in products]
        return await ProductService.to_dtos(ordered, session)

    @staticmethod
    async def add(product_id: int, current_user: UserDTO, session: AsyncSession) -> list[ProductDTO]:
        await ProductService.get_product(product_id, session, current_user)
        if await WishlistRepository.get(current_user.id, product_id, session) is None:
            await WishlistRepository.create(WishlistItem(user_id=current_user.id, product_id=product_id), session)
            await session_commit(session)
        return await WishlistService.get_wishlist(current_user, session)

    @staticmethod
    async def remove(product_id: int, current_user: UserDTO, session: AsyncSession) -> list[ProductDTO]:
        if await WishlistRepository.get(current_user.id, product_id, session) is None:
            raise WishlistItemNotFoundException(product_id)
        await WishlistRepository.delete(current_user.id, product_id, session)
        await session_commit(session)
        return await WishlistService.get_wishlist(current_user, session)

    @staticmethod
    async def get_wishlist(current_user: UserDTO, session: AsyncSession) -> list[ProductDTO]:
        items = await WishlistRepository.get_by_user_id(current_user.id, session)
        return await WishlistService._products([item.product_id for item in items], session)


class RecentlyViewedService:

    @staticmethod
    async def record_view(product_id: int, current_user: UserDTO, session: AsyncSession) -> list[ProductDTO]:
        """Most recent first, one entry per product, at most RECENTLY_VIEWED_LIMIT entries."""
        await ProductService.get_product(product_id, session, current_user)
        entry = await RecentlyViewedRepository.get(current_user.id, product_id, session)
        if entry is None:
            await RecentlyViewedRepository.create(RecentlyViewed(user_id=current_user.id, product_id=product_id),
                                                  session)
        else:
            entry.viewed_at = datetime.now()
        entries = await RecentlyViewedRepository.get_by_user_id(current_user.id, session)
        await RecentlyViewedRepository.delete_by_ids([e.id for e in entries[RECENTLY_VIEWED_LIMIT:]], session)
        await session_commit(session)
        return await RecentlyViewedService.get_recently_viewed(current_user, session)

    @staticmethod
    async def get_recently_viewed(current_user: UserDTO, session: AsyncSession) -> list[ProductDTO]:
        entries = await RecentlyViewedRepository.get_by_user_id(current_user.id, session, limit=RECENTLY_VIEWED_LIMIT)
        return await WishlistService._products([e.product_id for e in entries], session)
