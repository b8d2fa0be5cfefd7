import logging

from sqlalchemy.ext.asyncio import AsyncSession

from db import session_commit, session_flush
from enums.order_status import OrderStatus
from enums.role import Role
from exceptions.base import PermissionDeniedException
from exceptions.order import OrderOwnershipException, ProductNotInOrderException
from exceptions.review import ReviewNotFoundException, DuplicateReviewException, ReviewNotAllowedException
from models.review import Review, ReviewDTO, ReviewCreateRequest, ReviewUpdateRequest
from models.user import UserDTO
from repositories.product import ProductRepository
from repositories.review import ReviewRepository
from services.order import OrderService


class ReviewService:

    @staticmethod
    async def _refresh_product_rating(product_id: int, session: AsyncSession) -> None:
        await session_flush(session)
        product = await ProductRepository.get_by_id(product_id, session)
        if product is None:
            return
        average, count = await ReviewRepository.get_rating_stats(product_id, session)
        product.rating = round(average, 2)
        product.num_reviews = count

    @staticmethod
    async def _get_entity(review_id: int, session: AsyncSession) -> Review:
        review = await ReviewRepository.get_by_id(review_id, session)
        if review is None:
            raise ReviewNotFoundException(review_id)
        return review

    @staticmethod
    async def add(request: ReviewCreateRequest, current_user: UserDTO, session: AsyncSession) -> ReviewDTO:
        """Only delivered orders can be reviewed, once per product of the order."""
        order = await OrderService.get_order_entity(request.order_id, session)
        if order.buyer_id != current_user.id:
            raise OrderOwnershipException(order.id, current_user.id)
        if order.status != OrderStatus.DELIVERED:
            raise ReviewNotAllowedException(order.id, order.status.value)
        if request.product_id not in {item.product_id for item in order.items}:
            raise ProductNotInOrderException(order.id, request.product_id)
        if await ReviewRepository.get_existing(order.id, current_user.id, request.product_id, session) is not None:
            raise DuplicateReviewException(order.id, request.product_id)

        review = await ReviewRepository.create(Review(
            order_id=order.id,
            product_id=request.product_id,
            user_id=current_user.id,
            rating=request.rating,
            comment=request.comment.strip(),
        ), session)
        await ReviewService._refresh_product_rating(request.product_id, session)
        await session_commit(session)
        logging.info(f"⭐ Review {review.id} ({review.rating}/5) on product {review.product_id} by user {current_user.id}")
        return ReviewDTO.model_validate(review, from_attributes=True)

    @staticmethod
    async def get_by_product(product_id: int, session: AsyncSession) -> list[ReviewDTO]:
        return await ReviewRepository.get_by_product_id(product_id, session)

    @staticmethod
    async def get_by_user(user_id: int, session: AsyncSession) -> list[ReviewDTO]:
        return await ReviewRepository.get_by_user_id(user_id, session)

    @staticmethod
    async def update(review_id: int, request: ReviewUpdateRequest, current_user: UserDTO,
                     session: AsyncSession) -> ReviewDTO:
        review = await ReviewService._get_entity(review_id, session)
        if review.user_id != current_user.id:
            raise PermissionDeniedException(current_user.id, f"update review {review_id}")
        if request.rating is not None:
            review.rating = request.rating
        if request.comment is not None:
            review.comment = request.comment.strip()
        await ReviewService._refresh_product_rating(review.product_id, session)
        await session_commit(session)
        return ReviewDTO.model_validate(review, from_attributes=True)

    @staticmethod
    async def delete(review_id: int, current_user: UserDTO, session: AsyncSession) -> None:
        review = await ReviewService._get_entity(review_id, session)
        if current_user.role != Role.ADMIN and review.user_id != current_user.id:
            raise PermissionDeniedException(current_user.id, f"delete review {review_id}")
        product_id = review.product_id
        await ReviewRepository.delete(review.id, session)
        await ReviewService._refresh_product_rating(product_id, session)
        await session_commit(session)
        logging.info(f"🗑️ Review {review_id} deleted by user {current_user.id}")
