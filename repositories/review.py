from sqlalchemy import select, func, delete
from sqlalchemy.ext.asyncio import AsyncSession

from db import session_execute, session_flush
from models.review import Review, ReviewDTO


class ReviewRepository:
    @staticmethod
    async def create(review: Review, session: AsyncSession) -> Review:
        session.add(review)
        await session_flush(session)
        return review

    @staticmethod
    async def get_by_id(review_id: int, session: AsyncSession) -> Review | None:
        stmt = select(Review).where(Review.id == review_id)
        review = await session_execute(stmt, session)
        return review.scalar()

    @staticmethod
    async def get_existing(order_id: int, user_id: int, product_id: int, session: AsyncSession) -> Review | None:
        stmt = select(Review).where(Review.order_id == order_id,
                                    Review.user_id == user_id,
                                    Review.product_id == product_id)
        review = await session_execute(stmt, session)
        return review.scalar()

    @staticmethod
    async def get_by_product_id(product_id: int, session: AsyncSession) -> list[ReviewDTO]:
        stmt = select(Review).where(Review.product_id == product_id).order_by(Review.created_at.desc())
        reviews = await session_execute(stmt, session)
        return [ReviewDTO.model_validate(r, from_attributes=True) for r in reviews.scalars().all()]

    @staticmethod
    async def get_by_user_id(user_id: int, session: AsyncSession) -> list[ReviewDTO]:
        stmt = select(Review).where(Review.user_id == user_id).order_by(Review.created_at.desc())
        reviews = await session_execute(stmt, session)
        return [ReviewDTO.model_validate(r, from_attributes=True) for r in reviews.scalars().all()]

    @staticmethod
    async def get_latest(limit: int, session: AsyncSession) -> list[ReviewDTO]:
        stmt = select(Review).order_by(Review.created_at.desc(), Review.id.desc()).limit(limit)
        reviews = await session_execute(stmt, session)
        return [ReviewDTO.model_validate(r, from_attributes=True) for r in reviews.scalars().all()]

    @staticmethod
    async def get_rating_stats(product_id: int, session: AsyncSession) -> tuple[float, int]:
        """(average rating, review count) of a product."""
        stmt = select(func.coalesce(func.avg(Review.rating), 0.0), func.count(Review.id)).where(
            Review.product_id == product_id)
        row = (await session_execute(stmt, session)).one()
        return float(row[0]), int(row[1])

    @staticmethod
    async def delete(review_id: int, session: AsyncSession) -> None:
        stmt = delete(Review).where(Review.id == review_id)
        await session_execute(stmt, session)
