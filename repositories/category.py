from sqlalchemy import select, func, delete
from sqlalchemy.ext.asyncio import AsyncSession

from db import session_execute, session_flush
from models.category import Category, CategoryDTO


class CategoryRepository:
    @staticmethod
    async def get_by_id(category_id: int, session: AsyncSession) -> Category | None:
        stmt = select(Category).where(Category.id == category_id)
        category = await session_execute(stmt, session)
        return category.scalar()

    @staticmethod
    async def get_by_slug(slug: str, session: AsyncSession) -> Category | None:
        stmt = select(Category).where(Category.slug == slug)
        category = await session_execute(stmt, session)
        return category.scalar()

    @staticmethod
    async def get_by_name_or_slug(name: str, slug: str, session: AsyncSession) -> Category | None:
        stmt = select(Category).where((func.lower(Category.name) == name.lower()) | (Category.slug == slug))
        category = await session_execute(stmt, session)
        return category.scalars().first()

    @staticmethod
    async def get_all(session: AsyncSession) -> list[CategoryDTO]:
        stmt = select(Category).order_by(Category.name)
        categories = await session_execute(stmt, session)
        return [CategoryDTO.model_validate(c, from_attributes=True) for c in categories.scalars().all()]

    @staticmethod
    async def get_children_ids(category_id: int, session: AsyncSession) -> list[int]:
        stmt = select(Category.id).where(Category.parent_category_id == category_id)
        ids = await session_execute(stmt, session)
        return list(ids.scalars().all())

    @staticmethod
    async def create(category: Category, session: AsyncSession) -> Category:
        session.add(category)
        await session_flush(session)
        return category

    @staticmethod
    async def delete(category_id: int, session: AsyncSession) -> None:
        stmt = delete(Category).where(Category.id == category_id)
        await session_execute(stmt, session)
