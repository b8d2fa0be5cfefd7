from datetime import datetime

from sqlalchemy import select, func, or_
from sqlalchemy.ext.asyncio import AsyncSession

from db import session_execute, session_flush
from enums.product_status import ProductStatus, ProductVisibility, ProductSort
from models.product import Product
from models.section import Section, section_products
from utils.pagination import page_offset


class ProductRepository:
    @staticmethod
    async def get_by_id(product_id: int, session: AsyncSession) -> Product | None:
        stmt = select(Product).where(Product.id == product_id)
        product = await session_execute(stmt, session)
        return product.scalar()

    @staticmethod
    async def get_by_ids(product_ids: list[int], session: AsyncSession) -> dict[int, Product]:
        if not product_ids:
            return {}
        stmt = select(Product).where(Product.id.in_(product_ids))
        products = await session_execute(stmt, session)
        return {p.id: p for p in products.scalars().all()}

    @staticmethod
    async def create(product: Product, session: AsyncSession) -> Product:
        session.add(product)
        await session_flush(session)
        return product

    @staticmethod
    def _order_by(stmt, sort: ProductSort):
        match sort:
            case ProductSort.PRICE_LOW_HIGH:
                return stmt.order_by(Product.price.asc(), Product.id.asc())
            case ProductSort.PRICE_HIGH_LOW:
                return stmt.order_by(Product.price.desc(), Product.id.desc())
            case ProductSort.RATING:
                return stmt.order_by(Product.rating.desc(), Product.num_reviews.desc(), Product.id.desc())
            case ProductSort.RANDOM:
                return stmt.order_by(func.random())
            case _:
                return stmt.order_by(Product.created_at.desc(), Product.id.desc())

    @staticmethod
    async def search(session: AsyncSession,
                     page: int,
                     limit: int,
                     public_only: bool = True,
                     status: ProductStatus | None = None,
                     category_ids: list[int] | None = None,
                     supplier_id: int | None = None,
                     brand: str | None = None,
                     min_price: float | None = None,
                     max_price: float | None = None,
                     search: str | None = None,
                     section_name: str | None = None,
                     in_stock: bool | None = None,
                     exclude_id: int | None = None,
                     sort: ProductSort = ProductSort.LATEST) -> tuple[list[Product], int]:
        conditions = []
        if public_only:
            conditions.append(Product.status == ProductStatus.ACTIVE)
            conditions.append(Product.visibility == ProductVisibility.PUBLIC)
        elif status is not None:
            conditions.append(Product.status == status)
        if category_ids:
            conditions.append(Product.category_id.in_(category_ids))
        if supplier_id is not None:
            conditions.append(Product.supplier_id == supplier_id)
        if brand:
            conditions.append(func.lower(Product.brand) == brand.lower())
        if min_price is not None:
            conditions.append(Product.price >= min_price)
        if max_price is not None:
            conditions.append(Product.price <= max_price)
        if search:
            pattern = f"%{search.strip()}%"
            conditions.append(or_(Product.name.ilike(pattern), Product.description.ilike(pattern),
                                  Product.brand.ilike(pattern)))
        if in_stock:
            conditions.append(or_(Product.stock.is_(None), Product.stock > 0))
        if exclude_id is not None:
            conditions.append(Product.id != exclude_id)
        if section_name:
            section_subquery = (select(section_products.c.product_id)
                                .join(Section, Section.id == section_products.c.section_id)
                                .where(Section.name == section_name))
            conditions.append(Product.id.in_(section_subquery))

        count_stmt = select(func.count(Product.id)).where(*conditions)
        count = (await session_execute(count_stmt, session)).scalar_one()

        stmt = ProductRepository._order_by(select(Product).where(*conditions), sort)
        stmt = stmt.limit(limit).offset(page_offset(page, limit))
        products = await session_execute(stmt, session)
        return list(products.scalars().all()), count

    @staticmethod
    async def get_section_names(product_ids: list[int], session: AsyncSession) -> dict[int, list[str]]:
        if not product_ids:
            return {}
        stmt = (select(section_products.c.product_id, Section.name)
                .join(Section, Section.id == section_products.c.section_id)
                .where(section_products.c.product_id.in_(product_ids)))
        rows = await session_execute(stmt, session)
        names: dict[int, list[str]] = {}
        for product_id, name in rows.all():
            names.setdefault(product_id, []).append(name)
        return names

    @staticmethod
    async def count(session: AsyncSession, status: ProductStatus | None = None) -> int:
        stmt = select(func.count(Product.id))
        if status is not None:
            stmt = stmt.where(Product.status == status)
        count = await session_execute(stmt, session)
        return count.scalar_one()

    @staticmethod
    async def get_expired_flash_sales(now: datetime, session: AsyncSession) -> list[Product]:
        stmt = select(Product).where(Product.flash_sale_active.is_(True),
                                     Product.flash_sale_end.is_not(None),
                                     Product.flash_sale_end < now)
        products = await session_execute(stmt, session)
        return list(products.scalars().all())

    @staticmethod
    async def count_by_category(category_id: int, session: AsyncSession) -> int:
        stmt = select(func.count(Product.id)).where(Product.category_id == category_id)
        count = await session_execute(stmt, session)
        return count.scalar_one()
