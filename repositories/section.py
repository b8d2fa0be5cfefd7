from sqlalchemy import select, delete, insert
from sqlalchemy.ext.asyncio import AsyncSession

from db import session_execute, session_flush
from enums.product_status import ProductStatus, ProductVisibility, ProductSort
from models.product import Product
from models.section import Section, SectionDTO, section_products
from repositories.product import ProductRepository


class SectionRepository:
    @staticmethod
    async def get_by_id(section_id: int, session: AsyncSession) -> Section | None:
        stmt = select(Section).where(Section.id == section_id)
        section = await session_execute(stmt, session)
        return section.scalar()

    @staticmethod
    async def get_by_name(name: str, session: AsyncSession) -> Section | None:
        stmt = select(Section).where(Section.name == name)
        section = await session_execute(stmt, session)
        return section.scalar()

    @staticmethod
    async def get_all(session: AsyncSession) -> list[Section]:
        stmt = select(Section).order_by(Section.display_order, Section.id)
        sections = await session_execute(stmt, session)
        return list(sections.scalars().all())

    @staticmethod
    async def create(section: Section, session: AsyncSession) -> Section:
        session.add(section)
        await session_flush(session)
        return section

    @staticmethod
    async def get_product_ids(section_id: int, session: AsyncSession) -> list[int]:
        stmt = (select(section_products.c.product_id)
                .where(section_products.c.section_id == section_id)
                .order_by(section_products.c.added_at))
        ids = await session_execute(stmt, session)
        return list(ids.scalars().all())

    @staticmethod
    async def has_product(section_id: int, product_id: int, session: AsyncSession) -> bool:
        stmt = select(section_products.c.product_id).where(section_products.c.section_id == section_id,
                                                           section_products.c.product_id == product_id)
        row = await session_execute(stmt, session)
        return row.first() is not None

    @staticmethod
    async def add_product(section_id: int, product_id: int, session: AsyncSession) -> None:
        stmt = insert(section_products).values(section_id=section_id, product_id=product_id)
        await session_execute(stmt, session)

    @staticmethod
    async def remove_product(section_id: int, product_id: int, session: AsyncSession) -> None:
        stmt = delete(section_products).where(section_products.c.section_id == section_id,
                                              section_products.c.product_id == product_id)
        await session_execute(stmt, session)

    @staticmethod
    async def get_public_products(section_id: int, limit: int, sort: ProductSort,
                                  session: AsyncSession) -> list[Product]:
        stmt = (select(Product)
                .join(section_products, section_products.c.product_id == Product.id)
                .where(section_products.c.section_id == section_id,
                       Product.status == ProductStatus.ACTIVE,
                       Product.visibility == ProductVisibility.PUBLIC))
        stmt = ProductRepository._order_by(stmt, sort).limit(limit)
        products = await session_execute(stmt, session)
        return list(products.scalars().all())

    @staticmethod
    async def delete(section_id: int, session: AsyncSession) -> None:
        await session_execute(delete(section_products).where(section_products.c.section_id == section_id), session)
        await session_execute(delete(Section).where(Section.id == section_id), session)

    @staticmethod
    async def to_dto(section: Section, session: AsyncSession) -> SectionDTO:
        dto = SectionDTO.model_validate(section, from_attributes=True)
        dto.product_ids = await SectionRepository.get_product_ids(section.id, session)
        return dto
