import logging

from sqlalchemy.ext.asyncio import AsyncSession

from db import session_commit
from enums.product_status import ProductSort
from enums.section_name import SectionName
from exceptions.product import SectionNotFoundException, DuplicateSectionException
from models.product import ProductDTO
from models.section import Section, SectionDTO, SectionCreateRequest
from models.user import UserDTO
from repositories.section import SectionRepository
from services.product import ProductService

BUILT_IN_SECTIONS = [
    (SectionName.FLASH_SALES, "Flash Sales", "Limited time discounts"),
    (SectionName.BEST_DEALS, "Best Deals", "Hand-picked offers"),
    (SectionName.NEW_ARRIVALS, "New Arrivals", "Freshly listed products"),
    (SectionName.TOP_TRENDING, "Top Trending", "What everyone is buying"),
]


class SectionService:

    @staticmethod
    async def seed_built_in(session: AsyncSession) -> int:
        """Create the built-in homepage sections that don't exist yet."""
        created = 0
        for order, (name, title, description) in enumerate(BUILT_IN_SECTIONS):
            if await SectionRepository.get_by_name(name.value, session) is None:
                await SectionRepository.create(Section(
                    name=name.value, title=title, description=description, display_order=order
                ), session)
                created += 1
        if created:
            await session_commit(session)
            logging.info(f"🧩 {created} built-in section(s) created")
        return created

    @staticmethod
    async def get_entity(name: str, session: AsyncSession) -> Section:
        section = await SectionRepository.get_by_name(name, session)
        if section is None:
            raise SectionNotFoundException(name)
        return section

    @staticmethod
    async def get_all(session: AsyncSession) -> list[SectionDTO]:
        return [await SectionRepository.to_dto(s, session) for s in await SectionRepository.get_all(session)]

    @staticmethod
    async def get_with_products(name: str, limit: int, sort: ProductSort,
                                session: AsyncSession) -> tuple[SectionDTO, list[ProductDTO]]:
        section = await SectionService.get_entity(name, session)
        products = await ProductService.get_section_products(name, limit, sort, session)
        return await SectionRepository.to_dto(section, session), products

    @staticmethod
    async def create(request: SectionCreateRequest, current_user: UserDTO, session: AsyncSession) -> SectionDTO:
        if await SectionRepository.get_by_name(request.name, session) is not None:
            raise DuplicateSectionException(request.name)
        section = await SectionRepository.create(Section(**request.model_dump()), session)
        await session_commit(session)
        logging.info(f"🧩 Section '{section.name}' created by admin {current_user.id}")
        return await SectionRepository.to_dto(section, session)

    @staticmethod
    async def add_product(name: str, product_id: int, current_user: UserDTO, session: AsyncSession) -> SectionDTO:
        section = await SectionService.get_entity(name, session)
        await ProductService.get_entity(product_id, session)
        if not await SectionRepository.has_product(section.id, product_id, session):
            await SectionRepository.add_product(section.id, product_id, session)
            await session_commit(session)
            logging.info(f"Product {product_id} added to section '{name}' by admin {current_user.id}")
        return await SectionRepository.to_dto(section, session)

    @staticmethod
    async def remove_product(name: str, product_id: int, current_user: UserDTO, session: AsyncSession) -> SectionDTO:
        section = await SectionService.get_entity(name, session)
        await SectionRepository.remove_product(section.id, product_id, session)
        await session_commit(session)
        logging.info(f"Product {product_id} removed from section '{name}' by admin {current_user.id}")
        return await SectionRepository.to_dto(section, session)

    @staticmethod
    async def delete(name: str, current_user: UserDTO, session: AsyncSession) -> None:
        section = await SectionService.get_entity(name, session)
        await SectionRepository.delete(section.id, session)
        await session_commit(session)
        logging.info(f"🗑️ Section '{name}' deleted by admin {current_user.id}")
