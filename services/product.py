import logging
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

import config
from db import session_commit
from enums.product_status import ProductStatus, ProductVisibility, ProductSort
from enums.role import Role
from enums.supplier_status import SupplierStatus
from exceptions.base import PermissionDeniedException, ValidationException
from exceptions.product import ProductNotFoundException, SectionNotFoundException
from exceptions.supplier import SupplierNotFoundException, SupplierNotApprovedException
from models.product import Product, ProductDTO, ProductCreateRequest, ProductUpdateRequest, HomepageSectionDTO
from models.user import UserDTO
from repositories.product import ProductRepository
from repositories.section import SectionRepository
from repositories.supplier import SupplierRepository
from services.category import CategoryService
from utils.pagination import build_page, PageDTO

logger = logging.getLogger(__name__)


class ProductService:

    @staticmethod
    async def to_dtos(products: list[Product], session: AsyncSession) -> list[ProductDTO]:
        """DTOs with flash-sale aware effective price and section names."""
        now = datetime.now()
        section_names = await ProductRepository.get_section_names([p.id for p in products], session)
        dtos = []
        for product in products:
            dto = ProductDTO.model_validate(product, from_attributes=True)
            dto.effective_price = product.price_at(now)
            dto.sections = section_names.get(product.id, [])
            dtos.append(dto)
        return dtos

    @staticmethod
    async def get_entity(product_id: int, session: AsyncSession) -> Product:
        product = await ProductRepository.get_by_id(product_id, session)
        if product is None:
            raise ProductNotFoundException(product_id)
        return product

    @staticmethod
    async def _check_owner(product: Product, current_user: UserDTO, session: AsyncSession) -> None:
        if current_user.role == Role.ADMIN:
            return
        supplier = await SupplierRepository.get_by_user_id(current_user.id, session)
        if supplier is None or supplier.id != product.supplier_id:
            raise PermissionDeniedException(current_user.id, f"modify product {product.id}")

    @staticmethod
    async def _set_sections(product_id: int, names: list[str], session: AsyncSession) -> None:
        wanted = []
        for name in names:
            section = await SectionRepository.get_by_name(name, session)
            if section is None:
                raise SectionNotFoundException(name)
            wanted.append(section.id)
        for section in await SectionRepository.get_all(session):
            member = await SectionRepository.has_product(section.id, product_id, session)
            if section.id in wanted and not member:
                await SectionRepository.add_product(section.id, product_id, session)
            elif section.id not in wanted and member:
                await SectionRepository.remove_product(section.id, product_id, session)

    @staticmethod
    async def create(request: ProductCreateRequest, current_user: UserDTO, session: AsyncSession) -> ProductDTO:
        """New products wait for admin moderation (Pending, Private)."""
        supplier = await SupplierRepository.get_by_user_id(current_user.id, session)
        if supplier is None:
            raise SupplierNotFoundException(user_id=current_user.id)
        if supplier.status != SupplierStatus.APPROVED:
            raise SupplierNotApprovedException(supplier.id, supplier.status.value)
        await CategoryService.get_entity(request.category_id, session)

        fields = request.model_dump(exclude={"sections"}, exclude_none=True)
        product = await ProductRepository.create(Product(
            **fields,
            supplier_id=supplier.id,
            status=ProductStatus.PENDING,
            visibility=ProductVisibility.PRIVATE,
        ), session)
        await ProductService._set_sections(product.id, request.sections, session)
        await session_commit(session)
        logger.info(f"📦 Product {product.id} '{product.name}' created by supplier {supplier.id}, pending moderation")
        return (await ProductService.to_dtos([product], session))[0]

    @staticmethod
    async def update(product_id: int, request: ProductUpdateRequest, current_user: UserDTO,
                     session: AsyncSession) -> ProductDTO:
        product = await ProductService.get_entity(product_id, session)
        await ProductService._check_owner(product, current_user, session)

        changes = request.model_dump(exclude_unset=True, exclude={"sections"})
        if changes.get("category_id") is not None:
            await CategoryService.get_entity(changes["category_id"], session)

        price = changes.get("price", product.price)
        old_price = changes.get("old_price", product.old_price)
        if old_price is not None and price is not None and old_price < price:
            raise ValidationException("old_price", "old_price must be greater than or equal to price")
        start = changes.get("flash_sale_start", product.flash_sale_start)
        end = changes.get("flash_sale_end", product.flash_sale_end)
        if start is not None and end is not None and end <= start:
            raise ValidationException("flash_sale_end", "flash_sale_end must be after flash_sale_start")

        for field, value in changes.items():
            if value is None and field in ("name", "price", "description", "images", "free_shipping",
                                           "flash_sale_active", "flash_sale_discount_percentage"):
                continue
            setattr(product, field, value)
        if request.sections is not None:
            await ProductService._set_sections(product.id, request.sections, session)
        await session_commit(session)
        logger.info(f"📦 Product {product.id} updated by user {current_user.id}")
        return (await ProductService.to_dtos([product], session))[0]

    @staticmethod
    async def delete(product_id: int, current_user: UserDTO, session: AsyncSession) -> None:
        """Soft delete, order history keeps pointing at the product."""
        product = await ProductService.get_entity(product_id, session)
        await ProductService._check_owner(product, current_user, session)
        product.status = ProductStatus.INACTIVE
        product.visibility = ProductVisibility.PRIVATE
        await session_commit(session)
        logger.info(f"🗑️ Product {product.id} deactivated by user {current_user.id}")

    @staticmethod
    async def moderate(product_id: int, approve: bool, current_user: UserDTO, session: AsyncSession) -> ProductDTO:
        product = await ProductService.get_entity(product_id, session)
        if approve:
            product.status = ProductStatus.ACTIVE
            product.visibility = ProductVisibility.PUBLIC
        else:
            product.status = ProductStatus.INACTIVE
            product.visibility = ProductVisibility.PRIVATE
        await session_commit(session)
        logger.info(f"{'✅' if approve else '❌'} Product {product.id} {product.status.value} by admin {current_user.id}")
        return (await ProductService.to_dtos([product], session))[0]

    @staticmethod
    async def get_products(session: AsyncSession,
                           page: int = 1,
                           limit: int | None = None,
                           current_user: UserDTO | None = None,
                           status: ProductStatus | None = None,
                           category: str | None = None,
                           supplier_id: int | None = None,
                           brand: str | None = None,
                           min_price: float | None = None,
                           max_price: float | None = None,
                           search: str | None = None,
                           section: str | None = None,
                           in_stock: bool | None = None,
                           sort: ProductSort = ProductSort.LATEST) -> PageDTO:
        """
        Product listing. Public callers only see Active/Public products,
        admins see every status. A category filter includes its subcategories.
        """
        limit = limit or config.PAGE_ENTRIES
        category_ids = None
        if category is not None:
            root = await CategoryService.get_entity(category, session)
            category_ids = await CategoryService.get_tree_ids(root.id, session)
        public_only = current_user is None or current_user.role != Role.ADMIN
        products, count = await ProductRepository.search(
            session, page, limit,
            public_only=public_only,
            status=status,
            category_ids=category_ids,
            supplier_id=supplier_id,
            brand=brand,
            min_price=min_price,
            max_price=max_price,
            search=search,
            section_name=section,
            in_stock=in_stock,
            sort=sort,
        )
        return build_page(await ProductService.to_dtos(products, session), page, limit, count)

    @staticmethod
    async def get_my_products(current_user: UserDTO, page: int, limit: int, session: AsyncSession) -> PageDTO:
        supplier = await SupplierRepository.get_by_user_id(current_user.id, session)
        if supplier is None:
            raise SupplierNotFoundException(user_id=current_user.id)
        products, count = await ProductRepository.search(session, page, limit, public_only=False,
                                                         supplier_id=supplier.id)
        return build_page(await ProductService.to_dtos(products, session), page, limit, count)

    @staticmethod
    async def get_product(product_id: int, session: AsyncSession, current_user: UserDTO | None = None) -> ProductDTO:
        """Hidden products are visible only to admins and their own supplier."""
        product = await ProductService.get_entity(product_id, session)
        if product.status != ProductStatus.ACTIVE or product.visibility != ProductVisibility.PUBLIC:
            if current_user is None:
                raise ProductNotFoundException(product_id)
            try:
                await ProductService._check_owner(product, current_user, session)
            except PermissionDeniedException:
                raise ProductNotFoundException(product_id)
        return (await ProductService.to_dtos([product], session))[0]

    @staticmethod
    async def get_related(product_id: int, limit: int, session: AsyncSession) -> list[ProductDTO]:
        """Public products of the same category, newest first."""
        product = await ProductService.get_entity(product_id, session)
        products, _ = await ProductRepository.search(session, 1, limit,
                                                     category_ids=[product.category_id],
                                                     exclude_id=product.id)
        return await ProductService.to_dtos(products, session)

    @staticmethod
    async def get_section_products(section_name: str, limit: int, sort: ProductSort,
                                   session: AsyncSession) -> list[ProductDTO]:
        section = await SectionRepository.get_by_name(section_name, session)
        if section is None:
            raise SectionNotFoundException(section_name)
        products = await SectionRepository.get_public_products(section.id, limit, sort, session)
        return await ProductService.to_dtos(products, session)

    @staticmethod
    async def get_homepage(limit: int, session: AsyncSession) -> list[HomepageSectionDTO]:
        homepage = []
        for section in await SectionRepository.get_all(session):
            products = await SectionRepository.get_public_products(section.id, limit, ProductSort.LATEST, session)
            homepage.append(HomepageSectionDTO(
                name=section.name,
                title=section.title,
                products=await ProductService.to_dtos(products, session)
            ))
        return homepage

    @staticmethod
    async def end_expired_flash_sales(session: AsyncSession) -> int:
        """Switch off flash sales whose window has closed."""
        products = await ProductRepository.get_expired_flash_sales(datetime.now(), session)
        for product in products:
            product.flash_sale_active = False
        if products:
            await session_commit(session)
            logger.info(f"⚡ {len(products)} expired flash sale(s) ended")
        return len(products)
