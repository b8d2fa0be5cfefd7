"""
Catalogue endpoints: categories, products, homepage sections.
"""

import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from enums.product_status import ProductStatus, ProductSort
from enums.role import Role
from models.category import CategoryDTO, CategoryCreateRequest, CategoryUpdateRequest
from models.product import ProductDTO, ProductCreateRequest, ProductUpdateRequest, HomepageSectionDTO
from models.section import SectionDTO, SectionCreateRequest, SectionProductRequest
from models.user import UserDTO
from services.category import CategoryService
from services.product import ProductService
from services.section import SectionService
from utils.pagination import PageDTO
from web.dependencies import (
    generate_correlation_id,
    get_session,
    get_optional_user,
    require_roles,
)

logger = logging.getLogger(__name__)

category_router = APIRouter(prefix="/categories", tags=["categories"])
product_router = APIRouter(prefix="/products", tags=["products"])
section_router = APIRouter(prefix="/sections", tags=["sections"])

admin_only = require_roles(Role.ADMIN)
supplier_or_admin = require_roles(Role.SUPPLIER, Role.ADMIN)


# === Categories ===

@category_router.get("")
async def list_categories(session: AsyncSession = Depends(get_session)) -> list[CategoryDTO]:
    return await CategoryService.get_all(session)


@category_router.get("/{id_or_slug}")
async def get_category(id_or_slug: str, session: AsyncSession = Depends(get_session)) -> CategoryDTO:
    return await CategoryService.get(int(id_or_slug) if id_or_slug.isdigit() else id_or_slug, session)


@category_router.post("", status_code=status.HTTP_201_CREATED)
async def create_category(payload: CategoryCreateRequest,
                          current_user: UserDTO = Depends(admin_only),
                          session: AsyncSession = Depends(get_session)) -> CategoryDTO:
    return await CategoryService.create(payload, current_user, session)


@category_router.put("/{category_id}")
async def update_category(category_id: int, payload: CategoryUpdateRequest,
                          current_user: UserDTO = Depends(admin_only),
                          session: AsyncSession = Depends(get_session)) -> CategoryDTO:
    return await CategoryService.update(category_id, payload, current_user, session)


@category_router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_category(category_id: int,
                          current_user: UserDTO = Depends(admin_only),
                          session: AsyncSession = Depends(get_session)) -> None:
    await CategoryService.delete(category_id, current_user, session)


# === Products ===

@product_router.get("")
async def list_products(page: int = Query(1, ge=1),
                        limit: int | None = Query(None, ge=1, le=100),
                        product_status: ProductStatus | None = Query(None, alias="status"),
                        category: str | None = None,
                        supplier_id: int | None = None,
                        brand: str | None = None,
                        min_price: float | None = Query(None, ge=0),
                        max_price: float | None = Query(None, ge=0),
                        search: str | None = None,
                        section: str | None = None,
                        in_stock: bool | None = None,
                        sort: ProductSort = ProductSort.LATEST,
                        current_user: UserDTO | None = Depends(get_optional_user),
                        session: AsyncSession = Depends(get_session)) -> PageDTO:
    return await ProductService.get_products(
        session, page=page, limit=limit, current_user=current_user, status=product_status,
        category=category, supplier_id=supplier_id, brand=brand, min_price=min_price,
        max_price=max_price, search=search, section=section, in_stock=in_stock, sort=sort,
    )


@product_router.get("/homepage")
async def homepage(limit: int = Query(8, ge=1, le=50),
                   session: AsyncSession = Depends(get_session)) -> list[HomepageSectionDTO]:
    return await ProductService.get_homepage(limit, session)


@product_router.get("/mine")
async def my_products(page: int = Query(1, ge=1), limit: int = Query(20, ge=1, le=100),
                      current_user: UserDTO = Depends(require_roles(Role.SUPPLIER)),
                      session: AsyncSession = Depends(get_session)) -> PageDTO:
    return await ProductService.get_my_products(current_user, page, limit, session)


@product_router.get("/{product_id}")
async def get_product(product_id: int,
                      current_user: UserDTO | None = Depends(get_optional_user),
                      session: AsyncSession = Depends(get_session)) -> ProductDTO:
    return await ProductService.get_product(product_id, session, current_user)


@product_router.get("/{product_id}/related")
async def related_products(product_id: int, limit: int = Query(8, ge=1, le=50),
                           session: AsyncSession = Depends(get_session)) -> list[ProductDTO]:
    return await ProductService.get_related(product_id, limit, session)


@product_router.post("", status_code=status.HTTP_201_CREATED)
async def create_product(payload: ProductCreateRequest,
                         current_user: UserDTO = Depends(require_roles(Role.SUPPLIER)),
                         session: AsyncSession = Depends(get_session)) -> ProductDTO:
    correlation_id = generate_correlation_id()
    product = await ProductService.create(payload, current_user, session)
    logger.info(f"[{correlation_id}] Product {product.id} created by user {current_user.id}")
    return product


@product_router.put("/{product_id}")
async def update_product(product_id: int, payload: ProductUpdateRequest,
                         current_user: UserDTO = Depends(supplier_or_admin),
                         session: AsyncSession = Depends(get_session)) -> ProductDTO:
    return await ProductService.update(product_id, payload, current_user, session)


@product_router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product(product_id: int,
                         current_user: UserDTO = Depends(supplier_or_admin),
                         session: AsyncSession = Depends(get_session)) -> None:
    await ProductService.delete(product_id, current_user, session)


@product_router.patch("/{product_id}/approve")
async def approve_product(product_id: int,
                          current_user: UserDTO = Depends(admin_only),
                          session: AsyncSession = Depends(get_session)) -> ProductDTO:
    return await ProductService.moderate(product_id, True, current_user, session)


@product_router.patch("/{product_id}/reject")
async def reject_product(product_id: int,
                         current_user: UserDTO = Depends(admin_only),
                         session: AsyncSession = Depends(get_session)) -> ProductDTO:
    return await ProductService.moderate(product_id, False, current_user, session)


# === Sections ===

@section_router.get("")
async def list_sections(session: AsyncSession = Depends(get_session)) -> list[SectionDTO]:
    return await SectionService.get_all(session)


@section_router.get("/{name}")
async def get_section(name: str, limit: int = Query(20, ge=1, le=100), sort: ProductSort = ProductSort.LATEST,
                      session: AsyncSession = Depends(get_session)) -> dict:
    section, products = await SectionService.get_with_products(name, limit, sort, session)
    return {"section": section, "products": products}


@section_router.post("", status_code=status.HTTP_201_CREATED)
async def create_section(payload: SectionCreateRequest,
                         current_user: UserDTO = Depends(admin_only),
                         session: AsyncSession = Depends(get_session)) -> SectionDTO:
    return await SectionService.create(payload, current_user, session)


@section_router.post("/{name}/products")
async def add_section_product(name: str, payload: SectionProductRequest,
                              current_user: UserDTO = Depends(admin_only),
                              session: AsyncSession = Depends(get_session)) -> SectionDTO:
    return await SectionService.add_product(name, payload.product_id, current_user, session)


@section_router.delete("/{name}/products/{product_id}")
async def remove_section_product(name: str, product_id: int,
                                 current_user: UserDTO = Depends(admin_only),
                                 session: AsyncSession = Depends(get_session)) -> SectionDTO:
    return await SectionService.remove_product(name, product_id, current_user, session)


@section_router.delete("/{name}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_section(name: str,
                         current_user: UserDTO = Depends(admin_only),
                         session: AsyncSession = Depends(get_session)) -> None:
    await SectionService.delete(name, current_user, session)
