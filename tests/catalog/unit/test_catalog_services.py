"""
Unit Tests: Catalogue (CategoryService, ProductService, SectionService)

- Category slugs, duplicates, parent cycles and delete guards
- Product moderation lifecycle and owner checks
- Listing filters (category tree, price range, search) and visibility
- Homepage sections
"""

from datetime import datetime, timedelta

import pytest

from conftest import as_dto
from enums.product_status import ProductSort, ProductStatus, ProductVisibility
from enums.role import Role
from enums.section_name import SectionName
from enums.supplier_status import SupplierStatus
from exceptions.base import PermissionDeniedException, ValidationException
from exceptions.product import (
    CategoryInUseException,
    DuplicateCategoryException,
    ProductNotFoundException,
    SectionNotFoundException,
)
from exceptions.supplier import SupplierNotApprovedException
from models.category import CategoryCreateRequest, CategoryUpdateRequest
from models.product import ProductCreateRequest, ProductUpdateRequest
from repositories.product import ProductRepository
from repositories.user import UserRepository
from services.category import CategoryService
from services.product import ProductService
from services.section import SectionService
from utils.slug import slugify


@pytest.mark.parametrize("name,slug", [
    ("Home & Garden", "home-garden"),
    ("  Phones  ", "phones"),
    ("Café Supplies", "cafe-supplies"),
    ("kids_toys", "kids-toys"),
])
def test_slugify(name, slug):
    assert slugify(name) == slug


class TestCategories:

    @pytest.mark.asyncio
    async def test_create_with_slug(self, test_session, make_user):
        admin = await make_user(role=Role.ADMIN)
        category = await CategoryService.create(CategoryCreateRequest(name=" Home & Garden "), as_dto(admin),
                                                test_session)
        assert category.name == "Home & Garden"
        assert category.slug == "home-garden"
        assert (await CategoryService.get("home-garden", test_session)).id == category.id

    @pytest.mark.asyncio
    async def test_duplicate_slug_rejected(self, test_session, make_user):
        admin = await make_user(role=Role.ADMIN)
        await CategoryService.create(CategoryCreateRequest(name="Phones"), as_dto(admin), test_session)
        with pytest.raises(DuplicateCategoryException):
            await CategoryService.create(CategoryCreateRequest(name="phones"), as_dto(admin), test_session)

    @pytest.mark.asyncio
    async def test_cannot_move_under_own_subcategory(self, test_session, make_user, make_category):
        admin = await make_user(role=Role.ADMIN)
        root = await make_category("Electronics")
        child = await make_category("Phones", parent_category_id=root.id)
        grandchild = await make_category("Android", parent_category_id=child.id)

        with pytest.raises(ValidationException):
            await CategoryService.update(root.id, CategoryUpdateRequest(parent_category_id=grandchild.id),
                                         as_dto(admin), test_session)
        with pytest.raises(ValidationException):
            await CategoryService.update(root.id, CategoryUpdateRequest(parent_category_id=root.id),
                                         as_dto(admin), test_session)

    @pytest.mark.asyncio
    async def test_tree_ids(self, test_session, make_category):
        root = await make_category("Electronics")
        child = await make_category("Phones", parent_category_id=root.id)
        grandchild = await make_category("Android", parent_category_id=child.id)
        await make_category("Books")

        assert sorted(await CategoryService.get_tree_ids(root.id, test_session)) == sorted(
            [root.id, child.id, grandchild.id]
        )

    @pytest.mark.asyncio
    async def test_delete_guards(self, test_session, make_user, make_category, make_supplier, make_product):
        admin = await make_user(role=Role.ADMIN)
        root = await make_category("Electronics")
        child = await make_category("Phones", parent_category_id=root.id)
        supplier = await make_supplier()
        await make_product(supplier, category=child)

        with pytest.raises(CategoryInUseException):
            await CategoryService.delete(root.id, as_dto(admin), test_session)
        with pytest.raises(ValidationException):
            await CategoryService.delete(child.id, as_dto(admin), test_session)


class TestProductLifecycle:

    @pytest.mark.asyncio
    async def test_new_product_waits_for_moderation(self, test_session, make_supplier, make_category):
        supplier = await make_supplier()
        owner = await UserRepository.get_by_id(supplier.user_id, test_session)
        category = await make_category()

        product = await ProductService.create(ProductCreateRequest(
            name="Phone", category_id=category.id, price=1000, old_price=1200, stock=3,
        ), as_dto(owner), test_session)

        assert product.status == ProductStatus.PENDING
        assert product.visibility == ProductVisibility.PRIVATE
        with pytest.raises(ProductNotFoundException):
            await ProductService.get_product(product.id, test_session)
        # The owner still sees it
        assert (await ProductService.get_product(product.id, test_session, as_dto(owner))).name == "Phone"

    @pytest.mark.asyncio
    async def test_unapproved_supplier_cannot_list(self, test_session, make_supplier, make_category):
        supplier = await make_supplier(status=SupplierStatus.PENDING)
        owner = await UserRepository.get_by_id(supplier.user_id, test_session)
        category = await make_category()

        with pytest.raises(SupplierNotApprovedException):
            await ProductService.create(ProductCreateRequest(name="Phone", category_id=category.id, price=10),
                                        as_dto(owner), test_session)

    def test_old_price_below_price_rejected(self):
        with pytest.raises(ValueError):
            ProductCreateRequest(name="Phone", category_id=1, price=1000, old_price=900)

    @pytest.mark.asyncio
    async def test_moderation(self, test_session, make_user, make_supplier, make_product):
        admin = await make_user(role=Role.ADMIN)
        supplier = await make_supplier()
        product = await make_product(supplier, status=ProductStatus.PENDING, visibility=ProductVisibility.PRIVATE)

        approved = await ProductService.moderate(product.id, True, as_dto(admin), test_session)

        assert approved.status == ProductStatus.ACTIVE
        assert approved.visibility == ProductVisibility.PUBLIC

    @pytest.mark.asyncio
    async def test_update_by_stranger_denied(self, test_session, make_user, make_supplier, make_product):
        supplier = await make_supplier()
        product = await make_product(supplier)
        other_supplier = await make_supplier()
        stranger = await UserRepository.get_by_id(other_supplier.user_id, test_session)

        with pytest.raises(PermissionDeniedException):
            await ProductService.update(product.id, ProductUpdateRequest(price=1), as_dto(stranger), test_session)

    @pytest.mark.asyncio
    async def test_update_checks_old_price_against_current_price(self, test_session, make_supplier, make_product):
        supplier = await make_supplier()
        owner = await UserRepository.get_by_id(supplier.user_id, test_session)
        product = await make_product(supplier, price=1000.0)

        with pytest.raises(ValidationException):
            await ProductService.update(product.id, ProductUpdateRequest(old_price=500), as_dto(owner), test_session)

    @pytest.mark.asyncio
    async def test_delete_is_soft(self, test_session, make_supplier, make_product):
        supplier = await make_supplier()
        owner = await UserRepository.get_by_id(supplier.user_id, test_session)
        product = await make_product(supplier)

        await ProductService.delete(product.id, as_dto(owner), test_session)

        stored = await ProductRepository.get_by_id(product.id, test_session)
        assert stored is not None
        assert stored.status == ProductStatus.INACTIVE
        assert stored.visibility == ProductVisibility.PRIVATE


class TestListing:

    @pytest.mark.asyncio
    async def test_category_filter_includes_subcategories(self, test_session, make_category, make_supplier,
                                                          make_product):
        root = await make_category("Electronics")
        child = await make_category("Phones", parent_category_id=root.id)
        books = await make_category("Books")
        supplier = await make_supplier()
        await make_product(supplier, name="Laptop", category=root)
        await make_product(supplier, name="Phone", category=child)
        await make_product(supplier, name="Novel", category=books)

        page = await ProductService.get_products(test_session, category="electronics")

        assert page.total == 2
        assert sorted(p.name for p in page.items) == ["Laptop", "Phone"]

    @pytest.mark.asyncio
    async def test_price_range_and_sort(self, test_session, make_supplier, make_product):
        supplier = await make_supplier()
        await make_product(supplier, name="Cheap", price=100.0)
        await make_product(supplier, name="Mid", price=500.0)
        await make_product(supplier, name="Pricey", price=5000.0)

        page = await ProductService.get_products(test_session, min_price=100, max_price=1000,
                                                 sort=ProductSort.PRICE_HIGH_LOW)

        assert [p.name for p in page.items] == ["Mid", "Cheap"]

    @pytest.mark.asyncio
    async def test_search_by_name(self, test_session, make_supplier, make_product):
        supplier = await make_supplier()
        await make_product(supplier, name="Samsung Galaxy")
        await make_product(supplier, name="iPhone")

        page = await ProductService.get_products(test_session, search="galaxy")

        assert [p.name for p in page.items] == ["Samsung Galaxy"]

    @pytest.mark.asyncio
    async def test_admin_sees_pending_products(self, test_session, make_user, make_supplier, make_product):
        admin = await make_user(role=Role.ADMIN)
        supplier = await make_supplier()
        await make_product(supplier, name="Live")
        await make_product(supplier, name="Waiting", status=ProductStatus.PENDING,
                           visibility=ProductVisibility.PRIVATE)

        assert (await ProductService.get_products(test_session)).total == 1
        assert (await ProductService.get_products(test_session, current_user=as_dto(admin))).total == 2

    @pytest.mark.asyncio
    async def test_product_read_carries_flash_sale_price(self, test_session, make_supplier, make_product):
        supplier = await make_supplier()
        now = datetime.now()
        product = await make_product(supplier, price=2000.0, flash_sale_active=True,
                                     flash_sale_discount_percentage=10,
                                     flash_sale_start=now - timedelta(hours=1),
                                     flash_sale_end=now + timedelta(hours=1))
        plain = await make_product(supplier, price=500.0)

        dto = await ProductService.get_product(product.id, test_session)
        page = await ProductService.get_products(test_session, sort=ProductSort.PRICE_LOW_HIGH)

        assert dto.price == 2000.0
        assert dto.effective_price == 1800.0
        assert {p.id: p.effective_price for p in page.items} == {plain.id: 500.0, product.id: 1800.0}

    @pytest.mark.asyncio
    async def test_related_products_share_category(self, test_session, make_category, make_supplier, make_product):
        phones = await make_category("Phones")
        books = await make_category("Books")
        supplier = await make_supplier()
        product = await make_product(supplier, name="Galaxy", category=phones)
        await make_product(supplier, name="Pixel", category=phones)
        await make_product(supplier, name="Hidden", category=phones, status=ProductStatus.PENDING,
                           visibility=ProductVisibility.PRIVATE)
        await make_product(supplier, name="Novel", category=books)

        related = await ProductService.get_related(product.id, 10, test_session)

        assert [p.name for p in related] == ["Pixel"]

    @pytest.mark.asyncio
    async def test_paging(self, test_session, make_supplier, make_product):
        supplier = await make_supplier()
        for i in range(5):
            await make_product(supplier, name=f"Product {i}")

        page = await ProductService.get_products(test_session, page=3, limit=2)

        assert page.total == 5
        assert page.total_pages == 3
        assert len(page.items) == 1


class TestSections:

    @pytest.mark.asyncio
    async def test_seed_is_idempotent(self, test_session):
        assert await SectionService.seed_built_in(test_session) == 4
        assert await SectionService.seed_built_in(test_session) == 0
        names = [s.name for s in await SectionService.get_all(test_session)]
        assert SectionName.FLASH_SALES.value in names

    @pytest.mark.asyncio
    async def test_homepage_only_lists_public_products(self, test_session, make_user, make_supplier, make_product):
        admin = await make_user(role=Role.ADMIN)
        await SectionService.seed_built_in(test_session)
        supplier = await make_supplier()
        live = await make_product(supplier, name="Live")
        hidden = await make_product(supplier, name="Hidden", status=ProductStatus.PENDING,
                                    visibility=ProductVisibility.PRIVATE)
        await SectionService.add_product(SectionName.BEST_DEALS.value, live.id, as_dto(admin), test_session)
        await SectionService.add_product(SectionName.BEST_DEALS.value, hidden.id, as_dto(admin), test_session)

        homepage = {s.name: s for s in await ProductService.get_homepage(8, test_session)}

        assert [p.name for p in homepage[SectionName.BEST_DEALS.value].products] == ["Live"]
        assert homepage[SectionName.BEST_DEALS.value].products[0].sections == [SectionName.BEST_DEALS.value]

    @pytest.mark.asyncio
    async def test_unknown_section(self, test_session):
        with pytest.raises(SectionNotFoundException):
            await ProductService.get_section_products("Nope", 8, ProductSort.LATEST, test_session)
