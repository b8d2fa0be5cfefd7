import logging

from sqlalchemy.ext.asyncio import AsyncSession

from db import session_commit
from exceptions.base import ValidationException
from exceptions.product import CategoryNotFoundException, CategoryInUseException, DuplicateCategoryException
from models.category import Category, CategoryDTO, CategoryCreateRequest, CategoryUpdateRequest
from models.user import UserDTO
from repositories.category import CategoryRepository
from repositories.product import ProductRepository
from utils.slug import slugify


class CategoryService:

    @staticmethod
    async def get_entity(id_or_slug: int | str, session: AsyncSession) -> Category:
        if isinstance(id_or_slug, int) or str(id_or_slug).isdigit():
            category = await CategoryRepository.get_by_id(int(id_or_slug), session)
        else:
            category = await CategoryRepository.get_by_slug(id_or_slug, session)
        if category is None:
            raise CategoryNotFoundException(id_or_slug)
        return category

    @staticmethod
    async def _check_parent(category_id: int | None, parent_id: int | None, session: AsyncSession) -> None:
        """Parent must exist and must not be the category itself or one of its descendants."""
        if parent_id is None:
            return
        if parent_id == category_id:
            raise ValidationException("parent_category_id", "A category cannot be its own parent")
        parent = await CategoryRepository.get_by_id(parent_id, session)
        if parent is None:
            raise CategoryNotFoundException(parent_id)
        while category_id is not None and parent.parent_category_id is not None:
            if parent.parent_category_id == category_id:
                raise ValidationException("parent_category_id", "A category cannot be moved under its own subcategory")
            parent = await CategoryRepository.get_by_id(parent.parent_category_id, session)
            if parent is None:
                break

    @staticmethod
    async def create(request: CategoryCreateRequest, current_user: UserDTO, session: AsyncSession) -> CategoryDTO:
        name = request.name.strip()
        slug = slugify(name)
        if not slug:
            raise ValidationException("name", "Category name must contain letters or digits")
        if await CategoryRepository.get_by_name_or_slug(name, slug, session) is not None:
            raise DuplicateCategoryException(name)
        await CategoryService._check_parent(None, request.parent_category_id, session)
        category = await CategoryRepository.create(Category(
            name=name,
            slug=slug,
            parent_category_id=request.parent_category_id,
        ), session)
        await session_commit(session)
        logging.info(f"📁 Category {category.id} '{category.name}' created by admin {current_user.id}")
        return CategoryDTO.model_validate(category, from_attributes=True)

    @staticmethod
    async def update(category_id: int, request: CategoryUpdateRequest, current_user: UserDTO,
                     session: AsyncSession) -> CategoryDTO:
        category = await CategoryService.get_entity(category_id, session)
        changes = request.model_dump(exclude_unset=True)
        if "name" in changes and changes["name"] is not None:
            name = changes["name"].strip()
            slug = slugify(name)
            existing = await CategoryRepository.get_by_name_or_slug(name, slug, session)
            if existing is not None and existing.id != category.id:
                raise DuplicateCategoryException(name)
            category.name = name
            category.slug = slug
        if "parent_category_id" in changes:
            await CategoryService._check_parent(category.id, changes["parent_category_id"], session)
            category.parent_category_id = changes["parent_category_id"]
        await session_commit(session)
        logging.info(f"📁 Category {category.id} updated by admin {current_user.id}")
        return CategoryDTO.model_validate(category, from_attributes=True)

    @staticmethod
    async def delete(category_id: int, current_user: UserDTO, session: AsyncSession) -> None:
        category = await CategoryService.get_entity(category_id, session)
        children = await CategoryRepository.get_children_ids(category.id, session)
        if children:
            raise CategoryInUseException(category.id, len(children))
        if await ProductRepository.count_by_category(category.id, session) > 0:
            raise ValidationException("category", "Category still has products")
        await CategoryRepository.delete(category.id, session)
        await session_commit(session)
        logging.info(f"🗑️ Category {category_id} deleted by admin {current_user.id}")

    @staticmethod
    async def get_all(session: AsyncSession) -> list[CategoryDTO]:
        return await CategoryRepository.get_all(session)

    @staticmethod
    async def get(id_or_slug: int | str, session: AsyncSession) -> CategoryDTO:
        category = await CategoryService.get_entity(id_or_slug, session)
        return CategoryDTO.model_validate(category, from_attributes=True)

    @staticmethod
    async def get_tree_ids(category_id: int, session: AsyncSession) -> list[int]:
        """The category and all its descendants."""
        ids = [category_id]
        queue = [category_id]
        while queue:
            children = await CategoryRepository.get_children_ids(queue.pop(), session)
            for child_id in children:
                if child_id not in ids:
                    ids.append(child_id)
                    queue.append(child_id)
        return ids
