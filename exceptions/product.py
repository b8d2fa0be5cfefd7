"""
Catalogue exceptions (products, categories, sections).
"""

from .base import MarketplaceException


class ProductException(MarketplaceException):
    """Base exception for catalogue errors."""
    pass


class ProductNotFoundException(ProductException):
    """Raised when product is not found (or not visible to the caller)."""

    def __init__(self, product_id: int):
        super().__init__(
            f"Product {product_id} not found",
            details={'product_id': product_id}
        )
        self.product_id = product_id


class ProductUnavailableException(ProductException):
    """Raised when a product exists but cannot be bought (pending, inactive or private)."""

    def __init__(self, product_id: int, status: str):
        super().__init__(
            f"Product {product_id} is not available for sale",
            details={'product_id': product_id, 'status': status}
        )
        self.product_id = product_id
        self.status = status


class InsufficientStockException(ProductException):
    """Raised when requested quantity exceeds known stock."""

    def __init__(self, product_id: int, requested: int, available: int):
        super().__init__(
            f"Not enough stock for product {product_id}: requested {requested}, available {available}",
            details={'product_id': product_id, 'requested': requested, 'available': available}
        )
        self.product_id = product_id
        self.requested = requested
        self.available = available


class CategoryNotFoundException(ProductException):
    """Raised when category is not found by id or slug."""

    def __init__(self, category: int | str):
        super().__init__(
            f"Category {category} not found",
            details={'category': category}
        )
        self.category = category


class CategoryInUseException(ProductException):
    """Raised when deleting a category that still has child categories."""

    def __init__(self, category_id: int, children: int):
        super().__init__(
            f"Category {category_id} has {children} subcategories and cannot be deleted",
            details={'category_id': category_id, 'children': children}
        )
        self.category_id = category_id
        self.children = children


class DuplicateCategoryException(ProductException):
    """Raised when a category name/slug already exists."""

    def __init__(self, name: str):
        super().__init__(
            f"Category '{name}' already exists",
            details={'name': name}
        )
        self.name = name


class SectionNotFoundException(ProductException):
    """Raised when a merchandising section is not found."""

    def __init__(self, section: int | str):
        super().__init__(
            f"Section {section} not found",
            details={'section': section}
        )
        self.section = section


class DuplicateSectionException(ProductException):
    """Raised when creating a section whose name is taken."""

    def __init__(self, name: str):
        super().__init__(
            f"Section '{name}' already exists",
            details={'name': name}
        )
        self.name = name
