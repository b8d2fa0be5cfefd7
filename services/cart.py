import logging
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from db import session_commit
from enums.product_status import ProductStatus, ProductVisibility
from exceptions.cart import CartItemNotFoundException, InvalidQuantityException
from exceptions.product import ProductNotFoundException, ProductUnavailableException, InsufficientStockException
from models.cartItem import CartItem, CartItemRequest, CartLineDTO, CartViewDTO
from models.product import Product
from models.user import UserDTO
from repositories.cart import CartRepository
from repositories.product import ProductRepository


class CartService:

    @staticmethod
    async def _sellable_product(product_id: int, quantity: int, session: AsyncSession) -> Product:
        product = await ProductRepository.get_by_id(product_id, session)
        if product is None:
            raise ProductNotFoundException(product_id)
        if product.status != ProductStatus.ACTIVE or product.visibility != ProductVisibility.PUBLIC:
            raise ProductUnavailableException(product_id, product.status.value)
        if product.stock is not None and product.stock < quantity:
            raise InsufficientStockException(product_id, quantity, product.stock)
        return product

    @staticmethod
    async def get_cart(current_user: UserDTO, session: AsyncSession) -> CartViewDTO:
        """Cart lines priced with the current effective price."""
        cart = await CartRepository.get_or_create(current_user.id, session)
        items = await CartRepository.get_items(cart.id, session)
        products = await ProductRepository.get_by_ids([item.product_id for item in items], session)
        now = datetime.now()
        lines = []
        for item in items:
            product = products.get(item.product_id)
            if product is None:
                continue
            unit_price = product.price_at(now)
            lines.append(CartLineDTO(
                product_id=product.id,
                name=product.name,
                supplier_id=product.supplier_id,
                unit_price=unit_price,
                quantity=item.quantity,
                line_total=round(unit_price * item.quantity, 2),
                stock=product.stock,
            ))
        await session_commit(session)
        return CartViewDTO(
            items=lines,
            subtotal=round(sum(line.line_total for line in lines), 2),
            item_count=sum(line.quantity for line in lines),
        )

    @staticmethod
    async def add_item(request: CartItemRequest, current_user: UserDTO, session: AsyncSession) -> CartViewDTO:
        """Adding a product already in the cart merges the quantities."""
        cart = await CartRepository.get_or_create(current_user.id, session)
        cart_item = await CartRepository.get_item(cart.id, request.product_id, session)
        quantity = request.quantity + (cart_item.quantity if cart_item else 0)
        await CartService._sellable_product(request.product_id, quantity, session)
        if cart_item is None:
            await CartRepository.add_item(CartItem(cart_id=cart.id, product_id=request.product_id,
                                                   quantity=quantity), session)
        else:
            cart_item.quantity = quantity
        await session_commit(session)
        logging.info(f"🛒 User {current_user.id} added product {request.product_id} x{request.quantity} to cart")
        return await CartService.get_cart(current_user, session)

    @staticmethod
    async def update_quantity(product_id: int, quantity: int, current_user: UserDTO,
                              session: AsyncSession) -> CartViewDTO:
        if quantity < 0:
            raise InvalidQuantityException(quantity)
        cart = await CartRepository.get_or_create(current_user.id, session)
        cart_item = await CartRepository.get_item(cart.id, product_id, session)
        if cart_item is None:
            raise CartItemNotFoundException(product_id, current_user.id)
        if quantity == 0:
            await CartRepository.remove_item(cart.id, product_id, session)
        else:
            await CartService._sellable_product(product_id, quantity, session)
            cart_item.quantity = quantity
        await session_commit(session)
        return await CartService.get_cart(current_user, session)

    @staticmethod
    async def remove_item(product_id: int, current_user: UserDTO, session: AsyncSession) -> CartViewDTO:
        cart = await CartRepository.get_or_create(current_user.id, session)
        if await CartRepository.get_item(cart.id, product_id, session) is None:
            raise CartItemNotFoundException(product_id, current_user.id)
        await CartRepository.remove_item(cart.id, product_id, session)
        await session_commit(session)
        return await CartService.get_cart(current_user, session)

    @staticmethod
    async def clear(current_user: UserDTO, session: AsyncSession) -> CartViewDTO:
        cart = await CartRepository.get_or_create(current_user.id, session)
        await CartRepository.clear(cart.id, session)
        await session_commit(session)
        return CartViewDTO()
