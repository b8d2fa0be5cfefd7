from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from models.address import AddressDTO, AddressRequest, AddressUpdateRequest
from models.cartItem import CartViewDTO, CartItemRequest, CartQuantityRequest
from models.product import ProductDTO
from models.user import UserDTO
from services.address import AddressService
from services.cart import CartService
from services.wishlist import WishlistService, RecentlyViewedService
from web.dependencies import get_session, get_current_user

cart_router = APIRouter(prefix="/cart", tags=["cart"])
wishlist_router = APIRouter(prefix="/wishlist", tags=["wishlist"])
recently_viewed_router = APIRouter(prefix="/recently-viewed", tags=["wishlist"])
address_router = APIRouter(prefix="/addresses", tags=["addresses"])


# === Cart ===

@cart_router.get("")
async def get_cart(current_user: UserDTO = Depends(get_current_user),
                   session: AsyncSession = Depends(get_session)) -> CartViewDTO:
    return await CartService.get_cart(current_user, session)


@cart_router.post("/items")
async def add_cart_item(payload: CartItemRequest,
                        current_user: UserDTO = Depends(get_current_user),
                        session: AsyncSession = Depends(get_session)) -> CartViewDTO:
    return await CartService.add_item(payload, current_user, session)


@cart_router.put("/items/{product_id}")
async def update_cart_item(product_id: int, payload: CartQuantityRequest,
                           current_user: UserDTO = Depends(get_current_user),
                           session: AsyncSession = Depends(get_session)) -> CartViewDTO:
    return await CartService.update_quantity(product_id, payload.quantity, current_user, session)


@cart_router.delete("/items/{product_id}")
async def remove_cart_item(product_id: int,
                           current_user: UserDTO = Depends(get_current_user),
                           session: AsyncSession = Depends(get_session)) -> CartViewDTO:
    return await CartService.remove_item(product_id, current_user, session)


@cart_router.delete("")
async def clear_cart(current_user: UserDTO = Depends(get_current_user),
                     session: AsyncSession = Depends(get_session)) -> CartViewDTO:
    return await CartService.clear(current_user, session)


# === Wishlist / recently viewed ===

@wishlist_router.get("")
async def get_wishlist(current_user: UserDTO = Depends(get_current_user),
                       session: AsyncSession = Depends(get_session)) -> list[ProductDTO]:
    return await WishlistService.get_wishlist(current_user, session)


@wishlist_router.post("/{product_id}")
async def add_to_wishlist(product_id: int,
                          current_user: UserDTO = Depends(get_current_user),
                          session: AsyncSession = Depends(get_session)) -> list[ProductDTO]:
    return await WishlistService.add(product_id, current_user, session)


@wishlist_router.delete("/{product_id}")
async def remove_from_wishlist(product_id: int,
                               current_user: UserDTO = Depends(get_current_user),
                               session: AsyncSession = Depends(get_session)) -> list[ProductDTO]:
    return await WishlistService.remove(product_id, current_user, session)


@recently_viewed_router.get("")
async def get_recently_viewed(current_user: UserDTO = Depends(get_current_user),
                              session: AsyncSession = Depends(get_session)) -> list[ProductDTO]:
    return await RecentlyViewedService.get_recently_viewed(current_user, session)


@recently_viewed_router.post("/{product_id}")
async def record_view(product_id: int,
                      current_user: UserDTO = Depends(get_current_user),
                      session: AsyncSession = Depends(get_session)) -> list[ProductDTO]:
    return await RecentlyViewedService.record_view(product_id, current_user, session)


# === Addresses ===

@address_router.get("")
async def list_addresses(current_user: UserDTO = Depends(get_current_user),
                         session: AsyncSession = Depends(get_session)) -> list[AddressDTO]:
    return await AddressService.get_all(current_user, session)


@address_router.post("", status_code=status.HTTP_201_CREATED)
async def create_address(payload: AddressRequest,
                         current_user: UserDTO = Depends(get_current_user),
                         session: AsyncSession = Depends(get_session)) -> AddressDTO:
    return await AddressService.create(payload, current_user, session)


@address_router.get("/{address_id}")
async def get_address(address_id: int,
                      current_user: UserDTO = Depends(get_current_user),
                      session: AsyncSession = Depends(get_session)) -> AddressDTO:
    return await AddressService.get(address_id, current_user, session)


@address_router.put("/{address_id}")
async def update_address(address_id: int, payload: AddressUpdateRequest,
                         current_user: UserDTO = Depends(get_current_user),
                         session: AsyncSession = Depends(get_session)) -> AddressDTO:
    return await AddressService.update(address_id, payload, current_user, session)


@address_router.delete("/{address_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_address(address_id: int,
                         current_user: UserDTO = Depends(get_current_user),
                         session: AsyncSession = Depends(get_session)) -> None:
    await AddressService.delete(address_id, current_user, session)
