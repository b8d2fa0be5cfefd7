from sqlalchemy.ext.asyncio import AsyncSession

from db import session_commit
from exceptions.address import AddressNotFoundException
from models.address import Address, AddressDTO, AddressRequest, AddressUpdateRequest
from models.user import UserDTO
from repositories.address import AddressRepository


class AddressService:

    @staticmethod
    async def _clear_default(user_id: int, keep_id: int | None, session: AsyncSession) -> None:
        for address in await AddressRepository.get_by_user_id(user_id, session):
            if address.id != keep_id and address.is_default:
                address.is_default = False

    @staticmethod
    async def create(request: AddressRequest, current_user: UserDTO, session: AsyncSession) -> AddressDTO:
        """The first address, or one flagged as default, becomes the only default."""
        existing = await AddressRepository.get_by_user_id(current_user.id, session)
        is_default = request.is_default or not existing
        address = await AddressRepository.create(Address(
            user_id=current_user.id,
            **request.model_dump(exclude={"is_default"}),
            is_default=is_default,
        ), session)
        if is_default:
            await AddressService._clear_default(current_user.id, address.id, session)
        await session_commit(session)
        return AddressDTO.model_validate(address, from_attributes=True)

    @staticmethod
    async def get_all(current_user: UserDTO, session: AsyncSession) -> list[AddressDTO]:
        addresses = await AddressRepository.get_by_user_id(current_user.id, session)
        return [AddressDTO.model_validate(a, from_attributes=True) for a in addresses]

    @staticmethod
    async def get(address_id: int, current_user: UserDTO, session: AsyncSession) -> AddressDTO:
        address = await AddressRepository.get_by_id(address_id, current_user.id, session)
        if address is None:
            raise AddressNotFoundException(address_id)
        return AddressDTO.model_validate(address, from_attributes=True)

    @staticmethod
    async def update(address_id: int, request: AddressUpdateRequest, current_user: UserDTO,
                     session: AsyncSession) -> AddressDTO:
        address = await AddressRepository.get_by_id(address_id, current_user.id, session)
        if address is None:
            raise AddressNotFoundException(address_id)
        for field, value in request.model_dump(exclude_unset=True, exclude_none=True).items():
            setattr(address, field, value)
        if request.is_default:
            await AddressService._clear_default(current_user.id, address.id, session)
        await session_commit(session)
        return AddressDTO.model_validate(address, from_attributes=True)

    @staticmethod
    async def delete(address_id: int, current_user: UserDTO, session: AsyncSession) -> None:
        address = await AddressRepository.get_by_id(address_id, current_user.id, session)
        if address is None:
            raise AddressNotFoundException(address_id)
        await AddressRepository.delete(address.id, session)
        await session_commit(session)
