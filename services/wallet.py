import logging

from sqlalchemy.ext.asyncio import AsyncSession

import config
from db import session_commit
from enums.wallet_transaction_type import WalletTransactionType
from exceptions.wallet import InsufficientBalanceException, WalletNotFoundException
from models.user import UserDTO
from models.wallet import Wallet, WalletDTO, WalletTransaction, WalletTransactionDTO, WalletAmountRequest
from repositories.wallet import WalletRepository
from utils.pagination import build_page, PageDTO

logger = logging.getLogger(__name__)


class WalletService:

    @staticmethod
    async def get_or_create(user_id: int, session: AsyncSession) -> Wallet:
        wallet = await WalletRepository.get_by_user_id(user_id, session)
        if wallet is None:
            wallet = await WalletRepository.create(Wallet(user_id=user_id, balance=0.0, currency=config.CURRENCY),
                                                   session)
            logger.info(f"👛 Wallet created for user {user_id}")
        return wallet

    @staticmethod
    async def credit(user_id: int, amount: float, transaction_type: WalletTransactionType,
                     description: str, reference: str | None, session: AsyncSession) -> WalletTransaction:
        """
        Add funds to the user's wallet and record the transaction.

        Does not commit: callers credit inside their own transaction
        (refunds, escrow payouts) so balance and order state change together.
        """
        wallet = await WalletService.get_or_create(user_id, session)
        old_balance = wallet.balance
        wallet.balance = round(wallet.balance + amount, 2)
        transaction = await WalletRepository.add_transaction(
            WalletTransaction(wallet_id=wallet.id, type=transaction_type, amount=round(amount, 2),
                              description=description, reference=reference),
            session
        )
        logger.info(f"💰 WALLET_CREDIT: User {user_id} {old_balance:.2f} + {amount:.2f} = {wallet.balance:.2f} "
                    f"({transaction_type.value}, ref={reference})")
        return transaction

    @staticmethod
    async def debit(user_id: int, amount: float, transaction_type: WalletTransactionType,
                    description: str, reference: str | None, session: AsyncSession) -> WalletTransaction:
        wallet = await WalletRepository.get_by_user_id(user_id, session)
        if wallet is None:
            raise WalletNotFoundException(user_id)
        if wallet.balance < amount:
            raise InsufficientBalanceException(user_id, amount, wallet.balance)
        old_balance = wallet.balance
        wallet.balance = round(wallet.balance - amount, 2)
        transaction = await WalletRepository.add_transaction(
            WalletTransaction(wallet_id=wallet.id, type=transaction_type, amount=round(amount, 2),
                              description=description, reference=reference),
            session
        )
        logger.info(f"💸 WALLET_DEBIT: User {user_id} {old_balance:.2f} - {amount:.2f} = {wallet.balance:.2f} "
                    f"({transaction_type.value}, ref={reference})")
        return transaction

    @staticmethod
    async def get_wallet(current_user: UserDTO, session: AsyncSession) -> WalletDTO:
        wallet = await WalletService.get_or_create(current_user.id, session)
        await session_commit(session)
        return WalletDTO.model_validate(wallet, from_attributes=True)

    @staticmethod
    async def deposit(request: WalletAmountRequest, current_user: UserDTO, session: AsyncSession) -> WalletDTO:
        await WalletService.credit(current_user.id, request.amount, WalletTransactionType.DEPOSIT,
                                   request.description or "Wallet deposit", None, session)
        await session_commit(session)
        wallet = await WalletRepository.get_by_user_id(current_user.id, session)
        return WalletDTO.model_validate(wallet, from_attributes=True)

    @staticmethod
    async def withdraw(request: WalletAmountRequest, current_user: UserDTO, session: AsyncSession) -> WalletDTO:
        await WalletService.debit(current_user.id, request.amount, WalletTransactionType.WITHDRAWAL,
                                  request.description or "Wallet withdrawal", None, session)
        await session_commit(session)
        wallet = await WalletRepository.get_by_user_id(current_user.id, session)
        return WalletDTO.model_validate(wallet, from_attributes=True)

    @staticmethod
    async def get_transactions(current_user: UserDTO, session: AsyncSession) -> list[WalletTransactionDTO]:
        wallet = await WalletRepository.get_by_user_id(current_user.id, session)
        if wallet is None:
            return []
        transactions = await WalletRepository.get_transactions(wallet.id, session)
        return [WalletTransactionDTO.model_validate(t, from_attributes=True) for t in transactions]

    @staticmethod
    async def list_wallets(page: int, limit: int, session: AsyncSession) -> PageDTO:
        wallets = await WalletRepository.get_paginated(page, limit, session)
        count = await WalletRepository.count(session)
        return build_page(wallets, page, limit, count)
