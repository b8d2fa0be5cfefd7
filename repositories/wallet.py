from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from db import session_execute, session_flush
from models.wallet import Wallet, WalletTransaction, WalletDTO
from utils.pagination import page_offset


class WalletRepository:
    @staticmethod
    async def get_by_user_id(user_id: int, session: AsyncSession) -> Wallet | None:
        stmt = select(Wallet).where(Wallet.user_id == user_id)
        wallet = await session_execute(stmt, session)
        return wallet.scalar()

    @staticmethod
    async def create(wallet: Wallet, session: AsyncSession) -> Wallet:
        session.add(wallet)
        await session_flush(session)
        return wallet

    @staticmethod
    async def add_transaction(transaction: WalletTransaction, session: AsyncSession) -> WalletTransaction:
        session.add(transaction)
        await session_flush(session)
        return transaction

    @staticmethod
    async def get_transactions(wallet_id: int, session: AsyncSession) -> list[WalletTransaction]:
        stmt = (select(WalletTransaction)
                .where(WalletTransaction.wallet_id == wallet_id)
                .order_by(WalletTransaction.created_at.desc(), WalletTransaction.id.desc()))
        transactions = await session_execute(stmt, session)
        return list(transactions.scalars().all())

    @staticmethod
    async def get_paginated(page: int, limit: int, session: AsyncSession) -> list[WalletDTO]:
        stmt = select(Wallet).order_by(Wallet.id).limit(limit).offset(page_offset(page, limit))
        wallets = await session_execute(stmt, session)
        return [WalletDTO.model_validate(w, from_attributes=True) for w in wallets.scalars().all()]

    @staticmethod
    async def count(session: AsyncSession) -> int:
        count = await session_execute(select(func.count(Wallet.id)), session)
        return count.scalar_one()
