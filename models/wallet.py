from datetime import datetime

from pydantic import BaseModel, Field
from sqlalchemy import Column, Integer, Float, String, ForeignKey, DateTime, CheckConstraint
from sqlalchemy import Enum as SQLEnum

from enums.currency import Currency
from enums.wallet_transaction_type import WalletTransactionType
from models.base import Base


class Wallet(Base):
    __tablename__ = 'wallets'

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey('users.id', ondelete="CASCADE"), nullable=False, unique=True)
    balance = Column(Float, nullable=False, default=0.0)
    currency = Column(SQLEnum(Currency), nullable=False, default=Currency.KES)
    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)

    __table_args__ = (
        CheckConstraint('balance >= 0', name='check_wallet_balance_positive'),
    )


class WalletTransaction(Base):
    __tablename__ = 'wallet_transactions'

    id = Column(Integer, primary_key=True)
    wallet_id = Column(Integer, ForeignKey('wallets.id', ondelete="CASCADE"), nullable=False, index=True)
    type = Column(SQLEnum(WalletTransactionType), nullable=False)
    amount = Column(Float, nullable=False)
    description = Column(String, nullable=True)
    reference = Column(String, nullable=True)  # e.g. "order:42"
    created_at = Column(DateTime, default=datetime.now, nullable=False)

    __table_args__ = (
        CheckConstraint('amount > 0', name='check_wallet_transaction_amount_positive'),
    )


class WalletDTO(BaseModel):
    id: int | None = None
    user_id: int | None = None
    balance: float | None = None
    currency: Currency | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class WalletTransactionDTO(BaseModel):
    id: int | None = None
    wallet_id: int | None = None
    type: WalletTransactionType | None = None
    amount: float | None = None
    description: str | None = None
    reference: str | None = None
    created_at: datetime | None = None


class WalletAmountRequest(BaseModel):
    amount: float = Field(gt=0)
    description: str | None = None
