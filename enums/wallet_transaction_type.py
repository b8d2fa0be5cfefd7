from enum import Enum


class WalletTransactionType(str, Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    REFUND = "refund"      # Buyer refund for a cancelled/refunded order
    PAYOUT = "payout"      # Escrow released to a supplier
