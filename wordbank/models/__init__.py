from .balance import UserTokenBalance, UserTokenBalanceCreate, UserTokenBalanceRead
from .consume import (
    ConsumptionSource,
    TokenConsumptionRecord,
    TokenConsumptionRecordCreate,
    TokenConsumptionRecordRead,
)
from .transaction import TokenTransaction, TokenTransactionCreate, TokenTransactionRead, TransactionType

__all__ = [
    "ConsumptionSource",
    "TokenConsumptionRecord",
    "TokenConsumptionRecordCreate",
    "TokenConsumptionRecordRead",
    "TokenTransaction",
    "TokenTransactionCreate",
    "TokenTransactionRead",
    "TransactionType",
    "UserTokenBalance",
    "UserTokenBalanceCreate",
    "UserTokenBalanceRead",
]
