from .balance import TokenBalanceRepository
from .consume import TokenConsumptionRepository
from .transaction import TokenTransactionRepository

__all__ = ["TokenBalanceRepository", "TokenConsumptionRepository", "TokenTransactionRepository"]
