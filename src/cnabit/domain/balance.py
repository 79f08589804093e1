"""Store balance domain service."""

from typing import Iterable, Optional
from uuid import UUID

from cnabit.database.base import Database
from cnabit.domain.entities import StoreBalance, Transaction, TransactionType
from cnabit.domain.errors import NotFoundError, store_not_found, transaction_type_not_found


class BalanceService:
    """Service for signed amounts and store balances.

    The sign of an amount always comes from the transaction type lookup;
    stored amounts are unsigned.
    """

    def __init__(self, db: Database):
        """Initialize balance service.

        Args:
            db: Database instance
        """
        self.db = db
        self._types: Optional[dict[str, TransactionType]] = None

    async def _type_for(self, type_code: str) -> TransactionType:
        if self._types is None:
            self._types = {t.type_code: t for t in await self.db.transaction_types.list_types()}
        transaction_type = self._types.get(type_code)
        if transaction_type is None:
            raise NotFoundError(transaction_type_not_found(type_code))
        return transaction_type

    async def signed_amount(self, transaction: Transaction) -> int:
        """Get the amount of a transaction with its direction applied.

        Args:
            transaction: Transaction entity

        Returns:
            Positive amount for credits, negative for debits

        Raises:
            NotFoundError: If the transaction type code is unknown
        """
        transaction_type = await self._type_for(transaction.type_code)
        return transaction.amount * transaction_type.sign_multiplier

    async def calculate_balance(self, transactions: Iterable[Transaction]) -> int:
        """Sum the signed amounts of transactions (in centavos)."""
        total = 0
        for transaction in transactions:
            total += await self.signed_amount(transaction)
        return total

    async def list_store_balances(self) -> list[StoreBalance]:
        """List every store with its balance, ordered by store name."""
        return await self.db.stores.list_balances()

    async def get_store_balance(self, store_id: UUID) -> StoreBalance:
        """Get the balance of one store.

        Raises:
            NotFoundError: If the store does not exist
        """
        balance = await self.db.stores.get_balance(store_id)
        if balance is None:
            raise NotFoundError(store_not_found(store_id))
        return balance
