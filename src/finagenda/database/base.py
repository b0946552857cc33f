"""Abstract database interface."""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Optional

# Import entities directly to avoid circular import through domain/__init__.py
from finagenda.domain.entities import (
    CardInstallment,
    CreditCard,
    DebtAccount,
    LedgerEntry,
    Subscription,
)


class Database(ABC):
    """Abstract database interface for finagenda.

    Records arrive with their ids already minted by the domain layer.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Ledger entry operations
    @abstractmethod
    def create_entry(self, entry: LedgerEntry) -> None:
        """Store a new ledger entry after every existing one."""
        pass

    @abstractmethod
    def update_entry(self, entry: LedgerEntry) -> None:
        """Overwrite a stored ledger entry, partial payments included."""
        pass

    @abstractmethod
    def delete_entry(self, entry_id: str) -> None:
        """Delete a ledger entry."""
        pass

    @abstractmethod
    def get_entry(self, entry_id: str) -> Optional[LedgerEntry]:
        """Get ledger entry by ID."""
        pass

    @abstractmethod
    def list_entries(
        self, year: Optional[int] = None, month: Optional[int] = None
    ) -> list[LedgerEntry]:
        """List ledger entries in ledger order, optionally for one year or month."""
        pass

    # Credit card operations
    @abstractmethod
    def create_card(self, card: CreditCard) -> None:
        """Store a new credit card."""
        pass

    @abstractmethod
    def get_card(self, card_id: str) -> Optional[CreditCard]:
        """Get credit card by ID."""
        pass

    @abstractmethod
    def list_cards(self) -> list[CreditCard]:
        """List all credit cards."""
        pass

    @abstractmethod
    def delete_card(self, card_id: str) -> None:
        """Delete a credit card and its installments."""
        pass

    # Card installment operations
    @abstractmethod
    def create_card_installments(self, installments: list[CardInstallment]) -> None:
        """Store the installments of one purchase."""
        pass

    @abstractmethod
    def list_card_installments(self, card_id: Optional[str] = None) -> list[CardInstallment]:
        """List card installments, optionally for one card."""
        pass

    # Subscription operations
    @abstractmethod
    def create_subscription(self, subscription: Subscription) -> None:
        """Store a new subscription."""
        pass

    @abstractmethod
    def update_subscription(self, subscription: Subscription) -> None:
        """Overwrite a stored subscription."""
        pass

    @abstractmethod
    def get_subscription(self, subscription_id: str) -> Optional[Subscription]:
        """Get subscription by ID."""
        pass

    @abstractmethod
    def list_subscriptions(self) -> list[Subscription]:
        """List all subscriptions."""
        pass

    # Debt account operations
    @abstractmethod
    def create_debt(self, debt: DebtAccount) -> None:
        """Store a new debt account."""
        pass

    @abstractmethod
    def update_debt(self, debt: DebtAccount) -> None:
        """Overwrite a stored debt account, history included."""
        pass

    @abstractmethod
    def get_debt(self, debt_id: str) -> Optional[DebtAccount]:
        """Get debt account by ID."""
        pass

    @abstractmethod
    def list_debts(self) -> list[DebtAccount]:
        """List all debt accounts."""
        pass

    # Settings
    @abstractmethod
    def get_starting_balance(self) -> Decimal:
        """Balance before the first ledger entry."""
        pass

    @abstractmethod
    def set_starting_balance(self, value: Decimal) -> None:
        """Set the balance before the first ledger entry."""
        pass
