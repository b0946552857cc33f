"""SQLAlchemy models for the finagenda database."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Date,
    Numeric,
    Boolean,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


class LedgerEntry(Base):
    """Ledger entry model."""

    __tablename__ = "ledger_entries"

    id = Column(String, primary_key=True)
    position = Column(Integer, nullable=False, index=True)
    day = Column(Integer, nullable=False)
    month = Column(Integer, nullable=False)
    year = Column(Integer, nullable=False)
    kind = Column(String, nullable=False)
    category = Column(String, nullable=False)
    sub_category = Column(String, nullable=True)
    description = Column(String, nullable=False, default="")
    amount = Column(Numeric(12, 2), nullable=False)
    completed = Column(Boolean, default=False, nullable=False)
    is_fixed = Column(Boolean, default=False, nullable=False)
    fixed_series_id = Column(String, nullable=True, index=True)
    installment_id = Column(String, nullable=True, index=True)
    installment_number = Column(Integer, nullable=True)
    total_installments = Column(Integer, nullable=True)
    is_subscription = Column(Boolean, default=False, nullable=False)
    subscription_id = Column(String, nullable=True, index=True)
    debt_id = Column(String, nullable=True)
    is_credit_card_invoice = Column(Boolean, default=False, nullable=False)
    related_card_id = Column(String, nullable=True)
    original_amount = Column(Numeric(12, 2), nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    partial_payments = relationship(
        "PartialPayment",
        back_populates="entry",
        cascade="all, delete-orphan",
        order_by="PartialPayment.position",
    )


class PartialPayment(Base):
    """Partial payment applied to a ledger entry."""

    __tablename__ = "partial_payments"

    id = Column(String, primary_key=True)
    entry_id = Column(String, ForeignKey("ledger_entries.id"), nullable=False)
    position = Column(Integer, nullable=False)
    paid_on = Column(Date, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)

    # Relationships
    entry = relationship("LedgerEntry", back_populates="partial_payments")


class CreditCard(Base):
    """Credit card model."""

    __tablename__ = "credit_cards"

    id = Column(String, primary_key=True)
    name = Column(String, unique=True, nullable=False)
    closing_day = Column(Integer, nullable=False)
    due_day = Column(Integer, nullable=False)
    credit_limit = Column(Numeric(12, 2), nullable=False, default=0)
    color = Column(String, nullable=False, default="slate")
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    installments = relationship(
        "CardInstallment", back_populates="card", cascade="all, delete-orphan"
    )


class CardInstallment(Base):
    """Card purchase installment model."""

    __tablename__ = "card_installments"

    id = Column(String, primary_key=True)
    card_id = Column(String, ForeignKey("credit_cards.id"), nullable=False)
    description = Column(String, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    month = Column(Integer, nullable=False)
    year = Column(Integer, nullable=False)
    installment_number = Column(Integer, nullable=False)
    total_installments = Column(Integer, nullable=False)
    category = Column(String, nullable=False)
    original_purchase_date = Column(Date, nullable=False)

    # Relationships
    card = relationship("CreditCard", back_populates="installments")


class Subscription(Base):
    """Subscription model."""

    __tablename__ = "subscriptions"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    billing_day = Column(Integer, nullable=False)
    category = Column(String, nullable=False)
    active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)


class DebtAccount(Base):
    """Debt account model."""

    __tablename__ = "debt_accounts"

    id = Column(String, primary_key=True)
    name = Column(String, unique=True, nullable=False)
    current_balance = Column(Numeric(12, 2), nullable=False, default=0)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    events = relationship(
        "DebtEvent",
        back_populates="debt",
        cascade="all, delete-orphan",
        order_by="DebtEvent.position",
    )


class DebtEvent(Base):
    """Purchase or payment on a debt account."""

    __tablename__ = "debt_events"

    id = Column(String, primary_key=True)
    debt_id = Column(String, ForeignKey("debt_accounts.id"), nullable=False)
    position = Column(Integer, nullable=False)
    date = Column(Date, nullable=False)
    description = Column(String, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    kind = Column(String, nullable=False)
    linked_ledger_entry_id = Column(String, nullable=True)

    # Relationships
    debt = relationship("DebtAccount", back_populates="events")


class Setting(Base):
    """Key/value application setting."""

    __tablename__ = "settings"

    key = Column(String, primary_key=True)
    value = Column(String, nullable=False)


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
