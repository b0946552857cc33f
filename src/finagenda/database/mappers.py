"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, so the engine never sees ORM rows
and the schema can change without touching it.
"""

from decimal import Decimal

from finagenda.domain import entities as domain
from finagenda.database.models import (
    LedgerEntry as ORMLedgerEntry,
    PartialPayment as ORMPartialPayment,
    CreditCard as ORMCreditCard,
    CardInstallment as ORMCardInstallment,
    Subscription as ORMSubscription,
    DebtAccount as ORMDebtAccount,
    DebtEvent as ORMDebtEvent,
)

# Columns copied one to one between a domain entry and its row.
ENTRY_COLUMNS = (
    "day",
    "month",
    "year",
    "category",
    "sub_category",
    "description",
    "amount",
    "completed",
    "is_fixed",
    "fixed_series_id",
    "installment_id",
    "installment_number",
    "total_installments",
    "is_subscription",
    "subscription_id",
    "debt_id",
    "is_credit_card_invoice",
    "related_card_id",
    "original_amount",
)


def _money(value) -> Decimal:
    return Decimal(value) if value is not None else None


def partial_payment_to_domain(orm_payment: ORMPartialPayment) -> domain.PartialPayment:
    """Convert SQLAlchemy PartialPayment model to domain PartialPayment entity."""
    return domain.PartialPayment(
        id=orm_payment.id,
        paid_on=orm_payment.paid_on,
        amount=_money(orm_payment.amount),
    )


def entry_to_domain(orm_entry: ORMLedgerEntry) -> domain.LedgerEntry:
    """Convert SQLAlchemy LedgerEntry model to domain LedgerEntry entity."""
    return domain.LedgerEntry(
        id=orm_entry.id,
        day=orm_entry.day,
        month=orm_entry.month,
        year=orm_entry.year,
        kind=domain.EntryKind(orm_entry.kind),
        category=orm_entry.category,
        sub_category=orm_entry.sub_category,
        description=orm_entry.description,
        amount=_money(orm_entry.amount),
        completed=orm_entry.completed,
        is_fixed=orm_entry.is_fixed,
        fixed_series_id=orm_entry.fixed_series_id,
        installment_id=orm_entry.installment_id,
        installment_number=orm_entry.installment_number,
        total_installments=orm_entry.total_installments,
        is_subscription=orm_entry.is_subscription,
        subscription_id=orm_entry.subscription_id,
        debt_id=orm_entry.debt_id,
        is_credit_card_invoice=orm_entry.is_credit_card_invoice,
        related_card_id=orm_entry.related_card_id,
        original_amount=_money(orm_entry.original_amount),
        partial_payments=tuple(
            partial_payment_to_domain(payment) for payment in orm_entry.partial_payments
        ),
    )


def entry_to_orm(entry: domain.LedgerEntry, orm_entry: ORMLedgerEntry) -> ORMLedgerEntry:
    """Copy the scalar columns of a domain LedgerEntry onto a SQLAlchemy row."""
    for column in ENTRY_COLUMNS:
        setattr(orm_entry, column, getattr(entry, column))
    orm_entry.kind = entry.kind.value
    return orm_entry


def partial_payments_to_orm(entry: domain.LedgerEntry) -> list[ORMPartialPayment]:
    """Build SQLAlchemy PartialPayment rows for an entry, in order."""
    return [
        ORMPartialPayment(
            id=payment.id,
            position=index,
            paid_on=payment.paid_on,
            amount=payment.amount,
        )
        for index, payment in enumerate(entry.partial_payments)
    ]


def card_to_domain(orm_card: ORMCreditCard) -> domain.CreditCard:
    """Convert SQLAlchemy CreditCard model to domain CreditCard entity."""
    return domain.CreditCard(
        id=orm_card.id,
        name=orm_card.name,
        closing_day=orm_card.closing_day,
        due_day=orm_card.due_day,
        credit_limit=_money(orm_card.credit_limit),
        color=orm_card.color,
    )


def installment_to_domain(orm_installment: ORMCardInstallment) -> domain.CardInstallment:
    """Convert SQLAlchemy CardInstallment model to domain CardInstallment entity."""
    return domain.CardInstallment(
        id=orm_installment.id,
        card_id=orm_installment.card_id,
        description=orm_installment.description,
        amount=_money(orm_installment.amount),
        month=orm_installment.month,
        year=orm_installment.year,
        installment_number=orm_installment.installment_number,
        total_installments=orm_installment.total_installments,
        category=orm_installment.category,
        original_purchase_date=orm_installment.original_purchase_date,
    )


def subscription_to_domain(orm_subscription: ORMSubscription) -> domain.Subscription:
    """Convert SQLAlchemy Subscription model to domain Subscription entity."""
    return domain.Subscription(
        id=orm_subscription.id,
        name=orm_subscription.name,
        amount=_money(orm_subscription.amount),
        billing_day=orm_subscription.billing_day,
        category=orm_subscription.category,
        active=orm_subscription.active,
    )


def debt_event_to_domain(orm_event: ORMDebtEvent) -> domain.DebtEvent:
    """Convert SQLAlchemy DebtEvent model to domain DebtEvent entity."""
    return domain.DebtEvent(
        id=orm_event.id,
        date=orm_event.date,
        description=orm_event.description,
        amount=_money(orm_event.amount),
        kind=domain.DebtEventKind(orm_event.kind),
        linked_ledger_entry_id=orm_event.linked_ledger_entry_id,
    )


def debt_to_domain(orm_debt: ORMDebtAccount) -> domain.DebtAccount:
    """Convert SQLAlchemy DebtAccount model to domain DebtAccount entity."""
    return domain.DebtAccount(
        id=orm_debt.id,
        name=orm_debt.name,
        current_balance=_money(orm_debt.current_balance),
        history=tuple(debt_event_to_domain(event) for event in orm_debt.events),
    )


def debt_events_to_orm(debt: domain.DebtAccount) -> list[ORMDebtEvent]:
    """Build SQLAlchemy DebtEvent rows for a debt's history, in order."""
    return [
        ORMDebtEvent(
            id=event.id,
            position=index,
            date=event.date,
            description=event.description,
            amount=event.amount,
            kind=event.kind.value,
            linked_ledger_entry_id=event.linked_ledger_entry_id,
        )
        for index, event in enumerate(debt.history)
    ]
