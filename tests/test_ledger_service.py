"""Tests for LedgerService."""

from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy.exc import SQLAlchemyError

from finagenda.domain.entities import DebtEventKind, EntryKind
from finagenda.domain.errors import ConflictError, PersistenceError, ValidationError


def _add_rent(service, **overrides):
    values = dict(
        year=2026,
        month=0,
        day=10,
        kind=EntryKind.EXPENSE,
        category="Home",
        amount=Decimal("1000"),
        description="Rent",
    )
    values.update(overrides)
    return service.add_entry(**values)


def _invoices(service):
    return [entry for entry in service.list_entries() if entry.is_credit_card_invoice]


class TestEntries:
    """Tests for ledger entry operations."""

    def test_add_entry(self, ledger_service):
        """Test adding a single entry."""
        (entry,) = _add_rent(ledger_service)

        assert entry.id == "s-1"
        assert ledger_service.list_entries() == [entry]

    def test_add_fixed_series(self, ledger_service):
        """Test adding a fixed series stores twelve entries."""
        entries = _add_rent(ledger_service, is_fixed=True)

        assert len(entries) == 12
        assert len(ledger_service.list_entries(year=2026)) == 12

    def test_add_invalid_entry(self, ledger_service):
        """Test that an invalid entry raises and stores nothing."""
        with pytest.raises(ValidationError):
            _add_rent(ledger_service, amount=Decimal("0"))
        assert ledger_service.list_entries() == []

    def test_update_with_future_changes(self, ledger_service):
        """Test a cascaded edit on a stored fixed series."""
        entries = _add_rent(ledger_service, is_fixed=True)
        april = entries[3]

        updated = ledger_service.update_entry(
            april.id, {"amount": Decimal("1100")}, apply_to_future=True
        )

        assert updated.amount == Decimal("1100")
        amounts = [entry.amount for entry in ledger_service.list_entries()]
        assert amounts == [Decimal("1000")] * 3 + [Decimal("1100")] * 9

    def test_delete_with_future_changes(self, ledger_service):
        """Test a cascaded delete on a stored fixed series."""
        entries = _add_rent(ledger_service, is_fixed=True)

        removed = ledger_service.delete_entry(entries[6].id, apply_to_future=True)

        assert len(removed) == 6
        assert [entry.month for entry in ledger_service.list_entries()] == [0, 1, 2, 3, 4, 5]

    def test_toggle_completed(self, ledger_service):
        """Test toggling a plain entry back and forth."""
        (entry,) = _add_rent(ledger_service)

        assert ledger_service.toggle_completed(entry.id).completed is True
        assert ledger_service.toggle_completed(entry.id).completed is False

    def test_move_entry(self, ledger_service):
        """Test moving an entry within its month."""
        (entry,) = _add_rent(ledger_service, month=1)
        assert ledger_service.move_entry(entry.id, 30).day == 28

    def test_partial_payment(self, ledger_service):
        """Test that partial payments are stored with the entry."""
        (entry,) = _add_rent(ledger_service)

        ledger_service.record_partial_payment(entry.id, Decimal("300"), date(2026, 1, 8))
        paid = ledger_service.record_partial_payment(entry.id, Decimal("200"))

        assert paid.amount == Decimal("500")
        assert paid.original_amount == Decimal("1000")
        assert [p.amount for p in paid.partial_payments] == [Decimal("300"), Decimal("200")]
        assert paid.partial_payments[1].paid_on == date(2026, 1, 15)

    def test_partial_payment_too_large(self, ledger_service):
        """Test that paying the whole amount is not a partial payment."""
        (entry,) = _add_rent(ledger_service)
        with pytest.raises(ValidationError):
            ledger_service.record_partial_payment(entry.id, Decimal("1000"))

    def test_missing_entry_is_noop(self, ledger_service):
        """Test that operations on an unknown entry change nothing."""
        assert ledger_service.update_entry("missing", {"amount": Decimal("1")}) is None
        assert ledger_service.toggle_completed("missing") is None
        assert ledger_service.move_entry("missing", 3) is None
        assert ledger_service.record_partial_payment("missing", Decimal("1")) is None
        assert ledger_service.delete_entry("missing") == ()


class TestCards:
    """Tests for card operations and invoice reconciliation."""

    def test_purchase_creates_invoices(self, ledger_service, sample_card):
        """Test that a 300 purchase in 3x after closing bills Feb, Mar and Apr."""
        items = ledger_service.add_card_purchase(
            sample_card.id, "Headphones", Decimal("300"), 3, date(2026, 1, 15), "Tech"
        )

        assert len(items) == 3
        assert len(ledger_service.list_card_installments(sample_card.id)) == 3
        invoices = _invoices(ledger_service)
        assert [(inv.month, inv.day, inv.amount) for inv in invoices] == [
            (1, 5, Decimal("100")),
            (2, 5, Decimal("100")),
            (3, 5, Decimal("100")),
        ]

    def test_second_purchase_updates_invoice(self, ledger_service, sample_card):
        """Test that invoices follow the installment totals."""
        ledger_service.add_card_purchase(sample_card.id, "A", Decimal("100"), 1, date(2026, 1, 3))
        ledger_service.add_card_purchase(sample_card.id, "B", Decimal("50"), 1, date(2026, 1, 4))

        (invoice,) = _invoices(ledger_service)
        assert invoice.amount == Decimal("150")

    def test_purchase_on_unknown_card(self, ledger_service):
        """Test that an unknown card adds nothing."""
        assert ledger_service.add_card_purchase("missing", "A", Decimal("10")) == []

    def test_invoice_cannot_be_edited(self, ledger_service, sample_card):
        """Test that invoices are derived and reject manual edits."""
        ledger_service.add_card_purchase(sample_card.id, "A", Decimal("100"), 1, date(2026, 1, 3))
        (invoice,) = _invoices(ledger_service)

        with pytest.raises(ValidationError):
            ledger_service.update_entry(invoice.id, {"amount": Decimal("1")})
        with pytest.raises(ValidationError):
            ledger_service.delete_entry(invoice.id)

    def test_remove_card_clears_invoices(self, ledger_service, sample_card):
        """Test that removing a card drops its installments and invoices."""
        ledger_service.add_card_purchase(
            sample_card.id, "TV", Decimal("900"), 3, date(2026, 1, 3)
        )
        first = _invoices(ledger_service)[0]
        ledger_service.toggle_completed(first.id)

        assert ledger_service.remove_card(sample_card.id) is True

        assert ledger_service.list_cards() == []
        assert ledger_service.list_card_installments() == []
        assert _invoices(ledger_service) == []

    def test_remove_card_keeps_other_cards(self, ledger_service, sample_card):
        """Test that removing a card leaves other cards' purchases alone."""
        other = ledger_service.add_card("Master", closing_day=10, due_day=8)
        ledger_service.add_card_purchase(sample_card.id, "TV", Decimal("300"), 3, date(2026, 1, 3))
        ledger_service.add_card_purchase(other.id, "Phone", Decimal("200"), 2, date(2026, 1, 3))

        assert ledger_service.remove_card(sample_card.id) is True

        remaining = ledger_service.list_card_installments()
        assert [item.description for item in remaining] == ["Phone", "Phone"]
        invoices = _invoices(ledger_service)
        assert len(invoices) == 2
        assert {entry.related_card_id for entry in invoices} == {other.id}

    def test_remove_unknown_card(self, ledger_service):
        """Test removing a card that does not exist."""
        assert ledger_service.remove_card("missing") is False

    def test_duplicate_card_name(self, ledger_service, sample_card):
        """Test that card names are unique."""
        with pytest.raises(ConflictError):
            ledger_service.add_card("Visa", closing_day=1, due_day=8)

    def test_invalid_card_days(self, ledger_service):
        """Test that card days must be valid days of month."""
        with pytest.raises(ValidationError):
            ledger_service.add_card("Amex", closing_day=32, due_day=8)


class TestSubscriptions:
    """Tests for subscription operations."""

    def test_add_subscription_forecasts_year(self, ledger_service, sample_subscription):
        """Test that a new subscription fills the forecast window."""
        entries = ledger_service.list_entries()

        assert len(entries) == 12
        assert all(entry.subscription_id == sample_subscription.id for entry in entries)
        assert all(entry.day == 12 for entry in entries)

    def test_cancel_subscription(self, ledger_service, sample_subscription):
        """Test that cancelling removes upcoming charges for good."""
        removed = ledger_service.cancel_subscription(sample_subscription.id)

        assert len(removed) == 12
        assert ledger_service.list_entries() == []
        (sub,) = ledger_service.list_subscriptions()
        assert sub.active is False

        ledger_service.synchronize()
        assert ledger_service.list_entries() == []

    def test_cancel_unknown_subscription(self, ledger_service):
        """Test cancelling a subscription that does not exist."""
        assert ledger_service.cancel_subscription("missing") == ()

    def test_delete_occurrence_with_future_changes(self, ledger_service, sample_subscription):
        """Test that a cascaded delete deactivates the subscription."""
        april = ledger_service.list_entries(year=2026, month=3)[0]

        ledger_service.delete_entry(april.id, apply_to_future=True)

        assert [entry.month for entry in ledger_service.list_entries()] == [0, 1, 2]
        assert ledger_service.list_subscriptions()[0].active is False

    def test_deleted_single_occurrence_is_forecast_again(self, ledger_service, sample_subscription):
        """Test that a plain delete inside the window is regenerated."""
        april = ledger_service.list_entries(year=2026, month=3)[0]

        ledger_service.delete_entry(april.id)

        assert len(ledger_service.list_entries(year=2026, month=3)) == 1
        assert ledger_service.list_subscriptions()[0].active is True

    def test_invalid_subscription(self, ledger_service):
        """Test that subscriptions need a positive amount."""
        with pytest.raises(ValidationError):
            ledger_service.add_subscription("Free", Decimal("0"), billing_day=3)


class TestDebts:
    """Tests for debt accounts and their payments."""

    def test_purchase_raises_balance(self, sample_debt):
        """Test the sample debt balance."""
        assert sample_debt.current_balance == Decimal("1000")
        assert sample_debt.history[0].kind == DebtEventKind.PURCHASE

    def test_duplicate_debt_name(self, ledger_service, sample_debt):
        """Test that debt account names are unique."""
        with pytest.raises(ConflictError):
            ledger_service.add_debt("Store Credit")

    def test_payment_toggle_moves_balance(self, ledger_service, sample_debt):
        """Test that a completed 150 payment lowers the balance and can be undone."""
        payment = ledger_service.schedule_debt_payment(
            sample_debt.id, Decimal("150"), date(2026, 2, 10)
        )
        assert payment.debt_id == sample_debt.id
        assert ledger_service.list_debts()[0].current_balance == Decimal("1000")

        ledger_service.toggle_completed(payment.id)
        debt = ledger_service.list_debts()[0]
        assert debt.current_balance == Decimal("850")
        assert debt.history[0].kind == DebtEventKind.PAYMENT
        assert debt.history[0].linked_ledger_entry_id == payment.id

        ledger_service.toggle_completed(payment.id)
        debt = ledger_service.list_debts()[0]
        assert debt.current_balance == Decimal("1000")
        assert len(debt.history) == 1

    def test_resizing_completed_payment(self, ledger_service, sample_debt):
        """Test that editing a completed payment adjusts the balance."""
        payment = ledger_service.schedule_debt_payment(sample_debt.id, Decimal("150"))
        ledger_service.toggle_completed(payment.id)

        ledger_service.update_entry(payment.id, {"amount": Decimal("100")})

        assert ledger_service.list_debts()[0].current_balance == Decimal("900")

    def test_deleting_completed_payment(self, ledger_service, sample_debt):
        """Test that deleting a completed payment restores the balance."""
        payment = ledger_service.schedule_debt_payment(sample_debt.id, Decimal("150"))
        ledger_service.toggle_completed(payment.id)

        ledger_service.delete_entry(payment.id)

        debt = ledger_service.list_debts()[0]
        assert debt.current_balance == Decimal("1000")
        assert all(event.kind != DebtEventKind.PAYMENT for event in debt.history)

    def test_payment_on_unknown_debt(self, ledger_service):
        """Test scheduling a payment on a debt that does not exist."""
        assert ledger_service.schedule_debt_payment("missing", Decimal("10")) is None


class TestReports:
    """Tests for summaries through the service."""

    def test_month_summary(self, ledger_service):
        """Test a month summary with a starting balance."""
        ledger_service.set_starting_balance(Decimal("500"))
        _add_rent(ledger_service, kind=EntryKind.INCOME, category="Work", amount=Decimal("3000"))
        (rent,) = _add_rent(ledger_service)
        ledger_service.toggle_completed(rent.id)

        summary = ledger_service.month_summary(2026, 0)

        assert summary.previous_balance == Decimal("500")
        assert summary.current_balance == Decimal("-500")
        assert summary.end_of_month_balance == Decimal("2500")

    def test_daily_and_yearly(self, ledger_service):
        """Test daily balances and the yearly report."""
        _add_rent(ledger_service, is_fixed=True)

        daily = ledger_service.daily_balances(2026, 1)
        assert len(daily) == 28
        assert daily[8].balance == Decimal("-1000")
        assert daily[9].balance == Decimal("-2000")

        report = ledger_service.yearly_report(2026)
        assert [totals.expense for totals in report] == [Decimal("1000")] * 12


class TestPersistence:
    """Tests for synchronization and storage failures."""

    def test_synchronize_is_stable(self, ledger_service, sample_card, sample_subscription):
        """Test that synchronizing twice stores nothing new."""
        ledger_service.add_card_purchase(sample_card.id, "A", Decimal("100"), 2, date(2026, 1, 3))
        before = ledger_service.list_entries()

        ledger_service.synchronize()

        assert ledger_service.list_entries() == before

    def test_storage_failure_keeps_persisted_prefix(self, ledger_service, temp_db, monkeypatch):
        """Test that a failing create names the entry and keeps earlier members."""
        original = temp_db.create_entry
        calls = []

        def flaky_create(entry):
            calls.append(entry.id)
            if len(calls) == 3:
                raise SQLAlchemyError("disk full")
            original(entry)

        monkeypatch.setattr(temp_db, "create_entry", flaky_create)

        with pytest.raises(PersistenceError) as exc_info:
            _add_rent(ledger_service, is_fixed=True)

        assert exc_info.value.entry_id == calls[2]
        assert "disk full" in str(exc_info.value)
        assert len(ledger_service.list_entries()) == 2
