"""Tests for the Database interface returning domain models."""

from dataclasses import replace
from datetime import date
from decimal import Decimal

import pytest

from finagenda.domain import entities
from finagenda.domain.errors import NotFoundError


@pytest.fixture
def stored_card(temp_db):
    card = entities.CreditCard(id="c1", name="Visa", closing_day=10, due_day=5)
    temp_db.create_card(card)
    return card


class TestEntries:
    """Tests for ledger entry storage."""

    def test_create_and_get_entry(self, temp_db, make_entry):
        """Test that get_entry returns a domain LedgerEntry."""
        entry = make_entry(sub_category="Flat", is_fixed=True, fixed_series_id="f1")
        temp_db.create_entry(entry)

        stored = temp_db.get_entry(entry.id)
        assert isinstance(stored, entities.LedgerEntry)
        assert stored == entry

    def test_get_missing_entry(self, temp_db):
        """Test that a missing entry returns None."""
        assert temp_db.get_entry("missing") is None

    def test_list_entries_keeps_insertion_order(self, temp_db, make_entry):
        """Test that entries come back in ledger order, not date order."""
        temp_db.create_entry(make_entry("late", month=5))
        temp_db.create_entry(make_entry("early", month=0))
        temp_db.create_entry(make_entry("middle", month=2))

        assert [e.id for e in temp_db.list_entries()] == ["late", "early", "middle"]

    def test_list_entries_filters(self, temp_db, make_entry):
        """Test filtering by year and month."""
        temp_db.create_entry(make_entry("a", year=2026, month=0))
        temp_db.create_entry(make_entry("b", year=2026, month=1))
        temp_db.create_entry(make_entry("c", year=2027, month=0))

        assert [e.id for e in temp_db.list_entries(year=2026)] == ["a", "b"]
        assert [e.id for e in temp_db.list_entries(year=2026, month=0)] == ["a"]

    def test_update_entry_replaces_partial_payments(self, temp_db, make_entry):
        """Test that updating an entry rewrites its partial payments."""
        payment = entities.PartialPayment(id="p1", paid_on=date(2026, 1, 5), amount=Decimal("20"))
        entry = make_entry(partial_payments=(payment,), original_amount=Decimal("120"))
        temp_db.create_entry(entry)

        second = entities.PartialPayment(id="p2", paid_on=date(2026, 1, 6), amount=Decimal("30"))
        updated = replace(entry, amount=Decimal("70"), partial_payments=(payment, second))
        temp_db.update_entry(updated)

        stored = temp_db.get_entry(entry.id)
        assert stored.amount == Decimal("70")
        assert [p.id for p in stored.partial_payments] == ["p1", "p2"]

    def test_update_missing_entry(self, temp_db, make_entry):
        """Test that updating an unknown entry raises."""
        with pytest.raises(NotFoundError):
            temp_db.update_entry(make_entry("missing"))

    def test_delete_entry(self, temp_db, make_entry):
        """Test deleting an entry with its partial payments."""
        payment = entities.PartialPayment(id="p1", paid_on=date(2026, 1, 5), amount=Decimal("20"))
        temp_db.create_entry(make_entry(partial_payments=(payment,)))

        temp_db.delete_entry("e1")
        assert temp_db.get_entry("e1") is None
        with pytest.raises(NotFoundError):
            temp_db.delete_entry("e1")


class TestCards:
    """Tests for card and installment storage."""

    def test_card_round_trip(self, temp_db, stored_card):
        """Test that cards come back as domain entities."""
        assert temp_db.get_card("c1") == stored_card
        assert temp_db.list_cards() == [stored_card]

    def test_installments_by_card(self, temp_db, stored_card):
        """Test storing and filtering installments."""
        other = entities.CreditCard(id="c2", name="Master", closing_day=1, due_day=8)
        temp_db.create_card(other)
        items = [
            entities.CardInstallment(
                id=f"i{index}",
                card_id=card_id,
                description="TV",
                amount=Decimal("100"),
                month=n,
                year=2026,
                installment_number=n + 1,
                total_installments=2,
                category="Home",
                original_purchase_date=date(2026, 1, 2),
            )
            for index, (n, card_id) in enumerate([(0, "c1"), (1, "c1"), (0, "c2")])
        ]
        temp_db.create_card_installments(items)

        assert [i.id for i in temp_db.list_card_installments("c1")] == ["i0", "i1"]
        assert len(temp_db.list_card_installments()) == 3

    def test_delete_card_removes_installments(self, temp_db, stored_card):
        """Test that deleting a card cascades to its installments."""
        temp_db.create_card_installments(
            [
                entities.CardInstallment(
                    id="i1",
                    card_id="c1",
                    description="TV",
                    amount=Decimal("100"),
                    month=0,
                    year=2026,
                    installment_number=1,
                    total_installments=1,
                    category="Home",
                    original_purchase_date=date(2026, 1, 2),
                )
            ]
        )
        temp_db.delete_card("c1")

        assert temp_db.get_card("c1") is None
        assert temp_db.list_card_installments() == []


class TestSourcesAndSettings:
    """Tests for subscriptions, debts and settings."""

    def test_subscription_update(self, temp_db):
        """Test deactivating a stored subscription."""
        sub = entities.Subscription(
            id="s1", name="Gym", amount=Decimal("99.90"), billing_day=5, category="Health"
        )
        temp_db.create_subscription(sub)
        temp_db.update_subscription(replace(sub, active=False))

        assert temp_db.get_subscription("s1").active is False
        assert temp_db.list_subscriptions() == [replace(sub, active=False)]

    def test_debt_update_rewrites_history(self, temp_db):
        """Test that updating a debt replaces balance and history."""
        purchase = entities.DebtEvent(
            id="ev1",
            date=date(2026, 1, 2),
            description="Sofa",
            amount=Decimal("1000"),
            kind=entities.DebtEventKind.PURCHASE,
        )
        debt = entities.DebtAccount(
            id="d1", name="Store", current_balance=Decimal("1000"), history=(purchase,)
        )
        temp_db.create_debt(debt)

        payment = entities.DebtEvent(
            id="ev2",
            date=date(2026, 2, 10),
            description="Payment: Store",
            amount=Decimal("150"),
            kind=entities.DebtEventKind.PAYMENT,
            linked_ledger_entry_id="e1",
        )
        updated = replace(debt, current_balance=Decimal("850"), history=(payment, purchase))
        temp_db.update_debt(updated)

        assert temp_db.get_debt("d1") == updated
        assert temp_db.list_debts() == [updated]

    def test_starting_balance(self, temp_db):
        """Test the starting balance setting."""
        assert temp_db.get_starting_balance() == Decimal("0")
        temp_db.set_starting_balance(Decimal("1500.50"))
        assert temp_db.get_starting_balance() == Decimal("1500.50")
        temp_db.set_starting_balance(Decimal("10"))
        assert temp_db.get_starting_balance() == Decimal("10")
