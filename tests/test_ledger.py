"""Tests for the installment ledger."""

from datetime import date
from decimal import Decimal

import pytest

from finflow.domain.entities import InstanceStatus, PaymentMethod, TransactionKind
from finflow.domain.errors import ConflictError, NotFoundError, ValidationError
from finflow.domain.ledger import derive_display_status, totals_by_display_status


@pytest.fixture
def bill(ledger, tenant):
    """A pending payable due on 2024-01-10."""
    return ledger.create_instance(
        tenant, TransactionKind.PAYABLE, "Electricity", Decimal("120.50"), date(2024, 1, 10)
    ).unwrap()


class TestCreateInstance:
    def test_create(self, ledger, tenant, sample_bank_account):
        result = ledger.create_instance(
            tenant,
            TransactionKind.RECEIVABLE,
            "  Invoice 7  ",
            Decimal("300"),
            date(2024, 2, 1),
            bank_account_id=sample_bank_account.id,
            payment_method=PaymentMethod.PIX,
        )
        assert result.ok
        instance = ledger.get_instance(tenant, result.value)
        assert instance.description == "Invoice 7"
        assert instance.amount == Decimal("300.00")
        assert instance.status is InstanceStatus.PENDING
        assert instance.payment_method is PaymentMethod.PIX
        assert instance.bank_account_id == sample_bank_account.id

    @pytest.mark.parametrize(
        "amount,due",
        [
            (Decimal("0"), date(2024, 1, 1)),
            (Decimal("-10"), date(2024, 1, 1)),
            (Decimal("10"), None),
        ],
    )
    def test_invalid_input(self, ledger, tenant, amount, due):
        result = ledger.create_instance(tenant, TransactionKind.PAYABLE, "Bad", amount, due)
        assert isinstance(result.error, ValidationError)

    def test_unknown_bank_account(self, ledger, tenant):
        result = ledger.create_instance(
            tenant, TransactionKind.PAYABLE, "Bill", Decimal("10"), date(2024, 1, 1), bank_account_id=77
        )
        assert isinstance(result.error, NotFoundError)

    def test_bank_account_of_other_tenant(self, ledger, other_tenant, sample_bank_account):
        result = ledger.create_instance(
            other_tenant,
            TransactionKind.PAYABLE,
            "Bill",
            Decimal("10"),
            date(2024, 1, 1),
            bank_account_id=sample_bank_account.id,
        )
        assert isinstance(result.error, NotFoundError)


class TestRegisterPayment:
    def test_pay_pending(self, ledger, tenant, bill):
        result = ledger.register_payment(tenant, bill, as_of=date(2024, 1, 8))
        assert result.ok
        assert result.value.status is InstanceStatus.PAID
        assert result.value.payment_date == date(2024, 1, 8)

    def test_pay_overdue(self, ledger, tenant, bill):
        # Overdue is only a view; the stored status is still pending
        result = ledger.register_payment(tenant, bill, as_of=date(2024, 3, 1))
        assert result.ok

    def test_double_payment_conflict(self, ledger, tenant, bill):
        ledger.register_payment(tenant, bill, as_of=date(2024, 1, 8)).unwrap()

        second = ledger.register_payment(tenant, bill, as_of=date(2024, 1, 9))
        assert isinstance(second.error, ConflictError)
        assert second.error.prior_status == "paid"
        assert ledger.get_instance(tenant, bill).payment_date == date(2024, 1, 8)

    def test_pay_cancelled(self, ledger, tenant, bill):
        ledger.cancel(tenant, bill).unwrap()
        result = ledger.register_payment(tenant, bill)
        assert isinstance(result.error, ConflictError)
        assert result.error.prior_status == "cancelled"

    def test_not_found(self, ledger, tenant):
        assert isinstance(ledger.register_payment(tenant, 404).error, NotFoundError)

    def test_other_tenant_cannot_pay(self, ledger, tenant, other_tenant, bill):
        assert isinstance(ledger.register_payment(other_tenant, bill).error, NotFoundError)
        assert ledger.get_instance(tenant, bill).status is InstanceStatus.PENDING


class TestCancel:
    def test_cancel_pending(self, ledger, tenant, bill):
        result = ledger.cancel(tenant, bill)
        assert result.value.status is InstanceStatus.CANCELLED

    def test_cannot_cancel_paid(self, ledger, tenant, bill):
        ledger.register_payment(tenant, bill, as_of=date(2024, 1, 8)).unwrap()
        result = ledger.cancel(tenant, bill)
        assert isinstance(result.error, ConflictError)
        assert ledger.get_instance(tenant, bill).status is InstanceStatus.PAID

    def test_cancel_twice(self, ledger, tenant, bill):
        ledger.cancel(tenant, bill).unwrap()
        assert isinstance(ledger.cancel(tenant, bill).error, ConflictError)


class TestUpdateInstance:
    def test_update_pending(self, ledger, tenant, bill):
        result = ledger.update_instance(
            tenant, bill, amount=Decimal("99.999"), due_date=date(2024, 1, 20), description="Power"
        )
        assert result.ok
        assert result.value.amount == Decimal("100.00")
        assert result.value.due_date == date(2024, 1, 20)
        assert result.value.description == "Power"

    def test_paid_is_immutable(self, ledger, tenant, bill):
        ledger.register_payment(tenant, bill, as_of=date(2024, 1, 8)).unwrap()
        result = ledger.update_instance(tenant, bill, amount=Decimal("1.00"))
        assert isinstance(result.error, ConflictError)
        assert ledger.get_instance(tenant, bill).amount == Decimal("120.50")

    def test_nothing_to_update(self, ledger, tenant, bill):
        assert isinstance(ledger.update_instance(tenant, bill).error, ValidationError)

    def test_invalid_amount(self, ledger, tenant, bill):
        assert isinstance(ledger.update_instance(tenant, bill, amount=Decimal("0")).error, ValidationError)

    def test_not_found(self, ledger, tenant):
        result = ledger.update_instance(tenant, 404, notes="x")
        assert isinstance(result.error, NotFoundError)


class TestDisplayStatus:
    def test_pending_past_due_is_overdue(self, ledger, tenant, bill):
        instance = ledger.get_instance(tenant, bill)
        assert derive_display_status(instance, date(2024, 1, 11)) is InstanceStatus.OVERDUE
        assert derive_display_status(instance, date(2024, 1, 10)) is InstanceStatus.PENDING
        # Deriving never writes
        assert ledger.get_instance(tenant, bill).status is InstanceStatus.PENDING

    def test_paid_passes_through(self, ledger, tenant, bill):
        paid = ledger.register_payment(tenant, bill, as_of=date(2024, 1, 5)).unwrap()
        assert derive_display_status(paid, date(2025, 1, 1)) is InstanceStatus.PAID

    def test_cancelled_passes_through(self, ledger, tenant, bill):
        cancelled = ledger.cancel(tenant, bill).unwrap()
        assert derive_display_status(cancelled, date(2025, 1, 1)) is InstanceStatus.CANCELLED

    def test_list_by_display_status(self, ledger, tenant, bill):
        later = ledger.create_instance(
            tenant, TransactionKind.PAYABLE, "Water", Decimal("40"), date(2024, 2, 10)
        ).unwrap()

        overdue = ledger.list_instances(tenant, status=InstanceStatus.OVERDUE, as_of=date(2024, 2, 1))
        pending = ledger.list_instances(tenant, status=InstanceStatus.PENDING, as_of=date(2024, 2, 1))
        assert [i.id for i in overdue] == [bill]
        assert [i.id for i in pending] == [later]


class TestListInstances:
    def test_filters(self, ledger, tenant, sample_bank_account):
        payable = ledger.create_instance(
            tenant, TransactionKind.PAYABLE, "Rent", Decimal("900"), date(2024, 1, 5),
            bank_account_id=sample_bank_account.id,
        ).unwrap()
        receivable = ledger.create_instance(
            tenant, TransactionKind.RECEIVABLE, "Sale", Decimal("300"), date(2024, 2, 5)
        ).unwrap()

        assert [i.id for i in ledger.list_instances(tenant, kind=TransactionKind.RECEIVABLE)] == [receivable]
        assert [i.id for i in ledger.list_instances(tenant, bank_account_id=sample_bank_account.id)] == [payable]
        in_range = ledger.list_instances(tenant, start_date=date(2024, 2, 1), end_date=date(2024, 2, 29))
        assert [i.id for i in in_range] == [receivable]

    def test_tenant_isolation(self, ledger, tenant, other_tenant, bill):
        assert ledger.list_instances(other_tenant) == []
        assert len(ledger.list_instances(tenant)) == 1


def test_totals_by_display_status(ledger, tenant, bill):
    ledger.create_instance(tenant, TransactionKind.PAYABLE, "Water", Decimal("40"), date(2024, 2, 10)).unwrap()
    paid = ledger.create_instance(
        tenant, TransactionKind.RECEIVABLE, "Sale", Decimal("300"), date(2024, 1, 2)
    ).unwrap()
    ledger.register_payment(tenant, paid, as_of=date(2024, 1, 2)).unwrap()
    ledger.create_instance(tenant, TransactionKind.RECEIVABLE, "Sale 2", Decimal("75"), date(2024, 1, 3)).unwrap()

    totals = totals_by_display_status(ledger.list_instances(tenant), as_of=date(2024, 2, 1))

    assert totals[TransactionKind.PAYABLE][InstanceStatus.OVERDUE] == Decimal("120.50")
    assert totals[TransactionKind.PAYABLE][InstanceStatus.PENDING] == Decimal("40.00")
    assert totals[TransactionKind.RECEIVABLE][InstanceStatus.OVERDUE] == Decimal("75.00")
    assert totals[TransactionKind.RECEIVABLE][InstanceStatus.PENDING] == Decimal("0.00")
