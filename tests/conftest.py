"""Shared pytest fixtures for finflow tests."""

import os
import tempfile
from datetime import date
from decimal import Decimal

import pytest

from finflow.database.factories import create_sqlite_database
from finflow.domain.account import BankAccountService
from finflow.domain.balance import BalanceSnapshotService
from finflow.domain.cash_flow import CashFlowService
from finflow.domain.deletion import SeriesDeletionService
from finflow.domain.entities import Frequency, TenantContext, TransactionKind
from finflow.domain.ledger import InstallmentLedger
from finflow.domain.recurrence import RecurrenceService
from finflow.logging_config import reset_logging


@pytest.fixture(autouse=True)
def clean_logging():
    """Each test starts with unconfigured logging."""
    reset_logging()
    yield
    reset_logging()


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def tenant():
    """Tenant every service call in a test runs under."""
    return TenantContext(tenant_id="acme")


@pytest.fixture
def other_tenant():
    """A second company sharing the same database."""
    return TenantContext(tenant_id="globex")


@pytest.fixture
def account_service(temp_db):
    """Create a BankAccountService with a temporary database."""
    return BankAccountService(temp_db)


@pytest.fixture
def ledger(temp_db):
    """Create an InstallmentLedger with a temporary database."""
    return InstallmentLedger(temp_db)


@pytest.fixture
def recurrence_service(temp_db):
    """Create a RecurrenceService with a temporary database."""
    return RecurrenceService(temp_db)


@pytest.fixture
def deletion_service(temp_db):
    """Create a SeriesDeletionService with a temporary database."""
    return SeriesDeletionService(temp_db)


@pytest.fixture
def balance_service(temp_db):
    """Create a BalanceSnapshotService with a temporary database."""
    return BalanceSnapshotService(temp_db)


@pytest.fixture
def cash_flow_service(temp_db):
    """Create a CashFlowService with a temporary database."""
    return CashFlowService(temp_db)


@pytest.fixture
def sample_bank_account(account_service, tenant):
    """Create a sample bank account with an opening balance."""
    account_id = account_service.create_account(
        tenant, name="Operating", bank_name="Test Bank", opening_balance=Decimal("1000.00")
    )
    return account_service.get_account(tenant, account_id)


@pytest.fixture
def monthly_series(recurrence_service, tenant):
    """A five-installment monthly payable split from a 500.00 total."""
    template_id = recurrence_service.create_recurring(
        tenant,
        kind=TransactionKind.PAYABLE,
        description="Equipment",
        amount=Decimal("500.00"),
        due_date=date(2024, 1, 15),
        frequency=Frequency.MONTHLY,
        occurrence_count=5,
        split_total=True,
    ).unwrap()
    recurrence_service.materialize(tenant, template_id, horizon_periods=10).unwrap()
    return template_id


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
