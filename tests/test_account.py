"""Tests for bank account service and commands."""

from decimal import Decimal

import pytest

from finflow.cli.main import cli
from finflow.domain.errors import ConflictError, NotFoundError, ValidationError
from finflow.utils.account_resolver import resolve_bank_account


class TestBankAccountService:
    """Tests for BankAccountService."""

    def test_create_and_get(self, account_service, tenant):
        account_id = account_service.create_account(
            tenant, name="Savings", bank_name="Bank", opening_balance=Decimal("10.555")
        )
        account = account_service.get_account(tenant, account_id)
        assert account.name == "Savings"
        assert account.opening_balance == Decimal("10.56")

    def test_duplicate_name(self, account_service, tenant, sample_bank_account):
        with pytest.raises(ConflictError, match="already exists"):
            account_service.create_account(tenant, name="Operating", bank_name="Other")

    def test_same_name_in_other_tenant(self, account_service, other_tenant, sample_bank_account):
        account_id = account_service.create_account(other_tenant, name="Operating", bank_name="Other")
        assert account_id != sample_bank_account.id

    def test_empty_name(self, account_service, tenant):
        with pytest.raises(ValidationError):
            account_service.create_account(tenant, name="  ", bank_name="Bank")


class TestResolveBankAccount:
    """Tests for bank account name/ID resolution."""

    def test_by_name_and_id(self, account_service, tenant, sample_bank_account):
        assert resolve_bank_account(account_service, tenant, "Operating") == sample_bank_account.id
        assert resolve_bank_account(account_service, tenant, str(sample_bank_account.id)) == sample_bank_account.id
        assert resolve_bank_account(account_service, tenant, sample_bank_account.id) == sample_bank_account.id

    def test_unknown(self, account_service, tenant, sample_bank_account):
        with pytest.raises(NotFoundError):
            resolve_bank_account(account_service, tenant, "Nope")
        with pytest.raises(NotFoundError, match="ID 999"):
            resolve_bank_account(account_service, tenant, "999")

    def test_other_tenant(self, account_service, other_tenant, sample_bank_account):
        with pytest.raises(NotFoundError):
            resolve_bank_account(account_service, other_tenant, "Operating")


def test_account_create_with_bank(cli_runner, temp_db):
    """Test creating an account with --bank option."""
    result = cli_runner.invoke(
        cli,
        [
            "--db-path",
            temp_db.database_path,
            "account",
            "create",
            "Operating",
            "--bank",
            "Test Bank",
            "--opening-balance",
            "1,500.00",
        ],
    )

    assert result.exit_code == 0
    assert "Created bank account 'Operating'" in result.output
    assert "ID:" in result.output


def test_account_create_without_bank(cli_runner, temp_db):
    """Test creating an account without --bank option."""
    result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "account", "create", "Cash"])

    assert result.exit_code == 0
    assert "Bank name set to 'Cash'" in result.output


def test_account_create_duplicate(cli_runner, temp_db):
    """Test creating duplicate account name fails."""
    args = ["--db-path", temp_db.database_path, "account", "create", "Operating"]
    assert cli_runner.invoke(cli, args).exit_code == 0

    result = cli_runner.invoke(cli, args)
    assert result.exit_code == 1
    assert "Error: Bank account with name 'Operating' already exists" in result.output


def test_account_list_empty(cli_runner, temp_db):
    """Test listing accounts when none exist."""
    result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "account", "list"])

    assert result.exit_code == 0
    assert "No bank accounts found" in result.output


def test_account_list_is_tenant_scoped(cli_runner, temp_db, sample_bank_account):
    """Test that accounts of another tenant are not listed."""
    result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "--tenant", "acme", "account", "list"])
    assert "Operating" in result.output
    assert "1,000.00" in result.output

    result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "--tenant", "globex", "account", "list"])
    assert "No bank accounts found" in result.output


def test_account_summary_unknown_account(cli_runner, temp_db):
    """Test summary of an account that does not exist."""
    result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "account", "summary", "Nope"])

    assert result.exit_code == 1
    assert "Bank account 'Nope' not found" in result.output
