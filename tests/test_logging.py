"""Tests for structured logging."""

import io
import json
import logging
from datetime import date
from decimal import Decimal

from finflow.domain.entities import TransactionKind
from finflow.logging_config import configure_logging, get_logger


def _records(stream: io.StringIO) -> list[dict]:
    return [json.loads(line) for line in stream.getvalue().splitlines() if line]


def test_structured_json_line():
    stream = io.StringIO()
    configure_logging(level="INFO", stream=stream)

    get_logger("test").info(
        "something_happened",
        extra={"amount": Decimal("1.50"), "due_date": date(2024, 1, 2), "kind": TransactionKind.PAYABLE},
    )

    (record,) = _records(stream)
    assert record["message"] == "something_happened"
    assert record["logger"] == "finflow.test"
    assert record["level"] == "INFO"
    assert record["amount"] == "1.50"
    assert record["due_date"] == "2024-01-02"
    assert record["kind"] == "payable"


def test_configure_is_idempotent():
    first, second = io.StringIO(), io.StringIO()
    configure_logging(level=logging.INFO, stream=first)
    configure_logging(level=logging.INFO, stream=second)

    get_logger("test").info("once")

    assert len(_records(first)) == 1
    assert second.getvalue() == ""


def test_level_filters():
    stream = io.StringIO()
    configure_logging(level="warning", stream=stream)

    get_logger("test").info("hidden")
    get_logger("test").warning("shown")

    assert [r["message"] for r in _records(stream)] == ["shown"]


def test_payment_events_logged(ledger, tenant):
    stream = io.StringIO()
    configure_logging(level="INFO", stream=stream)
    instance_id = ledger.create_instance(
        tenant, TransactionKind.PAYABLE, "Rent", Decimal("10"), date(2024, 1, 1)
    ).unwrap()

    ledger.register_payment(tenant, instance_id, as_of=date(2024, 1, 1))
    ledger.register_payment(tenant, instance_id, as_of=date(2024, 1, 2))

    events = [(r["message"], r["instance_id"]) for r in _records(stream)]
    assert events == [("payment_registered", instance_id), ("payment_rejected", instance_id)]
    assert _records(stream)[1]["status"] == "paid"


def test_materialize_logged(recurrence_service, tenant, monthly_series):
    stream = io.StringIO()
    configure_logging(level="INFO", stream=stream)

    recurrence_service.generate_due(tenant, as_of=date(2024, 12, 1))

    (record,) = _records(stream)
    assert record["message"] == "recurring_generation_completed"
    assert record["payables_created"] == 0
