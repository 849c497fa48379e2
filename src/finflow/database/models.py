"""SQLAlchemy models for finflow database."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Date,
    Numeric,
    UniqueConstraint,
    Index,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


class BankAccount(Base):
    """Bank account model."""

    __tablename__ = "bank_accounts"

    id = Column(Integer, primary_key=True)
    tenant_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    bank_name = Column(String, nullable=False)
    opening_balance = Column(Numeric(12, 2), nullable=False, default=0)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    __table_args__ = (UniqueConstraint("tenant_id", "name", name="uq_tenant_bank_account_name"),)

    # Relationships
    transactions = relationship("Transaction", back_populates="bank_account")


class Transaction(Base):
    """Payable or receivable instance, including recurring series roots.

    parent_template_id is a plain column rather than a foreign key: paid
    installments keep pointing at their template after a series deletion
    removed it.
    """

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True)
    tenant_id = Column(String, nullable=False, index=True)
    kind = Column(String, nullable=False)
    description = Column(String, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    due_date = Column(Date, nullable=False)
    payment_date = Column(Date, nullable=True)
    status = Column(String, nullable=False, default="pending")
    parent_template_id = Column(Integer, nullable=True)
    sequence_number = Column(Integer, nullable=False, default=1)
    recurrence_frequency = Column(String, nullable=True)
    recurrence_interval = Column(Integer, nullable=True)
    recurrence_end_date = Column(Date, nullable=True)
    recurrence_count = Column(Integer, nullable=True)
    recurrence_total_amount = Column(Numeric(12, 2), nullable=True)
    generated_through_sequence = Column(Integer, nullable=True)
    bank_account_id = Column(Integer, ForeignKey("bank_accounts.id"), nullable=True)
    cost_center_id = Column(Integer, nullable=True)
    category_id = Column(Integer, nullable=True)
    subcategory_id = Column(Integer, nullable=True)
    payment_method = Column(String, nullable=True)
    notes = Column(String, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # One row per (template, installment number)
    __table_args__ = (
        UniqueConstraint("parent_template_id", "sequence_number", name="uq_template_sequence"),
        Index("ix_transactions_tenant_parent", "tenant_id", "parent_template_id"),
    )

    # Relationships
    bank_account = relationship("BankAccount", back_populates="transactions")


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
