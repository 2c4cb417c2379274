"""SQLAlchemy models for bankledger database."""

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
    UniqueConstraint,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


class FiscalPeriod(Base):
    """Fiscal period model."""

    __tablename__ = "fiscal_periods"

    id = Column(Integer, primary_key=True)
    company_id = Column(Integer, nullable=False, index=True)
    name = Column(String, nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    is_closed = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    __table_args__ = (UniqueConstraint("company_id", "name", name="uq_company_period_name"),)

    # Relationships
    transactions = relationship("BankTransaction", back_populates="fiscal_period")


class Account(Base):
    """Chart-of-accounts model."""

    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True)
    code = Column(String, unique=True, nullable=False)
    name = Column(String, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    transactions = relationship("BankTransaction", back_populates="classification_account")


class BankTransaction(Base):
    """Bank transaction model."""

    __tablename__ = "bank_transactions"

    id = Column(Integer, primary_key=True)
    company_id = Column(Integer, nullable=False, index=True)
    fiscal_period_id = Column(Integer, ForeignKey("fiscal_periods.id"), nullable=False)
    transaction_date = Column(Date, nullable=False)
    details = Column(String, nullable=False)
    debit_amount = Column(Numeric(15, 2), nullable=True)
    credit_amount = Column(Numeric(15, 2), nullable=True)
    balance = Column(Numeric(15, 2), nullable=True)
    service_fee = Column(Boolean, default=False, nullable=False)
    account_number = Column(String, nullable=True)
    statement_period = Column(String, nullable=True)
    source_file = Column(String, nullable=True)
    classification_account_id = Column(Integer, ForeignKey("accounts.id"), nullable=True)
    imported_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    fiscal_period = relationship("FiscalPeriod", back_populates="transactions")
    classification_account = relationship("Account", back_populates="transactions")


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
