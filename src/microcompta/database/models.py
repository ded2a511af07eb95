"""SQLAlchemy models for microcompta database."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    DateTime,
    Date,
    Numeric,
    Boolean,
    UniqueConstraint,
    create_engine,
)
from sqlalchemy.orm import declarative_base, sessionmaker, Session

Base = declarative_base()


class Invoice(Base):
    """Invoice model."""

    __tablename__ = "invoices"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    client = Column(String, nullable=False)
    description = Column(String, nullable=True)
    invoice_date = Column(Date, nullable=False)
    payment_date = Column(Date, nullable=True)
    amount_ht = Column(Numeric(12, 2), nullable=False)
    tax_rate = Column(Numeric(5, 2), nullable=False, default=20)
    amount_ttc = Column(Numeric(12, 2), nullable=False)
    invoice_number = Column(String, nullable=True)
    note = Column(String, nullable=True)
    is_canceled = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)


class Expense(Base):
    """Expense model. Recurring expenses keep start/end months as first-of-month dates."""

    __tablename__ = "expenses"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    description = Column(String, nullable=False)
    date = Column(Date, nullable=False)
    amount_ht = Column(Numeric(12, 2), nullable=False)
    tax_amount = Column(Numeric(12, 2), nullable=False, default=0)
    tax_recovery_rate = Column(Numeric(5, 2), nullable=False, default=100)
    category = Column(String, nullable=False, default="other")
    is_intra_eu = Column(Boolean, default=False, nullable=False)
    is_recurring = Column(Boolean, default=False, nullable=False)
    recurrence_period = Column(String, nullable=True)
    start_month = Column(Date, nullable=True)
    end_month = Column(Date, nullable=True)
    payment_day = Column(Integer, nullable=True)
    note = Column(String, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)


class TaxPayment(Base):
    """VAT payment model."""

    __tablename__ = "tax_payments"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    period_month = Column(String(7), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    status = Column(String, nullable=False, default="pending")
    payment_date = Column(Date, nullable=True)
    reference = Column(String, nullable=True)
    note = Column(String, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)


class UrssafPayment(Base):
    """Urssaf payment model."""

    __tablename__ = "urssaf_payments"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    year = Column(Integer, nullable=False)
    trimester = Column(Integer, nullable=False)
    revenue = Column(Numeric(12, 2), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    status = Column(String, nullable=False, default="pending")
    payment_date = Column(Date, nullable=True)
    reference = Column(String, nullable=True)
    note = Column(String, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    __table_args__ = (
        UniqueConstraint("user_id", "year", "trimester", name="uq_urssaf_user_trimester"),
    )


class IncomeTaxPayment(Base):
    """Income tax payment model."""

    __tablename__ = "income_tax_payments"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    year = Column(Integer, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    status = Column(String, nullable=False, default="pending")
    payment_date = Column(Date, nullable=True)
    reference = Column(String, nullable=True)
    note = Column(String, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)


class UserSettings(Base):
    """Per-user settings model."""

    __tablename__ = "settings"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, unique=True, nullable=False)
    urssaf_rate = Column(Numeric(5, 2), nullable=False)
    estimated_tax_rate = Column(Numeric(5, 2), nullable=False)
    revenue_deduction_rate = Column(Numeric(5, 2), nullable=False)
    monthly_salary = Column(Numeric(12, 2), nullable=False)
    additional_taxable_income = Column(Numeric(12, 2), nullable=False, default=0)
    updated_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)


class YearlySettings(Base):
    """Per-year rate override model."""

    __tablename__ = "yearly_settings"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False)
    year = Column(Integer, nullable=False)
    urssaf_rate = Column(Numeric(5, 2), nullable=False)
    estimated_tax_rate = Column(Numeric(5, 2), nullable=False)

    __table_args__ = (UniqueConstraint("user_id", "year", name="uq_yearly_settings_user_year"),)


class TaxBracket(Base):
    """Income tax bracket model. A NULL user_id marks a global default bracket."""

    __tablename__ = "tax_brackets"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=True, index=True)
    year = Column(Integer, nullable=False)
    min_income = Column(Numeric(12, 2), nullable=False)
    max_income = Column(Numeric(12, 2), nullable=True)
    rate = Column(Numeric(5, 2), nullable=False)


class BusinessAccount(Base):
    """Business account balance model."""

    __tablename__ = "business_account"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, unique=True, nullable=False)
    balance = Column(Numeric(12, 2), nullable=False, default=0)
    updated_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
