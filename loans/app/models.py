"""Database model for stored loan calculations."""

import datetime

import sqlalchemy
import sqlmodel


def current_timestamp() -> str:
    """Current UTC time as ISO-8601 with millisecond precision and a Z suffix."""
    now = datetime.datetime.now(datetime.UTC)
    return now.isoformat(timespec='milliseconds').replace('+00:00', 'Z')


class Loan(sqlmodel.SQLModel, table=True):
    """A single loan calculation and its amortization schedule.

    Column names are camelCase to match the table layout clients and earlier
    deployments already use. The schedule is stored as JSON text.
    """

    __tablename__ = 'loans'  # type: ignore[misc]
    __table_args__ = {'sqlite_autoincrement': True}

    id: int | None = sqlmodel.Field(default=None, primary_key=True)
    amount: float | None = sqlmodel.Field(
        default=None, sa_column=sqlalchemy.Column('amount', sqlalchemy.Float)
    )
    interest_rate: float | None = sqlmodel.Field(
        default=None, sa_column=sqlalchemy.Column('interestRate', sqlalchemy.Float)
    )
    term: int | None = sqlmodel.Field(
        default=None, sa_column=sqlalchemy.Column('term', sqlalchemy.Integer)
    )
    extra_payment: float | None = sqlmodel.Field(
        default=None, sa_column=sqlalchemy.Column('extraPayment', sqlalchemy.Float)
    )
    monthly_payment: float | None = sqlmodel.Field(
        default=None, sa_column=sqlalchemy.Column('monthlyPayment', sqlalchemy.Float)
    )
    total_interest: float | None = sqlmodel.Field(
        default=None, sa_column=sqlalchemy.Column('totalInterest', sqlalchemy.Float)
    )
    payoff_months: int | None = sqlmodel.Field(
        default=None, sa_column=sqlalchemy.Column('payoffMonths', sqlalchemy.Integer)
    )
    timestamp: str | None = sqlmodel.Field(
        default=None, sa_column=sqlalchemy.Column('timestamp', sqlalchemy.Text)
    )
    schedule: str | None = sqlmodel.Field(
        default=None, sa_column=sqlalchemy.Column('schedule', sqlalchemy.Text)
    )
