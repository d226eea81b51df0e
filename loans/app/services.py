"""Loan persistence operations."""

import json

import sqlalchemy.exc
import sqlmodel

from . import errors, models, schemas


def create_loan(session: sqlmodel.Session, loan: schemas.LoanCreate) -> models.Loan:
    """Persist a loan calculation as a new row and return it with its id.

    The timestamp is captured once, so the stored row and the returned object
    agree.
    """
    try:
        schedule = json.dumps(loan.result.schedule)
    except (TypeError, ValueError) as exc:
        raise errors.StorageDataError(f'schedule is not serializable: {exc}') from exc

    row = models.Loan(
        amount=loan.amount,
        interest_rate=loan.interest_rate,
        term=loan.term,
        extra_payment=loan.extra_payment,
        monthly_payment=loan.result.monthly_payment,
        total_interest=loan.result.total_interest,
        payoff_months=loan.result.payoff_months,
        timestamp=models.current_timestamp(),
        schedule=schedule,
    )
    try:
        session.add(row)
        session.commit()
        session.refresh(row)
    except (sqlalchemy.exc.SQLAlchemyError, OverflowError) as exc:
        # sqlite3 raises a bare OverflowError for integers beyond 64 bits
        session.rollback()
        raise errors.classify(exc) from exc
    return row


def list_loans(session: sqlmodel.Session) -> list[models.Loan]:
    """Get all loans in storage order."""
    try:
        return list(session.exec(sqlmodel.select(models.Loan)).all())
    except sqlalchemy.exc.SQLAlchemyError as exc:
        raise errors.classify(exc) from exc


def to_record(row: models.Loan) -> schemas.LoanRecord:
    """Reshape a stored row into the nested API representation."""
    try:
        schedule = json.loads(row.schedule) if row.schedule is not None else None
    except ValueError as exc:
        raise errors.StorageDataError(
            f'loan {row.id} has an unreadable schedule: {exc}'
        ) from exc

    return schemas.LoanRecord(
        id=row.id,  # type: ignore[arg-type]
        amount=row.amount,
        interest_rate=row.interest_rate,
        term=row.term,
        extra_payment=row.extra_payment,
        result=schemas.StoredLoanResult(
            monthly_payment=row.monthly_payment,
            total_interest=row.total_interest,
            payoff_months=row.payoff_months,
            schedule=schedule,
        ),
        timestamp=row.timestamp,
    )
