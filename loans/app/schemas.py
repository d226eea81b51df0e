"""Request and response bodies for the loans API."""

from typing import Annotated, Any

import pydantic
import pydantic.alias_generators

# SQLite INTEGER is a signed 64-bit value
SQLITE_INTEGER_MAX = 2**63 - 1

PeriodCount = Annotated[int, pydantic.Field(ge=0, le=SQLITE_INTEGER_MAX)]


class CamelModel(pydantic.BaseModel):
    """Base model that speaks camelCase JSON and snake_case Python."""

    model_config = pydantic.ConfigDict(
        alias_generator=pydantic.alias_generators.to_camel,
        populate_by_name=True,
    )


class RequestModel(CamelModel):
    """Incoming body: every number must be finite and storable."""

    model_config = pydantic.ConfigDict(allow_inf_nan=False)


class LoanResult(RequestModel):
    """Calculation output supplied by the client."""

    monthly_payment: float
    total_interest: float
    payoff_months: PeriodCount
    schedule: list[Any]


class LoanCreate(RequestModel):
    """Request body for saving a loan calculation."""

    amount: float
    interest_rate: float
    term: PeriodCount
    extra_payment: float
    result: LoanResult


class StoredLoanResult(CamelModel):
    """Calculation output as read back from storage."""

    monthly_payment: float | None = None
    total_interest: float | None = None
    payoff_months: int | None = None
    schedule: Any = None


class LoanRecord(CamelModel):
    """A stored loan as returned by the API."""

    id: int
    amount: float | None = None
    interest_rate: float | None = None
    term: int | None = None
    extra_payment: float | None = None
    result: StoredLoanResult
    timestamp: str | None = None


class ErrorResponse(pydantic.BaseModel):
    """Flat error body returned on failure."""

    error: str
