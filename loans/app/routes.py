"""API routes for saving and listing loan calculations."""

import logging
from typing import Annotated, Any

import fastapi
import fastapi.responses
import sqlmodel

from . import database, errors, schemas, services

logger = logging.getLogger(__name__)

router = fastapi.APIRouter()

DatabaseSession = Annotated[sqlmodel.Session, fastapi.Depends(database.get_session)]

SAVE_FAILED = 'Failed to save loan'
FETCH_FAILED = 'Failed to fetch loans'


def _error_response(message: str) -> fastapi.responses.JSONResponse:
    return fastapi.responses.JSONResponse(
        status_code=fastapi.status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=schemas.ErrorResponse(error=message).model_dump(),
    )


@router.post(
    '/api/loans',
    status_code=fastapi.status.HTTP_201_CREATED,
    response_model=schemas.LoanRecord,
    responses={500: {'model': schemas.ErrorResponse}},
)
def create_loan(loan: schemas.LoanCreate, session: DatabaseSession) -> Any:
    """Save a loan calculation."""
    try:
        row = services.create_loan(session, loan)
    except errors.StorageError as err:
        logger.error('Error saving loan [%s]: %s', err.code, err)
        return _error_response(SAVE_FAILED)
    return services.to_record(row)


@router.get(
    '/api/loans',
    response_model=list[schemas.LoanRecord],
    responses={500: {'model': schemas.ErrorResponse}},
)
def list_loans(session: DatabaseSession) -> Any:
    """List every saved loan calculation."""
    try:
        return [services.to_record(row) for row in services.list_loans(session)]
    except errors.StorageError as err:
        logger.error('Error fetching loans [%s]: %s', err.code, err)
        return _error_response(FETCH_FAILED)
