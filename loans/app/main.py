"""FastAPI application for the loan ledger service."""

import contextlib
import logging
import sys
from collections.abc import AsyncGenerator

import fastapi
import fastapi.exceptions
import fastapi.responses
import uvicorn

import common.app
import common.log

from . import database, errors, routes
from . import settings as app_settings

logger = logging.getLogger(__name__)

APP_TITLE = 'Loan Ledger'
INVALID_REQUEST = 'Invalid loan request'


async def invalid_request_handler(
    request: fastapi.Request, exc: fastapi.exceptions.RequestValidationError
) -> fastapi.responses.JSONResponse:
    """Reject malformed bodies with a 400 listing the offending fields."""
    details = [
        {'loc': list(error['loc']), 'msg': error['msg']} for error in exc.errors()
    ]
    logger.info('Rejected %s %s: %s', request.method, request.url.path, details)
    return fastapi.responses.JSONResponse(
        status_code=fastapi.status.HTTP_400_BAD_REQUEST,
        content={'error': INVALID_REQUEST, 'details': details},
    )


def create_app(
    store: database.LoanStore | None = None,
    config: app_settings.Settings | None = None,
) -> fastapi.FastAPI:
    """Build the application around an explicit store.

    Without a store, one is opened from settings when the app starts up and a
    failure to open it aborts startup; the server then reports the failure with
    its own exit status. The store is closed on shutdown either way.
    """

    @contextlib.asynccontextmanager
    async def lifespan(app: fastapi.FastAPI) -> AsyncGenerator[None, None]:
        if app.state.store is None:
            app.state.config = app.state.config or app_settings.load_settings()
            try:
                app.state.store = database.open_store(app.state.config.database_path)
            except errors.StorageUnavailableError as exc:
                logger.error('Error opening database: %s', exc)
                raise
        yield
        app.state.store.close()

    app = common.app.create_app(APP_TITLE, cors=True, lifespan=lifespan)
    app.state.store = store
    app.state.config = config
    app.add_exception_handler(
        fastapi.exceptions.RequestValidationError,
        invalid_request_handler,  # type: ignore[arg-type]
    )
    app.include_router(routes.router)
    return app


app = create_app()


def run() -> None:
    """Open storage and serve the API until interrupted.

    This is the supported way to start the service: storage is opened before
    serving, so an unopenable database exits with status 1.
    """
    config = app_settings.load_settings()
    common.log.configure_logging(config.log_level)
    try:
        store = database.open_store(config.database_path)
    except errors.StorageUnavailableError as exc:
        logger.error('Error opening database: %s', exc)
        sys.exit(1)

    logger.info('Server running on %s:%d', config.host, config.port)
    uvicorn.run(create_app(store, config), host=config.host, port=config.port)


if __name__ == '__main__':
    run()
