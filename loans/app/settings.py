"""Application settings read from environment variables."""

import os
import pathlib
from collections.abc import Mapping

import pydantic

PRODUCTION_DB_PATH = pathlib.Path('/app/data/loans.db')
LOCAL_DB_PATH = pathlib.Path('./loans.db')


class Settings(pydantic.BaseModel):
    """Runtime configuration, loaded once at startup."""

    model_config = pydantic.ConfigDict(frozen=True)

    port: int = 3000
    host: str = '0.0.0.0'
    environment: str = 'development'
    db_path: pathlib.Path | None = None
    log_level: str = 'INFO'

    @property
    def is_production(self) -> bool:
        return self.environment == 'production'

    @property
    def database_path(self) -> pathlib.Path:
        """Explicit path if configured, else the path for the current environment."""
        if self.db_path is not None:
            return self.db_path
        return PRODUCTION_DB_PATH if self.is_production else LOCAL_DB_PATH


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Build Settings from the environment (or an explicit mapping)."""
    env = os.environ if environ is None else environ
    values: dict[str, str] = {}
    for field, var in (
        ('port', 'PORT'),
        ('host', 'HOST'),
        ('environment', 'APP_ENV'),
        ('db_path', 'LOANS_DB_PATH'),
        ('log_level', 'LOG_LEVEL'),
    ):
        if env.get(var):
            values[field] = env[var]
    return Settings.model_validate(values)
