"""Library configuration via environment variables."""

from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Settings loaded from RULEBRIDGE_* environment variables."""

    # Validation pipeline
    RUN_DEFAULT_VALIDATION: bool = True      # run built-in validation after the rule validators
    AUTO_REJECT_INVALID_MODELS: bool = True  # raise ModelStateInvalidError when an endpoint doesn't take model state
    INVALID_MODEL_STATUS_CODE: int = 422

    # Logging
    DEBUG: bool = False
    LOG_LEVEL: str = "info"

    model_config = {"env_prefix": "RULEBRIDGE_", "env_file": ".env", "env_file_encoding": "utf-8"}


@lru_cache
def get_settings() -> Settings:
    return Settings()
