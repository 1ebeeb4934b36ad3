"""Configuration for the loan accrual command-line tools.

Settings are read from environment variables prefixed with ``LOAN_ACCRUAL_``.
All of them have defaults suitable for local use.

Environment Variables
---------------------
LOAN_ACCRUAL_DEFAULT_INTEREST_METHOD : str
    Project default interest method, e.g. ``ACT_365_NOCOMPOUND`` (unset by
    default; loans then need their own method).
LOAN_ACCRUAL_LOG_LEVEL : str
    Logging level (DEBUG, INFO, WARNING, ERROR). Default ``WARNING``.
LOAN_ACCRUAL_LOG_FORMAT : str
    ``logging`` format string.
LOAN_ACCRUAL_MAX_ROWS : int
    Table rows printed before output is truncated. Default 120.

The engine itself never reads these; the CLI resolves them and passes the
values down explicitly.
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from typing import Any, Optional

from .data_models import InterestMethod

logger = logging.getLogger(__name__)

ENV_PREFIX = "LOAN_ACCRUAL_"


def _get_env(key: str, default: Any, value_type: type = str) -> Any:
    """Read ``LOAN_ACCRUAL_<KEY>`` and convert it, falling back to ``default``."""
    env_value = os.environ.get(f"{ENV_PREFIX}{key.upper()}")
    if env_value is None or env_value == "":
        return default
    try:
        if value_type == int:
            return int(env_value)
        return env_value
    except ValueError:
        logger.warning("Ignoring invalid value %r for %s%s", env_value, ENV_PREFIX, key.upper())
        return default


class Settings:
    """Configuration loaded from environment variables."""

    def __init__(self) -> None:
        self.default_interest_method: Optional[str] = _get_env("DEFAULT_INTEREST_METHOD", None, str)
        self.log_level: str = _get_env("LOG_LEVEL", "WARNING", str).upper()
        if not isinstance(getattr(logging, self.log_level, None), int):
            logger.warning("Ignoring invalid value %r for %sLOG_LEVEL", self.log_level, ENV_PREFIX)
            self.log_level = "WARNING"
        self.log_format: str = _get_env(
            "LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s", str
        )
        self.max_rows: int = _get_env("MAX_ROWS", 120, int)

    def interest_method(self) -> Optional[InterestMethod]:
        """Return the parsed project default method, if configured."""
        if not self.default_interest_method:
            return None
        return InterestMethod.parse(self.default_interest_method)

    def configure_logging(self) -> None:
        logging.basicConfig(level=self.log_level, format=self.log_format)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
