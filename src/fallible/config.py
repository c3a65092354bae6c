"""Library settings: defaults < environment < explicit overrides.

Only ``FALLIBLE_*`` variables are read. A ``.env`` file in the working
directory is loaded once (python-dotenv never overrides variables that are
already set). Validation goes through the pydantic ``Settings`` schema and
surfaces as ``ConfigurationError``.

Example:
    FALLIBLE_RETRY_TIMES=3 FALLIBLE_RETRY_BACKOFF=exponential python app.py

    settings = resolve_settings()
    await try_async(fetch, retry=True)  # uses settings.retry_policy()
"""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from fallible.errors import ConfigurationError
from fallible.retry import RetryPolicy

if TYPE_CHECKING:
    from collections.abc import Mapping

log = logging.getLogger(__name__)

ENV_PREFIX = "FALLIBLE_"

_DOTENV_LOADED: bool = False


class Settings(BaseModel):
    """Schema and defaults for library-wide settings."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    retry_times: int = Field(default=0, ge=0)
    retry_delay_ms: int = Field(default=0, ge=0)
    retry_backoff: Literal["linear", "exponential"] = "linear"

    @field_validator("retry_backoff", mode="before")
    @classmethod
    def normalize_backoff(cls, v: Any) -> Any:
        """Accept ``"Exponential"``, ``" linear "`` and similar spellings."""
        if isinstance(v, str):
            return v.strip().lower()
        return v

    def retry_policy(self) -> RetryPolicy:
        """Build the default retry policy described by these settings."""
        return RetryPolicy(
            times=self.retry_times,
            delay_ms=self.retry_delay_ms,
            backoff=self.retry_backoff,
        )


def load_env() -> dict[str, Any]:
    """Read ``FALLIBLE_*`` variables for known settings fields.

    Values stay strings; pydantic coerces them against the schema. Unknown
    ``FALLIBLE_*`` names are ignored so unrelated tooling can share the
    prefix.
    """
    config: dict[str, Any] = {}
    for key, value in os.environ.items():
        if not key.startswith(ENV_PREFIX):
            continue
        field_name = key[len(ENV_PREFIX) :].lower()
        if field_name in Settings.model_fields:
            config[field_name] = value
    return config


def _try_load_dotenv() -> None:
    global _DOTENV_LOADED
    if _DOTENV_LOADED:
        return
    from dotenv import load_dotenv

    load_dotenv()
    _DOTENV_LOADED = True


def resolve_settings(
    overrides: Mapping[str, Any] | None = None, **kwargs: Any
) -> Settings:
    """Resolve settings with precedence defaults < env < overrides.

    Raises:
        ConfigurationError: If a value fails schema validation.
    """
    _try_load_dotenv()

    merged: dict[str, Any] = {**load_env(), **(overrides or {}), **kwargs}
    try:
        settings = Settings.model_validate(merged)
    except ValidationError as e:
        err = e.errors()[0]
        loc = ".".join(str(part) for part in err.get("loc", ()))
        msg = err.get("msg", "invalid value")
        raise ConfigurationError(
            f"Configuration validation failed for {loc or 'settings'}: {msg}",
            hint=f"Check the {ENV_PREFIX}{loc.upper()} environment variable "
            "or the override passed to resolve_settings().",
        ) from e

    log.debug("Resolved settings: %s", settings)
    return settings


__all__ = ["ENV_PREFIX", "Settings", "load_env", "resolve_settings"]
