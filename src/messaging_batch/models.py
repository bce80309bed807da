from __future__ import annotations

import os
import typing as t
from dataclasses import dataclass

import structlog
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

from messaging_batch.case import camelcase

log = structlog.get_logger(__name__)

DEFAULT_MAX_SIZE = 50
DEFAULT_DELAY_SECONDS = 1.0
MAX_SIZE_ENV_VAR = "MESSAGING_BATCH_MAX_SIZE"
DELAY_SECONDS_ENV_VAR = "MESSAGING_BATCH_DELAY_SECONDS"


class QueueConfig(BaseModel):
    """
    Flush policy of a ``BatchQueue``.

    Attributes
    ----------
    max_size : int
        Flush as soon as this many requests are buffered.
    delay_seconds : float
        Flush a non-empty queue after this many idle seconds.
    """

    model_config = ConfigDict(frozen=True, strict=True)

    max_size: int = Field(default=DEFAULT_MAX_SIZE, ge=1)
    delay_seconds: float = Field(default=DEFAULT_DELAY_SECONDS, gt=0)

    @classmethod
    def from_env(cls) -> "QueueConfig":
        """
        Build a config from environment variables, falling back to defaults.

        Returns
        -------
        QueueConfig
            Validated configuration.

        Raises
        ------
        ValueError
            If a variable is set but cannot be parsed as a number.
        """
        load_dotenv()
        max_size = os.getenv(MAX_SIZE_ENV_VAR)
        delay_seconds = os.getenv(DELAY_SECONDS_ENV_VAR)
        config = cls(
            max_size=int(max_size) if max_size else DEFAULT_MAX_SIZE,
            delay_seconds=float(delay_seconds) if delay_seconds else DEFAULT_DELAY_SECONDS,
        )
        log.debug(
            event="Loaded queue config from environment",
            max_size=config.max_size,
            delay_seconds=config.delay_seconds,
        )
        return config


@dataclass(frozen=True)
class BatchOutcome:
    """
    Result of one sub-request, as reported by a transport.

    Parameters
    ----------
    ok : bool
        Whether the sub-request succeeded.
    payload : typing.Any
        Value handed to the caller on success.
    error : typing.Any
        Error descriptor handed to the caller on failure.
    response : typing.Any
        Raw per-item response, kept for diagnostics.
    """

    ok: bool
    payload: t.Any = None
    error: t.Any = None
    response: t.Any = None

    @classmethod
    def success(cls, payload: t.Any, response: t.Any = None) -> "BatchOutcome":
        return cls(ok=True, payload=payload, response=response)

    @classmethod
    def failure(cls, error: t.Any, response: t.Any = None) -> "BatchOutcome":
        return cls(ok=False, error=error, response=response)


class GraphBatchRequest(BaseModel):
    """
    One operation of a Graph API batch call.

    Accepts both snake_case field names and their camelCase aliases.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=camelcase)

    method: str = "POST"
    relative_url: str
    body: dict[str, t.Any] | None = None
    name: str | None = None
    depends_on: str | None = None
    omit_response_on_success: bool | None = None
