"""
Main endpoint for users.
Exposes ``create_messenger_batch_queue``, which wires a ``GraphBatchTransport``
to a ``BatchQueue`` using explicit arguments or environment defaults.
"""

import os
import typing as t

import httpx
from dotenv import load_dotenv

from messaging_batch.core import BatchQueue
from messaging_batch.models import QueueConfig
from messaging_batch.transports.graph import DEFAULT_GRAPH_VERSION, GraphBatchTransport

ACCESS_TOKEN_ENV_VAR = "MESSENGER_ACCESS_TOKEN"
GRAPH_VERSION_ENV_VAR = "MESSENGER_GRAPH_VERSION"


def get_default_access_token() -> str:
    access_token = os.getenv(ACCESS_TOKEN_ENV_VAR)
    if not access_token:
        raise ValueError(
            f"Access token not found. Either set {ACCESS_TOKEN_ENV_VAR} in the environment variables or provide it through the access_token parameter."
        )
    return access_token


def create_messenger_batch_queue(
    access_token: str | None = None,
    *,
    version: str | None = None,
    max_size: int | None = None,
    delay_seconds: float | None = None,
    client_factory: t.Callable[[], httpx.AsyncClient] | None = None,
) -> BatchQueue:
    """
    Create a batch queue sending through the Messenger Graph API.

    Parameters
    ----------
    access_token : str | None, optional
        Page access token. Defaults to ``MESSENGER_ACCESS_TOKEN``.
    version : str | None, optional
        Graph API version. Defaults to ``MESSENGER_GRAPH_VERSION``, then ``6.0``.
    max_size : int | None, optional
        Flush when this many requests are queued. Defaults to the environment config.
    delay_seconds : float | None, optional
        Flush a non-empty queue after this many seconds. Defaults to the environment config.
    client_factory : typing.Callable[[], httpx.AsyncClient] | None, optional
        Factory for the HTTP client of each batch call.

    Returns
    -------
    BatchQueue
        Queue bound to a ``GraphBatchTransport``.
    """
    load_dotenv()
    env_config = QueueConfig.from_env()
    transport = GraphBatchTransport(
        access_token=access_token or get_default_access_token(),
        version=version or os.getenv(GRAPH_VERSION_ENV_VAR) or DEFAULT_GRAPH_VERSION,
        client_factory=client_factory,
    )
    return BatchQueue(
        transport=transport,
        max_size=env_config.max_size if max_size is None else max_size,
        delay_seconds=env_config.delay_seconds if delay_seconds is None else delay_seconds,
    )
