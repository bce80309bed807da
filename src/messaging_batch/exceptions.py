"""
Errors surfaced to callers through the futures returned by ``BatchQueue.push``.
"""

from __future__ import annotations

import typing as t


class BatchError(Exception):
    """Base class for every batch queue failure."""


class BatchItemError(BatchError):
    """
    The transport reported a failure for one sub-request of a batch.

    Parameters
    ----------
    request : typing.Any
        Request that was pushed by the caller.
    error : typing.Any
        Error descriptor reported by the transport, kept verbatim.
    response : typing.Any, optional
        Raw per-item response, when the transport exposes one.
    """

    def __init__(self, *, request: t.Any, error: t.Any, response: t.Any = None) -> None:
        self.request = request
        self.error = error
        self.response = response
        super().__init__(_describe_error(error=error))


class BatchTransportError(BatchError):
    """
    The batched call failed before producing per-item outcomes.

    Every item of the affected flush is rejected with the same instance.
    """

    def __init__(self, message: str, *, response: t.Any = None) -> None:
        self.response = response
        super().__init__(message)


class BatchContractError(BatchTransportError):
    """The transport returned a different number of outcomes than requests."""

    def __init__(self, *, expected: int, received: int) -> None:
        self.expected = expected
        self.received = received
        super().__init__(
            f"Transport returned {received} outcome(s) for a batch of {expected} request(s)"
        )


def _describe_error(*, error: t.Any) -> str:
    """
    Build a readable message from a transport error descriptor.

    Parameters
    ----------
    error : typing.Any
        Error descriptor, usually a Graph API ``error`` object.

    Returns
    -------
    str
        Message used as the exception text.
    """
    if isinstance(error, t.Mapping):
        message = error.get("message")
        code = error.get("code")
        if message is not None and code is not None:
            return f"Batch item failed - {code} {message}"
        if message is not None:
            return f"Batch item failed - {message}"
    return f"Batch item failed - {error!r}"
