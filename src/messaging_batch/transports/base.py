from __future__ import annotations

import typing as t

from messaging_batch.models import BatchOutcome


@t.runtime_checkable
class BatchTransport(t.Protocol):
    """
    Batch-capable sender consumed by ``BatchQueue``.

    ``send_batch`` receives the requests of one flush in push order and must
    return one ``BatchOutcome`` per request, in the same order. Raising
    instead means the whole batch failed.
    """

    async def send_batch(self, requests: t.Sequence[t.Any]) -> t.Sequence[BatchOutcome]: ...
