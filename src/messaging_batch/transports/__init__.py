from messaging_batch.transports.base import BatchTransport
from messaging_batch.transports.graph import GraphBatchTransport

__all__ = [
    "BatchTransport",
    "GraphBatchTransport",
]
