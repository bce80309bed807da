from .api import create_messenger_batch_queue as create_messenger_batch_queue
from .core import BatchQueue as BatchQueue
from .exceptions import BatchContractError as BatchContractError
from .exceptions import BatchError as BatchError
from .exceptions import BatchItemError as BatchItemError
from .exceptions import BatchTransportError as BatchTransportError
from .models import BatchOutcome as BatchOutcome
from .models import GraphBatchRequest as GraphBatchRequest
from .models import QueueConfig as QueueConfig
from .transports import BatchTransport as BatchTransport
from .transports import GraphBatchTransport as GraphBatchTransport

__all__ = [
    "BatchQueue",
    "QueueConfig",
    "BatchOutcome",
    "GraphBatchRequest",
    "BatchTransport",
    "GraphBatchTransport",
    "BatchError",
    "BatchItemError",
    "BatchTransportError",
    "BatchContractError",
    "create_messenger_batch_queue",
]
