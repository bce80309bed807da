"""
Facebook Graph API batch transport.
Sends the requests of one flush as a single ``POST /`` carrying a ``batch`` array.
"""

from __future__ import annotations

import inspect
import json
import typing as t
from urllib.parse import urlencode

import httpx
import structlog

from messaging_batch.case import snakecase_keys_deep
from messaging_batch.exceptions import BatchContractError, BatchTransportError
from messaging_batch.models import BatchOutcome, GraphBatchRequest

log = structlog.get_logger(__name__)

DEFAULT_GRAPH_ORIGIN = "https://graph.facebook.com"
DEFAULT_GRAPH_VERSION = "6.0"
NOT_EXECUTED_ERROR = {"message": "Batch operation was not executed"}

OnRequest = t.Callable[[httpx.Request], t.Any]


def extract_version(version: str) -> str:
    if version.startswith("v"):
        return version[1:]
    return version


def encode_body(body: t.Mapping[str, t.Any]) -> str:
    """
    Form-encode a batch operation body.

    Parameters
    ----------
    body : typing.Mapping[str, typing.Any]
        Operation body, with keys in any case.

    Returns
    -------
    str
        ``key=value`` pairs joined by ``&``; non-string values are JSON-encoded.
    """
    fields = {
        key: value if isinstance(value, str) else json.dumps(obj=value, separators=(",", ":"))
        for key, value in snakecase_keys_deep(body).items()
        if value is not None
    }
    return urlencode(query=fields)


def to_batch_item(request: GraphBatchRequest | t.Mapping[str, t.Any]) -> dict[str, t.Any]:
    """
    Serialize a request into a Graph API batch operation.

    Parameters
    ----------
    request : GraphBatchRequest | typing.Mapping[str, typing.Any]
        Request model, or a mapping with the same fields.

    Returns
    -------
    dict[str, typing.Any]
        Batch operation with snake_case keys.
    """
    if not isinstance(request, GraphBatchRequest):
        request = GraphBatchRequest.model_validate(obj=request)

    item: dict[str, t.Any] = {
        "method": request.method.upper(),
        "relative_url": request.relative_url,
    }
    if request.body is not None:
        item["body"] = encode_body(body=request.body)
    if request.name is not None:
        item["name"] = request.name
    if request.depends_on is not None:
        item["depends_on"] = request.depends_on
    if request.omit_response_on_success is not None:
        item["omit_response_on_success"] = request.omit_response_on_success
    return item


def invalid_request_error(*, error: Exception) -> dict[str, t.Any]:
    """Describe a request that could not be serialized into a batch operation."""
    return {"type": type(error).__name__, "message": str(object=error)}


def format_graph_error(*, response: httpx.Response, fallback: str) -> str:
    """
    Build an error message from a Graph API error response.

    Parameters
    ----------
    response : httpx.Response
        Failed response.
    fallback : str
        Message used when the response carries no Graph ``error`` object.

    Returns
    -------
    str
        ``Messenger API - {code} {type} {message}`` or ``fallback``.
    """
    try:
        payload = response.json()
    except ValueError:
        return fallback
    error = payload.get("error") if isinstance(payload, dict) else None
    if not isinstance(error, dict):
        return fallback
    return f"Messenger API - {error.get('code')} {error.get('type')} {error.get('message')}"


def _decode_body(body: t.Any) -> t.Any:
    if not isinstance(body, str):
        return body
    try:
        return json.loads(s=body)
    except ValueError:
        return body


def to_outcome(entry: t.Any) -> BatchOutcome:
    """
    Map one entry of a Graph batch response to an outcome.

    Parameters
    ----------
    entry : typing.Any
        ``{"code", "headers", "body"}`` object, or ``None`` when Graph skipped
        the operation.

    Returns
    -------
    BatchOutcome
        Success carrying the decoded body for 2xx codes, failure otherwise.
    """
    if entry is None:
        return BatchOutcome.failure(error=dict(NOT_EXECUTED_ERROR))

    code = entry.get("code")
    body = _decode_body(body=entry.get("body"))
    if isinstance(code, int) and 200 <= code < 300:
        return BatchOutcome.success(payload=body, response=entry)

    error = body.get("error", body) if isinstance(body, dict) else body
    return BatchOutcome.failure(error=error, response=entry)


class GraphBatchTransport:
    """
    Send queued requests through the Graph API batch endpoint.

    Parameters
    ----------
    access_token : str
        Access token sent with the batch envelope.
    version : str
        Graph API version, with or without a leading ``v``.
    origin : str
        Graph API origin.
    include_headers : bool
        Whether Graph should echo per-operation response headers.
    on_request : OnRequest | None
        Called (and awaited when it returns an awaitable) with every outgoing ``httpx.Request``.
    timeout : float
        Timeout of the default HTTP client.
    client_factory : typing.Callable[[], httpx.AsyncClient] | None
        Factory for the HTTP client used by each batch call.
    """

    def __init__(
        self,
        access_token: str,
        version: str = DEFAULT_GRAPH_VERSION,
        origin: str = DEFAULT_GRAPH_ORIGIN,
        include_headers: bool = False,
        on_request: OnRequest | None = None,
        timeout: float = 30.0,
        client_factory: t.Callable[[], httpx.AsyncClient] | None = None,
    ):
        if not access_token:
            raise ValueError("GraphBatchTransport requires a non-empty access token")

        self.access_token = access_token
        self.version = extract_version(version=version)
        self.base_url = f"{origin.rstrip('/')}/v{self.version}/"
        self.include_headers = include_headers
        self._on_request = on_request
        self._client_factory: t.Callable[[], httpx.AsyncClient] = (
            client_factory or (lambda: httpx.AsyncClient(timeout=timeout))
        )

        log.debug(
            event="Initialized GraphBatchTransport",
            base_url=self.base_url,
            include_headers=include_headers,
        )

    async def _request_hook(self, request: httpx.Request) -> None:
        if self._on_request is None:
            return
        result = self._on_request(request)
        if inspect.isawaitable(result):
            await result

    def _open_client(self) -> httpx.AsyncClient:
        client = self._client_factory()
        if self._on_request is not None:
            hooks = client.event_hooks
            client.event_hooks = {
                **hooks,
                "request": [*hooks.get("request", []), self._request_hook],
            }
        return client

    async def send_batch(
        self, requests: t.Sequence[GraphBatchRequest | t.Mapping[str, t.Any]]
    ) -> list[BatchOutcome]:
        """
        Send requests as one Graph API batch call.

        Parameters
        ----------
        requests : typing.Sequence[GraphBatchRequest | typing.Mapping[str, typing.Any]]
            Requests in send order.

        Returns
        -------
        list[BatchOutcome]
            One outcome per request, in the same order. Requests that cannot be
            serialized fail individually and are left out of the HTTP call.

        Raises
        ------
        BatchTransportError
            If the batch call itself fails or returns an unexpected payload.
        """
        outcomes: list[BatchOutcome | None] = []
        batch: list[dict[str, t.Any]] = []
        positions: list[int] = []
        for index, request in enumerate(requests):
            try:
                item = to_batch_item(request=request)
            except (TypeError, ValueError) as error:
                log.warning(
                    event="Invalid Graph batch request",
                    position=index,
                    error=str(object=error),
                )
                outcomes.append(BatchOutcome.failure(error=invalid_request_error(error=error)))
                continue
            outcomes.append(None)
            batch.append(item)
            positions.append(index)

        if not batch:
            log.info(event="No valid Graph batch operations to send", request_count=len(outcomes))
            return t.cast(list[BatchOutcome], outcomes)

        log.info(event="Sending Graph batch", base_url=self.base_url, request_count=len(batch))

        async with self._open_client() as client:
            try:
                response = await client.post(
                    url=self.base_url,
                    json={
                        "access_token": self.access_token,
                        "include_headers": self.include_headers,
                        "batch": batch,
                    },
                )
                response.raise_for_status()
            except httpx.HTTPStatusError as error:
                message = format_graph_error(response=error.response, fallback=str(object=error))
                log.error(
                    event="Graph batch request failed",
                    status_code=error.response.status_code,
                    error=message,
                )
                raise BatchTransportError(message, response=error.response) from error
            except httpx.HTTPError as error:
                log.error(event="Graph batch transport error", error=str(object=error))
                raise BatchTransportError(str(object=error) or type(error).__name__) from error

        try:
            payload = response.json()
        except ValueError as error:
            raise BatchTransportError(
                "Graph batch response is not valid JSON", response=response
            ) from error
        if not isinstance(payload, list):
            raise BatchTransportError(
                "Graph batch response is not a list of operation results", response=response
            )
        if len(payload) != len(batch):
            raise BatchContractError(expected=len(batch), received=len(payload))

        for position, entry in zip(positions, payload):
            outcomes[position] = to_outcome(entry=entry)
        log.debug(
            event="Mapped Graph batch results",
            request_count=len(batch),
            outcome_count=len(outcomes),
            failed_count=sum(1 for outcome in outcomes if outcome is not None and not outcome.ok),
        )
        return t.cast(list[BatchOutcome], outcomes)
