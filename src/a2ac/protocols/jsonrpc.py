"""JSON-RPC 2.0 envelopes shared by the unary and streaming A2A transports.

Requests are plain dicts ready for ``httpx``'s ``json=`` argument; responses
are validated into :class:`JsonRpcResponse` and unwrapped into their
``result`` value or raised as one of the :mod:`a2ac.protocols.errors` types.
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel, ValidationError

from a2ac.protocols.errors import A2AError, AgentError, HttpStatusError, ProtocolError

JSONRPC_VERSION = "2.0"

ACCEPT_JSON = "application/json"
ACCEPT_EVENT_STREAM = "text/event-stream"

# ---------------------------------------------------------------------------
# JSON-RPC 2.0 envelope
# ---------------------------------------------------------------------------


class JsonRpcRequest(BaseModel):
    """A JSON-RPC 2.0 request message."""

    jsonrpc: str = JSONRPC_VERSION
    id: int | str
    method: str
    params: Any = None


class JsonRpcError(BaseModel):
    """A JSON-RPC 2.0 error object."""

    code: int | None = None
    message: str = "Unknown error"
    data: Any = None

    def to_exception(self) -> AgentError:
        return AgentError(self.code, self.message, self.data)


class JsonRpcResponse(BaseModel):
    """A JSON-RPC 2.0 response message.

    ``result`` may legitimately be ``null``; :attr:`has_result` tells an
    explicit ``null`` apart from a missing member.
    """

    jsonrpc: str = JSONRPC_VERSION
    id: int | str | None = None
    result: Any = None
    error: JsonRpcError | None = None

    @property
    def has_result(self) -> bool:
        return "result" in self.model_fields_set


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------


def build_request(method: str, params: Any, request_id: int | str) -> dict[str, Any]:
    """Build the JSON body for a single JSON-RPC call."""
    return JsonRpcRequest(id=request_id, method=method, params=params).model_dump(mode="json")


def request_headers(accept: str = ACCEPT_JSON) -> dict[str, str]:
    """HTTP headers for a JSON-RPC POST expecting *accept* in return."""
    return {"Content-Type": "application/json", "Accept": accept}


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------


def parse_envelope(data: Any) -> JsonRpcResponse:
    """Validate the structure of a decoded JSON-RPC response.

    Raises:
        ProtocolError: If *data* is not an object or is not a 2.0 envelope.
    """
    if not isinstance(data, dict):
        msg = "Invalid JSON-RPC response structure: expected an object"
        raise ProtocolError(msg)
    if data.get("jsonrpc") != JSONRPC_VERSION:
        msg = f"Invalid JSON-RPC response structure: jsonrpc must be {JSONRPC_VERSION!r}"
        raise ProtocolError(msg)
    try:
        return JsonRpcResponse.model_validate(data)
    except ValidationError as exc:
        raise ProtocolError(f"Invalid JSON-RPC response structure: {exc}") from exc


def unwrap_result(envelope: JsonRpcResponse) -> Any:
    """Return the envelope's ``result``; an ``error`` member always wins."""
    if envelope.error is not None:
        raise envelope.error.to_exception()
    if not envelope.has_result:
        msg = "Invalid JSON-RPC response structure: neither result nor error present"
        raise ProtocolError(msg)
    return envelope.result


def error_for_status(status_code: int, body: str, reason: str = "") -> A2AError:
    """Build the error for a non-2xx response.

    A body holding a JSON-RPC ``error`` object is surfaced as an
    :class:`AgentError`; anything else becomes an :class:`HttpStatusError`
    carrying the raw body.
    """
    try:
        data = json.loads(body) if body else None
    except ValueError:
        data = None
    if isinstance(data, dict) and isinstance(data.get("error"), dict):
        try:
            return JsonRpcError.model_validate(data["error"]).to_exception()
        except ValidationError:
            pass
    return HttpStatusError(status_code, body, reason)


def decode_response(status_code: int, body: str, reason: str = "") -> Any:
    """Decode a unary JSON-RPC HTTP response into its ``result`` value."""
    if not 200 <= status_code < 300:
        raise error_for_status(status_code, body, reason)
    try:
        data = json.loads(body)
    except ValueError as exc:
        raise ProtocolError(f"Invalid JSON in response body: {exc}") from exc
    return unwrap_result(parse_envelope(data))
