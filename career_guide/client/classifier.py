"""
client/classifier.py — Maps every request outcome to a RequestState.

Three entry points, one per place a request can end:
  classify_exception() : nothing came back (transport error, timeout, bug)
  classify_status()    : a non-2xx response came back
  classify_response()  : any response; parses and checks the body

Nothing outside this module inspects httpx exceptions or status codes.
"""
import asyncio
from typing import Any

import httpx
from pydantic import ValidationError

from career_guide.client.flows import Flow
from career_guide.client.state import ErrorInfo, ErrorKind, RequestState

TIMEOUT_MESSAGE = "Request timed out. Please try again."
CONNECT_MESSAGE = "Unable to connect to the server. Please try again later."
NETWORK_MESSAGE = "Network error occurred. Please check your connection and try again."
CONFIG_MESSAGE = "Application configuration error: API base URL not found. Please contact support."
UNEXPECTED_MESSAGE = "An unexpected error occurred. Please contact support if it persists."
INVALID_FORMAT_MESSAGE = "Received an invalid response format from the server. Please try again."
NO_DATA_MESSAGE = "No data received from the server. Please try again."
BAD_REQUEST_MESSAGE = "Invalid request. Please check your input and try again."

# status code → user-facing message; everything here is a retryable Server error
_STATUS_MESSAGES: dict[int, str] = {
    404: "Requested service not found. Please try again later.",
    429: "Request was rate limited. Please wait a moment and try again.",
    500: "Server error occurred. Please try again later.",
    503: "Service temporarily unavailable. Please try again later.",
}


def network_error(message: str) -> ErrorInfo:
    return ErrorInfo(kind=ErrorKind.NETWORK, message=message, retryable=True)


def server_error(message: str, status_code: int | None = None) -> ErrorInfo:
    return ErrorInfo(kind=ErrorKind.SERVER, message=message, retryable=True, status_code=status_code)


def config_error() -> ErrorInfo:
    return ErrorInfo(kind=ErrorKind.UNKNOWN, message=CONFIG_MESSAGE, retryable=False)


def classify_exception(exc: BaseException) -> ErrorInfo:
    """Classify a failure that happened before any response arrived."""
    if isinstance(exc, (asyncio.TimeoutError, TimeoutError, httpx.TimeoutException)):
        return network_error(TIMEOUT_MESSAGE)
    if isinstance(exc, httpx.ConnectError):
        return network_error(CONNECT_MESSAGE)
    if isinstance(exc, httpx.TransportError):
        return network_error(NETWORK_MESSAGE)
    return ErrorInfo(kind=ErrorKind.UNKNOWN, message=UNEXPECTED_MESSAGE, retryable=False)


def _body_message(response: httpx.Response) -> str | None:
    """Best-effort extraction of a human-readable message from an error body."""
    try:
        data = response.json()
    except (ValueError, RecursionError):
        return None
    if not isinstance(data, dict):
        return None
    for key in ("message", "error", "detail"):
        value = data.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def classify_status(response: httpx.Response) -> ErrorInfo:
    """Classify a non-2xx response."""
    status = response.status_code
    if status == 400:
        return ErrorInfo(
            kind=ErrorKind.VALIDATION,
            message=_body_message(response) or BAD_REQUEST_MESSAGE,
            retryable=False,
            status_code=status,
        )
    message = _STATUS_MESSAGES.get(status, f"Server error ({status}). Please try again later.")
    return server_error(message, status_code=status)


def _is_filled_list(value: Any) -> bool:
    return isinstance(value, list) and len(value) > 0


def check_payload(flow: Flow, data: Any) -> ErrorInfo | None:
    """
    Verify a parsed body has everything the flow renders.
    Returns None when complete, otherwise the Server error to report.
    """
    if data is None:
        return server_error(NO_DATA_MESSAGE)

    if flow.many:
        if not isinstance(data, list):
            return server_error(INVALID_FORMAT_MESSAGE)
        if not data:
            return server_error(flow.incomplete_message)
    else:
        if not isinstance(data, dict):
            return server_error(INVALID_FORMAT_MESSAGE)
        if not all(_is_filled_list(data.get(name)) for name in flow.required_fields):
            return server_error(flow.incomplete_message)

    if flow.response_model is not None:
        try:
            flow.parse(data)
        except ValidationError:
            return server_error(flow.incomplete_message)

    return None


def classify_response(response: httpx.Response, flow: Flow) -> RequestState:
    """Turn a received response into a final Succeeded or Failed state."""
    if not response.is_success:
        return RequestState.failed(classify_status(response))

    # json.loads raises ValueError for malformed or undecodable text and
    # RecursionError for pathologically nested arrays/objects.
    try:
        data = response.json()
    except (ValueError, RecursionError):
        return RequestState.failed(server_error(INVALID_FORMAT_MESSAGE, status_code=response.status_code))

    error = check_payload(flow, data)
    if error is not None:
        return RequestState.failed(error)

    return RequestState.succeeded(data)
