"""
API errors, as raised by the dispatcher to the callers.

The HTTP client library (``aiohttp``) is an implementation detail: its exception
classes never leave this package for the API-level failures. Instead, every
response with an HTTP status of 400 or above becomes an `APIError`, with the
library's own error chained as ``__cause__`` for the stack traces.

The provider explains its failures in the bodies of the error responses::

    {"errors": [{"field": "label", "reason": "Label must be unique."}]}

These reasons are exposed via `APIError.errors` and are joined into the message.
Bodies of another shape (e.g. HTML pages from the proxies) are not parsed,
but their text is used for the message deterministically.

A few statuses that the callers usually handle specifically have their own
subclasses. All other statuses are raised as the base class.

Connectivity issues, timeouts and cancellations are not API errors:
they are escalated from the client library as they are.
"""
import collections.abc
import json
from typing import Any, List, Optional, Sequence

import aiohttp
from typing_extensions import TypedDict

# The body is included into the message only partially, if it is not JSON (e.g. HTML pages).
MAX_BODY_IN_MESSAGE = 512


class RawErrorReason(TypedDict, total=False):
    field: str
    reason: str


class RawErrorPayload(TypedDict):
    errors: List[RawErrorReason]


class DecodingError(ValueError):
    """ Raised when a response body cannot be decoded into the expected shape. """


class APIError(Exception):

    def __init__(
            self,
            payload: Optional[RawErrorPayload],
            *,
            status: int,
            text: Optional[str] = None,
            retry_after: Optional[float] = None,
    ) -> None:
        reasons: List[RawErrorReason] = list(payload.get('errors') or []) if payload else []
        message = format_reasons(reasons) if reasons else (text or None)
        super().__init__(message, payload)
        self._status = status
        self._payload = payload
        self._reasons = reasons
        self._message = message
        self._retry_after = retry_after

    def __str__(self) -> str:
        return f"[{self._status}] {self._message}" if self._message else f"[{self._status}]"

    @property
    def status(self) -> int:
        return self._status

    @property
    def errors(self) -> Sequence[RawErrorReason]:
        return self._reasons

    @property
    def message(self) -> Optional[str]:
        return self._message

    @property
    def retry_after(self) -> Optional[float]:
        """ The delay requested by the server via the ``Retry-After`` header, if any. """
        return self._retry_after


class APIUnauthorizedError(APIError):
    pass


class APIForbiddenError(APIError):
    pass


class APINotFoundError(APIError):
    pass


class APIConflictError(APIError):
    pass


class APITooManyRequestsError(APIError):
    pass


class APIServiceUnavailableError(APIError):
    pass


def format_reasons(reasons: Sequence[RawErrorReason]) -> str:
    parts = []
    for reason in reasons:
        field = reason.get('field')
        text = reason.get('reason', '')
        parts.append(f"[{field}] {text}" if field else f"{text}")
    return '; '.join(parts)


def parse_payload(text: str) -> Optional[RawErrorPayload]:
    """
    Parse the error body if it has the expected structure, or return ``None``.
    """
    try:
        payload: Any = json.loads(text)
    except ValueError:
        return None

    # Better be safe: who knows which sensitive information can be dumped otherwise.
    if not isinstance(payload, collections.abc.Mapping):
        return None
    reasons = payload.get('errors')
    if not isinstance(reasons, list):
        return None
    if not all(isinstance(reason, collections.abc.Mapping) for reason in reasons):
        return None
    return {'errors': [
        {key: str(val) for key, val in reason.items() if key in ('field', 'reason')}  # type: ignore
        for reason in reasons
    ]}


def is_busy(error: APIError) -> bool:
    """ The provider reports some temporary conflicts as ``400 Linode busy.`` """
    return error.status == 400 and any(
        'linode busy' in (reason.get('reason') or '').lower()
        for reason in error.errors
    )


async def check_response(
        response: aiohttp.ClientResponse,
) -> None:
    """
    Check for the API errors, and raise with extended information.
    """
    if response.status >= 400:

        # Read the response's body before it is closed by raise_for_status().
        text: Optional[str]
        try:
            text = await response.text()
        except (UnicodeDecodeError, aiohttp.ClientConnectionError):
            text = None

        payload = parse_payload(text) if text else None

        # For non-structured bodies, keep the message deterministic: the same body, the same error.
        fallback: Optional[str]
        if payload is not None:
            fallback = None
        elif text and text.strip():
            content_type = response.headers.get('Content-Type', '')
            body = text.strip()[:MAX_BODY_IN_MESSAGE]
            fallback = (f"Unexpected response (Content-Type: {content_type or 'none'}): {body}"
                        if 'json' not in content_type else body)
        else:
            fallback = response.reason or None

        cls = (
            APIUnauthorizedError if response.status == 401 else
            APIForbiddenError if response.status == 403 else
            APINotFoundError if response.status == 404 else
            APIConflictError if response.status == 409 else
            APITooManyRequestsError if response.status == 429 else
            APIServiceUnavailableError if response.status == 503 else
            APIError
        )

        # Raise the library-specific error while keeping the original error in scope.
        # This call also closes the response's body, so it cannot be read afterwards.
        try:
            response.raise_for_status()
        except aiohttp.ClientResponseError as e:
            raise cls(payload, status=response.status, text=fallback,
                      retry_after=parse_retry_after(response)) from e


async def parse_response(
        response: aiohttp.ClientResponse,
) -> Any:
    """
    Check the response for errors, and either raise or return the parsed data.

    An empty body is parsed as ``None`` (e.g. for the deletions).
    """
    await check_response(response)
    try:
        text = await response.text()
    except UnicodeDecodeError as e:
        raise DecodingError(f"Cannot decode the response as text: {e}") from e
    if not text.strip():
        return None
    try:
        return json.loads(text)
    except ValueError as e:
        raise DecodingError(f"Cannot decode the response as JSON: {e}") from e


def parse_retry_after(response: aiohttp.ClientResponse) -> Optional[float]:
    value = response.headers.get('Retry-After')
    if value is None:
        return None
    try:
        return max(0.0, float(value))
    except ValueError:
        return None  # HTTP-dates are not used by the API; ignore them.
