"""smart-me REST API client.

Provides an HTTP client with Basic authentication, status code
classification and response validation using Pydantic models.
"""

import json
import time
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any, TypeVar

import httpx
import pydantic
import structlog

from .errors import (
    APIError,
    DeadlineExceededError,
    DecodeError,
    SmartMeValidationError,
)
from .options import Option, with_base_url, with_timeout
from .types import Device, DeviceValues, Value

if TYPE_CHECKING:
    from .config import ClientConfig

logger = structlog.get_logger(__name__)

DEFAULT_BASE_URL = "https://api.smart-me.com/"

DEFAULT_TIMEOUT = 10.0

T = TypeVar("T")

_DEVICE_LIST = pydantic.TypeAdapter(list[Device])
_DEVICE_VALUES = pydantic.TypeAdapter(DeviceValues)
_VALUE = pydantic.TypeAdapter(Value)
_VALUE_LIST = pydantic.TypeAdapter(list[Value])


def format_rfc3339(value: datetime) -> str:
    """Format a timezone-aware datetime as RFC 3339 with second precision.

    UTC is written as ``Z``, other offsets as ``+HH:MM`` / ``-HH:MM``.

    Raises:
        SmartMeValidationError: If ``value`` is naive.
    """
    offset = value.utcoffset()
    if offset is None:
        msg = f"datetime must be timezone-aware: {value!r}"
        raise SmartMeValidationError(msg)

    text = value.replace(tzinfo=None, microsecond=0).isoformat(timespec="seconds")
    if offset == timedelta(0):
        return f"{text}Z"

    sign = "-" if offset < timedelta(0) else "+"
    minutes = abs(int(offset.total_seconds())) // 60
    return f"{text}{sign}{minutes // 60:02d}:{minutes % 60:02d}"


def _require_device_id(device_id: str) -> None:
    if not device_id:
        msg = "device_id must not be empty"
        raise SmartMeValidationError(msg)


def _cap(configured: float | None, timeout: float) -> float:
    # None means the transport waits without limit.
    return timeout if configured is None else min(configured, timeout)


def _check_deadline(
    deadline: float | None,
    timeout: float | None,
    cause: BaseException | None = None,
) -> None:
    if deadline is not None and time.monotonic() >= deadline:
        msg = f"request deadline of {timeout}s exceeded"
        raise DeadlineExceededError(msg) from cause


def _read_body(
    response: httpx.Response, deadline: float | None, timeout: float | None
) -> bytes:
    """Read a streamed body, giving up once the deadline has passed."""
    chunks = []
    try:
        for chunk in response.iter_bytes():
            chunks.append(chunk)
            _check_deadline(deadline, timeout)
    except httpx.TransportError as err:
        _check_deadline(deadline, timeout, err)
        raise
    return b"".join(chunks)


class SmartMeClient:
    """HTTP client for the smart-me REST API.

    Every call performs exactly one blocking request. Configuration is fixed
    once construction finishes, so a single instance can be shared between
    threads; connection pooling is left to the underlying httpx client.
    Can be used as a context manager for automatic cleanup.
    """

    def __init__(self, username: str, password: str = "", *options: Option):
        """Initialize the REST API client.

        Args:
            username: smart-me account name, must not be empty.
            password: smart-me account password.
            *options: Configuration functions from :mod:`smartme_client.options`,
                applied in order.

        Raises:
            SmartMeValidationError: If username is empty.
        """
        if not username:
            msg = "username must not be empty"
            raise SmartMeValidationError(msg)

        self._username = username
        self._auth = httpx.BasicAuth(username, password)
        self._base_url = httpx.URL(DEFAULT_BASE_URL)
        self._http_client: httpx.Client | None = None
        self._owns_http_client = False

        for option in options:
            option(self)

        if self._http_client is None:
            self._http_client = httpx.Client(timeout=DEFAULT_TIMEOUT)
            self._owns_http_client = True

    @classmethod
    def from_config(cls, config: "ClientConfig") -> "SmartMeClient":
        """Create a client from a validated :class:`ClientConfig`."""
        return cls(
            config.username,
            config.password,
            with_base_url(config.base_url),
            with_timeout(config.timeout),
        )

    @property
    def username(self) -> str:
        return self._username

    @property
    def base_url(self) -> httpx.URL:
        return self._base_url

    @property
    def http_client(self) -> httpx.Client:
        """The httpx client used as transport."""
        return self._http_client

    def __enter__(self):
        """Enter context manager."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Exit context manager and cleanup resources."""
        self.close()

    def close(self):
        """Close the HTTP client if this instance created it."""
        if self._owns_http_client and not self._http_client.is_closed:
            self._http_client.close()

    def _request(
        self,
        method: str,
        path: str,
        adapter: pydantic.TypeAdapter[T] | None = None,
        params: dict[str, Any] | None = None,
        body: Any = None,
        timeout: float | None = None,
    ) -> T | None:
        """Make an authenticated request to the smart-me API.

        Handles request construction, status checking and JSON decoding.
        The response is always closed before returning.

        The per-call deadline bounds the whole call, body included: each
        phase of the transport timeout is capped at it, and the body is read
        in chunks with the deadline checked after every chunk.

        Args:
            method: HTTP method.
            path: Path relative to the base URL (e.g., "api/Devices").
            adapter: Type adapter to decode the body with. The body is not
                read when omitted.
            params: Optional query parameters.
            body: Optional JSON-serializable request body.
            timeout: Optional per-call deadline in seconds.

        Returns:
            The decoded response, or None without an adapter.

        Raises:
            APIError: If the API answers with a status code >= 400.
            DecodeError: If the body does not match the expected type.
            DeadlineExceededError: If the per-call deadline elapsed.
            httpx.TransportError: If the request could not be sent.
        """
        url = self._base_url.join(path)
        headers = {"Accept": "application/json"}
        extra: dict[str, Any] = {}
        if body is not None:
            headers["Content-Type"] = "application/json"
            extra["content"] = json.dumps(body)
        if timeout is not None:
            extra["timeout"] = self._call_timeout(timeout)

        request = self._http_client.build_request(
            method,
            url,
            params=params,
            headers=headers,
            **extra,
        )
        logger.debug("Making API request", method=method, url=str(url), params=params)

        start_time = time.monotonic()
        deadline = None if timeout is None else start_time + timeout
        try:
            response = self._http_client.send(request, auth=self._auth, stream=True)
        except httpx.TransportError as err:
            _check_deadline(deadline, timeout, err)
            raise

        try:
            _check_deadline(deadline, timeout)
            logger.debug(
                "API request completed",
                status_code=response.status_code,
                duration_seconds=round(time.monotonic() - start_time, 3),
            )
            if response.status_code >= 400:  # noqa: PLR2004
                raise APIError(response.status_code, response.reason_phrase)

            if adapter is None:
                return None
            content = _read_body(response, deadline, timeout)
            try:
                return adapter.validate_json(content)
            except pydantic.ValidationError as err:
                msg = f"error decoding response: {err}"
                raise DecodeError(msg) from err
        finally:
            response.close()

    def _call_timeout(self, timeout: float) -> httpx.Timeout:
        """Cap each phase of the transport timeout at the per-call deadline."""
        configured = self._http_client.timeout
        return httpx.Timeout(
            connect=_cap(configured.connect, timeout),
            read=_cap(configured.read, timeout),
            write=_cap(configured.write, timeout),
            pool=_cap(configured.pool, timeout),
        )

    def get_devices(self, timeout: float | None = None) -> list[Device]:
        """Fetch all devices of the account.

        Corresponds to ``GET /api/Devices``.

        Args:
            timeout: Optional per-call deadline in seconds.

        Returns:
            Devices in the order returned by the API.
        """
        return self._request("GET", "api/Devices", _DEVICE_LIST, timeout=timeout)

    def get_values(self, device_id: str, timeout: float | None = None) -> DeviceValues:
        """Fetch the latest measurements of a device.

        Corresponds to ``GET /api/Values/{id}``.

        Raises:
            SmartMeValidationError: If device_id is empty.
        """
        _require_device_id(device_id)
        return self._request(
            "GET",
            f"api/Values/{device_id}",
            _DEVICE_VALUES,
            timeout=timeout,
        )

    def get_values_in_past(
        self,
        device_id: str,
        date: datetime,
        timeout: float | None = None,
    ) -> Value:
        """Fetch the first value of a device found before ``date``.

        Corresponds to ``GET /api/ValuesInPast/{id}?date={date}``.

        Raises:
            SmartMeValidationError: If device_id is empty or date is naive.
        """
        _require_device_id(device_id)
        return self._request(
            "GET",
            f"api/ValuesInPast/{device_id}",
            _VALUE,
            params={"date": format_rfc3339(date)},
            timeout=timeout,
        )

    def get_values_in_past_multiple(
        self,
        device_id: str,
        start_date: datetime,
        end_date: datetime,
        timeout: float | None = None,
    ) -> list[Value]:
        """Fetch the values of a device between two dates.

        Corresponds to
        ``GET /api/ValuesInPastMultiple/{id}?startDate={start}&endDate={end}``.
        The API may reject this call for accounts without a professional
        license; that surfaces as an :class:`APIError`.

        Raises:
            SmartMeValidationError: If device_id is empty or a date is naive.
        """
        _require_device_id(device_id)
        params = {
            "startDate": format_rfc3339(start_date),
            "endDate": format_rfc3339(end_date),
        }
        return self._request(
            "GET",
            f"api/ValuesInPastMultiple/{device_id}",
            _VALUE_LIST,
            params=params,
            timeout=timeout,
        )
