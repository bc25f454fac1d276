"""Configuration functions for :class:`~smartme_client.client.SmartMeClient`.

Each function returns an option, a callable applied once to the client while
it is being constructed. Options run in the order they are given, so a later
option overrides an earlier one touching the same setting.
"""

from collections.abc import Callable
from typing import TYPE_CHECKING, TypeAlias

import httpx
import structlog

if TYPE_CHECKING:
    from .client import SmartMeClient

logger = structlog.get_logger(__name__)

Option: TypeAlias = Callable[["SmartMeClient"], None]


def with_http_client(http_client: httpx.Client) -> Option:
    """Use the given httpx client as transport.

    The caller keeps ownership: closing the smart-me client leaves it open.
    """

    def apply(client: "SmartMeClient") -> None:
        # A transport created by an earlier with_timeout is replaced, not leaked.
        if client._owns_http_client and client._http_client is not None:
            client._http_client.close()
        client._http_client = http_client
        client._owns_http_client = False

    return apply


def with_base_url(base_url: str) -> Option:
    """Send requests to another API root, e.g. a mock server in tests.

    A malformed or relative URL is ignored and the previous base URL kept.
    """

    def apply(client: "SmartMeClient") -> None:
        try:
            url = httpx.URL(base_url)
        except (httpx.InvalidURL, TypeError):
            url = None
        if url is None or not url.is_absolute_url:
            logger.warning(
                "Ignoring malformed base URL",
                base_url=base_url,
                current=str(client._base_url),
            )
            return
        client._base_url = url

    return apply


def with_timeout(timeout: float) -> Option:
    """Set the transport timeout in seconds.

    Creates the default transport first if none has been configured yet.
    """

    def apply(client: "SmartMeClient") -> None:
        if client._http_client is None:
            client._http_client = httpx.Client()
            client._owns_http_client = True
        client._http_client.timeout = timeout

    return apply
