"""Tests for SmartMeClient construction and the configuration options."""

import httpx
import pytest
from structlog.testing import capture_logs

from smartme_client import client, errors, options
from smartme_client.config import ClientConfig

# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------


def test_default_transport_has_ten_second_timeout():
    """Without options, a transport with the default timeout is created."""
    api_client = client.SmartMeClient("user", "secret")

    assert isinstance(api_client.http_client, httpx.Client)
    assert api_client.http_client.timeout == httpx.Timeout(client.DEFAULT_TIMEOUT)
    assert client.DEFAULT_TIMEOUT == 10.0


def test_default_base_url_is_production():
    api_client = client.SmartMeClient("user", "secret")
    assert api_client.base_url == httpx.URL("https://api.smart-me.com/")


def test_username_is_exposed():
    assert client.SmartMeClient("user", "secret").username == "user"


def test_empty_password_is_accepted():
    api_client = client.SmartMeClient("user", "")
    assert api_client.username == "user"


def test_empty_username_raises():
    """Construction fails before anything else happens."""
    with pytest.raises(errors.SmartMeValidationError, match="username must not"):
        client.SmartMeClient("", "secret")


def test_empty_username_is_a_value_error():
    with pytest.raises(ValueError):
        client.SmartMeClient("", "secret")


def test_empty_username_skips_options():
    """Options are never applied when the username is rejected."""
    applied = []

    with pytest.raises(errors.SmartMeValidationError):
        client.SmartMeClient("", "secret", applied.append)

    assert applied == []


# ---------------------------------------------------------------------------
# with_http_client
# ---------------------------------------------------------------------------


def test_with_http_client_uses_given_client():
    http_client = httpx.Client()
    api_client = client.SmartMeClient(
        "user", "secret", options.with_http_client(http_client)
    )
    assert api_client.http_client is http_client


def test_injected_client_is_not_closed():
    """The caller keeps ownership of an injected transport."""
    http_client = httpx.Client()
    api_client = client.SmartMeClient(
        "user", "secret", options.with_http_client(http_client)
    )

    api_client.close()

    assert not http_client.is_closed
    http_client.close()


def test_owned_client_is_closed():
    api_client = client.SmartMeClient("user", "secret")

    api_client.close()

    assert api_client.http_client.is_closed


def test_close_twice_is_harmless():
    api_client = client.SmartMeClient("user", "secret")
    api_client.close()
    api_client.close()
    assert api_client.http_client.is_closed


def test_context_manager_closes_owned_client():
    with client.SmartMeClient("user", "secret") as api_client:
        assert not api_client.http_client.is_closed
    assert api_client.http_client.is_closed


# ---------------------------------------------------------------------------
# with_base_url
# ---------------------------------------------------------------------------


def test_with_base_url_overrides_default():
    api_client = client.SmartMeClient(
        "user", "secret", options.with_base_url("http://localhost:8080/")
    )
    assert api_client.base_url == httpx.URL("http://localhost:8080/")


@pytest.mark.parametrize("bad_url", ["not a url", "/relative/path", ""])
def test_with_base_url_ignores_malformed_url(bad_url):
    """A malformed override keeps the previous base URL."""
    api_client = client.SmartMeClient("user", "secret", options.with_base_url(bad_url))
    assert api_client.base_url == httpx.URL(client.DEFAULT_BASE_URL)


def test_with_base_url_malformed_keeps_earlier_override():
    api_client = client.SmartMeClient(
        "user",
        "secret",
        options.with_base_url("http://first.example/"),
        options.with_base_url("/not/absolute"),
    )
    assert api_client.base_url == httpx.URL("http://first.example/")


def test_with_base_url_malformed_logs_warning():
    with capture_logs() as logs:
        client.SmartMeClient("user", "secret", options.with_base_url("/relative"))

    assert any(
        entry["event"] == "Ignoring malformed base URL"
        and entry["log_level"] == "warning"
        for entry in logs
    )


# ---------------------------------------------------------------------------
# with_timeout
# ---------------------------------------------------------------------------


def test_with_timeout_creates_default_transport():
    api_client = client.SmartMeClient("user", "secret", options.with_timeout(2.5))

    assert api_client.http_client.timeout == httpx.Timeout(2.5)

    api_client.close()
    assert api_client.http_client.is_closed


def test_with_timeout_after_http_client_updates_it():
    http_client = httpx.Client()
    api_client = client.SmartMeClient(
        "user",
        "secret",
        options.with_http_client(http_client),
        options.with_timeout(3.0),
    )

    assert api_client.http_client is http_client
    assert http_client.timeout == httpx.Timeout(3.0)


def test_http_client_after_timeout_replaces_transport():
    """Options apply in order: the later transport wins."""
    http_client = httpx.Client(timeout=7.0)
    api_client = client.SmartMeClient(
        "user",
        "secret",
        options.with_timeout(3.0),
        options.with_http_client(http_client),
    )

    assert api_client.http_client is http_client
    assert api_client.http_client.timeout == httpx.Timeout(7.0)


def test_http_client_closes_replaced_default_transport():
    created = []

    def record(api_client):
        created.append(api_client.http_client)

    client.SmartMeClient(
        "user",
        "secret",
        options.with_timeout(3.0),
        record,
        options.with_http_client(httpx.Client()),
    )

    (replaced,) = created
    assert replaced.is_closed


def test_later_base_url_wins():
    api_client = client.SmartMeClient(
        "user",
        "secret",
        options.with_base_url("http://first.example/"),
        options.with_base_url("http://second.example/"),
    )
    assert api_client.base_url == httpx.URL("http://second.example/")


# ---------------------------------------------------------------------------
# from_config
# ---------------------------------------------------------------------------


def test_from_config_applies_all_settings():
    config = ClientConfig(
        username="user",
        password="secret",
        base_url="http://localhost:9000/",
        timeout=4.0,
    )

    api_client = client.SmartMeClient.from_config(config)

    assert api_client.username == "user"
    assert api_client.base_url == httpx.URL("http://localhost:9000/")
    assert api_client.http_client.timeout == httpx.Timeout(4.0)


def test_from_config_defaults():
    api_client = client.SmartMeClient.from_config(ClientConfig(username="user"))

    assert api_client.base_url == httpx.URL(client.DEFAULT_BASE_URL)
    assert api_client.http_client.timeout == httpx.Timeout(client.DEFAULT_TIMEOUT)
