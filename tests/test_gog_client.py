from __future__ import annotations

import pytest
import requests

from app.gog.client import GogClient
from metadata.errors import NetworkError, NotFound, ParseError


class _FakeResponse:
    def __init__(self, status_code=200, payload=None, content=b"{}", json_error=None):
        self.status_code = status_code
        self._payload = payload if payload is not None else {}
        self.content = content
        self._json_error = json_error

    def json(self):
        if self._json_error is not None:
            raise self._json_error
        return self._payload


class _FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.requests = []

    def get(self, url, **kwargs):
        self.requests.append((url, kwargs))
        if self.error is not None:
            raise self.error
        return self.response


def test_get_json_sends_headers_params_and_timeout() -> None:
    session = _FakeSession(_FakeResponse(payload={"products": []}))
    client = GogClient(session=session, timeout_seconds=3, user_agent="gog-metadata/test")

    payload = client.get_json("https://catalog.test", params={"query": "Portal"})

    url, kwargs = session.requests[0]
    assert payload == {"products": []}
    assert url == "https://catalog.test"
    assert kwargs["params"] == {"query": "Portal"}
    assert kwargs["timeout"] == 3.0
    assert kwargs["headers"]["User-Agent"] == "gog-metadata/test"


def test_404_maps_to_not_found() -> None:
    client = GogClient(session=_FakeSession(_FakeResponse(status_code=404)))

    with pytest.raises(NotFound):
        client.get_json("https://api.test/v2/games/0")


def test_server_error_maps_to_network_error() -> None:
    client = GogClient(session=_FakeSession(_FakeResponse(status_code=503)))

    with pytest.raises(NetworkError, match="503"):
        client.get_json("https://api.test/v2/games/1")


def test_transport_failure_maps_to_network_error() -> None:
    session = _FakeSession(error=requests.exceptions.ConnectTimeout("timed out"))
    client = GogClient(session=session)

    with pytest.raises(NetworkError):
        client.get_json("https://api.test/v2/games/1")


def test_invalid_json_maps_to_parse_error() -> None:
    response = _FakeResponse(content=b"<html>", json_error=ValueError("no json"))
    client = GogClient(session=_FakeSession(response))

    with pytest.raises(ParseError):
        client.get_json("https://api.test/v2/games/1")


def test_non_object_payload_maps_to_parse_error() -> None:
    client = GogClient(session=_FakeSession(_FakeResponse(payload=[1, 2, 3])))

    with pytest.raises(ParseError):
        client.get_json("https://api.test/v2/games/1")


def test_empty_body_is_an_empty_object() -> None:
    client = GogClient(session=_FakeSession(_FakeResponse(content=b"")))

    assert client.get_json("https://api.test/v2/games/1") == {}
