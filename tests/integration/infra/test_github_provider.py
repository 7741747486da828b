from __future__ import annotations

"""
Integration tests for the GitHub Contents API Provider.

Utilizes a mocked requests Session to verify URL construction, payload
decoding and the translation of HTTP failures into ProviderError kinds
without making real network calls.
"""

import base64
from typing import Any, Dict, Optional
from unittest.mock import MagicMock

import pytest
import requests

from compgraph.domain.errors import ProviderError, ProviderErrorKind
from compgraph.infra.network import GitHubContentProvider


def _response(status: int, payload: Any = None, headers: Optional[Dict[str, str]] = None) -> MagicMock:
    response = MagicMock()
    response.status_code = status
    response.headers = headers or {}
    response.json.return_value = payload
    return response


def _provider(response: Any = None, *, ref: str = "") -> GitHubContentProvider:
    session = MagicMock()
    if isinstance(response, BaseException):
        session.get.side_effect = response
    else:
        session.get.return_value = response
    return GitHubContentProvider("acme", "webapp", "tok", ref=ref, session=session)


# -----------------------------------------------------------------------------
# CONTRACT TESTS
# -----------------------------------------------------------------------------

def test_list_directory_maps_entries() -> None:
    """TC-01: Verify listing payloads become DirectoryEntry values; symlinks are skipped."""
    provider = _provider(_response(200, [
        {"type": "dir", "name": "src", "path": "src", "size": 0},
        {"type": "file", "name": "App.tsx", "path": "App.tsx", "size": 120},
        {"type": "symlink", "name": "link", "path": "link", "size": 4},
    ]))
    entries = provider.list_directory("")

    assert [(e.path, e.is_directory, e.size_bytes) for e in entries] == [
        ("src", True, 0),
        ("App.tsx", False, 120),
    ]
    url = provider._session.get.call_args.args[0]
    assert url == "https://api.github.com/repos/acme/webapp/contents"


def test_get_file_content_decodes_base64() -> None:
    """TC-02: Verify inline base64 content is decoded to text."""
    encoded = base64.b64encode(b"export const App = () => <Layout/>").decode("ascii")
    provider = _provider(_response(200, {"type": "file", "encoding": "base64", "content": encoded}), ref="dev")

    assert provider.get_file_content("src/App.tsx", timeout=3.0) == "export const App = () => <Layout/>"

    args, kwargs = provider._session.get.call_args
    assert args[0].endswith("/contents/src/App.tsx")
    assert kwargs["params"] == {"ref": "dev"}
    assert kwargs["timeout"] == 3.0


def test_timeout_is_clamped() -> None:
    provider = _provider(_response(200, []))
    provider.list_directory("src", timeout=0.0)
    assert provider._session.get.call_args.kwargs["timeout"] == 0.1

    provider.list_directory("src", timeout=500.0)
    assert provider._session.get.call_args.kwargs["timeout"] == 10


def test_file_endpoint_on_directory_is_not_found() -> None:
    provider = _provider(_response(200, [{"type": "file", "name": "x", "path": "x"}]))
    with pytest.raises(ProviderError) as exc:
        provider.get_file_content("src")
    assert exc.value.kind is ProviderErrorKind.NOT_FOUND


def test_content_without_inline_encoding_is_not_found() -> None:
    provider = _provider(_response(200, {"type": "file", "encoding": "none", "content": ""}))
    with pytest.raises(ProviderError) as exc:
        provider.get_file_content("big.tsx")
    assert exc.value.kind is ProviderErrorKind.NOT_FOUND


# -----------------------------------------------------------------------------
# ERROR MAPPING TESTS
# -----------------------------------------------------------------------------

@pytest.mark.parametrize("status, headers, kind", [
    (404, {}, ProviderErrorKind.NOT_FOUND),
    (401, {}, ProviderErrorKind.NOT_FOUND),
    (403, {"X-RateLimit-Remaining": "12"}, ProviderErrorKind.NOT_FOUND),
    (403, {"X-RateLimit-Remaining": "0"}, ProviderErrorKind.RATE_LIMITED),
    (429, {}, ProviderErrorKind.RATE_LIMITED),
    (500, {}, ProviderErrorKind.TRANSIENT),
    (502, {}, ProviderErrorKind.TRANSIENT),
])
def test_http_status_mapping(status: int, headers: Dict[str, str], kind: ProviderErrorKind) -> None:
    """TC-03: Verify HTTP failures are classified for the engine."""
    provider = _provider(_response(status, headers=headers))
    with pytest.raises(ProviderError) as exc:
        provider.list_directory("src")
    assert exc.value.kind is kind
    assert exc.value.path == "src"


@pytest.mark.parametrize("error", [
    requests.exceptions.Timeout("slow"),
    requests.exceptions.ConnectionError("down"),
])
def test_transport_failures_are_transient(error: Exception) -> None:
    provider = _provider(error)
    with pytest.raises(ProviderError) as exc:
        provider.get_file_content("App.tsx")
    assert exc.value.kind is ProviderErrorKind.TRANSIENT


def test_invalid_json_is_transient() -> None:
    response = _response(200)
    response.json.side_effect = ValueError("no json")
    with pytest.raises(ProviderError) as exc:
        _provider(response).list_directory("")
    assert exc.value.kind is ProviderErrorKind.TRANSIENT


def test_auth_header_is_set() -> None:
    provider = _provider(_response(200, []))
    headers = provider._session.headers.update.call_args.args[0]
    assert headers["Authorization"] == "Bearer tok"
