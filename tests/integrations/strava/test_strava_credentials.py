import httpx

from app.integrations.strava.credentials import CredentialManager

TOKEN_URL = "https://www.strava.com/oauth/token"


def _manager() -> CredentialManager:
    return CredentialManager(
        access_token="old-token",
        refresh_token="refresh-token",
        client_id="client-id",
        client_secret="client-secret",
        token_url=TOKEN_URL,
        timeout=7,
    )


def _response(status_code: int, **kwargs) -> httpx.Response:
    return httpx.Response(status_code, request=httpx.Request("POST", TOKEN_URL), **kwargs)


def test_refresh_replaces_access_token(monkeypatch):
    calls = []

    def mock_post(url, **kwargs):
        calls.append((url, kwargs))
        return _response(200, json={"access_token": "new-token", "refresh_token": "rotated", "expires_at": 1})

    monkeypatch.setattr(httpx, "post", mock_post)
    manager = _manager()

    assert manager.refresh() == "new-token"
    assert manager.access_token == "new-token"

    url, kwargs = calls[0]
    assert url == TOKEN_URL
    assert kwargs["data"] == {
        "client_id": "client-id",
        "client_secret": "client-secret",
        "refresh_token": "refresh-token",
        "grant_type": "refresh_token",
    }
    assert kwargs["timeout"] == 7


def test_refresh_token_is_never_rotated(monkeypatch):
    sent = []

    def mock_post(url, **kwargs):
        sent.append(kwargs["data"]["refresh_token"])
        return _response(200, json={"access_token": f"token-{len(sent)}", "refresh_token": "rotated"})

    monkeypatch.setattr(httpx, "post", mock_post)
    manager = _manager()

    manager.refresh()
    manager.refresh()

    assert sent == ["refresh-token", "refresh-token"]
    assert manager.access_token == "token-2"


def test_refresh_failure_keeps_old_token(monkeypatch):
    monkeypatch.setattr(httpx, "post", lambda url, **kwargs: _response(400, json={"message": "Bad Request"}))
    manager = _manager()

    assert manager.refresh() is None
    assert manager.access_token == "old-token"


def test_refresh_network_error_returns_none(monkeypatch):
    def mock_post(url, **kwargs):
        raise httpx.ConnectError("connection refused")

    monkeypatch.setattr(httpx, "post", mock_post)

    assert _manager().refresh() is None


def test_refresh_without_access_token_in_response_returns_none(monkeypatch):
    monkeypatch.setattr(httpx, "post", lambda url, **kwargs: _response(200, json={"expires_at": 1}))
    manager = _manager()

    assert manager.refresh() is None
    assert manager.access_token == "old-token"
