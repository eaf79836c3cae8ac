import pytest
import requests

from tigerclaw.auth import Environment, TokenConfig, TokenProvider, get_token_and_environment
from tigerclaw.auth.token import CLIENT_ID, DEV_TOKEN_URL
from tigerclaw.errors import CredentialError, InvalidInputError


class Resp:
    def __init__(self, status_code=200, payload=None, text=""):
        self.status_code = status_code
        self._payload = payload
        self.text = text

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


def test_fetch_token_uses_client_credentials(monkeypatch):
    captured = {}

    def fake_post(url, data=None, timeout=None):
        captured.update(url=url, data=data, timeout=timeout)
        return Resp(payload={"access_token": "abc"})

    monkeypatch.setattr("requests.post", fake_post)

    provider = TokenProvider(TokenConfig(Environment.DEV, "http://idp/token", client_secret="s3"))
    assert provider.fetch_token() == "abc"
    assert captured["url"] == "http://idp/token"
    assert captured["data"] == {
        "grant_type": "client_credentials",
        "client_id": CLIENT_ID,
        "client_secret": "s3",
    }
    assert captured["timeout"] == 10


def test_missing_secret_fails_before_request(monkeypatch):
    def fake_post(*args, **kwargs):
        raise AssertionError("should not be called")

    monkeypatch.setattr("requests.post", fake_post)
    provider = TokenProvider(TokenConfig(Environment.DEV, "http://idp/token"))
    with pytest.raises(CredentialError, match="AWIN_SPRINGFIELD_DEV_CLIENT_SECRET"):
        provider.fetch_token()


@pytest.mark.parametrize(
    "response",
    [Resp(status_code=401, text="denied"), Resp(payload={"token_type": "bearer"}), Resp()],
)
def test_bad_token_responses(monkeypatch, response):
    monkeypatch.setattr("requests.post", lambda *a, **kw: response)
    provider = TokenProvider(TokenConfig(Environment.DEV, "http://idp/token", client_secret="s"))
    with pytest.raises(CredentialError):
        provider.fetch_token()


def test_transport_error_becomes_credential_error(monkeypatch):
    def fake_post(*args, **kwargs):
        raise requests.ConnectionError("down")

    monkeypatch.setattr("requests.post", fake_post)
    provider = TokenProvider(TokenConfig(Environment.DEV, "http://idp/token", client_secret="s"))
    with pytest.raises(CredentialError, match="down"):
        provider.fetch_token()


def test_config_from_env(monkeypatch):
    monkeypatch.delenv("TIGERCLAW_TOKEN_URL", raising=False)
    monkeypatch.setenv("AWIN_SPRINGFIELD_DEV_CLIENT_SECRET", "dev-secret")

    config = TokenConfig.from_env(Environment.LOCAL)
    assert config.token_url == DEV_TOKEN_URL
    assert config.client_secret == "dev-secret"

    staging = TokenConfig.from_env(Environment.STAGING)
    assert staging.token_url is None
    with pytest.raises(CredentialError):
        TokenProvider(TokenConfig(Environment.STAGING, None, client_secret="x")).fetch_token()


def test_token_url_override(monkeypatch):
    monkeypatch.setenv("TIGERCLAW_TOKEN_URL", "http://other/token")
    assert TokenConfig.from_env(Environment.PRODUCTION).token_url == "http://other/token"


def test_get_token_and_environment(monkeypatch):
    monkeypatch.setenv("TIGERCLAW_TOKEN_URL", "http://idp/token")
    monkeypatch.setenv("AWIN_SPRINGFIELD_STAGING_CLIENT_SECRET", "st")
    monkeypatch.setattr("requests.post", lambda *a, **kw: Resp(payload={"access_token": "t1"}))

    assert get_token_and_environment("Staging") == ("t1", Environment.STAGING)
    with pytest.raises(InvalidInputError):
        get_token_and_environment("qa")
