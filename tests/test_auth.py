import google.auth
import pytest
from google.auth import exceptions as google_exceptions

from Livestock_RAG_Backend.core.errors import AuthenticationError
from Livestock_RAG_Backend.services.auth import GoogleTokenProvider


class FakeCredentials:
    def __init__(self, valid=True, token="cached-token", refresh_error=None):
        self.valid = valid
        self.token = token
        self.refresh_error = refresh_error
        self.refreshed = 0

    def refresh(self, request):
        self.refreshed += 1
        if self.refresh_error is not None:
            raise self.refresh_error
        self.valid = True
        self.token = "fresh-token"


def patch_default(monkeypatch, creds):
    calls = []

    def fake_default(scopes=None):
        calls.append(scopes)
        return creds, "demo-project"

    monkeypatch.setattr(google.auth, "default", fake_default)
    return calls


def test_credentials_loaded_once(monkeypatch):
    calls = patch_default(monkeypatch, FakeCredentials())
    provider = GoogleTokenProvider()

    assert provider.get_token() == "cached-token"
    assert provider.get_token() == "cached-token"
    assert calls == [["https://www.googleapis.com/auth/cloud-platform"]]


def test_expired_credentials_refreshed(monkeypatch):
    creds = FakeCredentials(valid=False, token=None)
    patch_default(monkeypatch, creds)

    assert GoogleTokenProvider().get_token() == "fresh-token"
    assert creds.refreshed == 1


def test_missing_credentials(monkeypatch):
    def no_credentials(scopes=None):
        raise google_exceptions.DefaultCredentialsError("Could not automatically determine credentials")

    monkeypatch.setattr(google.auth, "default", no_credentials)

    with pytest.raises(AuthenticationError) as exc_info:
        GoogleTokenProvider().get_token()
    assert exc_info.value.status_code == 500
    assert not exc_info.value.permission_denied


def test_permission_denied_maps_to_403(monkeypatch):
    creds = FakeCredentials(valid=False, refresh_error=google_exceptions.RefreshError("403 Forbidden"))
    patch_default(monkeypatch, creds)

    with pytest.raises(AuthenticationError) as exc_info:
        GoogleTokenProvider().get_token()
    assert exc_info.value.status_code == 403


def test_empty_token(monkeypatch):
    patch_default(monkeypatch, FakeCredentials(token=""))
    with pytest.raises(AuthenticationError):
        GoogleTokenProvider().get_token()
