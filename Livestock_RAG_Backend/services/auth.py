import threading

import google.auth
from google.auth import exceptions as google_exceptions
from google.auth.transport.requests import Request

from Livestock_RAG_Backend.core.errors import AuthenticationError

CLOUD_PLATFORM_SCOPE = "https://www.googleapis.com/auth/cloud-platform"


def _is_permission_denied(exc: Exception) -> bool:
    msg = str(exc).lower()
    return "permission" in msg or "403" in msg or "forbidden" in msg


class GoogleTokenProvider:
    """
    Application-default credentials, cached for the process and refreshed
    when expired. Shared across request threads.
    """
    def __init__(self, scopes: tuple[str, ...] = (CLOUD_PLATFORM_SCOPE,)):
        self.scopes = list(scopes)
        self._credentials = None
        self._lock = threading.Lock()

    def get_token(self) -> str:
        with self._lock:
            try:
                if self._credentials is None:
                    self._credentials, _ = google.auth.default(scopes=self.scopes)
                if not self._credentials.valid:
                    self._credentials.refresh(Request())
            except google_exceptions.GoogleAuthError as e:
                self._credentials = None
                raise AuthenticationError(
                    f"Failed to obtain access token: {e}",
                    permission_denied=_is_permission_denied(e),
                ) from e
            token = self._credentials.token

        if not token:
            raise AuthenticationError("Failed to obtain access token")
        return token
