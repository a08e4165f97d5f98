class RagError(Exception):
    """Base for errors that map onto an HTTP status."""

    status_code: int = 500

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def public_message(self) -> str:
        return self.message


class ValidationError(RagError):
    status_code = 400


class ConfigurationError(RagError):
    status_code = 500

    def public_message(self) -> str:
        return f"Configuration error: {self.message}"


class AuthenticationError(RagError):
    status_code = 500

    def __init__(self, message: str, permission_denied: bool = False):
        super().__init__(message, status_code=403 if permission_denied else 500)
        self.permission_denied = permission_denied


class RetrievalError(RagError):
    status_code = 502


class GenerationError(RagError):
    # raised by a single provider call; the orchestrator always recovers it
    status_code = 502
