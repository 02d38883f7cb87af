"""Error taxonomy for SciGen."""

from __future__ import annotations


class SciGenError(Exception):
    """Base exception for SciGen errors."""
    pass


class ConfigError(SciGenError):
    """Raised when a configuration file cannot be read or parsed."""
    pass


class MissingCredentialError(SciGenError):
    """Raised at startup when no API key is available."""

    def __init__(self, env_var: str = "GROQ_API_KEY"):
        super().__init__(f"{env_var} not found in config file or environment")
        self.env_var = env_var


class NoTopicsSelectedError(SciGenError):
    """Raised (and recorded by the session) when the topic selection is empty."""

    def __init__(self, message: str = "Please select at least one topic"):
        super().__init__(message)


class FetchError(SciGenError):
    """Base exception for a failed question fetch."""

    @property
    def user_message(self) -> str:
        return f"API Error: {self}"


class TransportError(FetchError):
    """Raised for network failures and non-2xx HTTP responses."""

    def __init__(self, message: str, status_code: int | None = None, body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.body = body

    def __str__(self) -> str:
        if self.status_code is None:
            return super().__str__()
        detail = self.body.strip()
        return f"HTTP {self.status_code}: {detail}" if detail else f"HTTP {self.status_code}"


class MalformedResponseError(FetchError):
    """Raised when the response envelope or generated content has an unexpected shape."""
    pass


class ValidationError(FetchError):
    """Raised when generated content is well-formed but semantically invalid."""
    pass
