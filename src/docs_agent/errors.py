"""Error taxonomy shared by tools, providers and the dispatcher."""

from __future__ import annotations

REDACTED = "***"


class DocsAgentError(Exception):
    """Base class for all errors raised by the assistant core."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InputValidationError(DocsAgentError):
    """Request cannot be served: missing subject text, missing or malformed key."""


class ProviderError(DocsAgentError):
    """Failure talking to a hosted completion endpoint."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        body: str | None = None,
        transient: bool = False,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body
        self.transient = transient

    @classmethod
    def from_status(cls, status_code: int, body: str) -> "ProviderError":
        return cls(
            f"HTTP {status_code}: {body[:500]}",
            status_code=status_code,
            body=body,
            transient=status_code >= 500,
        )


class RegistrationError(DocsAgentError):
    """A tool does not satisfy the execute contract. Raised at setup time."""


def redact_secret(message: str, secret: str | None) -> str:
    """Replace every occurrence of ``secret`` in ``message``."""
    if not secret:
        return message
    return message.replace(secret, REDACTED)
