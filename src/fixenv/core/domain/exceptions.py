"""Domain exceptions for fixenv.

Every error the service reports to a client derives from ``FixEnvError`` and
carries the HTTP status it maps to. The API layer turns them into the
``{"success": false, "error": ...}`` envelope.
"""

from __future__ import annotations


class FixEnvError(Exception):
    status_code: int = 500

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class InvalidRequestError(FixEnvError):
    """Raised when a request is missing fields or has malformed values."""

    status_code = 400


class InvalidRepoUrlError(InvalidRequestError):
    def __init__(self, url: str, message: str | None = None) -> None:
        self.url = url
        super().__init__(message or "Invalid GitHub URL format")


class NoManifestFoundError(FixEnvError):
    """Raised when none of the candidate dependency files exist.

    This is a user-facing business error rather than a system fault: the
    target simply does not look like a Python project.
    """

    status_code = 404

    def __init__(self, target: str, message: str | None = None) -> None:
        self.target = target
        if message is None:
            message = (
                "No Python dependency files found "
                "(requirements.txt, pyproject.toml, Pipfile, or setup.py)"
            )
        super().__init__(message)


class ConfigurationError(FixEnvError):
    status_code = 500


class LLMRequestError(FixEnvError):
    """Raised when the completion API answers with a non-2xx status."""

    def __init__(self, message: str, *, upstream_status: int | None = None) -> None:
        self.upstream_status = upstream_status
        super().__init__(message)
        # Quota and billing statuses pass through unchanged.
        if upstream_status in (402, 429):
            self.status_code = upstream_status
        else:
            self.status_code = 502

    @classmethod
    def from_status(cls, status: int, *, action: str = "generation") -> "LLMRequestError":
        if status == 429:
            return cls("Rate limit exceeded. Please try again in a moment.", upstream_status=status)
        if status == 402:
            return cls("Payment required. Please add credits to the AI provider account.", upstream_status=status)
        return cls(f"AI {action} failed: {status}", upstream_status=status)


class ResponseParseError(FixEnvError):
    """Raised when the model reply is not valid JSON after fence stripping."""

    status_code = 502

    def __init__(self, message: str, *, raw_text: str = "") -> None:
        self.raw_text = raw_text
        super().__init__(message)


class ResponseValidationError(FixEnvError):
    """Raised when the model reply is JSON but does not match the analysis schema."""

    status_code = 502

    def __init__(self, message: str, *, errors: list[dict] | None = None) -> None:
        self.errors = errors or []
        super().__init__(message)


class ShareNotFoundError(FixEnvError):
    status_code = 404

    def __init__(self, token: str) -> None:
        self.token = token
        super().__init__("Shared result not found")


class ShareTokenExhaustedError(FixEnvError):
    status_code = 500

    def __init__(self, attempts: int) -> None:
        self.attempts = attempts
        super().__init__("Failed to generate unique share token")


class RateLimitExceededError(FixEnvError):
    status_code = 429

    def __init__(self, retry_after: int) -> None:
        self.retry_after = retry_after
        super().__init__("Rate limit exceeded. Please try again in a minute.")
