"""
Error taxonomy for my2sats.

Library code raises these and never prints or exits. The CLI is the only
layer that turns them into process output (see ``format_error``).
"""

from __future__ import annotations


class My2SatsError(Exception):
    """Base class for every error my2sats raises on purpose."""


class InvalidSecretKey(My2SatsError):
    def __init__(self, message: str = "Invalid secret key format. Expected nsec or 64-character hex string") -> None:
        super().__init__(message)


class KeyfileNotFound(My2SatsError):
    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(
            f"Keyfile not found at {path}. Run 'my2sats store-key' first to store your key."
        )


class InvalidKeyfileFormat(My2SatsError):
    def __init__(self, message: str = "Invalid keyfile format. Expected ncryptsec.") -> None:
        super().__init__(message)


class DecryptionFailed(My2SatsError):
    def __init__(self, message: str = "Failed to decrypt key. Wrong password?") -> None:
        super().__init__(message)


class OperationAborted(My2SatsError):
    """The user declined a prompt. Not an operational failure."""

    def __init__(self, message: str = "Operation aborted.") -> None:
        super().__init__(message)


class ImageValidationError(My2SatsError):
    """A local image is missing, too large, or of a disallowed type."""


class ApiError(My2SatsError):
    def __init__(self, status: int, message: str) -> None:
        self.status = status
        self.body = message
        super().__init__(f"API request failed ({status}): {message}")


class NetworkError(My2SatsError):
    """The request never got an HTTP response."""

    def __init__(self, url: str, cause: BaseException) -> None:
        self.url = url
        super().__init__(f"Request to {url} failed: {str(cause) or cause.__class__.__name__}")


class ValidationError(My2SatsError):
    def __init__(self, fields: list[str]) -> None:
        self.fields = list(fields)
        super().__init__(f"Missing required fields: {', '.join(self.fields)}")


class NoUpdatesProvided(My2SatsError):
    def __init__(
        self,
        message: str = "No updates provided. Use --file or field options (--title, --content, etc.)",
    ) -> None:
        super().__init__(message)


class FileNotFound(My2SatsError):
    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"File not found: {path}")


class FrontmatterError(My2SatsError):
    """The front-matter block of a markdown file could not be parsed."""


class ConfigError(My2SatsError):
    """Configuration file is unreadable or would be clobbered."""


def format_error(error: BaseException) -> str:
    """Render an error for CLI output."""
    message = str(error)
    return message or error.__class__.__name__
