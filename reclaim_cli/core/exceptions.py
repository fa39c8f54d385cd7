"""
Custom Exceptions.

Application-specific exception classes for consistent error handling.
Every error carries a plain-language message, an optional remediation hint,
a stable code and the process exit code used when it ends an invocation.
"""

EXIT_USAGE = 2
EXIT_CREDENTIALS = 3
EXIT_TRANSPORT = 4
EXIT_API = 5
EXIT_RESPONSE = 6
EXIT_OUTPUT = 7


class ReclaimError(Exception):
    """Base exception for all reclaim-cli errors."""

    exit_code: int = 1

    def __init__(
        self,
        message: str,
        hint: str | None = None,
        code: str = "SYS_INTERNAL_ERROR",
    ) -> None:
        self.message = message
        self.hint = hint
        self.code = code
        super().__init__(self.message)


class InvalidInputError(ReclaimError):
    """Raised when local input (flags, JSON, KEY=VALUE pairs) is malformed."""

    exit_code = EXIT_USAGE

    def __init__(self, message: str, hint: str | None = None) -> None:
        super().__init__(message, hint=hint, code="VAL_INVALID_INPUT")


class MissingApiKeyError(ReclaimError):
    """Raised when no API key is configured."""

    exit_code = EXIT_CREDENTIALS

    def __init__(self, message: str = "Missing Reclaim API key.") -> None:
        super().__init__(
            message,
            hint="Set RECLAIM_API_KEY or pass --api-key. You can find your key in Reclaim settings.",
            code="AUTH_MISSING_API_KEY",
        )


class ConfigurationError(ReclaimError):
    """Raised when a setting such as the base URL is unusable."""

    exit_code = EXIT_CREDENTIALS

    def __init__(self, message: str, hint: str | None = None) -> None:
        super().__init__(message, hint=hint, code="CFG_INVALID")


class TransportError(ReclaimError):
    """Raised when the request fails before a usable response arrives."""

    exit_code = EXIT_TRANSPORT

    def __init__(self, message: str, hint: str | None = None) -> None:
        super().__init__(message, hint=hint, code="SYS_TRANSPORT_ERROR")


class ApiError(ReclaimError):
    """Raised when the Reclaim API answers with a non-2xx status."""

    exit_code = EXIT_API

    def __init__(
        self,
        status: int,
        message: str,
        hint: str | None = None,
        *,
        method: str = "UNKNOWN",
        url: str = "",
        body: str = "",
        request_body: str | None = None,
    ) -> None:
        self.status = status
        self.method = method
        self.url = url
        self.body = body
        self.request_body = request_body
        super().__init__(
            f"Reclaim API returned HTTP {status}: {message}",
            hint=hint,
            code="SYS_EXTERNAL_SERVICE_ERROR",
        )


class ResponseParseError(ReclaimError):
    """Raised when a successful response body cannot be decoded."""

    exit_code = EXIT_RESPONSE

    def __init__(self, message: str, hint: str | None = None) -> None:
        super().__init__(message, hint=hint, code="SYS_RESPONSE_PARSE_ERROR")


class OutputError(ReclaimError):
    """Raised when output cannot be rendered (including terminal failures)."""

    exit_code = EXIT_OUTPUT

    def __init__(self, message: str) -> None:
        super().__init__(message, code="SYS_OUTPUT_ERROR")
