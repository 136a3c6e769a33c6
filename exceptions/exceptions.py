"""
Error kinds raised by gptcli.

Raised by:

  - core/api/        (remote request failures)
  - core/retry/      (cancellation between attempts)
  - core/stream/     (abnormal stream termination)
  - runtime/models/  (invalid session input)

Caught by cli/repl.py (reported, loop continues) and cli/main.py
(reported, non-zero exit status).
"""


class GptCliError(Exception):
    """Base class for every error raised by gptcli itself."""


class TransientNetworkError(GptCliError):
    """
    Raised when a remote call fails in a way that may succeed if repeated:
    connection errors, timeouts, rate limiting and 5xx responses.
    """

    def __init__(self, message, status_code=None):
        self.status_code = status_code
        if status_code is not None:
            message = f"{message} (HTTP {status_code})"
        super().__init__(message)


class PermanentRequestError(GptCliError):
    """
    Raised when a remote call is rejected for a reason that repeating it
    will not fix: authentication failure, invalid parameters, unknown model.
    """

    def __init__(self, message, status_code=None):
        self.status_code = status_code
        if status_code is not None:
            message = f"{message} (HTTP {status_code})"
        super().__init__(message)


class ValidationError(GptCliError):
    """
    Raised when user input to a session operation is not acceptable.

    Example:
        /format yaml   ← 'yaml' is not one of text|markdown|json
    """

    def __init__(self, field, value, allowed=None):
        self.field = field
        self.value = value
        self.allowed = list(allowed or [])
        msg = f"Invalid {field}: {value!r}"
        if self.allowed:
            msg += " (expected one of: " + ", ".join(str(a) for a in self.allowed) + ")"
        super().__init__(msg)


class StreamTerminationError(GptCliError):
    """
    Raised when a streamed response ends abnormally.

    Fragments received before the failure have already been displayed;
    they are kept in `partial_text` but are never treated as a result.
    """

    def __init__(self, partial_text, cause=None):
        self.partial_text = partial_text
        self.cause = cause
        msg = f"Stream terminated after {len(partial_text)} characters"
        if cause is not None:
            msg += f": {cause}"
        super().__init__(msg)


class RetryCancelledError(GptCliError):
    """Raised when the retry loop is cancelled between attempts."""

    def __init__(self, attempts):
        self.attempts = attempts
        super().__init__(f"Retry cancelled after {attempts} attempt(s)")
