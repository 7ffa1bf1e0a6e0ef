"""Error taxonomy for the tool server.

Every error raised across a tool boundary derives from ToolServerError and
carries enough context to diagnose the failing step (endpoint, command,
captured output) without ever including the GitLab access token.

CleanupWarning is the exception to the rule: it is a warning, produced when
a workspace cannot be removed, and is only ever logged and returned. It must
never mask the outcome of the operation that owned the workspace.
"""

from typing import Optional


class ToolServerError(Exception):
    """Base class for all errors surfaced by the tool server."""

    pass


class ValidationError(ToolServerError):
    """Raised when a required input is missing or empty.

    Attributes:
        field: Name of the rejected input.
    """

    def __init__(self, field: str, message: Optional[str] = None):
        self.field = field
        super().__init__(message or f"{field} must be a non-empty string")


class ConfigurationError(ToolServerError):
    """Raised when required configuration (token, domain) is absent."""

    pass


class UpstreamError(ToolServerError):
    """Raised when a platform API call does not succeed.

    Attributes:
        message: Human-readable error description.
        status_code: HTTP status code, None for transport failures.
        response_body: Raw error body returned by the platform.
        request_path: The API path that was requested.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response_body: Optional[str] = None,
        request_path: Optional[str] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.response_body = response_body
        self.request_path = request_path
        super().__init__(message)


class ParseError(ToolServerError):
    """Raised when an expected field is absent from an API response.

    Attributes:
        field: The response field that could not be read.
        request_path: The API path whose response was malformed.
    """

    def __init__(self, field: str, request_path: Optional[str] = None):
        self.field = field
        self.request_path = request_path
        location = f" from {request_path}" if request_path else ""
        super().__init__(f"Response{location} is missing field '{field}'")


class VcsCommandError(ToolServerError):
    """Raised when a git command exits non-zero.

    Both attributes are already scrubbed of credentials by the caller.

    Attributes:
        command: The command line that failed.
        exit_code: Process exit code (-1 for timeouts and launch failures).
        stderr: Captured standard error.
    """

    def __init__(self, command: str, exit_code: int, stderr: str):
        self.command = command
        self.exit_code = exit_code
        self.stderr = stderr
        super().__init__(
            f"Command '{command}' failed with exit code {exit_code}: {stderr.strip()}"
        )


class WorkspaceError(ToolServerError):
    """Raised when a workspace directory cannot be created."""

    pass


class InvalidTransitionError(ToolServerError):
    """Raised when a provisioning run attempts an illegal stage transition.

    Attributes:
        from_stage: The current stage value.
        to_stage: The attempted target stage value.
    """

    def __init__(self, from_stage: str, to_stage: str):
        self.from_stage = from_stage
        self.to_stage = to_stage
        super().__init__(f"Invalid transition from {from_stage} to {to_stage}")


class CleanupWarning(RuntimeWarning):
    """Workspace deletion failed. Logged, never raised.

    Attributes:
        path: The workspace path that could not be removed.
    """

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to remove workspace {path}: {reason}")
