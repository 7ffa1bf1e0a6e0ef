"""Git subprocess execution.

Runs git as an async subprocess and reports each invocation as a
CommandResult (exit code, stdout, stderr) for the caller to inspect.
"""

from src.toolserver.vcs.git import (
    CommandResult,
    GitDriver,
    GitIdentity,
    scrub_userinfo,
)

__all__ = [
    "CommandResult",
    "GitDriver",
    "GitIdentity",
    "scrub_userinfo",
]
