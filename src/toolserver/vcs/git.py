"""Git subprocess driver.

Runs the git executable as an async subprocess with a per-call timeout and
returns a structured CommandResult. A non-zero exit is data, not an
exception: callers inspect CommandResult.succeeded at each step and decide
how to fail.

Timeouts and launch failures (git missing from PATH) are reported the same
way, as results with exit code -1. Cancellation kills the child process
before propagating.
"""

import asyncio
import logging
import os
import re
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence

logger = logging.getLogger(__name__)

FAILED_TO_RUN_EXIT_CODE = -1

_URL_USERINFO = re.compile(r"(?P<scheme>[a-zA-Z][a-zA-Z0-9+.-]*://)[^/@\s]+@")


def scrub_userinfo(text: str) -> str:
    """Replace credentials embedded in URLs ("https://user:pw@host") with ****."""
    return _URL_USERINFO.sub(r"\g<scheme>****@", text)


@dataclass
class CommandResult:
    """Result of one git invocation.

    Attributes:
        args: Arguments passed to git (without the executable).
        exit_code: Process exit code (-1 for timeout/OS errors).
        stdout: Captured standard output.
        stderr: Captured standard error.
        duration_seconds: Wall-clock execution time.
    """

    args: List[str]
    exit_code: int
    stdout: str = ""
    stderr: str = ""
    duration_seconds: float = 0.0

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0

    @property
    def command_line(self) -> str:
        """The command as a display string, with URL credentials scrubbed."""
        return scrub_userinfo(" ".join(["git", *self.args]))


@dataclass
class GitIdentity:
    """Author and committer identity applied to commits."""

    name: str
    email: str


@dataclass
class GitDriver:
    """Runs git commands in a working directory.

    Attributes:
        executable: Path or name of the git executable.
        timeout_seconds: Maximum time a single command may run.
        identity: Optional author/committer identity for commits.
    """

    executable: str = "git"
    timeout_seconds: int = 300
    identity: Optional[GitIdentity] = None
    extra_env: Dict[str, str] = field(default_factory=dict)

    async def run(self, working_dir: Path, args: Sequence[str]) -> CommandResult:
        """Execute ``git *args`` in ``working_dir`` and capture its output.

        Both streams are read to completion before the exit code is
        classified.

        Args:
            working_dir: Directory the command runs in.
            args: Git subcommand and arguments.

        Returns:
            CommandResult describing the outcome.

        Raises:
            asyncio.CancelledError: If the calling task is cancelled; the
                child process is killed first.
        """
        arg_list = [str(arg) for arg in args]
        start_time = time.monotonic()

        logger.info(
            "Running git command",
            extra={
                "command": scrub_userinfo(" ".join(["git", *arg_list])),
                "cwd": str(working_dir),
            },
        )

        try:
            process = await asyncio.create_subprocess_exec(
                self.executable,
                *arg_list,
                cwd=str(working_dir),
                env=self._build_env(),
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            return self._handle_os_error(arg_list, exc, start_time)

        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(), timeout=self.timeout_seconds
            )
        except asyncio.TimeoutError:
            await self._kill(process)
            return self._handle_timeout(arg_list, start_time)
        except asyncio.CancelledError:
            await self._kill(process)
            raise

        return self._build_result(
            arg_list,
            process.returncode if process.returncode is not None else FAILED_TO_RUN_EXIT_CODE,
            self._decode(stdout),
            self._decode(stderr),
            time.monotonic() - start_time,
        )

    async def clone(self, working_dir: Path, clone_url: str, target: str) -> CommandResult:
        return await self.run(working_dir, ["clone", clone_url, target])

    async def checkout(self, repo_dir: Path, branch: str) -> CommandResult:
        return await self.run(repo_dir, ["checkout", branch])

    async def pull(self, repo_dir: Path) -> CommandResult:
        return await self.run(repo_dir, ["pull"])

    async def create_branch(self, repo_dir: Path, branch: str) -> CommandResult:
        return await self.run(repo_dir, ["checkout", "-b", branch])

    async def add(self, repo_dir: Path, paths: Sequence[str]) -> CommandResult:
        return await self.run(repo_dir, ["add", "--", *paths])

    async def commit(self, repo_dir: Path, message: str) -> CommandResult:
        return await self.run(repo_dir, ["commit", "-m", message])

    async def push_new_branch(self, repo_dir: Path, branch: str) -> CommandResult:
        return await self.run(repo_dir, ["push", "--set-upstream", "origin", branch])

    def _build_env(self) -> Dict[str, str]:
        env = dict(os.environ)
        env["GIT_TERMINAL_PROMPT"] = "0"
        if self.identity is not None:
            env["GIT_AUTHOR_NAME"] = self.identity.name
            env["GIT_AUTHOR_EMAIL"] = self.identity.email
            env["GIT_COMMITTER_NAME"] = self.identity.name
            env["GIT_COMMITTER_EMAIL"] = self.identity.email
        env.update(self.extra_env)
        return env

    @staticmethod
    def _decode(data: Optional[bytes]) -> str:
        if not data:
            return ""
        return data.decode("utf-8", errors="replace")

    @staticmethod
    async def _kill(process: asyncio.subprocess.Process) -> None:
        if process.returncode is None:
            try:
                process.kill()
            except ProcessLookupError:
                pass
        await process.wait()

    def _handle_timeout(self, args: List[str], start_time: float) -> CommandResult:
        logger.error(
            "git command timed out after %ds",
            self.timeout_seconds,
            extra={"command": scrub_userinfo(" ".join(["git", *args]))},
        )
        return CommandResult(
            args=args,
            exit_code=FAILED_TO_RUN_EXIT_CODE,
            stderr=f"Process timed out after {self.timeout_seconds}s",
            duration_seconds=time.monotonic() - start_time,
        )

    def _handle_os_error(
        self, args: List[str], exc: OSError, start_time: float
    ) -> CommandResult:
        logger.error("Failed to start git: %s", exc)
        return CommandResult(
            args=args,
            exit_code=FAILED_TO_RUN_EXIT_CODE,
            stderr=f"Failed to execute {self.executable}: {exc}",
            duration_seconds=time.monotonic() - start_time,
        )

    def _build_result(
        self,
        args: List[str],
        exit_code: int,
        stdout: str,
        stderr: str,
        duration: float,
    ) -> CommandResult:
        result = CommandResult(
            args=args,
            exit_code=exit_code,
            stdout=stdout,
            stderr=stderr,
            duration_seconds=duration,
        )
        if result.succeeded:
            logger.info(
                "git command completed in %.1fs",
                duration,
                extra={"command": result.command_line},
            )
        else:
            logger.error(
                "git command failed with exit code %d in %.1fs",
                exit_code,
                duration,
                extra={"command": result.command_line},
            )
        return result
