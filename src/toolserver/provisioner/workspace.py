"""Ephemeral workspace management for budget provisioning.

Each provisioning run clones its repository into a directory of its own.
The directory name carries a random suffix so concurrent runs never share
a path, and the directory is removed when the run ends whatever the outcome.

Removal failures are reported as CleanupWarning: logged and returned, never
raised, so they cannot mask the result of the run that owned the workspace.
"""

import logging
import shutil
import tempfile
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from src.toolserver.errors import CleanupWarning, WorkspaceError

logger = logging.getLogger(__name__)

WORKSPACE_DIR_PERMISSIONS = 0o700
WORKSPACE_PREFIX = "budget-"


@dataclass
class WorkspaceConfig:
    """Configuration for workspace management.

    Attributes:
        base_path: Directory under which workspaces are created. None means
            the system temp directory.
        prefix: Directory name prefix for every workspace.
    """

    base_path: Optional[Path] = None
    prefix: str = WORKSPACE_PREFIX


class WorkspaceManager:
    """Creates and removes per-run workspace directories.

    The manager holds no per-run state; every acquire() call returns a new
    path, so one manager can serve concurrent runs.

    Attributes:
        config: Workspace configuration (base path, prefix).
    """

    def __init__(self, config: Optional[WorkspaceConfig] = None):
        self.config = config or WorkspaceConfig()

    @property
    def base_path(self) -> Path:
        if self.config.base_path is not None:
            return self.config.base_path
        return Path(tempfile.gettempdir())

    def acquire(self) -> Path:
        """Create a fresh, uniquely named workspace directory.

        Returns:
            Absolute path to the new directory.

        Raises:
            WorkspaceError: If the directory cannot be created.
        """
        workspace_path = self._build_workspace_path()

        try:
            workspace_path.mkdir(parents=True, exist_ok=False)
            workspace_path.chmod(WORKSPACE_DIR_PERMISSIONS)
        except OSError as exc:
            raise WorkspaceError(
                f"Failed to create workspace at {workspace_path}: {exc}"
            ) from exc

        logger.info("Workspace acquired", extra={"workspace": str(workspace_path)})
        return workspace_path

    def release(self, workspace_path: Path) -> Optional[CleanupWarning]:
        """Recursively delete a workspace directory.

        Args:
            workspace_path: Path returned by acquire().

        Returns:
            None on success (or when the directory is already gone), otherwise
            the CleanupWarning that was logged.
        """
        if not workspace_path.exists():
            return None

        try:
            shutil.rmtree(workspace_path)
        except OSError as exc:
            warning = CleanupWarning(str(workspace_path), str(exc))
            logger.warning(str(warning), extra={"workspace": str(workspace_path)})
            return warning

        logger.info("Workspace released", extra={"workspace": str(workspace_path)})
        return None

    def _build_workspace_path(self) -> Path:
        directory_name = f"{self.config.prefix}{uuid.uuid4().hex}"
        return self.base_path.resolve() / directory_name
