"""Workspace provisioning for budget provisioning runs.

Workspaces are uniquely named temporary directories that hold one cloned
repository for the duration of one run and are removed when it ends.
"""

from src.toolserver.provisioner.workspace import (
    WORKSPACE_DIR_PERMISSIONS,
    WorkspaceConfig,
    WorkspaceManager,
)

__all__ = [
    "WORKSPACE_DIR_PERMISSIONS",
    "WorkspaceConfig",
    "WorkspaceManager",
]
