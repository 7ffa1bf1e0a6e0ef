"""GitLab API access.

This module provides the async GitLab client used for:
- Resolving authenticated clone URLs
- Creating merge requests
- Searching groups, listing projects and project variables
"""

from src.toolserver.gitlab.client import GitLabClient, build_clone_url
from src.toolserver.gitlab.models import (
    CloneCredential,
    GitLabGroup,
    GitLabProject,
    GitLabProjectVariable,
    mask_variables,
)

__all__ = [
    "CloneCredential",
    "GitLabClient",
    "GitLabGroup",
    "GitLabProject",
    "GitLabProjectVariable",
    "build_clone_url",
    "mask_variables",
]
