"""GitLab inspection tools: group search, group projects, project variables."""

import logging
from typing import List

from src.toolserver.gitlab.client import GitLabClient
from src.toolserver.gitlab.models import (
    GitLabGroup,
    GitLabProject,
    GitLabProjectVariable,
    mask_variables,
)

logger = logging.getLogger(__name__)


class GitLabTools:
    """Read-only GitLab queries exposed as tools.

    Failures are logged with their input and re-raised to the tool host.
    """

    def __init__(self, client: GitLabClient):
        self.client = client

    async def search_groups(self, pattern: str) -> List[GitLabGroup]:
        logger.info("search_groups called", extra={"pattern": pattern})
        try:
            return await self.client.search_groups(pattern)
        except Exception:
            logger.exception("Error in search_groups", extra={"pattern": pattern})
            raise

    async def get_projects_in_group(self, group_pattern: str) -> List[GitLabProject]:
        logger.info("get_projects_in_group called", extra={"pattern": group_pattern})
        try:
            return await self.client.get_projects_in_group(group_pattern)
        except Exception:
            logger.exception(
                "Error in get_projects_in_group", extra={"pattern": group_pattern}
            )
            raise

    async def get_variables_in_project(self, project_id: str) -> List[GitLabProjectVariable]:
        """Return the project's variables with masked values hidden."""
        logger.info("get_variables_in_project called", extra={"project": project_id})
        try:
            variables = await self.client.get_project_variables(project_id)
        except Exception:
            logger.exception(
                "Error in get_variables_in_project", extra={"project": project_id}
            )
            raise
        return mask_variables(variables)
