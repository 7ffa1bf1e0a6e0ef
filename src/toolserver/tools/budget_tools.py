"""The budget provisioning tool."""

import logging

from src.toolserver.budget.workflow import BudgetProvisioningWorkflow

logger = logging.getLogger(__name__)


class BudgetTools:
    """Exposes BudgetProvisioningWorkflow as a string-returning tool."""

    def __init__(self, workflow: BudgetProvisioningWorkflow):
        self.workflow = workflow

    async def provision_budget(self, project_identifier: str, base_branch_name: str) -> str:
        """Provision an Azure consumption budget and open a merge request.

        Returns:
            The merge request URL, the "already exists" message, or the
            message for a merge request whose URL is unknown.
        """
        try:
            result = await self.workflow.provision(project_identifier, base_branch_name)
        except Exception:
            logger.exception(
                "Error in provision_budget",
                extra={"project": project_identifier, "base_branch": base_branch_name},
            )
            raise
        return result.message
