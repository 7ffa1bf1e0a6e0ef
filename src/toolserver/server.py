"""MCP server definition.

Wires settings into collaborators (ToolServices) and registers every tool,
prompt and resource on a FastMCP instance. Registered functions are thin
closures over the services; the behavior lives in src.toolserver.tools.
"""

import logging
import random
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from mcp.server.fastmcp import Context, FastMCP

from src.toolserver import prompts
from src.toolserver.arm.client import AzureClient
from src.toolserver.budget.metrics import ProvisioningMetrics, get_metrics
from src.toolserver.budget.workflow import BudgetProvisioningWorkflow
from src.toolserver.config import ServerSettings
from src.toolserver.gitlab.client import GitLabClient
from src.toolserver.gitlab.models import GitLabGroup, GitLabProject, GitLabProjectVariable
from src.toolserver.provisioner.workspace import WorkspaceConfig, WorkspaceManager
from src.toolserver.resources.users import YAML_MIME_TYPE, UserDirectory
from src.toolserver.tools.azure_tools import AzureTools
from src.toolserver.tools.budget_tools import BudgetTools
from src.toolserver.tools.elicitation import GuessTheNumberGame
from src.toolserver.tools.gitlab_tools import GitLabTools
from src.toolserver.tools.sensitive import (
    set_a_secret_for_demo_purposes,
    set_an_api_key_for_demo_purposes,
)
from src.toolserver.tools.whois import WhoIsTool
from src.toolserver.vcs.git import GitDriver, GitIdentity

logger = logging.getLogger(__name__)

SERVER_NAME = "toolserver"


@dataclass
class ToolServices:
    """Collaborators shared by all registered tools.

    Attributes:
        gitlab_client: GitLab REST client, closed on shutdown.
        azure_client: Azure Resource Manager client, closed on shutdown.
        rng: Random source for the demo tools.
    """

    gitlab_client: GitLabClient
    azure_client: AzureClient
    budget: BudgetTools
    rng: random.Random = field(default_factory=random.Random)
    users: UserDirectory = field(default_factory=UserDirectory)

    def __post_init__(self):
        self.gitlab = GitLabTools(self.gitlab_client)
        self.azure = AzureTools(self.azure_client)
        self.whois = WhoIsTool(rng=self.rng)
        self.game = GuessTheNumberGame(rng=self.rng)

    async def aclose(self) -> None:
        await self.gitlab_client.close()
        await self.azure_client.close()


def build_services(
    settings: ServerSettings,
    metrics: Optional[ProvisioningMetrics] = None,
    rng: Optional[random.Random] = None,
) -> ToolServices:
    """Wire all tool dependencies from settings.

    Args:
        settings: Validated server settings.
        metrics: Metrics sink for provisioning runs; the process-wide
            instance when omitted.
        rng: Random source for the demo tools.

    Returns:
        Fully wired ToolServices.
    """
    gitlab_client = GitLabClient(
        token=settings.gitlab_token,
        base_url=settings.gitlab_base_url,
        timeout=settings.http_timeout_seconds,
    )
    azure_client = AzureClient(
        management_url=settings.azure_management_url,
        timeout=settings.http_timeout_seconds,
    )
    git = GitDriver(
        executable=settings.git_executable,
        timeout_seconds=settings.git_timeout_seconds,
        identity=GitIdentity(
            name=settings.git_author_name, email=settings.git_author_email
        ),
    )
    workspace_root: Optional[Path] = settings.workspace_root
    workflow = BudgetProvisioningWorkflow(
        gitlab_client=gitlab_client,
        git=git,
        workspaces=WorkspaceManager(WorkspaceConfig(base_path=workspace_root)),
        branch_name=settings.budget_branch_name,
        metrics=metrics or get_metrics(),
    )
    return ToolServices(
        gitlab_client=gitlab_client,
        azure_client=azure_client,
        budget=BudgetTools(workflow),
        rng=rng or random.Random(),
    )


def create_server(services: ToolServices, **fastmcp_options) -> FastMCP:
    """Create the FastMCP server with all tools, prompts and resources."""
    mcp = FastMCP(SERVER_NAME, **fastmcp_options)

    # ------------------------------------------------------------------
    # Budget provisioning
    # ------------------------------------------------------------------
    @mcp.tool()
    async def provision_budget(project_identifier: str, base_branch_name: str) -> str:
        """Add an Azure consumption budget to a GitLab Terraform project.

        Clones the project, adds the budget declaration on a feature branch
        and opens a merge request into base_branch_name.

        Returns:
            The merge request URL, or a message when the project already
            declares a consumption budget.
        """
        return await services.budget.provision_budget(project_identifier, base_branch_name)

    # ------------------------------------------------------------------
    # GitLab
    # ------------------------------------------------------------------
    @mcp.tool()
    async def search_groups(pattern: str) -> List[GitLabGroup]:
        """Search GitLab groups whose name or path matches the pattern."""
        return await services.gitlab.search_groups(pattern)

    @mcp.tool()
    async def get_projects_in_group(group_pattern: str) -> List[GitLabProject]:
        """List projects in every GitLab group matching the pattern, subgroups included."""
        return await services.gitlab.get_projects_in_group(group_pattern)

    @mcp.tool()
    async def get_variables_in_project(project_id: str) -> List[GitLabProjectVariable]:
        """List CI/CD variables of a GitLab project. Masked values are hidden."""
        return await services.gitlab.get_variables_in_project(project_id)

    # ------------------------------------------------------------------
    # Azure
    # ------------------------------------------------------------------
    @mcp.tool()
    async def get_azure_subscriptions() -> Dict[str, str]:
        """Map Azure subscription names to subscription ids."""
        return await services.azure.get_azure_subscriptions()

    @mcp.tool()
    async def get_list_of_resource_groups(subscription_id: str) -> Dict[str, str]:
        """Map resource group names to resource ids in an Azure subscription."""
        return await services.azure.get_list_of_resource_groups(subscription_id)

    @mcp.tool()
    async def get_virtual_machines_match_tag_key(
        subscription_id: str, tag_key: str
    ) -> Dict[str, Dict[str, str]]:
        """List virtual machines in a subscription that carry the given tag key."""
        return await services.azure.get_virtual_machines_match_tag_key(
            subscription_id, tag_key
        )

    # ------------------------------------------------------------------
    # Demo tools
    # ------------------------------------------------------------------
    @mcp.tool()
    def who_is(fullname: str) -> str:
        """Tell who a person is."""
        return services.whois.who_is(fullname)

    mcp.tool()(set_a_secret_for_demo_purposes)
    mcp.tool()(set_an_api_key_for_demo_purposes)

    @mcp.tool()
    async def guess_the_number(ctx: Context) -> str:
        """A simple game where the user has to guess a number. #elicitation"""
        return await services.game.play(ctx)

    # ------------------------------------------------------------------
    # Prompts
    # ------------------------------------------------------------------
    mcp.prompt()(prompts.reverse_word)
    mcp.prompt()(prompts.one_sentence_summary)
    mcp.prompt()(prompts.summary_benefits_and_references)

    # ------------------------------------------------------------------
    # Resources
    # ------------------------------------------------------------------
    @mcp.resource(
        "user://{user_id}",
        name="user-data",
        description="Returns user information from the directory as YAML content.",
        mime_type=YAML_MIME_TYPE,
    )
    def get_user(user_id: str) -> str:
        return services.users.user_as_yaml(user_id)

    @mcp.resource(
        "users://all",
        name="all-users",
        description="Returns a list of all users from the directory as YAML content.",
        mime_type=YAML_MIME_TYPE,
    )
    def get_all_users() -> str:
        return services.users.all_users_as_yaml()

    logger.info("MCP server created", extra={"server_name": SERVER_NAME})
    return mcp
