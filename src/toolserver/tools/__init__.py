"""Tool implementations behind the MCP server.

Each class wraps one collaborator and is registered on the server in
src.toolserver.server; the plain functions here have no collaborators.
"""

from src.toolserver.tools.azure_tools import AzureTools
from src.toolserver.tools.budget_tools import BudgetTools
from src.toolserver.tools.elicitation import GuessTheNumberGame
from src.toolserver.tools.gitlab_tools import GitLabTools
from src.toolserver.tools.sensitive import (
    set_a_secret_for_demo_purposes,
    set_an_api_key_for_demo_purposes,
)
from src.toolserver.tools.whois import WhoIsTool

__all__ = [
    "AzureTools",
    "BudgetTools",
    "GitLabTools",
    "GuessTheNumberGame",
    "WhoIsTool",
    "set_a_secret_for_demo_purposes",
    "set_an_api_key_for_demo_purposes",
]
