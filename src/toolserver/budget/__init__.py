"""Azure consumption budget provisioning.

This package provisions a budget declaration into a project's Terraform
repository through a merge request:
- declarations: resource template and companion file merging
- scanner: detection of an already-declared budget
- models: request/result types and the run state machine
- workflow: the orchestrating BudgetProvisioningWorkflow
- metrics: Prometheus metrics for finished runs
"""

from src.toolserver.budget.declarations import (
    BUDGET_MARKER,
    budget_time_window,
    merge_companion_file,
    render_resource_file,
    write_declarations,
)
from src.toolserver.budget.models import (
    ALREADY_EXISTS_MESSAGE,
    VALID_TRANSITIONS,
    MergeRequestResult,
    ProvisionRequest,
    ProvisionRun,
    ProvisionStage,
    is_terminal_stage,
    is_valid_transition,
)
from src.toolserver.budget.scanner import has_declaration
from src.toolserver.budget.workflow import BudgetProvisioningWorkflow

__all__ = [
    "ALREADY_EXISTS_MESSAGE",
    "BUDGET_MARKER",
    "BudgetProvisioningWorkflow",
    "MergeRequestResult",
    "ProvisionRequest",
    "ProvisionRun",
    "ProvisionStage",
    "VALID_TRANSITIONS",
    "budget_time_window",
    "has_declaration",
    "is_terminal_stage",
    "is_valid_transition",
    "merge_companion_file",
    "render_resource_file",
    "write_declarations",
]
