"""Terraform declarations for the Azure consumption budget.

Three files make up the declaration set, all at the repository root:
- consumption_budget.tf: the budget resource, written once
- variables.tf: companion variable blocks, appended to existing content
- outputs.tf: companion output block, appended to existing content

The resource file is never merged: a run that finds the resource already
declared stops before writing anything.
"""

import calendar
from datetime import date
from pathlib import Path
from typing import List, Optional, Tuple

BUDGET_RESOURCE_TYPE = "azurerm_consumption_budget_subscription"
BUDGET_RESOURCE_NAME = "subscription_budget"

# Marker whose presence in any .tf file means the budget already exists
BUDGET_MARKER = BUDGET_RESOURCE_TYPE

DECLARATION_EXTENSION = ".tf"
RESOURCE_FILE_NAME = "consumption_budget.tf"
VARIABLES_FILE_NAME = "variables.tf"
OUTPUTS_FILE_NAME = "outputs.tf"

COMPANION_SEPARATOR = "\n\n"
TIMESTAMP_FORMAT = "%Y-%m-%dT00:00:00Z"

RESOURCE_TEMPLATE = """\
resource "{resource_type}" "{resource_name}" {{
  name            = "subscription-consumption-budget"
  subscription_id = "/subscriptions/${{var.budget_subscription_id}}"
  amount          = var.budget_amount
  time_grain      = "Monthly"

  time_period {{
    start_date = "{start_date}"
    end_date   = "{end_date}"
  }}

  notification {{
    enabled        = true
    threshold      = var.budget_threshold
    operator       = var.budget_operator
    threshold_type = "Actual"
    contact_emails = var.budget_contact_emails
  }}
}}
"""

VARIABLES_BLOCK = """\
variable "budget_subscription_id" {
  description = "Id of the Azure subscription the consumption budget applies to"
  type        = string
}

variable "budget_amount" {
  description = "Total amount of cost to track with the budget"
  type        = number
  default     = 1000
}

variable "budget_threshold" {
  description = "Percentage of the budget amount that triggers a notification"
  type        = number
  default     = 80
}

variable "budget_operator" {
  description = "Comparison operator applied to the notification threshold"
  type        = string
  default     = "GreaterThan"
}

variable "budget_contact_emails" {
  description = "Email addresses notified when the threshold is exceeded"
  type        = list(string)
  default     = []
}
"""

OUTPUTS_BLOCK = f"""\
output "consumption_budget_id" {{
  description = "Id of the subscription consumption budget"
  value       = {BUDGET_RESOURCE_TYPE}.{BUDGET_RESOURCE_NAME}.id
}}
"""


def budget_time_window(today: date) -> Tuple[date, date]:
    """Compute the budget period for a given day.

    The period starts on the first day of the current month and ends on the
    last day of the same month one year later.

    >>> budget_time_window(date(2025, 3, 15))
    (datetime.date(2025, 3, 1), datetime.date(2026, 3, 31))
    """
    start = today.replace(day=1)
    end_year = today.year + 1
    last_day = calendar.monthrange(end_year, today.month)[1]
    return start, date(end_year, today.month, last_day)


def render_resource_file(today: date) -> str:
    """Render consumption_budget.tf for the period containing ``today``."""
    start, end = budget_time_window(today)
    return RESOURCE_TEMPLATE.format(
        resource_type=BUDGET_RESOURCE_TYPE,
        resource_name=BUDGET_RESOURCE_NAME,
        start_date=start.strftime(TIMESTAMP_FORMAT),
        end_date=end.strftime(TIMESTAMP_FORMAT),
    )


def merge_companion_file(existing: Optional[str], new_block: str) -> str:
    """Append ``new_block`` to existing file content.

    Existing content is kept byte-for-byte and followed by a blank-line
    separator. Missing or empty content yields the block alone.
    """
    if not existing:
        return new_block
    return existing + COMPANION_SEPARATOR + new_block


def _read_existing(path: Path) -> Optional[str]:
    if not path.is_file():
        return None
    with path.open("r", encoding="utf-8", newline="") as handle:
        return handle.read()


def _write(path: Path, content: str) -> None:
    with path.open("w", encoding="utf-8", newline="") as handle:
        handle.write(content)


def write_declarations(repo_dir: Path, today: date) -> List[str]:
    """Write the budget declaration set into a checked-out repository.

    Args:
        repo_dir: Root of the cloned repository.
        today: Day used to compute the budget period.

    Returns:
        Names of the written files, relative to ``repo_dir``.
    """
    _write(repo_dir / RESOURCE_FILE_NAME, render_resource_file(today))

    for file_name, block in (
        (VARIABLES_FILE_NAME, VARIABLES_BLOCK),
        (OUTPUTS_FILE_NAME, OUTPUTS_BLOCK),
    ):
        target = repo_dir / file_name
        _write(target, merge_companion_file(_read_existing(target), block))

    return [RESOURCE_FILE_NAME, VARIABLES_FILE_NAME, OUTPUTS_FILE_NAME]
