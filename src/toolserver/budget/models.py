"""Budget provisioning models and state machine.

This module defines:
- ProvisionRequest: validated input of one provisioning run
- MergeRequestResult: terminal outcome returned to the caller
- ProvisionStage: stages a run moves through
- VALID_TRANSITIONS: map defining allowed stage transitions
- ProvisionRun: per-run state with its transition history

Stage flow:
    validating → resolving → cloning → scanning
    → branching → writing → committing → pushing → opening_merge_request

Every working stage moves to cleaning_up when the run ends, and cleaning_up
moves to exactly one terminal stage: done, aborted_already_exists or failed.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional

from pydantic import BaseModel, Field

from src.toolserver.errors import InvalidTransitionError, ValidationError

ALREADY_EXISTS_MESSAGE = "Azure consumption budget resource already exists in the project."
URL_UNKNOWN_MESSAGE = "Merge request created but its URL could not be determined."


@dataclass(frozen=True)
class ProvisionRequest:
    """Input of one budget provisioning run.

    Attributes:
        project_identifier: Numeric GitLab project id or "group/project" path.
        base_branch_name: Branch the budget branch starts from and targets.
    """

    project_identifier: str
    base_branch_name: str

    @classmethod
    def create(cls, project_identifier: Any, base_branch_name: Any) -> "ProvisionRequest":
        """Build a request, rejecting missing or blank fields.

        Raises:
            ValidationError: If either field is empty.
        """
        project = _require_text("project_identifier", project_identifier)
        branch = _require_text("base_branch_name", base_branch_name)
        return cls(project_identifier=project, base_branch_name=branch)


def _require_text(field: str, value: Any) -> str:
    if value is None:
        raise ValidationError(field)
    text = str(value).strip()
    if not text:
        raise ValidationError(field)
    return text


@dataclass(frozen=True)
class MergeRequestResult:
    """Terminal outcome of a provisioning run.

    Attributes:
        url: Web URL of the opened merge request, None when unknown or when
            nothing was created.
        already_exists: True when the budget resource was already declared.
    """

    url: Optional[str] = None
    already_exists: bool = False

    @property
    def message(self) -> str:
        """The caller-facing rendering of the outcome."""
        if self.already_exists:
            return ALREADY_EXISTS_MESSAGE
        if self.url:
            return self.url
        return URL_UNKNOWN_MESSAGE


class ProvisionStage(str, Enum):
    """Stages of a budget provisioning run.

    Attributes:
        VALIDATING: Checking the request fields.
        RESOLVING: Resolving the authenticated clone URL.
        CLONING: Cloning and updating the base branch in a fresh workspace.
        SCANNING: Looking for an existing budget declaration.
        BRANCHING: Creating the feature branch.
        WRITING: Writing and merging the declaration files.
        COMMITTING: Staging and committing the files.
        PUSHING: Pushing the feature branch.
        OPENING_MERGE_REQUEST: Creating the merge request.
        CLEANING_UP: Releasing the workspace.
        DONE: Merge request opened.
        ABORTED_ALREADY_EXISTS: Budget already declared; nothing changed.
        FAILED: A step failed; the error was re-raised to the caller.
    """

    VALIDATING = "validating"
    RESOLVING = "resolving"
    CLONING = "cloning"
    SCANNING = "scanning"
    BRANCHING = "branching"
    WRITING = "writing"
    COMMITTING = "committing"
    PUSHING = "pushing"
    OPENING_MERGE_REQUEST = "opening_merge_request"
    CLEANING_UP = "cleaning_up"
    DONE = "done"
    ABORTED_ALREADY_EXISTS = "aborted_already_exists"
    FAILED = "failed"


TERMINAL_STAGES: FrozenSet[ProvisionStage] = frozenset(
    {
        ProvisionStage.DONE,
        ProvisionStage.ABORTED_ALREADY_EXISTS,
        ProvisionStage.FAILED,
    }
)

_WORKING_SEQUENCE = (
    ProvisionStage.VALIDATING,
    ProvisionStage.RESOLVING,
    ProvisionStage.CLONING,
    ProvisionStage.SCANNING,
    ProvisionStage.BRANCHING,
    ProvisionStage.WRITING,
    ProvisionStage.COMMITTING,
    ProvisionStage.PUSHING,
    ProvisionStage.OPENING_MERGE_REQUEST,
)


def _build_transitions() -> Dict[ProvisionStage, FrozenSet[ProvisionStage]]:
    transitions: Dict[ProvisionStage, FrozenSet[ProvisionStage]] = {}
    for index, stage in enumerate(_WORKING_SEQUENCE):
        allowed = {ProvisionStage.CLEANING_UP}
        if index + 1 < len(_WORKING_SEQUENCE):
            allowed.add(_WORKING_SEQUENCE[index + 1])
        transitions[stage] = frozenset(allowed)
    transitions[ProvisionStage.CLEANING_UP] = TERMINAL_STAGES
    for stage in TERMINAL_STAGES:
        transitions[stage] = frozenset()
    return transitions


VALID_TRANSITIONS: Dict[ProvisionStage, FrozenSet[ProvisionStage]] = _build_transitions()


def is_valid_transition(from_stage: ProvisionStage, to_stage: ProvisionStage) -> bool:
    """Check whether moving from ``from_stage`` to ``to_stage`` is allowed."""
    return to_stage in VALID_TRANSITIONS.get(from_stage, frozenset())


def is_terminal_stage(stage: ProvisionStage) -> bool:
    return stage in TERMINAL_STAGES


class StageTransition(BaseModel):
    """Record of a stage transition within a provisioning run."""

    from_stage: ProvisionStage
    to_stage: ProvisionStage
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    details: Dict[str, Any] = Field(default_factory=dict)


class ProvisionRun(BaseModel):
    """State of one provisioning run.

    A run is owned by exactly one invocation and is never shared, so two
    concurrent invocations never observe each other's stage or workspace.

    Attributes:
        run_id: Opaque identifier used in logs.
        project_identifier: Project the run targets (as supplied).
        base_branch_name: Base branch (as supplied).
        current_stage: The stage the run is in.
        stage_history: Ordered list of all transitions.
        workspace_path: Workspace directory once acquired.
        failed_stage: Stage in which an error occurred, if any.
        error: Error description if the run failed.
    """

    run_id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    project_identifier: str = ""
    base_branch_name: str = ""
    current_stage: ProvisionStage = ProvisionStage.VALIDATING
    stage_history: List[StageTransition] = Field(default_factory=list)
    workspace_path: Optional[str] = None
    failed_stage: Optional[ProvisionStage] = None
    error: Optional[str] = None

    def advance(
        self,
        to_stage: ProvisionStage,
        details: Optional[Dict[str, Any]] = None,
    ) -> StageTransition:
        """Move the run to ``to_stage`` and record the transition.

        Raises:
            InvalidTransitionError: If the transition is not allowed.
        """
        if not is_valid_transition(self.current_stage, to_stage):
            raise InvalidTransitionError(self.current_stage.value, to_stage.value)

        transition = StageTransition(
            from_stage=self.current_stage,
            to_stage=to_stage,
            details=details or {},
        )
        self.stage_history.append(transition)
        self.current_stage = to_stage
        return transition

    @property
    def visited_stages(self) -> List[ProvisionStage]:
        """Every stage the run has been in, in order."""
        return [ProvisionStage.VALIDATING] + [t.to_stage for t in self.stage_history]
