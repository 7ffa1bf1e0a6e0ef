"""Budget provisioning workflow.

Drives one request through the provisioning stages:
validate → resolve clone URL → clone → scan → branch → write → commit
→ push → open merge request.

Each stage is one collaborator call. Any error moves the run to the failed
outcome and is re-raised to the caller after cleanup. Finding an existing
budget declaration is not an error: the run stops before touching the
repository and reports that the budget already exists.

The workspace is released in a finally block, so it is removed on success,
on failure and on cancellation alike. The workflow object only holds
collaborators; all per-run state lives in a ProvisionRun, which makes one
workflow safe to share between concurrent invocations.

Known limitation: every run pushes the same fixed branch name, so two
concurrent runs against the same repository race at push time.
"""

import asyncio
import logging
import time
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Callable, Optional

from src.toolserver.budget.declarations import BUDGET_MARKER, write_declarations
from src.toolserver.budget.metrics import ProvisioningMetrics
from src.toolserver.budget.models import (
    MergeRequestResult,
    ProvisionRequest,
    ProvisionRun,
    ProvisionStage,
)
from src.toolserver.budget.scanner import has_declaration
from src.toolserver.errors import InvalidTransitionError, ParseError, VcsCommandError
from src.toolserver.gitlab.client import GitLabClient
from src.toolserver.gitlab.models import CloneCredential
from src.toolserver.provisioner.workspace import WorkspaceManager
from src.toolserver.vcs.git import CommandResult, GitDriver

logger = logging.getLogger(__name__)

CLONE_DIRECTORY = "repository"
DEFAULT_BRANCH_NAME = "feature/azure-consumption-budget"
COMMIT_MESSAGE = "Add Azure consumption budget"
MERGE_REQUEST_TITLE = "Add Azure consumption budget"


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


class BudgetProvisioningWorkflow:
    """Provisions an Azure consumption budget through a merge request.

    Attributes:
        gitlab_client: Resolves clone URLs and creates merge requests.
        git: Runs git commands.
        workspaces: Hands out and removes per-run workspaces.
        branch_name: Feature branch pushed by every run.
        clock: Returns "today"; drives the budget period.
        metrics: Optional Prometheus metrics sink.
    """

    def __init__(
        self,
        gitlab_client: GitLabClient,
        git: GitDriver,
        workspaces: WorkspaceManager,
        branch_name: str = DEFAULT_BRANCH_NAME,
        clock: Callable[[], date] = utc_today,
        metrics: Optional[ProvisioningMetrics] = None,
    ):
        self.gitlab_client = gitlab_client
        self.git = git
        self.workspaces = workspaces
        self.branch_name = branch_name
        self.clock = clock
        self.metrics = metrics

    async def provision(
        self,
        project_identifier: Any,
        base_branch_name: Any,
        run: Optional[ProvisionRun] = None,
    ) -> MergeRequestResult:
        """Run the provisioning workflow for one project.

        Args:
            project_identifier: GitLab project id or path.
            base_branch_name: Branch to start from and merge into.
            run: Optional run record to populate, for callers that want the
                stage history. A new one is created when omitted.

        Returns:
            MergeRequestResult carrying the merge request URL, or flagging
            that the budget already exists.

        Raises:
            ValidationError: If either argument is empty.
            UpstreamError: If a GitLab call fails.
            ParseError: If the project lookup lacks a clone URL.
            VcsCommandError: If a git command fails.
            WorkspaceError: If the workspace cannot be created.
            InvalidTransitionError: If ``run`` has already left the
                validating stage.
        """
        if run is None:
            run = ProvisionRun()
        elif run.current_stage != ProvisionStage.VALIDATING or run.stage_history:
            raise InvalidTransitionError(
                run.current_stage.value, ProvisionStage.RESOLVING.value
            )
        run.project_identifier = str(project_identifier or "")
        run.base_branch_name = str(base_branch_name or "")
        start_time = time.monotonic()
        outcome = ProvisionStage.FAILED

        logger.info(
            "Starting budget provisioning",
            extra={
                "run_id": run.run_id,
                "project": run.project_identifier,
                "base_branch": run.base_branch_name,
            },
        )

        try:
            result = await self._execute(run, project_identifier, base_branch_name)
        except Exception as exc:
            self._record_failure(run, exc)
            raise
        except asyncio.CancelledError:
            self._record_failure(run, "cancelled")
            raise
        else:
            outcome = (
                ProvisionStage.ABORTED_ALREADY_EXISTS
                if result.already_exists
                else ProvisionStage.DONE
            )
            return result
        finally:
            self._clean_up(run)
            run.advance(outcome)
            self._finish(run, time.monotonic() - start_time)

    async def _execute(
        self,
        run: ProvisionRun,
        project_identifier: Any,
        base_branch_name: Any,
    ) -> MergeRequestResult:
        request = ProvisionRequest.create(project_identifier, base_branch_name)

        run.advance(ProvisionStage.RESOLVING)
        credential = await self.gitlab_client.resolve_clone_credential(
            request.project_identifier
        )

        run.advance(ProvisionStage.CLONING)
        workspace = self.workspaces.acquire()
        run.workspace_path = str(workspace)
        repo_dir = workspace / CLONE_DIRECTORY

        self._check(
            await self.git.clone(workspace, credential.clone_url, CLONE_DIRECTORY),
            credential,
        )
        self._check(await self.git.checkout(repo_dir, request.base_branch_name), credential)
        self._check(await self.git.pull(repo_dir), credential)

        run.advance(ProvisionStage.SCANNING)
        if has_declaration(repo_dir, BUDGET_MARKER):
            logger.info(
                "Budget already declared; nothing to provision",
                extra={"run_id": run.run_id, "project": request.project_identifier},
            )
            return MergeRequestResult(already_exists=True)

        run.advance(ProvisionStage.BRANCHING)
        self._check(await self.git.create_branch(repo_dir, self.branch_name), credential)

        run.advance(ProvisionStage.WRITING)
        written_files = write_declarations(repo_dir, self.clock())

        run.advance(ProvisionStage.COMMITTING, details={"files": written_files})
        self._check(await self.git.add(repo_dir, written_files), credential)
        self._check(await self.git.commit(repo_dir, COMMIT_MESSAGE), credential)

        run.advance(ProvisionStage.PUSHING)
        self._check(await self.git.push_new_branch(repo_dir, self.branch_name), credential)

        run.advance(ProvisionStage.OPENING_MERGE_REQUEST)
        return await self._open_merge_request(run, request)

    async def _open_merge_request(
        self, run: ProvisionRun, request: ProvisionRequest
    ) -> MergeRequestResult:
        try:
            url = await self.gitlab_client.create_merge_request(
                request.project_identifier,
                source_branch=self.branch_name,
                target_branch=request.base_branch_name,
                title=MERGE_REQUEST_TITLE,
            )
        except ParseError:
            # The merge request exists; only its URL is missing from the response.
            logger.warning(
                "Merge request created but response had no web_url",
                extra={"run_id": run.run_id, "project": request.project_identifier},
            )
            return MergeRequestResult(url=None)
        return MergeRequestResult(url=url)

    @staticmethod
    def _check(result: CommandResult, credential: CloneCredential) -> None:
        if result.succeeded:
            return
        raise VcsCommandError(
            command=credential.redact(result.command_line),
            exit_code=result.exit_code,
            stderr=credential.redact(result.stderr),
        )

    def _record_failure(self, run: ProvisionRun, error: Any) -> None:
        run.failed_stage = run.current_stage
        run.error = str(error)
        logger.error(
            "Budget provisioning failed",
            extra={
                "run_id": run.run_id,
                "stage": run.current_stage.value,
                "error": run.error,
            },
        )

    def _clean_up(self, run: ProvisionRun) -> None:
        run.advance(ProvisionStage.CLEANING_UP)
        if run.workspace_path is None:
            return
        warning = self.workspaces.release(Path(run.workspace_path))
        if warning is not None:
            run.stage_history[-1].details["cleanup_warning"] = str(warning)

    def _finish(self, run: ProvisionRun, duration_seconds: float) -> None:
        logger.info(
            "Budget provisioning finished",
            extra={
                "run_id": run.run_id,
                "outcome": run.current_stage.value,
                "duration_seconds": round(duration_seconds, 3),
            },
        )
        if self.metrics is not None:
            self.metrics.record_run(
                outcome=run.current_stage.value,
                duration_seconds=duration_seconds,
                failed_stage=run.failed_stage.value if run.failed_stage else None,
            )
