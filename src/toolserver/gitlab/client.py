"""GitLab REST API client.

This module provides an async wrapper around the GitLab v4 API for:
- Resolving an authenticated HTTPS clone URL for a project
- Creating merge requests
- Searching groups, listing group projects and project variables

Requests are authenticated with the PRIVATE-TOKEN header. There is no retry
logic: a failed call surfaces immediately as UpstreamError, and a response
missing an expected field surfaces as ParseError.
"""

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote, urlsplit, urlunsplit

import httpx

from src.toolserver.errors import ParseError, UpstreamError
from src.toolserver.gitlab.models import (
    OAUTH2_CLONE_USER,
    CloneCredential,
    GitLabGroup,
    GitLabProject,
    GitLabProjectVariable,
    mark_subgroups,
)


logger = logging.getLogger(__name__)

API_PREFIX = "/api/v4"
PAGE_SIZE = 100


def encode_project_id(project_identifier: str) -> str:
    """URL-encode a numeric id or a "group/project" path for use in a path."""
    return quote(str(project_identifier), safe="")


def build_clone_url(http_url_to_repo: str, access_token: str) -> str:
    """Force https and embed oauth2 basic-auth credentials into a clone URL.

    Args:
        http_url_to_repo: The repository URL reported by GitLab.
        access_token: Token used as the basic-auth password.

    Returns:
        The authenticated clone URL.
    """
    parts = urlsplit(http_url_to_repo)
    host = parts.hostname or ""
    if ":" in host:
        host = f"[{host}]"
    if parts.port is not None:
        host = f"{host}:{parts.port}"
    netloc = f"{OAUTH2_CLONE_USER}:{quote(access_token, safe='')}@{host}"
    return urlunsplit(("https", netloc, parts.path, parts.query, parts.fragment))


class GitLabClient:
    """Async GitLab API client.

    Attributes:
        token: GitLab access token.
        base_url: Base URL of the GitLab instance (e.g. https://gitlab.com).
        timeout: Request timeout in seconds.

    Example:
        >>> client = GitLabClient(token="glpat-xxx", base_url="https://gitlab.com")
        >>> async with client:
        ...     url = await client.create_merge_request("42", "feature", "main", "Title")
    """

    def __init__(
        self,
        token: str,
        base_url: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the GitLab client.

        Args:
            token: GitLab access token for authentication.
            base_url: Base URL of the GitLab instance, without /api/v4.
            timeout: Request timeout in seconds.
            transport: Optional httpx transport (used to stub the API in tests).
        """
        self.token = token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def client(self) -> httpx.AsyncClient:
        """Get the HTTP client, creating it if necessary."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=f"{self.base_url}{API_PREFIX}",
                headers=self._default_headers(),
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    def _default_headers(self) -> Dict[str, str]:
        return {
            "PRIVATE-TOKEN": self.token,
            "Accept": "application/json",
            "User-Agent": "toolserver/1.0",
        }

    async def close(self) -> None:
        """Close the HTTP client and release resources."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "GitLabClient":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    async def _request(
        self,
        method: str,
        path: str,
        json_data: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response:
        """Make a single HTTP request and classify the outcome.

        Args:
            method: HTTP method.
            path: API path below /api/v4 (e.g. /projects/42).
            json_data: Optional JSON body.
            params: Optional query parameters.

        Returns:
            The successful HTTP response.

        Raises:
            UpstreamError: On transport failure or a non-2xx status.
        """
        try:
            response = await self.client.request(
                method=method, url=path, json=json_data, params=params
            )
        except httpx.HTTPError as exc:
            logger.error(
                "GitLab request failed",
                extra={"method": method, "path": path, "error": str(exc)},
            )
            raise UpstreamError(
                message=f"GitLab request {method} {path} failed: {exc}",
                request_path=path,
            ) from exc

        if response.is_success:
            return response

        error_body = response.text
        logger.error(
            "GitLab API error",
            extra={
                "status_code": response.status_code,
                "path": path,
                "method": method,
                "response_body": error_body[:500],
            },
        )
        raise UpstreamError(
            message=f"GitLab API error {response.status_code} for {method} {path}",
            status_code=response.status_code,
            response_body=error_body,
            request_path=path,
        )

    def _json(self, response: httpx.Response, path: str) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise ParseError("<json body>", request_path=path) from exc

    def _required_string(self, payload: Any, field: str, path: str) -> str:
        value = payload.get(field) if isinstance(payload, dict) else None
        if not isinstance(value, str) or not value:
            raise ParseError(field, request_path=path)
        return value

    async def _get_paginated(
        self, path: str, params: Optional[Dict[str, Any]] = None
    ) -> List[Dict[str, Any]]:
        """Fetch every page of a list endpoint, following X-Next-Page."""
        items: List[Dict[str, Any]] = []
        query = dict(params or {})
        query["per_page"] = PAGE_SIZE
        page: Optional[str] = "1"

        while page:
            query["page"] = page
            response = await self._request("GET", path, params=query)
            payload = self._json(response, path)
            if not isinstance(payload, list):
                raise ParseError("<list body>", request_path=path)
            items.extend(payload)
            page = response.headers.get("x-next-page") or None

        return items

    async def resolve_clone_credential(self, project_identifier: str) -> CloneCredential:
        """Resolve an authenticated HTTPS clone URL for a project.

        Reads http_url_to_repo (never the SSH URL), forces the https scheme
        and embeds the token as oauth2 basic-auth credentials.

        Args:
            project_identifier: Numeric project id or "group/project" path.

        Returns:
            CloneCredential holding the token and the authenticated URL.

        Raises:
            UpstreamError: If the project lookup fails.
            ParseError: If http_url_to_repo is absent.
        """
        path = f"/projects/{encode_project_id(project_identifier)}"

        logger.info("Resolving clone URL", extra={"project": project_identifier})

        response = await self._request("GET", path)
        http_url = self._required_string(
            self._json(response, path), "http_url_to_repo", path
        )

        return CloneCredential(
            access_token=self.token,
            clone_url=build_clone_url(http_url, self.token),
        )

    async def create_merge_request(
        self,
        project_identifier: str,
        source_branch: str,
        target_branch: str,
        title: str,
    ) -> str:
        """Open a merge request and return its web URL.

        Args:
            project_identifier: Numeric project id or "group/project" path.
            source_branch: Branch carrying the changes.
            target_branch: Branch to merge into.
            title: Merge request title.

        Returns:
            The merge request's web_url.

        Raises:
            UpstreamError: If GitLab rejects the request.
            ParseError: If the response lacks web_url. The merge request
                exists in that case.
        """
        path = f"/projects/{encode_project_id(project_identifier)}/merge_requests"

        logger.info(
            "Creating merge request",
            extra={
                "project": project_identifier,
                "source_branch": source_branch,
                "target_branch": target_branch,
            },
        )

        response = await self._request(
            "POST",
            path,
            json_data={
                "source_branch": source_branch,
                "target_branch": target_branch,
                "title": title,
            },
        )
        web_url = self._required_string(self._json(response, path), "web_url", path)

        logger.info(
            "Merge request created",
            extra={"project": project_identifier, "web_url": web_url},
        )
        return web_url

    async def search_groups(self, pattern: str) -> List[GitLabGroup]:
        """Search groups whose name or path matches ``pattern``."""
        raw_groups = await self._get_paginated("/groups", params={"search": pattern})
        groups = [GitLabGroup.from_gitlab_response(item) for item in raw_groups]
        return mark_subgroups(groups)

    async def get_projects_in_group(self, group_pattern: str) -> List[GitLabProject]:
        """List the projects of every group matching ``group_pattern``.

        A project reachable through several matching groups is returned once.
        """
        groups = await self.search_groups(group_pattern)
        projects: Dict[int, GitLabProject] = {}

        for group in groups:
            raw_projects = await self._get_paginated(f"/groups/{group.id}/projects")
            for item in raw_projects:
                project = GitLabProject.from_gitlab_response(item, group_id=group.id)
                projects.setdefault(project.id, project)

        return list(projects.values())

    async def get_project_variables(
        self, project_identifier: str
    ) -> List[GitLabProjectVariable]:
        """List the CI/CD variables of a project, values unmasked."""
        path = f"/projects/{encode_project_id(project_identifier)}/variables"
        raw_variables = await self._get_paginated(path)
        return [GitLabProjectVariable.from_gitlab_response(item) for item in raw_variables]
