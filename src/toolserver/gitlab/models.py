"""GitLab data models and response parsing.

Only the fields the tools surface are modelled; everything else in the
GitLab payloads is ignored.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional
from urllib.parse import quote

from pydantic import BaseModel, Field

from src.toolserver.text import mask_secret_tail

OAUTH2_CLONE_USER = "oauth2"
REDACTED = "****"


class GitLabGroup(BaseModel):
    """A GitLab group as returned by the group search."""

    id: int
    name: str
    full_path: str = ""
    web_url: str = ""
    parent_id: Optional[int] = None
    has_subgroups: bool = False

    @classmethod
    def from_gitlab_response(cls, data: Dict[str, Any]) -> "GitLabGroup":
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            full_path=data.get("full_path", ""),
            web_url=data.get("web_url", ""),
            parent_id=data.get("parent_id"),
        )


class GitLabProject(BaseModel):
    """A project belonging to a GitLab group."""

    id: int
    name: str
    path_with_namespace: str = ""
    web_url: str = ""
    default_branch: Optional[str] = None
    group_id: Optional[int] = None

    @classmethod
    def from_gitlab_response(
        cls, data: Dict[str, Any], group_id: Optional[int] = None
    ) -> "GitLabProject":
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            path_with_namespace=data.get("path_with_namespace", ""),
            web_url=data.get("web_url", ""),
            default_branch=data.get("default_branch"),
            group_id=group_id,
        )


class GitLabProjectVariable(BaseModel):
    """A CI/CD variable defined on a project."""

    key: str
    value: str = ""
    masked: bool = False
    protected: bool = False
    variable_type: str = Field(default="env_var")
    environment_scope: str = Field(default="*")

    @classmethod
    def from_gitlab_response(cls, data: Dict[str, Any]) -> "GitLabProjectVariable":
        return cls(
            key=data["key"],
            value=data.get("value") or "",
            masked=bool(data.get("masked", False)),
            protected=bool(data.get("protected", False)),
            variable_type=data.get("variable_type") or "env_var",
            environment_scope=data.get("environment_scope") or "*",
        )


def mark_subgroups(groups: List[GitLabGroup]) -> List[GitLabGroup]:
    """Flag every group that is the parent of another group in the list."""
    parent_ids = {group.parent_id for group in groups if group.parent_id is not None}
    return [
        group.model_copy(update={"has_subgroups": group.id in parent_ids})
        for group in groups
    ]


def mask_variables(
    variables: Optional[Iterable[GitLabProjectVariable]],
) -> List[GitLabProjectVariable]:
    """Hide the values of variables GitLab flags as masked.

    Values longer than four characters keep their last four characters;
    shorter values are starred out entirely. Unmasked variables pass through.
    """
    if not variables:
        return []
    return [
        variable.model_copy(update={"value": mask_secret_tail(variable.value)})
        if variable.masked and variable.value
        else variable
        for variable in variables
    ]


@dataclass(frozen=True)
class CloneCredential:
    """Authenticated clone URL for a single provisioning run.

    Neither field appears in the dataclass repr. Use redact() on any string
    that may have been built from the clone URL before logging or raising it.

    Attributes:
        access_token: The GitLab access token embedded in the URL.
        clone_url: HTTPS clone URL with oauth2 basic-auth credentials.
    """

    access_token: str = field(repr=False)
    clone_url: str = field(repr=False)

    def redact(self, text: str) -> str:
        """Remove the access token from ``text``."""
        if not text or not self.access_token:
            return text
        for secret in (self.access_token, quote(self.access_token, safe="")):
            text = text.replace(secret, REDACTED)
        return text
