"""User directory resources rendered as YAML.

The directory is an in-memory fixture; lookups behave like a read-only
store keyed by user id.
"""

import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)

YAML_MIME_TYPE = "application/x-yaml"


class UserRecord(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    user_id: str
    first_name: str
    last_name: str
    email: str
    role: str
    department: str
    created_at: datetime
    is_active: bool
    last_login_at: Optional[datetime] = None
    metadata: Dict[str, str] = Field(default_factory=dict)


def _utc(value: str) -> datetime:
    return datetime.fromisoformat(value).replace(tzinfo=timezone.utc)


MOCK_USERS = (
    UserRecord(
        user_id="user001",
        first_name="John",
        last_name="Doe",
        email="john.doe@example.com",
        role="Administrator",
        department="Engineering",
        created_at=_utc("2024-01-15T10:30:00"),
        is_active=True,
        last_login_at=_utc("2025-10-29T14:22:00"),
        metadata={"location": "New York", "employeeId": "EMP-12345"},
    ),
    UserRecord(
        user_id="user002",
        first_name="Jane",
        last_name="Smith",
        email="jane.smith@example.com",
        role="Developer",
        department="Engineering",
        created_at=_utc("2024-03-20T09:15:00"),
        is_active=True,
        last_login_at=_utc("2025-10-30T08:45:00"),
        metadata={"location": "San Francisco", "employeeId": "EMP-67890"},
    ),
    UserRecord(
        user_id="user003",
        first_name="Bob",
        last_name="Johnson",
        email="bob.johnson@example.com",
        role="Manager",
        department="Operations",
        created_at=_utc("2023-11-10T13:00:00"),
        is_active=False,
        last_login_at=_utc("2025-09-15T16:30:00"),
        metadata={"location": "Chicago", "employeeId": "EMP-11223"},
    ),
)


def _to_yaml(payload) -> str:
    return yaml.safe_dump(payload, sort_keys=False, allow_unicode=True)


def _serialize(user: UserRecord) -> dict:
    return user.model_dump(mode="json", by_alias=True)


class UserDirectory:
    """Read-only user lookups returning YAML documents."""

    def __init__(self, users: Optional[List[UserRecord]] = None):
        self.users = list(MOCK_USERS if users is None else users)

    def find(self, user_id: str) -> Optional[UserRecord]:
        for user in self.users:
            if user.user_id == user_id:
                return user
        return None

    def user_as_yaml(self, user_id: str) -> str:
        """Return one user as YAML, or a not-found document."""
        logger.info("User lookup", extra={"user_id": user_id})
        user = self.find(user_id)
        if user is None:
            logger.warning("User not found", extra={"user_id": user_id})
            return f"# User Not Found\nuserId: {user_id}\nstatus: not_found"
        return _to_yaml(_serialize(user))

    def all_users_as_yaml(self) -> str:
        logger.info("Listing all users", extra={"count": len(self.users)})
        return _to_yaml({"users": [_serialize(user) for user in self.users]})
