"""Read-only MCP resources."""

from src.toolserver.resources.users import YAML_MIME_TYPE, UserDirectory, UserRecord

__all__ = ["YAML_MIME_TYPE", "UserDirectory", "UserRecord"]
