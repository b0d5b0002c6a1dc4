"""Directory access: session bootstrap, transport and typed queries."""

from .client import DirectoryClient
from .gateway import DirectoryGateway
from .metadata import CliRuleSource
from .records import FieldPermissionRecord, ObjectPermissionRecord, UserRecord
from .session import CliSessionProvider, OrgSession, StaticSessionProvider, session_provider_from_config

__all__ = [
    "CliRuleSource",
    "CliSessionProvider",
    "DirectoryClient",
    "DirectoryGateway",
    "FieldPermissionRecord",
    "ObjectPermissionRecord",
    "OrgSession",
    "StaticSessionProvider",
    "UserRecord",
    "session_provider_from_config",
]
