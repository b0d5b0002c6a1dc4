from .config import InspectorConfig, LogLevel, load_config_from_env
from .exceptions import (
    AccessLensError,
    AuthenticationError,
    ConfigurationError,
    MalformedMetadataError,
    QueryError,
    RuleSourceError,
    TransportError,
    UserNotFoundError,
)
from .inspector import PermissionInspector
from .interfaces import BaseDirectory, BaseRuleSource, BaseSessionProvider
from .logging import (
    AccessLensFormatter,
    AccessLensLoggerAdapter,
    get_inspector_logger,
    redact_secrets,
    safe_log_value,
    safe_preview,
    setup_logging,
)
from .models import (
    AccessLevel,
    FieldPermissionEntry,
    FieldPermissionSet,
    GroupNode,
    ObjectPermissionEntry,
    ObjectPermissionSet,
    PermissionGrant,
    PrincipalKind,
    PrincipalRef,
    RoleNode,
    RuleType,
    SharingFact,
    SharingRuleDescriptor,
    SharingTarget,
    TargetKind,
    UserInfo,
    UserPermissionReport,
    UserSummary,
    max_access,
)
from .permissions import PermissionService, aggregate_field_permissions, aggregate_object_permissions
from .sharing import (
    HierarchyResolver,
    SharingAccessResolver,
    format_criteria,
    format_owner_statement,
    parse_rules,
    parse_rules_xml,
)

__all__ = [
    # Config
    "InspectorConfig",
    "LogLevel",
    "load_config_from_env",
    # Errors
    "AccessLensError",
    "AuthenticationError",
    "ConfigurationError",
    "MalformedMetadataError",
    "QueryError",
    "RuleSourceError",
    "TransportError",
    "UserNotFoundError",
    # Logging
    "AccessLensFormatter",
    "AccessLensLoggerAdapter",
    "get_inspector_logger",
    "redact_secrets",
    "safe_log_value",
    "safe_preview",
    "setup_logging",
    # Interfaces
    "BaseDirectory",
    "BaseRuleSource",
    "BaseSessionProvider",
    # Models
    "AccessLevel",
    "FieldPermissionEntry",
    "FieldPermissionSet",
    "GroupNode",
    "ObjectPermissionEntry",
    "ObjectPermissionSet",
    "PermissionGrant",
    "PrincipalKind",
    "PrincipalRef",
    "RoleNode",
    "RuleType",
    "SharingFact",
    "SharingRuleDescriptor",
    "SharingTarget",
    "TargetKind",
    "UserInfo",
    "UserPermissionReport",
    "UserSummary",
    "max_access",
    # Engine
    "HierarchyResolver",
    "PermissionInspector",
    "PermissionService",
    "SharingAccessResolver",
    "aggregate_field_permissions",
    "aggregate_object_permissions",
    "format_criteria",
    "format_owner_statement",
    "parse_rules",
    "parse_rules_xml",
]
