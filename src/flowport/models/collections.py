"""Collection registry for archive data."""

from dataclasses import dataclass
from enum import Enum
from typing import Any

# Archived entities travel as plain JSON objects
Entity = dict[str, Any]


class EntityType(str, Enum):
    """Entity type tags used in conflicts, overrides and summaries."""

    PROJECTS = "projects"
    WORKFLOWS = "workflows"
    TEMPLATES = "templates"
    STEP_TEMPLATES = "stepTemplates"
    SETTINGS = "settings"
    AI_PROVIDERS = "aiProviders"
    AI_TEMPLATES = "aiTemplates"
    PROJECT_AI_SETTINGS = "projectAiSettings"
    CLI_TOOLS = "cliTools"
    MCP_CONFIG = "mcpConfig"
    MCP_ACTIONS = "mcpActions"
    MCP_ACTION_PERMISSIONS = "mcpActionPermissions"
    DEPLOY_ACCOUNTS = "deployAccounts"
    DEPLOY_PREFERENCES = "deployPreferences"
    DEPLOYMENT_CONFIGS = "deploymentConfigs"


class CollectionKind(str, Enum):
    """How a collection is reconciled on import."""

    FULL = "full"  # merge_collection with the caller's strategy
    RESTRICTED = "restricted"  # add-if-absent, never overwritten or renamed
    UPSERT = "upsert"  # saved entity by entity, keyed by id
    PROJECT_SCOPED = "project_scoped"  # keyed by project path, always upserted
    SINGLETON = "singleton"
    SANITIZED = "sanitized"  # exported for reference only


@dataclass(frozen=True)
class CollectionSpec:
    """Static description of one archive collection."""

    entity_type: EntityType
    archive_key: str
    kind: CollectionKind
    store: str
    timestamp_fields: tuple[str, ...] = ("updatedAt", "createdAt")
    key_field: str = "id"
    skip_builtin: bool = False

    @property
    def identified(self) -> bool:
        """Whether entities carry a unique `id` in the archive."""
        return self.kind in (
            CollectionKind.FULL,
            CollectionKind.RESTRICTED,
            CollectionKind.UPSERT,
            CollectionKind.SANITIZED,
        )

    @property
    def reconciled(self) -> bool:
        """Whether imports compare archived ids against live ids."""
        return self.kind in (CollectionKind.FULL, CollectionKind.RESTRICTED)

    @property
    def replaceable(self) -> bool:
        """Whether replace mode clears and refills this collection."""
        return self.kind in (
            CollectionKind.FULL,
            CollectionKind.RESTRICTED,
            CollectionKind.UPSERT,
        )


COLLECTIONS: tuple[CollectionSpec, ...] = (
    CollectionSpec(
        EntityType.PROJECTS,
        "projects",
        CollectionKind.FULL,
        store="projects",
        timestamp_fields=("lastOpenedAt",),
    ),
    CollectionSpec(
        EntityType.WORKFLOWS,
        "workflows",
        CollectionKind.FULL,
        store="workflows",
        timestamp_fields=("updatedAt",),
    ),
    CollectionSpec(
        EntityType.TEMPLATES,
        "worktreeTemplates",
        CollectionKind.FULL,
        store="worktree_templates",
    ),
    CollectionSpec(
        EntityType.STEP_TEMPLATES,
        "customStepTemplates",
        CollectionKind.FULL,
        store="step_templates",
        timestamp_fields=("createdAt",),
    ),
    CollectionSpec(
        EntityType.SETTINGS,
        "settings",
        CollectionKind.SINGLETON,
        store="settings",
    ),
    CollectionSpec(
        EntityType.AI_PROVIDERS,
        "aiProviders",
        CollectionKind.RESTRICTED,
        store="ai_providers",
    ),
    CollectionSpec(
        EntityType.AI_TEMPLATES,
        "aiTemplates",
        CollectionKind.RESTRICTED,
        store="ai_templates",
        skip_builtin=True,
    ),
    CollectionSpec(
        EntityType.PROJECT_AI_SETTINGS,
        "projectAiSettings",
        CollectionKind.PROJECT_SCOPED,
        store="project_ai_settings",
        key_field="projectPath",
    ),
    CollectionSpec(
        EntityType.CLI_TOOLS,
        "cliTools",
        CollectionKind.RESTRICTED,
        store="cli_tools",
    ),
    CollectionSpec(
        EntityType.MCP_CONFIG,
        "mcpConfig",
        CollectionKind.SINGLETON,
        store="mcp_config",
    ),
    CollectionSpec(
        EntityType.MCP_ACTIONS,
        "mcpActions",
        CollectionKind.RESTRICTED,
        store="mcp_actions",
    ),
    CollectionSpec(
        EntityType.MCP_ACTION_PERMISSIONS,
        "mcpActionPermissions",
        CollectionKind.RESTRICTED,
        store="mcp_permissions",
    ),
    CollectionSpec(
        EntityType.DEPLOY_ACCOUNTS,
        "deployAccounts",
        CollectionKind.SANITIZED,
        store="deploy_accounts",
    ),
    CollectionSpec(
        EntityType.DEPLOY_PREFERENCES,
        "deployPreferences",
        CollectionKind.SINGLETON,
        store="deploy_preferences",
    ),
    CollectionSpec(
        EntityType.DEPLOYMENT_CONFIGS,
        "deploymentConfigs",
        CollectionKind.UPSERT,
        store="deployment_configs",
    ),
)

# An archive must carry at least one of these to be worth importing
PAYLOAD_KEYS = ("projects", "workflows", "worktreeTemplates", "settings")

_BY_TYPE = {spec.entity_type: spec for spec in COLLECTIONS}


def get_collection(entity_type: EntityType | str) -> CollectionSpec:
    """Look up a collection by entity type tag.

    Args:
        entity_type: EntityType or its string value

    Returns:
        Matching CollectionSpec

    Raises:
        ValueError: If the tag is unknown
    """
    return _BY_TYPE[EntityType(entity_type)]


def collections_of(*kinds: CollectionKind) -> list[CollectionSpec]:
    """Return registered collections of the given kinds, in archive order."""
    return [spec for spec in COLLECTIONS if spec.kind in kinds]
