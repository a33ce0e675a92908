"""Tests for conflict detection."""

from conftest import make_archive

from flowport.core.conflicts import detect_conflicts
from flowport.models.archive import Archive
from flowport.models.collections import EntityType


def _archive(data: dict) -> Archive:
    return Archive.model_validate(make_archive(data))


class TestDetectConflicts:
    """Test detect_conflicts."""

    def test_no_live_data_no_conflicts(self):
        archive = _archive({"projects": [{"id": "p1"}], "workflows": [{"id": "w1"}]})

        assert detect_conflicts(archive, {}) == []

    def test_one_conflict_per_shared_id(self):
        """Test that the conflict count equals the id intersection size."""
        archive = _archive({"workflows": [{"id": "w1"}, {"id": "w2"}, {"id": "w3"}]})
        live = {EntityType.WORKFLOWS: [{"id": "w2"}, {"id": "w3"}, {"id": "w9"}]}

        conflicts = detect_conflicts(archive, live)

        assert [c.id for c in conflicts] == ["w2", "w3"]
        assert all(c.type is EntityType.WORKFLOWS for c in conflicts)

    def test_timestamps_per_collection(self):
        """Test that each collection compares its own timestamp field."""
        archive = _archive(
            {
                "projects": [{"id": "p1", "name": "Alpha", "lastOpenedAt": "2026-02-01"}],
                "worktreeTemplates": [{"id": "t1", "createdAt": "2026-02-02"}],
                "customStepTemplates": [{"id": "s1", "createdAt": "2026-02-03", "updatedAt": "x"}],
            }
        )
        live = {
            EntityType.PROJECTS: [{"id": "p1", "name": "Alpha", "lastOpenedAt": "2026-01-01"}],
            EntityType.TEMPLATES: [{"id": "t1", "updatedAt": "2026-01-05", "createdAt": "2026-01-02"}],
            EntityType.STEP_TEMPLATES: [{"id": "s1", "createdAt": "2026-01-03"}],
        }

        conflicts = {c.type: c for c in detect_conflicts(archive, live)}

        assert conflicts[EntityType.PROJECTS].existing_updated_at == "2026-01-01"
        assert conflicts[EntityType.PROJECTS].importing_updated_at == "2026-02-01"
        assert conflicts[EntityType.TEMPLATES].existing_updated_at == "2026-01-05"
        assert conflicts[EntityType.TEMPLATES].importing_updated_at == "2026-02-02"
        assert conflicts[EntityType.STEP_TEMPLATES].importing_updated_at == "2026-02-03"

    def test_name_falls_back_to_id(self):
        archive = _archive({"projects": [{"id": "p1"}], "mcpActions": [{"id": "a1"}]})
        live = {EntityType.MCP_ACTIONS: [{"id": "a1"}]}

        conflicts = detect_conflicts(archive, live)

        assert len(conflicts) == 1
        assert conflicts[0].name == "a1"
        assert conflicts[0].type is EntityType.MCP_ACTIONS

    def test_builtin_templates_never_conflict(self):
        archive = _archive(
            {
                "projects": [{"id": "p1"}],
                "aiTemplates": [{"id": "builtin-x", "isBuiltin": True}, {"id": "mine"}],
            }
        )
        live = {EntityType.AI_TEMPLATES: [{"id": "builtin-x", "isBuiltin": True}, {"id": "mine"}]}

        conflicts = detect_conflicts(archive, live)

        assert [c.id for c in conflicts] == ["mine"]

    def test_upsert_and_sanitized_collections_ignored(self):
        archive = _archive(
            {
                "projects": [{"id": "p1"}],
                "deploymentConfigs": [{"id": "dc1", "projectId": "p1"}],
                "deployAccounts": [{"id": "acc1"}],
            }
        )
        live = {
            EntityType.DEPLOYMENT_CONFIGS: [{"id": "dc1"}],
            EntityType.DEPLOY_ACCOUNTS: [{"id": "acc1"}],
        }

        assert detect_conflicts(archive, live) == []
