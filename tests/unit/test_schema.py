"""Unit tests for module registration and schema assembly."""

import pytest

from src.core.module_registry import get_all_indexes, get_all_table_schemas, get_modules, register_module
from src.core.schema import register_default_modules
from src.modules.tasks import TasksModule


@pytest.mark.unit
class TestModuleRegistry:
    """Tests for the module registry."""

    def test_register_default_modules_is_idempotent(self):
        """Test registering the default modules twice is harmless."""
        register_default_modules()
        register_default_modules()

        assert list(get_modules()) == ["tasks"]

    def test_duplicate_registration_fails(self):
        """Test registering the same module name twice fails."""
        register_module(TasksModule())

        with pytest.raises(ValueError, match="already registered"):
            register_module(TasksModule())

    def test_tasks_table_and_indexes(self):
        """Test the tasks module contributes its table and indexes."""
        register_module(TasksModule())

        schemas = get_all_table_schemas()
        assert list(schemas) == ["tasks"]
        assert "CHECK (status IN ('todo', 'in-progress', 'completed'))" in schemas["tasks"]
        assert any("idx_tasks_status" in statement for statement in get_all_indexes())

    def test_duplicate_table_across_modules_fails(self):
        """Test two modules declaring the same table fails."""
        class Clone(TasksModule):
            @property
            def name(self) -> str:
                return "clone"

        register_module(TasksModule())
        register_module(Clone())

        with pytest.raises(ValueError, match="Duplicate table schema 'tasks'"):
            get_all_table_schemas()
