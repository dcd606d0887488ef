"""Registry of feature modules whose tables make up the database schema."""

from typing import ClassVar

from src.core.module import Module


class _RegistryState:
    """Singleton state for module registry."""

    modules: ClassVar[dict[str, Module]] = {}


_registry = _RegistryState()


def register_module(module: Module) -> None:
    """Register a module, raising ValueError if its name is already taken."""
    if module.name in _registry.modules:
        msg = f"Module '{module.name}' is already registered"
        raise ValueError(msg)
    _registry.modules[module.name] = module


def get_modules() -> dict[str, Module]:
    """Return a copy of the registered modules keyed by name."""
    return dict(_registry.modules)


def reset_registry() -> None:
    """Forget every registered module."""
    _registry.modules.clear()


def get_all_table_schemas() -> dict[str, str]:
    """Collect CREATE TABLE statements from every module.

    Raises:
        ValueError: If two modules declare the same table
    """
    all_schemas: dict[str, str] = {}
    for module in _registry.modules.values():
        for table_name, statement in module.get_table_schemas().items():
            if table_name in all_schemas:
                msg = f"Duplicate table schema '{table_name}' from module '{module.name}'"
                raise ValueError(msg)
            all_schemas[table_name] = statement
    return all_schemas


def get_all_indexes() -> list[str]:
    """Collect CREATE INDEX statements from every module."""
    return [statement for module in _registry.modules.values() for statement in module.get_indexes()]
