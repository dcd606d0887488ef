"""Pytest configuration and shared fixtures."""

import logging

import logfire
import pytest

from src.core.module_registry import reset_registry


logger = logging.getLogger(__name__)


@pytest.fixture(scope="session", autouse=True)
def local_logfire():
    """Configure Logfire to keep spans local for the whole test session."""
    logfire.configure(send_to_logfire=False, console=False)


@pytest.fixture(autouse=True)
def clean_module_registry():
    """Start every test with an empty module registry."""
    reset_registry()
    yield
    reset_registry()
