"""
Shared pytest fixtures for the validator engine test suite.
"""

import pytest

from modules.validation.core.config_loader import load_validator_specs
from modules.validation.core.registry import ValidatorRegistry
from modules.validation.engine import ValidationService
from modules.validation.storage import MemoryCacheBackend


@pytest.fixture(scope="session")
def specs():
    """The bundled validator table."""
    return load_validator_specs()


@pytest.fixture
def registry(specs):
    return ValidatorRegistry(specs)


@pytest.fixture
def cache_backend():
    return MemoryCacheBackend({"name": "memory"})


@pytest.fixture
def service(registry, cache_backend):
    """Validation service over the bundled table with a fresh memory cache."""
    return ValidationService(
        registry=registry,
        cache_backend=cache_backend,
        cache_ttl=3600,
        max_attempts=5,
        loop_ttl=60,
    )
