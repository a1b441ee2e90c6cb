"""
Pytest Configuration and Shared Fixtures
=========================================

This module configures pytest for the kvtx test suite.
It provides:
- Path setup for importing the kvtx package
- Custom markers for test categorization
- Shared fixtures available to all tests

Test Categories (markers):
- @pytest.mark.unit: Fast, isolated unit tests
- @pytest.mark.integration: Component interaction tests (threads, subprocesses)

Usage:
    # Run only unit tests
    pytest -m unit

    # Run everything except integration tests
    pytest -m "not integration"
"""

import os
import sys

import pytest


# =============================================================================
# PATH SETUP
# =============================================================================

# Ensure the kvtx package is importable from any test directory
_repo_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _repo_root not in sys.path:
    sys.path.insert(0, _repo_root)


# =============================================================================
# PYTEST MARKERS
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "unit: Fast, isolated unit tests (< 1s each)"
    )
    config.addinivalue_line(
        "markers", "integration: Component interaction tests"
    )


# =============================================================================
# TEST COLLECTION HOOKS
# =============================================================================

def pytest_collection_modifyitems(config, items):
    """
    Automatically mark tests based on their location.

    Tests in tests/unit/ get @pytest.mark.unit, etc.
    """
    for item in items:
        test_path = str(item.fspath)

        if '/unit/' in test_path or '\\unit\\' in test_path:
            item.add_marker(pytest.mark.unit)
        elif '/integration/' in test_path or '\\integration\\' in test_path:
            item.add_marker(pytest.mark.integration)


# =============================================================================
# KVTX FIXTURES
# =============================================================================

@pytest.fixture
def clean_kvtx_env(monkeypatch):
    """Remove KVTX_* variables so tests see default configuration."""
    for name in ("KVTX_PROMPT", "KVTX_LOG_LEVEL", "KVTX_DEBUG"):
        monkeypatch.delenv(name, raising=False)
