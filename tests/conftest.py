"""
ContentStore Test Suite — Shared fixtures and configuration.

Plain helpers (make_config, client_error, paginated, build_tiff) live in
tests/helpers.py; this module only holds fixtures.

Run:  pytest tests/ -v
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from contentstore.storage.memory import MemoryObjectStoreClient
from helpers import make_config


# ---------------------------------------------------------------------------
# Environment setup: never pick up a developer's real config or secrets
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch):
    """Strip CONTENTSTORE_* variables and reset the runtime singleton."""
    import os

    import contentstore.engine.runtime as runtime_mod

    for name in list(os.environ):
        if name.startswith("CONTENTSTORE_"):
            monkeypatch.delenv(name, raising=False)
    runtime_mod._runtime = None


# ---------------------------------------------------------------------------
# Configs
# ---------------------------------------------------------------------------

@pytest.fixture
def config():
    """Writable config, no folder."""
    return make_config()


@pytest.fixture
def folder_config():
    """Writable config scoped to the 'docs' folder."""
    return make_config(folder_name="docs/")


@pytest.fixture
def read_only_config():
    return make_config(read_only=True)


@pytest.fixture
def memory_client():
    return MemoryObjectStoreClient()


# ---------------------------------------------------------------------------
# boto3
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_s3():
    """Return a mock boto3 S3 client."""
    s3 = MagicMock()
    s3.put_object.return_value = {}
    s3.delete_object.return_value = {}
    s3.head_object.return_value = {}
    s3.head_bucket.return_value = {}
    s3.put_bucket_versioning.return_value = {}
    return s3
