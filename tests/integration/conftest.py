"""
Integration test fixtures — a project tree with contentstore.yaml and a
populated in-memory bucket.
Mark with @pytest.mark.integration to skip in unit-only runs.

Run: pytest tests/integration/ -v -m integration
"""

from __future__ import annotations

import pytest

from contentstore.storage.memory import MemoryObjectStoreClient


# Custom marker for integration tests
def pytest_configure(config):
    config.addinivalue_line("markers", "integration: cross-module workflows over a full store tree")


@pytest.fixture
def integration_project(tmp_path):
    """Project root holding contentstore.yaml and a log directory."""
    root = tmp_path / "project"
    root.mkdir()
    (root / "contentstore.yaml").write_text(
        "store:\n"
        "  bucket_name: integration-bucket\n"
        "  region_name: eu-west-1\n"
        "  folder_name: archive/\n"
        "  access_key_id: AKIAINTEGRATION\n"
        "  secret_access_key: integration-secret\n"
        "  compound_resolution: component\n"
        "logging:\n"
        "  level: DEBUG\n"
        "  directory: " + str(root / ".contentstore" / "logs") + "\n"
        "  operation_log: true\n",
        encoding="utf-8",
    )
    return root


@pytest.fixture
def populated_bucket():
    """Bucket with plain documents, artifacts and a sparse folder under archive/."""
    return MemoryObjectStoreClient({
        "archive/contract.pdf": b"%PDF-contract",
        "archive/contract.pdf.signatures.ann": b"<sig/>",
        "archive/contract.pdf.review-page2.ann": b"<review/>",
        "archive/contract.pdf.notes.xml": b"<notes/>",
        "archive/appendix.pdf": b"%PDF-appendix",
        "archive/scans/page-000.tif": b"P0",
        "archive/scans/page-001.tif": b"P1",
        "archive/scans/page-002.tif": b"P2",
    })
