"""
ContentStore Runtime — Wires configuration, object store client and stores together.

Ties together:
- StoreConfig (validated once, at startup)
- ObjectStoreClient (S3 via boto3, or an injected client)
- FileLogger (optional structured operation log)
- DocumentStore / ArtifactStore / Sparse and Compound assemblers
- ContentHandler (host-facing facade)

Lifecycle:
    runtime = ContentStoreRuntime(config)
    runtime.startup()
    runtime.handler.get_document_content(...)
    runtime.shutdown()
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from contentstore.documents.artifacts import ArtifactStore
from contentstore.documents.compound import CompoundDocumentAssembler
from contentstore.documents.handler import ContentHandler
from contentstore.documents.service import DocumentStore
from contentstore.documents.sparse import SparseDocumentAssembler
from contentstore.engine.config import StoreConfig
from contentstore.engine.credentials import CredentialManager
from contentstore.engine.logging import FileLogger, configure_logging
from contentstore.storage.client import ObjectStoreClient, S3ObjectStoreClient

logger = logging.getLogger("contentstore.engine.runtime")


class ContentStoreRuntime:
    """
    Single entry point for building and holding the store components.

    An injected client skips S3 client construction (tests, local runs);
    connection settings are still validated unless validate=False.
    """

    def __init__(
        self,
        config: StoreConfig,
        client: Optional[ObjectStoreClient] = None,
        credential_manager: Optional[CredentialManager] = None,
        validate: bool = True,
    ):
        self.config = config
        self._client = client
        self._credential_manager = credential_manager
        self._validate = validate

        # Initialized in startup()
        self.client: Optional[ObjectStoreClient] = None
        self.file_logger: Optional[FileLogger] = None
        self.documents: Optional[DocumentStore] = None
        self.artifacts: Optional[ArtifactStore] = None
        self.sparse: Optional[SparseDocumentAssembler] = None
        self.compound: Optional[CompoundDocumentAssembler] = None
        self.handler: Optional[ContentHandler] = None

        self._started = False

    # -----------------------------------------------------------------------
    # Lifecycle
    # -----------------------------------------------------------------------

    def startup(self) -> "ContentStoreRuntime":
        """
        Validate configuration and build every component.

        Raises:
            StoreConfigError: connection settings incomplete.
            StoreUnavailableError: the S3 client could not be built.
        """
        if self._started:
            logger.warning("Runtime already started")
            return self

        # 1. Logging
        configure_logging(self.config.logging.level, self.config.debug)
        if self.config.logging.operation_log:
            self.file_logger = FileLogger(self.config.logging.directory)

        # 2. Object store
        if self._validate:
            self.config.validate_connection()
        if self._client is not None:
            self.client = self._client
        else:
            self.client = S3ObjectStoreClient.from_config(self.config, self._credential_manager)

        # 3. Stores
        self.documents = DocumentStore(self.client, self.config, self.file_logger)
        self.artifacts = ArtifactStore(self.client, self.config, self.file_logger)
        self.sparse = SparseDocumentAssembler(self.client, self.config, self.file_logger)
        self.compound = CompoundDocumentAssembler(self.client, self.config, self.file_logger)
        self.handler = ContentHandler(self.documents, self.artifacts, self.sparse, self.compound)

        self._started = True
        logger.info(
            f"ContentStore runtime started (bucket={self.config.bucket_name}, "
            f"folder='{self.config.folder_name}', read_only={self.config.read_only})"
        )
        return self

    def shutdown(self) -> None:
        if not self._started:
            return
        self.handler = None
        self.documents = self.artifacts = self.sparse = self.compound = None
        self.client = None
        self._started = False
        logger.info("ContentStore runtime shut down")

    @property
    def started(self) -> bool:
        return self._started

    def status(self) -> Dict[str, Any]:
        """Component summary for health output."""
        return {
            "started": self._started,
            "bucket": self.config.bucket_name,
            "folder": self.config.folder_name,
            "read_only": self.config.read_only,
            "debug": self.config.debug,
            "compound_resolution": self.config.compound_resolution.value,
            "operation_log": self.file_logger is not None,
            "available": self.handler.check_available() if self.handler else False,
        }


# ---------------------------------------------------------------------------
# Module-level singleton
# ---------------------------------------------------------------------------

_runtime: Optional[ContentStoreRuntime] = None


def get_runtime() -> ContentStoreRuntime:
    """
    Get the global ContentStoreRuntime.

    Raises RuntimeError if init_runtime() has not been called.
    """
    if _runtime is None:
        raise RuntimeError("ContentStore runtime not initialized. Call init_runtime() first.")
    return _runtime


def init_runtime(config: StoreConfig, **kwargs: Any) -> ContentStoreRuntime:
    """Create and start the global runtime."""
    global _runtime
    _runtime = ContentStoreRuntime(config, **kwargs).startup()
    return _runtime
