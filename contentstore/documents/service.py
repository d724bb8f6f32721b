"""
ContentStore Document Service — Primary document bytes on the object store.

Handles:
- Read with an existence check first (absent → DocumentNotFoundError)
- Create with at-most-once semantics (email attachment re-opens excepted)
- Save as unconditional overwrite; every write enables bucket versioning
- Listing of available document ids (known document extensions only)
- Read-only mode: every mutation is refused before any key derivation

Storage:
    <folder/>?<basename>
"""

from __future__ import annotations

import logging
from typing import List, Optional

from contentstore.documents.keys import (
    PREFIXES,
    DocumentMode,
    classify,
    derive_key,
    sanitize_basename,
    sanitize_document_id,
)
from contentstore.engine.config import StoreConfig
from contentstore.engine.errors import (
    AlreadyExistsError,
    DocumentNotFoundError,
    InvalidIdentifierError,
    NotFoundError,
    ReadOnlyError,
)
from contentstore.engine.logging import FileLogger, LogEntry, log_read_only_rejection, log_store_operation
from contentstore.storage.client import ObjectStoreClient

logger = logging.getLogger("contentstore.documents.service")

KNOWN_EXTENSIONS = (
    "pdf", "tif", "tiff", "jpg", "jpeg", "png", "gif", "bmp", "jp2", "jbig2",
    "doc", "docx", "xls", "xlsx", "ppt", "pptx", "rtf", "odt", "ods", "odp",
    "msg", "eml", "htm", "html", "xps", "pcl", "afp", "dcm", "dwg", "dxf",
    "svg", "wpd", "mht", "cals", "ico", "wmf", "emf", "pct",
)
OTHER_EXTENSIONS = ("txt", "jb2")

_READ_ONLY_VIEWS = (DocumentMode.SPARSE, DocumentMode.COMPOUND)


def has_known_extension(filename: str) -> bool:
    """True if filename ends in a known document extension (case-insensitive)."""
    upper = filename.upper()
    return any(upper.endswith("." + ext.upper()) for ext in KNOWN_EXTENSIONS + OTHER_EXTENSIONS)


class StoreComponent:
    """Shared wiring for stores: client, immutable config, optional operation log."""

    category = "documents"

    def __init__(
        self,
        client: ObjectStoreClient,
        config: StoreConfig,
        file_logger: Optional[FileLogger] = None,
    ):
        self._client = client
        self._config = config
        self._file_logger = file_logger

    @property
    def config(self) -> StoreConfig:
        return self._config

    @property
    def read_only(self) -> bool:
        return self._config.read_only

    def require_writable(self, operation: str, document_id: Optional[str]) -> None:
        """Refuse a mutation in read-only mode. Runs before any key work."""
        if self._config.read_only:
            logger.warning(f"Refused {operation} for '{document_id}': read-only mode")
            self._record(log_read_only_rejection(operation, document_id))
            raise ReadOnlyError(operation=operation, document_id=document_id)

    def ping(self) -> bool:
        return self._client.ping()

    def _record(self, entry: LogEntry) -> None:
        if self._file_logger is not None:
            self._file_logger.write(entry)

    def _key(self, basename: str, **kwargs) -> str:
        return derive_key(self._config.folder_name, basename, **kwargs)


class DocumentStore(StoreComponent):
    """
    CRUD for primary document bytes.

    Usage:
        store = DocumentStore(client, config)
        key = store.create("reports/q1.pdf", data)   # → "docs/q1.pdf"
        store.get("q1.pdf")
    """

    category = "documents"

    # -------------------------------------------------------------------
    # Identifiers
    # -------------------------------------------------------------------

    @staticmethod
    def email_attachment_id(basename: str, parent_document_id: Optional[str]) -> str:
        """
        Unique id for an email attachment: "Attachment - <parent>-<name>".

        Two emails may carry attachments with the same name, so the parent
        document's basename is folded in.
        """
        parent = ""
        if parent_document_id:
            parent = sanitize_basename(classify(parent_document_id)[1])
        return f"Attachment - {parent}-{basename}"

    def resolve_basename(
        self,
        document_id: str,
        is_email_attachment: bool = False,
        parent_document_id: Optional[str] = None,
    ) -> str:
        """Sanitized basename used for the primary key."""
        basename = sanitize_document_id(document_id)
        if is_email_attachment:
            basename = self.email_attachment_id(basename, parent_document_id)
        return basename

    def key_for(self, document_id: str) -> str:
        return self._key(self.resolve_basename(document_id))

    # -------------------------------------------------------------------
    # Read
    # -------------------------------------------------------------------

    def exists(self, document_id: str) -> bool:
        return self._client.exists(self.key_for(document_id))

    def get(self, document_id: str) -> bytes:
        """
        Fetch primary document bytes.

        Raises:
            InvalidIdentifierError: unsafe id.
            DocumentNotFoundError: no object at the derived key.
        """
        key = self.key_for(document_id)
        logger.debug(f"Retrieving document file: {key}")

        if not self._client.exists(key):
            logger.info(f"{key} could not be found in the store")
            raise DocumentNotFoundError(
                f"Document not found: {document_id}",
                key=key,
                document_id=document_id,
                operation="get",
            )
        try:
            data = self._client.get(key)
        except NotFoundError:
            raise DocumentNotFoundError(
                f"Document not found: {document_id}",
                key=key,
                document_id=document_id,
                operation="get",
            )
        self._record(log_store_operation(self.category, "get", key, document_id, len(data)))
        return data

    def list_document_ids(self) -> List[str]:
        """Object names under the configured folder with a known document extension."""
        names = self._client.list_names(self._config.folder_name)
        return [name for name in names if has_known_extension(name)]

    # -------------------------------------------------------------------
    # Write
    # -------------------------------------------------------------------

    def check_writable_id(self, document_id: str, operation: str) -> None:
        mode, _ = classify(document_id)
        if mode in _READ_ONLY_VIEWS:
            raise InvalidIdentifierError(
                f"Saving documents with the prefix \"{PREFIXES[mode]}\" is not supported",
                identifier=document_id,
                document_id=document_id,
                operation=operation,
            )

    def create(
        self,
        document_id: str,
        data: bytes,
        is_email_attachment: bool = False,
        parent_document_id: Optional[str] = None,
    ) -> str:
        """
        Create a document, at most once.

        Returns:
            The storage key.

        Raises:
            ReadOnlyError: store is read-only.
            AlreadyExistsError: key already occupied (not for email attachments,
                which return the existing key since re-opening is expected).
        """
        self.require_writable("create", document_id)
        self.check_writable_id(document_id, "create")

        basename = self.resolve_basename(document_id, is_email_attachment, parent_document_id)
        key = self._key(basename)

        if self._client.exists(key):
            if is_email_attachment:
                logger.info(f"Email attachment {key} already stored, reusing it")
                return key
            raise AlreadyExistsError(
                "A document by this name already exists. Please change the name and try again.",
                key=key,
                document_id=document_id,
                operation="create",
            )

        self._write(key, data, document_id, "create")
        return key

    def save(
        self,
        document_id: str,
        data: bytes,
        is_email_attachment: bool = False,
        parent_document_id: Optional[str] = None,
    ) -> str:
        """
        Overwrite a document unconditionally. Versioning keeps older copies.

        Returns:
            The storage key.
        """
        self.require_writable("save", document_id)
        self.check_writable_id(document_id, "save")

        basename = self.resolve_basename(document_id, is_email_attachment, parent_document_id)
        key = self._key(basename)
        self._write(key, data, document_id, "save")
        return key

    def _write(self, key: str, data: bytes, document_id: str, operation: str) -> None:
        self._client.put_versioned(key, data)
        logger.info(f"{operation}: {key} ({len(data)} bytes)")
        self._record(log_store_operation(self.category, operation, key, document_id, len(data)))

    def __repr__(self) -> str:
        return f"<DocumentStore folder='{self._config.folder_name}' read_only={self._config.read_only}>"
