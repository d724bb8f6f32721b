"""
ContentStore Error Hierarchy — Structured exceptions for store operations.

Every error carries the storage key, the document id and the operation that
failed, so a log line or a JSON error payload is enough to reproduce it.

Hierarchy:
    ContentStoreError
    ├── NotFoundError                 — Object absent (often "skip" for callers)
    │   ├── DocumentNotFoundError     — Primary / compound component missing
    │   └── SparseDocumentNotFoundError — Sparse folder empty or missing
    ├── AlreadyExistsError            — create() collided with a live object
    ├── ReadOnlyError                 — Mutation attempted in read-only mode
    ├── InvalidIdentifierError        — Malformed or unsafe document id
    └── StoreUnavailableError         — Transport / credential failure
        └── StoreConfigError          — Bucket, region or credentials missing

Best-effort operations never raise for a single item; they report
PartialFailure records instead (see contentstore.documents.models).
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Dict, Optional

READ_ONLY_ERROR_MESSAGE = "Saving has been disabled by the administrator"


class ContentStoreError(Exception):
    """
    Base error for all content store failures.
    All context is serializable to JSON.
    """

    def __init__(self, message: str, **context: Any):
        self.message = message
        self.key: Optional[str] = context.get("key")
        self.document_id: Optional[str] = context.get("document_id")
        self.operation: Optional[str] = context.get("operation")
        self.error_type: str = self.__class__.__name__
        self.context: Dict[str, Any] = context
        self.timestamp: str = datetime.now(timezone.utc).isoformat()
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize error to a JSON-compatible dict for logging."""
        return {
            "error_type": self.error_type,
            "message": self.message,
            "key": self.key,
            "document_id": self.document_id,
            "operation": self.operation,
            "timestamp": self.timestamp,
            "context": {
                k: str(v) for k, v in self.context.items()
                if k not in ("key", "document_id", "operation")
            },
        }

    def to_json(self) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), default=str)

    def __repr__(self) -> str:
        parts = [f"{self.error_type}: {self.message}"]
        if self.key:
            parts.append(f"key={self.key}")
        if self.operation:
            parts.append(f"operation={self.operation}")
        return " | ".join(parts)


class NotFoundError(ContentStoreError):
    """Object absent from the store. Recoverable."""
    pass


class DocumentNotFoundError(NotFoundError):
    """Primary document (or a compound component) does not exist."""
    pass


class SparseDocumentNotFoundError(NotFoundError):
    """Sparse document folder is missing or holds no page objects."""

    def __init__(self, message: str, **context: Any):
        self.folder: Optional[str] = context.get("folder")
        super().__init__(message, **context)

    def to_dict(self) -> Dict[str, Any]:
        d = super().to_dict()
        d["folder"] = self.folder
        return d


class AlreadyExistsError(ContentStoreError):
    """create() found a live object at the derived key."""
    pass


class ReadOnlyError(ContentStoreError):
    """Mutating operation attempted while the store is read-only."""

    def __init__(self, message: str = READ_ONLY_ERROR_MESSAGE, **context: Any):
        super().__init__(message, **context)


class InvalidIdentifierError(ContentStoreError):
    """
    Malformed or unsafe document identifier.
    Raised before any key derivation; never coerced.
    """

    def __init__(self, message: str, **context: Any):
        self.identifier: Optional[str] = context.get("identifier")
        super().__init__(message, **context)

    def to_dict(self) -> Dict[str, Any]:
        d = super().to_dict()
        d["identifier"] = self.identifier
        return d


class StoreUnavailableError(ContentStoreError):
    """Object store call failed for a reason other than a missing object."""

    def __init__(self, message: str, **context: Any):
        self.bucket: Optional[str] = context.get("bucket")
        self.error_code: Optional[str] = context.get("error_code")
        super().__init__(message, **context)

    def to_dict(self) -> Dict[str, Any]:
        d = super().to_dict()
        d["bucket"] = self.bucket
        d["error_code"] = self.error_code
        return d


class StoreConfigError(StoreUnavailableError):
    """Configuration error — missing bucket, region or credentials. Fatal at startup."""

    def __init__(self, message: str, **context: Any):
        self.missing: Optional[list] = context.get("missing")
        super().__init__(message, **context)
