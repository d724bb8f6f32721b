"""
ContentStore Document Models — Pydantic records exchanged with the host.

AnnotationProperties: typed replacement for the host's property map.
AnnotationLayer: one annotation layer of a document.
SparseWindow / SparseDocumentResult / CompoundDocumentResult: assembly views.
PartialFailure / BatchResult: best-effort operation outcomes.
ContentRequest / ContentResult: per-call input and output records.

Forward compatibility: unknown keys in host property maps and records are ignored.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

# Host property-map keys
PROPERTIES_KEY_PERMISSION_LEVEL = "permissionLevel"
PROPERTIES_KEY_REDACTION_FLAG = "redactionFlag"


class PermissionLevel(IntEnum):
    """Pre-resolved annotation permission level handed in by the host."""
    NONE = 0
    VIEW = 10
    PRINT = 20
    REDACT = 30
    CREATE = 40
    EDIT = 50
    DELETE = 60


# ---------------------------------------------------------------------------
# Annotations
# ---------------------------------------------------------------------------

class AnnotationProperties(BaseModel):
    """Per-layer properties. Unknown keys are ignored."""
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    permission_level: PermissionLevel = Field(
        default=PermissionLevel.DELETE, alias=PROPERTIES_KEY_PERMISSION_LEVEL
    )
    redaction_flag: bool = Field(default=False, alias=PROPERTIES_KEY_REDACTION_FLAG)

    @classmethod
    def from_mapping(cls, mapping: Optional[Mapping[str, Any]]) -> Optional["AnnotationProperties"]:
        """Build from a host map (camelCase or snake_case keys). None stays None."""
        if mapping is None:
            return None
        return cls.model_validate(dict(mapping))

    def to_mapping(self) -> Dict[str, Any]:
        """Host map form: {"permissionLevel": int, "redactionFlag": bool}."""
        return {
            PROPERTIES_KEY_PERMISSION_LEVEL: int(self.permission_level),
            PROPERTIES_KEY_REDACTION_FLAG: self.redaction_flag,
        }


class AnnotationLayer(BaseModel):
    """
    One annotation layer.

    Created by the caller when a layer is added or edited; persisted on save
    when is_new or is_modified; removed only when listed for deletion.
    """
    model_config = ConfigDict(extra="ignore")

    layer_id: str = Field(min_length=1, description="Layer name, used in the storage key")
    document_id: Optional[str] = Field(default=None, description="Owning document id")
    data: Optional[bytes] = Field(default=None, description="Opaque layer bytes")
    properties: Optional[AnnotationProperties] = None
    is_new: bool = False
    is_modified: bool = False
    page_index: Optional[int] = Field(default=None, description="Set for page-scoped layers")
    display_name: Optional[str] = None

    @property
    def needs_save(self) -> bool:
        return self.is_new or self.is_modified


# ---------------------------------------------------------------------------
# Best-effort outcomes
# ---------------------------------------------------------------------------

class PartialFailure(BaseModel):
    """One item a best-effort operation skipped."""
    key: str
    error_type: str
    message: str

    @classmethod
    def from_exception(cls, key: str, exc: Exception) -> "PartialFailure":
        return cls(key=key, error_type=type(exc).__name__, message=str(exc))


class BatchResult(BaseModel):
    """Outcome of a best-effort batch (not transactional)."""
    succeeded: List[str] = Field(default_factory=list)
    skipped: List[str] = Field(default_factory=list)
    failures: List[PartialFailure] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    @property
    def last_error(self) -> Optional[PartialFailure]:
        return self.failures[-1] if self.failures else None


# ---------------------------------------------------------------------------
# Assembly views
# ---------------------------------------------------------------------------

class SparseWindow(BaseModel):
    """Caller-requested page range. page_count == 0 means "to the end"."""
    start_page: int = 0
    page_count: int = 0


class SparseDocumentResult(BaseModel):
    elements: List[bytes] = Field(default_factory=list)
    page_index: int = 0
    returned_page_count: int = 0
    total_page_count: int = 0
    display_name: str = ""
    failures: List[PartialFailure] = Field(default_factory=list)


class CompoundDocumentResult(BaseModel):
    elements: List[bytes] = Field(default_factory=list)
    components: List[str] = Field(default_factory=list)
    display_name: str = ""


# ---------------------------------------------------------------------------
# Host records
# ---------------------------------------------------------------------------

class ContentRequest(BaseModel):
    """Per-call input record from the host."""
    model_config = ConfigDict(extra="ignore")

    document_id: str
    client_instance_id: Optional[str] = None
    annotation_id: Optional[str] = None
    annotation_content: Optional[bytes] = None
    annotation_properties: Optional[AnnotationProperties] = None
    annotation_layers: Optional[List[AnnotationLayer]] = None
    deleted_annotation_layers: Optional[List[Optional[str]]] = None
    document_content: Optional[bytes] = None
    bookmark_content: Optional[bytes] = None
    notes_content: Optional[bytes] = None
    watermark_content: Optional[bytes] = None
    sparse_page_number: int = 0
    sparse_page_count: int = 0
    is_email_attachment: bool = False
    parent_document_id: Optional[str] = None

    @property
    def sparse_window(self) -> SparseWindow:
        return SparseWindow(start_page=self.sparse_page_number, page_count=self.sparse_page_count)


class ContentResult(BaseModel):
    """Per-call output record to the host. Unset fields mean "not applicable"."""
    document_content: Optional[bytes] = None
    document_display_name: Optional[str] = None
    content_elements: Optional[List[bytes]] = None
    sparse_elements: Optional[List[bytes]] = None
    sparse_page_index: Optional[int] = None
    sparse_return_page_count: Optional[int] = None
    sparse_total_page_count: Optional[int] = None
    annotation_content: Optional[bytes] = None
    annotation_display_name: Optional[str] = None
    annotation_properties: Optional[AnnotationProperties] = None
    all_annotations: Optional[Dict[str, AnnotationLayer]] = None
    available_document_ids: Optional[List[str]] = None
    annotation_names: Optional[List[str]] = None
    document_id_to_reload: Optional[str] = None
    bookmark_content: Optional[bytes] = None
    notes_content: Optional[bytes] = None
    watermark_content: Optional[bytes] = None
    ocr_data: Optional[bytes] = None
    use_of_cache_allowed: Optional[bool] = None
    failures: List[PartialFailure] = Field(default_factory=list)
