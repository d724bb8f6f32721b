"""
ContentStore Handler — Host-facing facade over the document, artifact and assembly stores.

Each call takes a ContentRequest and returns a ContentResult. Dispatch on the
document id prefix happens here:

    SparseDocument:<folder>      → SparseDocumentAssembler
    CompoundDocument:<a>,<b>     → CompoundDocumentAssembler
    anything else                → DocumentStore

Error policy:
- Missing optional artifacts (bookmarks, notes, watermarks, OCR text) yield an
  empty result, never an error
- Primary content and annotation reads raise NotFoundError subclasses
- Every mutation raises ReadOnlyError in read-only mode before store access
"""

from __future__ import annotations

import logging
from typing import Optional

from contentstore.documents.artifacts import ArtifactStore
from contentstore.documents.compound import CompoundDocumentAssembler
from contentstore.documents.keys import ArtifactKind, DocumentMode, classify, sanitize_document_id
from contentstore.documents.models import ContentRequest, ContentResult
from contentstore.documents.service import DocumentStore
from contentstore.documents.sparse import SparseDocumentAssembler
from contentstore.documents.tiff import has_tiff_tag_annotations
from contentstore.engine.config import StoreConfig
from contentstore.engine.errors import ContentStoreError, NotFoundError

logger = logging.getLogger("contentstore.documents.handler")

# Layer id reported for annotations embedded in TIFF tags rather than stored as .ann objects
TIFF_TAG_LAYER = "TIFF_TAG_LAYER"


class ContentHandler:
    """
    Facade used by the viewer host.

    Usage:
        handler = ContentHandler(documents, artifacts, sparse, compound)
        result = handler.get_document_content(ContentRequest(document_id="q1.pdf"))
        result.document_content
    """

    def __init__(
        self,
        documents: DocumentStore,
        artifacts: ArtifactStore,
        sparse: SparseDocumentAssembler,
        compound: CompoundDocumentAssembler,
    ):
        self.documents = documents
        self.artifacts = artifacts
        self.sparse = sparse
        self.compound = compound

    @property
    def config(self) -> StoreConfig:
        return self.documents.config

    # -------------------------------------------------------------------
    # Documents
    # -------------------------------------------------------------------

    def get_document_content(self, request: ContentRequest) -> ContentResult:
        """Primary content, a sparse page window or compound content elements."""
        mode, _ = classify(request.document_id)

        if mode is DocumentMode.SPARSE:
            logger.debug(f"Retrieving sparse document: {request.document_id}")
            sparse = self.sparse.assemble(request.document_id, request.sparse_window)
            return ContentResult(
                sparse_elements=sparse.elements,
                sparse_page_index=sparse.page_index,
                sparse_return_page_count=sparse.returned_page_count,
                sparse_total_page_count=sparse.total_page_count,
                document_display_name=sparse.display_name,
                failures=sparse.failures,
            )

        if mode is DocumentMode.COMPOUND:
            logger.debug(f"Retrieving compound document: {request.document_id}")
            compound = self.compound.assemble(request.document_id)
            return ContentResult(
                content_elements=compound.elements,
                document_display_name=compound.display_name,
            )

        data = self.documents.get(request.document_id)
        result = ContentResult(document_content=data)
        if self.config.debug:
            result.document_display_name = sanitize_document_id(request.document_id)[::-1]
        return result

    def get_available_document_ids(self, request: Optional[ContentRequest] = None) -> ContentResult:
        return ContentResult(available_document_ids=self.documents.list_document_ids())

    def save_document_content(self, request: ContentRequest) -> ContentResult:
        """Overwrite primary content. No content means nothing to save."""
        self.documents.require_writable("save_document_content", request.document_id)
        if request.document_content is None:
            return ContentResult()
        self.documents.save(
            request.document_id,
            request.document_content,
            request.is_email_attachment,
            request.parent_document_id,
        )
        return ContentResult(document_id_to_reload=self._reload_id(request))

    def create_document(self, request: ContentRequest) -> ContentResult:
        self.documents.require_writable("create_document", request.document_id)
        if request.document_content is None:
            return ContentResult()
        self.documents.create(
            request.document_id,
            request.document_content,
            request.is_email_attachment,
            request.parent_document_id,
        )
        return ContentResult(document_id_to_reload=self._reload_id(request))

    def _reload_id(self, request: ContentRequest) -> str:
        return self.documents.resolve_basename(
            request.document_id, request.is_email_attachment, request.parent_document_id
        )

    def save_document_components(self, request: ContentRequest) -> ContentResult:
        """
        Save everything the viewer edited in one call.

        Order: primary content, new/modified annotation layers, listed layer
        deletions, notes, bookmarks, watermarks. Not transactional: a failure
        part way leaves earlier writes in place. Layer deletions are
        best-effort and reported in result.failures.
        """
        self.documents.require_writable("save_document_components", request.document_id)
        document_id = request.document_id
        self.documents.check_writable_id(document_id, "save_document_components")

        if request.document_content is not None:
            self.documents.save(document_id, request.document_content)

        result = ContentResult(document_id_to_reload=sanitize_document_id(document_id))
        if request.annotation_layers is not None:
            for layer in request.annotation_layers:
                if not layer.needs_save:
                    logger.debug(f"Skipping unmodified layer: {layer.layer_id}")
                    continue
                if layer.data is None:
                    continue
                self.artifacts.save_annotation(
                    document_id, layer.layer_id, layer.data, layer.page_index, layer.properties
                )
            batch = self.artifacts.delete_many(document_id, request.deleted_annotation_layers)
            result.failures.extend(batch.failures)

        if request.notes_content is not None:
            self.artifacts.save(document_id, ArtifactKind.NOTE, request.notes_content)
        if request.bookmark_content is not None:
            self.artifacts.save(document_id, ArtifactKind.BOOKMARK, request.bookmark_content)
        if request.watermark_content is not None:
            self.artifacts.save(document_id, ArtifactKind.WATERMARK, request.watermark_content)
        return result

    def save_document_components_as(self, request: ContentRequest) -> ContentResult:
        self.documents.require_writable("save_document_components_as", request.document_id)
        return self.save_document_components(request)

    # -------------------------------------------------------------------
    # Annotations
    # -------------------------------------------------------------------

    def get_annotation_names(self, request: ContentRequest) -> ContentResult:
        """Stored layer ids, led by the TIFF tag layer when the image carries one."""
        names = []
        if self.config.tiff_tag_annotations:
            try:
                content = self.get_document_content(request).document_content
                if content is not None and has_tiff_tag_annotations(content):
                    names.append(TIFF_TAG_LAYER)
            except ContentStoreError as e:
                logger.error(f"Error retrieving TIFF tag annotations: {e}")
        names.extend(self.artifacts.list_annotation_ids(request.document_id))
        return ContentResult(annotation_names=names)

    def get_annotation_content(self, request: ContentRequest) -> ContentResult:
        """
        Raises:
            NotFoundError: the layer does not exist.
        """
        layer_id = request.annotation_id
        data = self.artifacts.get(request.document_id, ArtifactKind.ANNOTATION, layer_id)
        properties = self.artifacts.get_annotation_properties(
            request.document_id, layer_id, request.client_instance_id
        )
        return ContentResult(
            annotation_content=data,
            annotation_display_name=layer_id,
            annotation_properties=properties,
        )

    def get_annotation_properties(self, request: ContentRequest) -> ContentResult:
        properties = self.artifacts.get_annotation_properties(
            request.document_id, request.annotation_id, request.client_instance_id
        )
        return ContentResult(annotation_properties=properties)

    def get_all_annotations_for_document(self, request: ContentRequest) -> ContentResult:
        layers = self.artifacts.get_all_annotations(request.document_id, request.client_instance_id)
        return ContentResult(all_annotations=layers)

    def save_annotation_content(self, request: ContentRequest) -> ContentResult:
        """Save one whole-document layer. No content means nothing to save."""
        self.documents.require_writable("save_annotation_content", request.document_id)
        if request.annotation_content is None:
            return ContentResult()
        self.artifacts.save_annotation(
            request.document_id,
            request.annotation_id,
            request.annotation_content,
            properties=request.annotation_properties,
        )
        return ContentResult()

    def delete_annotation(self, request: ContentRequest) -> ContentResult:
        self.documents.require_writable("delete_annotation", request.document_id)
        self.artifacts.delete(request.document_id, ArtifactKind.ANNOTATION, request.annotation_id)
        return ContentResult()

    # -------------------------------------------------------------------
    # Bookmarks, notes, watermarks, OCR
    # -------------------------------------------------------------------

    def _get_optional(self, request: ContentRequest, kind: ArtifactKind) -> Optional[bytes]:
        try:
            return self.artifacts.get(request.document_id, kind)
        except NotFoundError:
            logger.debug(f"No {kind.value} stored for {request.document_id}")
            return None

    def _delete_optional(self, request: ContentRequest, kind: ArtifactKind, operation: str) -> ContentResult:
        self.documents.require_writable(operation, request.document_id)
        self.artifacts.delete(request.document_id, kind)
        return ContentResult()

    def get_bookmark_content(self, request: ContentRequest) -> ContentResult:
        return ContentResult(bookmark_content=self._get_optional(request, ArtifactKind.BOOKMARK))

    def delete_bookmark_content(self, request: ContentRequest) -> ContentResult:
        return self._delete_optional(request, ArtifactKind.BOOKMARK, "delete_bookmark_content")

    def get_notes_content(self, request: ContentRequest) -> ContentResult:
        return ContentResult(notes_content=self._get_optional(request, ArtifactKind.NOTE))

    def delete_notes_content(self, request: ContentRequest) -> ContentResult:
        return self._delete_optional(request, ArtifactKind.NOTE, "delete_notes_content")

    def get_watermark_content(self, request: ContentRequest) -> ContentResult:
        return ContentResult(watermark_content=self._get_optional(request, ArtifactKind.WATERMARK))

    def delete_watermark_content(self, request: ContentRequest) -> ContentResult:
        return self._delete_optional(request, ArtifactKind.WATERMARK, "delete_watermark_content")

    def get_ocr_data(self, request: ContentRequest) -> ContentResult:
        return ContentResult(ocr_data=self._get_optional(request, ArtifactKind.OCR_TEXT))

    # -------------------------------------------------------------------
    # Host housekeeping
    # -------------------------------------------------------------------

    def validate_cache(self, request: Optional[ContentRequest] = None) -> ContentResult:
        """Cached renditions are always allowed."""
        return ContentResult(use_of_cache_allowed=True)

    def check_available(self) -> bool:
        """True if the object store answers."""
        try:
            return self.documents.ping()
        except ContentStoreError as e:
            logger.error(f"Object store unavailable: {e}")
            return False

    def __repr__(self) -> str:
        return f"<ContentHandler {self.documents!r}>"
