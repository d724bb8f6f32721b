"""
ContentStore Artifact Service — Annotation layers, bookmarks, notes, watermarks, OCR text.

Artifacts live next to their document, scoped under its basename:
    <folder/>?<basename>.<layerId>[-page<N>].ann
    <folder/>?<basename>.bookmarks.xml | .notes.xml | .watermarks.json | .ocr-text.json

Policies:
- delete() of an absent artifact is a no-op
- get() raises NotFoundError; multi-artifact reads skip missing items
- delete_many() is best-effort: every id is attempted, failures are reported
  in the BatchResult and logged, never raised
"""

from __future__ import annotations

import json
import logging
from typing import Dict, Iterable, List, Optional

from contentstore.documents.keys import (
    ArtifactKind,
    annotation_discriminator,
    annotation_id_from_name,
    collapse_layer_id,
    sanitize_document_id,
)
from contentstore.documents.models import (
    AnnotationLayer,
    AnnotationProperties,
    BatchResult,
    PartialFailure,
    PermissionLevel,
)
from contentstore.documents.service import StoreComponent
from contentstore.engine.errors import ContentStoreError, NotFoundError
from contentstore.engine.logging import log_partial_failure, log_store_operation

logger = logging.getLogger("contentstore.documents.artifacts")

# JSON key a debug client_instance_id may carry to override the permission level
PERMISSION_OVERRIDE_KEY = "annotationPermissionLevel"


def permission_override(client_instance_id: Optional[str]) -> Optional[PermissionLevel]:
    """
    Permission level requested by a JSON client instance id, if any.

    Malformed JSON, a missing key or an unknown level yield None.
    """
    if not client_instance_id:
        return None
    try:
        settings = json.loads(client_instance_id)
        return PermissionLevel(int(settings[PERMISSION_OVERRIDE_KEY]))
    except (ValueError, TypeError, KeyError):
        return None


class ArtifactStore(StoreComponent):
    """
    CRUD for per-document artifacts.

    Usage:
        artifacts = ArtifactStore(client, config)
        artifacts.save_annotation("q1.pdf", "sig", data, page_index=2)
        artifacts.list_annotation_ids("q1.pdf")   # → ["sig-page2"]
    """

    category = "artifacts"

    def key_for(
        self,
        document_id: str,
        kind: ArtifactKind,
        discriminator: Optional[str] = None,
    ) -> str:
        basename = sanitize_document_id(document_id)
        return self._key(basename, kind=kind, discriminator=discriminator)

    # -------------------------------------------------------------------
    # Generic artifact CRUD
    # -------------------------------------------------------------------

    def save(
        self,
        document_id: str,
        kind: ArtifactKind,
        data: bytes,
        discriminator: Optional[str] = None,
    ) -> str:
        """Write an artifact (overwrite). Returns the storage key."""
        self.require_writable("save_artifact", document_id)
        key = self.key_for(document_id, kind, discriminator)
        logger.debug(f"Saving {kind.value} artifact {key}")
        self._client.put_versioned(key, data)
        self._record(log_store_operation(self.category, f"save_{kind.value}", key, document_id, len(data)))
        return key

    def get(
        self,
        document_id: str,
        kind: ArtifactKind,
        discriminator: Optional[str] = None,
    ) -> bytes:
        """
        Read an artifact.

        Raises:
            NotFoundError: no artifact at the derived key.
        """
        key = self.key_for(document_id, kind, discriminator)
        logger.debug(f"Retrieving {kind.value} file: {key}")
        if not self._client.exists(key):
            raise NotFoundError(
                f"No {kind.value} found for {document_id}",
                key=key,
                document_id=document_id,
                operation=f"get_{kind.value}",
            )
        return self._client.get(key)

    def exists(
        self,
        document_id: str,
        kind: ArtifactKind,
        discriminator: Optional[str] = None,
    ) -> bool:
        return self._client.exists(self.key_for(document_id, kind, discriminator))

    def delete(
        self,
        document_id: str,
        kind: ArtifactKind,
        discriminator: Optional[str] = None,
    ) -> bool:
        """
        Delete an artifact.

        Returns:
            True if an object was deleted, False if there was nothing to delete.
        """
        self.require_writable("delete_artifact", document_id)
        key = self.key_for(document_id, kind, discriminator)
        if not self._client.exists(key):
            logger.debug(f"{key} does not exist and could not be deleted")
            return False
        self._client.delete(key)
        logger.info(f"Deleted {kind.value}: {key}")
        self._record(log_store_operation(self.category, f"delete_{kind.value}", key, document_id))
        return True

    # -------------------------------------------------------------------
    # Annotation layers
    # -------------------------------------------------------------------

    def save_annotation(
        self,
        document_id: str,
        layer_id: str,
        data: bytes,
        page_index: Optional[int] = None,
        properties: Optional[AnnotationProperties] = None,
    ) -> str:
        """
        Save one annotation layer. Page-scoping is opt-in via page_index.

        Properties are accepted for host parity; the permission level and
        redaction flag do not change where or how the layer is stored.
        """
        self.require_writable("save_annotation", document_id)
        if properties is not None:
            logger.debug(
                f"Saving layer '{layer_id}' permission={properties.permission_level.name} "
                f"redaction={properties.redaction_flag}"
            )
        discriminator = annotation_discriminator(layer_id, page_index)
        return self.save(document_id, ArtifactKind.ANNOTATION, data, discriminator)

    def list_annotation_ids(self, document_id: str) -> List[str]:
        """Layer ids stored for a document, in listing order."""
        basename = sanitize_document_id(document_id)
        ids = []
        for name in self._client.list_names(self._config.folder_name):
            annotation_id = annotation_id_from_name(name, basename)
            if annotation_id is not None:
                ids.append(annotation_id)
        return ids

    def existing_annotation_hash(self, document_id: str) -> Dict[str, str]:
        """
        Existing logical layers, page-scoped writes collapsed to one entry:
        "sig-page0" and "sig-page1" both become "sig".
        """
        existing: Dict[str, str] = {}
        for annotation_id in self.list_annotation_ids(document_id):
            layer = collapse_layer_id(annotation_id)
            existing[layer] = layer
        return existing

    def get_annotation_properties(
        self,
        document_id: str,
        layer_id: str,
        client_instance_id: Optional[str] = None,
    ) -> Optional[AnnotationProperties]:
        """
        Properties of an existing layer, None if the layer does not exist.

        Layers get DELETE permission and no redaction flag unless a JSON
        client_instance_id overrides the permission level.
        """
        if not self.exists(document_id, ArtifactKind.ANNOTATION, layer_id):
            return None
        level = permission_override(client_instance_id) or PermissionLevel.DELETE
        return AnnotationProperties(permission_level=level, redaction_flag=False)

    def get_all_annotations(
        self,
        document_id: str,
        client_instance_id: Optional[str] = None,
    ) -> Dict[str, AnnotationLayer]:
        """Every readable layer of a document, keyed by id. Missing layers are skipped."""
        layers: Dict[str, AnnotationLayer] = {}
        document_key = sanitize_document_id(document_id)
        for annotation_id in self.list_annotation_ids(document_id):
            try:
                data = self.get(document_id, ArtifactKind.ANNOTATION, annotation_id)
            except NotFoundError:
                logger.info(f"Annotation layer '{annotation_id}' vanished, skipping it")
                continue
            layers[annotation_id] = AnnotationLayer(
                layer_id=annotation_id,
                document_id=document_key,
                data=data,
                display_name=annotation_id,
                properties=self.get_annotation_properties(document_id, annotation_id, client_instance_id),
                is_new=False,
                is_modified=False,
            )
        return layers

    def delete_many(self, document_id: str, annotation_ids: Optional[Iterable[Optional[str]]]) -> BatchResult:
        """
        Best-effort delete of annotation layers.

        None/empty ids are skipped. Every other id is attempted; a failing id
        is logged and recorded without stopping the rest.
        """
        result = BatchResult()
        if not annotation_ids:
            return result
        self.require_writable("delete_annotations", document_id)

        for annotation_id in annotation_ids:
            if not annotation_id:
                continue
            logger.debug(f"About to delete layer: {annotation_id}")
            try:
                if self.delete(document_id, ArtifactKind.ANNOTATION, annotation_id):
                    result.succeeded.append(annotation_id)
                else:
                    result.skipped.append(annotation_id)
            except ContentStoreError as e:
                logger.error(f"Failed to delete layer {annotation_id}: {e}")
                key = e.key or annotation_id
                self._record(log_partial_failure(self.category, "delete_annotations", key, e.error_type, e.message))
                result.failures.append(PartialFailure.from_exception(key, e))
        return result
