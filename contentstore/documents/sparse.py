"""
ContentStore Sparse Assembly — Paged documents built from a folder of page objects.

A sparse id "SparseDocument:<folder>[:...]" names a folder whose direct
children are the document's pages, in lexicographic order. Callers request a
window of pages; only that window is fetched.

Fetch failures inside the window are logged, recorded and skipped, so a
window may come back with fewer pages than requested.
"""

from __future__ import annotations

import logging
from typing import Optional

from contentstore.documents.keys import PREFIXES, DocumentMode, sanitize_basename
from contentstore.documents.models import PartialFailure, SparseDocumentResult, SparseWindow
from contentstore.documents.service import StoreComponent
from contentstore.engine.errors import ContentStoreError, InvalidIdentifierError, SparseDocumentNotFoundError
from contentstore.engine.logging import log_partial_failure, log_store_operation
from contentstore.storage.client import join_folder

logger = logging.getLogger("contentstore.documents.sparse")


def sparse_folder_name(document_id: str) -> str:
    """
    Folder named by a sparse id: the text after the prefix, up to the next ":".

    >>> sparse_folder_name("SparseDocument:scans:v2")
    'scans'
    """
    prefix = PREFIXES[DocumentMode.SPARSE]
    if not document_id.startswith(prefix):
        raise InvalidIdentifierError(
            f"Not a sparse document id: {document_id}",
            identifier=document_id,
            operation="sparse_folder",
        )
    residual = document_id[len(prefix):]
    return sanitize_basename(residual.split(":", 1)[0])


def debug_display_name(document_id: str) -> str:
    return document_id[::-1].upper()


class SparseDocumentAssembler(StoreComponent):
    """
    Fetches a window of pages of a sparse document.

    Usage:
        assembler = SparseDocumentAssembler(client, config)
        result = assembler.assemble("SparseDocument:scans", SparseWindow(start_page=2, page_count=3))
    """

    category = "assembly"

    def folder_for(self, document_id: str) -> str:
        return join_folder(self._config.folder_name, sparse_folder_name(document_id))

    def assemble(self, document_id: str, window: Optional[SparseWindow] = None) -> SparseDocumentResult:
        """
        Fetch the requested page window.

        Raises:
            InvalidIdentifierError: not a usable sparse id.
            SparseDocumentNotFoundError: the folder holds no pages.
        """
        window = window or SparseWindow()
        folder_name = sparse_folder_name(document_id)
        folder = join_folder(self._config.folder_name, folder_name)

        names = self._client.list_names(folder)
        total = len(names)
        if total == 0:
            logger.info(f"Sparse document folder {folder} is empty or missing")
            raise SparseDocumentNotFoundError(
                f"No pages found for sparse document {document_id}",
                folder=folder,
                document_id=document_id,
                operation="assemble_sparse",
            )

        start = window.start_page
        if window.page_count == 0:
            end = total
        else:
            end = min(start + window.page_count, total)

        result = SparseDocumentResult(page_index=start)
        for index in range(max(start, 0), end):
            key = join_folder(folder, names[index])
            try:
                result.elements.append(self._client.get(key))
            except ContentStoreError as e:
                logger.error(f"Error getting page {index} of {document_id} ({key}): {e}")
                self._record(log_partial_failure(self.category, "assemble_sparse", key, e.error_type, e.message))
                result.failures.append(PartialFailure.from_exception(key, e))

        fetched = len(result.elements)
        result.returned_page_count = fetched
        result.total_page_count = fetched
        result.display_name = debug_display_name(document_id) if self._config.debug else folder_name
        logger.debug(f"Sparse {document_id}: pages [{max(start, 0)}, {end}) of {total}, fetched {fetched}")
        self._record(log_store_operation(self.category, "assemble_sparse", folder, document_id))
        return result
