"""
ContentStore Compound Assembly — Documents concatenated from named components.

A compound id "CompoundDocument:a.pdf,b.pdf,a.pdf" lists its components in
order; duplicates are kept, empty tokens dropped.

Resolution (StoreConfig.compound_resolution):
    ALIAS      every component fetches the compound id's own key
    COMPONENT  every component fetches <folder/>?<component basename>

An id without components assembles to an empty result in either mode.
"""

from __future__ import annotations

import logging
from typing import List

from contentstore.documents.keys import PREFIXES, DocumentMode, sanitize_basename, sanitize_document_id
from contentstore.documents.models import CompoundDocumentResult
from contentstore.documents.service import StoreComponent
from contentstore.engine.config import CompoundResolution
from contentstore.engine.errors import DocumentNotFoundError, InvalidIdentifierError, NotFoundError
from contentstore.engine.logging import log_store_operation

logger = logging.getLogger("contentstore.documents.compound")


def compound_components(document_id: str) -> List[str]:
    """
    Component names of a compound id.

    >>> compound_components("CompoundDocument:a.pdf,,b.pdf,a.pdf")
    ['a.pdf', 'b.pdf', 'a.pdf']
    """
    prefix = PREFIXES[DocumentMode.COMPOUND]
    if not document_id.startswith(prefix):
        raise InvalidIdentifierError(
            f"Not a compound document id: {document_id}",
            identifier=document_id,
            operation="compound_components",
        )
    return [token for token in document_id[len(prefix):].split(",") if token]


class CompoundDocumentAssembler(StoreComponent):
    """
    Fetches every component of a compound document, in order.

    Usage:
        assembler = CompoundDocumentAssembler(client, config)
        result = assembler.assemble("CompoundDocument:a.pdf,b.pdf")
    """

    category = "assembly"

    def component_keys(self, document_id: str) -> List[str]:
        components = compound_components(document_id)
        if not components:
            return []
        if self._config.compound_resolution is CompoundResolution.COMPONENT:
            return [self._key(sanitize_basename(token)) for token in components]
        alias = self._key(sanitize_document_id(document_id))
        return [alias for _ in components]

    def assemble(self, document_id: str) -> CompoundDocumentResult:
        """
        Fetch all components.

        Raises:
            DocumentNotFoundError: a component key is absent.
            StoreUnavailableError: any other store failure aborts the assembly.
        """
        components = compound_components(document_id)
        keys = self.component_keys(document_id)

        result = CompoundDocumentResult(components=components)
        for key in keys:
            logger.debug(f"Retrieving compound component: {key}")
            try:
                result.elements.append(self._client.get(key))
            except NotFoundError:
                raise DocumentNotFoundError(
                    f"Compound component not found: {key}",
                    key=key,
                    document_id=document_id,
                    operation="assemble_compound",
                )

        if self._config.debug:
            result.display_name = document_id[::-1].upper()
        else:
            result.display_name = document_id[len(PREFIXES[DocumentMode.COMPOUND]):]
        self._record(log_store_operation(self.category, "assemble_compound", keys[0] if keys else "", document_id))
        return result
