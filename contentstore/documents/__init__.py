"""ContentStore Documents — Key codec, stores, assemblers and the host facade."""

from contentstore.documents.artifacts import ArtifactStore  # noqa: F401
from contentstore.documents.compound import CompoundDocumentAssembler  # noqa: F401
from contentstore.documents.handler import ContentHandler  # noqa: F401
from contentstore.documents.keys import ArtifactKind, DocumentMode  # noqa: F401
from contentstore.documents.models import ContentRequest, ContentResult  # noqa: F401
from contentstore.documents.service import DocumentStore  # noqa: F401
from contentstore.documents.sparse import SparseDocumentAssembler  # noqa: F401

__all__ = [
    "ArtifactKind",
    "ArtifactStore",
    "CompoundDocumentAssembler",
    "ContentHandler",
    "ContentRequest",
    "ContentResult",
    "DocumentMode",
    "DocumentStore",
    "SparseDocumentAssembler",
]
