"""
ContentStore — Document content persistence on an S3 object store.

Stores primary document bytes and their per-document artifacts (annotation
layers, bookmarks, notes, watermarks, OCR text), and assembles sparse and
compound documents for a document viewer host.

    from contentstore.engine.config import load_store_config
    from contentstore.engine.runtime import ContentStoreRuntime

    runtime = ContentStoreRuntime(load_store_config()).startup()
    runtime.handler.get_available_document_ids()
"""

__version__ = "1.0.0"
__all__ = ["documents", "engine", "storage"]
