"""ContentStore object store bindings — S3 (boto3) and in-memory."""

from contentstore.storage.client import ObjectStoreClient, S3ObjectStoreClient, join_folder
from contentstore.storage.memory import MemoryObjectStoreClient

__all__ = [
    "ObjectStoreClient",
    "S3ObjectStoreClient",
    "MemoryObjectStoreClient",
    "join_folder",
]
