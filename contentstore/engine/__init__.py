"""ContentStore Engine — Configuration, credentials, errors, logging, runtime wiring."""

from contentstore.engine.config import CompoundResolution, StoreConfig, load_store_config  # noqa: F401
from contentstore.engine.errors import ContentStoreError  # noqa: F401

__all__ = [
    "CompoundResolution",
    "StoreConfig",
    "load_store_config",
    "ContentStoreError",
]
