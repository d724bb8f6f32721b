"""
ContentStore Object Store Client — Thin capability over a key/value object store.

Classes:
  - ObjectStoreClient: Abstract interface (put, get, delete, exists, list)
  - S3ObjectStoreClient: Amazon S3 implementation via boto3

Error mapping (S3):
  - ClientError 404 / NoSuchKey / NotFound  → NotFoundError
  - any other ClientError / BotoCoreError   → StoreUnavailableError

All calls are synchronous. Listing drains every page before returning.
Timeouts and retries come from the botocore client config only.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, List, Optional

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from contentstore.engine.credentials import CredentialManager, resolve_secret_access_key
from contentstore.engine.errors import NotFoundError, StoreUnavailableError

logger = logging.getLogger("contentstore.storage.client")

_NOT_FOUND_CODES = {"404", "NoSuchKey", "NotFound"}


def join_folder(folder: Optional[str], name: str) -> str:
    """
    Join a folder and an object name with "/".

    One trailing slash on the folder is trimmed; an empty or None folder
    yields the bare name.
    """
    if folder and folder.endswith("/"):
        folder = folder[:-1]
    if not folder:
        return name
    return f"{folder}/{name}"


class ObjectStoreClient(ABC):
    """Capability over a remote object store. Implementations are stateless per call."""

    @abstractmethod
    def put(self, key: str, data: bytes) -> None:
        """Store data at key, replacing the latest version."""

    @abstractmethod
    def get(self, key: str) -> bytes:
        """Return the latest version at key. Raises NotFoundError if absent."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Delete key. Deleting an absent key is not an error."""

    @abstractmethod
    def exists(self, key: str) -> bool:
        """True if a live object occupies key."""

    @abstractmethod
    def list_by_prefix(self, prefix: str) -> List[str]:
        """All keys starting with prefix, ascending lexicographic order."""

    @abstractmethod
    def enable_versioning(self) -> None:
        """Turn on multi-version retention for the backing bucket."""

    def put_versioned(self, key: str, data: bytes) -> None:
        """Enable versioning, then write. Every store write goes through here."""
        self.enable_versioning()
        self.put(key, data)

    def list_names(self, folder: Optional[str] = None) -> List[str]:
        """
        Object names directly under folder (no nested "sub/dirs"), in listing order.

        Names are relative to the folder. Directory markers are skipped.
        """
        prefix = join_folder(folder, "")
        names = []
        for key in self.list_by_prefix(prefix):
            name = key[len(prefix):]
            if not name or name.endswith("/") or "/" in name:
                continue
            names.append(name)
        return names

    def ping(self) -> bool:
        """Cheap availability check."""
        self.list_by_prefix("")
        return True


class S3ObjectStoreClient(ObjectStoreClient):
    """
    S3 implementation of ObjectStoreClient.

    Usage:
        client = S3ObjectStoreClient.from_config(config)
        client.put("docs/a.pdf", b"...")
    """

    def __init__(self, bucket_name: str, s3_client: Any):
        self._bucket = bucket_name
        self._s3 = s3_client

    @classmethod
    def from_config(
        cls,
        config,
        credential_manager: Optional[CredentialManager] = None,
    ) -> "S3ObjectStoreClient":
        """
        Build a client from a StoreConfig.

        Raises:
            StoreConfigError: connection settings incomplete (fatal at startup).
            StoreUnavailableError: boto3 could not build the client.
        """
        config.validate_connection()
        secret = resolve_secret_access_key(config, credential_manager)

        boto_config = BotoConfig(
            signature_version="s3v4",
            connect_timeout=config.connect_timeout,
            read_timeout=config.read_timeout,
            retries={"max_attempts": config.max_attempts, "mode": "standard"},
        )
        try:
            s3 = boto3.client(
                "s3",
                region_name=config.region_name,
                endpoint_url=config.endpoint_url,
                aws_access_key_id=config.access_key_id,
                aws_secret_access_key=secret,
                config=boto_config,
            )
        except (BotoCoreError, ValueError) as e:
            raise StoreUnavailableError(
                f"Error creating S3 client: {e}",
                bucket=config.bucket_name,
                operation="create_client",
            )

        if config.has_folder:
            logger.info(
                f"Initializing S3 store with bucket: {config.bucket_name}, "
                f"folder: {config.folder_name} region: {config.region_name}"
            )
        else:
            logger.info(f"Initializing S3 store with bucket: {config.bucket_name}, region: {config.region_name}")
        return cls(config.bucket_name, s3)

    @property
    def bucket_name(self) -> str:
        return self._bucket

    # -------------------------------------------------------------------
    # Error mapping
    # -------------------------------------------------------------------

    def _classify_error(self, error: Exception, key: str, operation: str) -> Exception:
        if isinstance(error, ClientError):
            code = str(error.response.get("Error", {}).get("Code", ""))
            if code in _NOT_FOUND_CODES:
                return NotFoundError(
                    f"{key} could not be found in bucket {self._bucket}",
                    key=key,
                    operation=operation,
                )
            return StoreUnavailableError(
                f"S3 {operation} failed for {key}: {code or error}",
                key=key,
                bucket=self._bucket,
                error_code=code,
                operation=operation,
            )
        return StoreUnavailableError(
            f"S3 {operation} failed for {key}: {error}",
            key=key,
            bucket=self._bucket,
            operation=operation,
        )

    # -------------------------------------------------------------------
    # Capability
    # -------------------------------------------------------------------

    def put(self, key: str, data: bytes) -> None:
        try:
            self._s3.put_object(Bucket=self._bucket, Key=key, Body=data, ContentLength=len(data))
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error saving {key} to S3: {e}")
            raise self._classify_error(e, key, "put")
        logger.info(f"{key} saved to S3")

    def get(self, key: str) -> bytes:
        logger.debug(f"Retrieving {key} from S3")
        try:
            response = self._s3.get_object(Bucket=self._bucket, Key=key)
            body = response["Body"]
            try:
                return body.read()
            finally:
                body.close()
        except (ClientError, BotoCoreError) as e:
            raise self._classify_error(e, key, "get")

    def delete(self, key: str) -> None:
        try:
            self._s3.delete_object(Bucket=self._bucket, Key=key)
        except (ClientError, BotoCoreError) as e:
            raise self._classify_error(e, key, "delete")
        logger.info(f"Deleted {key} from S3")

    def exists(self, key: str) -> bool:
        try:
            self._s3.head_object(Bucket=self._bucket, Key=key)
            return True
        except (ClientError, BotoCoreError) as e:
            classified = self._classify_error(e, key, "exists")
            if isinstance(classified, NotFoundError):
                return False
            raise classified

    def list_by_prefix(self, prefix: str) -> List[str]:
        keys: List[str] = []
        try:
            paginator = self._s3.get_paginator("list_objects_v2")
            for page in paginator.paginate(Bucket=self._bucket, Prefix=prefix):
                for obj in page.get("Contents", []):
                    keys.append(obj["Key"])
        except (ClientError, BotoCoreError) as e:
            raise self._classify_error(e, prefix, "list")
        keys.sort()
        return keys

    def enable_versioning(self) -> None:
        try:
            self._s3.put_bucket_versioning(
                Bucket=self._bucket,
                VersioningConfiguration={"Status": "Enabled"},
            )
        except (ClientError, BotoCoreError) as e:
            raise self._classify_error(e, self._bucket, "enable_versioning")

    def ping(self) -> bool:
        try:
            self._s3.head_bucket(Bucket=self._bucket)
        except (ClientError, BotoCoreError) as e:
            raise self._classify_error(e, self._bucket, "ping")
        return True

    def __repr__(self) -> str:
        return f"<S3ObjectStoreClient bucket='{self._bucket}'>"
