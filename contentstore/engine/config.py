"""
ContentStore Configuration — Load and validate contentstore.yaml at startup.

The resolved StoreConfig is immutable and handed to every component at
construction. Nothing reads configuration from module globals per call.

Usage:
    from contentstore.engine.config import load_store_config
    config = load_store_config()
    config.validate_connection()
"""

from __future__ import annotations

import os
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from contentstore.engine.errors import StoreConfigError

CONFIG_FILE_NAME = "contentstore.yaml"
ENV_PREFIX = "CONTENTSTORE_"

# Legacy host init-parameter names -> StoreConfig field names
INIT_PARAM_NAMES = {
    "s3BucketName": "bucket_name",
    "s3FolderName": "folder_name",
    "s3RegionName": "region_name",
    "AwsAccessKeyId": "access_key_id",
    "AwsSecretAccessKey": "secret_access_key",
    "tiffTagAnnotations": "tiff_tag_annotations",
    "contentHandlerDebugMode": "debug",
    "fileContentHandlerReadOnlyMode": "read_only",
}

_BOOLEAN_FIELDS = ("read_only", "debug", "tiff_tag_annotations")


class CompoundResolution(str, Enum):
    """How compound document components map to storage keys."""
    ALIAS = "alias"          # every component reads the compound id's own key
    COMPONENT = "component"  # every component reads its own key


class LoggingConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    level: str = "INFO"
    directory: str = ".contentstore/logs"
    operation_log: bool = False

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        v = v.upper()
        if v not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"logging level must be DEBUG/INFO/WARNING/ERROR/CRITICAL, got '{v}'")
        return v


class StoreConfig(BaseModel):
    """Root model for contentstore.yaml."""
    model_config = ConfigDict(frozen=True)

    bucket_name: Optional[str] = None
    region_name: Optional[str] = None
    folder_name: str = ""
    access_key_id: Optional[str] = None
    secret_access_key: Optional[str] = Field(default=None, repr=False)
    secret_access_key_encrypted: Optional[str] = Field(default=None, repr=False)
    endpoint_url: Optional[str] = None

    read_only: bool = False
    debug: bool = False
    tiff_tag_annotations: bool = False
    compound_resolution: CompoundResolution = CompoundResolution.ALIAS

    connect_timeout: int = 10
    read_timeout: int = 60
    max_attempts: int = 3

    logging: LoggingConfig = LoggingConfig()

    @field_validator("folder_name", mode="before")
    @classmethod
    def normalize_folder(cls, v: Any) -> str:
        return v or ""

    @classmethod
    def from_init_params(cls, params: Mapping[str, Any]) -> "StoreConfig":
        """
        Build a config from the legacy host init parameters
        (s3BucketName, AwsAccessKeyId, fileContentHandlerReadOnlyMode, ...).

        Boolean switches are on only for a case-insensitive "true".
        Unknown parameter names are ignored.
        """
        data: Dict[str, Any] = {}
        for param_name, field_name in INIT_PARAM_NAMES.items():
            if param_name not in params:
                continue
            value = params[param_name]
            if field_name in _BOOLEAN_FIELDS:
                value = _parse_switch(value)
            data[field_name] = value
        return cls(**data)

    def missing_connection_settings(self) -> List[str]:
        """Names of required connection settings that are None or empty."""
        missing = []
        for name in ("bucket_name", "region_name", "access_key_id"):
            value = getattr(self, name)
            if value is None or not value.strip():
                missing.append(name)
        if not (self.secret_access_key or self.secret_access_key_encrypted):
            missing.append("secret_access_key")
        return missing

    def validate_connection(self) -> "StoreConfig":
        """
        Fail fast on incomplete connection settings.

        Raises:
            StoreConfigError: bucket, region or a credential is None or empty.
        """
        missing = self.missing_connection_settings()
        if missing:
            raise StoreConfigError(
                f"Object store configuration incomplete, missing: {', '.join(missing)}",
                missing=missing,
                operation="validate_connection",
            )
        return self

    @property
    def has_folder(self) -> bool:
        return bool(self.folder_name)


# ---------------------------------------------------------------------------
# Config Loading Functions
# ---------------------------------------------------------------------------

def _parse_switch(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return isinstance(value, str) and value.strip().lower() == "true"


def _find_config_file() -> Optional[Path]:
    """Find contentstore.yaml by walking up from CWD."""
    current = Path.cwd()
    for parent in [current, *current.parents]:
        candidate = parent / CONFIG_FILE_NAME
        if candidate.exists():
            return candidate
    return None


def _env_overrides(environ: Mapping[str, str]) -> Dict[str, Any]:
    """Collect CONTENTSTORE_<FIELD> overrides for top-level fields."""
    overrides: Dict[str, Any] = {}
    for field_name in StoreConfig.model_fields:
        if field_name == "logging":
            continue
        env_name = ENV_PREFIX + field_name.upper()
        if env_name in environ:
            value: Any = environ[env_name]
            if field_name in _BOOLEAN_FIELDS:
                value = _parse_switch(value)
            overrides[field_name] = value
    return overrides


def load_store_config(
    config_path: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> StoreConfig:
    """
    Load contentstore.yaml and apply environment overrides.

    Args:
        config_path: Explicit path. If None, auto-discovers from CWD upward.
        environ: Environment mapping (defaults to os.environ).

    Returns:
        Validated, immutable StoreConfig. Connection settings are not
        checked here; call validate_connection() before building a client.
    """
    if environ is None:
        environ = os.environ

    path = Path(config_path) if config_path else _find_config_file()

    raw: Dict[str, Any] = {}
    if path is not None and path.exists():
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    elif config_path:
        raise FileNotFoundError(f"Config file not found: {config_path}")

    # Accept either a top-level "store:" section or flat keys
    data = dict(raw.get("store", raw))
    if "logging" in raw and "logging" not in data:
        data["logging"] = raw["logging"]
    data.update(_env_overrides(environ))

    return StoreConfig(**data)
