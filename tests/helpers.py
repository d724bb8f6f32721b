"""
Shared test helpers — config factory, boto3 error and paginator doubles,
TIFF samples. Imported by test modules and tests/conftest.py.
"""

from __future__ import annotations

import struct
from typing import Any, Dict, List
from unittest.mock import MagicMock

from contentstore.engine.config import StoreConfig


# ---------------------------------------------------------------------------
# Configs
# ---------------------------------------------------------------------------

CONNECTION = {
    "bucket_name": "test-bucket",
    "region_name": "us-east-1",
    "access_key_id": "AKIATEST",
    "secret_access_key": "secret",
}


def make_config(**overrides: Any) -> StoreConfig:
    data: Dict[str, Any] = dict(CONNECTION)
    data.update(overrides)
    return StoreConfig(**data)


# ---------------------------------------------------------------------------
# boto3
# ---------------------------------------------------------------------------

def client_error(code: str, operation: str = "HeadObject"):
    """Build a botocore ClientError with the given error code."""
    from botocore.exceptions import ClientError

    return ClientError({"Error": {"Code": code, "Message": code}}, operation)


def paginated(pages: List[List[str]]):
    """Paginator mock yielding list_objects_v2 pages of the given keys."""
    paginator = MagicMock()
    paginator.paginate.return_value = [
        {"Contents": [{"Key": key} for key in page]} if page else {} for page in pages
    ]
    return paginator


# ---------------------------------------------------------------------------
# TIFF samples
# ---------------------------------------------------------------------------

WANG_TAG = 32932

# 1x1 bilevel, uncompressed, one strip
_PAGE_SHORTS = ((256, 1), (257, 1), (258, 1), (259, 1), (262, 1))


def build_tiff(annotated_pages: List[bool], byte_order: str = "II") -> bytes:
    """
    Build a multi-page 1x1 bilevel TIFF. Pages flagged True carry a Wang
    annotation tag (4 bytes, UNDEFINED).
    """
    fmt = "<" if byte_order == "II" else ">"
    out = bytearray(byte_order.encode("ascii") + struct.pack(fmt + "HI", 42, 0))
    next_pointer = 4
    for annotated in annotated_pages:
        strip_offset = len(out)
        out += b"\x00\x00"
        struct.pack_into(fmt + "I", out, next_pointer, len(out))

        entries = [struct.pack(fmt + "HHIH2x", tag, 3, 1, value) for tag, value in _PAGE_SHORTS]
        entries.append(struct.pack(fmt + "HHII", 273, 4, 1, strip_offset))
        entries.append(struct.pack(fmt + "HHIH2x", 277, 3, 1, 1))
        entries.append(struct.pack(fmt + "HHIH2x", 278, 3, 1, 1))
        entries.append(struct.pack(fmt + "HHII", 279, 4, 1, 1))
        if annotated:
            entries.append(struct.pack(fmt + "HHI4s", WANG_TAG, 7, 4, b"WANG"))

        out += struct.pack(fmt + "H", len(entries))
        for entry in entries:
            out += entry
        next_pointer = len(out)
        out += struct.pack(fmt + "I", 0)
    return bytes(out)
