"""
ContentStore CLI — Configuration checks and manual store operations.

Commands:
- contentstore validate        — Load and validate contentstore.yaml
- contentstore ls              — List available document ids
- contentstore get <id>        — Download a document (stdout or -o FILE)
- contentstore put <id> FILE   — Upload a document (--create: fail if it exists)
- contentstore annotations <id> — List annotation layers of a document
- contentstore sparse <id>     — Fetch a sparse document page window
- contentstore encrypt-secret  — Encrypt the secret access key for contentstore.yaml
"""

from __future__ import annotations

import argparse
import getpass
import logging
import sys
from pathlib import Path
from typing import Optional

from contentstore.documents.models import ContentRequest
from contentstore.engine.config import load_store_config
from contentstore.engine.credentials import CredentialManager
from contentstore.engine.errors import ContentStoreError
from contentstore.engine.runtime import ContentStoreRuntime

logger = logging.getLogger("contentstore.cli")


def main(argv: Optional[list] = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="contentstore",
        description="ContentStore — document content on S3",
    )
    parser.add_argument("--config", help="Path to contentstore.yaml (default: discovered from CWD)")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # contentstore validate
    subparsers.add_parser("validate", help="Validate store configuration")

    # contentstore ls
    subparsers.add_parser("ls", help="List available document ids")

    # contentstore get
    get_parser = subparsers.add_parser("get", help="Download a document")
    get_parser.add_argument("document_id", help="Document id (e.g., report.pdf)")
    get_parser.add_argument("--output", "-o", help="Write to FILE instead of stdout")

    # contentstore put
    put_parser = subparsers.add_parser("put", help="Upload a document")
    put_parser.add_argument("document_id", help="Document id (e.g., report.pdf)")
    put_parser.add_argument("file", help="Local file to upload")
    put_parser.add_argument(
        "--create", action="store_true", help="Fail if the document already exists (default: overwrite)"
    )

    # contentstore annotations
    ann_parser = subparsers.add_parser("annotations", help="List annotation layers")
    ann_parser.add_argument("document_id", help="Document id")

    # contentstore sparse
    sparse_parser = subparsers.add_parser("sparse", help="Fetch a sparse document window")
    sparse_parser.add_argument("document_id", help="Sparse id (e.g., SparseDocument:scans)")
    sparse_parser.add_argument("--start", type=int, default=0, help="First page index (default: 0)")
    sparse_parser.add_argument("--count", type=int, default=0, help="Page count, 0 = to the end (default: 0)")

    # contentstore encrypt-secret
    enc_parser = subparsers.add_parser("encrypt-secret", help="Encrypt the secret access key")
    enc_parser.add_argument("--secret", help="Secret access key (prompted if not provided)")
    enc_parser.add_argument("--key", help="Encryption key (default: CONTENTSTORE_SECRET_KEY)")

    args = parser.parse_args(argv)

    if args.command == "validate":
        return cmd_validate(args)
    elif args.command == "ls":
        return cmd_ls(args)
    elif args.command == "get":
        return cmd_get(args)
    elif args.command == "put":
        return cmd_put(args)
    elif args.command == "annotations":
        return cmd_annotations(args)
    elif args.command == "sparse":
        return cmd_sparse(args)
    elif args.command == "encrypt-secret":
        return cmd_encrypt_secret(args)
    else:
        parser.print_help()
        return 0


def _build_runtime(args: argparse.Namespace) -> ContentStoreRuntime:
    config = load_store_config(args.config)
    return ContentStoreRuntime(config).startup()


def _open_runtime(args: argparse.Namespace) -> Optional[ContentStoreRuntime]:
    try:
        return _build_runtime(args)
    except FileNotFoundError as e:
        print(f"[ERROR] {e}")
        return None
    except ContentStoreError as e:
        print(f"[ERROR] {e.message}")
        return None


def cmd_validate(args: argparse.Namespace) -> int:
    """Load the config and check connection settings."""
    try:
        config = load_store_config(args.config)
    except FileNotFoundError as e:
        print(f"[ERROR] {e}")
        return 1
    except ValueError as e:
        print(f"[ERROR] Invalid configuration: {e}")
        return 1

    missing = config.missing_connection_settings()
    if missing:
        for name in missing:
            print(f"[ERROR] Missing setting: {name}")
        return 1

    print(f"[OK] Bucket: {config.bucket_name} ({config.region_name})")
    print(f"[OK] Folder: {config.folder_name or '(bucket root)'}")
    if config.read_only:
        print("[INFO] Read-only mode is on")
    if config.debug:
        print("[INFO] Debug mode is on")
    print(f"[INFO] Compound resolution: {config.compound_resolution.value}")
    return 0


def cmd_ls(args: argparse.Namespace) -> int:
    runtime = _open_runtime(args)
    if runtime is None:
        return 1
    try:
        result = runtime.handler.get_available_document_ids()
    except ContentStoreError as e:
        print(f"[ERROR] {e.message}")
        return 1
    for document_id in result.available_document_ids or []:
        print(document_id)
    return 0


def cmd_get(args: argparse.Namespace) -> int:
    runtime = _open_runtime(args)
    if runtime is None:
        return 1
    try:
        data = runtime.documents.get(args.document_id)
    except ContentStoreError as e:
        print(f"[ERROR] {e.message}")
        return 1

    if args.output:
        Path(args.output).write_bytes(data)
        print(f"[OK] Wrote {len(data)} bytes to {args.output}")
    else:
        sys.stdout.buffer.write(data)
        sys.stdout.flush()
    return 0


def cmd_put(args: argparse.Namespace) -> int:
    path = Path(args.file)
    if not path.is_file():
        print(f"[ERROR] File not found: {args.file}")
        return 1

    runtime = _open_runtime(args)
    if runtime is None:
        return 1
    data = path.read_bytes()
    try:
        if args.create:
            key = runtime.documents.create(args.document_id, data)
        else:
            key = runtime.documents.save(args.document_id, data)
    except ContentStoreError as e:
        print(f"[ERROR] {e.message}")
        return 1
    print(f"[OK] Stored {len(data)} bytes at {key}")
    return 0


def cmd_annotations(args: argparse.Namespace) -> int:
    runtime = _open_runtime(args)
    if runtime is None:
        return 1
    try:
        result = runtime.handler.get_annotation_names(ContentRequest(document_id=args.document_id))
    except ContentStoreError as e:
        print(f"[ERROR] {e.message}")
        return 1
    names = result.annotation_names or []
    if not names:
        print(f"[INFO] No annotation layers for {args.document_id}")
    for name in names:
        print(name)
    return 0


def cmd_sparse(args: argparse.Namespace) -> int:
    runtime = _open_runtime(args)
    if runtime is None:
        return 1
    request = ContentRequest(
        document_id=args.document_id,
        sparse_page_number=args.start,
        sparse_page_count=args.count,
    )
    try:
        result = runtime.handler.get_document_content(request)
    except ContentStoreError as e:
        print(f"[ERROR] {e.message}")
        return 1

    print(f"[OK] {result.document_display_name}: page {result.sparse_page_index}, "
          f"{result.sparse_return_page_count} page(s) returned")
    for i, element in enumerate(result.sparse_elements or []):
        print(f"  [{i}] {len(element)} bytes")
    for failure in result.failures:
        print(f"  [SKIP] {failure.key}: {failure.error_type}")
    return 0


def cmd_encrypt_secret(args: argparse.Namespace) -> int:
    """Print a Fernet token for secret_access_key_encrypted."""
    secret = args.secret
    if not secret:
        secret = getpass.getpass("Secret access key: ")
    if not secret:
        print("[ERROR] Secret must not be empty")
        return 1
    manager = CredentialManager(secret_key=args.key)
    print(manager.encrypt_secret(secret))
    return 0


if __name__ == "__main__":
    sys.exit(main())
