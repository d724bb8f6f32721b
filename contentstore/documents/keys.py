"""
ContentStore Key Codec — Document id classification, sanitizing and storage key derivation.

Storage layout:
    <folder/>?<basename>                          primary content
    <folder/>?<basename>.<layerId>[-page<N>].ann  annotation layers
    <folder/>?<basename>.bookmarks.xml            bookmarks
    <folder/>?<basename>.notes.xml                notes
    <folder/>?<basename>.watermarks.json          watermarks
    <folder/>?<basename>.ocr-text.json            OCR text

Only the final path segment of an untrusted document id is ever used to
build a key. Unparseable ids raise InvalidIdentifierError.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import PurePath
from typing import Optional, Tuple

from contentstore.engine.errors import InvalidIdentifierError
from contentstore.storage.client import join_folder

PAGE_MARKER = "-page"


class DocumentMode(str, Enum):
    """Assembly mode selected by a document id prefix."""
    PLAIN = "plain"
    SPARSE = "sparse"
    COMPOUND = "compound"
    VIRTUAL = "virtual"
    EXTERNAL_REF = "external_ref"


PREFIXES = {
    DocumentMode.SPARSE: "SparseDocument:",
    DocumentMode.COMPOUND: "CompoundDocument:",
    DocumentMode.VIRTUAL: "VirtualDocument:",
    DocumentMode.EXTERNAL_REF: "IncludesExternalReferences:",
}

# Longest first so the longest matching prefix wins
_PREFIXES_BY_LENGTH = sorted(PREFIXES.items(), key=lambda item: len(item[1]), reverse=True)


class ArtifactKind(str, Enum):
    """Secondary per-document artifacts and their fixed key suffixes."""
    ANNOTATION = "annotation"
    BOOKMARK = "bookmark"
    NOTE = "note"
    WATERMARK = "watermark"
    OCR_TEXT = "ocr_text"

    @property
    def suffix(self) -> str:
        return _SUFFIXES[self]


_SUFFIXES = {
    ArtifactKind.ANNOTATION: ".ann",
    ArtifactKind.BOOKMARK: ".bookmarks.xml",
    ArtifactKind.NOTE: ".notes.xml",
    ArtifactKind.WATERMARK: ".watermarks.json",
    ArtifactKind.OCR_TEXT: ".ocr-text.json",
}


@dataclass(frozen=True)
class ParsedKey:
    """A storage key split back into its parts."""
    folder: str
    basename: str
    kind: Optional[ArtifactKind] = None
    discriminator: Optional[str] = None


# ---------------------------------------------------------------------------
# Classification & sanitizing
# ---------------------------------------------------------------------------

def classify(document_id: str) -> Tuple[DocumentMode, str]:
    """
    Split a document id into its assembly mode and the residual id.

    >>> classify("SparseDocument:foo")
    (<DocumentMode.SPARSE: 'sparse'>, 'foo')
    """
    for mode, prefix in _PREFIXES_BY_LENGTH:
        if document_id.startswith(prefix):
            return mode, document_id[len(prefix):]
    return DocumentMode.PLAIN, document_id


def _has_control_chars(value: str) -> bool:
    return any(ord(c) < 32 or ord(c) == 127 for c in value)


def sanitize_basename(residual_id: str) -> str:
    """
    Return the final path segment of residual_id.

    Raises:
        InvalidIdentifierError: NUL/control characters, or nothing usable
            left after stripping directories ("", ".", "..").
    """
    if residual_id is None or _has_control_chars(residual_id):
        raise InvalidIdentifierError(
            "The provided document key is invalid",
            identifier=residual_id,
            operation="sanitize",
        )
    name = PurePath(residual_id).name
    if name in ("", ".", ".."):
        raise InvalidIdentifierError(
            "The provided document key is invalid and may have contained a relative path name",
            identifier=residual_id,
            operation="sanitize",
        )
    return name


def sanitize_document_id(document_id: str) -> str:
    """
    Sanitize the path part of a document id and keep its prefix.

    >>> sanitize_document_id("SparseDocument:a/b")
    'SparseDocument:b'
    """
    mode, residual = classify(document_id)
    basename = sanitize_basename(residual)
    if mode is DocumentMode.PLAIN:
        return basename
    return PREFIXES[mode] + basename


# ---------------------------------------------------------------------------
# Key derivation
# ---------------------------------------------------------------------------

def annotation_discriminator(layer_id: str, page_index: Optional[int] = None) -> str:
    """Layer id, page-scoped as "<layer>-page<N>" only when page_index is given."""
    if page_index is None or page_index < 0:
        return layer_id
    return f"{layer_id}{PAGE_MARKER}{page_index}"


def collapse_layer_id(annotation_id: str) -> str:
    """Drop the page scope: "sig-page3" -> "sig"."""
    marker = annotation_id.find(PAGE_MARKER)
    if marker == -1:
        return annotation_id
    return annotation_id[:marker]


def _check_discriminator(discriminator: str) -> None:
    if not discriminator or "/" in discriminator or "\\" in discriminator or _has_control_chars(discriminator):
        raise InvalidIdentifierError(
            "The provided artifact id is invalid",
            identifier=discriminator,
            operation="derive_key",
        )


def derive_key(
    folder: Optional[str],
    basename: str,
    kind: Optional[ArtifactKind] = None,
    discriminator: Optional[str] = None,
) -> str:
    """
    Build the storage key for a document or one of its artifacts.

    >>> derive_key("docs/", "x.pdf", ArtifactKind.ANNOTATION, "sig")
    'docs/x.pdf.sig.ann'
    """
    if not basename:
        raise InvalidIdentifierError("Document name is required", operation="derive_key")
    if kind is ArtifactKind.ANNOTATION and not discriminator:
        raise InvalidIdentifierError(
            "Annotation layer id is required",
            identifier=basename,
            operation="derive_key",
        )

    name = basename
    if discriminator:
        _check_discriminator(discriminator)
        name = f"{name}.{discriminator}"
    if kind is not None:
        name += kind.suffix
    return join_folder(folder, name)


def parse_key(key: str, basename: Optional[str] = None) -> ParsedKey:
    """
    Split a key produced by derive_key() back into its parts.

    With a known basename the discriminator is recovered exactly. Without one,
    the last dotted segment before ".ann" is taken as the layer id.
    """
    folder, _, name = key.rpartition("/")
    if basename is not None and name == basename:
        return ParsedKey(folder=folder, basename=name)

    kind: Optional[ArtifactKind] = None
    for candidate in ArtifactKind:
        if candidate is ArtifactKind.ANNOTATION:
            continue
        if name.endswith(candidate.suffix) and name != candidate.suffix:
            kind = candidate
            break
    if kind is None and name.endswith(ArtifactKind.ANNOTATION.suffix):
        kind = ArtifactKind.ANNOTATION

    if kind is None:
        return ParsedKey(folder=folder, basename=name)

    stem = name[: -len(kind.suffix)]
    if basename is not None and stem.startswith(basename + "."):
        return ParsedKey(folder, basename, kind, stem[len(basename) + 1:] or None)
    if basename is not None and stem == basename:
        return ParsedKey(folder, basename, kind)
    if kind is ArtifactKind.ANNOTATION:
        base, _, discriminator = stem.rpartition(".")
        return ParsedKey(folder, base, kind, discriminator or None)
    return ParsedKey(folder, stem, kind)


def annotation_id_from_name(name: str, basename: str) -> Optional[str]:
    """
    Layer id for an object name "<basename>.<id>.ann", or None if the name
    belongs to another document or is the primary object itself.
    """
    suffix = ArtifactKind.ANNOTATION.suffix
    prefix = basename + "."
    if name == basename or not name.startswith(prefix) or not name.endswith(suffix):
        return None
    annotation_id = name[len(prefix): -len(suffix)]
    return annotation_id or None
