"""Unit tests for contentstore.documents.service — DocumentStore."""

import pytest

from contentstore.documents.service import DocumentStore, has_known_extension
from contentstore.engine.errors import (
    AlreadyExistsError,
    DocumentNotFoundError,
    InvalidIdentifierError,
    ReadOnlyError,
)
from contentstore.engine.logging import FileLogger
from contentstore.storage.memory import MemoryObjectStoreClient

from helpers import make_config


class TestKnownExtensions:

    @pytest.mark.parametrize("name", ["a.pdf", "A.PDF", "scan.TIF", "notes.txt", "x.jb2"])
    def test_known(self, name):
        assert has_known_extension(name)

    @pytest.mark.parametrize("name", ["a.pdf.sig.ann", "a.pdf.notes.xml", "a.pdf.watermarks.json", "pdf"])
    def test_unknown(self, name):
        assert not has_known_extension(name)


class TestDocumentStoreRead:

    def setup_method(self):
        self.client = MemoryObjectStoreClient({"docs/a.pdf": b"A", "docs/empty.txt": b""})
        self.store = DocumentStore(self.client, make_config(folder_name="docs/"))

    def test_get(self):
        assert self.store.get("a.pdf") == b"A"

    def test_get_uses_final_segment(self):
        assert self.store.get("../../secret/a.pdf") == b"A"

    def test_get_empty_object(self):
        assert self.store.get("empty.txt") == b""

    def test_get_missing(self):
        with pytest.raises(DocumentNotFoundError) as exc_info:
            self.store.get("nope.pdf")
        assert exc_info.value.key == "docs/nope.pdf"
        assert self.client.calls["get"] == 0

    def test_invalid_id(self):
        with pytest.raises(InvalidIdentifierError):
            self.store.get("..")

    def test_list_document_ids(self):
        self.client.put("docs/a.pdf.sig.ann", b"")
        self.client.put("docs/a.pdf.notes.xml", b"")
        self.client.put("docs/sub/b.pdf", b"")
        assert self.store.list_document_ids() == ["a.pdf", "empty.txt"]


class TestDocumentStoreWrite:

    def setup_method(self):
        self.client = MemoryObjectStoreClient()
        self.store = DocumentStore(self.client, make_config(folder_name="docs"))

    def test_create(self):
        assert self.store.create("in/q1.pdf", b"Q") == "docs/q1.pdf"
        assert self.client.get("docs/q1.pdf") == b"Q"
        assert self.client.versioning_enabled

    def test_create_twice(self):
        self.store.create("q1.pdf", b"Q")
        with pytest.raises(AlreadyExistsError):
            self.store.create("q1.pdf", b"Q2")
        assert self.client.versions("docs/q1.pdf") == [b"Q"]

    def test_email_attachment_id(self):
        key = self.store.create("invoice.pdf", b"I", is_email_attachment=True, parent_document_id="mail/m1.eml")
        assert key == "docs/Attachment - m1.eml-invoice.pdf"

    def test_email_attachment_reopen(self):
        first = self.store.create("invoice.pdf", b"I", True, "m1.eml")
        second = self.store.create("invoice.pdf", b"other", True, "m1.eml")
        assert first == second
        assert self.client.get(first) == b"I"

    def test_save_overwrites_with_versions(self):
        self.store.save("q1.pdf", b"1")
        self.store.save("q1.pdf", b"2")
        assert self.store.get("q1.pdf") == b"2"
        assert self.client.versions("docs/q1.pdf") == [b"1", b"2"]

    @pytest.mark.parametrize("document_id", ["SparseDocument:scans", "CompoundDocument:a.pdf,b.pdf"])
    def test_views_not_writable(self, document_id):
        with pytest.raises(InvalidIdentifierError):
            self.store.save(document_id, b"x")
        assert self.client.calls["put"] == 0

    def test_operation_log(self, tmp_path):
        fl = FileLogger(str(tmp_path))
        store = DocumentStore(self.client, make_config(), fl)
        store.save("q1.pdf", b"12345")
        entry = fl.query("documents")[0]
        assert entry["event"] == "save"
        assert entry["size_bytes"] == 5


class TestDocumentStoreReadOnly:

    def setup_method(self):
        self.client = MemoryObjectStoreClient()
        self.store = DocumentStore(self.client, make_config(read_only=True))

    @pytest.mark.parametrize("document_id", ["q1.pdf", "..", "a\x00b", "SparseDocument:x"])
    def test_save_refused_before_store_access(self, document_id):
        with pytest.raises(ReadOnlyError):
            self.store.save(document_id, b"x")
        assert self.client.total_calls == 0

    def test_create_refused(self):
        with pytest.raises(ReadOnlyError):
            self.store.create("q1.pdf", b"x", is_email_attachment=True)
        assert self.client.total_calls == 0

    def test_rejection_logged(self, tmp_path):
        fl = FileLogger(str(tmp_path))
        store = DocumentStore(self.client, make_config(read_only=True), fl)
        with pytest.raises(ReadOnlyError):
            store.save("q1.pdf", b"x")
        assert fl.query("security")[0]["operation"] == "save"

    def test_reads_still_work(self):
        self.client.put("q1.pdf", b"Q")
        assert self.store.get("q1.pdf") == b"Q"
